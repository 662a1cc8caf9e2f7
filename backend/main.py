# backend/main.py
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import settings
from database import init_db

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Router imports
from routes.auth import router as auth_router
from routes.admin import router as admin_router
from routes.logs import router as logs_router
from routes.business import router as business_router
from routes.products import router as products_router
from routes.tax import router as tax_router
from routes.suppliers import router as suppliers_router
from routes.purchases import router as purchases_router
from routes.customers import router as customers_router
from routes.stock import router as inventory_router
from routes.cart import router as pos_router
from routes.sales import router as sales_router
from routes.offers import router as offers_router
from routes.repacking import router as repacking_router
from routes.labels import router as labels_router
from routes.payroll import router as payroll_router
from routes.stats import router as dashboard_router
from routes.reports import router as reports_router

# Initialization
init_db()

app = FastAPI(title="ShopPOS API", version="1.0.0")

# CORS Configuration
origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]
if settings.FRONTEND_URL and settings.FRONTEND_URL not in origins:
    origins.append(settings.FRONTEND_URL)

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Every error body carries "message" for the client toast
@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": message, "detail": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    message = f"{field}: {first.get('msg')}" if field else first.get("msg", "Validation error")
    # ctx may hold the raw exception object
    detail = [{k: v for k, v in e.items() if k != "ctx"} for e in errors]
    return JSONResponse(status_code=422, content={"message": message, "detail": detail})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"message": "Internal server error", "detail": None})


# Router registration
API_PREFIX = "/api"
for router in (
    auth_router,
    admin_router,
    logs_router,
    business_router,
    products_router,
    tax_router,
    suppliers_router,
    purchases_router,
    customers_router,
    inventory_router,
    pos_router,
    sales_router,
    offers_router,
    repacking_router,
    labels_router,
    payroll_router,
    dashboard_router,
    reports_router,
):
    app.include_router(router, prefix=API_PREFIX)


@app.get("/")
def read_root():
    return {"message": "ShopPOS API is running"}


@app.get("/api/health")
def health():
    return {"status": "ok"}
