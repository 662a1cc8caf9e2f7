# backend/routes/stock.py
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy import or_
from sqlalchemy.orm import Session
from typing import Optional

from database import get_db
from models.stock import InventoryAdjustment, AdjustmentType
from models.product import Product
from models.users import User
from utils.tokenJWT import get_current_user, manager_or_admin
from utils.audit import write_log, client_ip
from utils.inventory import apply_stock_change
from utils.pos import InsufficientStockError, money
from routes.logs import parse_date_bound
import schemas.stock as stock_schemas

router = APIRouter(prefix="/inventory", tags=["Inventory"])


def adjustment_to_out(entry: InventoryAdjustment) -> dict:
    data = stock_schemas.AdjustmentOut.model_validate(entry).model_dump()
    data["product_name"] = entry.product.name if entry.product else None
    data["sku"] = entry.product.sku if entry.product else None
    data["user_email"] = entry.user.email if entry.user else None
    return data


@router.post("/adjustments", response_model=stock_schemas.AdjustmentOut, status_code=201)
def create_adjustment(
    payload: stock_schemas.AdjustmentCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(manager_or_admin),
):
    product = db.query(Product).filter(Product.id == payload.product_id).first()
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")

    current = product.stock_quantity or 0
    kind = payload.adjustment_type
    # Signed change for each manual type
    if kind == AdjustmentType.ADD.value:
        delta = payload.quantity
    elif kind == AdjustmentType.REMOVE.value:
        delta = -payload.quantity
    elif kind == AdjustmentType.CORRECTION.value:
        delta = payload.quantity - current
    else:
        delta = 0

    details = payload.model_dump(exclude={"product_id", "adjustment_type", "quantity"})
    if kind == AdjustmentType.TRANSFER.value and not details.get("location_from"):
        details["location_from"] = product.location

    try:
        entry = apply_stock_change(db, product, delta, kind, user_id=current_user.id, **details)
    except InsufficientStockError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))

    if kind == AdjustmentType.TRANSFER.value:
        product.location = payload.location_to
    if payload.unit_cost is not None and kind == AdjustmentType.ADD.value:
        product.cost = payload.unit_cost

    db.commit()
    db.refresh(entry)
    write_log(
        db,
        user_id=current_user.id,
        action="STOCK_ADJUSTMENT",
        resource="inventory",
        status="SUCCESS",
        ip=client_ip(request),
        meta={"id": entry.id, "product_id": product.id, "type": kind, "change": delta},
    )
    return adjustment_to_out(entry)


@router.get("/adjustments", response_model=stock_schemas.AdjustmentPage)
def list_adjustments(
    product_id: Optional[int] = None,
    adjustment_type: Optional[AdjustmentType] = None,
    date_from: Optional[str] = Query(None, description="YYYY-MM-DD"),
    date_to: Optional[str] = Query(None, description="YYYY-MM-DD"),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=200),
    order: str = "desc",
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    query = db.query(InventoryAdjustment)
    if product_id is not None:
        query = query.filter(InventoryAdjustment.product_id == product_id)
    if adjustment_type is not None:
        query = query.filter(InventoryAdjustment.adjustment_type == adjustment_type.value)

    dt_from = parse_date_bound(date_from)
    if dt_from:
        query = query.filter(InventoryAdjustment.created_at >= dt_from)
    dt_to = parse_date_bound(date_to, end_of_day=True)
    if dt_to:
        query = query.filter(InventoryAdjustment.created_at <= dt_to)

    if order == "asc":
        query = query.order_by(InventoryAdjustment.created_at.asc(), InventoryAdjustment.id.asc())
    else:
        query = query.order_by(InventoryAdjustment.created_at.desc(), InventoryAdjustment.id.desc())

    total = query.count()
    items = query.offset((page - 1) * page_size).limit(page_size).all()
    return {"items": [adjustment_to_out(a) for a in items], "total": total, "page": page, "page_size": page_size}


# Stock overview with valuation
@router.get("", response_model=stock_schemas.InventoryPage)
def inventory_overview(
    q: Optional[str] = Query(None, description="Name, SKU or barcode"),
    category_id: Optional[int] = None,
    low_stock: bool = False,
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=500),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    query = db.query(Product).filter(Product.active.is_(True))
    if q:
        like = f"%{q}%"
        query = query.filter(or_(Product.name.ilike(like), Product.sku.ilike(like), Product.barcode.ilike(like)))
    if category_id is not None:
        query = query.filter(Product.category_id == category_id)
    if low_stock:
        query = query.filter(Product.stock_quantity <= Product.alert_threshold)

    products = query.order_by(Product.name.asc()).all()
    total_value = money(sum((p.stock_quantity or 0) * (p.cost or 0) for p in products))

    start = (page - 1) * page_size
    rows = []
    for p in products[start:start + page_size]:
        rows.append({
            "product_id": p.id,
            "name": p.name,
            "sku": p.sku,
            "category_name": p.category_name,
            "stock_quantity": p.stock_quantity or 0,
            "alert_threshold": p.alert_threshold or 0,
            "cost": p.cost or 0,
            "stock_value": money((p.stock_quantity or 0) * (p.cost or 0)),
            "location": p.location,
            "is_low_stock": p.is_low_stock,
        })

    return {
        "items": rows,
        "total": len(products),
        "page": page,
        "page_size": page_size,
        "total_stock_value": total_value,
    }
