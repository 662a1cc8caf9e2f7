# backend/routes/tax.py
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from database import get_db
from models.tax import TaxCategory, HsnCode, TaxSettings
from models.product import Product
from models.users import User
from utils.tokenJWT import get_current_user, manager_or_admin, admin_only
from utils.audit import write_log, client_ip
from utils import gst
import schemas.tax as tax_schemas

router = APIRouter(prefix="/tax", tags=["Tax"])


def get_tax_settings(db: Session) -> TaxSettings:
    # Single-row table; created on first access
    s = db.query(TaxSettings).first()
    if not s:
        s = TaxSettings()
        db.add(s)
        db.commit()
        db.refresh(s)
    return s


def _category_or_404(db: Session, category_id: int) -> TaxCategory:
    category = db.query(TaxCategory).filter(TaxCategory.id == category_id).first()
    if not category:
        raise HTTPException(status_code=404, detail="Tax category not found")
    return category


# =========================
# TAX CATEGORIES
# =========================
@router.get("/categories", response_model=List[tax_schemas.TaxCategoryOut])
def list_categories(
    active: Optional[bool] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    query = db.query(TaxCategory)
    if active is not None:
        query = query.filter(TaxCategory.is_active == active)
    return query.order_by(TaxCategory.id.asc()).all()


@router.post("/categories", response_model=tax_schemas.TaxCategoryOut, status_code=status.HTTP_201_CREATED)
def create_category(
    payload: tax_schemas.TaxCategoryCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(manager_or_admin),
):
    category = TaxCategory(**payload.model_dump())
    db.add(category)
    db.commit()
    db.refresh(category)
    write_log(db, user_id=current_user.id, action="TAX_CATEGORY_CREATE", resource="tax",
              status="SUCCESS", ip=client_ip(request), meta={"id": category.id, "rate": category.rate})
    return category


@router.put("/categories/{category_id}", response_model=tax_schemas.TaxCategoryOut)
def update_category(
    category_id: int,
    payload: tax_schemas.TaxCategoryUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(manager_or_admin),
):
    category = _category_or_404(db, category_id)
    for key, value in payload.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(category, key, value)
    db.commit()
    db.refresh(category)
    write_log(db, user_id=current_user.id, action="TAX_CATEGORY_UPDATE", resource="tax",
              status="SUCCESS", ip=client_ip(request), meta={"id": category.id})
    return category


@router.delete("/categories/{category_id}")
def delete_category(
    category_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(manager_or_admin),
):
    category = _category_or_404(db, category_id)
    if db.query(HsnCode.id).filter(HsnCode.tax_category_id == category_id).first():
        raise HTTPException(status_code=409, detail="Tax category is used by HSN codes")
    db.delete(category)
    db.commit()
    write_log(db, user_id=current_user.id, action="TAX_CATEGORY_DELETE", resource="tax",
              status="SUCCESS", ip=client_ip(request), meta={"id": category_id})
    return {"message": "Tax category deleted"}


# =========================
# HSN CODES
# =========================
def _hsn_or_404(db: Session, hsn_id: int) -> HsnCode:
    hsn = db.query(HsnCode).filter(HsnCode.id == hsn_id).first()
    if not hsn:
        raise HTTPException(status_code=404, detail="HSN code not found")
    return hsn


@router.get("/hsn-codes", response_model=List[tax_schemas.HsnCodeOut])
def list_hsn_codes(
    q: Optional[str] = Query(None, description="Code or description"),
    active: Optional[bool] = None,
    limit: int = Query(200, ge=1, le=1000),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    query = db.query(HsnCode)
    if q:
        like = f"%{q.strip()}%"
        query = query.filter(or_(HsnCode.hsn_code.ilike(like), HsnCode.description.ilike(like)))
    if active is not None:
        query = query.filter(HsnCode.is_active == active)
    return query.order_by(HsnCode.hsn_code.asc()).limit(limit).all()


# GST-rate lookup used by product forms
@router.get("/hsn-codes/{code}/rates", response_model=tax_schemas.HsnRates)
def hsn_rates(code: str, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    code = code.strip()
    if not gst.is_valid_hsn(code):
        raise HTTPException(status_code=400, detail="HSN code must be 4 to 8 digits")

    hsn = db.query(HsnCode).filter(HsnCode.hsn_code == code).first()
    if hsn:
        total = gst.parse_rate(hsn.igst_rate) or gst.parse_rate(hsn.cgst_rate) + gst.parse_rate(hsn.sgst_rate)
        return {
            "hsn_code": hsn.hsn_code, "description": hsn.description,
            "cgst_rate": hsn.cgst_rate, "sgst_rate": hsn.sgst_rate,
            "igst_rate": hsn.igst_rate, "cess_rate": hsn.cess_rate,
            "total_rate": total, "source": "master",
        }

    total = gst.suggest_rate(code)
    entry = gst.SUGGESTED_RATES.get(code[:4])
    return {
        "hsn_code": code, "description": entry[0] if entry else None,
        **gst.split_rate(total), "total_rate": total, "source": "suggested",
    }


@router.post("/hsn-codes", response_model=tax_schemas.HsnCodeOut, status_code=status.HTTP_201_CREATED)
def create_hsn_code(
    payload: tax_schemas.HsnCodeCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(manager_or_admin),
):
    if db.query(HsnCode.id).filter(HsnCode.hsn_code == payload.hsn_code).first():
        raise HTTPException(status_code=409, detail="HSN code already exists")
    if payload.tax_category_id is not None:
        _category_or_404(db, payload.tax_category_id)
    hsn = HsnCode(**payload.model_dump())
    db.add(hsn)
    db.commit()
    db.refresh(hsn)
    write_log(db, user_id=current_user.id, action="HSN_CREATE", resource="tax",
              status="SUCCESS", ip=client_ip(request), meta={"hsn_code": hsn.hsn_code})
    return hsn


@router.put("/hsn-codes/{hsn_id}", response_model=tax_schemas.HsnCodeOut)
def update_hsn_code(
    hsn_id: int,
    payload: tax_schemas.HsnCodeUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(manager_or_admin),
):
    hsn = _hsn_or_404(db, hsn_id)
    changes = payload.model_dump(exclude_unset=True)
    if changes.get("hsn_code") and changes["hsn_code"] != hsn.hsn_code:
        if db.query(HsnCode.id).filter(HsnCode.hsn_code == changes["hsn_code"]).first():
            raise HTTPException(status_code=409, detail="HSN code already exists")
    if changes.get("tax_category_id") is not None:
        _category_or_404(db, changes["tax_category_id"])
    for key, value in changes.items():
        if value is not None or key == "tax_category_id":
            setattr(hsn, key, value)
    db.commit()
    db.refresh(hsn)
    write_log(db, user_id=current_user.id, action="HSN_UPDATE", resource="tax",
              status="SUCCESS", ip=client_ip(request), meta={"hsn_code": hsn.hsn_code})
    return hsn


@router.delete("/hsn-codes/{hsn_id}")
def delete_hsn_code(
    hsn_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(manager_or_admin),
):
    hsn = _hsn_or_404(db, hsn_id)
    if db.query(Product.id).filter(Product.hsn_code == hsn.hsn_code).first():
        raise HTTPException(status_code=409, detail="HSN code is assigned to products; deactivate it instead")
    code = hsn.hsn_code
    db.delete(hsn)
    db.commit()
    write_log(db, user_id=current_user.id, action="HSN_DELETE", resource="tax",
              status="SUCCESS", ip=client_ip(request), meta={"hsn_code": code})
    return {"message": f"HSN code {code} deleted"}


# =========================
# SETTINGS & CALCULATION
# =========================
@router.get("/settings", response_model=tax_schemas.TaxSettingsOut)
def read_settings(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return get_tax_settings(db)


@router.put("/settings", response_model=tax_schemas.TaxSettingsOut)
def update_settings(
    payload: tax_schemas.TaxSettingsUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_only),
):
    s = get_tax_settings(db)
    changes = payload.model_dump(exclude_unset=True)
    if changes.get("default_tax_category_id") is not None:
        _category_or_404(db, changes["default_tax_category_id"])
    for key, value in changes.items():
        setattr(s, key, value)
    db.commit()
    db.refresh(s)
    write_log(db, user_id=current_user.id, action="TAX_SETTINGS_UPDATE", resource="tax",
              status="SUCCESS", ip=client_ip(request), meta={"fields": sorted(changes)})
    return s


@router.post("/calculate", response_model=tax_schemas.TaxBreakdown)
def calculate(
    payload: tax_schemas.TaxCalculationRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    settings_row = get_tax_settings(db)

    rate = payload.gst_rate
    cess = payload.cess_rate
    if rate is None:
        if not payload.hsn_code:
            raise HTTPException(status_code=400, detail="Provide gst_rate or hsn_code")
        hsn = db.query(HsnCode).filter(HsnCode.hsn_code == payload.hsn_code.strip()).first()
        if hsn:
            rate = gst.parse_rate(hsn.igst_rate) or gst.parse_rate(hsn.cgst_rate) + gst.parse_rate(hsn.sgst_rate)
            cess = cess or gst.parse_rate(hsn.cess_rate)
        else:
            rate = gst.suggest_rate(payload.hsn_code)

    inclusive = payload.inclusive
    if inclusive is None:
        inclusive = settings_row.tax_calculation_method == "inclusive" or bool(settings_row.prices_include_tax)

    breakdown = gst.calculate_breakdown(
        payload.amount, rate, cess,
        supplier_state=payload.supplier_state or settings_row.company_state,
        buyer_state=payload.buyer_state,
        inclusive=inclusive,
    )
    return {**breakdown, "gst_rate": rate}
