# backend/routes/repacking.py
import logging
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session

from database import get_db
from models.product import Product
from models.stock import AdjustmentType
from models.users import User
from utils.tokenJWT import get_current_user, manager_or_admin
from utils.audit import write_log, client_ip
from utils.inventory import apply_stock_change, lock_product
from utils import repacking
import schemas.repacking as repack_schemas

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/repacking", tags=["Repacking"])


def _quote_for(bulk: Product, unit_weight: float, repack_quantity: int) -> dict:
    try:
        bulk_weight_g = repacking.to_grams(bulk.weight, bulk.weight_unit)
        data = repacking.quote(bulk.price, bulk.cost, bulk.mrp, bulk_weight_g, unit_weight, repack_quantity)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    stock = bulk.stock_quantity or 0
    data.update(
        bulk_product_id=bulk.id,
        bulk_stock=stock,
        sufficient_stock=stock >= data["bulk_units_needed"],
    )
    return data


def _repacked_out(product: Product) -> dict:
    bulk = product.bulk_product
    return {
        "id": product.id,
        "name": product.name,
        "sku": product.sku,
        "price": product.price,
        "mrp": product.mrp,
        "cost": product.cost or 0,
        "weight": product.weight,
        "weight_unit": product.weight_unit,
        "stock_quantity": product.stock_quantity or 0,
        "bulk_product_id": product.bulk_product_id,
        "bulk_product_name": bulk.name if bulk else None,
        "bulk_product_sku": bulk.sku if bulk else None,
    }


def _get_bulk_or_404(db: Session, product_id: int, lock: bool = False) -> Product:
    if lock:
        bulk = lock_product(db, product_id)
    else:
        bulk = db.query(Product).filter(Product.id == product_id).first()
    if not bulk:
        raise HTTPException(status_code=404, detail="Bulk product not found")
    return bulk


@router.post("/quote", response_model=repack_schemas.RepackQuote)
def repack_quote(
    payload: repack_schemas.RepackQuoteRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    bulk = _get_bulk_or_404(db, payload.bulk_product_id)
    return _quote_for(bulk, payload.unit_weight, payload.repack_quantity)


@router.post("", response_model=repack_schemas.RepackResult, status_code=status.HTTP_201_CREATED)
def create_repack(
    payload: repack_schemas.RepackCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(manager_or_admin),
):
    try:
        bulk = _get_bulk_or_404(db, payload.bulk_product_id, lock=True)
        q = _quote_for(bulk, payload.unit_weight, payload.repack_quantity)
        if not q["sufficient_stock"]:
            raise HTTPException(
                status_code=400,
                detail=f"Insufficient bulk stock: need {q['bulk_units_needed']}, available {q['bulk_stock']}",
            )

        sku = repacking.child_sku(bulk.sku, payload.unit_weight)
        if db.query(Product.id).filter(Product.sku == sku).first():
            raise HTTPException(status_code=409, detail=f"SKU {sku} already exists")
        child = Product(
            name=payload.name or repacking.child_name(bulk.name, payload.unit_weight),
            sku=sku,
            description=bulk.description,
            barcode=payload.barcode,
            category_id=bulk.category_id,
            price=payload.price if payload.price is not None else q["unit_price"],
            mrp=payload.mrp if payload.mrp is not None else q["unit_mrp"],
            cost=payload.cost if payload.cost is not None else q["unit_cost"],
            weight=payload.unit_weight,
            weight_unit="g",
            stock_quantity=0,
            alert_threshold=bulk.alert_threshold,
            location=bulk.location,
            hsn_code=bulk.hsn_code,
            cgst_rate=bulk.cgst_rate,
            sgst_rate=bulk.sgst_rate,
            igst_rate=bulk.igst_rate,
            cess_rate=bulk.cess_rate,
            bulk_product_id=bulk.id,
            active=True,
        )
        db.add(child)
        db.flush()

        # Both sides of the repack land in the stock ledger
        apply_stock_change(db, bulk, -q["bulk_units_needed"], AdjustmentType.REPACK.value,
                           user_id=current_user.id, reason=f"Repacked into {sku}",
                           notes=payload.notes, reference_document=sku)
        apply_stock_change(db, child, payload.repack_quantity, AdjustmentType.REPACK.value,
                           user_id=current_user.id, reason=f"Repacked from {bulk.sku}",
                           notes=payload.notes, unit_cost=child.cost, reference_document=bulk.sku)
        db.commit()
    except HTTPException:
        db.rollback()
        raise
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))

    db.refresh(child)
    db.refresh(bulk)
    q["bulk_stock"] = bulk.stock_quantity
    q["sufficient_stock"] = True
    logger.info("Repacked %s bulk units of %s into %s x %s", q["bulk_units_needed"], bulk.sku,
                payload.repack_quantity, child.sku)
    write_log(db, user_id=current_user.id, action="REPACK_CREATE", resource="repacking", status="SUCCESS",
              ip=client_ip(request),
              meta={"bulk_product_id": bulk.id, "product_id": child.id, "quantity": payload.repack_quantity,
                    "bulk_units": q["bulk_units_needed"]})
    return {"product": _repacked_out(child), "quote": q, "bulk_stock_remaining": bulk.stock_quantity}


@router.get("", response_model=repack_schemas.RepackPage)
def list_repacked(
    bulk_product_id: int = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    query = db.query(Product).filter(Product.bulk_product_id.isnot(None))
    if bulk_product_id is not None:
        query = query.filter(Product.bulk_product_id == bulk_product_id)
    rows = query.order_by(Product.id.desc()).all()
    return {"items": [_repacked_out(p) for p in rows], "total": len(rows)}
