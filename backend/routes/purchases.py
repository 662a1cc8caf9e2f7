# backend/routes/purchases.py
import logging
from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session

from database import get_db
from models.purchase import Purchase, PurchaseItem, PurchaseStatus
from models.product import Product
from models.stock import AdjustmentType
from models.users import User
from utils.tokenJWT import get_current_user, manager_or_admin
from utils.audit import write_log, client_ip
from utils.inventory import apply_stock_change, lock_product
from utils.pos import money, line_total, document_number
from routes.suppliers import get_supplier_or_404
import schemas.purchase as purchase_schemas

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/purchases", tags=["Purchases"])

FINAL_STATES = {PurchaseStatus.RECEIVED.value, PurchaseStatus.CANCELLED.value}


def purchase_to_out(purchase: Purchase) -> dict:
    data = purchase_schemas.PurchaseOut.model_validate(purchase).model_dump()
    data["supplier_name"] = purchase.supplier.name if purchase.supplier else None
    names = {i.id: (i.product.name if i.product else None) for i in purchase.items}
    for item in data["items"]:
        item["product_name"] = names.get(item["id"])
    return data


def get_purchase_or_404(db: Session, purchase_id: int) -> Purchase:
    purchase = db.query(Purchase).filter(Purchase.id == purchase_id).first()
    if not purchase:
        raise HTTPException(status_code=404, detail="Purchase not found")
    return purchase


def receive_line(db: Session, purchase: Purchase, item: PurchaseItem, quantity: int, user_id: int) -> None:
    """Adds received units to stock and takes over the line's unit cost. Does not commit."""
    if quantity > item.outstanding:
        raise HTTPException(
            status_code=400,
            detail=f"Cannot receive {quantity} units for item {item.id}; only {item.outstanding} outstanding",
        )
    product = lock_product(db, item.product_id)
    if not product:
        raise HTTPException(status_code=404, detail=f"Product {item.product_id} not found")

    apply_stock_change(db, product, quantity, AdjustmentType.PURCHASE.value, user_id=user_id,
                       unit_cost=item.unit_cost, reference_document=purchase.order_number)
    product.cost = item.unit_cost
    item.received_quantity = (item.received_quantity or 0) + quantity


@router.post("", response_model=purchase_schemas.PurchaseOut, status_code=status.HTTP_201_CREATED)
def create_purchase(
    payload: purchase_schemas.PurchaseCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(manager_or_admin),
):
    get_supplier_or_404(db, payload.supplier_id)

    ids = {i.product_id for i in payload.items}
    found = {pid for (pid,) in db.query(Product.id).filter(Product.id.in_(ids)).all()}
    missing = ids - found
    if missing:
        raise HTTPException(status_code=404, detail=f"Products not found: {sorted(missing)}")

    subtotal = money(sum(line_total(i.quantity, i.unit_cost) for i in payload.items))
    total = money(subtotal + payload.tax + payload.freight - payload.discount)
    if total < 0:
        raise HTTPException(status_code=400, detail="Discount cannot exceed the order value")

    purchase = Purchase(
        user_id=current_user.id,
        supplier_id=payload.supplier_id,
        expected_date=payload.expected_date,
        subtotal=subtotal,
        tax=payload.tax,
        freight=payload.freight,
        discount=payload.discount,
        total=total,
        notes=payload.notes,
        draft=payload.draft,
        status=PurchaseStatus.PENDING.value,
    )
    db.add(purchase)
    db.flush()
    purchase.order_number = document_number("PO", purchase.id)

    for i in payload.items:
        db.add(PurchaseItem(
            purchase_id=purchase.id,
            product_id=i.product_id,
            quantity=i.quantity,
            received_quantity=0,
            unit_cost=i.unit_cost,
            subtotal=line_total(i.quantity, i.unit_cost),
        ))

    db.commit()
    db.refresh(purchase)
    write_log(db, user_id=current_user.id, action="PURCHASE_CREATE", resource="purchases", status="SUCCESS",
              ip=client_ip(request), meta={"id": purchase.id, "order_number": purchase.order_number, "total": total})
    return purchase_to_out(purchase)


@router.get("", response_model=purchase_schemas.PurchasePage)
def list_purchases(
    status_filter: Optional[PurchaseStatus] = Query(None, alias="status"),
    supplier_id: Optional[int] = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=200),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    query = db.query(Purchase)
    if status_filter is not None:
        query = query.filter(Purchase.status == status_filter.value)
    if supplier_id is not None:
        query = query.filter(Purchase.supplier_id == supplier_id)

    total = query.count()
    rows = query.order_by(Purchase.id.desc()).offset((page - 1) * page_size).limit(page_size).all()
    return {"items": [purchase_to_out(p) for p in rows], "total": total, "page": page, "page_size": page_size}


@router.get("/{purchase_id}", response_model=purchase_schemas.PurchaseOut)
def get_purchase(purchase_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return purchase_to_out(get_purchase_or_404(db, purchase_id))


@router.put("/{purchase_id}/status", response_model=purchase_schemas.PurchaseOut)
def update_purchase_status(
    purchase_id: int,
    payload: purchase_schemas.PurchaseStatusUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(manager_or_admin),
):
    purchase = get_purchase_or_404(db, purchase_id)
    if purchase.status in FINAL_STATES:
        raise HTTPException(status_code=400, detail=f"Purchase is already {purchase.status}")

    previous = purchase.status
    try:
        if payload.status == PurchaseStatus.RECEIVED.value:
            # Everything still outstanding arrives now
            for item in purchase.items:
                if item.outstanding:
                    receive_line(db, purchase, item, item.outstanding, current_user.id)
            purchase.received_date = datetime.now()
        elif payload.status == PurchaseStatus.PENDING.value and previous != PurchaseStatus.PENDING.value:
            raise HTTPException(status_code=400, detail=f"Cannot move a {previous} purchase back to pending")

        purchase.status = payload.status
        if payload.status == PurchaseStatus.ORDERED.value:
            purchase.draft = False
        db.commit()
    except HTTPException:
        db.rollback()
        raise

    db.refresh(purchase)
    logger.info("Purchase %s: %s -> %s", purchase.order_number, previous, purchase.status)
    write_log(db, user_id=current_user.id, action="PURCHASE_STATUS", resource="purchases", status="SUCCESS",
              ip=client_ip(request), meta={"id": purchase.id, "from": previous, "to": purchase.status})
    return purchase_to_out(purchase)


# Partial receipt
@router.post("/{purchase_id}/receive", response_model=purchase_schemas.PurchaseOut)
def receive_purchase(
    purchase_id: int,
    payload: purchase_schemas.PurchaseReceive,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(manager_or_admin),
):
    purchase = get_purchase_or_404(db, purchase_id)
    if purchase.status in FINAL_STATES:
        raise HTTPException(status_code=400, detail=f"Purchase is already {purchase.status}")

    items = {i.id: i for i in purchase.items}
    try:
        for line in payload.items:
            item = items.get(line.item_id)
            if not item:
                raise HTTPException(status_code=404, detail=f"Purchase item {line.item_id} not found")
            receive_line(db, purchase, item, line.quantity, current_user.id)

        if all(i.outstanding == 0 for i in purchase.items):
            purchase.status = PurchaseStatus.RECEIVED.value
        else:
            purchase.status = PurchaseStatus.PARTIALLY_RECEIVED.value
        purchase.received_date = datetime.now()
        purchase.draft = False
        db.commit()
    except HTTPException:
        db.rollback()
        raise

    db.refresh(purchase)
    write_log(db, user_id=current_user.id, action="PURCHASE_RECEIVE", resource="purchases", status="SUCCESS",
              ip=client_ip(request),
              meta={"id": purchase.id, "items": [l.model_dump() for l in payload.items], "status": purchase.status})
    return purchase_to_out(purchase)


@router.delete("/{purchase_id}")
def delete_purchase(
    purchase_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(manager_or_admin),
):
    purchase = get_purchase_or_404(db, purchase_id)
    if purchase.status != PurchaseStatus.PENDING.value and not purchase.draft:
        raise HTTPException(status_code=400, detail="Only pending or draft purchases can be deleted")
    if any((i.received_quantity or 0) > 0 for i in purchase.items):
        raise HTTPException(status_code=400, detail="Purchase has received items")

    db.delete(purchase)
    db.commit()
    write_log(db, user_id=current_user.id, action="PURCHASE_DELETE", resource="purchases", status="SUCCESS",
              ip=client_ip(request), meta={"id": purchase_id})
    return {"message": "Purchase deleted"}
