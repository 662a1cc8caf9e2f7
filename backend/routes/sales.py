# backend/routes/sales.py
import logging
from datetime import datetime
from typing import List, Optional, Tuple
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from database import get_db
from models.sale import Sale, SaleItem, SaleStatus, PaymentMethod
from models.offer import OfferUsage
from models.product import Product
from models.customer import Customer
from models.stock import AdjustmentType
from models.users import User
from utils.tokenJWT import get_current_user, manager_or_admin
from utils.audit import write_log, client_ip
from utils.inventory import apply_stock_change, lock_product
from utils.offers import CartLine
from utils.pdf import generate_receipt_pdf, get_receipt_path
from utils import pos
from routes.offers import evaluate_cart, loyalty_rule, get_offer_or_404
from routes.business import business_dict
from routes.logs import parse_date_bound
import schemas.sale as sale_schemas

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sales", tags=["Sales"])


def sale_to_out(sale: Sale) -> dict:
    data = sale_schemas.SaleOut.model_validate(sale).model_dump()
    data["cashier_name"] = sale.cashier.name if sale.cashier else None
    data["customer_name"] = sale.customer.name if sale.customer else None
    data["applied_offers"] = [
        {
            "offer_id": u.offer_id,
            "name": u.offer.name if u.offer else "",
            "offer_type": u.offer.offer_type if u.offer else "",
            "discount": u.discount_amount,
        }
        for u in sale.offer_usages
    ]
    return data


def get_sale_or_404(db: Session, sale_id: int) -> Sale:
    sale = db.query(Sale).filter(Sale.id == sale_id).first()
    if not sale:
        raise HTTPException(status_code=404, detail="Sale not found")
    return sale


def get_visible_sale_or_404(db: Session, sale_id: int, user: User) -> Sale:
    sale = get_sale_or_404(db, sale_id)
    # Cashiers only see their own sales
    if (user.role or "").lower() == "cashier" and sale.user_id != user.id:
        raise HTTPException(status_code=404, detail="Sale not found")
    return sale


def create_sale(
    db: Session,
    user: User,
    lines: List[Tuple[int, int, Optional[float]]],
    payment: sale_schemas.PaymentDetails,
    customer_id: Optional[int] = None,
    cart=None,
) -> Sale:
    """
    lines: (product_id, quantity, unit_price or None for the catalog price).
    cart: held cart to close in the same transaction.

    Stock, offers, loyalty and the ledger are all written in one transaction;
    nothing is committed when any line fails.
    """
    if not lines:
        raise HTTPException(status_code=400, detail="Cart is empty")

    # Same product on several lines counts once against stock
    merged = {}
    for product_id, quantity, unit_price in lines:
        qty, price = merged.get(product_id, (0, unit_price))
        merged[product_id] = (qty + quantity, price)

    try:
        products = {}
        for product_id, (quantity, _) in merged.items():
            product = lock_product(db, product_id)
            if not product:
                raise HTTPException(status_code=404, detail=f"Product {product_id} not found")
            if not product.active:
                raise HTTPException(status_code=400, detail=f"{product.name} is not available for sale")
            pos.check_stock(product.name, product.stock_quantity, quantity)
            products[product_id] = product

        customer = None
        if customer_id is not None:
            customer = db.query(Customer).filter(Customer.id == customer_id).first()
            if not customer:
                raise HTTPException(status_code=404, detail="Customer not found")

        cart_lines = [
            CartLine(
                product_id=pid,
                quantity=qty,
                unit_price=price if price is not None else products[pid].price,
                category_id=products[pid].category_id,
            )
            for pid, (qty, price) in merged.items()
        ]

        now = datetime.now()
        applied = evaluate_cart(db, cart_lines, customer, now=now).applied if payment.apply_offers else []
        discount = sum(o.discount for o in applied)
        totals = pos.calculate_totals([(l.quantity, l.unit_price) for l in cart_lines], discount=discount)
        change = pos.change_due(totals["total"], payment.amount_tendered)

        sale = Sale(
            user_id=user.id,
            customer_id=customer.id if customer else None,
            subtotal=totals["subtotal"],
            discount=totals["discount"],
            tax_rate=totals["tax_rate"],
            tax=totals["tax"],
            total=totals["total"],
            payment_method=payment.payment_method,
            amount_tendered=payment.amount_tendered,
            change_due=change,
            notes=payment.notes,
            status=SaleStatus.COMPLETED.value,
            created_at=now,
        )
        db.add(sale)
        db.flush()
        sale.order_number = pos.document_number("ORD", sale.id, now)

        for line in cart_lines:
            product = products[line.product_id]
            db.add(SaleItem(
                sale_id=sale.id,
                product_id=product.id,
                product_name=product.name,
                sku=product.sku,
                quantity=line.quantity,
                unit_price=line.unit_price,
                mrp=product.mrp,
                subtotal=pos.line_total(line.quantity, line.unit_price),
            ))
            apply_stock_change(db, product, -line.quantity, AdjustmentType.SALE.value,
                               user_id=user.id, reference_document=sale.order_number)

        for offer in applied:
            db.add(OfferUsage(offer_id=offer.offer_id, customer_id=sale.customer_id,
                              sale_id=sale.id, discount_amount=offer.discount))
            record = get_offer_or_404(db, offer.offer_id)
            record.usage_count = (record.usage_count or 0) + 1
            if customer and offer.points_spent:
                balance = (customer.loyalty_points or 0) - offer.points_spent
                if balance < 0:
                    raise ValueError(f"Customer has too few loyalty points for {offer.name}")
                customer.loyalty_points = balance

        if customer:
            rule = loyalty_rule(db, now)
            points = pos.loyalty_points_for(
                sale.total,
                rule.points_threshold if rule else None,
                rule.points_reward if rule else None,
            )
            sale.loyalty_points_earned = points
            customer.loyalty_points = (customer.loyalty_points or 0) + points

        if cart is not None:
            cart.status = "checked_out"

        db.commit()
    except HTTPException:
        db.rollback()
        raise
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))

    db.refresh(sale)
    logger.info("Sale %s completed by user %s: total %.2f", sale.order_number, user.id, sale.total)
    return sale


# =========================
# SALES
# =========================
@router.post("", response_model=sale_schemas.SaleOut, status_code=status.HTTP_201_CREATED)
def create_direct_sale(
    payload: sale_schemas.SaleCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    lines = [(item.product_id, item.quantity, None) for item in payload.items]
    sale = create_sale(db, current_user, lines, payload, customer_id=payload.customer_id)
    write_log(db, user_id=current_user.id, action="SALE_CREATE", resource="sales", status="SUCCESS",
              ip=client_ip(request), meta={"sale_id": sale.id, "order_number": sale.order_number, "total": sale.total})
    return sale_to_out(sale)


@router.get("", response_model=sale_schemas.SalePage)
def list_sales(
    date_from: Optional[str] = Query(None, description="YYYY-MM-DD"),
    date_to: Optional[str] = Query(None, description="YYYY-MM-DD"),
    status_filter: Optional[str] = Query(None, alias="status"),
    payment_method: Optional[PaymentMethod] = None,
    customer_id: Optional[int] = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=200),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    query = db.query(Sale)
    # Cashiers only see their own sales
    if (current_user.role or "").lower() == "cashier":
        query = query.filter(Sale.user_id == current_user.id)

    dt_from = parse_date_bound(date_from)
    if dt_from:
        query = query.filter(Sale.created_at >= dt_from)
    dt_to = parse_date_bound(date_to, end_of_day=True)
    if dt_to:
        query = query.filter(Sale.created_at <= dt_to)
    if status_filter:
        query = query.filter(Sale.status == status_filter)
    if payment_method:
        query = query.filter(Sale.payment_method == payment_method.value)
    if customer_id is not None:
        query = query.filter(Sale.customer_id == customer_id)

    total = query.count()
    sales = query.order_by(Sale.created_at.desc(), Sale.id.desc()).offset((page - 1) * page_size).limit(page_size).all()
    return {"items": [sale_to_out(s) for s in sales], "total": total, "page": page, "page_size": page_size}


@router.get("/recent", response_model=List[sale_schemas.SaleOut])
def recent_sales(
    limit: int = Query(10, ge=1, le=50),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    sales = db.query(Sale).order_by(Sale.created_at.desc(), Sale.id.desc()).limit(limit).all()
    return [sale_to_out(s) for s in sales]


@router.get("/{sale_id}", response_model=sale_schemas.SaleOut)
def get_sale(sale_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return sale_to_out(get_visible_sale_or_404(db, sale_id, current_user))


@router.get("/{sale_id}/receipt")
def download_receipt(
    sale_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    sale = get_visible_sale_or_404(db, sale_id, current_user)
    pdf_path = get_receipt_path(sale.id)

    # Regenerated on every request so returns show up on the receipt
    try:
        generate_receipt_pdf(sale, pdf_path, business=business_dict(db))
    except Exception as e:
        logger.exception("Receipt generation failed for sale %s", sale.id)
        raise HTTPException(status_code=500, detail=f"Could not generate receipt: {e}")

    write_log(db, user_id=current_user.id, action="RECEIPT_DOWNLOAD", resource="sales", status="SUCCESS",
              ip=client_ip(request), meta={"sale_id": sale.id})

    return FileResponse(
        path=str(pdf_path),
        media_type="application/pdf",
        filename=f"Receipt_{sale.order_number or sale.id}.pdf",
    )


@router.post("/{sale_id}/return", response_model=sale_schemas.SaleOut)
def return_items(
    sale_id: int,
    payload: sale_schemas.SaleReturn,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(manager_or_admin),
):
    sale = get_sale_or_404(db, sale_id)
    if sale.status == SaleStatus.RETURNED.value:
        raise HTTPException(status_code=400, detail="Sale has already been fully returned")

    items = {item.id: item for item in sale.items}
    try:
        for line in payload.items:
            item = items.get(line.item_id)
            if not item:
                raise HTTPException(status_code=404, detail=f"Sale item {line.item_id} not found")
            remaining = item.quantity - (item.returned_quantity or 0)
            if line.quantity > remaining:
                raise HTTPException(
                    status_code=400,
                    detail=f"Cannot return {line.quantity} of {item.product_name}; only {remaining} returnable",
                )
            item.returned_quantity = (item.returned_quantity or 0) + line.quantity
            product = db.query(Product).filter(Product.id == item.product_id).first()
            if product:
                apply_stock_change(db, product, line.quantity, AdjustmentType.RETURN.value, user_id=current_user.id,
                                   reason=payload.reason, reference_document=sale.order_number)

        fully_returned = all((i.returned_quantity or 0) >= i.quantity for i in sale.items)
        sale.status = SaleStatus.RETURNED.value if fully_returned else SaleStatus.PARTIALLY_RETURNED.value
        db.commit()
    except HTTPException:
        db.rollback()
        raise

    db.refresh(sale)
    write_log(db, user_id=current_user.id, action="SALE_RETURN", resource="sales", status="SUCCESS",
              ip=client_ip(request),
              meta={"sale_id": sale.id, "items": [l.model_dump() for l in payload.items], "reason": payload.reason})
    return sale_to_out(sale)
