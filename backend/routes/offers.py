# backend/routes/offers.py
from datetime import datetime
from typing import Dict, List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from database import get_db
from models.offer import Offer, OfferUsage, OfferType
from models.product import Product
from models.customer import Customer
from models.users import User
from utils.tokenJWT import get_current_user, manager_or_admin
from utils.audit import write_log, client_ip
from utils.offers import CartLine, OfferResult, in_validity_period, select_offers
import schemas.offer as offer_schemas

router = APIRouter(prefix="/offers", tags=["Offers"])


# ---- HELPERS shared with the POS ----
def active_offers(db: Session) -> List[Offer]:
    return db.query(Offer).filter(Offer.active.is_(True)).order_by(Offer.id.asc()).all()


def customer_usage(db: Session, customer_id: Optional[int]) -> Dict[int, int]:
    if customer_id is None:
        return {}
    rows = (
        db.query(OfferUsage.offer_id, func.count(OfferUsage.id))
        .filter(OfferUsage.customer_id == customer_id)
        .group_by(OfferUsage.offer_id)
        .all()
    )
    return {offer_id: count for offer_id, count in rows}


def evaluate_cart(db: Session, lines: List[CartLine], customer: Optional[Customer] = None,
                  now: Optional[datetime] = None) -> OfferResult:
    return select_offers(
        active_offers(db),
        lines,
        now=now,
        loyalty_points=customer.loyalty_points if customer else None,
        customer_usage=customer_usage(db, customer.id if customer else None),
    )


def loyalty_rule(db: Session, now: Optional[datetime] = None) -> Optional[Offer]:
    """Active, in-date loyalty offer that defines how many points a sale earns."""
    now = now or datetime.now()
    offers = (
        db.query(Offer)
        .filter(Offer.active.is_(True), Offer.offer_type == OfferType.LOYALTY_POINTS.value)
        .order_by(Offer.priority.asc(), Offer.id.asc())
        .all()
    )
    return next((o for o in offers if in_validity_period(o, now)), None)


def get_offer_or_404(db: Session, offer_id: int) -> Offer:
    offer = db.query(Offer).filter(Offer.id == offer_id).first()
    if not offer:
        raise HTTPException(status_code=404, detail="Offer not found")
    return offer


# =========================
# CRUD
# =========================
@router.get("", response_model=List[offer_schemas.OfferOut])
def list_offers(
    active: Optional[bool] = None,
    offer_type: Optional[OfferType] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    query = db.query(Offer)
    if active is not None:
        query = query.filter(Offer.active == active)
    if offer_type is not None:
        query = query.filter(Offer.offer_type == offer_type.value)
    return query.order_by(Offer.priority.asc(), Offer.id.asc()).all()


# Per-offer usage totals
@router.get("/reports", response_model=List[offer_schemas.OfferReportRow])
def offer_reports(db: Session = Depends(get_db), current_user: User = Depends(manager_or_admin)):
    totals = dict(
        db.query(OfferUsage.offer_id, func.coalesce(func.sum(OfferUsage.discount_amount), 0))
        .group_by(OfferUsage.offer_id)
        .all()
    )
    rows = []
    for offer in db.query(Offer).order_by(Offer.id.asc()).all():
        rows.append({
            "offer_id": offer.id,
            "name": offer.name,
            "offer_type": offer.offer_type,
            "active": offer.active,
            "usage_count": offer.usage_count or 0,
            "total_discount": round(float(totals.get(offer.id, 0) or 0), 2),
        })
    return rows


@router.post("/evaluate", response_model=offer_schemas.OfferEvaluateResponse)
def evaluate_offers(
    payload: offer_schemas.OfferEvaluateRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ids = {item.product_id for item in payload.items}
    products = {p.id: p for p in db.query(Product).filter(Product.id.in_(ids)).all()}
    missing = ids - set(products)
    if missing:
        raise HTTPException(status_code=404, detail=f"Products not found: {sorted(missing)}")

    customer = None
    if payload.customer_id is not None:
        customer = db.query(Customer).filter(Customer.id == payload.customer_id).first()
        if not customer:
            raise HTTPException(status_code=404, detail="Customer not found")

    lines = []
    for item in payload.items:
        product = products[item.product_id]
        price = item.unit_price if item.unit_price is not None else product.price
        lines.append(CartLine(product_id=product.id, quantity=item.quantity, unit_price=price,
                              category_id=product.category_id))

    result = evaluate_cart(db, lines, customer)
    return {
        "cart_total": result.cart_total,
        "total_discount": result.total_discount,
        "final_total": round(result.cart_total - result.total_discount, 2),
        "applied_offers": [
            {"offer_id": o.offer_id, "name": o.name, "offer_type": o.offer_type, "discount": o.discount}
            for o in result.applied
        ],
    }


@router.get("/{offer_id}", response_model=offer_schemas.OfferOut)
def get_offer(offer_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return get_offer_or_404(db, offer_id)


@router.post("", response_model=offer_schemas.OfferOut, status_code=status.HTTP_201_CREATED)
def create_offer(
    payload: offer_schemas.OfferCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(manager_or_admin),
):
    data = payload.model_dump()
    data["offer_type"] = payload.offer_type.value
    offer = Offer(**data, created_by=current_user.id, usage_count=0)
    db.add(offer)
    db.commit()
    db.refresh(offer)
    write_log(db, user_id=current_user.id, action="OFFER_CREATE", resource="offers",
              status="SUCCESS", ip=client_ip(request), meta={"id": offer.id, "type": offer.offer_type})
    return offer


@router.put("/{offer_id}", response_model=offer_schemas.OfferOut)
def update_offer(
    offer_id: int,
    payload: offer_schemas.OfferUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(manager_or_admin),
):
    offer = get_offer_or_404(db, offer_id)
    changes = payload.model_dump(exclude_unset=True)
    if changes.get("offer_type") is not None:
        changes["offer_type"] = OfferType(changes["offer_type"]).value

    # Validate the record as it will look after the update
    merged = offer_schemas.OfferOut.model_validate(offer).model_dump()
    merged.update(changes)
    try:
        offer_schemas.OfferCreate.model_validate(merged)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    for key, value in changes.items():
        setattr(offer, key, value)
    db.commit()
    db.refresh(offer)
    write_log(db, user_id=current_user.id, action="OFFER_UPDATE", resource="offers",
              status="SUCCESS", ip=client_ip(request), meta={"id": offer.id, "fields": sorted(changes)})
    return offer


@router.patch("/{offer_id}/toggle", response_model=offer_schemas.OfferOut)
def toggle_offer(
    offer_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(manager_or_admin),
):
    offer = get_offer_or_404(db, offer_id)
    offer.active = not offer.active
    db.commit()
    db.refresh(offer)
    write_log(db, user_id=current_user.id, action="OFFER_TOGGLE", resource="offers",
              status="SUCCESS", ip=client_ip(request), meta={"id": offer.id, "active": offer.active})
    return offer


@router.delete("/{offer_id}")
def delete_offer(
    offer_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(manager_or_admin),
):
    offer = get_offer_or_404(db, offer_id)
    if offer.usages:
        raise HTTPException(status_code=409, detail="Offer has been used; deactivate it instead")
    db.delete(offer)
    db.commit()
    write_log(db, user_id=current_user.id, action="OFFER_DELETE", resource="offers",
              status="SUCCESS", ip=client_ip(request), meta={"id": offer_id})
    return {"message": "Offer deleted"}


@router.get("/{offer_id}/usage", response_model=List[offer_schemas.OfferUsageOut])
def offer_usage(
    offer_id: int,
    limit: int = Query(100, ge=1, le=1000),
    db: Session = Depends(get_db),
    current_user: User = Depends(manager_or_admin),
):
    get_offer_or_404(db, offer_id)
    return (
        db.query(OfferUsage)
        .filter(OfferUsage.offer_id == offer_id)
        .order_by(OfferUsage.used_at.desc(), OfferUsage.id.desc())
        .limit(limit)
        .all()
    )
