# utils/offers.py
"""
Offer engine.

Evaluates every active offer against a cart, then picks the offers to apply:
valid offers are ordered by priority (ascending) and discount (descending),
and a greedy pass keeps each offer whose discount still fits into what is
left of the cart total.
"""
from dataclasses import dataclass, field
from datetime import datetime, time
from typing import Dict, Iterable, List, Optional

from models.offer import OfferType


@dataclass
class CartLine:
    product_id: int
    quantity: int
    unit_price: float
    category_id: Optional[int] = None

    @property
    def total(self) -> float:
        return self.quantity * self.unit_price


@dataclass
class AppliedOffer:
    offer_id: int
    name: str
    offer_type: str
    priority: int
    discount: float
    points_spent: int = 0


@dataclass
class OfferResult:
    applied: List[AppliedOffer] = field(default_factory=list)
    cart_total: float = 0.0

    @property
    def total_discount(self) -> float:
        return round(sum(o.discount for o in self.applied), 2)


def _id_set(csv: Optional[str]) -> set:
    if not csv:
        return set()
    return {int(part) for part in csv.split(",") if part.strip().isdigit()}


def _parse_hhmm(value: str) -> time:
    hours, minutes = value.split(":")
    return time(int(hours), int(minutes))


def _naive(dt: datetime) -> datetime:
    return dt.replace(tzinfo=None) if dt.tzinfo else dt


def in_time_window(offer, now: datetime) -> bool:
    if not offer.time_start or not offer.time_end:
        return True
    start, end = _parse_hhmm(offer.time_start), _parse_hhmm(offer.time_end)
    current = now.time()
    if start <= end:
        return start <= current <= end
    # Window spans midnight, e.g. 22:00-02:00
    return current >= start or current <= end


def in_validity_period(offer, now: datetime) -> bool:
    if offer.valid_from and _naive(offer.valid_from) > _naive(now):
        return False
    if offer.valid_to and _naive(offer.valid_to) < _naive(now):
        return False
    return True


def is_available(offer, now: datetime, customer_uses: int = 0) -> bool:
    if not offer.active or not in_validity_period(offer, now):
        return False
    if offer.usage_limit is not None and (offer.usage_count or 0) >= offer.usage_limit:
        return False
    if offer.per_customer_limit is not None and customer_uses >= offer.per_customer_limit:
        return False
    return in_time_window(offer, now)


def _cap(offer, discount: float) -> float:
    if offer.max_discount_amount:
        return min(discount, offer.max_discount_amount)
    return discount


def buy_x_get_y_discount(offer, lines: Iterable[CartLine]) -> float:
    buy_qty = offer.buy_quantity or 1
    get_qty = offer.get_quantity or 1
    products = _id_set(offer.applicable_products)

    discount = 0.0
    for line in lines:
        if products and line.product_id not in products:
            continue
        # Every complete group of (buy + get) units gets `get` units free
        groups = line.quantity // (buy_qty + get_qty)
        free_units = groups * get_qty
        discount += free_units * line.unit_price * (offer.discount_value or 100) / 100
    return discount


def category_discount(offer, lines: Iterable[CartLine]) -> float:
    categories = _id_set(offer.applicable_categories)
    if not categories:
        return 0.0
    category_total = sum(l.total for l in lines if l.category_id in categories)
    return _cap(offer, category_total * offer.discount_value / 100)


def evaluate_offer(offer, lines: List[CartLine], cart_total: float, loyalty_points: Optional[int] = None) -> float:
    """Discount this offer would give on its own; 0 when it does not apply."""
    if cart_total < (offer.min_purchase_amount or 0):
        return 0.0

    kind = offer.offer_type
    if kind in (OfferType.PERCENTAGE.value, OfferType.TIME_BASED.value):
        discount = _cap(offer, cart_total * offer.discount_value / 100)
    elif kind == OfferType.FLAT_AMOUNT.value:
        discount = offer.discount_value
    elif kind == OfferType.BUY_X_GET_Y.value:
        discount = buy_x_get_y_discount(offer, lines)
    elif kind == OfferType.CATEGORY_BASED.value:
        discount = category_discount(offer, lines)
    elif kind == OfferType.LOYALTY_POINTS.value:
        if loyalty_points is None or loyalty_points < (offer.points_threshold or 0):
            return 0.0
        discount = offer.discount_value
    else:
        return 0.0

    return round(max(min(discount, cart_total), 0.0), 2)


def select_offers(offers, lines: List[CartLine], now: Optional[datetime] = None,
                  loyalty_points: Optional[int] = None,
                  customer_usage: Optional[Dict[int, int]] = None) -> OfferResult:
    now = now or datetime.now()
    customer_usage = customer_usage or {}
    cart_total = round(sum(l.total for l in lines), 2)
    result = OfferResult(cart_total=cart_total)
    if not lines:
        return result

    candidates: List[AppliedOffer] = []
    for offer in offers:
        if not is_available(offer, now, customer_usage.get(offer.id, 0)):
            continue
        discount = evaluate_offer(offer, lines, cart_total, loyalty_points)
        if discount <= 0:
            continue
        candidates.append(AppliedOffer(
            offer_id=offer.id, name=offer.name, offer_type=offer.offer_type,
            priority=offer.priority if offer.priority is not None else 999,
            discount=discount,
            points_spent=int(offer.points_threshold or 0) if offer.offer_type == OfferType.LOYALTY_POINTS.value else 0,
        ))

    candidates.sort(key=lambda o: (o.priority, -o.discount))

    remaining = cart_total
    points_left = loyalty_points or 0
    for candidate in candidates:
        if candidate.discount > remaining + 1e-9:
            continue
        # Loyalty offers draw on one balance; each one needs its own threshold
        if candidate.points_spent and candidate.points_spent > points_left:
            continue
        result.applied.append(candidate)
        remaining -= candidate.discount
        points_left -= candidate.points_spent
    return result
