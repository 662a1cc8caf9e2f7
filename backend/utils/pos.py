# utils/pos.py
"""Cart arithmetic and stock checks shared by the held cart and direct sales."""
from datetime import datetime
from typing import Iterable, Optional, Tuple

from config import settings


class InsufficientStockError(ValueError):
    pass


def money(value: float) -> float:
    return round(float(value or 0), 2)


def line_total(quantity: float, unit_price: float) -> float:
    return money(quantity * unit_price)


def calculate_totals(
    lines: Iterable[Tuple[float, float]],
    discount: float = 0.0,
    tax_rate: Optional[float] = None,
) -> dict:
    """
    lines: (quantity, unit_price) pairs.

    subtotal = sum(quantity * unit_price)
    tax      = (subtotal - discount) * tax_rate
    total    = subtotal - discount + tax
    """
    rate = settings.POS_TAX_RATE if tax_rate is None else tax_rate
    subtotal = sum(q * p for q, p in lines)
    discount = min(max(discount or 0.0, 0.0), subtotal)
    taxable = subtotal - discount
    tax = taxable * rate
    return {
        "subtotal": money(subtotal),
        "discount": money(discount),
        "tax_rate": rate,
        "tax": money(tax),
        "total": money(taxable + tax),
    }


def check_stock(name: str, available: int, requested: int, in_cart: int = 0) -> None:
    """Raise when `requested` more units (on top of `in_cart`) exceed stock."""
    available = available or 0
    if available <= 0:
        raise InsufficientStockError(f"{name} is out of stock")
    if in_cart + requested > available:
        raise InsufficientStockError(f"Only {available} units available for {name}")


def change_due(total: float, amount_tendered: Optional[float]) -> Optional[float]:
    if amount_tendered is None:
        return None
    if amount_tendered + 1e-9 < total:
        raise ValueError(f"Amount tendered {amount_tendered:.2f} is less than total {total:.2f}")
    return money(amount_tendered - total)


def loyalty_points_for(total: float, threshold: Optional[float] = None, reward: Optional[float] = None) -> int:
    """Points earned for a purchase: `reward` points per full `threshold` spent."""
    if threshold and reward:
        return int(total // threshold * reward)
    return int(total // 100) * settings.LOYALTY_POINTS_PER_100


def document_number(prefix: str, record_id: int, when: Optional[datetime] = None) -> str:
    when = when or datetime.now()
    return f"{prefix}-{when:%Y%m%d}-{record_id:05d}"
