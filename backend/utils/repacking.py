# utils/repacking.py
"""Splitting a bulk product into smaller weighed packs."""
import math
import re
from datetime import datetime
from typing import Optional


def to_grams(weight: Optional[float], unit: Optional[str]) -> float:
    if not weight:
        return 0.0
    unit = (unit or "g").strip().lower()
    if unit in ("kg", "kgs", "kilogram", "kilograms"):
        return float(weight) * 1000
    if unit in ("g", "gm", "gms", "gram", "grams"):
        return float(weight)
    raise ValueError(f"Unsupported weight unit: {unit}")


def quote(bulk_price: float, bulk_cost: float, bulk_mrp: Optional[float],
          bulk_weight_g: float, unit_weight_g: float, repack_quantity: int) -> dict:
    """
    Proportional prices of one repacked unit plus how many bulk units are consumed.
    Prices are rounded to 2 decimals, cost per gram to 4.
    """
    if bulk_weight_g <= 0:
        raise ValueError("Bulk product has no weight")
    if unit_weight_g < 1:
        raise ValueError("Unit weight must be at least 1 gram")
    if repack_quantity < 1:
        raise ValueError("Repack quantity must be at least 1")

    ratio = unit_weight_g / bulk_weight_g
    cost_per_gram = (bulk_cost or 0) / bulk_weight_g
    total_weight = unit_weight_g * repack_quantity

    return {
        "bulk_weight_g": bulk_weight_g,
        "cost_per_gram": round(cost_per_gram, 4),
        "unit_cost": round(cost_per_gram * unit_weight_g, 2),
        "unit_price": round((bulk_price or 0) * ratio, 2),
        "unit_mrp": round(bulk_mrp * ratio, 2) if bulk_mrp else None,
        "total_weight_g": total_weight,
        "bulk_units_needed": math.ceil(total_weight / bulk_weight_g),
    }


def _weight_label(unit_weight_g: float) -> str:
    return f"{unit_weight_g:g}"


def child_sku(bulk_sku: str, unit_weight_g: float, when: Optional[datetime] = None) -> str:
    when = when or datetime.now()
    stamp = int(when.timestamp() * 1000)
    return f"{bulk_sku}-REPACK-{_weight_label(unit_weight_g)}G-{stamp}"


def child_name(bulk_name: str, unit_weight_g: float) -> str:
    weight = f"{_weight_label(unit_weight_g)}g"
    if re.search(r"\bbulk\b", bulk_name, flags=re.IGNORECASE):
        return re.sub(r"\bbulk\b", weight, bulk_name, flags=re.IGNORECASE)
    return f"{bulk_name} ({weight} Pack)"
