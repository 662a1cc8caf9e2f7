# utils/gst.py
"""GST helpers: rate parsing, HSN validation and CGST/SGST/IGST split."""
import re
from decimal import Decimal, InvalidOperation
from typing import Optional

DEFAULT_GST_RATE = 18.0

# Fallback suggestions for HSN codes missing from the master table
SUGGESTED_RATES = {
    "1001": ("Wheat", 0.0),
    "1006": ("Rice", 0.0),
    "1701": ("Sugar", 0.0),
    "1704": ("Confectionery", 18.0),
    "1905": ("Bread & Bakery", 18.0),
    "2201": ("Water", 18.0),
    "2202": ("Soft Drinks", 28.0),
    "3004": ("Medicines", 12.0),
    "3401": ("Soap", 18.0),
    "4901": ("Books", 12.0),
    "6109": ("T-Shirts", 12.0),
    "6203": ("Men's Suits", 12.0),
    "6402": ("Footwear", 18.0),
    "8471": ("Computers", 18.0),
    "8517": ("Mobile Phones", 18.0),
    "8703": ("Cars", 28.0),
    "9404": ("Mattresses", 18.0),
}

_HSN_RE = re.compile(r"^\d{4,8}$")


def parse_rate(value) -> float:
    """Parse a decimal-string rate; raises ValueError outside [0, 100]."""
    if value is None or value == "":
        return 0.0
    try:
        rate = Decimal(str(value).strip())
    except InvalidOperation:
        raise ValueError(f"Invalid rate: {value!r}")
    if rate.is_nan() or rate < 0 or rate > 100:
        raise ValueError(f"Rate must be between 0 and 100: {value!r}")
    return float(rate)


def normalize_rate(value) -> str:
    """Canonical decimal string for storage ("9.00" -> "9", "2.50" -> "2.5")."""
    rate = Decimal(str(parse_rate(value)))
    text = format(rate.normalize(), "f")
    return text


def is_valid_hsn(code: Optional[str]) -> bool:
    return bool(code) and bool(_HSN_RE.match(code.strip()))


def suggest_rate(hsn_code: str) -> float:
    entry = SUGGESTED_RATES.get(hsn_code.strip()[:4])
    return entry[1] if entry else DEFAULT_GST_RATE


def split_rate(total_rate: float) -> dict:
    """Rates for an HSN entry from a slab: intra-state halves plus full IGST."""
    half = total_rate / 2
    return {
        "cgst_rate": normalize_rate(half),
        "sgst_rate": normalize_rate(half),
        "igst_rate": normalize_rate(total_rate),
        "cess_rate": "0",
    }


def calculate_breakdown(
    amount: float,
    gst_rate: float,
    cess_rate: float = 0.0,
    supplier_state: Optional[str] = None,
    buyer_state: Optional[str] = None,
    inclusive: bool = False,
) -> dict:
    """
    Intra-state supplies (same state) split the GST equally into CGST and SGST,
    inter-state supplies carry the whole rate as IGST. Cess is charged on top.
    With inclusive=True the amount already contains the tax.
    """
    is_inter_state = bool(supplier_state and buyer_state and supplier_state.strip().upper() != buyer_state.strip().upper())
    combined = gst_rate + cess_rate

    if inclusive:
        taxable = amount / (1 + combined / 100) if combined else amount
    else:
        taxable = amount

    gst_amount = taxable * gst_rate / 100
    cess = taxable * cess_rate / 100

    if is_inter_state:
        cgst, sgst, igst = 0.0, 0.0, gst_amount
    else:
        cgst = sgst = gst_amount / 2
        igst = 0.0

    total_tax = gst_amount + cess
    return {
        "taxable_amount": round(taxable, 2),
        "cgst": round(cgst, 2),
        "sgst": round(sgst, 2),
        "igst": round(igst, 2),
        "cess": round(cess, 2),
        "total_tax": round(total_tax, 2),
        "total_amount": round(taxable + total_tax, 2),
        "is_inter_state": is_inter_state,
    }
