# routes/reports.py
from collections import defaultdict
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import func
from sqlalchemy.orm import Session

from database import get_db
from utils.tokenJWT import manager_or_admin
from utils.gst import parse_rate, calculate_breakdown
from models.users import User
from models.product import Product
from models.sale import Sale, SaleItem
from models.purchase import Purchase, PurchaseStatus
from models.supplier import Supplier
from routes.logs import parse_date_bound
from routes.tax import get_tax_settings
from routes.stats import day_key
import schemas.reports as report_schemas

router = APIRouter(prefix="/reports", tags=["Reports"])


def _range(date_from: Optional[str], date_to: Optional[str]):
    fdt = parse_date_bound(date_from)
    tdt = parse_date_bound(date_to, end_of_day=True)
    if (date_from and not fdt) or (date_to and not tdt):
        raise HTTPException(status_code=400, detail="Dates must be YYYY-MM-DD or ISO datetime")
    return fdt, tdt


def product_gst_rate(product: Optional[Product]) -> float:
    """Combined GST slab of a product: CGST + SGST, or IGST when no split is stored."""
    if product is None:
        return 0.0
    intra = parse_rate(product.cgst_rate) + parse_rate(product.sgst_rate)
    return intra if intra else parse_rate(product.igst_rate)


# -----------------------------
# 1) Sales summary per day
# -----------------------------
@router.get("/sales-summary", response_model=report_schemas.SalesSummaryResponse)
def report_sales_summary(
    date_from: Optional[str] = Query(None, description="YYYY-MM-DD"),
    date_to: Optional[str] = Query(None, description="YYYY-MM-DD"),
    db: Session = Depends(get_db),
    current_user: User = Depends(manager_or_admin),
):
    fdt, tdt = _range(date_from, date_to)

    day = func.date(Sale.created_at)
    q = db.query(
        day.label("d"),
        func.count(Sale.id).label("orders"),
        func.coalesce(func.sum(Sale.subtotal), 0.0).label("subtotal"),
        func.coalesce(func.sum(Sale.discount), 0.0).label("discount"),
        func.coalesce(func.sum(Sale.tax), 0.0).label("tax"),
        func.coalesce(func.sum(Sale.total), 0.0).label("total_amount"),
    )
    if fdt:
        q = q.filter(Sale.created_at >= fdt)
    if tdt:
        q = q.filter(Sale.created_at <= tdt)

    rows = q.group_by(day).order_by(day.asc()).all()

    items = [
        {
            "date": day_key(r.d),
            "orders": r.orders,
            "subtotal": round(float(r.subtotal), 2),
            "discount": round(float(r.discount), 2),
            "tax": round(float(r.tax), 2),
            "total_amount": round(float(r.total_amount), 2),
        }
        for r in rows
    ]
    return {
        "items": items,
        "total_orders": sum(i["orders"] for i in items),
        "total_amount": round(sum(i["total_amount"] for i in items), 2),
        "date_from": fdt,
        "date_to": tdt,
    }


# -----------------------------
# 2) GST collected per rate
# -----------------------------
@router.get("/tax", response_model=report_schemas.TaxReportResponse)
def report_tax(
    date_from: Optional[str] = Query(None, description="YYYY-MM-DD"),
    date_to: Optional[str] = Query(None, description="YYYY-MM-DD"),
    db: Session = Depends(get_db),
    current_user: User = Depends(manager_or_admin),
):
    fdt, tdt = _range(date_from, date_to)
    inclusive = bool(get_tax_settings(db).prices_include_tax)

    q = db.query(SaleItem).join(Sale, Sale.id == SaleItem.sale_id)
    sales_q = db.query(func.coalesce(func.sum(Sale.tax), 0.0))
    if fdt:
        q = q.filter(Sale.created_at >= fdt)
        sales_q = sales_q.filter(Sale.created_at >= fdt)
    if tdt:
        q = q.filter(Sale.created_at <= tdt)
        sales_q = sales_q.filter(Sale.created_at <= tdt)

    # Net sold value per GST slab
    amounts = defaultdict(float)
    for item in q.all():
        sold = item.quantity - (item.returned_quantity or 0)
        if sold > 0:
            amounts[product_gst_rate(item.product)] += sold * item.unit_price

    items = []
    for rate in sorted(amounts):
        b = calculate_breakdown(amounts[rate], rate, inclusive=inclusive)
        items.append({
            "gst_rate": rate,
            "taxable_amount": b["taxable_amount"],
            "cgst": b["cgst"],
            "sgst": b["sgst"],
            "igst": b["igst"],
            "total_tax": b["total_tax"],
        })

    return {
        "items": items,
        "pos_tax_collected": round(float(sales_q.scalar() or 0), 2),
        "total_tax": round(sum(i["total_tax"] for i in items), 2),
    }


# -----------------------------
# 3) Stock value per category
# -----------------------------
@router.get("/stock", response_model=report_schemas.StockReportResponse)
def report_stock(db: Session = Depends(get_db), current_user: User = Depends(manager_or_admin)):
    groups = {}
    for p in db.query(Product).filter(Product.active.is_(True)).all():
        name = p.category_name or "Uncategorized"
        row = groups.setdefault(name, {"category": name, "products": 0, "units": 0, "stock_value": 0.0, "low_stock": 0})
        row["products"] += 1
        row["units"] += p.stock_quantity or 0
        row["stock_value"] += (p.stock_quantity or 0) * (p.cost or 0)
        if p.is_low_stock:
            row["low_stock"] += 1

    items = sorted(groups.values(), key=lambda r: r["category"])
    for row in items:
        row["stock_value"] = round(row["stock_value"], 2)
    return {"items": items, "total_value": round(sum(r["stock_value"] for r in items), 2)}


# -----------------------------
# 4) Purchases per supplier
# -----------------------------
@router.get("/purchases", response_model=report_schemas.PurchaseReportResponse)
def report_purchases(
    date_from: Optional[str] = Query(None, description="YYYY-MM-DD"),
    date_to: Optional[str] = Query(None, description="YYYY-MM-DD"),
    db: Session = Depends(get_db),
    current_user: User = Depends(manager_or_admin),
):
    fdt, tdt = _range(date_from, date_to)

    q = (
        db.query(Purchase)
        .join(Supplier, Supplier.id == Purchase.supplier_id)
        .filter(Purchase.status != PurchaseStatus.CANCELLED.value)
    )
    if fdt:
        q = q.filter(Purchase.order_date >= fdt)
    if tdt:
        q = q.filter(Purchase.order_date <= tdt)

    groups = {}
    for purchase in q.all():
        row = groups.setdefault(purchase.supplier_id, {
            "supplier_id": purchase.supplier_id,
            "supplier_name": purchase.supplier.name,
            "orders": 0,
            "total_amount": 0.0,
            "received_amount": 0.0,
        })
        row["orders"] += 1
        row["total_amount"] += purchase.total or 0
        row["received_amount"] += sum((i.received_quantity or 0) * i.unit_cost for i in purchase.items)

    items = sorted(groups.values(), key=lambda r: r["supplier_name"])
    for row in items:
        row["total_amount"] = round(row["total_amount"], 2)
        row["received_amount"] = round(row["received_amount"], 2)
    return {"items": items, "total_amount": round(sum(r["total_amount"] for r in items), 2)}
