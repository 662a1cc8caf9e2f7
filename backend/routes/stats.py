# backend/routes/stats.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from sqlalchemy import func
from datetime import datetime, date, timedelta
from typing import List

from database import get_db
from utils.tokenJWT import get_current_user
from models.users import User
from models.sale import Sale, SaleItem
from models.product import Product
from models.customer import Customer
import schemas.reports as report_schemas

router = APIRouter(
    prefix="/dashboard",
    tags=["Dashboard"]
)


def day_key(value) -> str:
    # func.date() gives a string on SQLite and a date on PostgreSQL
    return str(value)[:10]


# === Endpoint 1: Dashboard Summary ===

@router.get("/stats", response_model=report_schemas.DashboardStats)
def get_dashboard_stats(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    today_start = datetime.combine(date.today(), datetime.min.time())
    month_start = today_start.replace(day=1)

    today_sales, today_revenue = (
        db.query(func.count(Sale.id), func.coalesce(func.sum(Sale.total), 0))
        .filter(Sale.created_at >= today_start)
        .one()
    )
    month_revenue = (
        db.query(func.coalesce(func.sum(Sale.total), 0))
        .filter(Sale.created_at >= month_start)
        .scalar()
    )

    active_products = db.query(Product).filter(Product.active.is_(True))
    low_stock_count = active_products.filter(Product.stock_quantity <= Product.alert_threshold).count()

    return {
        "today_sales": today_sales or 0,
        "today_revenue": round(float(today_revenue or 0), 2),
        "month_revenue": round(float(month_revenue or 0), 2),
        "total_products": active_products.count(),
        "low_stock_count": low_stock_count,
        "total_customers": db.query(Customer).filter(Customer.active.is_(True)).count(),
    }


# === Endpoint 2: Chart Data ===

@router.get("/sales-chart", response_model=List[report_schemas.SalesChartPoint])
def get_sales_chart(
    days: int = Query(7, ge=1, le=366),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    today = date.today()
    first_day = today - timedelta(days=days - 1)

    # Aggregate revenue by date
    sales_data = (
        db.query(
            func.date(Sale.created_at).label("date"),
            func.count(Sale.id).label("orders"),
            func.sum(Sale.total).label("revenue")
        )
        .filter(Sale.created_at >= datetime.combine(first_day, datetime.min.time()))
        .group_by(func.date(Sale.created_at))
        .all()
    )
    by_date = {day_key(row.date): row for row in sales_data}

    # Fill missing dates with zero revenue
    points = []
    for i in range(days):
        current_date = first_day + timedelta(days=i)
        row = by_date.get(current_date.isoformat())
        points.append({
            "date": current_date,
            "orders": row.orders if row else 0,
            "revenue": round(float(row.revenue or 0), 2) if row else 0.0,
        })
    return points


# === Endpoint 3: Top Products ===

@router.get("/top-products", response_model=List[report_schemas.TopProduct])
def get_top_products(
    limit: int = Query(5, ge=1, le=50),
    days: int = Query(30, ge=1, le=366),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    since = datetime.combine(date.today() - timedelta(days=days - 1), datetime.min.time())
    sold = SaleItem.quantity - func.coalesce(SaleItem.returned_quantity, 0)

    # Net quantity sold per product, best sellers first
    rows = (
        db.query(
            SaleItem.product_id.label("product_id"),
            SaleItem.product_name.label("name"),
            func.sum(sold).label("quantity"),
            func.sum(sold * SaleItem.unit_price).label("revenue"),
        )
        .join(Sale, Sale.id == SaleItem.sale_id)
        .filter(Sale.created_at >= since)
        .group_by(SaleItem.product_id, SaleItem.product_name)
        .order_by(func.sum(sold).desc())
        .limit(limit)
        .all()
    )
    return [
        {"product_id": r.product_id, "name": r.name, "quantity": int(r.quantity or 0),
         "revenue": round(float(r.revenue or 0), 2)}
        for r in rows
        if (r.quantity or 0) > 0
    ]
