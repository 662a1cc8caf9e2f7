# schemas/reports.py
from datetime import datetime, date
from typing import List, Optional
from pydantic import BaseModel

# Dashboard schemas
class DashboardStats(BaseModel):
    today_sales: int
    today_revenue: float
    month_revenue: float
    total_products: int
    low_stock_count: int
    total_customers: int

class SalesChartPoint(BaseModel):
    date: date
    orders: int
    revenue: float

class TopProduct(BaseModel):
    product_id: int
    name: str
    quantity: int
    revenue: float

# Schemas for sales performance summaries
class SalesSummaryItem(BaseModel):
    date: date
    orders: int
    subtotal: float
    discount: float
    tax: float
    total_amount: float

class SalesSummaryResponse(BaseModel):
    items: List[SalesSummaryItem]
    total_orders: int
    total_amount: float
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None

# GST collected per rate
class TaxReportRow(BaseModel):
    gst_rate: float
    taxable_amount: float
    cgst: float
    sgst: float
    igst: float
    total_tax: float

class TaxReportResponse(BaseModel):
    items: List[TaxReportRow]
    pos_tax_collected: float
    total_tax: float

# Stock value per category
class StockReportRow(BaseModel):
    category: str
    products: int
    units: int
    stock_value: float
    low_stock: int

class StockReportResponse(BaseModel):
    items: List[StockReportRow]
    total_value: float

# Purchases per supplier
class PurchaseReportRow(BaseModel):
    supplier_id: int
    supplier_name: str
    orders: int
    total_amount: float
    received_amount: float

class PurchaseReportResponse(BaseModel):
    items: List[PurchaseReportRow]
    total_amount: float
