# schemas/purchase.py
from pydantic import BaseModel, Field, ConfigDict
from datetime import datetime
from typing import List, Literal, Optional


# Input schema for a single purchase order line
class PurchaseItemCreate(BaseModel):
    product_id: int
    quantity: int = Field(gt=0)
    unit_cost: float = Field(ge=0)


# Input schema for creating a purchase order
class PurchaseCreate(BaseModel):
    supplier_id: int
    items: List[PurchaseItemCreate] = Field(min_length=1)
    expected_date: Optional[datetime] = None
    tax: float = Field(0, ge=0)
    freight: float = Field(0, ge=0)
    discount: float = Field(0, ge=0)
    notes: Optional[str] = None
    draft: bool = False


class PurchaseItemOut(BaseModel):
    id: int
    product_id: int
    product_name: Optional[str] = None
    quantity: int
    received_quantity: int
    unit_cost: float
    subtotal: float

    model_config = ConfigDict(from_attributes=True)


class PurchaseOut(BaseModel):
    id: int
    order_number: Optional[str] = None
    supplier_id: int
    supplier_name: Optional[str] = None
    order_date: Optional[datetime] = None
    expected_date: Optional[datetime] = None
    received_date: Optional[datetime] = None
    subtotal: float
    tax: float
    freight: float
    discount: float
    total: float
    status: str
    notes: Optional[str] = None
    draft: bool
    items: List[PurchaseItemOut] = []

    model_config = ConfigDict(from_attributes=True)


class PurchasePage(BaseModel):
    items: List[PurchaseOut]
    total: int
    page: int
    page_size: int


# Schema for moving a purchase through its lifecycle
class PurchaseStatusUpdate(BaseModel):
    status: Literal["pending", "ordered", "received", "cancelled"]


class ReceiveLine(BaseModel):
    item_id: int
    quantity: int = Field(gt=0)


# Partial receipt of explicit quantities
class PurchaseReceive(BaseModel):
    items: List[ReceiveLine] = Field(min_length=1)
