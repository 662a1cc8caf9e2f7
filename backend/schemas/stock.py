# backend/schemas/stock.py
from pydantic import BaseModel, Field, ConfigDict, model_validator
from datetime import datetime
from typing import List, Optional, Literal

# Adjustment types a user can record by hand
ManualAdjustmentType = Literal["add", "remove", "correction", "transfer"]

# Schema for recording a stock adjustment
class AdjustmentCreate(BaseModel):
    product_id: int
    adjustment_type: ManualAdjustmentType
    quantity: int = Field(ge=0)
    reason: Optional[str] = None
    notes: Optional[str] = None
    unit_cost: Optional[float] = Field(None, ge=0)
    batch_number: Optional[str] = None
    location_from: Optional[str] = None
    location_to: Optional[str] = None
    reference_document: Optional[str] = None

    @model_validator(mode="after")
    def check_quantity(self):
        if self.adjustment_type in ("add", "remove") and self.quantity == 0:
            raise ValueError("quantity must be greater than 0")
        if self.adjustment_type == "transfer" and not self.location_to:
            raise ValueError("location_to is required for transfers")
        return self

# Schema for returning adjustment details
class AdjustmentOut(BaseModel):
    id: int
    product_id: int
    product_name: Optional[str] = None
    sku: Optional[str] = None
    user_id: Optional[int] = None
    user_email: Optional[str] = None
    adjustment_type: str
    quantity: int
    previous_quantity: int
    new_quantity: int
    reason: Optional[str] = None
    notes: Optional[str] = None
    unit_cost: Optional[float] = None
    batch_number: Optional[str] = None
    location_from: Optional[str] = None
    location_to: Optional[str] = None
    reference_document: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

# Paginated response for the adjustment history
class AdjustmentPage(BaseModel):
    items: List[AdjustmentOut]
    total: int
    page: int
    page_size: int

# Stock overview row
class InventoryItem(BaseModel):
    product_id: int
    name: str
    sku: str
    category_name: Optional[str] = None
    stock_quantity: int
    alert_threshold: int
    cost: float
    stock_value: float
    location: Optional[str] = None
    is_low_stock: bool

class InventoryPage(BaseModel):
    items: List[InventoryItem]
    total: int
    page: int
    page_size: int
    total_stock_value: float
