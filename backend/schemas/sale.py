# schemas/sale.py
from pydantic import BaseModel, Field, ConfigDict
from datetime import datetime
from typing import List, Literal, Optional

from schemas.cart import AppliedOfferOut

PaymentMethodIn = Literal["cash", "card", "upi", "split"]


class SaleItemCreate(BaseModel):
    product_id: int
    quantity: int = Field(ge=1)


class PaymentDetails(BaseModel):
    payment_method: PaymentMethodIn = "cash"
    amount_tendered: Optional[float] = Field(None, ge=0)
    notes: Optional[str] = None
    apply_offers: bool = True


# Checkout of the held cart
class CheckoutRequest(PaymentDetails):
    customer_id: Optional[int] = None


# Direct sale with explicit items
class SaleCreate(PaymentDetails):
    items: List[SaleItemCreate] = Field(min_length=1)
    customer_id: Optional[int] = None


class SaleItemOut(BaseModel):
    id: int
    product_id: int
    product_name: str
    sku: Optional[str] = None
    quantity: int
    returned_quantity: int
    unit_price: float
    mrp: Optional[float] = None
    subtotal: float

    model_config = ConfigDict(from_attributes=True)


class SaleOut(BaseModel):
    id: int
    order_number: Optional[str] = None
    user_id: int
    cashier_name: Optional[str] = None
    customer_id: Optional[int] = None
    customer_name: Optional[str] = None
    subtotal: float
    discount: float
    tax_rate: float
    tax: float
    total: float
    payment_method: str
    amount_tendered: Optional[float] = None
    change_due: Optional[float] = None
    loyalty_points_earned: int
    status: str
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    items: List[SaleItemOut] = []
    applied_offers: List[AppliedOfferOut] = []

    model_config = ConfigDict(from_attributes=True)


class SalePage(BaseModel):
    items: List[SaleOut]
    total: int
    page: int
    page_size: int


class ReturnLine(BaseModel):
    item_id: int
    quantity: int = Field(ge=1)


class SaleReturn(BaseModel):
    items: List[ReturnLine] = Field(min_length=1)
    reason: Optional[str] = None
