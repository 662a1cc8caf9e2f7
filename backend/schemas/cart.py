from pydantic import BaseModel, Field
from typing import List, Optional

# Request schema for adding an item to the held cart
class CartAddItem(BaseModel):
    product_id: int
    quantity: int = Field(1, ge=1)

# Request schema for updating cart item quantity
class CartUpdateItem(BaseModel):
    quantity: int = Field(ge=1)

# Response schema for a single cart line item
class CartItemOut(BaseModel):
    id: int
    product_id: int
    name: str
    sku: str
    quantity: int
    unit_price: float
    line_total: float
    available_stock: int

class AppliedOfferOut(BaseModel):
    offer_id: int
    name: str
    offer_type: str
    discount: float

# Response schema for the entire cart summary
class CartOut(BaseModel):
    id: Optional[int] = None
    customer_id: Optional[int] = None
    items: List[CartItemOut]
    item_count: int
    subtotal: float
    discount: float
    tax_rate: float
    tax: float
    total: float
    applied_offers: List[AppliedOfferOut] = []

# Attach a customer to the held cart (None detaches)
class CartCustomer(BaseModel):
    customer_id: Optional[int] = None
