from pydantic import BaseModel, Field
from typing import List, Optional


class RepackQuoteRequest(BaseModel):
    bulk_product_id: int
    unit_weight: float = Field(ge=1, description="Weight of one repacked unit in grams")
    repack_quantity: int = Field(ge=1)


class RepackQuote(BaseModel):
    bulk_product_id: int
    bulk_weight_g: float
    cost_per_gram: float
    unit_cost: float
    unit_price: float
    unit_mrp: Optional[float] = None
    total_weight_g: float
    bulk_units_needed: int
    bulk_stock: int
    sufficient_stock: bool


# Creates the repacked child product; prices default to the quote
class RepackCreate(RepackQuoteRequest):
    name: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    mrp: Optional[float] = Field(None, ge=0)
    cost: Optional[float] = Field(None, ge=0)
    barcode: Optional[str] = None
    notes: Optional[str] = None


class RepackedProduct(BaseModel):
    id: int
    name: str
    sku: str
    price: float
    mrp: Optional[float] = None
    cost: float
    weight: Optional[float] = None
    weight_unit: Optional[str] = None
    stock_quantity: int
    bulk_product_id: int
    bulk_product_name: Optional[str] = None
    bulk_product_sku: Optional[str] = None


class RepackResult(BaseModel):
    product: RepackedProduct
    quote: RepackQuote
    bulk_stock_remaining: int


class RepackPage(BaseModel):
    items: List[RepackedProduct]
    total: int
