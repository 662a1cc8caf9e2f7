# backend/schemas/product.py
from pydantic import BaseModel, Field, ConfigDict, field_validator
from datetime import datetime
from typing import Optional, List, Literal, Union

from utils.gst import normalize_rate

WeightUnit = Literal["g", "kg"]
Rate = Optional[Union[str, float]]


# Base configuration for ORM compatibility
class ORMBase(BaseModel):
    model_config = ConfigDict(from_attributes=True)


def _rate(v):
    if v is None:
        return None
    return normalize_rate(v)


def _sku(v):
    if v is None:
        return None
    v = str(v).strip().upper()
    if not v:
        raise ValueError("SKU cannot be empty")
    return v


# Category schemas
class CategoryCreate(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None


class CategoryOut(ORMBase):
    id: int
    name: str
    description: Optional[str] = None
    product_count: int = 0


# Shared base attributes for product entities
class ProductBase(ORMBase):
    name: str = Field(min_length=1)
    sku: str
    description: Optional[str] = None
    barcode: Optional[str] = None
    category_id: Optional[int] = None
    price: float = Field(ge=0)
    mrp: Optional[float] = Field(default=None, ge=0)
    cost: float = Field(default=0, ge=0)
    weight: Optional[float] = Field(default=None, gt=0)
    weight_unit: Optional[WeightUnit] = "kg"
    stock_quantity: int = Field(default=0, ge=0)
    alert_threshold: int = Field(default=5, ge=0)
    location: Optional[str] = None
    hsn_code: Optional[str] = None
    cgst_rate: Rate = None
    sgst_rate: Rate = None
    igst_rate: Rate = None
    cess_rate: Rate = None
    bulk_product_id: Optional[int] = None
    active: bool = True


# Schema for creating a new product
class ProductCreate(ProductBase):
    normalize_sku = field_validator("sku")(_sku)
    normalize_rates = field_validator("cgst_rate", "sgst_rate", "igst_rate", "cess_rate", mode="before")(_rate)


# Schema for partial product updates
class ProductEditRequest(ORMBase):
    """Schema for PUT/PATCH requests - all fields optional."""
    name: Optional[str] = Field(None, min_length=1)
    sku: Optional[str] = None
    description: Optional[str] = None
    barcode: Optional[str] = None
    category_id: Optional[int] = None
    price: Optional[float] = Field(None, ge=0)
    mrp: Optional[float] = Field(None, ge=0)
    cost: Optional[float] = Field(None, ge=0)
    weight: Optional[float] = Field(None, gt=0)
    weight_unit: Optional[WeightUnit] = None
    stock_quantity: Optional[int] = Field(None, ge=0)
    alert_threshold: Optional[int] = Field(None, ge=0)
    location: Optional[str] = None
    hsn_code: Optional[str] = None
    cgst_rate: Rate = None
    sgst_rate: Rate = None
    igst_rate: Rate = None
    cess_rate: Rate = None
    bulk_product_id: Optional[int] = None
    active: Optional[bool] = None

    normalize_sku = field_validator("sku")(_sku)
    normalize_rates = field_validator("cgst_rate", "sgst_rate", "igst_rate", "cess_rate", mode="before")(_rate)


# Full product representation including ID
class ProductOut(ORMBase):
    id: int
    name: str
    sku: str
    description: Optional[str] = None
    barcode: Optional[str] = None
    category_id: Optional[int] = None
    category_name: Optional[str] = None
    price: float
    mrp: Optional[float] = None
    cost: float = 0
    weight: Optional[float] = None
    weight_unit: Optional[str] = None
    stock_quantity: int
    alert_threshold: int
    is_low_stock: bool = False
    location: Optional[str] = None
    hsn_code: Optional[str] = None
    cgst_rate: Optional[str] = None
    sgst_rate: Optional[str] = None
    igst_rate: Optional[str] = None
    cess_rate: Optional[str] = None
    bulk_product_id: Optional[int] = None
    active: bool
    created_at: Optional[datetime] = None


# Paginated response for product listings
class ProductListPage(ORMBase):
    items: List[ProductOut]
    total: int
    page: int
    page_size: int
