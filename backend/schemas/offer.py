# schemas/offer.py
import re
from pydantic import BaseModel, Field, ConfigDict, model_validator, field_validator
from datetime import datetime
from typing import List, Optional, Union

from models.offer import OfferType
from schemas.cart import AppliedOfferOut

_HHMM = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")
PERCENT_TYPES = {OfferType.PERCENTAGE, OfferType.TIME_BASED, OfferType.CATEGORY_BASED}


def _id_list(v):
    """Accepts "1,2" or [1, 2]; stored as a comma separated string."""
    if v is None:
        return None
    if isinstance(v, (list, tuple)):
        parts = [str(x).strip() for x in v]
    else:
        parts = [p.strip() for p in str(v).split(",")]
    parts = [p for p in parts if p]
    for p in parts:
        if not p.isdigit():
            raise ValueError(f"Invalid id: {p}")
    return ",".join(parts) or None


def validate_offer_fields(data) -> None:
    """Type specific rules shared by create and (merged) update payloads."""
    kind = OfferType(data.offer_type)
    if kind in PERCENT_TYPES and not (0 < (data.discount_value or 0) <= 100):
        raise ValueError("discount_value must be between 0 and 100 for percentage offers")
    if kind == OfferType.FLAT_AMOUNT and (data.discount_value or 0) <= 0:
        raise ValueError("discount_value must be greater than 0")
    if kind == OfferType.BUY_X_GET_Y:
        if not data.buy_quantity or data.buy_quantity < 1 or not data.get_quantity or data.get_quantity < 1:
            raise ValueError("buy_quantity and get_quantity must be at least 1")
    if kind == OfferType.TIME_BASED:
        if not data.time_start or not data.time_end:
            raise ValueError("time_start and time_end are required for time based offers")
    if kind == OfferType.CATEGORY_BASED and not data.applicable_categories:
        raise ValueError("applicable_categories is required for category based offers")
    if kind == OfferType.LOYALTY_POINTS:
        if not data.points_threshold or not data.points_reward:
            raise ValueError("points_threshold and points_reward are required for loyalty offers")
    if data.valid_from and data.valid_to and data.valid_to < data.valid_from:
        raise ValueError("valid_to must be after valid_from")


class OfferFields(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    offer_type: Optional[OfferType] = None
    discount_value: Optional[float] = Field(None, ge=0)
    min_purchase_amount: Optional[float] = Field(None, ge=0)
    max_discount_amount: Optional[float] = Field(None, ge=0)
    buy_quantity: Optional[int] = None
    get_quantity: Optional[int] = None
    time_start: Optional[str] = None
    time_end: Optional[str] = None
    applicable_categories: Optional[Union[str, List[int]]] = None
    applicable_products: Optional[Union[str, List[int]]] = None
    points_threshold: Optional[float] = Field(None, gt=0)
    points_reward: Optional[float] = Field(None, gt=0)
    valid_from: Optional[datetime] = None
    valid_to: Optional[datetime] = None
    usage_limit: Optional[int] = Field(None, ge=1)
    per_customer_limit: Optional[int] = Field(None, ge=1)
    priority: Optional[int] = Field(None, ge=0)
    active: Optional[bool] = None

    @field_validator("time_start", "time_end")
    @classmethod
    def check_time(cls, v):
        if v is not None and not _HHMM.match(v):
            raise ValueError("time must be HH:MM")
        return v

    @field_validator("applicable_categories", "applicable_products", mode="before")
    @classmethod
    def join_ids(cls, v):
        return _id_list(v)


# Schema for creating an offer
class OfferCreate(OfferFields):
    name: str = Field(min_length=1)
    offer_type: OfferType
    discount_value: float = Field(0, ge=0)
    priority: int = Field(999, ge=0)
    active: bool = True

    @model_validator(mode="after")
    def check_type_fields(self):
        validate_offer_fields(self)
        return self


# Partial update; the merged record is validated in the route
class OfferUpdate(OfferFields):
    pass


class OfferOut(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    offer_type: str
    discount_value: float
    min_purchase_amount: Optional[float] = None
    max_discount_amount: Optional[float] = None
    buy_quantity: Optional[int] = None
    get_quantity: Optional[int] = None
    time_start: Optional[str] = None
    time_end: Optional[str] = None
    applicable_categories: Optional[str] = None
    applicable_products: Optional[str] = None
    points_threshold: Optional[float] = None
    points_reward: Optional[float] = None
    valid_from: Optional[datetime] = None
    valid_to: Optional[datetime] = None
    usage_limit: Optional[int] = None
    per_customer_limit: Optional[int] = None
    usage_count: int
    priority: int
    active: bool
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class EvaluateItem(BaseModel):
    product_id: int
    quantity: int = Field(ge=1)
    unit_price: Optional[float] = Field(None, ge=0)


class OfferEvaluateRequest(BaseModel):
    items: List[EvaluateItem] = Field(min_length=1)
    customer_id: Optional[int] = None


class OfferEvaluateResponse(BaseModel):
    cart_total: float
    total_discount: float
    final_total: float
    applied_offers: List[AppliedOfferOut]


class OfferUsageOut(BaseModel):
    id: int
    offer_id: int
    customer_id: Optional[int] = None
    sale_id: Optional[int] = None
    discount_amount: float
    used_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class OfferReportRow(BaseModel):
    offer_id: int
    name: str
    offer_type: str
    active: bool
    usage_count: int
    total_discount: float
