# schemas/tax.py
from pydantic import BaseModel, Field, ConfigDict, field_validator
from datetime import datetime
from typing import List, Literal, Optional, Union

from utils.gst import normalize_rate, is_valid_hsn

RateIn = Union[str, float]


def _rate(v):
    return None if v is None else normalize_rate(v)


def _hsn(v):
    if v is None:
        return None
    v = str(v).strip()
    if not is_valid_hsn(v):
        raise ValueError("HSN code must be 4 to 8 digits")
    return v


# GST slab schemas
class TaxCategoryCreate(BaseModel):
    name: str = Field(min_length=1)
    rate: RateIn
    hsn_code_range: Optional[str] = None
    description: Optional[str] = None
    is_active: bool = True

    check_rate = field_validator("rate", mode="before")(_rate)


class TaxCategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    rate: Optional[RateIn] = None
    hsn_code_range: Optional[str] = None
    description: Optional[str] = None
    is_active: Optional[bool] = None

    check_rate = field_validator("rate", mode="before")(_rate)


class TaxCategoryOut(BaseModel):
    id: int
    name: str
    rate: str
    hsn_code_range: Optional[str] = None
    description: Optional[str] = None
    is_active: bool

    model_config = ConfigDict(from_attributes=True)


# HSN master schemas
class HsnCodeCreate(BaseModel):
    hsn_code: str
    description: str = Field(min_length=1)
    tax_category_id: Optional[int] = None
    cgst_rate: RateIn = "0"
    sgst_rate: RateIn = "0"
    igst_rate: RateIn = "0"
    cess_rate: RateIn = "0"
    is_active: bool = True

    check_hsn = field_validator("hsn_code", mode="before")(_hsn)
    normalize_rates = field_validator("cgst_rate", "sgst_rate", "igst_rate", "cess_rate", mode="before")(_rate)


class HsnCodeUpdate(BaseModel):
    hsn_code: Optional[str] = None
    description: Optional[str] = Field(None, min_length=1)
    tax_category_id: Optional[int] = None
    cgst_rate: Optional[RateIn] = None
    sgst_rate: Optional[RateIn] = None
    igst_rate: Optional[RateIn] = None
    cess_rate: Optional[RateIn] = None
    is_active: Optional[bool] = None

    check_hsn = field_validator("hsn_code", mode="before")(_hsn)
    normalize_rates = field_validator("cgst_rate", "sgst_rate", "igst_rate", "cess_rate", mode="before")(_rate)


class HsnCodeOut(BaseModel):
    id: int
    hsn_code: str
    description: str
    tax_category_id: Optional[int] = None
    cgst_rate: str
    sgst_rate: str
    igst_rate: str
    cess_rate: str
    is_active: bool
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


# Result of the GST-rate lookup for one HSN code
class HsnRates(BaseModel):
    hsn_code: str
    description: Optional[str] = None
    cgst_rate: str
    sgst_rate: str
    igst_rate: str
    cess_rate: str
    total_rate: float
    source: Literal["master", "suggested"]


class TaxSettingsOut(BaseModel):
    id: int
    tax_calculation_method: str
    prices_include_tax: bool
    enable_multiple_tax_rates: bool
    company_gstin: Optional[str] = None
    company_state: Optional[str] = None
    company_state_code: Optional[str] = None
    default_tax_category_id: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)


class TaxSettingsUpdate(BaseModel):
    tax_calculation_method: Optional[Literal["exclusive", "inclusive"]] = None
    prices_include_tax: Optional[bool] = None
    enable_multiple_tax_rates: Optional[bool] = None
    company_gstin: Optional[str] = None
    company_state: Optional[str] = None
    company_state_code: Optional[str] = None
    default_tax_category_id: Optional[int] = None


class TaxCalculationRequest(BaseModel):
    amount: float = Field(ge=0)
    gst_rate: Optional[float] = Field(None, ge=0, le=100)
    hsn_code: Optional[str] = None
    cess_rate: float = Field(0, ge=0, le=100)
    supplier_state: Optional[str] = None
    buyer_state: Optional[str] = None
    inclusive: Optional[bool] = None


class TaxBreakdown(BaseModel):
    taxable_amount: float
    gst_rate: float
    cgst: float
    sgst: float
    igst: float
    cess: float
    total_tax: float
    total_amount: float
    is_inter_state: bool
