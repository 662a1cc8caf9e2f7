from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import datetime


# Schema for displaying shop details
class BusinessSettingsOut(BaseModel):
    id: int
    business_name: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    gstin: Optional[str] = None
    tax_number: Optional[str] = None
    state: Optional[str] = None
    state_code: Optional[str] = None
    currency_symbol: Optional[str] = None
    receipt_footer: Optional[str] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


# Schema for updating shop information
class BusinessSettingsUpdate(BaseModel):
    business_name: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    gstin: Optional[str] = None
    tax_number: Optional[str] = None
    state: Optional[str] = None
    state_code: Optional[str] = None
    currency_symbol: Optional[str] = None
    receipt_footer: Optional[str] = None
