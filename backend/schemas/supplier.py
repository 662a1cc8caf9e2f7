from pydantic import BaseModel, Field, ConfigDict, EmailStr
from datetime import datetime
from typing import List, Optional


class SupplierBase(BaseModel):
    name: str = Field(min_length=1)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    gstin: Optional[str] = None
    contact_person: Optional[str] = None
    supplier_type: str = "regular"
    active: bool = True


class SupplierCreate(SupplierBase):
    pass


class SupplierUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    gstin: Optional[str] = None
    contact_person: Optional[str] = None
    supplier_type: Optional[str] = None
    active: Optional[bool] = None


class SupplierOut(SupplierBase):
    id: int
    email: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class SupplierPage(BaseModel):
    items: List[SupplierOut]
    total: int
    page: int
    page_size: int
