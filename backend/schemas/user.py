from pydantic import BaseModel, EmailStr, Field, ConfigDict, field_validator
from datetime import datetime
from typing import List, Literal, Optional

Role = Literal["admin", "manager", "cashier"]

# Shared properties for user models
class UserBase(BaseModel):
    email: EmailStr

# Schema for user authentication credentials
class UserLogin(UserBase):
    password: str

# Schema for staff registration requests; new accounts start as cashiers
class UserCreate(UserBase):
    password: str = Field(min_length=6)
    name: str = Field(min_length=1)

# Output schema for user profile details
class UserResponse(UserBase):
    id: int
    name: str
    role: str
    active: bool = True
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

# Schema for JWT authentication token response
class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: Optional[UserResponse] = None

# Schema for administrative role updates
class RoleUpdate(BaseModel):
    role: Role

    @field_validator("role", mode="before")
    @classmethod
    def lower(cls, v):
        return v.lower() if isinstance(v, str) else v

# Schema for activating / deactivating an account
class StatusUpdate(BaseModel):
    active: bool

class UsersPage(BaseModel):
    items: List[UserResponse]
    total: int
    page: int
    page_size: int
