from pydantic import BaseModel, EmailStr, Field, validator
from typing import Optional
from datetime import date, datetime

class CustomerBase(BaseModel):
    first_name: Optional[str] = Field(None, max_length=100)
    full_name: str = Field(..., min_length=1, max_length=255)
    birthday: Optional[date] = None
    email: EmailStr
    mobile_no: Optional[str] = Field(None, max_length=20)
    address: Optional[str] = Field(None, max_length=500)
    city: Optional[str] = Field(None, max_length=100)
    country: Optional[str] = Field(None, max_length=100)
    status: str = Field(default="active", max_length=20)

    @validator('full_name')
    def validate_full_name(cls, v):
        if not v.strip():
            raise ValueError('Full name cannot be empty')
        return v.strip()

class CustomerCreate(CustomerBase):
    password: str = Field(..., min_length=6, max_length=72)

class CustomerUpdate(BaseModel):
    first_name: Optional[str] = Field(None, max_length=100)
    full_name: Optional[str] = Field(None, min_length=1, max_length=255)
    birthday: Optional[date] = None
    email: Optional[EmailStr] = None
    mobile_no: Optional[str] = Field(None, max_length=20)
    address: Optional[str] = Field(None, max_length=500)
    city: Optional[str] = Field(None, max_length=100)
    country: Optional[str] = Field(None, max_length=100)
    status: Optional[str] = Field(None, max_length=20)
    password: Optional[str] = Field(None, min_length=6, max_length=72)

class CustomerResponse(BaseModel):
    id: int
    first_name: Optional[str] = None
    full_name: str
    birthday: Optional[date] = None
    email: str
    mobile_no: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    status: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
