from pydantic import BaseModel, Field, validator
from typing import List, Optional
from datetime import date
from decimal import Decimal

DISCOUNT_TYPES = ("percentage", "fixed")

class DiscountWindow(BaseModel):
    discount_type: str = Field(..., description="Either 'percentage' or 'fixed'")
    discount_value: Decimal = Field(..., ge=0)
    start_date: date
    end_date: date
    description: Optional[str] = Field(None, max_length=255)

    @validator('discount_type')
    def validate_discount_type(cls, v):
        v = v.strip().lower()
        if v not in DISCOUNT_TYPES:
            raise ValueError(f"Discount type must be one of: {', '.join(DISCOUNT_TYPES)}")
        return v

    @validator('end_date')
    def validate_end_date(cls, v, values):
        start = values.get('start_date')
        if start and v < start:
            raise ValueError('End date cannot be before start date')
        return v

class DiscountCreate(DiscountWindow):
    product_id: int
    status: Optional[str] = "active"

class DiscountUpdate(DiscountWindow):
    product_id: int
    status: Optional[str] = None

class EventCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None

class EventDiscountCreate(DiscountWindow):
    event_id: int
    product_ids: List[int] = Field(default=[])
    status: Optional[str] = "active"
