from pydantic import BaseModel, Field, validator
from typing import Any, Dict, List, Optional
from decimal import Decimal

class ProductBase(BaseModel):
    description: str = Field(..., min_length=1, max_length=255, description="Product name shown in listings")
    brand_id: Optional[int] = Field(None, description="Product brand identifier")
    market_price: Decimal = Field(..., ge=0, description="Market price must be non-negative")
    selling_price: Decimal = Field(..., ge=0, description="Selling price must be non-negative")
    main_image_url: Optional[str] = Field(None, max_length=500)
    long_description: Optional[str] = None
    sih: int = Field(default=0, ge=0, description="Stock in hand")
    seasonal_offer: bool = False
    rush_delivery: bool = False
    for_you: bool = False

    @validator('description')
    def validate_description(cls, v):
        if not v or not v.strip():
            raise ValueError('Product description cannot be empty')
        return v.strip()

    @validator('seasonal_offer', 'rush_delivery', 'for_you', pre=True)
    def validate_flag(cls, v):
        # Form submissions send empty strings for unchecked boxes
        if v is None or v == "":
            return False
        return v

class ProductCreate(ProductBase):
    pass

class ProductUpdate(ProductBase):
    """Full scalar update; every required field must be present."""
    pass

class VariationIn(BaseModel):
    id: Optional[int] = Field(None, description="Present only when updating an existing variation")
    colour: Optional[str] = Field(None, alias="colorCode", max_length=50)
    size: Optional[str] = Field(None, max_length=50)
    quantity: int = Field(default=0, ge=0)

    class Config:
        populate_by_name = True

class FaqIn(BaseModel):
    id: Optional[int] = Field(None, description="Present only when updating an existing FAQ")
    question: str = Field(..., min_length=1)
    answer: Optional[str] = None

    @validator('question')
    def validate_question(cls, v):
        if not v.strip():
            raise ValueError('FAQ question cannot be empty')
        return v.strip()

class ProductAssociations(BaseModel):
    """Child collections attached to a create or update call.

    ``None`` means "leave this collection alone"; an empty list is an explicit
    request to clear it.
    """
    images: Optional[List[str]] = None
    deleted_images: Optional[List[str]] = None
    variations: Optional[List[VariationIn]] = None
    faqs: Optional[List[FaqIn]] = None
    sub_category_ids: Optional[List[int]] = None

    @validator('sub_category_ids', pre=True)
    def normalize_sub_category_ids(cls, v):
        if v is None:
            return v
        if not isinstance(v, list):
            raise ValueError('Subcategory ids must be a list')
        ids = []
        for item in v:
            if isinstance(item, dict):
                item = item.get('idSub_Category') or item.get('id')
            if item is None or item == "" or isinstance(item, bool):
                raise ValueError('Subcategory entries must carry an id')
            try:
                item = int(item)
            except (TypeError, ValueError):
                raise ValueError('Subcategory entries must carry an id')
            if item not in ids:
                ids.append(item)
        return ids

class CollectionChanges(BaseModel):
    inserted: List[int] = []
    updated: List[int] = []
    deleted: List[Any] = []

class ProductUpdateResult(BaseModel):
    product_id: int
    changes: Dict[str, CollectionChanges] = {}

class StatusUpdate(BaseModel):
    status: Optional[str] = None

class HistoryStatusUpdate(BaseModel):
    history_status: Optional[str] = None
