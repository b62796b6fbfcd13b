from pydantic import BaseModel, Field
from typing import Optional

# Required descriptions are enforced in the services so that direct callers
# get the same ValidationError as HTTP clients.

class CategoryCreate(BaseModel):
    description: Optional[str] = Field(None, max_length=255)
    image_icon_url: Optional[str] = Field(None, max_length=500)

class CategoryUpdate(CategoryCreate):
    pass

class SubCategoryCreate(BaseModel):
    description: Optional[str] = Field(None, max_length=255)

class SubCategoryUpdate(SubCategoryCreate):
    pass

class BrandCreate(BaseModel):
    brand_name: Optional[str] = Field(None, max_length=255)
    brand_image_url: Optional[str] = Field(None, max_length=500)
    short_description: Optional[str] = None
    user_id: Optional[int] = None

class BrandUpdate(BrandCreate):
    pass
