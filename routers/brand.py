from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
import logging

from core.response import deleted_response, success_response
from core.tenant import get_org_mail
from database.connection import get_db
from schemas.catalog import BrandCreate, BrandUpdate
from services.brand import create_brand, delete_brand, get_brands, update_brand

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/")
def list_brands(org_mail: str = Depends(get_org_mail), db: Session = Depends(get_db)):
    return get_brands(db, org_mail)

@router.post("/", status_code=status.HTTP_201_CREATED)
def add_brand(payload: BrandCreate, org_mail: str = Depends(get_org_mail), db: Session = Depends(get_db)):
    brand = create_brand(db, org_mail, payload)
    return success_response(data=brand, message="Brand created successfully")

@router.put("/{brand_id}")
def edit_brand(brand_id: int, payload: BrandUpdate, org_mail: str = Depends(get_org_mail), db: Session = Depends(get_db)):
    brand = update_brand(db, org_mail, brand_id, payload)
    return success_response(data=brand, message="Brand updated successfully")

@router.delete("/{brand_id}")
def remove_brand(brand_id: int, org_mail: str = Depends(get_org_mail), db: Session = Depends(get_db)):
    delete_brand(db, org_mail, brand_id)
    return deleted_response("Brand", brand_id)
