from sqlalchemy.orm import Session
from sqlalchemy import func
from typing import Any, Dict, List
import logging

from core.exceptions import ReferentialIntegrityError, ResourceNotFoundError, ValidationError
from database.base import row_to_dict
from models.brand import ProductBrand
from models.product import Product
from schemas.catalog import BrandCreate, BrandUpdate

logger = logging.getLogger(__name__)

def _require_name(brand_data) -> str:
    if not brand_data.brand_name or not brand_data.brand_name.strip():
        raise ValidationError("Brand name is required", field="brand_name")
    return brand_data.brand_name.strip()

def _get_brand(db: Session, org_mail: str, brand_id: int) -> ProductBrand:
    brand = db.query(ProductBrand).filter(
        ProductBrand.id == brand_id,
        ProductBrand.org_mail == org_mail
    ).first()
    if not brand:
        raise ResourceNotFoundError("Brand", brand_id)
    return brand

def get_brands(db: Session, org_mail: str) -> List[Dict[str, Any]]:
    brands = db.query(ProductBrand).filter(
        ProductBrand.org_mail == org_mail
    ).order_by(ProductBrand.id).all()
    return [row_to_dict(b) for b in brands]

def create_brand(db: Session, org_mail: str, brand_data: BrandCreate) -> Dict[str, Any]:
    name = _require_name(brand_data)
    try:
        brand = ProductBrand(
            brand_name=name,
            brand_image_url=brand_data.brand_image_url,
            short_description=brand_data.short_description,
            user_id=brand_data.user_id,
            org_mail=org_mail
        )
        db.add(brand)
        db.commit()
        db.refresh(brand)
    except Exception as e:
        db.rollback()
        logger.error(f"Error creating brand: {str(e)}")
        raise

    logger.info(f"Brand created: {brand.brand_name} ({brand.id}) [{org_mail}]")
    return row_to_dict(brand)

def update_brand(db: Session, org_mail: str, brand_id: int, brand_data: BrandUpdate) -> Dict[str, Any]:
    """Update a brand; the image is kept unless a new one is supplied"""
    name = _require_name(brand_data)
    brand = _get_brand(db, org_mail, brand_id)
    try:
        brand.brand_name = name
        brand.short_description = brand_data.short_description
        if brand_data.brand_image_url:
            brand.brand_image_url = brand_data.brand_image_url
        db.commit()
        db.refresh(brand)
    except Exception as e:
        db.rollback()
        logger.error(f"Error updating brand {brand_id}: {str(e)}")
        raise

    logger.info(f"Brand updated: {brand_id} [{org_mail}]")
    return row_to_dict(brand)

def delete_brand(db: Session, org_mail: str, brand_id: int) -> None:
    _get_brand(db, org_mail, brand_id)

    in_use = db.query(func.count(Product.id)).filter(
        Product.brand_id == brand_id,
        Product.org_mail == org_mail
    ).scalar()
    if in_use > 0:
        logger.warning(f"Blocked delete of brand {brand_id}: used by {in_use} products [{org_mail}]")
        raise ReferentialIntegrityError(
            "Cannot delete brand as it is used in products",
            details={"brand_id": brand_id, "product_count": in_use}
        )

    try:
        db.query(ProductBrand).filter(
            ProductBrand.id == brand_id,
            ProductBrand.org_mail == org_mail
        ).delete(synchronize_session=False)
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"Error deleting brand {brand_id}: {str(e)}")
        raise

    logger.info(f"Brand deleted: {brand_id} [{org_mail}]")
