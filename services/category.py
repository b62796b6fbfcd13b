from sqlalchemy.orm import Session
from sqlalchemy import and_, func, desc
from typing import Any, Dict, List, Optional
import logging

from core.exceptions import ReferentialIntegrityError, ResourceNotFoundError, ValidationError
from database.base import row_to_dict
from models.category import ProductCategory, SubCategory
from models.product import Product, ProductSubCategory
from schemas.catalog import CategoryCreate, CategoryUpdate, SubCategoryCreate, SubCategoryUpdate

logger = logging.getLogger(__name__)

TOP_SELLING_LIMIT = 6

def _require(value: Optional[str], message: str, field: str) -> str:
    if not value or not value.strip():
        raise ValidationError(message, field=field)
    return value.strip()

def get_all_categories(db: Session, org_mail: str) -> List[Dict[str, Any]]:
    """Get all categories with their subcategories nested"""
    categories = db.query(ProductCategory).filter(
        ProductCategory.org_mail == org_mail
    ).order_by(ProductCategory.id).all()

    result = []
    for category in categories:
        data = row_to_dict(category)
        subcategories = db.query(SubCategory).filter(
            SubCategory.category_id == category.id,
            SubCategory.org_mail == org_mail
        ).order_by(SubCategory.id).all()
        data["subcategories"] = [row_to_dict(sub) for sub in subcategories]
        result.append(data)
    return result

def get_top_selling_categories(db: Session, org_mail: str) -> List[Dict[str, Any]]:
    """Get the six categories whose products sold the most units"""
    total_sold = func.coalesce(func.sum(Product.sold_qty), 0).label("total_sold_qty")
    rows = db.query(
        ProductCategory.id,
        ProductCategory.description,
        ProductCategory.image_icon_url,
        total_sold
    ).outerjoin(
        SubCategory,
        and_(SubCategory.category_id == ProductCategory.id, SubCategory.org_mail == org_mail)
    ).outerjoin(
        ProductSubCategory,
        and_(ProductSubCategory.sub_category_id == SubCategory.id, ProductSubCategory.org_mail == org_mail)
    ).outerjoin(
        Product,
        and_(Product.id == ProductSubCategory.product_id, Product.org_mail == org_mail)
    ).filter(
        ProductCategory.org_mail == org_mail
    ).group_by(
        ProductCategory.id, ProductCategory.description, ProductCategory.image_icon_url
    ).order_by(desc("total_sold_qty"), ProductCategory.id).limit(TOP_SELLING_LIMIT).all()

    return [
        {
            "id": row.id,
            "category_name": row.description,
            "image_icon_url": row.image_icon_url,
            "total_sold_qty": int(row.total_sold_qty or 0),
        }
        for row in rows
    ]

def get_category_by_id(db: Session, org_mail: str, category_id: int) -> Optional[ProductCategory]:
    return db.query(ProductCategory).filter(
        ProductCategory.id == category_id,
        ProductCategory.org_mail == org_mail
    ).first()

def create_category(db: Session, org_mail: str, category_data: CategoryCreate) -> Dict[str, Any]:
    description = _require(category_data.description, "Category description is required", "description")
    try:
        category = ProductCategory(
            description=description,
            image_icon_url=category_data.image_icon_url,
            org_mail=org_mail
        )
        db.add(category)
        db.commit()
        db.refresh(category)
    except Exception as e:
        db.rollback()
        logger.error(f"Error creating category: {str(e)}")
        raise

    logger.info(f"Category created: {category.id} [{org_mail}]")
    return row_to_dict(category)

def update_category(
    db: Session, org_mail: str, category_id: int, category_data: CategoryUpdate
) -> Optional[Dict[str, Any]]:
    """Update a category; the icon is only replaced when a new one is given"""
    description = _require(category_data.description, "Category description is required", "description")
    category = get_category_by_id(db, org_mail, category_id)
    if not category:
        return None
    try:
        category.description = description
        if category_data.image_icon_url:
            category.image_icon_url = category_data.image_icon_url
        db.commit()
        db.refresh(category)
    except Exception as e:
        db.rollback()
        logger.error(f"Error updating category {category_id}: {str(e)}")
        raise

    logger.info(f"Category updated: {category_id} [{org_mail}]")
    return row_to_dict(category)

def toggle_category_status(db: Session, org_mail: str, category_id: int, status: Optional[str]) -> bool:
    status = _require(status, "Status is required", "status")
    try:
        updated = db.query(ProductCategory).filter(
            ProductCategory.id == category_id,
            ProductCategory.org_mail == org_mail
        ).update({ProductCategory.status: status}, synchronize_session=False)
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"Error updating category status {category_id}: {str(e)}")
        raise
    return updated > 0

def delete_category(db: Session, org_mail: str, category_id: int) -> bool:
    """Delete a category and its subcategories unless any subcategory is linked to a product"""
    sub_ids = [
        row.id for row in db.query(SubCategory.id).filter(
            SubCategory.category_id == category_id,
            SubCategory.org_mail == org_mail
        )
    ]
    for sub_id in sub_ids:
        if check_sub_category_in_use(db, org_mail, sub_id):
            logger.warning(f"Blocked delete of category {category_id}: subcategory {sub_id} in use [{org_mail}]")
            raise ReferentialIntegrityError(
                "Cannot delete category as a subcategory has already been added to a product",
                details={"sub_category_id": sub_id}
            )

    try:
        db.query(SubCategory).filter(
            SubCategory.category_id == category_id,
            SubCategory.org_mail == org_mail
        ).delete(synchronize_session=False)
        deleted = db.query(ProductCategory).filter(
            ProductCategory.id == category_id,
            ProductCategory.org_mail == org_mail
        ).delete(synchronize_session=False)
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"Error deleting category {category_id}: {str(e)}")
        raise

    logger.info(f"Category deleted: {category_id} [{org_mail}]")
    return deleted > 0

def create_sub_category(
    db: Session, org_mail: str, category_id: int, sub_category_data: SubCategoryCreate
) -> Dict[str, Any]:
    description = _require(sub_category_data.description, "Subcategory description is required", "description")
    if not get_category_by_id(db, org_mail, category_id):
        raise ResourceNotFoundError("Category", category_id)
    try:
        sub_category = SubCategory(description=description, category_id=category_id, org_mail=org_mail)
        db.add(sub_category)
        db.commit()
        db.refresh(sub_category)
    except Exception as e:
        db.rollback()
        logger.error(f"Error creating subcategory: {str(e)}")
        raise

    logger.info(f"Subcategory created: {sub_category.id} in category {category_id} [{org_mail}]")
    return row_to_dict(sub_category)

def update_sub_category(
    db: Session, org_mail: str, category_id: int, sub_category_id: int, sub_category_data: SubCategoryUpdate
) -> Dict[str, Any]:
    description = _require(sub_category_data.description, "Subcategory description is required", "description")
    if not get_category_by_id(db, org_mail, category_id):
        raise ResourceNotFoundError("Category", category_id)

    sub_category = db.query(SubCategory).filter(
        SubCategory.id == sub_category_id,
        SubCategory.category_id == category_id,
        SubCategory.org_mail == org_mail
    ).first()
    if not sub_category:
        raise ResourceNotFoundError("Subcategory", sub_category_id)

    try:
        sub_category.description = description
        db.commit()
        db.refresh(sub_category)
    except Exception as e:
        db.rollback()
        logger.error(f"Error updating subcategory {sub_category_id}: {str(e)}")
        raise
    return row_to_dict(sub_category)

def check_sub_category_in_use(db: Session, org_mail: str, sub_category_id: int) -> bool:
    """Check if a subcategory is linked to any product"""
    count = db.query(func.count()).select_from(ProductSubCategory).filter(
        ProductSubCategory.sub_category_id == sub_category_id,
        ProductSubCategory.org_mail == org_mail
    ).scalar()
    return count > 0

def delete_sub_category(db: Session, org_mail: str, sub_category_id: int) -> bool:
    if check_sub_category_in_use(db, org_mail, sub_category_id):
        logger.warning(f"Blocked delete of subcategory {sub_category_id}: linked to products [{org_mail}]")
        raise ReferentialIntegrityError(
            "Cannot delete subcategory as it is used in products",
            details={"sub_category_id": sub_category_id}
        )

    try:
        deleted = db.query(SubCategory).filter(
            SubCategory.id == sub_category_id,
            SubCategory.org_mail == org_mail
        ).delete(synchronize_session=False)
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"Error deleting subcategory {sub_category_id}: {str(e)}")
        raise

    logger.info(f"Subcategory deleted: {sub_category_id} [{org_mail}]")
    return deleted > 0
