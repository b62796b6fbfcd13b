from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
import logging

from core.exceptions import ResourceNotFoundError
from core.response import deleted_response, success_response
from core.tenant import get_org_mail
from database.connection import get_db
from schemas.catalog import CategoryCreate, CategoryUpdate, SubCategoryCreate, SubCategoryUpdate
from schemas.product import StatusUpdate
from services.category import (
    check_sub_category_in_use,
    create_category,
    create_sub_category,
    delete_category,
    delete_sub_category,
    get_all_categories,
    get_top_selling_categories,
    toggle_category_status,
    update_category,
    update_sub_category,
)

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/")
def list_categories(org_mail: str = Depends(get_org_mail), db: Session = Depends(get_db)):
    """Get all categories with nested subcategories"""
    return get_all_categories(db, org_mail)

@router.get("/top-selling")
def top_selling_categories(org_mail: str = Depends(get_org_mail), db: Session = Depends(get_db)):
    return get_top_selling_categories(db, org_mail)

@router.post("/", status_code=status.HTTP_201_CREATED)
def add_category(payload: CategoryCreate, org_mail: str = Depends(get_org_mail), db: Session = Depends(get_db)):
    category = create_category(db, org_mail, payload)
    return success_response(data=category, message="Category created successfully")

@router.put("/{category_id}")
def edit_category(
    category_id: int,
    payload: CategoryUpdate,
    org_mail: str = Depends(get_org_mail),
    db: Session = Depends(get_db)
):
    category = update_category(db, org_mail, category_id, payload)
    if not category:
        raise ResourceNotFoundError("Category", category_id)
    return success_response(data=category, message="Category updated successfully")

@router.patch("/{category_id}/status")
def edit_category_status(
    category_id: int,
    payload: StatusUpdate,
    org_mail: str = Depends(get_org_mail),
    db: Session = Depends(get_db)
):
    if not toggle_category_status(db, org_mail, category_id, payload.status):
        raise ResourceNotFoundError("Category", category_id)
    return success_response(data={"id": category_id, "status": payload.status}, message="Category status updated")

@router.delete("/{category_id}")
def remove_category(category_id: int, org_mail: str = Depends(get_org_mail), db: Session = Depends(get_db)):
    if not delete_category(db, org_mail, category_id):
        raise ResourceNotFoundError("Category", category_id)
    return deleted_response("Category", category_id)

@router.post("/{category_id}/subcategories", status_code=status.HTTP_201_CREATED)
def add_sub_category(
    category_id: int,
    payload: SubCategoryCreate,
    org_mail: str = Depends(get_org_mail),
    db: Session = Depends(get_db)
):
    sub_category = create_sub_category(db, org_mail, category_id, payload)
    return success_response(data=sub_category, message="Subcategory created successfully")

@router.put("/{category_id}/subcategories/{sub_category_id}")
def edit_sub_category(
    category_id: int,
    sub_category_id: int,
    payload: SubCategoryUpdate,
    org_mail: str = Depends(get_org_mail),
    db: Session = Depends(get_db)
):
    sub_category = update_sub_category(db, org_mail, category_id, sub_category_id, payload)
    return success_response(data=sub_category, message="Subcategory updated successfully")

@router.get("/subcategories/{sub_category_id}/in-use")
def sub_category_in_use(sub_category_id: int, org_mail: str = Depends(get_org_mail), db: Session = Depends(get_db)):
    return {"id": sub_category_id, "in_use": check_sub_category_in_use(db, org_mail, sub_category_id)}

@router.delete("/subcategories/{sub_category_id}")
def remove_sub_category(sub_category_id: int, org_mail: str = Depends(get_org_mail), db: Session = Depends(get_db)):
    if not delete_sub_category(db, org_mail, sub_category_id):
        raise ResourceNotFoundError("Subcategory", sub_category_id)
    return deleted_response("Subcategory", sub_category_id)
