from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
import logging

from core.exceptions import ResourceNotFoundError
from core.response import deleted_response, success_response
from core.tenant import get_org_mail
from database.connection import get_db
from schemas.discount import DiscountCreate, DiscountUpdate, EventCreate, EventDiscountCreate
from services.discount import (
    create_discount,
    create_event,
    create_event_discount,
    delete_discount,
    get_active_discounts_by_product_id,
    get_active_event_discounts_by_product_id,
    get_all_discounts,
    get_discount_by_id,
    get_discounts_by_product_id,
    get_event_discounts,
    update_discount,
)

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/")
def list_discounts(org_mail: str = Depends(get_org_mail), db: Session = Depends(get_db)):
    return get_all_discounts(db, org_mail)

@router.get("/product/{product_id}")
def product_discounts(product_id: int, org_mail: str = Depends(get_org_mail), db: Session = Depends(get_db)):
    return get_discounts_by_product_id(db, org_mail, product_id)

@router.get("/product/{product_id}/active")
def product_active_discounts(product_id: int, org_mail: str = Depends(get_org_mail), db: Session = Depends(get_db)):
    """Active product discounts and active event discounts of a product"""
    return {
        "discounts": get_active_discounts_by_product_id(db, org_mail, product_id),
        "event_discounts": get_active_event_discounts_by_product_id(db, org_mail, product_id),
    }

@router.get("/events")
def list_event_discounts(org_mail: str = Depends(get_org_mail), db: Session = Depends(get_db)):
    return get_event_discounts(db, org_mail)

@router.post("/events", status_code=status.HTTP_201_CREATED)
def add_event(payload: EventCreate, org_mail: str = Depends(get_org_mail), db: Session = Depends(get_db)):
    event = create_event(db, org_mail, payload)
    return success_response(data=event, message="Event created successfully")

@router.post("/events/discounts", status_code=status.HTTP_201_CREATED)
def add_event_discount(payload: EventDiscountCreate, org_mail: str = Depends(get_org_mail), db: Session = Depends(get_db)):
    discount = create_event_discount(db, org_mail, payload)
    return success_response(data=discount, message="Event discount created successfully")

@router.get("/{discount_id}")
def get_discount(discount_id: int, org_mail: str = Depends(get_org_mail), db: Session = Depends(get_db)):
    discount = get_discount_by_id(db, org_mail, discount_id)
    if not discount:
        raise ResourceNotFoundError("Discount", discount_id)
    return discount

@router.post("/", status_code=status.HTTP_201_CREATED)
def add_discount(payload: DiscountCreate, org_mail: str = Depends(get_org_mail), db: Session = Depends(get_db)):
    discount = create_discount(db, org_mail, payload)
    return success_response(data=discount, message="Discount created successfully")

@router.put("/{discount_id}")
def edit_discount(
    discount_id: int,
    payload: DiscountUpdate,
    org_mail: str = Depends(get_org_mail),
    db: Session = Depends(get_db)
):
    discount = update_discount(db, org_mail, discount_id, payload)
    if not discount:
        raise ResourceNotFoundError("Discount", discount_id)
    return success_response(data=discount, message="Discount updated successfully")

@router.delete("/{discount_id}")
def remove_discount(discount_id: int, org_mail: str = Depends(get_org_mail), db: Session = Depends(get_db)):
    if not delete_discount(db, org_mail, discount_id):
        raise ResourceNotFoundError("Discount", discount_id)
    return deleted_response("Discount", discount_id)
