from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List
import logging

from core.exceptions import ResourceNotFoundError
from core.response import deleted_response, success_response
from core.tenant import get_org_mail
from database.connection import get_db
from schemas.customer import CustomerCreate, CustomerResponse, CustomerUpdate
from services.customer import (
    add_customer,
    delete_customer,
    get_all_customers,
    get_customer_by_id,
    update_customer,
)

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/", response_model=List[CustomerResponse])
def list_customers(org_mail: str = Depends(get_org_mail), db: Session = Depends(get_db)):
    return get_all_customers(db, org_mail)

@router.get("/{customer_id}", response_model=CustomerResponse)
def get_customer(customer_id: int, org_mail: str = Depends(get_org_mail), db: Session = Depends(get_db)):
    customer = get_customer_by_id(db, org_mail, customer_id)
    if not customer:
        raise ResourceNotFoundError("Customer", customer_id)
    return customer

@router.post("/", status_code=status.HTTP_201_CREATED)
def create_customer(payload: CustomerCreate, org_mail: str = Depends(get_org_mail), db: Session = Depends(get_db)):
    customer_id = add_customer(db, org_mail, payload)
    return success_response(data={"id": customer_id}, message="Customer created successfully")

@router.put("/{customer_id}")
def edit_customer(
    customer_id: int,
    payload: CustomerUpdate,
    org_mail: str = Depends(get_org_mail),
    db: Session = Depends(get_db)
):
    if get_customer_by_id(db, org_mail, customer_id) is None:
        raise ResourceNotFoundError("Customer", customer_id)
    update_customer(db, org_mail, customer_id, payload)
    return success_response(data=get_customer_by_id(db, org_mail, customer_id), message="Customer updated successfully")

@router.delete("/{customer_id}")
def remove_customer(customer_id: int, org_mail: str = Depends(get_org_mail), db: Session = Depends(get_db)):
    if not delete_customer(db, org_mail, customer_id):
        raise ResourceNotFoundError("Customer", customer_id)
    return deleted_response("Customer", customer_id)
