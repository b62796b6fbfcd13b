from typing import Any, Dict, List, Optional
from passlib.context import CryptContext
from sqlalchemy.orm import Session
from database.base import row_to_dict
from models.customer import Customer
from schemas.customer import CustomerCreate, CustomerUpdate
import logging

logger = logging.getLogger(__name__)

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

def get_password_hash(password: str) -> str:
    """Hash a password."""
    return pwd_context.hash(password)

def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)

def _public(customer: Customer) -> Dict[str, Any]:
    data = row_to_dict(customer)
    data.pop("password", None)
    data.pop("org_mail", None)
    return data

def get_all_customers(db: Session, org_mail: str) -> List[Dict[str, Any]]:
    customers = db.query(Customer).filter(Customer.org_mail == org_mail).order_by(Customer.id).all()
    return [_public(c) for c in customers]

def get_customer_by_id(db: Session, org_mail: str, customer_id: int) -> Optional[Dict[str, Any]]:
    customer = db.query(Customer).filter(
        Customer.id == customer_id,
        Customer.org_mail == org_mail
    ).first()
    return _public(customer) if customer else None

def get_customer_by_email(db: Session, org_mail: str, email: str) -> Optional[Customer]:
    """Get the full customer row, password hash included, for authentication"""
    return db.query(Customer).filter(
        Customer.email == email,
        Customer.org_mail == org_mail
    ).first()

def verify_customer_password(db: Session, org_mail: str, email: str, password: str) -> Optional[Dict[str, Any]]:
    customer = get_customer_by_email(db, org_mail, email)
    if not customer or not verify_password(password, customer.password):
        return None
    return _public(customer)

def add_customer(db: Session, org_mail: str, customer_data: CustomerCreate) -> int:
    """Insert a customer and return the new id"""
    try:
        values = customer_data.dict(exclude={"password"})
        customer = Customer(
            **values,
            password=get_password_hash(customer_data.password),
            org_mail=org_mail
        )
        db.add(customer)
        db.commit()
        db.refresh(customer)
    except Exception as e:
        db.rollback()
        logger.error(f"Error creating customer: {str(e)}")
        raise

    logger.info(f"Customer created: {customer.id} [{org_mail}]")
    return customer.id

def update_customer(db: Session, org_mail: str, customer_id: int, customer_data: CustomerUpdate) -> bool:
    """Update only the supplied fields; returns False when nothing matched"""
    updates = customer_data.dict(exclude_unset=True)
    if not updates:
        return False

    if updates.get("password") is not None:
        updates["password"] = get_password_hash(updates["password"])

    try:
        updated = db.query(Customer).filter(
            Customer.id == customer_id,
            Customer.org_mail == org_mail
        ).update(
            {getattr(Customer, field): value for field, value in updates.items()},
            synchronize_session=False
        )
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"Error updating customer {customer_id}: {str(e)}")
        raise

    logger.info(f"Customer updated: {customer_id} fields={sorted(updates)} [{org_mail}]")
    return updated > 0

def delete_customer(db: Session, org_mail: str, customer_id: int) -> bool:
    try:
        deleted = db.query(Customer).filter(
            Customer.id == customer_id,
            Customer.org_mail == org_mail
        ).delete(synchronize_session=False)
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"Error deleting customer {customer_id}: {str(e)}")
        raise
    return deleted > 0
