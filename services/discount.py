"""
Discount and event discount data access.

A discount is active when its status is ``active`` and today's calendar date
falls inside ``[start_date, end_date]``, both bounds inclusive. Bounds are the
first ten characters of the stored ``YYYY-MM-DD`` strings; a bound that is not
a real calendar date makes the discount inactive.

``is_discount_active`` is the predicate. ``active_window`` is its SQL
prefilter: a plain text comparison that keeps every active row and may also
let through rows with malformed bounds, so lookups run the predicate over
what it returns.
"""
import json
import logging
import re
from collections.abc import Mapping
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import and_, exists, func
from sqlalchemy.orm import Session

from core.exceptions import ResourceNotFoundError, ValidationError
from database.base import row_to_dict
from models.discount import Discount, Event, EventDiscount, EventHasProduct
from models.order import OrderHasProductVariation
from models.product import Product
from schemas.discount import DiscountCreate, DiscountUpdate, EventCreate, EventDiscountCreate

logger = logging.getLogger(__name__)

ACTIVE_STATUS = "active"
_ISO_DATE = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}")


def parse_discount_date(value: Any) -> Optional[date]:
    """Read a stored discount bound as a calendar date, ignoring any time part."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value)
    if not _ISO_DATE.match(text):
        return None
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def _field(discount: Any, name: str) -> Any:
    if isinstance(discount, Mapping):
        return discount.get(name)
    return getattr(discount, name, None)


def is_discount_active(discount: Any, today: Optional[date] = None) -> bool:
    """Check a discount (ORM row or dict) against the active window."""
    today = today or date.today()
    if _field(discount, "status") != ACTIVE_STATUS:
        return False
    start = parse_discount_date(_field(discount, "start_date"))
    end = parse_discount_date(_field(discount, "end_date"))
    if start is None or end is None:
        return False
    return start <= today <= end


def active_window(model, today: Optional[date] = None):
    """SQL prefilter for ``is_discount_active`` on ``Discount`` or ``EventDiscount``."""
    today_str = (today or date.today()).isoformat()
    return and_(
        model.status == ACTIVE_STATUS,
        func.substr(model.start_date, 1, 10) <= today_str,
        func.substr(model.end_date, 1, 10) >= today_str,
    )


def decode_product_ids(raw: Optional[str]) -> List[Any]:
    """Decode the JSON product id list stored on an event discount."""
    if not raw:
        return []
    try:
        value = json.loads(raw)
    except (TypeError, ValueError):
        logger.warning(f"Ignoring malformed event discount product ids: {raw!r}")
        return []
    return value if isinstance(value, list) else []


def _event_discount_to_dict(row: EventDiscount) -> Dict[str, Any]:
    return {
        "id": row.id,
        "event_id": row.event_id,
        "product_ids": decode_product_ids(row.product_ids),
        "description": row.description,
        "discount_type": row.discount_type,
        "discount_value": row.discount_value,
        "start_date": row.start_date,
        "end_date": row.end_date,
        "status": row.status,
    }


# ---------------------------
# Active discount lookups
# ---------------------------

def get_active_discounts_by_product_id(
    db: Session, org_mail: str, product_id: int, today: Optional[date] = None
) -> List[Dict[str, Any]]:
    """Get the discounts of a product that are active today"""
    discounts = db.query(Discount).filter(
        Discount.product_id == product_id,
        Discount.org_mail == org_mail,
        active_window(Discount, today)
    ).all()
    return [row_to_dict(d) for d in discounts if is_discount_active(d, today)]


def get_active_event_discounts_by_product_id(
    db: Session, org_mail: str, product_id: int, today: Optional[date] = None
) -> List[Dict[str, Any]]:
    """Get event discounts active today whose event is linked to the product"""
    rows = db.query(EventDiscount).join(
        EventHasProduct,
        and_(
            EventDiscount.event_id == EventHasProduct.event_id,
            EventHasProduct.org_mail == org_mail
        )
    ).filter(
        EventHasProduct.product_id == product_id,
        EventDiscount.org_mail == org_mail,
        active_window(EventDiscount, today)
    ).all()
    return [_event_discount_to_dict(r) for r in rows if is_discount_active(r, today)]


# ---------------------------
# Discount CRUD
# ---------------------------

def get_all_discounts(db: Session, org_mail: str) -> List[Dict[str, Any]]:
    """Get every discount with its product name and whether it was used in an order"""
    has_orders = exists().where(OrderHasProductVariation.discount_id == Discount.id)
    rows = db.query(
        Discount,
        Product.description.label("product_name"),
        has_orders.label("has_orders")
    ).join(
        Product, and_(Discount.product_id == Product.id, Product.org_mail == org_mail)
    ).filter(
        Discount.org_mail == org_mail
    ).order_by(Discount.created_at.desc(), Discount.id.desc()).all()

    discounts = []
    for discount, product_name, used in rows:
        data = row_to_dict(discount)
        data["product_name"] = product_name
        data["has_orders"] = bool(used)
        discounts.append(data)
    return discounts


def get_discounts_by_product_id(db: Session, org_mail: str, product_id: int) -> List[Dict[str, Any]]:
    """Get all discounts of a product, newest first, regardless of status"""
    discounts = db.query(Discount).filter(
        Discount.product_id == product_id,
        Discount.org_mail == org_mail
    ).order_by(Discount.created_at.desc(), Discount.id.desc()).all()
    return [row_to_dict(d) for d in discounts]


def get_discount_by_id(db: Session, org_mail: str, discount_id: int) -> Optional[Dict[str, Any]]:
    row = db.query(Discount, Product.description.label("product_name")).join(
        Product, and_(Discount.product_id == Product.id, Product.org_mail == org_mail)
    ).filter(
        Discount.id == discount_id,
        Discount.org_mail == org_mail
    ).first()
    if not row:
        return None
    discount, product_name = row
    data = row_to_dict(discount)
    data["product_name"] = product_name
    return data


def _ensure_product(db: Session, org_mail: str, product_id: int) -> None:
    found = db.query(Product.id).filter(
        Product.id == product_id,
        Product.org_mail == org_mail
    ).first()
    if not found:
        raise ResourceNotFoundError("Product", product_id)


def create_discount(db: Session, org_mail: str, discount_data: DiscountCreate) -> Dict[str, Any]:
    """Create a discount for a product; status defaults to active"""
    _ensure_product(db, org_mail, discount_data.product_id)
    try:
        discount = Discount(
            product_id=discount_data.product_id,
            description=discount_data.description,
            discount_type=discount_data.discount_type,
            discount_value=discount_data.discount_value,
            start_date=discount_data.start_date.isoformat(),
            end_date=discount_data.end_date.isoformat(),
            status=discount_data.status or ACTIVE_STATUS,
            org_mail=org_mail
        )
        db.add(discount)
        db.commit()
        db.refresh(discount)
    except Exception as e:
        db.rollback()
        logger.error(f"Error creating discount: {str(e)}")
        raise

    logger.info(f"Discount created: {discount.id} for product {discount.product_id} [{org_mail}]")
    return row_to_dict(discount)


def update_discount(
    db: Session, org_mail: str, discount_id: int, discount_data: DiscountUpdate
) -> Optional[Dict[str, Any]]:
    """Overwrite every field of a discount"""
    if not discount_data.status:
        raise ValidationError("Discount status is required", field="status")

    discount = db.query(Discount).filter(
        Discount.id == discount_id,
        Discount.org_mail == org_mail
    ).first()
    if not discount:
        return None

    _ensure_product(db, org_mail, discount_data.product_id)
    try:
        discount.product_id = discount_data.product_id
        discount.description = discount_data.description
        discount.discount_type = discount_data.discount_type
        discount.discount_value = discount_data.discount_value
        discount.start_date = discount_data.start_date.isoformat()
        discount.end_date = discount_data.end_date.isoformat()
        discount.status = discount_data.status
        db.commit()
        db.refresh(discount)
    except Exception as e:
        db.rollback()
        logger.error(f"Error updating discount {discount_id}: {str(e)}")
        raise

    logger.info(f"Discount updated: {discount_id} [{org_mail}]")
    return row_to_dict(discount)


def delete_discount(db: Session, org_mail: str, discount_id: int) -> bool:
    try:
        deleted = db.query(Discount).filter(
            Discount.id == discount_id,
            Discount.org_mail == org_mail
        ).delete(synchronize_session=False)
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"Error deleting discount {discount_id}: {str(e)}")
        raise

    if deleted:
        logger.info(f"Discount deleted: {discount_id} [{org_mail}]")
    return deleted > 0


# ---------------------------
# Events and event discounts
# ---------------------------

def create_event(db: Session, org_mail: str, event_data: EventCreate) -> Dict[str, Any]:
    try:
        event = Event(name=event_data.name, description=event_data.description, org_mail=org_mail)
        db.add(event)
        db.commit()
        db.refresh(event)
    except Exception as e:
        db.rollback()
        logger.error(f"Error creating event: {str(e)}")
        raise

    logger.info(f"Event created: {event.id} [{org_mail}]")
    return row_to_dict(event)


def create_event_discount(db: Session, org_mail: str, discount_data: EventDiscountCreate) -> Dict[str, Any]:
    """Create an event discount and link each listed product to the event"""
    event = db.query(Event).filter(
        Event.id == discount_data.event_id,
        Event.org_mail == org_mail
    ).first()
    if not event:
        raise ResourceNotFoundError("Event", discount_data.event_id)

    product_ids = list(dict.fromkeys(discount_data.product_ids))
    try:
        discount = EventDiscount(
            event_id=event.id,
            product_ids=json.dumps([str(pid) for pid in product_ids]),
            description=discount_data.description,
            discount_type=discount_data.discount_type,
            discount_value=discount_data.discount_value,
            start_date=discount_data.start_date.isoformat(),
            end_date=discount_data.end_date.isoformat(),
            status=discount_data.status or ACTIVE_STATUS,
            org_mail=org_mail
        )
        db.add(discount)

        linked = {
            row.product_id for row in db.query(EventHasProduct.product_id).filter(
                EventHasProduct.event_id == event.id,
                EventHasProduct.org_mail == org_mail
            )
        }
        for product_id in product_ids:
            if product_id not in linked:
                db.add(EventHasProduct(event_id=event.id, product_id=product_id, org_mail=org_mail))

        db.commit()
        db.refresh(discount)
    except Exception as e:
        db.rollback()
        logger.error(f"Error creating event discount: {str(e)}")
        raise

    logger.info(f"Event discount created: {discount.id} for event {event.id} [{org_mail}]")
    return _event_discount_to_dict(discount)


def get_event_discounts(db: Session, org_mail: str) -> List[Dict[str, Any]]:
    rows = db.query(EventDiscount).filter(
        EventDiscount.org_mail == org_mail
    ).order_by(EventDiscount.created_at.desc(), EventDiscount.id.desc()).all()
    return [_event_discount_to_dict(r) for r in rows]
