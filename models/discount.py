from datetime import datetime
from sqlalchemy import Column, String, DateTime, ForeignKey, Numeric, Integer, Text
from database.base import Base

# Start/end dates are stored as "YYYY-MM-DD" strings
class Discount(Base):
    __tablename__ = "Discounts"

    id = Column("idDiscounts", Integer, primary_key=True, index=True)
    product_id = Column("Product_idProduct", Integer, ForeignKey("Product.idProduct"), nullable=False, index=True)
    description = Column("Description", String(255), nullable=True)
    discount_type = Column("Discount_Type", String(20), nullable=False)
    discount_value = Column("Discount_Value", Numeric(10, 2), nullable=False)
    start_date = Column("Start_Date", String(20), nullable=False)
    end_date = Column("End_Date", String(20), nullable=False)
    status = Column("Status", String(20), default="active")
    org_mail = Column("orgmail", String(255), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)


class Event(Base):
    __tablename__ = "Event"

    id = Column("idEvent", Integer, primary_key=True, index=True)
    name = Column("Event_Name", String(255), nullable=False)
    description = Column("Description", Text, nullable=True)
    status = Column("Status", String(20), default="active")
    org_mail = Column("orgmail", String(255), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)


class EventHasProduct(Base):
    __tablename__ = "Event_has_Product"

    event_id = Column("Event_idEvent", Integer, ForeignKey("Event.idEvent"), primary_key=True)
    product_id = Column("Product_idProduct", Integer, ForeignKey("Product.idProduct"), primary_key=True)
    org_mail = Column("orgmail", String(255), nullable=False, index=True)


class EventDiscount(Base):
    __tablename__ = "Event_Discounts"

    id = Column("idEvent_Discounts", Integer, primary_key=True, index=True)
    event_id = Column("Event_idEvent", Integer, ForeignKey("Event.idEvent"), nullable=False, index=True)
    product_ids = Column("Product_Ids", Text, nullable=True)  # JSON-encoded list
    description = Column("Description", String(255), nullable=True)
    discount_type = Column("Discount_Type", String(20), nullable=False)
    discount_value = Column("Discount_Value", Numeric(10, 2), nullable=False)
    start_date = Column("Start_Date", String(20), nullable=False)
    end_date = Column("End_Date", String(20), nullable=False)
    status = Column("Status", String(20), default="active")
    org_mail = Column("orgmail", String(255), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)
