from datetime import datetime
from sqlalchemy import Column, String, Date, DateTime, Integer
from database.base import Base

class Customer(Base):
    __tablename__ = "Customer"

    id = Column("idCustomer", Integer, primary_key=True, index=True)
    first_name = Column("First_Name", String(100), nullable=True)
    full_name = Column("Full_Name", String(255), nullable=False)
    birthday = Column("Birthday", Date, nullable=True)
    email = Column("Email", String(255), nullable=False, index=True)
    mobile_no = Column("Mobile_No", String(20), nullable=True)
    address = Column("Address", String(500), nullable=True)
    city = Column("City", String(100), nullable=True)
    country = Column("Country", String(100), nullable=True)
    status = Column("Status", String(20), default="active")
    password = Column("Password", String(255), nullable=False)  # bcrypt hash
    org_mail = Column("orgmail", String(255), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
