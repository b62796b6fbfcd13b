from datetime import datetime
from sqlalchemy import Column, String, DateTime, ForeignKey, Integer
from sqlalchemy.orm import relationship
from database.base import Base

class ProductCategory(Base):
    __tablename__ = "Product_Category"

    id = Column("idProduct_Category", Integer, primary_key=True, index=True)
    description = Column("Description", String(255), nullable=False)
    image_icon_url = Column("Image_Icon_Url", String(500), nullable=True)
    status = Column("Status", String(20), default="active")
    org_mail = Column("orgmail", String(255), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    subcategories = relationship("SubCategory", back_populates="category")


class SubCategory(Base):
    __tablename__ = "Sub_Category"

    id = Column("idSub_Category", Integer, primary_key=True, index=True)
    description = Column("Description", String(255), nullable=False)
    category_id = Column(
        "Product_Category_idProduct_Category",
        Integer,
        ForeignKey("Product_Category.idProduct_Category"),
        nullable=False,
        index=True
    )
    org_mail = Column("orgmail", String(255), nullable=False, index=True)

    # Relationships
    category = relationship("ProductCategory", back_populates="subcategories")
