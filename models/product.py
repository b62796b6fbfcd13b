from datetime import datetime
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Numeric, Integer, Text
from sqlalchemy.orm import relationship
from database.base import Base

class Product(Base):
    __tablename__ = "Product"

    id = Column("idProduct", Integer, primary_key=True, index=True)
    description = Column("Description", String(255), nullable=False)
    brand_id = Column("Product_Brand_idProduct_Brand", Integer, ForeignKey("Product_Brand.idProduct_Brand"), nullable=True)
    market_price = Column("Market_Price", Numeric(10, 2), nullable=False)
    selling_price = Column("Selling_Price", Numeric(10, 2), nullable=False)
    main_image_url = Column("Main_Image_Url", String(500), nullable=True)
    long_description = Column("Long_Description", Text, nullable=True)
    sih = Column("SIH", Integer, default=0)  # stock in hand
    seasonal_offer = Column("Seasonal_Offer", Boolean, default=False)
    rush_delivery = Column("Rush_Delivery", Boolean, default=False)
    for_you = Column("For_You", Boolean, default=False)
    sold_qty = Column("Sold_Qty", Integer, default=0)
    status = Column("Status", String(20), default="active")
    history_status = Column("History_Status", String(20), default="new")
    org_mail = Column("orgmail", String(255), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    brand = relationship("ProductBrand", back_populates="products")


class ProductImage(Base):
    __tablename__ = "Product_Images"

    id = Column("idProduct_Images", Integer, primary_key=True, index=True)
    product_id = Column("Product_idProduct", Integer, ForeignKey("Product.idProduct"), nullable=False, index=True)
    image_url = Column("Image_Url", String(500), nullable=False)
    org_mail = Column("orgmail", String(255), nullable=False, index=True)


class ProductVariation(Base):
    __tablename__ = "Product_Variations"

    id = Column("idProduct_Variations", Integer, primary_key=True, index=True)
    product_id = Column("Product_idProduct", Integer, ForeignKey("Product.idProduct"), nullable=False, index=True)
    colour = Column("Colour", String(50), nullable=True)
    size = Column("Size", String(50), nullable=True)
    qty = Column("Qty", Integer, default=0)
    sih = Column("SIH", Integer, default=0)
    org_mail = Column("orgmail", String(255), nullable=False, index=True)


class FAQ(Base):
    __tablename__ = "FAQ"

    id = Column("idFAQ", Integer, primary_key=True, index=True)
    product_id = Column("Product_idProduct", Integer, ForeignKey("Product.idProduct"), nullable=False, index=True)
    question = Column("Question", Text, nullable=False)
    answer = Column("Answer", Text, nullable=True)
    org_mail = Column("orgmail", String(255), nullable=False, index=True)


class ProductSubCategory(Base):
    __tablename__ = "Product_has_Sub_Category"

    product_id = Column("Product_idProduct", Integer, ForeignKey("Product.idProduct"), primary_key=True)
    sub_category_id = Column("Sub_Category_idSub_Category", Integer, ForeignKey("Sub_Category.idSub_Category"), primary_key=True)
    org_mail = Column("orgmail", String(255), nullable=False, index=True)
