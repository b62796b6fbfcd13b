from datetime import datetime
from sqlalchemy import Column, String, DateTime, Integer, Text
from sqlalchemy.orm import relationship
from database.base import Base

class ProductBrand(Base):
    __tablename__ = "Product_Brand"

    id = Column("idProduct_Brand", Integer, primary_key=True, index=True)
    brand_name = Column("Brand_Name", String(255), nullable=False)
    brand_image_url = Column("Brand_Image_Url", String(500), nullable=True)
    short_description = Column("ShortDescription", Text, nullable=True)
    user_id = Column("User_idUser", Integer, nullable=True)
    org_mail = Column("orgmail", String(255), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    products = relationship("Product", back_populates="brand")
