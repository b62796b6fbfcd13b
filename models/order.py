from datetime import datetime
from sqlalchemy import Column, String, DateTime, ForeignKey, Numeric, Integer
from database.base import Base

class Order(Base):
    __tablename__ = "Order"

    id = Column("idOrder", Integer, primary_key=True, index=True)
    customer_id = Column("Customer_idCustomer", Integer, ForeignKey("Customer.idCustomer"), nullable=True, index=True)
    date_time = Column("Date_Time", DateTime, default=datetime.utcnow, index=True)
    total_amount = Column("Total_Amount", Numeric(10, 2), default=0)
    payment_status = Column("Payment_Stats", String(20), default="pending")
    status = Column("Status", String(20), default="pending")
    org_mail = Column("orgmail", String(255), nullable=False, index=True)


class OrderHasProductVariation(Base):
    __tablename__ = "Order_has_Product_Variations"

    id = Column("idOrder_has_Product_Variations", Integer, primary_key=True, index=True)
    order_id = Column("Order_idOrder", Integer, ForeignKey("Order.idOrder"), nullable=False, index=True)
    variation_id = Column(
        "Product_Variations_idProduct_Variations",
        Integer,
        ForeignKey("Product_Variations.idProduct_Variations"),
        nullable=False,
        index=True
    )
    discount_id = Column("Discounts_idDiscounts", Integer, ForeignKey("Discounts.idDiscounts"), nullable=True)
    qty = Column("Qty", Integer, nullable=False, default=1)
    total_amount = Column("Total_Amount", Numeric(10, 2), default=0)
    org_mail = Column("orgmail", String(255), nullable=False, index=True)


class OrderHistory(Base):
    __tablename__ = "Order_History"

    id = Column("idOrder_History", Integer, primary_key=True, index=True)
    order_id = Column("order_id", Integer, ForeignKey("Order.idOrder"), nullable=False, index=True)
    status = Column("status", String(20), nullable=False)
    changed_at = Column("changed_at", DateTime, default=datetime.utcnow)
    org_mail = Column("orgmail", String(255), nullable=False, index=True)


class Cart(Base):
    __tablename__ = "Cart"

    id = Column("idCart", Integer, primary_key=True, index=True)
    customer_id = Column("Customer_idCustomer", Integer, ForeignKey("Customer.idCustomer"), nullable=True, index=True)
    org_mail = Column("orgmail", String(255), nullable=False, index=True)


class CartHasProduct(Base):
    __tablename__ = "Cart_has_Product"

    id = Column("idCart_has_Product", Integer, primary_key=True, index=True)
    cart_id = Column("Cart_idCart", Integer, ForeignKey("Cart.idCart"), nullable=False, index=True)
    variation_id = Column(
        "Product_Variations_idProduct_Variations",
        Integer,
        ForeignKey("Product_Variations.idProduct_Variations"),
        nullable=False,
        index=True
    )
    qty = Column("Qty", Integer, nullable=False, default=1)
    org_mail = Column("orgmail", String(255), nullable=False, index=True)
