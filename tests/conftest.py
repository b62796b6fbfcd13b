import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

from datetime import datetime
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from core.config import settings
from database.base import Base
from database.connection import build_engine, get_db
import models.brand  # noqa: F401
import models.category  # noqa: F401
import models.customer  # noqa: F401
import models.discount  # noqa: F401
import models.order  # noqa: F401
import models.product  # noqa: F401
from models.order import Cart, CartHasProduct, Order, OrderHasProductVariation
from schemas.catalog import BrandCreate, CategoryCreate, SubCategoryCreate
from schemas.product import FaqIn, ProductAssociations, ProductCreate, VariationIn
from services.brand import create_brand
from services.category import create_category, create_sub_category
from services.product import create_product
from main import app
from helpers import ORG, TODAY


@pytest.fixture
def engine():
    """Fresh in-memory database per test."""
    engine = build_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory, monkeypatch, tmp_path):
    """API client bound to the test database, sending the ORG tenant header."""
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    monkeypatch.setattr(settings, "UPLOAD_DIR", str(tmp_path / "uploads"))
    monkeypatch.setattr(settings, "DEFAULT_ORG_MAIL", "")
    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app, headers={settings.TENANT_HEADER: ORG})
    app.dependency_overrides.clear()


@pytest.fixture
def catalog(db):
    """A brand and a category with two subcategories for the ORG tenant."""
    brand = create_brand(db, ORG, BrandCreate(brand_name="Acme", short_description="Basics"))
    category = create_category(db, ORG, CategoryCreate(description="Clothing"))
    shirts = create_sub_category(db, ORG, category["id"], SubCategoryCreate(description="Shirts"))
    pants = create_sub_category(db, ORG, category["id"], SubCategoryCreate(description="Pants"))
    return {
        "brand_id": brand["id"],
        "category_id": category["id"],
        "shirts_id": shirts["id"],
        "pants_id": pants["id"],
    }


@pytest.fixture
def make_product(db):
    """Create a product aggregate; keyword arguments feed the associations."""
    def _make(description="Cotton Tee", org_mail=ORG, brand_id=None, **associated):
        product_data = ProductCreate(
            description=description,
            brand_id=brand_id,
            market_price=Decimal("20.00"),
            selling_price=Decimal("15.00"),
            sih=10,
        )
        return create_product(db, org_mail, product_data, ProductAssociations(**associated), today=TODAY)
    return _make


@pytest.fixture
def tee(make_product, catalog):
    return make_product(
        brand_id=catalog["brand_id"],
        images=["/uploads/a.png", "/uploads/b.png"],
        variations=[VariationIn(colour="red", size="M", quantity=3), VariationIn(colour="blue", size="L", quantity=5)],
        faqs=[FaqIn(question="Is it cotton?", answer="Yes")],
        sub_category_ids=[catalog["shirts_id"]],
    )


@pytest.fixture
def place_order(db):
    """Record an order with one line per (variation_id, qty, amount) tuple."""
    def _place(lines, org_mail=ORG, payment_status="paid", ordered_at=datetime(2024, 6, 10, 12, 0), discount_id=None):
        order = Order(org_mail=org_mail, payment_status=payment_status, date_time=ordered_at)
        db.add(order)
        db.flush()
        for variation_id, qty, amount in lines:
            db.add(OrderHasProductVariation(
                order_id=order.id,
                variation_id=variation_id,
                discount_id=discount_id,
                qty=qty,
                total_amount=Decimal(amount),
                org_mail=org_mail
            ))
        db.commit()
        return order.id
    return _place


@pytest.fixture
def add_to_cart(db):
    def _add(variation_id, org_mail=ORG):
        cart = Cart(org_mail=org_mail)
        db.add(cart)
        db.flush()
        db.add(CartHasProduct(cart_id=cart.id, variation_id=variation_id, qty=1, org_mail=org_mail))
        db.commit()
        return cart.id
    return _add
