from datetime import timedelta
from decimal import Decimal

from models.discount import Discount, EventHasProduct
from models.order import CartHasProduct, Order, OrderHasProductVariation, OrderHistory
from models.product import FAQ, ProductImage, ProductSubCategory, ProductVariation
from schemas.discount import DiscountCreate, EventCreate, EventDiscountCreate
from schemas.product import VariationIn
from services.discount import create_discount, create_event, create_event_discount
from services.product import delete_product, get_product_by_id
from helpers import ORG, OTHER_ORG, TODAY


class TestDeleteProduct:
    """Deleting a product removes every row that depends on it."""

    def test_children_and_links_are_removed(self, db, tee):
        create_discount(db, ORG, DiscountCreate(
            product_id=tee["id"],
            discount_type="fixed",
            discount_value=Decimal("1"),
            start_date=TODAY,
            end_date=TODAY + timedelta(days=1),
        ))
        event = create_event(db, ORG, EventCreate(name="Clearance"))
        create_event_discount(db, ORG, EventDiscountCreate(
            event_id=event["id"],
            product_ids=[tee["id"]],
            discount_type="fixed",
            discount_value=Decimal("1"),
            start_date=TODAY,
            end_date=TODAY,
        ))

        assert delete_product(db, ORG, tee["id"]) is True

        assert get_product_by_id(db, ORG, tee["id"]) is None
        for model in (ProductImage, ProductVariation, FAQ, ProductSubCategory, Discount, EventHasProduct):
            assert db.query(model).filter(model.product_id == tee["id"]).count() == 0

    def test_orders_and_carts_are_removed(self, db, tee, make_product, place_order, add_to_cart):
        mug = make_product("Plain Mug", variations=[VariationIn(colour="white", quantity=4)])
        mug_variation = mug["variations"][0]["id"]
        shared_order = place_order([(tee["variations"][0]["id"], 1, "15.00"), (mug_variation, 2, "10.00")])
        mug_order = place_order([(mug_variation, 1, "5.00")])
        db.add(OrderHistory(order_id=shared_order, status="placed", org_mail=ORG))
        db.commit()
        add_to_cart(tee["variations"][1]["id"])
        add_to_cart(mug_variation)

        delete_product(db, ORG, tee["id"])

        assert db.query(Order).filter(Order.id == shared_order).count() == 0
        assert db.query(OrderHistory).filter(OrderHistory.order_id == shared_order).count() == 0
        assert db.query(OrderHasProductVariation).filter(OrderHasProductVariation.order_id == shared_order).count() == 0
        assert db.query(Order).filter(Order.id == mug_order).count() == 1
        assert [row.variation_id for row in db.query(CartHasProduct)] == [mug_variation]
        assert get_product_by_id(db, ORG, mug["id"])["variations"][0]["has_orders"] is True

    def test_unknown_product_is_tolerated(self, db):
        assert delete_product(db, ORG, 999) is False

    def test_second_delete_reports_missing(self, db, tee):
        assert delete_product(db, ORG, tee["id"]) is True
        assert delete_product(db, ORG, tee["id"]) is False

    def test_other_tenant_cannot_delete(self, db, tee):
        assert delete_product(db, OTHER_ORG, tee["id"]) is False
        assert get_product_by_id(db, ORG, tee["id"]) is not None
