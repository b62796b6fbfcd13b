import pytest

from core.exceptions import ReferentialIntegrityError, ResourceNotFoundError, ValidationError
from models.category import SubCategory
from models.product import Product
from schemas.catalog import BrandCreate, BrandUpdate, CategoryCreate, CategoryUpdate, SubCategoryCreate, SubCategoryUpdate
from services.brand import create_brand, delete_brand, get_brands, update_brand
from services.category import (
    check_sub_category_in_use,
    create_category,
    create_sub_category,
    delete_category,
    delete_sub_category,
    get_all_categories,
    get_top_selling_categories,
    toggle_category_status,
    update_category,
    update_sub_category,
)
from helpers import ORG, OTHER_ORG


class TestCategories:
    def test_nested_listing(self, db, catalog):
        categories = get_all_categories(db, ORG)

        assert [c["description"] for c in categories] == ["Clothing"]
        assert [s["description"] for s in categories[0]["subcategories"]] == ["Shirts", "Pants"]
        assert get_all_categories(db, OTHER_ORG) == []

    def test_description_required(self, db):
        with pytest.raises(ValidationError):
            create_category(db, ORG, CategoryCreate(description="  "))

    def test_update_keeps_icon_when_none_given(self, db):
        category = create_category(db, ORG, CategoryCreate(description="Toys", image_icon_url="/uploads/toys.png"))

        updated = update_category(db, ORG, category["id"], CategoryUpdate(description="Games"))

        assert updated["description"] == "Games"
        assert updated["image_icon_url"] == "/uploads/toys.png"
        assert update_category(db, ORG, 999, CategoryUpdate(description="Games")) is None

    def test_toggle_status(self, db, catalog):
        assert toggle_category_status(db, ORG, catalog["category_id"], "inactive") is True
        assert get_all_categories(db, ORG)[0]["status"] == "inactive"
        assert toggle_category_status(db, ORG, 999, "inactive") is False

    def test_delete_blocked_by_linked_subcategory(self, db, catalog, make_product):
        make_product(sub_category_ids=[catalog["pants_id"]])

        with pytest.raises(ReferentialIntegrityError):
            delete_category(db, ORG, catalog["category_id"])

        assert len(get_all_categories(db, ORG)[0]["subcategories"]) == 2

    def test_delete_removes_subcategories(self, db, catalog):
        assert delete_category(db, ORG, catalog["category_id"]) is True

        assert get_all_categories(db, ORG) == []
        assert db.query(SubCategory).count() == 0

    def test_top_selling(self, db, catalog, make_product):
        toys = create_category(db, ORG, CategoryCreate(description="Toys"))
        create_category(db, ORG, CategoryCreate(description="Garden"))
        blocks = create_sub_category(db, ORG, toys["id"], SubCategoryCreate(description="Blocks"))
        shirt = make_product("Shirt", sub_category_ids=[catalog["shirts_id"]])
        kit = make_product("Block kit", sub_category_ids=[blocks["id"]])
        db.query(Product).filter(Product.id == shirt["id"]).update({Product.sold_qty: 4})
        db.query(Product).filter(Product.id == kit["id"]).update({Product.sold_qty: 11})
        db.commit()

        top = get_top_selling_categories(db, ORG)

        assert [(c["category_name"], c["total_sold_qty"]) for c in top] == [
            ("Toys", 11), ("Clothing", 4), ("Garden", 0)
        ]


class TestSubCategories:
    def test_unknown_category(self, db):
        with pytest.raises(ResourceNotFoundError):
            create_sub_category(db, ORG, 999, SubCategoryCreate(description="Orphans"))

    def test_rename(self, db, catalog):
        renamed = update_sub_category(
            db, ORG, catalog["category_id"], catalog["shirts_id"], SubCategoryUpdate(description="Tops")
        )
        assert renamed["description"] == "Tops"

        with pytest.raises(ResourceNotFoundError):
            update_sub_category(db, ORG, catalog["category_id"], 999, SubCategoryUpdate(description="Tops"))

    def test_delete_in_use(self, db, catalog, make_product):
        make_product(sub_category_ids=[catalog["shirts_id"]])

        assert check_sub_category_in_use(db, ORG, catalog["shirts_id"]) is True
        with pytest.raises(ReferentialIntegrityError) as exc:
            delete_sub_category(db, ORG, catalog["shirts_id"])
        assert exc.value.message == "Cannot delete subcategory as it is used in products"

    def test_delete_unused(self, db, catalog):
        assert check_sub_category_in_use(db, ORG, catalog["pants_id"]) is False
        assert delete_sub_category(db, ORG, catalog["pants_id"]) is True
        assert delete_sub_category(db, ORG, catalog["pants_id"]) is False


class TestBrands:
    def test_name_required(self, db):
        with pytest.raises(ValidationError):
            create_brand(db, ORG, BrandCreate(brand_name=""))

    def test_update_keeps_image_when_none_given(self, db):
        brand = create_brand(db, ORG, BrandCreate(brand_name="Acme", brand_image_url="/uploads/acme.png"))

        updated = update_brand(db, ORG, brand["id"], BrandUpdate(brand_name="Acme Co", short_description="Since 1950"))

        assert updated["brand_name"] == "Acme Co"
        assert updated["short_description"] == "Since 1950"
        assert updated["brand_image_url"] == "/uploads/acme.png"

    def test_update_unknown(self, db):
        with pytest.raises(ResourceNotFoundError):
            update_brand(db, ORG, 999, BrandUpdate(brand_name="Ghost"))

    def test_delete_in_use(self, db, catalog, make_product):
        make_product(brand_id=catalog["brand_id"])

        with pytest.raises(ReferentialIntegrityError):
            delete_brand(db, ORG, catalog["brand_id"])

        assert len(get_brands(db, ORG)) == 1

    def test_delete(self, db, catalog):
        delete_brand(db, ORG, catalog["brand_id"])

        assert get_brands(db, ORG) == []
        with pytest.raises(ResourceNotFoundError):
            delete_brand(db, ORG, catalog["brand_id"])
