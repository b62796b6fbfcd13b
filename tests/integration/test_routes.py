import json
from datetime import date, timedelta
from pathlib import Path

import pytest

from core.config import settings

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16


def product_form(**overrides):
    form = {
        "description": "Linen Shirt",
        "market_price": "40.00",
        "selling_price": "32.50",
        "sih": "6",
        "seasonal_offer": "true",
    }
    form.update(overrides)
    return form


def stored_uploads():
    return sorted(p.name for p in Path(settings.UPLOAD_DIR).rglob("*") if p.is_file())


def create_via_api(client, catalog, **overrides):
    form = product_form(
        variations=json.dumps([{"colorCode": "white", "size": "M", "quantity": 4}]),
        faqs=json.dumps([{"question": "Machine washable?", "answer": "Yes"}]),
        subCategoryIds=json.dumps([{"idSub_Category": catalog["shirts_id"]}]),
        brand_id=str(catalog["brand_id"]),
    )
    form.update(overrides)
    response = client.post("/api/products/", data=form)
    assert response.status_code == 201
    return response.json()["data"]


class TestTenantResolution:
    def test_missing_tenant(self, client):
        response = client.get("/api/products/", headers={settings.TENANT_HEADER: ""})

        assert response.status_code == 422
        assert response.json()["error_code"] == "ValidationError"

    def test_default_tenant(self, client, monkeypatch):
        monkeypatch.setattr(settings, "DEFAULT_ORG_MAIL", "fallback@example.com")

        response = client.get("/api/products/count", headers={settings.TENANT_HEADER: ""})

        assert response.status_code == 200
        assert response.json() == {"total_products": 0}


class TestProductRoutes:
    def test_create_with_uploads(self, client, catalog):
        files = [
            ("main_image", ("front.png", PNG, "image/png")),
            ("sub_images", ("side.png", PNG, "image/png")),
            ("sub_images", ("back.png", PNG, "image/png")),
        ]
        response = client.post(
            "/api/products/",
            data=product_form(subCategoryIds=json.dumps([catalog["shirts_id"]])),
            files=files
        )

        assert response.status_code == 201
        product = response.json()["data"]
        assert product["main_image_url"].startswith("/uploads/product_images/")
        assert len(product["images"]) == 2
        assert product["seasonal_offer"] is True
        assert [s["id"] for s in product["subcategories"]] == [catalog["shirts_id"]]

    def test_create_rejects_bad_json_field(self, client):
        response = client.post("/api/products/", data=product_form(variations="[not json"))

        assert response.status_code == 422
        assert response.json()["details"]["field"] == "variations"

    def test_create_rejects_bad_upload(self, client):
        files = [("main_image", ("notes.txt", b"hello", "text/plain"))]

        response = client.post("/api/products/", data=product_form(), files=files)

        assert response.status_code == 422

    @pytest.mark.parametrize("raw", ["[[1]]", '[{"id": "x"}]', '["abc"]'])
    def test_create_rejects_malformed_sub_category_ids(self, client, raw):
        response = client.post("/api/products/", data=product_form(subCategoryIds=raw))

        assert response.status_code == 422
        assert response.json()["error_code"] == "ValidationError"
        assert client.get("/api/products/count").json() == {"total_products": 0}

    def test_rejected_upload_stores_nothing(self, client):
        files = [
            ("main_image", ("front.png", PNG, "image/png")),
            ("sub_images", ("notes.txt", b"hello", "text/plain")),
        ]

        response = client.post("/api/products/", data=product_form(), files=files)

        assert response.status_code == 422
        assert stored_uploads() == []

    def test_create_requires_description(self, client):
        form = product_form()
        del form["description"]

        response = client.post("/api/products/", data=form)

        assert response.status_code == 422
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    def test_read_and_list(self, client, catalog):
        created = create_via_api(client, catalog)

        product = client.get(f"/api/products/{created['id']}").json()
        listing = client.get("/api/products/").json()

        assert product["brand_name"] == "Acme"
        assert product["variations"][0]["colour"] == "white"
        assert [p["id"] for p in listing] == [created["id"]]
        assert client.get(f"/api/products/sub-category/{catalog['shirts_id']}").json()[0]["id"] == created["id"]
        assert client.get(f"/api/products/brand/{catalog['brand_id']}").json()[0]["id"] == created["id"]

    def test_unknown_product(self, client):
        response = client.get("/api/products/999")

        assert response.status_code == 404
        assert response.json()["error_code"] == "ResourceNotFoundError"

    def test_other_tenant_is_isolated(self, client, catalog):
        created = create_via_api(client, catalog)

        response = client.get(f"/api/products/{created['id']}", headers={settings.TENANT_HEADER: "other@example.com"})

        assert response.status_code == 404

    def test_update_reconciles_collections(self, client, catalog):
        created = create_via_api(client, catalog)
        variation = created["variations"][0]
        form = product_form(
            description="Linen Shirt v2",
            variations=json.dumps([
                {"id": variation["id"], "colorCode": "white", "size": "M", "quantity": 9},
                {"colorCode": "black", "size": "L", "quantity": 1},
            ]),
            faqs="[]",
            subCategoryIds=json.dumps([catalog["pants_id"]]),
        )

        response = client.put(f"/api/products/{created['id']}", data=form)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["product"]["description"] == "Linen Shirt v2"
        assert [v["qty"] for v in data["product"]["variations"]] == [9, 1]
        assert data["product"]["faqs"] == []
        assert data["changes"]["variations"]["updated"] == [variation["id"]]
        assert data["changes"]["subcategories"]["deleted"] == [catalog["shirts_id"]]

    def test_update_blocked_by_ordered_variation(self, client, catalog, place_order):
        created = create_via_api(client, catalog)
        place_order([(created["variations"][0]["id"], 1, "32.50")])

        response = client.put(
            f"/api/products/{created['id']}",
            data=product_form(description="Renamed", variations="[]")
        )

        assert response.status_code == 409
        assert response.json()["details"]["variation_ids"] == [created["variations"][0]["id"]]
        assert client.get(f"/api/products/{created['id']}").json()["description"] == "Linen Shirt"

    def test_update_unknown_product(self, client):
        response = client.put("/api/products/999", data=product_form())
        assert response.status_code == 404

    def test_failed_update_discards_its_uploads(self, client, catalog, place_order):
        created = create_via_api(client, catalog)
        place_order([(created["variations"][0]["id"], 1, "32.50")])
        files = [
            ("main_image", ("front.png", PNG, "image/png")),
            ("sub_images", ("side.png", PNG, "image/png")),
        ]

        response = client.put(
            f"/api/products/{created['id']}",
            data=product_form(variations="[]"),
            files=files
        )

        assert response.status_code == 409
        assert stored_uploads() == []
        assert client.get(f"/api/products/{created['id']}").json()["images"] == []

    def test_update_unknown_product_stores_nothing(self, client):
        files = [("sub_images", ("side.png", PNG, "image/png"))]

        response = client.put("/api/products/999", data=product_form(), files=files)

        assert response.status_code == 404
        assert stored_uploads() == []

    def test_status_toggles(self, client, catalog):
        created = create_via_api(client, catalog)

        assert client.patch(f"/api/products/{created['id']}/status", json={"status": "inactive"}).status_code == 200
        assert client.patch(f"/api/products/{created['id']}/history-status", json={"history_status": "old"}).status_code == 200
        assert client.patch(f"/api/products/{created['id']}/status", json={}).status_code == 422
        assert client.patch("/api/products/999/status", json={"status": "inactive"}).status_code == 404

        product = client.get(f"/api/products/{created['id']}").json()
        assert (product["status"], product["history_status"]) == ("inactive", "old")

    def test_delete_then_read(self, client, catalog):
        created = create_via_api(client, catalog)

        response = client.delete(f"/api/products/{created['id']}")

        assert response.status_code == 200
        assert response.json()["data"] == {"id": created["id"]}
        assert client.get(f"/api/products/{created['id']}").status_code == 404
        assert client.delete(f"/api/products/{created['id']}").status_code == 404

    def test_stats(self, client, catalog):
        created = create_via_api(client, catalog)

        assert client.get("/api/products/count").json() == {"total_products": 1}
        assert client.get("/api/products/top-sold").json() == []
        assert client.get(f"/api/products/{created['id']}/sold-qty").json()["sold_qty"] == 0
        info = client.get(f"/api/products/{created['id']}/sales-info").json()
        assert info["total_units_sold_last_30_days"] == 0


class TestDiscountRoutes:
    def test_active_discount_shows_on_product(self, client, catalog):
        created = create_via_api(client, catalog)
        today = date.today()
        payload = {
            "product_id": created["id"],
            "discount_type": "percentage",
            "discount_value": "15",
            "start_date": today.isoformat(),
            "end_date": (today + timedelta(days=3)).isoformat(),
        }

        response = client.post("/api/discounts/", json=payload)

        assert response.status_code == 201
        product = client.get(f"/api/products/{created['id']}").json()
        assert [d["id"] for d in product["discounts"]] == [response.json()["data"]["id"]]
        assert [p["id"] for p in client.get("/api/products/discounted").json()] == [created["id"]]

    def test_end_before_start(self, client, catalog):
        created = create_via_api(client, catalog)
        payload = {
            "product_id": created["id"],
            "discount_type": "fixed",
            "discount_value": "5",
            "start_date": "2024-06-10",
            "end_date": "2024-06-01",
        }

        assert client.post("/api/discounts/", json=payload).status_code == 422

    def test_event_discount(self, client, catalog):
        created = create_via_api(client, catalog)
        event = client.post("/api/discounts/events", json={"name": "Black Friday"}).json()["data"]
        today = date.today().isoformat()

        response = client.post("/api/discounts/events/discounts", json={
            "event_id": event["id"],
            "product_ids": [created["id"]],
            "discount_type": "fixed",
            "discount_value": "5",
            "start_date": today,
            "end_date": today,
        })

        assert response.status_code == 201
        product = client.get(f"/api/products/{created['id']}").json()
        assert len(product["event_discounts"]) == 1
        assert len(client.get("/api/discounts/events").json()) == 1

    def test_unknown_discount(self, client):
        assert client.get("/api/discounts/999").status_code == 404
        assert client.delete("/api/discounts/999").status_code == 404


class TestCatalogRoutes:
    def test_category_lifecycle(self, client):
        category = client.post("/api/categories/", json={"description": "Books"}).json()["data"]
        sub = client.post(f"/api/categories/{category['id']}/subcategories", json={"description": "Novels"})

        assert sub.status_code == 201
        listing = client.get("/api/categories/").json()
        assert listing[0]["subcategories"][0]["description"] == "Novels"
        assert client.delete(f"/api/categories/{category['id']}").status_code == 200
        assert client.get("/api/categories/").json() == []

    def test_subcategory_in_use(self, client, catalog):
        create_via_api(client, catalog)

        response = client.delete(f"/api/categories/subcategories/{catalog['shirts_id']}")

        assert response.status_code == 409
        assert response.json()["message"] == "Cannot delete subcategory as it is used in products"
        assert client.get(f"/api/categories/subcategories/{catalog['shirts_id']}/in-use").json()["in_use"] is True

    def test_blank_category_description(self, client):
        response = client.post("/api/categories/", json={"description": ""})
        assert response.status_code == 422

    def test_brand_in_use(self, client, catalog):
        create_via_api(client, catalog)

        assert client.delete(f"/api/brands/{catalog['brand_id']}").status_code == 409
        assert client.delete("/api/brands/999").status_code == 404

    def test_brand_update(self, client, catalog):
        response = client.put(f"/api/brands/{catalog['brand_id']}", json={"brand_name": "Acme Ltd"})

        assert response.status_code == 200
        assert client.get("/api/brands/").json()[0]["brand_name"] == "Acme Ltd"


class TestCustomerRoutes:
    def test_create_and_read(self, client):
        response = client.post("/api/customers/", json={
            "full_name": "Grace Hopper",
            "email": "grace@example.com",
            "password": "cobol-rules",
        })

        assert response.status_code == 201
        customer_id = response.json()["data"]["id"]
        customer = client.get(f"/api/customers/{customer_id}").json()
        assert customer["email"] == "grace@example.com"
        assert "password" not in customer

    def test_invalid_email(self, client):
        response = client.post("/api/customers/", json={
            "full_name": "Nobody",
            "email": "not-an-email",
            "password": "secret1",
        })
        assert response.status_code == 422

    def test_update_and_delete(self, client):
        customer_id = client.post("/api/customers/", json={
            "full_name": "Alan Turing",
            "email": "alan@example.com",
            "password": "enigma42",
        }).json()["data"]["id"]

        updated = client.put(f"/api/customers/{customer_id}", json={"city": "Manchester"})

        assert updated.json()["data"]["city"] == "Manchester"
        assert client.delete(f"/api/customers/{customer_id}").status_code == 200
        assert client.get(f"/api/customers/{customer_id}").status_code == 404


def test_health(client):
    assert client.get("/health").json()["status"] == "healthy"
