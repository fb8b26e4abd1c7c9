"""
Admin catalog endpoints: categories, brands, products.
"""
import io
import json

import pytest

from models.brand import Brand
from models.product import Product, ProductImage, ProductVariant

VARIANTS = [{"price": 199000, "stock": 3, "size": "M"}, {"price": 209000.5, "stock": 5, "size": "L"}]


def _images(n):
    return [(io.BytesIO(f"image-{i}".encode()), f"img{i}.png") for i in range(n)]


def _product_form(category, brand, images=2, **overrides):
    form = {
        "name": "Áo thun trắng",
        "description": "Cotton",
        "category_id": str(category.id),
        "brand_id": str(brand.id),
        "variants": json.dumps(VARIANTS),
        "images": _images(images),
    }
    form.update(overrides)
    return form


def _post_product(client, headers, form):
    return client.post("/api/v1/admin/products", data=form, headers=headers, content_type="multipart/form-data")


def _row_counts(storage):
    return storage.count(Product), storage.count(ProductVariant), storage.count(ProductImage)


class TestAccess:
    def test_requires_token(self, client):
        resp = client.get("/api/v1/admin/categories")
        assert resp.status_code == 401

    def test_customer_is_forbidden(self, client, customer_headers):
        resp = client.get("/api/v1/admin/products", headers=customer_headers)
        assert resp.status_code == 403
        assert resp.get_json()["error"] == "FORBIDDEN"

    def test_admin_allowed(self, client, admin_headers):
        assert client.get("/api/v1/admin/brands", headers=admin_headers).status_code == 200


class TestCategories:
    def test_crud(self, client, admin_headers):
        created = client.post(
            "/api/v1/admin/categories", json={"name": "Áo Thun", "description": "T-shirts"}, headers=admin_headers
        )
        assert created.status_code == 201
        category = created.get_json()["data"]
        assert category["slug"] == "ao-thun"

        url = f"/api/v1/admin/categories/{category['id']}"
        updated = client.put(url, json={"name": "Quần Jean", "description": ""}, headers=admin_headers)
        assert updated.status_code == 200
        assert updated.get_json()["data"]["slug"] == "quan-jean"
        assert updated.get_json()["data"]["description"] == "T-shirts"

        listed = client.get("/api/v1/admin/categories?page=1&limit=5", headers=admin_headers).get_json()
        assert listed["meta"] == {"page": 1, "limit": 5, "total": 1}

        assert client.delete(url, headers=admin_headers).status_code == 200
        assert client.get(url, headers=admin_headers).status_code == 404

    def test_duplicate_slug(self, client, admin_headers):
        client.post("/api/v1/admin/categories", json={"name": "Áo thun"}, headers=admin_headers)
        resp = client.post("/api/v1/admin/categories", json={"name": "AO THUN"}, headers=admin_headers)
        assert resp.status_code == 409

    def test_name_without_letters(self, client, admin_headers):
        resp = client.post("/api/v1/admin/categories", json={"name": "!!!"}, headers=admin_headers)
        assert resp.status_code == 422

    def test_rename_without_letters(self, client, admin_headers, category):
        url = f"/api/v1/admin/categories/{category.id}"
        resp = client.put(url, json={"name": "!!!"}, headers=admin_headers)
        assert resp.status_code == 422
        assert client.get(url, headers=admin_headers).get_json()["data"]["slug"] == "ao-thun"

    def test_cannot_delete_while_in_use(self, client, admin_headers, category, brand):
        assert _post_product(client, admin_headers, _product_form(category, brand)).status_code == 201
        resp = client.delete(f"/api/v1/admin/categories/{category.id}", headers=admin_headers)
        assert resp.status_code == 409


class TestBrands:
    def test_create_with_logo_and_replace_it(self, client, admin_headers, object_storage):
        created = client.post(
            "/api/v1/admin/brands",
            data={"name": "Local Brand", "logo": (io.BytesIO(b"logo-1"), "logo.png")},
            headers=admin_headers,
            content_type="multipart/form-data",
        )
        assert created.status_code == 201
        brand = created.get_json()["data"]
        assert brand["slug"] == "local-brand"
        assert brand["logo_url"].startswith("https://cdn.test/brands/")
        first_logo = next(iter(object_storage.objects))

        updated = client.put(
            f"/api/v1/admin/brands/{brand['id']}",
            data={"logo": (io.BytesIO(b"logo-2"), "logo.png")},
            headers=admin_headers,
            content_type="multipart/form-data",
        )
        assert updated.status_code == 200
        assert updated.get_json()["data"]["name"] == "Local Brand"
        assert object_storage.deleted == [first_logo]
        assert len(object_storage.objects) == 1

    def test_json_create_and_delete(self, client, admin_headers, storage, object_storage):
        resp = client.post("/api/v1/admin/brands", json={"name": "Plain"}, headers=admin_headers)
        assert resp.status_code == 201
        assert resp.get_json()["data"]["logo_url"] is None

        brand_id = resp.get_json()["data"]["id"]
        assert client.delete(f"/api/v1/admin/brands/{brand_id}", headers=admin_headers).status_code == 200
        assert storage.count(Brand) == 0
        assert object_storage.deleted == []

    def test_rename_without_letters(self, client, admin_headers, brand):
        url = f"/api/v1/admin/brands/{brand.id}"
        resp = client.put(url, json={"name": "!!!"}, headers=admin_headers)
        assert resp.status_code == 422
        assert client.get(url, headers=admin_headers).get_json()["data"]["slug"] == "local-brand"

    def test_logo_upload_failure(self, client, admin_headers, storage, object_storage):
        object_storage.fail_on_upload = 1
        resp = client.post(
            "/api/v1/admin/brands",
            data={"name": "Local Brand", "logo": (io.BytesIO(b"logo"), "logo.png")},
            headers=admin_headers,
            content_type="multipart/form-data",
        )
        assert resp.status_code == 502
        assert storage.count(Brand) == 0


class TestProducts:
    def test_create(self, client, admin_headers, category, brand, object_storage):
        resp = _post_product(client, admin_headers, _product_form(category, brand))
        assert resp.status_code == 201
        product = resp.get_json()["data"]
        assert product["slug"] == "ao-thun-trang"
        assert product["total_stock"] == 8
        assert [v["sku"] for v in product["variants"]] == [f"ATATT{v['id']}" for v in product["variants"]]
        assert [v["price"] for v in product["variants"]] == ["199000.00", "209000.50"]
        assert [img["display_order"] for img in product["images"]] == [1, 2]
        assert len(object_storage.objects) == 2

    @pytest.mark.parametrize("count", [0, 6])
    def test_image_count(self, client, admin_headers, category, brand, storage, count):
        resp = _post_product(client, admin_headers, _product_form(category, brand, images=count))
        assert resp.status_code == 422
        assert _row_counts(storage) == (0, 0, 0)

    def test_upload_failure_leaves_no_rows(self, client, admin_headers, category, brand, storage, object_storage):
        object_storage.fail_on_upload = 2
        resp = _post_product(client, admin_headers, _product_form(category, brand, images=3))
        assert resp.status_code == 502
        assert _row_counts(storage) == (0, 0, 0)
        assert len(object_storage.objects) == 1

    def test_duplicate_name(self, client, admin_headers, category, brand, storage):
        assert _post_product(client, admin_headers, _product_form(category, brand)).status_code == 201
        resp = _post_product(client, admin_headers, _product_form(category, brand))
        assert resp.status_code == 409
        assert _row_counts(storage) == (1, 2, 2)

    def test_unknown_category(self, client, admin_headers, category, brand):
        resp = _post_product(client, admin_headers, _product_form(category, brand, category_id="999"))
        assert resp.status_code == 400

    @pytest.mark.parametrize(
        "variants",
        [
            "not json",
            json.dumps({"price": 1, "stock": 1, "size": "M"}),
            json.dumps([]),
            json.dumps([{"price": -1, "stock": 1, "size": "M"}]),
            json.dumps([{"price": 1, "stock": "many", "size": "M"}]),
            json.dumps([{"price": 1, "stock": 10**20, "size": "M"}]),
            json.dumps([{"price": 100000000, "stock": 1, "size": "M"}]),
        ],
    )
    def test_bad_variants(self, client, admin_headers, category, brand, storage, variants):
        resp = _post_product(client, admin_headers, _product_form(category, brand, variants=variants))
        assert resp.status_code == 422
        assert _row_counts(storage) == (0, 0, 0)

    def test_name_without_letters(self, client, admin_headers, category, brand, storage, object_storage):
        resp = _post_product(client, admin_headers, _product_form(category, brand, name="!!"))
        assert resp.status_code == 422
        assert _row_counts(storage) == (0, 0, 0)
        assert object_storage.objects == {}

    def test_read_update_delete(self, client, admin_headers, category, brand, object_storage):
        product = _post_product(client, admin_headers, _product_form(category, brand)).get_json()["data"]
        url = f"/api/v1/admin/products/{product['id']}"

        assert client.get(url, headers=admin_headers).get_json()["data"]["name"] == "Áo thun trắng"
        listed = client.get("/api/v1/admin/products", headers=admin_headers).get_json()
        assert listed["meta"]["total"] == 1

        updated = client.put(url, json={"name": "Áo thun đen", "brand_id": 0}, headers=admin_headers)
        assert updated.status_code == 200
        assert updated.get_json()["data"]["slug"] == "ao-thun-den"
        assert updated.get_json()["data"]["brand_id"] == brand.id

        bad_brand = client.put(url, json={"brand_id": 999}, headers=admin_headers)
        assert bad_brand.status_code == 400

        assert client.delete(url, headers=admin_headers).status_code == 200
        assert client.get(url, headers=admin_headers).status_code == 404
        assert object_storage.objects == {}
