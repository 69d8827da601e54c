from pos_app.models.product import Product, ProductVariant
from pos_app.models.sale import SaleItem


class TestProductCreate:
    def test_list_includes_variants_and_category(self, factory, client):
        category = factory.category("Clothing")
        resp = client.post(
            "/api/products",
            json={
                "name": "Hoodie",
                "price": 35.0,
                "stock": 0,
                "category_id": category["id"],
                "image_url": "https://example.com/hoodie.png",
                "variants": [{"name": "M", "stock": 4}, {"name": "L", "stock": 6, "price_adjustment": 3.0}],
                "updated_at": 5000,
            },
        )

        assert resp.status_code == 200
        assert resp.json()["updated_at"] == 5000
        product = factory.get_product(resp.json()["id"])
        assert product["category_name"] == "Clothing"
        assert product["image_url"] == "https://example.com/hoodie.png"
        assert [v["name"] for v in product["variants"]] == ["M", "L"]
        assert product["variants"][1]["price_adjustment"] == 3.0
        assert product["total_stock"] == 10

    def test_initial_stock_is_recorded(self, factory):
        product = factory.product(stock=12, variants=[{"name": "Red", "stock": 2}, {"name": "Blue", "stock": 0}])

        history = factory.history(product["id"])

        assert all(h["reason"] == "Initial Stock" for h in history)
        assert {(h["variant_name"], h["change_amount"], h["new_stock"]) for h in history} == {
            (None, 12, 12),
            ("Red", 2, 2),
        }
        assert len(history) == 2

    def test_negative_price_rejected(self, client):
        resp = client.post("/api/products", json={"name": "Bad", "price": -1, "stock": 0})

        assert resp.status_code == 400

    def test_unknown_category_rejected(self, client, db):
        resp = client.post("/api/products", json={"name": "Orphan", "price": 1, "stock": 0, "category_id": 77})

        assert resp.status_code == 400
        assert db.query(Product).count() == 0


class TestProductConcurrency:
    def test_stale_update_conflicts_and_leaves_row(self, factory, client, db):
        product = factory.product(name="Cola", updated_at=2000, variants=[{"name": "Can", "stock": 3}])

        resp = client.put(
            f"/api/products/{product['id']}",
            json={"name": "Diet Cola", "price": 1.0, "stock": 99, "variants": [], "updated_at": 1999},
        )

        assert resp.status_code == 409
        current = resp.json()["current"]
        assert current["updated_at"] == 2000
        assert current["name"] == "Cola"
        row = db.query(Product.name, Product.stock, Product.updated_at).filter(Product.id == product["id"]).one()
        assert tuple(row) == ("Cola", 10, 2000)
        assert db.query(ProductVariant).filter(ProductVariant.product_id == product["id"]).count() == 1

    def test_newer_update_applies(self, factory, client, db):
        product = factory.product(name="Cola", updated_at=2000)

        resp = client.put(
            f"/api/products/{product['id']}",
            json={"name": "Cola Zero", "price": 2.5, "stock": 10, "updated_at": 2000},
        )

        assert resp.status_code == 200
        assert resp.json() == {"success": True, "updated_at": 2000}
        resp = client.put(
            f"/api/products/{product['id']}",
            json={"name": "Cola Max", "price": 2.5, "stock": 10, "updated_at": 2600},
        )
        assert resp.json()["updated_at"] == 2600
        row = db.query(Product.name, Product.updated_at).filter(Product.id == product["id"]).one()
        assert tuple(row) == ("Cola Max", 2600)

    def test_full_product_body_is_accepted(self, factory, client):
        product = factory.product(name="Water", variants=[{"name": "500ml", "stock": 8}])
        edited = {**product, "price": 1.25}

        resp = client.put(f"/api/products/{product['id']}", json=edited)

        assert resp.status_code == 200
        assert factory.get_product(product["id"])["price"] == 1.25

    def test_update_unknown_product(self, client):
        resp = client.put("/api/products/404", json={"name": "Ghost", "price": 1, "stock": 0})

        assert resp.status_code == 404


class TestVariantReplace:
    def test_variants_are_replaced_wholesale(self, factory, client, db):
        product = factory.product(
            name="Sneaker", stock=0, variants=[{"name": "40", "stock": 1}, {"name": "41", "stock": 2}]
        )
        old_ids = {v["id"] for v in product["variants"]}

        resp = client.put(
            f"/api/products/{product['id']}",
            json={
                "name": "Sneaker",
                "price": product["price"],
                "stock": 0,
                "variants": [{"name": "42", "stock": 5}, {"name": "43", "stock": 0}, {"name": "44", "stock": 1}],
            },
        )

        assert resp.status_code == 200
        rows = db.query(ProductVariant).filter(ProductVariant.product_id == product["id"]).all()
        assert sorted(v.name for v in rows) == ["42", "43", "44"]
        assert not old_ids & {v.id for v in rows}

        update_rows = [h for h in factory.history(product["id"]) if h["reason"] == "Product Update"]
        assert sorted((h["variant_name"], h["new_stock"]) for h in update_rows) == [("42", 5), ("43", 0), ("44", 1)]

    def test_omitting_variants_removes_them(self, factory, client, db):
        product = factory.product(stock=0, variants=[{"name": "Small", "stock": 1}])

        client.put(f"/api/products/{product['id']}", json={"name": "Plain", "price": 1, "stock": 4})

        assert db.query(ProductVariant).filter(ProductVariant.product_id == product["id"]).count() == 0


class TestManualAdjustment:
    def test_stock_change_is_logged(self, factory, client):
        product = factory.product(stock=10)

        client.put(f"/api/products/{product['id']}", json={"name": product["name"], "price": 9.99, "stock": 4})

        latest = factory.history(product["id"])[0]
        assert latest["reason"] == "Manual Adjustment"
        assert latest["change_amount"] == -6
        assert latest["new_stock"] == 4

    def test_unchanged_stock_is_not_logged(self, factory, client):
        product = factory.product(stock=10)

        client.put(f"/api/products/{product['id']}", json={"name": "Renamed", "price": 9.99, "stock": 10})

        assert [h["reason"] for h in factory.history(product["id"])] == ["Initial Stock"]


class TestOversoldStock:
    def test_oversold_product_can_be_edited(self, factory, client):
        product = factory.product(stock=1, price=2.0)
        factory.checkout([{"id": product["id"], "quantity": 3, "price": 2.0}], 6.0)
        body = {**factory.get_product(product["id"]), "name": "Renamed"}
        assert body["stock"] == -2

        resp = client.put(f"/api/products/{product['id']}", json=body)

        assert resp.status_code == 200, resp.text
        stored = factory.get_product(product["id"])
        assert (stored["name"], stored["stock"]) == ("Renamed", -2)
        assert factory.history(product["id"])[0]["reason"].startswith("Sale #")

    def test_oversold_variant_can_be_sent_back(self, factory, client):
        product = factory.product(stock=0, variants=[{"name": "M", "stock": 1}])
        variant_id = product["variants"][0]["id"]
        factory.checkout(
            [{"id": product["id"], "selected_variant_id": variant_id, "quantity": 2, "price": 9.99}], 19.98
        )
        body = {**factory.get_product(product["id"]), "price": 12.0}

        resp = client.put(f"/api/products/{product['id']}", json=body)

        assert resp.status_code == 200, resp.text
        assert [v["stock"] for v in factory.get_product(product["id"])["variants"]] == [-1]

    def test_new_negative_stock_rejected(self, factory, client):
        product = factory.product(stock=1, price=2.0)
        factory.checkout([{"id": product["id"], "quantity": 3, "price": 2.0}], 6.0)

        resp = client.put(
            f"/api/products/{product['id']}", json={"name": product["name"], "price": 2.0, "stock": -5}
        )

        assert resp.status_code == 400
        assert factory.get_product(product["id"])["stock"] == -2

    def test_negative_stock_rejected_on_create(self, client):
        assert client.post("/api/products", json={"name": "Bad", "price": 1.0, "stock": -1}).status_code == 400
        resp = client.post(
            "/api/products", json={"name": "Bad", "price": 1.0, "variants": [{"name": "S", "stock": -1}]}
        )
        assert resp.status_code == 400
        assert client.get("/api/products").json() == []


class TestProductDelete:
    def test_delete_cascades_variants(self, factory, client, db):
        product = factory.product(variants=[{"name": "A", "stock": 1}])

        resp = client.delete(f"/api/products/{product['id']}")

        assert resp.status_code == 200
        assert resp.json() == {"success": True}
        assert db.query(ProductVariant).count() == 0
        assert client.get(f"/api/products/{product['id']}/history").status_code == 404

    def test_sold_product_can_be_deleted(self, factory, client, db):
        product = factory.product(stock=5)
        sale_id = factory.checkout([{"id": product["id"], "quantity": 1, "price": 9.99}], 9.99).json()["saleId"]

        resp = client.delete(f"/api/products/{product['id']}")

        assert resp.status_code == 200
        item = db.query(SaleItem).filter(SaleItem.sale_id == sale_id).one()
        assert item.product_id is None
        assert item.quantity == 1

    def test_delete_unknown(self, client):
        assert client.delete("/api/products/31337").status_code == 404
