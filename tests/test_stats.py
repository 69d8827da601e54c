from datetime import timedelta

from pos_app.models.sale import Sale
from pos_app.time_utils import utcnow


def _add_sale(db, total, days_ago=0):
    db.add(Sale(total_amount=total, timestamp=utcnow() - timedelta(days=days_ago)))
    db.commit()


class TestDashboardStats:
    def test_empty_database(self, client):
        resp = client.get("/api/stats")

        assert resp.status_code == 200
        assert resp.json() == {
            "revenue": 0,
            "salesCount": 0,
            "lowStockCount": 0,
            "recentSales": [],
            "dailyRevenue": [],
        }

    def test_revenue_and_count(self, factory, client):
        product = factory.product(stock=50, price=2.5)
        factory.checkout([{"id": product["id"], "quantity": 2, "price": 2.5}], 5.0)
        factory.checkout([{"id": product["id"], "quantity": 1, "price": 2.5}], 2.5)

        stats = client.get("/api/stats").json()

        assert stats["revenue"] == 7.5
        assert stats["salesCount"] == 2

    def test_recent_sales_newest_first_and_capped(self, factory, client):
        cola = factory.product("Cola", stock=100, price=1.0)
        chips = factory.product("Chips", stock=100, price=2.0)
        for _ in range(5):
            factory.checkout([{"id": cola["id"], "quantity": 1, "price": 1.0}], 1.0)
        last = factory.checkout(
            [
                {"id": cola["id"], "quantity": 1, "price": 1.0},
                {"id": chips["id"], "quantity": 1, "price": 2.0},
            ],
            3.0,
        ).json()

        recent = client.get("/api/stats").json()["recentSales"]

        assert len(recent) == 5
        assert recent[0]["id"] == last["saleId"]
        assert recent[0]["item_count"] == 2
        assert recent[0]["total_amount"] == 3.0
        assert recent[1]["item_count"] == 1
        ids = [s["id"] for s in recent]
        assert ids == sorted(ids, reverse=True)

    def test_low_stock_uses_default_threshold(self, factory, client):
        factory.product("Low", stock=3)
        factory.product("High", stock=30)

        assert client.get("/api/stats").json()["lowStockCount"] == 1

    def test_low_stock_threshold_param(self, factory, client):
        factory.product("A", stock=3)
        factory.product("B", stock=30)

        assert client.get("/api/stats", params={"threshold": 50}).json()["lowStockCount"] == 2
        assert client.get("/api/stats", params={"threshold": 0}).json()["lowStockCount"] == 0

    def test_negative_threshold_rejected(self, client):
        assert client.get("/api/stats", params={"threshold": -1}).status_code == 400

    def test_low_stock_ignores_variant_stock(self, factory, client):
        factory.product("Shirt", stock=0, variants=[{"name": "M", "stock": 100}])

        assert client.get("/api/stats").json()["lowStockCount"] == 1

    def test_repeated_reads_are_identical(self, factory, client):
        product = factory.product(stock=10, price=4.0)
        factory.checkout([{"id": product["id"], "quantity": 1, "price": 4.0}], 4.0)

        assert client.get("/api/stats").json() == client.get("/api/stats").json()


class TestDailyRevenue:
    def test_groups_by_day_oldest_first(self, client, db):
        _add_sale(db, 10.0)
        _add_sale(db, 5.5)
        _add_sale(db, 3.0, days_ago=2)

        daily = client.get("/api/stats").json()["dailyRevenue"]

        today = utcnow().date()
        assert daily == [
            {"date": str(today - timedelta(days=2)), "revenue": 3.0},
            {"date": str(today), "revenue": 15.5},
        ]

    def test_old_sales_left_out_of_trend_but_counted(self, client, db):
        _add_sale(db, 100.0, days_ago=30)
        _add_sale(db, 1.0)

        stats = client.get("/api/stats").json()

        assert [d["revenue"] for d in stats["dailyRevenue"]] == [1.0]
        assert stats["revenue"] == 101.0
        assert stats["salesCount"] == 2
