"""
Pytest fixtures for the POS API and terminal sync tests.

Every test gets its own SQLite file, an application built around it and a
TestClient with the lifespan (table creation) already run.
"""

import pytest
from fastapi.testclient import TestClient

from pos_app.config import Settings
from pos_app.main import create_app


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        DATABASE_URL=f"sqlite:///{tmp_path / 'pos.db'}",
        SEED_CATEGORIES="",
        LOW_STOCK_THRESHOLD=10,
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db(client, app):
    """Session on the same database the API writes to."""
    session = app.state.session_factory()
    yield session
    session.close()


class DataFactory:
    """Creates catalog rows through the public API."""

    def __init__(self, client: TestClient):
        self.client = client

    def category(self, name: str = "Snacks", **fields) -> dict:
        resp = self.client.post("/api/categories", json={"name": name, **fields})
        assert resp.status_code == 200, resp.text
        return {"name": name, **resp.json()}

    def product(self, name: str = "Cola", price: float = 9.99, stock: int = 10, **fields) -> dict:
        body = {"name": name, "price": price, "stock": stock, **fields}
        resp = self.client.post("/api/products", json=body)
        assert resp.status_code == 200, resp.text
        return self.get_product(resp.json()["id"])

    def get_product(self, product_id: int) -> dict:
        products = self.client.get("/api/products").json()
        return next(p for p in products if p["id"] == product_id)

    def history(self, product_id: int) -> list[dict]:
        resp = self.client.get(f"/api/products/{product_id}/history")
        assert resp.status_code == 200, resp.text
        return resp.json()

    def checkout(self, items: list[dict], total: float):
        return self.client.post("/api/checkout", json={"items": items, "total": total})


@pytest.fixture
def factory(client):
    return DataFactory(client)
