import logging

import httpx

from pos_app.exceptions import ConflictError

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Non-2xx answer from the API other than a conflict."""

    def __init__(self, status_code: int, payload: dict | None = None):
        self.status_code = status_code
        self.payload = payload or {}
        super().__init__(self.payload.get("error") or f"HTTP {status_code}")


class ConnectivityError(Exception):
    """The API could not be reached at all."""


class PosApiClient:
    """Thin wrapper over the terminal-facing HTTP API.

    The ``httpx.Client`` is injected so callers decide base URL, timeout and
    transport. A FastAPI ``TestClient`` works as well.
    """

    def __init__(self, http: httpx.Client):
        self.http = http

    @classmethod
    def from_settings(cls, settings) -> "PosApiClient":
        return cls(httpx.Client(base_url=settings.API_BASE_URL, timeout=settings.HTTP_TIMEOUT))

    def close(self) -> None:
        self.http.close()

    def _request(self, method: str, url: str, **kwargs):
        try:
            resp = self.http.request(method, url, **kwargs)
        except httpx.TransportError as e:
            raise ConnectivityError(str(e)) from e

        if resp.status_code == 409:
            payload = resp.json()
            raise ConflictError(payload.get("current") or {}, payload.get("error") or "Conflict")
        if not resp.is_success:
            try:
                payload = resp.json()
            except ValueError:
                payload = {"error": resp.text}
            raise ApiError(resp.status_code, payload if isinstance(payload, dict) else {"error": str(payload)})
        return resp.json()

    def health(self) -> bool:
        try:
            self._request("GET", "/health")
        except (ConnectivityError, ApiError):
            return False
        return True

    # --- Catalog ---

    def fetch_categories(self) -> list[dict]:
        return self._request("GET", "/api/categories")

    def save_category(self, category: dict) -> dict:
        if category.get("id"):
            return self._request("PUT", f"/api/categories/{category['id']}", json=category)
        return self._request("POST", "/api/categories", json=category)

    def delete_category(self, category_id: int) -> dict:
        return self._request("DELETE", f"/api/categories/{category_id}")

    def fetch_products(self) -> list[dict]:
        return self._request("GET", "/api/products")

    def save_product(self, product: dict) -> dict:
        if product.get("id"):
            return self._request("PUT", f"/api/products/{product['id']}", json=product)
        return self._request("POST", "/api/products", json=product)

    def delete_product(self, product_id: int) -> dict:
        return self._request("DELETE", f"/api/products/{product_id}")

    def fetch_product_history(self, product_id: int) -> list[dict]:
        return self._request("GET", f"/api/products/{product_id}/history")

    # --- Sales ---

    def checkout(self, items: list[dict], total: float) -> dict:
        return self._request("POST", "/api/checkout", json={"items": items, "total": total})

    def fetch_stats(self, threshold: int | None = None) -> dict:
        params = {"threshold": threshold} if threshold is not None else None
        return self._request("GET", "/api/stats", params=params)
