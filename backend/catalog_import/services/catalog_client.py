"""Async REST client for the remote catalog service (categories and products)."""
import logging
from typing import Any

import httpx

from catalog_import.core.config import settings
from catalog_import.services.errors import (
    CatalogError,
    CategoryResolutionError,
    SubmissionError,
)

logger = logging.getLogger(__name__)


def _error_message(response: httpx.Response) -> str:
    """Pull a human-readable message out of an error body, falling back to the status code."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for key in ("error", "detail", "message"):
            value = body.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
            if isinstance(value, list) and value:
                # FastAPI-style validation errors: [{"msg": ...}, ...]
                msgs = [item.get("msg", str(item)) if isinstance(item, dict) else str(item) for item in value]
                return "; ".join(msgs)
    return f"Catalog returned HTTP {response.status_code}"


def _unwrap(body: Any) -> Any:
    if isinstance(body, dict) and "data" in body:
        return body["data"]
    return body


class CatalogClient:
    """Thin wrapper over httpx.AsyncClient.

    Every failure, HTTP or transport, surfaces as CatalogError (or the
    operation-specific subclass) with the server's message when one exists.
    """

    def __init__(self, http: httpx.AsyncClient):
        self._http = http

    @classmethod
    def from_settings(cls) -> "CatalogClient":
        headers = {"Accept": "application/json"}
        if settings.CATALOG_API_TOKEN:
            headers["Authorization"] = f"Bearer {settings.CATALOG_API_TOKEN}"
        http = httpx.AsyncClient(
            base_url=settings.CATALOG_API_URL.rstrip("/"),
            headers=headers,
            timeout=settings.CATALOG_API_TIMEOUT_SECONDS,
        )
        return cls(http)

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "CatalogClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        error_cls: type[CatalogError] = CatalogError,
        json: dict[str, Any] | None = None,
    ) -> Any:
        try:
            response = await self._http.request(method, path, json=json)
        except httpx.HTTPError as exc:
            logger.warning("Catalog %s %s unreachable: %s", method, path, exc)
            raise error_cls(f"Catalog service unreachable: {exc}") from exc

        if response.is_error:
            message = _error_message(response)
            logger.warning("Catalog %s %s → %s: %s", method, path, response.status_code, message)
            raise error_cls(message, status_code=response.status_code)

        if not response.content:
            return None
        try:
            return _unwrap(response.json())
        except ValueError as exc:
            raise error_cls(f"Catalog returned a non-JSON body for {method} {path}") from exc

    # ─── Categories ───

    async def list_categories(self) -> list[dict[str, Any]]:
        """GET /categories → [{id, name}, ...]."""
        body = await self._request("GET", "/categories", CategoryResolutionError)
        if not isinstance(body, list):
            raise CategoryResolutionError("Catalog returned an unexpected category list")
        return [c for c in body if isinstance(c, dict) and "id" in c]

    async def create_category(self, name: str, description: str | None = None) -> dict[str, Any]:
        """POST /categories {name, description} → {id, name}."""
        body = await self._request(
            "POST",
            "/categories",
            CategoryResolutionError,
            json={"name": name, "description": description or ""},
        )
        if not isinstance(body, dict) or "id" not in body:
            raise CategoryResolutionError(f"Category '{name}' created without an id in the response")
        return body

    # ─── Products ───

    async def create_product(self, payload: dict[str, Any]) -> Any:
        """POST /products → product id."""
        body = await self._request("POST", "/products", SubmissionError, json=payload)
        if isinstance(body, dict) and "id" in body:
            return body["id"]
        raise SubmissionError("Product created without an id in the response")
