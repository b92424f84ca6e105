"""
HTTP client for the remote product catalog.

Two calls: the list endpoint and the per-item detail endpoint. Every failure
is mapped onto the CatalogError taxonomy; there is no retry and no caching
here, callers decide both.
"""

import logging
from typing import Any, List, Optional
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from product_importer.core.config import settings
from product_importer.core.exceptions import (
    NotFound,
    RemoteBadStatus,
    RemoteMalformedPayload,
    RemoteUnavailable,
)
from product_importer.schemas.catalog import CatalogItem

logger = logging.getLogger(__name__)

MIN_FILTER_LENGTH = 3


class CatalogClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        list_path: Optional[str] = None,
        detail_path: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.base_url = (base_url or settings.CATALOG_BASE_URL).rstrip("/")
        self.list_path = list_path or settings.CATALOG_LIST_PATH
        self.detail_path = detail_path or settings.CATALOG_DETAIL_PATH
        self.timeout_seconds = timeout_seconds or settings.CATALOG_TIMEOUT_SECONDS
        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=self.timeout_seconds,
            transport=transport,
        )

    def __enter__(self) -> "CatalogClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    # ---------- PUBLIC CALLS ----------

    def list_catalog(self) -> List[CatalogItem]:
        payload = self._get_json(self.list_path)

        if not isinstance(payload, dict) or not isinstance(payload.get("products"), list):
            raise RemoteMalformedPayload("List payload has no 'products' array")

        items = [self._parse_item(raw) for raw in payload["products"]]
        logger.info("Fetched %d catalog items", len(items))
        return items

    def get_detail(self, item_id: str) -> CatalogItem:
        path = self.detail_path.format(product_id=quote(str(item_id), safe=""))
        payload = self._get_json(path, item_id=item_id)

        if payload is None:
            raise NotFound(item_id)
        return self._parse_item(payload)

    # ---------- INTERNALS ----------

    def _get_json(self, path: str, item_id: Optional[str] = None) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = self._client.get(path)
        except httpx.HTTPError as exc:
            logger.warning("Catalog request to %s failed: %s", url, exc)
            raise RemoteUnavailable(f"Catalog request to {url} failed: {exc}") from exc

        if response.status_code == 404 and item_id is not None:
            raise NotFound(item_id)
        if not response.is_success:
            logger.warning("Catalog request to %s returned HTTP %s", url, response.status_code)
            raise RemoteBadStatus(response.status_code, url)

        try:
            return response.json()
        except ValueError as exc:
            raise RemoteMalformedPayload(f"Catalog response from {url} is not JSON") from exc

    @staticmethod
    def _parse_item(raw: Any) -> CatalogItem:
        if not isinstance(raw, dict):
            raise RemoteMalformedPayload(f"Catalog item is not an object: {raw!r}")
        try:
            return CatalogItem.model_validate(raw)
        except ValidationError as exc:
            raise RemoteMalformedPayload(f"Catalog item has an unexpected shape: {exc}") from exc


def filter_catalog(items: List[CatalogItem], term: Optional[str]) -> List[CatalogItem]:
    """
    Case-insensitive name search. Terms shorter than three characters
    leave the list untouched.
    """
    term = (term or "").strip().lower()
    if len(term) < MIN_FILTER_LENGTH:
        return list(items)
    return [item for item in items if term in (item.name or "").lower()]
