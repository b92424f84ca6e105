import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request

from product_importer.core.config import settings
from product_importer.core.exceptions import CatalogError, NotFound
from product_importer.schemas.catalog import CatalogItemResponse
from product_importer.services.catalog_cache import CatalogCache
from product_importer.services.catalog_client import CatalogClient, filter_catalog

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/catalog", tags=["Remote Catalog"])

catalog_cache = CatalogCache(ttl_seconds=settings.CATALOG_CACHE_TTL_SECONDS)


def get_catalog_client():
    client = CatalogClient()
    try:
        yield client
    finally:
        client.close()


# LIST (cached, optional name filter)
@router.get("/", response_model=list[CatalogItemResponse])
def list_catalog(
    request: Request,
    q: Optional[str] = None,
    client: CatalogClient = Depends(get_catalog_client),
):
    metrics = getattr(request.app.state, "metrics", None)
    try:
        items = catalog_cache.get(client.list_catalog, metrics)
    except CatalogError as exc:
        logger.warning("Catalog list failed: %s", exc)
        raise HTTPException(502, exc.user_message)
    return [CatalogItemResponse.from_item(item) for item in filter_catalog(items, q)]

# DETAIL
@router.get("/{item_id}", response_model=CatalogItemResponse)
def get_catalog_item(item_id: str, client: CatalogClient = Depends(get_catalog_client)):
    try:
        item = client.get_detail(item_id)
    except NotFound as exc:
        raise HTTPException(404, exc.user_message)
    except CatalogError as exc:
        logger.warning("Catalog detail for %s failed: %s", item_id, exc)
        raise HTTPException(502, exc.user_message)
    return CatalogItemResponse.from_item(item)
