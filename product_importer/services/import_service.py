"""
Import reconciler: upserts a user's catalog selection into products.

Invalid rows are skipped, never fatal. Duplicate ids inside one call
collapse to the last valid occurrence. All writes of a call commit
together or not at all.
"""

import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, List

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from product_importer.core.exceptions import StorageWriteFailure, ValidationSkipped
from product_importer.schemas.catalog import CatalogItem
from product_importer.schemas.product import ImportResult
from product_importer.services.price_sync import sync_price
from product_importer.services.product_service import (
    CREATED,
    UPDATED,
    create_or_update,
    normalize_price,
)

logger = logging.getLogger(__name__)


def parse_selection(raw_items: Iterable[Any]) -> List[CatalogItem]:
    """Turn a decoded JSON array into CatalogItems, dropping unparsable rows."""
    items = []
    for index, raw in enumerate(raw_items or []):
        if not isinstance(raw, dict):
            logger.debug("Skipping selection row %d: not an object", index)
            continue
        try:
            items.append(CatalogItem.model_validate(raw))
        except ValidationError as exc:
            logger.debug("Skipping selection row %d: %s", index, exc.errors())
    return items


def validate_item(item: CatalogItem) -> CatalogItem:
    """
    Return a cleaned copy of item or raise ValidationSkipped.

    id and name are trimmed and required, price is required and >= 0,
    missing image/description become "".
    """
    item_id = (item.id or "").strip()
    name = (item.name or "").strip()

    if not item_id:
        raise ValidationSkipped("missing id")
    if not name:
        raise ValidationSkipped("missing name", item_id)
    if item.price is None:
        raise ValidationSkipped("missing price", item_id)
    try:
        price = normalize_price(item.price)
    except InvalidOperation:
        raise ValidationSkipped("price is not a number", item_id)
    if not price.is_finite():
        raise ValidationSkipped("price is not a number", item_id)
    if price < Decimal("0"):
        raise ValidationSkipped("negative price", item_id)

    return CatalogItem(
        id=item_id,
        name=name,
        price=price,
        image_url=item.image_url or "",
        description=item.description or "",
    )


def _dedupe_last_wins(items: Iterable[CatalogItem]) -> List[CatalogItem]:
    by_id: Dict[str, CatalogItem] = {}
    for item in items:
        # pop so the surviving row keeps its last position
        by_id.pop(item.id, None)
        by_id[item.id] = item
    return list(by_id.values())


def import_selection(db: Session, items: Iterable[CatalogItem]) -> ImportResult:
    valid: List[CatalogItem] = []
    skipped = 0
    for item in items:
        try:
            valid.append(validate_item(item))
        except ValidationSkipped as exc:
            skipped += 1
            logger.debug("Skipping item %r: %s", exc.item_id, exc.reason)

    reconciled = _dedupe_last_wins(valid)
    result = ImportResult()

    try:
        for item in reconciled:
            product, outcome = create_or_update(db, item.id, item.name, item.price)
            if outcome == CREATED:
                result.created_count += 1
            elif outcome == UPDATED:
                result.updated_count += 1
            sync_price(db, product)

        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Import of %d products rolled back", len(reconciled))
        raise StorageWriteFailure(str(exc)) from exc

    logger.info(
        "Imported selection: %d created, %d updated, %d unchanged, %d skipped",
        result.created_count,
        result.updated_count,
        len(reconciled) - result.created_count - result.updated_count,
        skipped,
    )
    return result
