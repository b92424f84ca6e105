import logging
from typing import List

from sqlalchemy.orm import Session

from product_importer.models.price_entry import PriceEntry
from product_importer.models.product import Product
from product_importer.services.product_service import normalize_price

logger = logging.getLogger(__name__)


def get_active_entries(db: Session, product: Product) -> List[PriceEntry]:
    return (
        db.query(PriceEntry)
        .filter(PriceEntry.product_id == product.id, PriceEntry.is_active.is_(True))
        .order_by(PriceEntry.id.desc())
        .all()
    )


def sync_price(db: Session, product: Product) -> bool:
    """
    Make sure product has exactly one active PriceEntry at its active_price.

    Returns True if anything was written. The caller commits.
    """
    target = normalize_price(product.active_price)
    entries = get_active_entries(db, product)
    wrote = False

    # legacy duplicates: keep the newest
    if len(entries) > 1:
        for stale in entries[1:]:
            stale.is_active = False
        db.flush()
        logger.warning(
            "Deactivated %d duplicate active price entries for %s",
            len(entries) - 1, product.external_id,
        )
        entries = entries[:1]
        wrote = True

    if not entries:
        db.add(PriceEntry(product_id=product.id, price=target, is_active=True))
        db.flush()
        return True

    entry = entries[0]
    if normalize_price(entry.price) != target:
        entry.price = target
        db.flush()
        wrote = True

    return wrote
