import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from product_importer.core.config import settings
from product_importer.core.exceptions import ChunkFailure
from product_importer.models.backup_snapshot import BackupSnapshot
from product_importer.models.price_entry import PriceEntry
from product_importer.models.product import Product

logger = logging.getLogger(__name__)


@dataclass
class BackupResult:
    snapshot_count: int = 0
    failure_count: int = 0
    failures: List[ChunkFailure] = field(default_factory=list)


def _load_active_products(db: Session) -> List[Tuple[str, str, object]]:
    # newest active entry per product; legacy duplicates must not double a row
    newest_entry = (
        db.query(PriceEntry.product_id, func.max(PriceEntry.id).label("entry_id"))
        .filter(PriceEntry.is_active.is_(True))
        .group_by(PriceEntry.product_id)
        .subquery()
    )
    # plain tuples: a rolled back chunk must not expire the rows we still need
    rows = (
        db.query(Product.external_id, Product.name, PriceEntry.price)
        .join(newest_entry, newest_entry.c.product_id == Product.id)
        .join(PriceEntry, PriceEntry.id == newest_entry.c.entry_id)
        .filter(Product.is_active.is_(True))
        .order_by(Product.external_id)
        .all()
    )
    return [(external_id, name, price) for external_id, name, price in rows]


def _upsert_chunk(db: Session, chunk: List[Tuple[str, str, object]], captured_at: datetime) -> None:
    ids = [external_id for external_id, _, _ in chunk]
    existing = {
        snap.product_external_id: snap
        for snap in db.query(BackupSnapshot)
        .filter(BackupSnapshot.product_external_id.in_(ids))
        .all()
    }

    for external_id, name, price in chunk:
        snapshot = existing.get(external_id)
        if snapshot is None:
            db.add(BackupSnapshot(
                product_external_id=external_id,
                name_snapshot=name,
                price_snapshot=price,
                captured_at=captured_at,
            ))
        else:
            snapshot.name_snapshot = name
            snapshot.price_snapshot = price
            snapshot.captured_at = captured_at

    db.commit()


def run_backup(
    db: Session,
    chunk_size: Optional[int] = None,
    now: Optional[datetime] = None,
) -> BackupResult:
    """
    Snapshot every active product with its active price into backup_snapshots.

    Works chunk by chunk; a failed chunk is rolled back and recorded, the
    remaining chunks still run. Not atomic across the whole run.
    """
    chunk_size = chunk_size or settings.BACKUP_CHUNK_SIZE
    captured_at = now or datetime.utcnow()
    result = BackupResult()

    products = _load_active_products(db)
    logger.info("Backup run started: %d active products", len(products))

    for chunk_index, start in enumerate(range(0, len(products), chunk_size)):
        chunk = products[start:start + chunk_size]
        try:
            _upsert_chunk(db, chunk, captured_at)
        except SQLAlchemyError as exc:
            db.rollback()
            failure = ChunkFailure(chunk_index, len(chunk), str(exc))
            result.failures.append(failure)
            result.failure_count += len(chunk)
            logger.error("%s", failure)
            continue
        result.snapshot_count += len(chunk)

    logger.info(
        "Backup run finished: %d snapshots, %d failures",
        result.snapshot_count, result.failure_count,
    )
    return result


def list_snapshots(db: Session) -> List[BackupSnapshot]:
    return db.query(BackupSnapshot).order_by(BackupSnapshot.product_external_id).all()
