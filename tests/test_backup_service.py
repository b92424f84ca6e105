from datetime import datetime, timedelta
from decimal import Decimal

from sqlalchemy.exc import SQLAlchemyError

from product_importer.models.backup_snapshot import BackupSnapshot
from product_importer.models.price_entry import PriceEntry
from product_importer.models.product import Product
from product_importer.schemas.catalog import CatalogItem
from product_importer.services.backup_service import list_snapshots, run_backup
from product_importer.services.import_service import import_selection
from product_importer.services.product_service import find_by_external_id


def _seed(db, count=3):
    items = [
        CatalogItem(id=f"P{i}", name=f"Product {i}", price=f"{i + 1}.50")
        for i in range(count)
    ]
    import_selection(db, items)


def test_run_backup_snapshots_every_active_product(db):
    _seed(db, 3)
    captured_at = datetime(2026, 1, 1, 9, 41)

    result = run_backup(db, now=captured_at)

    assert result.snapshot_count == 3
    assert result.failure_count == 0
    snapshots = list_snapshots(db)
    assert [s.product_external_id for s in snapshots] == ["P0", "P1", "P2"]
    assert snapshots[0].name_snapshot == "Product 0"
    assert snapshots[0].price_snapshot == Decimal("1.50")
    assert all(s.captured_at == captured_at for s in snapshots)


def test_second_run_overwrites_instead_of_appending(db):
    _seed(db, 2)
    first = datetime(2026, 1, 1, 9, 41)
    second = first + timedelta(hours=14, minutes=2)

    run_backup(db, now=first)
    run_backup(db, now=second)

    snapshots = list_snapshots(db)
    assert len(snapshots) == 2
    assert all(s.captured_at == second for s in snapshots)


def test_snapshot_picks_up_changed_price(db):
    _seed(db, 1)
    run_backup(db)

    import_selection(db, [CatalogItem(id="P0", name="Renamed", price="3.00")])
    run_backup(db)

    snapshot = db.query(BackupSnapshot).filter_by(product_external_id="P0").one()
    assert snapshot.name_snapshot == "Renamed"
    assert snapshot.price_snapshot == Decimal("3.00")


def test_inactive_products_are_not_snapshotted(db):
    _seed(db, 2)
    find_by_external_id(db, "P1").is_active = False
    db.commit()

    result = run_backup(db)

    assert result.snapshot_count == 1
    assert [s.product_external_id for s in list_snapshots(db)] == ["P0"]


def test_empty_storage_is_a_clean_run(db):
    result = run_backup(db)

    assert (result.snapshot_count, result.failure_count, result.failures) == (0, 0, [])


def test_failed_chunk_does_not_abort_remaining_chunks(db, monkeypatch):
    _seed(db, 5)
    real_commit = db.commit
    calls = {"n": 0}

    def flaky_commit():
        calls["n"] += 1
        if calls["n"] == 2:
            raise SQLAlchemyError("write batch rejected")
        real_commit()

    monkeypatch.setattr(db, "commit", flaky_commit)
    result = run_backup(db, chunk_size=2)
    monkeypatch.undo()

    # chunks: [P0, P1], [P2, P3] (fails), [P4]
    assert result.snapshot_count == 3
    assert result.failure_count == 2
    assert len(result.failures) == 1
    assert result.failures[0].chunk_index == 1
    assert result.failures[0].size == 2
    assert "write batch rejected" in result.failures[0].reason
    assert [s.product_external_id for s in list_snapshots(db)] == ["P0", "P1", "P4"]


def test_next_run_heals_a_failed_chunk(db, monkeypatch):
    _seed(db, 2)

    def failing_commit():
        raise SQLAlchemyError("boom")

    monkeypatch.setattr(db, "commit", failing_commit)
    assert run_backup(db, chunk_size=1).failure_count == 2
    monkeypatch.undo()

    result = run_backup(db, chunk_size=1)

    assert result.snapshot_count == 2
    assert len(list_snapshots(db)) == 2


def test_legacy_duplicate_price_entries_snapshot_once(without_active_price_index):
    db = without_active_price_index
    product = Product(external_id="DUP", name="Duplicated", active_price=Decimal("6.00"))
    db.add(product)
    db.flush()
    db.add(PriceEntry(product_id=product.id, price=Decimal("5.00"), is_active=True))
    db.add(PriceEntry(product_id=product.id, price=Decimal("6.00"), is_active=True))
    db.commit()

    result = run_backup(db)

    assert (result.snapshot_count, result.failure_count) == (1, 0)
    snapshot = db.query(BackupSnapshot).filter_by(product_external_id="DUP").one()
    assert snapshot.price_snapshot == Decimal("6.00")
