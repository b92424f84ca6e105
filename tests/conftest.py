import os

# must be set before the app's settings are imported
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("SCHEDULER_ENABLED", "false")

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from product_importer.database.connection import Base, get_db
from product_importer.models import backup_snapshot, price_entry, product  # noqa: F401
from product_importer.services.catalog_client import CatalogClient

TEST_DB_URL = "sqlite:///:memory:"

engine = create_engine(
    TEST_DB_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db():
    # fresh schema per test; services commit for real
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


CATALOG = {
    "products": [
        {"product_id": "A1", "name": "Widget", "price": 9.99, "image": "https://img/a1.png", "description": "A widget"},
        {"product_id": "B2", "name": "Gadget", "price": 24.5, "image": None, "description": None},
        {"product_id": 3, "name": "Gizmo Deluxe", "price": 100, "image": "", "description": "Numeric id"},
    ]
}


def catalog_handler(request: httpx.Request) -> httpx.Response:
    """Stand-in for the remote catalog API."""
    path = request.url.path
    if path == "/products":
        return httpx.Response(200, json=CATALOG)
    if path.startswith("/products/"):
        item_id = path[len("/products/"):]
        for item in CATALOG["products"]:
            if str(item["product_id"]) == item_id:
                return httpx.Response(200, json=item)
        return httpx.Response(404, json={"error": "not found"})
    return httpx.Response(500)


@pytest.fixture()
def make_catalog_client():
    clients = []

    def _make(handler=catalog_handler, **kwargs):
        client = CatalogClient(
            base_url="http://catalog.test",
            transport=httpx.MockTransport(handler),
            **kwargs,
        )
        clients.append(client)
        return client

    yield _make
    for client in clients:
        client.close()


@pytest.fixture()
def api(db, make_catalog_client):
    from product_importer.main import app
    from product_importer.routes.catalog import catalog_cache, get_catalog_client

    def _override_db():
        yield db

    def _override_client():
        yield make_catalog_client()

    catalog_cache.invalidate()
    app.dependency_overrides[get_db] = _override_db
    app.dependency_overrides[get_catalog_client] = _override_client
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
        catalog_cache.invalidate()


@pytest.fixture()
def without_active_price_index(db):
    """Schema as it was before the one-active-entry index existed."""
    db.execute(text("DROP INDEX uq_price_entries_one_active"))
    db.commit()
    return db
