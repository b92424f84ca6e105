from decimal import Decimal

import httpx
import pytest

from product_importer.core.exceptions import (
    NotFound,
    RemoteBadStatus,
    RemoteMalformedPayload,
    RemoteUnavailable,
)
from product_importer.schemas.catalog import CatalogItem
from product_importer.services.catalog_client import filter_catalog


def test_list_catalog_parses_products(make_catalog_client):
    items = make_catalog_client().list_catalog()

    assert [item.id for item in items] == ["A1", "B2", "3"]
    assert items[0].name == "Widget"
    assert items[0].price == Decimal("9.99")
    assert items[0].image_url == "https://img/a1.png"
    assert items[1].image_url is None
    assert items[1].description is None


def test_get_detail_returns_single_item(make_catalog_client):
    item = make_catalog_client().get_detail("B2")

    assert item.id == "B2"
    assert item.name == "Gadget"


def test_get_detail_percent_encodes_id(make_catalog_client):
    seen = []

    def handler(request):
        seen.append(request.url.raw_path)
        return httpx.Response(200, json={"product_id": "a/b c", "name": "Odd", "price": 1})

    make_catalog_client(handler).get_detail("a/b c")

    assert seen == [b"/products/a%2Fb%20c"]


def test_get_detail_404_is_not_found(make_catalog_client):
    with pytest.raises(NotFound) as exc_info:
        make_catalog_client().get_detail("missing")
    assert exc_info.value.item_id == "missing"


def test_get_detail_null_body_is_not_found(make_catalog_client):
    client = make_catalog_client(lambda request: httpx.Response(200, content=b"null"))
    with pytest.raises(NotFound):
        client.get_detail("A1")


def test_list_404_is_bad_status(make_catalog_client):
    client = make_catalog_client(lambda request: httpx.Response(404))
    with pytest.raises(RemoteBadStatus) as exc_info:
        client.list_catalog()
    assert exc_info.value.status_code == 404


def test_server_error_is_bad_status(make_catalog_client):
    client = make_catalog_client(lambda request: httpx.Response(503, text="down"))
    with pytest.raises(RemoteBadStatus) as exc_info:
        client.get_detail("A1")
    assert exc_info.value.status_code == 503


def test_network_error_is_unavailable(make_catalog_client):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(RemoteUnavailable):
        make_catalog_client(handler).list_catalog()


def test_timeout_is_unavailable(make_catalog_client):
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(RemoteUnavailable):
        make_catalog_client(handler).list_catalog()


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, text="<html>not json</html>"),
        httpx.Response(200, json=[{"product_id": "A1"}]),
        httpx.Response(200, json={"items": []}),
        httpx.Response(200, json={"products": ["A1"]}),
        httpx.Response(200, json={"products": [{"product_id": "A1", "price": "cheap"}]}),
    ],
)
def test_malformed_list_payloads(make_catalog_client, response):
    client = make_catalog_client(lambda request: response)
    with pytest.raises(RemoteMalformedPayload):
        client.list_catalog()


def test_default_timeout_is_sixty_seconds():
    from product_importer.services.catalog_client import CatalogClient

    with CatalogClient(base_url="http://catalog.test") as client:
        assert client.timeout_seconds == 60.0
        assert client._client.timeout.read == 60.0


def test_filter_catalog_matches_name_case_insensitively():
    items = [
        CatalogItem(id="1", name="Blue Widget", price=1),
        CatalogItem(id="2", name="Red Gadget", price=2),
    ]

    assert [i.id for i in filter_catalog(items, "WIDG")] == ["1"]
    assert filter_catalog(items, "zzz") == []


def test_filter_catalog_ignores_short_terms():
    items = [CatalogItem(id="1", name="Blue Widget", price=1)]

    assert filter_catalog(items, "zz") == items
    assert filter_catalog(items, "") == items
    assert filter_catalog(items, None) == items
