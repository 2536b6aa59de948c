"""
Tests for the purchasable registry and its resolvers
"""
from decimal import Decimal
from unittest.mock import Mock, patch

import pytest
import requests

from cartstate.domain.schemas import PurchasableRef
from cartstate.services.product_client import ProductClient
from cartstate.services.purchasable_registry import (
    PurchasableRegistry,
    PurchasableUnavailable,
    build_registry,
    catalog_resolver,
)


def _response(status, payload=None):
    resp = Mock()
    resp.status_code = status
    resp.json.return_value = payload
    if status >= 400:
        resp.raise_for_status.side_effect = requests.HTTPError(f"{status}")
    else:
        resp.raise_for_status.return_value = None
    return resp


class TestPurchasableRegistry:
    def test_unknown_type_is_unresolved(self):
        assert PurchasableRegistry().resolve(PurchasableRef(type="gift", key="1")) is None

    def test_registered_resolver_is_used(self):
        registry = PurchasableRegistry()
        registry.register("gift", lambda key: None)
        assert registry.types() == ["gift"]
        assert registry.resolve(PurchasableRef(type="gift", key="1")) is None

    def test_local_products(self, db):
        registry = build_registry(db, product_client=Mock())
        product = registry.resolve(PurchasableRef(type="product", key=2))

        assert product.name == "Mouse"
        assert product.price == Decimal("49.50")
        assert registry.resolve(PurchasableRef(type="product", key="abc")) is None
        assert registry.resolve(PurchasableRef(type="product", key="404")) is None


class TestCatalogResolver:
    def test_resolves_remote_product(self):
        client = ProductClient(base_url="http://catalog/")
        with patch("cartstate.services.product_client.requests.get") as get:
            get.return_value = _response(200, {"id": 7, "name": "Webcam", "price": 59.9})
            product = catalog_resolver(client)("7")

        get.assert_called_once_with("http://catalog/products/7", timeout=2)
        assert product.type == "catalog"
        assert product.key == "7"
        assert product.price == Decimal("59.9")

    def test_missing_remote_product_is_dangling(self):
        with patch("cartstate.services.product_client.requests.get", return_value=_response(404)):
            assert catalog_resolver(ProductClient(base_url="http://catalog"))("8") is None

    def test_server_error_is_unavailable(self):
        with patch("cartstate.services.product_client.requests.get", return_value=_response(500)):
            with pytest.raises(PurchasableUnavailable):
                catalog_resolver(ProductClient(base_url="http://catalog"))("8")

    def test_unreachable_catalog_is_unavailable(self):
        client = ProductClient(base_url="http://catalog")
        with patch(
            "cartstate.services.product_client.requests.get",
            side_effect=requests.ConnectionError("down"),
        ) as get:
            with pytest.raises(PurchasableUnavailable):
                catalog_resolver(client)("8")

        assert get.call_count == 3
