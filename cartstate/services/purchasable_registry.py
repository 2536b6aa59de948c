# cartstate/services/purchasable_registry.py
from decimal import Decimal
from typing import Callable, Dict

import requests
from sqlalchemy.orm import Session

from cartstate.data.models.product import ProductModel
from cartstate.domain.schemas import Purchasable, PurchasableRef
from cartstate.services.product_client import ProductClient
from cartstate.utils.logging import get_logger

logger = get_logger(__name__)

Resolver = Callable[[str], Purchasable | None]


class PurchasableUnavailable(Exception):
    """The backing source could not be reached, as opposed to the entity not existing."""


class PurchasableRegistry:
    """Maps a purchasable type to the function that loads it by key."""

    def __init__(self):
        self._resolvers: Dict[str, Resolver] = {}

    def register(self, purchasable_type: str, resolver: Resolver) -> None:
        self._resolvers[purchasable_type] = resolver

    def types(self) -> list[str]:
        return sorted(self._resolvers)

    def resolve(self, ref: PurchasableRef) -> Purchasable | None:
        resolver = self._resolvers.get(ref.type)
        if resolver is None:
            return None
        return resolver(ref.key)


def local_product_resolver(db: Session) -> Resolver:
    def resolve(key: str) -> Purchasable | None:
        if not key.isdigit():
            return None
        product = db.get(ProductModel, int(key))
        if product is None:
            return None
        return Purchasable(type="product", key=str(product.id), name=product.name, price=product.price)

    return resolve


def catalog_resolver(client: ProductClient) -> Resolver:
    def resolve(key: str) -> Purchasable | None:
        try:
            pdata = client.fetch_product(key)
        except requests.RequestException as e:
            logger.warning(f"Catalog lookup for {key} failed: {e}")
            raise PurchasableUnavailable(f"catalog:{key}") from e
        if pdata is None:
            return None
        return Purchasable(
            type="catalog",
            key=str(pdata.get("id", key)),
            name=pdata.get("name"),
            price=Decimal(str(pdata["price"])) if pdata.get("price") is not None else None,
        )

    return resolve


def build_registry(db: Session, product_client: ProductClient | None = None) -> PurchasableRegistry:
    registry = PurchasableRegistry()
    registry.register("product", local_product_resolver(db))
    registry.register("catalog", catalog_resolver(product_client or ProductClient()))
    return registry
