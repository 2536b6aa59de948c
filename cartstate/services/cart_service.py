# cartstate/services/cart_service.py
from datetime import datetime, timezone, timedelta
from decimal import Decimal
from typing import Any, List

from sqlalchemy.orm import Session

from cartstate.data.models.cart_item import CartItemModel
from cartstate.domain.schemas import CartItemOut, Purchasable, PurchasableRef
from cartstate.repos.cart_repo import CartRepo
from cartstate.services import notification_service as events
from cartstate.services.cache_service import CartCache
from cartstate.services.identity_service import IdentityResolver
from cartstate.services.notification_service import NotificationService
from cartstate.services.purchasable_registry import PurchasableRegistry, PurchasableUnavailable
from cartstate.utils.settings import (
    CART_CACHE_ENABLED,
    CART_CACHE_KEY_PREFIX,
    CART_CACHE_LIFETIME,
    CART_LOG_ENABLED,
)
from cartstate.utils.logging import get_logger

logger = get_logger(__name__)


class CartService:
    """
    Cart of a single identity (logged-in user or guest cookie).

    Reads are cache-aside: in-memory working set, then Redis, then the
    database. Every write invalidates both layers instead of patching
    them, so the next read always rebuilds from the store.

    One instance per request; the working set must not outlive it.
    """

    def __init__(
        self,
        db: Session,
        identity: IdentityResolver | None,
        registry: PurchasableRegistry,
        notifier: NotificationService,
        cache: CartCache | None = None,
        cache_enabled: bool = CART_CACHE_ENABLED,
        cache_key_prefix: str = CART_CACHE_KEY_PREFIX,
        cache_lifetime: int = CART_CACHE_LIFETIME,
        log_enabled: bool = CART_LOG_ENABLED,
    ):
        self.repo = CartRepo(db)
        self.identity = identity
        self.registry = registry
        self.notifier = notifier
        self.cache = cache
        self.cache_enabled = cache_enabled and cache is not None
        self.cache_key_prefix = cache_key_prefix
        self.cache_lifetime = cache_lifetime
        self.log_enabled = log_enabled

        self._items: List[CartItemOut] = []
        self._unresolved = False

    # =====================================================
    # IDENTITY / CACHE
    # =====================================================
    def _resolver(self) -> IdentityResolver:
        if self.identity is None:
            raise RuntimeError("Cart identity is not resolved")
        return self.identity

    def owner_id(self) -> str:
        # users and guests live in separate namespaces, a cookie can never name a user
        resolver = self._resolver()
        user_id = resolver.current_user_id()
        if user_id:
            return f"user:{user_id}"
        return f"guest:{resolver.current_anonymous_id()}"

    def cache_key(self) -> str:
        return f"{self.cache_key_prefix}{self.owner_id()}"

    def _refresh_cache(self) -> None:
        if self.cache_enabled:
            self.cache.forget(self.cache_key())
        self._items = []

    def _log(self, message: str, **context: Any) -> None:
        if self.log_enabled:
            logger.info("[cart] %s %s", message, context)

    def _to_out(self, item: CartItemModel, purchasable: Purchasable | None = None) -> CartItemOut:
        ref = PurchasableRef(type=item.cartable_type, key=item.cartable_id)
        return CartItemOut(
            id=str(item.id),
            owner_id=item.owner_id,
            user_id=item.user_id,
            cookie_id=item.cookie_id,
            purchasable_type=item.cartable_type,
            purchasable_key=item.cartable_id,
            quantity=item.quantity,
            created_at=item.created_at,
            updated_at=item.updated_at,
            purchasable=purchasable if purchasable is not None else self._resolve_line(ref),
        )

    def _resolve_line(self, ref: PurchasableRef) -> Purchasable | None:
        try:
            return self.registry.resolve(ref)
        except PurchasableUnavailable:
            # priced at zero for now, and kept out of the cache
            self._unresolved = True
            return None

    # =====================================================
    # QUERY
    # =====================================================
    def get(self, reason: str | None = None) -> List[CartItemOut]:
        # already loaded during this request
        if self._items:
            return self._items

        self._log("Fetching cart items", called_by=reason)

        if self.cache_enabled:
            self._items = self.cache.remember(
                self.cache_key(),
                self.cache_lifetime * 60,
                self._fetch_from_store,
                cacheable=lambda items: not self._unresolved,
            )
        else:
            self._items = self._fetch_from_store()

        return self._items

    def _fetch_from_store(self) -> List[CartItemOut]:
        self._unresolved = False
        items = [self._to_out(i) for i in self.repo.list_for_owner(self.owner_id())]
        self._log("Fetched from store", count=len(items))
        return items

    def total(self) -> Decimal:
        return sum((i.quantity * i.unit_price for i in self.get("total")), Decimal("0.00"))

    def items_count(self) -> int:
        return len(self.get("items_count"))

    def total_quantity(self) -> int:
        return sum(i.quantity for i in self.get("total_quantity"))

    # =====================================================
    # COMMANDS
    # =====================================================
    def add(self, ref: PurchasableRef, quantity: int = 1) -> CartItemOut:
        if quantity <= 0:
            raise ValueError("Quantity must be greater than 0")

        purchasable = self.registry.resolve(ref)
        if purchasable is None:
            raise LookupError(f"Purchasable {ref.type}:{ref.key} does not exist")

        self._log("Adding item to cart", cartable_type=ref.type, cartable_id=ref.key, quantity=quantity)

        self.notifier.publish(
            events.ITEM_ADDING,
            {"purchasable": ref.model_dump(), "quantity": quantity},
        )

        owner_id = self.owner_id()
        item = self.repo.find_by_owner_and_purchasable(owner_id, ref.type, ref.key)

        if item is None:
            self._log("Creating new cart item")
            item = self.repo.create(
                owner_id=owner_id,
                user_id=self._resolver().current_user_id(),
                cookie_id=self._resolver().current_anonymous_id(),
                cartable_type=ref.type,
                cartable_id=ref.key,
                quantity=quantity,
            )
        else:
            self._log("Incrementing existing cart item quantity", item_id=item.id)
            item = self.repo.increment_quantity(item, quantity)

        self._refresh_cache()

        result = self._to_out(item, purchasable)
        self.notifier.publish(
            events.ITEM_ADDED,
            {
                "item": result.model_dump(mode="json", exclude={"purchasable"}),
                "purchasable": purchasable.model_dump(mode="json"),
            },
        )
        return result

    def update(self, item_id: str, quantity: int) -> CartItemOut | None:
        """Absolute quantity set; an unknown id is a silent no-op."""
        self._log("Updating cart item", id=item_id, quantity=quantity)

        item = self.repo.find_by_id(str(item_id), owner_id=self.owner_id())
        if item is None:
            self._log("Cart item not found for update", id=item_id)
            return None

        item = self.repo.update_quantity(item, quantity)
        self._refresh_cache()

        result = self._to_out(item)
        self.notifier.publish(
            events.ITEM_UPDATED,
            {"item": result.model_dump(mode="json", exclude={"purchasable"}), "quantity": quantity},
        )
        return result

    def delete(self, item_id: Any) -> None:
        self._log("Deleting cart item", id=item_id)
        item_id = str(item_id)

        item = self.repo.find_by_id(item_id, owner_id=self.owner_id())
        if item is None:
            self._log("Cart item not found for deletion", id=item_id)
            return

        self.repo.delete_by_id(item_id)
        self._refresh_cache()

        self.notifier.publish(events.ITEM_DELETED, {"id": item_id})

    def clean(self) -> int:
        """Drop the guest cart bound to the current cookie."""
        cookie_id = self._resolver().current_anonymous_id()
        self._log("Cleaning cart", cookie_id=cookie_id)

        deleted = self.repo.delete_all_by_cookie(cookie_id)
        self._refresh_cache()

        self.notifier.publish(events.CART_CLEARED, {"cookie_id": cookie_id})
        return deleted

    def clear_abandoned(self, hours: int) -> int:
        """
        Maintenance sweep across every identity. Leaves caches alone and
        sends no notifications; stale cache entries expire on their own TTL.
        """
        if hours < 0:
            raise ValueError("hours must not be negative")

        threshold = datetime.now(timezone.utc) - timedelta(hours=hours)
        deleted = self.repo.delete_older_than(threshold)
        logger.info(f"Cleared {deleted} abandoned cart items older than {hours}h")
        return deleted
