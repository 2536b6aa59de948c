# cartstate/api/dependencies.py
from functools import lru_cache

from fastapi import Depends, Request, Response
from sqlalchemy.orm import Session

from cartstate.data.database import get_db
from cartstate.services.cache_service import CartCache
from cartstate.services.cart_service import CartService
from cartstate.services.identity_service import RequestIdentityResolver
from cartstate.services.notification_service import NotificationService
from cartstate.services.purchasable_registry import build_registry
from cartstate.utils.settings import CART_CACHE_ENABLED


@lru_cache
def get_cache() -> CartCache | None:
    if not CART_CACHE_ENABLED:
        return None
    return CartCache()


def get_notifier() -> NotificationService:
    return NotificationService()


def get_cart_service(
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
    cache: CartCache | None = Depends(get_cache),
    notifier: NotificationService = Depends(get_notifier),
) -> CartService:
    return CartService(
        db=db,
        identity=RequestIdentityResolver(request, response),
        registry=build_registry(db),
        notifier=notifier,
        cache=cache,
    )


def get_admin_service(
    db: Session = Depends(get_db),
    notifier: NotificationService = Depends(get_notifier),
) -> CartService:
    return CartService(
        db=db,
        identity=None,
        registry=build_registry(db),
        notifier=notifier,
        cache=None,
    )
