# cartstate/tasks/abandoned.py
from cartstate.celery_worker import celery_app
from cartstate.data.database import SessionLocal
from cartstate.services.cart_service import CartService
from cartstate.services.notification_service import NotificationService
from cartstate.services.purchasable_registry import build_registry
from cartstate.utils.settings import CART_ABANDONED_HOURS
from cartstate.utils.logging import get_logger

logger = get_logger(__name__)


@celery_app.task(name="cartstate.tasks.abandoned.clear_abandoned_carts_task")
def clear_abandoned_carts_task(hours: int = CART_ABANDONED_HOURS):
    logger.info(f"Clear abandoned carts task started (older than {hours}h)")

    db = SessionLocal()
    try:
        # sweep runs outside any identity and never touches the cache
        service = CartService(
            db=db,
            identity=None,
            registry=build_registry(db),
            notifier=NotificationService(),
            cache=None,
        )
        deleted = service.clear_abandoned(hours)
    finally:
        db.close()

    return {"deleted": deleted, "hours": hours}
