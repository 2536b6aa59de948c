# cartstate/services/notification_service.py
from typing import Any, Dict

from kombu.exceptions import OperationalError

from cartstate.celery_worker import celery_app
from cartstate.utils.logging import get_logger

logger = get_logger(__name__)

ITEM_ADDING = "cart.item_adding"
ITEM_ADDED = "cart.item_added"
ITEM_UPDATED = "cart.item_updated"
ITEM_DELETED = "cart.item_deleted"
CART_CLEARED = "cart.cleared"


class NotificationService:
    """
    Fire-and-forget cart notifications.
    Delivery goes through Celery; nothing waits on the result.
    """

    @staticmethod
    def publish(event: str, payload: Dict[str, Any]) -> None:
        try:
            publish_cart_event_task.delay(event, payload)
        except OperationalError as e:
            logger.warning(f"Dropping {event} notification, broker unavailable: {e}")


@celery_app.task(name="cartstate.services.notification_service.publish_cart_event_task")
def publish_cart_event_task(event: str, payload: Dict[str, Any]):
    """
    Celery task - listeners (mailers, analytics, recovery campaigns)
    hook in here. For now it only logs.
    """
    logger.info(f"[NOTIFICATION] {event}: {payload}")

    return {"event": event, "status": "sent"}
