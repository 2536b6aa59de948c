# cartstate/celery_worker.py
from celery import Celery

from cartstate.utils.settings import (
    CELERY_BROKER_URL,
    CELERY_RESULT_BACKEND,
    CART_ABANDONED_HOURS,
    CART_ABANDONED_SWEEP_SECONDS,
)

celery_app = Celery(
    "cartstate",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

# tasks have to be imported explicitly for Celery to register them
celery_app.conf.imports = (
    "cartstate.tasks.abandoned",
    "cartstate.services.notification_service",
)

celery_app.conf.beat_schedule = {
    "clear-abandoned-carts": {
        "task": "cartstate.tasks.abandoned.clear_abandoned_carts_task",
        "schedule": CART_ABANDONED_SWEEP_SECONDS,
        "kwargs": {"hours": CART_ABANDONED_HOURS},
    },
}

celery_app.conf.timezone = "UTC"
