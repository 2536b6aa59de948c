# cartstate/api/__init__.py
from fastapi import FastAPI

from cartstate.api.routers import admin, carts, health
from cartstate.utils.settings import CART_ADMIN_ENABLED


def create_app(admin_enabled: bool = CART_ADMIN_ENABLED) -> FastAPI:
    app = FastAPI(
        title="Cart Service",
        version="1.0.0",
    )

    app.include_router(health.router)
    app.include_router(carts.router)
    # the Celery beat sweep does not need this, it is for operators only
    if admin_enabled:
        app.include_router(admin.router)

    return app
