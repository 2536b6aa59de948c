# cartstate/api/routers/admin.py
from fastapi import APIRouter, Depends, Query

from cartstate.api.dependencies import get_admin_service
from cartstate.domain.schemas import ClearAbandonedOut
from cartstate.services.cart_service import CartService
from cartstate.utils.settings import CART_ABANDONED_HOURS

router = APIRouter(prefix="/admin/carts", tags=["admin"])


@router.post("/clear-abandoned", response_model=ClearAbandonedOut)
def clear_abandoned(
    hours: int = Query(CART_ABANDONED_HOURS, ge=1),
    svc: CartService = Depends(get_admin_service),
):
    """
    Removes cart items untouched for `hours`, across every cart.
    Same sweep the Celery beat schedule runs.
    """
    return ClearAbandonedOut(deleted=svc.clear_abandoned(hours), hours=hours)
