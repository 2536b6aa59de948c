# cartstate/api/routers/carts.py
from fastapi import APIRouter, Depends, HTTPException

from cartstate.api.dependencies import get_cart_service
from cartstate.domain.schemas import (
    AddItemIn,
    CartItemOut,
    CartOut,
    PurchasableRef,
    UpdateItemIn,
)
from cartstate.services.cart_service import CartService
from cartstate.services.purchasable_registry import PurchasableUnavailable

router = APIRouter(prefix="/cart", tags=["cart"])


def _cart_out(svc: CartService) -> CartOut:
    return CartOut(
        items=svc.get("api"),
        total=svc.total(),
        items_count=svc.items_count(),
        total_quantity=svc.total_quantity(),
    )


@router.get("", response_model=CartOut)
def get_cart(svc: CartService = Depends(get_cart_service)):
    return _cart_out(svc)


@router.post("/items", response_model=CartItemOut, status_code=201)
def add_item(payload: AddItemIn, svc: CartService = Depends(get_cart_service)):
    ref = PurchasableRef(type=payload.purchasable_type, key=payload.purchasable_key)
    try:
        return svc.add(ref, payload.quantity)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except PurchasableUnavailable as e:
        raise HTTPException(status_code=503, detail=f"{e} is temporarily unavailable")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.patch("/items/{item_id}", response_model=CartOut)
def update_item(
    item_id: str,
    payload: UpdateItemIn,
    svc: CartService = Depends(get_cart_service),
):
    svc.update(item_id, payload.quantity)
    return _cart_out(svc)


@router.delete("/items/{item_id}", response_model=CartOut)
def delete_item(item_id: str, svc: CartService = Depends(get_cart_service)):
    svc.delete(item_id)
    return _cart_out(svc)


@router.delete("", response_model=CartOut)
def clean_cart(svc: CartService = Depends(get_cart_service)):
    svc.clean()
    return _cart_out(svc)
