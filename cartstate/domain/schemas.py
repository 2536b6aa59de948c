# cartstate/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import List
from decimal import Decimal
from datetime import datetime


class PurchasableRef(BaseModel):
    """Polymorphic reference to anything that can sit in a cart."""

    type: str = Field(..., min_length=1, max_length=64)
    key: str = Field(..., min_length=1, max_length=64)

    model_config = ConfigDict(frozen=True)

    @field_validator("key", mode="before")
    @classmethod
    def _key_as_str(cls, value):
        return str(value)


class Purchasable(BaseModel):
    """Resolved purchasable entity."""

    type: str
    key: str
    name: str | None = None
    price: Decimal | None = None


class CartItemOut(BaseModel):
    """Materialized cart line, the shape that is cached."""

    id: str
    owner_id: str
    user_id: str | None = None
    cookie_id: str | None = None
    purchasable_type: str
    purchasable_key: str
    quantity: int
    created_at: datetime
    updated_at: datetime
    purchasable: Purchasable | None = None

    @property
    def ref(self) -> PurchasableRef:
        return PurchasableRef(type=self.purchasable_type, key=self.purchasable_key)

    @property
    def unit_price(self) -> Decimal:
        if self.purchasable is None or self.purchasable.price is None:
            return Decimal("0.00")
        return self.purchasable.price


class AddItemIn(BaseModel):
    """Schema for adding a purchasable to the cart."""

    purchasable_type: str = Field(..., min_length=1, max_length=64)
    purchasable_key: str = Field(..., min_length=1, max_length=64)
    quantity: int = Field(1, gt=0, description="Quantity to add (must be > 0)")

    @field_validator("purchasable_key", mode="before")
    @classmethod
    def _key_as_str(cls, value):
        return str(value)


class UpdateItemIn(BaseModel):
    quantity: int = Field(..., gt=0, description="New absolute quantity (must be > 0)")


class CartOut(BaseModel):
    """Schema for the whole cart (response)."""

    items: List[CartItemOut]
    total: Decimal
    items_count: int
    total_quantity: int


class ClearAbandonedOut(BaseModel):
    deleted: int
    hours: int
