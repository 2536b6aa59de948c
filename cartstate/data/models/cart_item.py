# cartstate/data/models/cart_item.py
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime, UniqueConstraint

from cartstate.data.database import Base


def _utcnow():
    return datetime.now(timezone.utc)


class CartItemModel(Base):
    __tablename__ = "cart_items"

    # insertion order; the public identifier is `id`
    seq = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String(36), nullable=False, unique=True, default=lambda: str(uuid.uuid4()))

    # "user:<id>" for authenticated carts, "guest:<cookie id>" for guests
    owner_id = Column(String(96), nullable=False, index=True)
    user_id = Column(String(64), nullable=True, index=True)
    cookie_id = Column(String(64), nullable=True, index=True)

    cartable_type = Column(String(64), nullable=False)
    cartable_id = Column(String(64), nullable=False)

    quantity = Column(Integer, nullable=False, default=1)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow, index=True)

    __table_args__ = (
        UniqueConstraint("owner_id", "cartable_type", "cartable_id", name="u_owner_cartable"),
    )
