# cartstate/repos/cart_repo.py
from contextlib import contextmanager
from datetime import datetime, timezone

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from cartstate.data.models.cart_item import CartItemModel


class CartRepo:
    """
    Durable store for cart lines.

    Lookups take an optional owner to keep a cart visible only to the
    identity it belongs to; ``delete_older_than`` deliberately ignores it.
    """

    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def _write(self):
        try:
            yield
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise

    # =====================================================
    # QUERY
    # =====================================================
    def list_for_owner(self, owner_id: str) -> list[CartItemModel]:
        stmt = (
            select(CartItemModel)
            .where(CartItemModel.owner_id == owner_id)
            .order_by(CartItemModel.seq)
        )
        return list(self.db.execute(stmt).scalars().all())

    def find_by_owner_and_purchasable(
        self, owner_id: str, cartable_type: str, cartable_id: str
    ) -> CartItemModel | None:
        stmt = select(CartItemModel).where(
            CartItemModel.owner_id == owner_id,
            CartItemModel.cartable_type == cartable_type,
            CartItemModel.cartable_id == str(cartable_id),
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def find_by_id(self, item_id: str, owner_id: str | None = None) -> CartItemModel | None:
        stmt = select(CartItemModel).where(CartItemModel.id == str(item_id))
        if owner_id is not None:
            stmt = stmt.where(CartItemModel.owner_id == owner_id)
        return self.db.execute(stmt).scalar_one_or_none()

    # =====================================================
    # COMMANDS
    # =====================================================
    def create(self, **fields) -> CartItemModel:
        item = CartItemModel(**fields)
        with self._write():
            self.db.add(item)
        self.db.refresh(item)
        return item

    def increment_quantity(self, item: CartItemModel, delta: int) -> CartItemModel:
        # UPDATE ... SET quantity = quantity + :delta, no read-modify-write
        with self._write():
            self.db.execute(
                update(CartItemModel)
                .where(CartItemModel.id == item.id)
                .values(
                    quantity=CartItemModel.quantity + delta,
                    updated_at=datetime.now(timezone.utc),
                )
                .execution_options(synchronize_session=False)
            )
        self.db.refresh(item)
        return item

    def update_quantity(self, item: CartItemModel, quantity: int) -> CartItemModel:
        with self._write():
            item.quantity = quantity
            item.updated_at = datetime.now(timezone.utc)
        self.db.refresh(item)
        return item

    def delete_by_id(self, item_id: str) -> int:
        with self._write():
            result = self.db.execute(
                delete(CartItemModel)
                .where(CartItemModel.id == str(item_id))
                .execution_options(synchronize_session=False)
            )
        return result.rowcount

    def delete_all_by_cookie(self, cookie_id: str) -> int:
        with self._write():
            result = self.db.execute(
                delete(CartItemModel)
                .where(CartItemModel.cookie_id == cookie_id)
                .execution_options(synchronize_session=False)
            )
        return result.rowcount

    def delete_older_than(self, threshold: datetime) -> int:
        with self._write():
            result = self.db.execute(
                delete(CartItemModel)
                .where(CartItemModel.updated_at < threshold)
                .execution_options(synchronize_session=False)
            )
        return result.rowcount
