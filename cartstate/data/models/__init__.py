# import every model so SQLAlchemy registers it in Base.metadata

from cartstate.data.models.cart_item import CartItemModel
from cartstate.data.models.product import ProductModel

__all__ = ["CartItemModel", "ProductModel"]
