# cartstate/data/seed.py
from decimal import Decimal

from cartstate.data.database import Base, SessionLocal, engine
from cartstate.data.models import ProductModel

PRODUCTS = [
    {"id": 1, "name": "Keyboard", "price": Decimal("199.99")},
    {"id": 2, "name": "Mouse", "price": Decimal("49.50")},
    {"id": 3, "name": "Monitor", "price": Decimal("899.00")},
]


def seed():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        # not forcing: only seed if empty
        if db.query(ProductModel).first():
            return
        db.add_all([ProductModel(**p) for p in PRODUCTS])
        db.commit()
    finally:
        db.close()


if __name__ == "__main__":
    seed()
