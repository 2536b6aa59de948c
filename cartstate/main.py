# cartstate/main.py
import uvicorn

from cartstate.api import create_app
from cartstate.data.database import Base, engine
from cartstate.utils.logging import get_logger

# models have to be imported before create_all
from cartstate.data.models import CartItemModel, ProductModel  # noqa: F401

logger = get_logger(__name__)

logger.info(f"Models registered in Base.metadata: {list(Base.metadata.tables.keys())}")

try:
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created")
except Exception as e:
    logger.error(f"Failed to create tables: {e}")
    raise


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
