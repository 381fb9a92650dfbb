# checkout/main.py
from contextlib import asynccontextmanager

from fastapi import FastAPI
import uvicorn

from checkout.api import register_exception_handlers
from checkout.api.routers import bookings, carts, health
from checkout.data.database import Base, engine
from checkout.utils.logging import configure_logging, get_logger

# import every model before create_all so Base.metadata knows them
from checkout.data.models import BookingModel, CartLineModel, StockModel  # noqa: F401

logger = get_logger(__name__)


def init_db() -> None:
    logger.info(f"Models registered in Base.metadata: {list(Base.metadata.tables.keys())}")
    try:
        Base.metadata.create_all(bind=engine)
    except Exception:
        logger.exception("Failed to create tables")
        raise
    logger.info("Database tables ready")


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    init_db()
    yield


def create_app() -> FastAPI:
    app = FastAPI(
        title="Checkout Service",
        version="1.0.0",
        lifespan=lifespan,
    )

    register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(carts.router)
    app.include_router(bookings.router)

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
