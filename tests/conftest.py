import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("CART_LOCK_WAIT_SECONDS", "0.3")

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from checkout.api.dependencies import (
    get_catalog_client,
    get_expiry_scheduler,
    get_lock_service,
    get_media_client,
)
from checkout.data.database import Base, SessionLocal, engine
from checkout.main import create_app
from checkout.repos.stock_repo import StockRepo
from checkout.services.cart_service import CartService
from checkout.services.catalog_client import VariantInfo
from checkout.services.order_service import OrderService
from checkout.services.reservation_service import ReservationService

from helpers import (
    VARIANT_DESK,
    VARIANT_MONITOR,
    VARIANT_MOUSE,
    FakeCatalog,
    FakeLockService,
    FakeMedia,
    RecordingScheduler,
)


@pytest.fixture
def catalog():
    return FakeCatalog(
        [
            VariantInfo(id=VARIANT_DESK, minimum_order_qty=1, selling_price=Decimal("199.99"),
                        mrp=Decimal("249.00"), product_title="Oak Desk", product_id=10),
            VariantInfo(id=VARIANT_MOUSE, minimum_order_qty=2, selling_price=Decimal("49.50"),
                        mrp=Decimal("59.00"), product_title="Wireless Mouse", product_id=11),
            VariantInfo(id=VARIANT_MONITOR, minimum_order_qty=1, selling_price=Decimal("899.00"),
                        mrp=Decimal("999.00"), product_title="27in Monitor", product_id=12),
        ]
    )


@pytest.fixture
def media():
    return FakeMedia({VARIANT_DESK: "/api/gallery/image/desk-oak-1"})


@pytest.fixture
def lock_service():
    return FakeLockService()


@pytest.fixture
def scheduler():
    return RecordingScheduler()


# =====================================================
# DATABASE
# =====================================================
@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def stock():
    """Write stock levels, e.g. stock({VARIANT_DESK: 5})."""

    def _set(levels):
        with SessionLocal() as session:
            repo = StockRepo(session)
            for variant_id, available in levels.items():
                repo.set_available(variant_id, available)
            session.commit()

    return _set


# =====================================================
# SERVICES
# =====================================================
@pytest.fixture
def cart_service(db, catalog, media, lock_service, scheduler):
    return CartService(
        db=db,
        catalog=catalog,
        media=media,
        lock_service=lock_service,
        expiry_scheduler=scheduler,
    )


@pytest.fixture
def order_service(db, catalog, media):
    return OrderService(db=db, catalog=catalog, media=media)


@pytest.fixture
def reservation_service(db):
    return ReservationService(db)


# =====================================================
# HTTP
# =====================================================
@pytest.fixture
def client(catalog, media, lock_service, scheduler):
    app = create_app()
    app.dependency_overrides[get_catalog_client] = lambda: catalog
    app.dependency_overrides[get_media_client] = lambda: media
    app.dependency_overrides[get_lock_service] = lambda: lock_service
    app.dependency_overrides[get_expiry_scheduler] = lambda: scheduler
    return TestClient(app)
