# checkout/data/seed.py
from checkout.catalog_service.main import VARIANTS
from checkout.data.database import Base, SessionLocal, engine
from checkout.data.models import StockModel
from checkout.repos.stock_repo import StockRepo
from checkout.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)


def seed(stock_levels: dict[int, int] | None = None, force: bool = False) -> int:
    """Create stock records for the dev catalog. Returns how many were written."""
    levels = stock_levels or {vid: v["stock"] for vid, v in VARIANTS.items()}

    db = SessionLocal()
    try:
        # not forcing: only seed if empty
        if not force and db.query(StockModel).first():
            return 0
        repo = StockRepo(db)
        for variant_id, available in levels.items():
            repo.set_available(variant_id, available)
        db.commit()
        logger.info(f"Seeded stock for {len(levels)} variant(s)")
        return len(levels)
    finally:
        db.close()


if __name__ == "__main__":
    configure_logging()
    Base.metadata.create_all(bind=engine)
    seed()
