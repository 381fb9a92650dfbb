# checkout/repos/stock_repo.py
from typing import Dict, Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session

from checkout.data.models.stock import StockModel


class StockRepo:
    """
    Stock ledger, one counter per variant.

    Writers go through the conditional primitives below so the availability
    check is evaluated by the database against the latest committed row.
    """

    def __init__(self, db: Session):
        self.db = db

    def get_available(self, variant_id: int) -> int:
        available = self.db.execute(
            select(StockModel.available).where(StockModel.variant_id == variant_id)
        ).scalar_one_or_none()
        return available or 0

    def get_available_many(self, variant_ids: Iterable[int]) -> Dict[int, int]:
        rows = self.db.execute(
            select(StockModel.variant_id, StockModel.available).where(
                StockModel.variant_id.in_(list(variant_ids))
            )
        ).all()
        return {variant_id: available for variant_id, available in rows}

    def try_decrement(self, variant_id: int, quantity: int) -> bool:
        # update set available = available - n where variant_id = v and available >= n
        rowcount = (
            self.db.query(StockModel)
            .filter(
                StockModel.variant_id == variant_id,
                StockModel.available >= quantity,
            )
            .update(
                {"available": StockModel.available - quantity},
                synchronize_session=False,
            )
        )
        return rowcount == 1

    def increment(self, variant_id: int, quantity: int) -> bool:
        rowcount = (
            self.db.query(StockModel)
            .filter(StockModel.variant_id == variant_id)
            .update(
                {"available": StockModel.available + quantity},
                synchronize_session=False,
            )
        )
        return rowcount == 1

    def set_available(self, variant_id: int, available: int) -> StockModel:
        record = self.db.execute(
            select(StockModel).where(StockModel.variant_id == variant_id)
        ).scalar_one_or_none()
        if record is None:
            record = StockModel(variant_id=variant_id, available=available)
            self.db.add(record)
        else:
            record.available = available
        self.db.flush()
        return record
