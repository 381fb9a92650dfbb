# checkout/data/models/stock.py
from sqlalchemy import CheckConstraint, Column, Integer

from checkout.data.database import Base


class StockModel(Base):
    __tablename__ = "product_stocks"

    id = Column(Integer, primary_key=True)
    variant_id = Column(Integer, nullable=False, unique=True)
    available = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        CheckConstraint("available >= 0", name="ck_product_stocks_available_non_negative"),
    )
