# checkout/data/models/booking.py
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Index, Integer, Numeric, String, text
from sqlalchemy.orm import relationship

from checkout.data.database import Base
from checkout.domain.status import BookingStatus


def _utcnow():
    return datetime.now(timezone.utc)


class BookingModel(Base):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, nullable=False, index=True)
    address_id = Column(Integer, nullable=True)

    amount = Column(Numeric(12, 2), nullable=True)
    status = Column(String(16), nullable=False, default=BookingStatus.DRAFT.value)
    # set only while a buy-now reservation awaits confirmation
    expires_at = Column(DateTime(timezone=True), nullable=True, index=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    lines = relationship(
        "CartLineModel",
        back_populates="booking",
        cascade="all, delete-orphan",
        order_by="CartLineModel.id",
    )

    __table_args__ = (
        Index(
            "uq_bookings_one_draft_per_user",
            "user_id",
            unique=True,
            postgresql_where=text("status = 'DRAFT'"),
            sqlite_where=text("status = 'DRAFT'"),
        ),
    )
