# checkout/data/models/cart_line.py
from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, text
from sqlalchemy.orm import relationship

from checkout.data.database import Base
from checkout.data.models.booking import _utcnow
from checkout.domain.status import BookingStatus


class CartLineModel(Base):
    __tablename__ = "cart_lines"

    id = Column(Integer, primary_key=True)
    booking_id = Column(Integer, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True)
    variant_id = Column(Integer, nullable=False, index=True)

    quantity = Column(Integer, nullable=False)
    status = Column(String(16), nullable=False, default=BookingStatus.DRAFT.value)
    version = Column(Integer, nullable=False, default=1)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    booking = relationship("BookingModel", back_populates="lines")

    __table_args__ = (
        Index(
            "uq_cart_lines_draft_variant",
            "booking_id",
            "variant_id",
            unique=True,
            postgresql_where=text("status = 'DRAFT'"),
            sqlite_where=text("status = 'DRAFT'"),
        ),
    )
