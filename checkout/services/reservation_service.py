# checkout/services/reservation_service.py
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from checkout.domain.status import BookingStatus
from checkout.repos.booking_repo import BookingRepo
from checkout.utils.logging import get_logger

logger = get_logger(__name__)


class ReservationService:
    """
    Releases buy-now reservations nobody confirmed in time.
    Stock is never touched: a PENDING booking has not taken any.
    """

    def __init__(self, db: Session):
        self.repo = BookingRepo(db)

    def release_if_pending(self, booking_id: int) -> bool:
        """Delete the booking and its lines if it is still PENDING. No-op otherwise."""
        try:
            booking = self.repo.lock_booking(booking_id)
            if not booking or booking.status != BookingStatus.PENDING.value:
                self.repo.rollback()
                return False

            self.repo.delete_booking(booking)
            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise

        logger.info(f"Released unconfirmed buy-now booking {booking_id}")
        return True

    def release_expired(self, now: datetime | None = None) -> int:
        now = now or datetime.now(timezone.utc)
        expired = self.repo.expired_pending_ids(now)

        logger.info(f"Found {len(expired)} expired reservations")

        released = 0
        for booking_id in expired:
            if self.release_if_pending(booking_id):
                released += 1
        return released
