"""
Booking and cart line lifecycle.

A line moves forward only: DRAFT -> CONFIRMED -> PACKED -> SHIPPED -> DELIVERED,
or CONFIRMED -> CANCELLED. The booking status is derived from its lines.
"""
import enum
from typing import Iterable


class BookingStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    PACKED = "PACKED"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"

    @property
    def rank(self) -> int:
        return _RANKS[self]

    @property
    def is_unconfirmed(self) -> bool:
        return self in (BookingStatus.DRAFT, BookingStatus.PENDING)

    @classmethod
    def parse(cls, value) -> "BookingStatus":
        """Accept a member, its name, or a legacy numeric code (0, 1, 2.5, 3, 4, -1)."""
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            raise ValueError(f"Invalid status value: {value!r}")
        if isinstance(value, (int, float)):
            for code, status in _LEGACY_CODES:
                if float(value) == code:
                    return status
            raise ValueError(f"Invalid status code: {value!r}")
        if isinstance(value, str):
            try:
                return cls(value.strip().upper())
            except ValueError:
                pass
            try:
                return cls.parse(float(value))
            except ValueError:
                raise ValueError(f"Invalid status value: {value!r}") from None
        raise ValueError(f"Invalid status value: {value!r}")


_RANKS = {
    BookingStatus.DRAFT: 0,
    BookingStatus.PENDING: 1,
    BookingStatus.CONFIRMED: 2,
    BookingStatus.PACKED: 3,
    BookingStatus.SHIPPED: 4,
    BookingStatus.DELIVERED: 5,
    BookingStatus.CANCELLED: 6,
}

# PENDING has no code of its own, 1 always means CONFIRMED on input
_LEGACY_CODES = (
    (0.0, BookingStatus.DRAFT),
    (1.0, BookingStatus.CONFIRMED),
    (2.5, BookingStatus.PACKED),
    (3.0, BookingStatus.SHIPPED),
    (4.0, BookingStatus.DELIVERED),
    (-1.0, BookingStatus.CANCELLED),
)

FULFILLMENT_STATUSES = (
    BookingStatus.CONFIRMED,
    BookingStatus.PACKED,
    BookingStatus.SHIPPED,
    BookingStatus.DELIVERED,
)


def can_advance(current: BookingStatus, new: BookingStatus) -> bool:
    """A confirmed line may move to any fulfillment status that is not behind it."""
    if new not in FULFILLMENT_STATUSES:
        return False
    if current not in FULFILLMENT_STATUSES:
        return False
    return new.rank >= current.rank


def can_cancel(current: BookingStatus) -> bool:
    return current == BookingStatus.CONFIRMED


def status_after_cancel(current: BookingStatus, line_statuses: Iterable[BookingStatus]) -> BookingStatus:
    """A cancellation only ever cancels the booking, once every line is CANCELLED."""
    statuses = list(line_statuses)
    if statuses and all(s == BookingStatus.CANCELLED for s in statuses):
        return BookingStatus.CANCELLED
    return current


def status_after_advance(
    current: BookingStatus,
    new: BookingStatus,
    line_statuses: Iterable[BookingStatus],
) -> BookingStatus:
    """
    Barrier: the booking takes the new status only when every one of its lines,
    cancelled ones included, has reached it. Never moves backward.
    """
    statuses = list(line_statuses)
    if not statuses or current.is_unconfirmed or current == BookingStatus.CANCELLED:
        return current
    if new not in FULFILLMENT_STATUSES or new.rank <= current.rank:
        return current
    if all(s == new for s in statuses):
        return new
    return current
