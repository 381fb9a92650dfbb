# checkout/services/order_service.py
from decimal import Decimal
from math import ceil
from typing import Any, Callable, Dict, Iterable, List, Tuple

from sqlalchemy.orm import Session

from checkout.data.models.booking import BookingModel
from checkout.data.models.cart_line import CartLineModel
from checkout.domain.errors import (
    CheckoutError,
    EmptyCart,
    InconsistentBooking,
    InsufficientStock,
    InvalidTransition,
    NotFound,
    Unauthorized,
    ValidationError,
)
from checkout.domain.status import (
    FULFILLMENT_STATUSES,
    BookingStatus,
    can_advance,
    can_cancel,
    status_after_advance,
    status_after_cancel,
)
from checkout.repos.booking_repo import BookingRepo
from checkout.repos.cart_repo import CartRepo
from checkout.repos.stock_repo import StockRepo
from checkout.services.catalog_client import CatalogClient
from checkout.services.enrichment import LineEnricher
from checkout.services.media_client import MediaClient
from checkout.utils.logging import get_logger

logger = get_logger(__name__)


class OrderService:
    """
    Checkout and fulfillment of bookings.

    Every command runs in one database transaction: either all of its writes
    commit or the session is rolled back before the error propagates.
    """

    def __init__(self, db: Session, catalog: CatalogClient, media: MediaClient):
        self.db = db
        self.repo = BookingRepo(db)
        self.cart_repo = CartRepo(db)
        self.stock_repo = StockRepo(db)
        self.enricher = LineEnricher(db, catalog, media)

    # =====================================================
    # COMMANDS
    # =====================================================
    def confirm_order(
        self, booking_id: int, user_id: int, address_id: int
    ) -> Tuple[BookingModel, List[CartLineModel]]:
        """
        Use case: turn an unconfirmed booking into an order.

        1. Claims the booking (address + CONFIRMED) only if it is the user's and unconfirmed
        2. Loads its cart lines, an empty cart aborts
        3. Takes each line's quantity off stock with a conditional decrement
        4. Marks its DRAFT lines CONFIRMED, lines already placed stay as they are
        """
        try:
            claimed = self.repo.confirm_if_unconfirmed(booking_id, user_id, address_id)
            if claimed == 0:
                raise self._confirm_rejection(booking_id, user_id)

            lines = [
                line
                for line in self.cart_repo.get_booking_lines(booking_id)
                if line.status != BookingStatus.CANCELLED.value
            ]
            if not lines:
                raise EmptyCart("No cart items found for this booking")

            # placed lines are CONFIRMED already, nothing may be further along
            advanced = [l.id for l in lines if BookingStatus(l.status).rank > BookingStatus.CONFIRMED.rank]
            if advanced:
                raise InvalidTransition(f"Cart items {advanced} are already past confirmation")

            # fixed variant order keeps concurrent checkouts from deadlocking
            for line in sorted(lines, key=lambda l: (l.variant_id, l.id)):
                if not self.stock_repo.try_decrement(line.variant_id, line.quantity):
                    raise InsufficientStock(
                        f"Insufficient stock for product variant {line.variant_id}"
                    )

            for line in lines:
                if line.status == BookingStatus.DRAFT.value:
                    self.cart_repo.set_status(line, BookingStatus.CONFIRMED)

            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise

        booking = self.repo.get_booking(booking_id)
        self.db.refresh(booking)

        logger.info(
            f"Booking {booking_id} confirmed for user {user_id}: "
            f"{len(lines)} line(s), {sum(l.quantity for l in lines)} unit(s) taken from stock"
        )
        return booking, lines

    def place_order(self, user_id: int, cart_ids: Iterable[int], total_amount: Decimal) -> Tuple[int, int]:
        """Mark the chosen draft lines CONFIRMED and record the client-computed amount."""
        ids = sorted(set(cart_ids))
        lines = self.cart_repo.get_lines(ids)

        booking_ids = {line.booking_id for line in lines}
        if len(lines) != len(ids) or len(booking_ids) != 1:
            raise InconsistentBooking("Carts have inconsistent or missing bookingID(s)")

        (booking_id,) = booking_ids
        booking = self.repo.get_booking(booking_id)
        if not booking:
            raise NotFound("Booking not found")
        if booking.user_id != user_id:
            raise Unauthorized("Cart items do not belong to this user")
        if not BookingStatus(booking.status).is_unconfirmed:
            raise InvalidTransition(f"Booking {booking_id} is already {booking.status}")

        placeable = (BookingStatus.DRAFT.value, BookingStatus.CONFIRMED.value)
        if any(line.status not in placeable for line in lines):
            raise InvalidTransition("Only items still in the cart can be placed")

        try:
            updated = self.cart_repo.set_status_bulk(
                ids, BookingStatus.CONFIRMED, only_from=BookingStatus.DRAFT
            )
            self.repo.set_amount(booking, total_amount)
            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise

        logger.info(f"Placed {updated} cart item(s) on booking {booking_id}, amount {total_amount}")
        return booking_id, updated

    def cancel_line(self, booking_id: int, line_id: int) -> Tuple[CartLineModel, BookingModel, bool]:
        try:
            booking, line = self._lock_booking_line(booking_id, line_id)

            current = BookingStatus(line.status)
            if not can_cancel(current):
                if current.rank > BookingStatus.CONFIRMED.rank:
                    raise InvalidTransition("Cannot cancel item; it is already shipped or received")
                raise InvalidTransition(f"Cannot cancel item in status {current.value}")

            self.cart_repo.set_status(line, BookingStatus.CANCELLED)

            # stock only left the shelf if checkout went through
            if not BookingStatus(booking.status).is_unconfirmed:
                self.stock_repo.increment(line.variant_id, line.quantity)

            booking_updated = self._sync_booking_status(booking, status_after_cancel)
            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise

        logger.info(
            f"Cart item {line_id} of booking {booking_id} cancelled, booking status {booking.status}"
        )
        return line, booking, booking_updated

    def advance_line(
        self, booking_id: int, line_id: int, new_status: BookingStatus
    ) -> Tuple[CartLineModel, BookingModel, bool]:
        if new_status not in FULFILLMENT_STATUSES:
            raise ValidationError("Invalid status value. Must be 1, 2.5, 3, or 4")

        try:
            booking, line = self._lock_booking_line(booking_id, line_id)
            if BookingStatus(booking.status).is_unconfirmed:
                raise InvalidTransition(
                    f"Booking {booking_id} has not been checked out, its items cannot be fulfilled"
                )

            current = BookingStatus(line.status)
            if not can_advance(current, new_status):
                raise InvalidTransition(
                    f"Cannot move cart item from {current.value} to {new_status.value}"
                )
            if current != new_status:
                self.cart_repo.set_status(line, new_status)

            booking_updated = self._sync_booking_status(
                booking, lambda booking_status, statuses: status_after_advance(booking_status, new_status, statuses)
            )
            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise

        logger.info(
            f"Cart item {line_id} of booking {booking_id} moved to {new_status.value}, "
            f"booking status {booking.status}"
        )
        return line, booking, booking_updated

    # =====================================================
    # QUERIES
    # =====================================================
    def get_booking(self, booking_id: int, user_id: int) -> BookingModel:
        """Booking with its lines loaded, for its owner only."""
        booking = self.repo.get_booking(booking_id)
        if not booking:
            raise NotFound("Booking not found")
        if booking.user_id != user_id:
            raise Unauthorized("Unauthorized access to this booking")
        return booking

    def order_details(self, user_id: int) -> List[Dict[str, Any]]:
        bookings = self.repo.list_for_user(user_id)
        if not bookings:
            raise NotFound("No bookings found for this user")

        lines = self.cart_repo.get_lines_for_bookings([b.id for b in bookings])
        return self.enricher.booking_details(bookings, lines)

    def list_orders(self, page: int = 1, limit: int = 10) -> Dict[str, Any]:
        """Management view: every booking that made it through checkout, cancelled lines hidden."""
        if page < 1 or limit < 1:
            raise ValidationError("Invalid page or limit")

        bookings = self.repo.list_by_status(FULFILLMENT_STATUSES, offset=(page - 1) * limit, limit=limit)
        if not bookings:
            raise NotFound("No confirmed orders found")

        lines = [
            line
            for line in self.cart_repo.get_lines_for_bookings([b.id for b in bookings])
            if line.status != BookingStatus.CANCELLED.value
        ]
        total = self.repo.count_by_status(FULFILLMENT_STATUSES)

        return {
            "data": self.enricher.booking_details(bookings, lines),
            "pagination": {
                "current_page": page,
                "total_pages": ceil(total / limit),
                "total_items": total,
                "items_per_page": limit,
            },
        }

    def delivered_orders(self) -> List[Dict[str, Any]]:
        bookings = self.repo.list_by_status([BookingStatus.DELIVERED])
        if not bookings:
            raise NotFound("No delivered orders found")

        lines = self.cart_repo.get_lines_for_bookings([b.id for b in bookings])
        return self.enricher.booking_details(bookings, lines)

    # helpers
    def _confirm_rejection(self, booking_id: int, user_id: int) -> CheckoutError:
        booking = self.repo.get_booking(booking_id)
        if not booking:
            return NotFound("Booking not found")
        if booking.user_id != user_id:
            return Unauthorized("Booking not found or not authorized")
        return InvalidTransition(f"Booking {booking_id} is already {booking.status}")

    def _lock_booking_line(self, booking_id: int, line_id: int) -> Tuple[BookingModel, CartLineModel]:
        booking = self.repo.lock_booking(booking_id)
        if not booking:
            raise NotFound("Booking not found")

        line = self.cart_repo.get_line(line_id)
        if not line or line.booking_id != booking_id:
            raise NotFound("Cart item not found")
        return booking, line

    def _sync_booking_status(
        self,
        booking: BookingModel,
        rule: Callable[[BookingStatus, List[BookingStatus]], BookingStatus],
    ) -> bool:
        # one read of all lines inside the transaction that changed one of them
        lines = self.cart_repo.get_booking_lines(booking.id)
        current = BookingStatus(booking.status)
        derived = rule(current, [BookingStatus(l.status) for l in lines])
        if derived == current:
            return False

        self.repo.set_status(booking, derived)
        return True
