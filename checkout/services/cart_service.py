import uuid
from datetime import datetime, timezone, timedelta
from decimal import Decimal
from typing import Any, Callable, Dict, List, Tuple

from redis.exceptions import RedisError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from checkout.data.models.booking import BookingModel
from checkout.data.models.cart_line import CartLineModel
from checkout.domain.errors import (
    BelowMinimum,
    Conflict,
    InvalidTransition,
    NotFound,
    StockExceeded,
    Unauthorized,
)
from checkout.domain.status import BookingStatus
from checkout.repos.booking_repo import BookingRepo
from checkout.repos.cart_repo import CartRepo
from checkout.repos.stock_repo import StockRepo
from checkout.services.catalog_client import CatalogClient, VariantInfo
from checkout.services.enrichment import LineEnricher
from checkout.services.lock_service import LockService
from checkout.services.media_client import MediaClient
from checkout.utils.logging import get_logger
from checkout.utils.retry import lock_wait_retry
from checkout.utils.settings import (
    CART_LOCK_TTL_SECONDS,
    CART_LOCK_WAIT_SECONDS,
    RESERVATION_TTL_SECONDS,
)

logger = get_logger(__name__)

ExpiryScheduler = Callable[[int, int], Any]


class CartService:
    """
    Use cases of the mutable cart: lines of a user's DRAFT booking.
    Commands (add, buy now, quantity changes, remove) modify state,
    the query (get_cart) only reads.
    """

    def __init__(
        self,
        db: Session,
        catalog: CatalogClient,
        media: MediaClient,
        lock_service: LockService,
        expiry_scheduler: ExpiryScheduler,
    ):
        self.repo = CartRepo(db)
        self.booking_repo = BookingRepo(db)
        self.stock_repo = StockRepo(db)
        self.catalog = catalog
        self.lock_service = lock_service
        self.expiry_scheduler = expiry_scheduler
        self.enricher = LineEnricher(db, catalog, media)

    # query
    def get_cart(self, user_id: int) -> List[Dict[str, Any]]:
        lines = self.repo.get_user_draft_lines(user_id)
        if not lines:
            raise NotFound("No cart items found for this user")

        booking_ids = {line.booking_id for line in lines}
        amounts = {}
        for booking_id in booking_ids:
            booking = self.booking_repo.get_booking(booking_id)
            amounts[booking_id] = booking.amount if booking else None
        return self.enricher.enrich_lines(lines, amounts)

    # commands
    def add_to_cart(self, user_id: int, variant_id: int, quantity: int) -> CartLineModel:
        self._require_variant(variant_id, quantity)

        token = uuid.uuid4().hex
        locked = self._acquire_draft_lock(user_id, token)
        if locked is False:
            # the unique draft index still settles a concurrent find-or-create
            logger.warning(f"Draft lock for user {user_id} still busy, continuing without it")

        try:
            booking = self._find_or_create_draft(user_id)

            if self.repo.get_draft_line(booking.id, variant_id):
                self.repo.rollback()
                raise Conflict("This product variant is already in your cart")

            line = CartLineModel(
                booking_id=booking.id,
                variant_id=variant_id,
                quantity=quantity,
                status=BookingStatus.DRAFT.value,
            )
            try:
                self.repo.add_line(line)
                self.repo.commit()
            except IntegrityError:
                # the partial unique index caught a concurrent duplicate
                self.repo.rollback()
                raise Conflict("This product variant is already in your cart")

            logger.info(f"Added variant {variant_id} x{quantity} to booking {booking.id} of user {user_id}")
            return line
        finally:
            if locked:
                self._release_draft_lock(user_id, token)

    def buy_now(
        self,
        user_id: int,
        variant_id: int,
        quantity: int,
        amount: Decimal,
    ) -> Tuple[BookingModel, CartLineModel]:
        self._require_variant(variant_id, quantity)

        expires = datetime.now(timezone.utc) + timedelta(seconds=RESERVATION_TTL_SECONDS)
        booking = BookingModel(
            user_id=user_id,
            status=BookingStatus.PENDING.value,
            amount=amount,
            expires_at=expires,
        )
        try:
            self.booking_repo.add_booking(booking)
            line = self.repo.add_line(
                CartLineModel(
                    booking_id=booking.id,
                    variant_id=variant_id,
                    quantity=quantity,
                    status=BookingStatus.DRAFT.value,
                )
            )
            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise

        logger.info(
            f"Buy now: booking {booking.id} reserved for user {user_id} until {expires.isoformat()}"
        )

        # the periodic sweep releases the booking even if this never fires
        try:
            self.expiry_scheduler(booking.id, RESERVATION_TTL_SECONDS)
        except Exception as e:
            logger.warning(f"Could not schedule expiry for booking {booking.id}: {e}")

        return booking, line

    def add_quantity(self, line_id: int) -> CartLineModel:
        line = self._get_draft_line(line_id)

        available = self.stock_repo.get_available(line.variant_id)
        if line.quantity + 1 > available:
            raise StockExceeded("Cannot add more items; stock limit reached")

        return self._change_quantity(line, line.quantity + 1)

    def remove_quantity(self, line_id: int) -> CartLineModel:
        line = self._get_draft_line(line_id)

        variant = self.catalog.get_variant(line.variant_id)
        if variant is None:
            raise NotFound("Product variant not found")

        if line.quantity - 1 < variant.minimum_order_qty:
            raise BelowMinimum(
                f"Cannot reduce quantity below minimum order quantity of {variant.minimum_order_qty}"
            )

        return self._change_quantity(line, line.quantity - 1)

    def remove_line(self, line_id: int, user_id: int) -> bool:
        """Delete a cart line; returns True when its emptied booking was deleted too."""
        line = self.repo.get_line(line_id)
        if not line:
            raise NotFound("Cart item not found")

        booking = self.booking_repo.get_booking(line.booking_id)
        if not booking or booking.user_id != user_id:
            raise Unauthorized("Cart item does not belong to this user")

        if not BookingStatus(booking.status).is_unconfirmed:
            raise InvalidTransition("Items of a confirmed order must be cancelled, not removed")

        booking_deleted = False
        try:
            self.repo.delete_line(line)
            if self.repo.count_booking_lines(booking.id) == 0:
                self.booking_repo.delete_booking(booking)
                booking_deleted = True
            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise

        logger.info(
            f"Removed cart item {line_id} from booking {booking.id}"
            + (", booking deleted" if booking_deleted else "")
        )
        return booking_deleted

    # helpers
    def _require_variant(self, variant_id: int, quantity: int) -> VariantInfo:
        variant = self.catalog.get_variant(variant_id)
        if variant is None:
            raise NotFound(f"Product variant {variant_id} not found")
        if quantity < variant.minimum_order_qty:
            raise BelowMinimum(
                f"Quantity {quantity} is below minimum order quantity of {variant.minimum_order_qty}"
            )
        return variant

    def _get_draft_line(self, line_id: int) -> CartLineModel:
        line = self.repo.get_line(line_id)
        if not line:
            raise NotFound("Cart not found")
        if line.status != BookingStatus.DRAFT.value:
            raise InvalidTransition("Only items still in the cart can change quantity")
        return line

    def _change_quantity(self, line: CartLineModel, new_quantity: int) -> CartLineModel:
        rowcount = self.repo.update_line_version(
            line_id=line.id,
            old_version=line.version,
            new_data={"quantity": new_quantity},
        )
        if rowcount == 0:
            self.repo.rollback()
            raise Conflict("Cart item was modified by another request")

        self.repo.commit()
        self.repo.refresh(line)

        logger.info(f"Cart item {line.id} quantity set to {new_quantity}, version {line.version}")
        return line

    def _find_or_create_draft(self, user_id: int) -> BookingModel:
        existing = self.booking_repo.get_draft_booking(user_id)
        if existing:
            return existing

        booking = BookingModel(user_id=user_id, status=BookingStatus.DRAFT.value)
        try:
            self.booking_repo.add_booking(booking)
        except IntegrityError:
            # another request created the draft first
            self.booking_repo.rollback()
            existing = self.booking_repo.get_draft_booking(user_id)
            if existing is None:
                raise
            return existing

        logger.info(f"Created draft booking {booking.id} for user {user_id}")
        return booking

    @lock_wait_retry(CART_LOCK_WAIT_SECONDS)
    def _wait_for_draft_lock(self, user_id: int, token: str) -> bool:
        return self.lock_service.acquire_draft_lock(user_id, token, CART_LOCK_TTL_SECONDS)

    def _acquire_draft_lock(self, user_id: int, token: str) -> bool | None:
        # False: still held by another request, None: redis is unavailable
        try:
            return self._wait_for_draft_lock(user_id, token)
        except RedisError as e:
            logger.warning(f"Draft lock unavailable for user {user_id}: {e}")
            return None

    def _release_draft_lock(self, user_id: int, token: str) -> None:
        try:
            self.lock_service.release_draft_lock(user_id, token)
        except RedisError as e:
            logger.warning(f"Failed to release draft lock for user {user_id}: {e}")
