# checkout/tasks/expire.py
from checkout.celery_worker import celery_app
from checkout.data.database import SessionLocal
from checkout.services.reservation_service import ReservationService
from checkout.utils.logging import get_logger

logger = get_logger(__name__)


@celery_app.task(name="checkout.tasks.expire.expire_reservation_task")
def expire_reservation_task(booking_id: int) -> bool:
    """One-shot timer scheduled by buy now. Must never raise into the worker."""
    logger.info(f"Reservation timer fired for booking {booking_id}")

    db = SessionLocal()
    try:
        return ReservationService(db).release_if_pending(booking_id)
    except Exception:
        logger.exception(f"Error in auto-cancel of booking {booking_id}")
        return False
    finally:
        db.close()


@celery_app.task(name="checkout.tasks.expire.expire_reservations_task")
def expire_reservations_task() -> int:
    logger.info("Expire reservations task started")

    db = SessionLocal()
    try:
        return ReservationService(db).release_expired()
    except Exception:
        logger.exception("Error while sweeping expired reservations")
        return 0
    finally:
        db.close()


def schedule_reservation_expiry(booking_id: int, countdown: int) -> None:
    expire_reservation_task.apply_async(args=[booking_id], countdown=countdown)
