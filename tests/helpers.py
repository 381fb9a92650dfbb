"""Test doubles for the external collaborators and fresh-session readers."""

from checkout.data.database import SessionLocal
from checkout.data.models import BookingModel, CartLineModel
from checkout.domain.status import BookingStatus
from checkout.repos.stock_repo import StockRepo

VARIANT_DESK = 1
VARIANT_MOUSE = 2
VARIANT_MONITOR = 3


class FakeCatalog:
    def __init__(self, variants):
        self.variants = {v.id: v for v in variants}

    def get_variant(self, variant_id):
        return self.variants.get(variant_id)


class FakeMedia:
    def __init__(self, images):
        self.images = images

    def get_primary_image(self, variant_id):
        return self.images.get(variant_id)


class FakeLockService:
    def __init__(self):
        self.held = {}
        self.acquired = []

    def acquire_draft_lock(self, user_id, token, ttl):
        if user_id in self.held:
            return False
        self.held[user_id] = token
        self.acquired.append(user_id)
        return True

    def release_draft_lock(self, user_id, token):
        if self.held.get(user_id) == token:
            del self.held[user_id]
            return True
        return False


class RecordingScheduler:
    def __init__(self):
        self.calls = []

    def __call__(self, booking_id, countdown):
        self.calls.append((booking_id, countdown))


def stock_of(variant_id):
    with SessionLocal() as session:
        return StockRepo(session).get_available(variant_id)


def booking_of(booking_id):
    with SessionLocal() as session:
        return session.get(BookingModel, booking_id)


def line_of(line_id):
    with SessionLocal() as session:
        return session.get(CartLineModel, line_id)


def status_of_booking(booking_id):
    booking = booking_of(booking_id)
    return BookingStatus(booking.status) if booking else None


def status_of_line(line_id):
    line = line_of(line_id)
    return BookingStatus(line.status) if line else None
