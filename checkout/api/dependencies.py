# checkout/api/dependencies.py
from checkout.services.catalog_client import CatalogClient
from checkout.services.lock_service import LockService
from checkout.services.media_client import MediaClient
from checkout.tasks.expire import schedule_reservation_expiry


def get_catalog_client() -> CatalogClient:
    return CatalogClient()


def get_media_client() -> MediaClient:
    return MediaClient()


def get_lock_service() -> LockService:
    return LockService()


def get_expiry_scheduler():
    return schedule_reservation_expiry
