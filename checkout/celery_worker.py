# checkout/celery_worker.py
from celery import Celery
from celery.signals import setup_logging

from checkout.utils.logging import configure_logging
from checkout.utils.settings import CELERY_BROKER_URL, CELERY_RESULT_BACKEND, EXPIRY_SWEEP_SECONDS

celery_app = Celery(
    "checkout",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

# register tasks explicitly so the worker picks them up
celery_app.conf.imports = (
    "checkout.tasks.expire",
)

# durable fallback for the one-shot expiry timers
celery_app.conf.beat_schedule = {
    "expire-reservations-every-minute": {
        "task": "checkout.tasks.expire.expire_reservations_task",
        "schedule": EXPIRY_SWEEP_SECONDS,
    },
}

celery_app.conf.timezone = "UTC"


@setup_logging.connect
def configure_worker_logging(**kwargs):
    # connecting here stops celery from installing its own root handlers
    configure_logging()
