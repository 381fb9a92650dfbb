# checkout/services/media_client.py
import requests
from requests import RequestException

from checkout.utils.retry import http_retry
from checkout.utils.settings import MEDIA_SERVICE_URL
from checkout.utils.logging import get_logger

logger = get_logger(__name__)


class MediaClient:
    def __init__(self, base_url: str | None = None, timeout: int = 2):
        self.base_url = (base_url or MEDIA_SERVICE_URL).rstrip("/")
        self.timeout = timeout

    @http_retry()
    def _fetch_primary_image(self, variant_id: int) -> str | None:
        url = f"{self.base_url}/variants/{variant_id}/primary-image"
        resp = requests.get(url, timeout=self.timeout)
        if resp.status_code == 404:
            return None
        resp.raise_for_status()
        return resp.json().get("image")

    def get_primary_image(self, variant_id: int) -> str | None:
        # images are display-only, a media outage must not fail the cart
        try:
            return self._fetch_primary_image(variant_id)
        except RequestException as e:
            logger.warning(f"Primary image lookup failed for variant {variant_id}: {e}")
            return None
