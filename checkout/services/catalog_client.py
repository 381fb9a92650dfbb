# checkout/services/catalog_client.py
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

import requests

from checkout.utils.retry import http_retry
from checkout.utils.settings import CATALOG_SERVICE_URL
from checkout.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class VariantInfo:
    id: int
    minimum_order_qty: int
    selling_price: Decimal
    mrp: Decimal
    product_title: Optional[str] = None
    product_id: Optional[int] = None

    @classmethod
    def from_payload(cls, payload: dict) -> "VariantInfo":
        return cls(
            id=int(payload["id"]),
            minimum_order_qty=int(payload.get("minimum_order_qty") or 1),
            selling_price=Decimal(str(payload.get("selling_price", 0))),
            mrp=Decimal(str(payload.get("mrp", 0))),
            product_title=payload.get("product_title"),
            product_id=payload.get("product_id"),
        )


class CatalogClient:
    def __init__(self, base_url: str | None = None, timeout: int = 2):
        self.base_url = (base_url or CATALOG_SERVICE_URL).rstrip("/")
        self.timeout = timeout

    @http_retry()
    def get_variant(self, variant_id: int) -> VariantInfo | None:
        url = f"{self.base_url}/variants/{variant_id}"
        logger.info(f"CatalogClient GET {url}")

        resp = requests.get(url, timeout=self.timeout)
        if resp.status_code == 404:
            return None
        resp.raise_for_status()
        return VariantInfo.from_payload(resp.json())
