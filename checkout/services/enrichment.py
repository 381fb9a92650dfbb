# checkout/services/enrichment.py
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from checkout.data.models.booking import BookingModel
from checkout.data.models.cart_line import CartLineModel
from checkout.domain.schemas import BookingOut
from checkout.repos.stock_repo import StockRepo
from checkout.services.catalog_client import CatalogClient, VariantInfo
from checkout.services.media_client import MediaClient
from checkout.utils.settings import DEFAULT_IMAGE


class LineEnricher:
    """Read model: joins cart lines with catalog pricing, live stock and images."""

    def __init__(self, db: Session, catalog: CatalogClient, media: MediaClient):
        self.stock_repo = StockRepo(db)
        self.catalog = catalog
        self.media = media

    def enrich_lines(
        self,
        lines: Iterable[CartLineModel],
        booking_amounts: Optional[Dict[int, Any]] = None,
    ) -> List[Dict[str, Any]]:
        lines = list(lines)
        variant_ids = sorted({line.variant_id for line in lines})

        stocks = self.stock_repo.get_available_many(variant_ids)
        variants: Dict[int, VariantInfo | None] = {
            vid: self.catalog.get_variant(vid) for vid in variant_ids
        }
        images = {vid: self.media.get_primary_image(vid) for vid in variant_ids}
        booking_amounts = booking_amounts or {}

        enriched = []
        for line in lines:
            variant = variants.get(line.variant_id)
            enriched.append(
                {
                    "cart_id": line.id,
                    "booking_id": line.booking_id,
                    "variant_id": line.variant_id,
                    "quantity": line.quantity,
                    "status": line.status,
                    "product_title": variant.product_title if variant else None,
                    "product_id": variant.product_id if variant else None,
                    "mrp": variant.mrp if variant else None,
                    "selling_price": variant.selling_price if variant else None,
                    "minimum_order_qty": variant.minimum_order_qty if variant else None,
                    "stock_qty": stocks.get(line.variant_id, 0),
                    "image": images.get(line.variant_id) or DEFAULT_IMAGE,
                    "booking_amount": booking_amounts.get(line.booking_id),
                }
            )
        return enriched

    def booking_details(
        self,
        bookings: Iterable[BookingModel],
        lines: Iterable[CartLineModel],
    ) -> List[Dict[str, Any]]:
        bookings = list(bookings)
        amounts = {b.id: b.amount for b in bookings}
        by_booking: Dict[int, List[Dict[str, Any]]] = {b.id: [] for b in bookings}
        for item in self.enrich_lines(lines, amounts):
            by_booking[item["booking_id"]].append(item)

        return [
            {**BookingOut.model_validate(b).model_dump(), "cart_items": by_booking[b.id]}
            for b in bookings
        ]
