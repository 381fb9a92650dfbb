# checkout/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import List, Optional
from decimal import Decimal
from datetime import datetime

from checkout.domain.status import BookingStatus, FULFILLMENT_STATUSES


class _Request(BaseModel):
    """Request bodies keep the camelCase field names clients already send."""

    model_config = ConfigDict(populate_by_name=True)


# =====================================================
# REQUESTS
# =====================================================
class AddToCartIn(_Request):
    quantity: int = Field(..., alias="cartQty", gt=0, description="Quantity (must be > 0)")
    variant_id: int = Field(..., alias="variantId", gt=0)
    user_id: int = Field(..., alias="userId", gt=0)


class BuyNowIn(AddToCartIn):
    amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)


class CartLineRef(_Request):
    cart_id: int = Field(..., gt=0)


class RemoveCartLineIn(_Request):
    cart_id: int = Field(..., alias="cartId", gt=0)
    user_id: int = Field(..., alias="userId", gt=0)


class PlaceOrderIn(_Request):
    user_id: int = Field(..., alias="userId", gt=0)
    cart_ids: List[int] = Field(..., alias="cartIds", min_length=1)
    total_amount: Decimal = Field(..., alias="totalAmount", gt=0, max_digits=12, decimal_places=2)


class ConfirmOrderIn(_Request):
    booking_id: int = Field(..., alias="bookingID", gt=0)
    user_id: int = Field(..., alias="userId", gt=0)
    address_id: int = Field(..., alias="addressId", gt=0)


class UpdateStatusIn(_Request):
    booking_id: int = Field(..., alias="bookingId", gt=0)
    cart_id: int = Field(..., alias="cartId", gt=0)
    status: BookingStatus

    @field_validator("status", mode="before")
    @classmethod
    def _parse_status(cls, value):
        status = BookingStatus.parse(value)
        if status not in FULFILLMENT_STATUSES:
            raise ValueError("Invalid status value. Must be 1, 2.5, 3, or 4")
        return status


class CancelCartLineIn(_Request):
    booking_id: int = Field(..., alias="bookingId", gt=0)
    cart_id: int = Field(..., alias="cartId", gt=0)


class OrderDetailsIn(_Request):
    user_id: int = Field(..., alias="userId", gt=0)


# =====================================================
# RESPONSES
# =====================================================
class CartLineOut(BaseModel):
    id: int
    booking_id: int
    variant_id: int
    quantity: int
    status: BookingStatus
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class BookingOut(BaseModel):
    id: int
    user_id: int
    address_id: Optional[int] = None
    amount: Optional[Decimal] = None
    status: BookingStatus
    expires_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class BookingWithLinesOut(BookingOut):
    lines: List[CartLineOut]


class EnrichedCartLineOut(BaseModel):
    """Cart line joined with catalog pricing, live stock and primary image."""

    cart_id: int
    booking_id: int
    variant_id: int
    quantity: int
    status: BookingStatus
    product_title: Optional[str] = None
    product_id: Optional[int] = None
    mrp: Optional[Decimal] = None
    selling_price: Optional[Decimal] = None
    minimum_order_qty: Optional[int] = None
    stock_qty: int
    image: str
    booking_amount: Optional[Decimal] = None


class BookingDetailsOut(BookingOut):
    cart_items: List[EnrichedCartLineOut]


class BuyNowOut(BaseModel):
    booking_id: int
    cart: CartLineOut
    expires_at: datetime


class RemoveCartLineOut(BaseModel):
    cart_id: int
    booking_deleted: bool


class PlaceOrderOut(BaseModel):
    booking_id: int
    updated_count: int


class ConfirmOrderOut(BaseModel):
    booking: BookingOut
    cart: List[CartLineOut]


class LineUpdateOut(BaseModel):
    cart: CartLineOut
    booking_status: BookingStatus
    booking_updated: bool


class Pagination(BaseModel):
    current_page: int
    total_pages: int
    total_items: int
    items_per_page: int


class OrderPageOut(BaseModel):
    data: List[BookingDetailsOut]
    pagination: Pagination


class ErrorOut(BaseModel):
    reason: str
    message: str
