# checkout/api/routers/bookings.py
from typing import List

from fastapi import APIRouter, Depends, Query

from checkout.api import ERROR_RESPONSES
from checkout.api.routers.carts import get_order_service
from checkout.domain.schemas import (
    BookingDetailsOut,
    BookingWithLinesOut,
    CancelCartLineIn,
    ConfirmOrderIn,
    ConfirmOrderOut,
    LineUpdateOut,
    OrderDetailsIn,
    OrderPageOut,
    UpdateStatusIn,
)
from checkout.services.order_service import OrderService

router = APIRouter(prefix="/booking", tags=["booking"], responses=ERROR_RESPONSES)


@router.put("/confirm-Order", response_model=ConfirmOrderOut)
def confirm_order(payload: ConfirmOrderIn, svc: OrderService = Depends(get_order_service)):
    """
    Checkout: claims the booking, takes stock and confirms every line
    in one transaction. Nothing is written if any line lacks stock.
    """
    booking, lines = svc.confirm_order(payload.booking_id, payload.user_id, payload.address_id)
    return {"booking": booking, "cart": lines}


@router.put("/update-the-status", response_model=LineUpdateOut)
def update_status(payload: UpdateStatusIn, svc: OrderService = Depends(get_order_service)):
    line, booking, updated = svc.advance_line(payload.booking_id, payload.cart_id, payload.status)
    return {"cart": line, "booking_status": booking.status, "booking_updated": updated}


@router.put("/cancel-cart-item", response_model=LineUpdateOut)
def cancel_cart_item(payload: CancelCartLineIn, svc: OrderService = Depends(get_order_service)):
    line, booking, updated = svc.cancel_line(payload.booking_id, payload.cart_id)
    return {"cart": line, "booking_status": booking.status, "booking_updated": updated}


@router.post("/order-details", response_model=List[BookingDetailsOut])
def order_details(payload: OrderDetailsIn, svc: OrderService = Depends(get_order_service)):
    return svc.order_details(payload.user_id)


@router.get("/get-order-details", response_model=OrderPageOut)
def get_order_details(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    svc: OrderService = Depends(get_order_service),
):
    return svc.list_orders(page, limit)


@router.get("/delivered", response_model=List[BookingDetailsOut])
def delivered_orders(svc: OrderService = Depends(get_order_service)):
    return svc.delivered_orders()


@router.get("/{booking_id}", response_model=BookingWithLinesOut)
def get_booking(
    booking_id: int,
    user_id: int = Query(..., gt=0),
    svc: OrderService = Depends(get_order_service),
):
    return svc.get_booking(booking_id, user_id)
