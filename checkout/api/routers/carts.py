# checkout/api/routers/carts.py
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from checkout.api import ERROR_RESPONSES
from checkout.api.dependencies import (
    get_catalog_client,
    get_expiry_scheduler,
    get_lock_service,
    get_media_client,
)
from checkout.data.database import get_db
from checkout.domain.schemas import (
    AddToCartIn,
    BuyNowIn,
    BuyNowOut,
    CartLineOut,
    CartLineRef,
    EnrichedCartLineOut,
    PlaceOrderIn,
    PlaceOrderOut,
    RemoveCartLineIn,
    RemoveCartLineOut,
)
from checkout.services.cart_service import CartService
from checkout.services.order_service import OrderService

router = APIRouter(prefix="/cart", tags=["cart"], responses=ERROR_RESPONSES)


def get_service(
    db: Session = Depends(get_db),
    catalog=Depends(get_catalog_client),
    media=Depends(get_media_client),
    lock_service=Depends(get_lock_service),
    expiry_scheduler=Depends(get_expiry_scheduler),
) -> CartService:
    return CartService(
        db=db,
        catalog=catalog,
        media=media,
        lock_service=lock_service,
        expiry_scheduler=expiry_scheduler,
    )


def get_order_service(
    db: Session = Depends(get_db),
    catalog=Depends(get_catalog_client),
    media=Depends(get_media_client),
) -> OrderService:
    return OrderService(db=db, catalog=catalog, media=media)


@router.post("", response_model=CartLineOut, status_code=201)
def add_to_cart(payload: AddToCartIn, svc: CartService = Depends(get_service)):
    return svc.add_to_cart(payload.user_id, payload.variant_id, payload.quantity)


@router.delete("", response_model=RemoveCartLineOut)
def remove_cart_line(payload: RemoveCartLineIn, svc: CartService = Depends(get_service)):
    booking_deleted = svc.remove_line(payload.cart_id, payload.user_id)
    return {"cart_id": payload.cart_id, "booking_deleted": booking_deleted}


@router.put("/addOne", response_model=CartLineOut)
def add_one(payload: CartLineRef, svc: CartService = Depends(get_service)):
    return svc.add_quantity(payload.cart_id)


@router.put("/removeOne", response_model=CartLineOut)
def remove_one(payload: CartLineRef, svc: CartService = Depends(get_service)):
    return svc.remove_quantity(payload.cart_id)


@router.post("/buy-now", response_model=BuyNowOut, status_code=201)
def buy_now(payload: BuyNowIn, svc: CartService = Depends(get_service)):
    booking, line = svc.buy_now(
        user_id=payload.user_id,
        variant_id=payload.variant_id,
        quantity=payload.quantity,
        amount=payload.amount,
    )
    return {"booking_id": booking.id, "cart": line, "expires_at": booking.expires_at}


@router.post("/place-order", response_model=PlaceOrderOut)
def place_order(payload: PlaceOrderIn, svc: OrderService = Depends(get_order_service)):
    booking_id, updated = svc.place_order(payload.user_id, payload.cart_ids, payload.total_amount)
    return {"booking_id": booking_id, "updated_count": updated}


@router.get("/{user_id}", response_model=List[EnrichedCartLineOut])
def get_cart(user_id: int, svc: CartService = Depends(get_service)):
    return svc.get_cart(user_id)
