from fastapi import APIRouter, Depends, Header, Query, Response
from sqlalchemy.orm import Session
from typing import Optional
from aqupark.api.deps import get_app_settings, get_current_principal
from aqupark.application.authorization import Principal, authorize_owner_or_admin
from aqupark.application.cart_service import CartService
from aqupark.application.checkout import CheckoutService, Recipient
from aqupark.application.schemas import (
    CartLineRead,
    CartLineWrite,
    CheckoutRequest,
    CheckoutResponse,
    MessageResponse,
    OrderRead,
)
from aqupark.core_settings import Settings
from aqupark.infrastructure.db import get_db

router = APIRouter(prefix="/cart", tags=["cart"])

@router.get("", response_model=list[CartLineRead])
def get_cart(
    target_user_id: Optional[int] = Query(None, alias="targetUserId"),
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    user_id = authorize_owner_or_admin(principal, target_user_id)
    return CartService(db).list_lines(user_id)

@router.post("", response_model=MessageResponse, status_code=201)
def add_to_cart(
    payload: CartLineWrite,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    user_id = authorize_owner_or_admin(principal, payload.target_user_id)
    CartService(db).add(user_id, payload.product_id, payload.qty)
    return {"message": "Added to cart"}

@router.patch("", response_model=MessageResponse)
def update_cart_line(
    payload: CartLineWrite,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    user_id = authorize_owner_or_admin(principal, payload.target_user_id)
    qty = CartService(db).set_quantity(user_id, payload.product_id, payload.qty)
    if qty == 0:
        return {"message": "Product removed from cart"}
    return {"message": "Cart quantity updated"}

@router.delete("", response_model=MessageResponse)
def clear_cart(
    target_user_id: Optional[int] = Query(None, alias="targetUserId"),
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    user_id = authorize_owner_or_admin(principal, target_user_id)
    CartService(db).clear(user_id)
    return {"message": "Cart cleared"}

@router.delete("/{product_id}", response_model=MessageResponse)
def remove_from_cart(
    product_id: int,
    target_user_id: Optional[int] = Query(None, alias="targetUserId"),
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    user_id = authorize_owner_or_admin(principal, target_user_id)
    CartService(db).remove(user_id, product_id)
    return {"message": "Product removed from cart"}

@router.post("/orders", response_model=CheckoutResponse, status_code=201)
def checkout(
    payload: CheckoutRequest,
    response: Response,
    idempotency_key: Optional[str] = Header(None, alias="Idempotency-Key", max_length=64),
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    """Turn the cart into an order. Admins may pass userId/targetUserId to act for a user."""
    target = payload.target_user_id if payload.target_user_id is not None else payload.user_id
    user_id = authorize_owner_or_admin(principal, target)

    confirmation = CheckoutService(db, settings).checkout(
        user_id,
        Recipient(name=payload.consignee, phone=payload.tel, address=payload.address),
        idempotency_key=idempotency_key,
    )
    if confirmation.replayed:
        response.status_code = 200
    return {
        "message": "Order already placed" if confirmation.replayed else "Order created",
        "order_number": confirmation.order_number,
        "order": OrderRead.model_validate(confirmation.order),
    }
