from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional
from aqupark.api.deps import get_current_principal
from aqupark.application.authorization import Principal
from aqupark.application.order_service import OrderService
from aqupark.application.schemas import OrderRead
from aqupark.infrastructure.db import get_db

router = APIRouter(prefix="/orders", tags=["orders"])

@router.get("", response_model=list[OrderRead])
def list_orders(
    user_id: Optional[int] = Query(None, alias="userId"),
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    """Orders of the caller; admins may pick another user with ?userId="""
    target = user_id if principal.is_admin and user_id else principal.user_id
    return OrderService(db).list_for_user(target)

@router.get("/{order_number}", response_model=OrderRead)
def get_order(
    order_number: str,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    return OrderService(db).get_for(order_number, principal)
