from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload
from aqupark.application.authorization import Principal
from aqupark.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from aqupark.core.logging_config import get_logger
from aqupark.domain.models import OrderHeader

logger = get_logger(__name__)

class OrderService:
    def __init__(self, db: Session):
        self.db = db

    def list_for_user(self, user_id: int) -> list[OrderHeader]:
        """Orders of one user with their lines, newest first."""
        return list(self.db.execute(
            select(OrderHeader)
            .options(selectinload(OrderHeader.items))
            .where(OrderHeader.user_id == user_id)
            .order_by(OrderHeader.check_time.desc(), OrderHeader.order_number)
        ).scalars().all())

    def get(self, order_number: str) -> OrderHeader:
        order = self.db.execute(
            select(OrderHeader)
            .options(selectinload(OrderHeader.items))
            .where(OrderHeader.order_number == order_number)
        ).scalar_one_or_none()
        if order is None:
            raise NotFoundError("Order not found", {"orderNumber": order_number})
        return order

    def get_for(self, order_number: str, principal: Principal) -> OrderHeader:
        order = self.get(order_number)
        if order.user_id != principal.user_id and not principal.is_admin:
            raise AuthorizationError("Not allowed to read this order", {"orderNumber": order_number})
        return order

    def update_status(self, order_number: str, status: str) -> OrderHeader:
        # Only the status is mutable once an order exists
        status = (status or "").strip()
        if not status:
            raise ValidationError("status is required")
        order = self.get(order_number)
        previous = order.status
        order.status = status
        self.db.commit()
        logger.info(f"Order {order_number} status {previous} -> {status}")
        return order
