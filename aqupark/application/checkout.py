"""
Cart-to-order checkout.

``CheckoutService.checkout`` turns the caller's cart into an order inside a
single transaction:

1. lock and read the cart lines joined with the current product data
2. allocate a random, unused order number
3. write the order header and one snapshot line per cart line
4. delete the purchased cart lines
5. commit

An order exists if and only if the cart was non-empty, and the cart is emptied
exactly when the order commits. Any failure before the commit rolls the whole
transaction back.
"""

import random
import string
import time
from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, List, Optional

from sqlalchemy import delete, select, text
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session, contains_eager

from aqupark.core.exceptions import (
    CheckoutTimeoutError,
    EmptyCartError,
    PersistenceError,
    ShopError,
    ValidationError,
)
from aqupark.core.logging_config import get_logger
from aqupark.core_settings import Settings
from aqupark.domain.models import CartLine, OrderHeader, OrderLine

logger = get_logger(__name__)

# PostgreSQL SQLSTATE for a statement cancelled by statement_timeout
_QUERY_CANCELED = "57014"

@dataclass(frozen=True)
class Recipient:
    name: str
    phone: str
    address: str

    def validated(self) -> "Recipient":
        fields = {"consignee": self.name, "tel": self.phone, "address": self.address}
        missing = [key for key, value in fields.items() if not isinstance(value, str) or not value.strip()]
        if missing:
            raise ValidationError("Recipient name, phone and address are required", {"missing": missing})
        return Recipient(self.name.strip(), self.phone.strip(), self.address.strip())

@dataclass
class OrderConfirmation:
    order: OrderHeader
    replayed: bool = False

    @property
    def order_number(self) -> str:
        return self.order.order_number

    @property
    def items(self) -> List[OrderLine]:
        return self.order.items

    @property
    def total_amount(self) -> Decimal:
        return self.order.total_amount

class CheckoutService:
    def __init__(
        self,
        db: Session,
        settings: Settings,
        rng: Optional[random.Random] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.db = db
        self.settings = settings
        self.rng = rng or random.SystemRandom()
        self.clock = clock

    def checkout(self, user_id: int, recipient: Recipient, idempotency_key: Optional[str] = None) -> OrderConfirmation:
        recipient = recipient.validated()
        # a blank key means no key; it is never stored
        idempotency_key = (idempotency_key or "").strip() or None
        deadline = self.clock() + self.settings.CHECKOUT_TIMEOUT_SECONDS

        try:
            self._set_statement_timeout()

            if idempotency_key:
                previous = self._find_by_idempotency_key(user_id, idempotency_key)
                if previous is not None:
                    logger.info(f"Checkout replayed for user {user_id}: order {previous.order_number}")
                    return OrderConfirmation(previous, replayed=True)

            lines = self._read_cart(user_id)
            if not lines:
                raise EmptyCartError(user_id)
            self._check_deadline(deadline)

            order_number = self._generate_order_number()
            order = self._write_header(order_number, user_id, recipient, idempotency_key)
            self._write_lines(order, lines)
            self._check_deadline(deadline)

            self._clear_cart(user_id, lines)
            self._check_deadline(deadline)

            self.db.commit()
        except ShopError:
            self.db.rollback()
            raise
        except IntegrityError as e:
            self.db.rollback()
            if idempotency_key:
                # a concurrent request with the same key won the race
                previous = self._find_by_idempotency_key(user_id, idempotency_key)
                if previous is not None:
                    return OrderConfirmation(previous, replayed=True)
            logger.error(f"Checkout for user {user_id} violated a constraint", exc_info=True)
            raise PersistenceError("Checkout failed, no order was created") from e
        except OperationalError as e:
            self.db.rollback()
            if getattr(e.orig, "pgcode", None) == _QUERY_CANCELED:
                raise CheckoutTimeoutError("Checkout timed out, no order was created") from e
            logger.error(f"Checkout for user {user_id} failed", exc_info=True)
            raise PersistenceError("Checkout failed, no order was created") from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Checkout for user {user_id} failed", exc_info=True)
            raise PersistenceError("Checkout failed, no order was created") from e

        logger.info(
            f"Order {order.order_number} created from cart of user {user_id}",
            extra={
                'extra_fields': {
                    'order_number': order.order_number,
                    'user_id': user_id,
                    'lines': len(order.items),
                    'total_amount': str(order.total_amount),
                }
            }
        )
        return OrderConfirmation(order)

    def _set_statement_timeout(self):
        if self.db.get_bind().dialect.name != "postgresql":
            return
        ms = int(self.settings.CHECKOUT_TIMEOUT_SECONDS * 1000)
        # SET does not take bind parameters; ms is an int
        self.db.execute(text(f"SET LOCAL statement_timeout = {ms}"))

    def _check_deadline(self, deadline: float):
        if self.clock() > deadline:
            raise CheckoutTimeoutError("Checkout timed out, no order was created")

    def _find_by_idempotency_key(self, user_id: int, key: str) -> Optional[OrderHeader]:
        return self.db.execute(
            select(OrderHeader).where(OrderHeader.user_id == user_id, OrderHeader.idempotency_key == key)
        ).scalar_one_or_none()

    def _read_cart(self, user_id: int) -> List[CartLine]:
        # FOR UPDATE: a second checkout of the same cart waits here, then reads it empty
        stmt = (
            select(CartLine)
            .join(CartLine.product)
            .options(contains_eager(CartLine.product))
            .where(CartLine.user_id == user_id)
            .order_by(CartLine.id)
            .with_for_update(of=CartLine)
            .execution_options(populate_existing=True)
        )
        return list(self.db.execute(stmt).scalars().all())

    def _generate_order_number(self) -> str:
        length = self.settings.ORDER_NUMBER_LENGTH
        attempts = self.settings.ORDER_NUMBER_ATTEMPTS
        for attempt in range(1, attempts + 1):
            candidate = "".join(self.rng.choice(string.digits) for _ in range(length))
            if self.db.get(OrderHeader, candidate) is None:
                return candidate
            logger.warning(f"Order number collision on attempt {attempt}/{attempts}")
        raise PersistenceError("Could not allocate a unique order number")

    def _write_header(self, order_number: str, user_id: int, recipient: Recipient, idempotency_key: Optional[str]) -> OrderHeader:
        order = OrderHeader(
            order_number=order_number,
            user_id=user_id,
            consignee=recipient.name,
            tel=recipient.phone,
            address=recipient.address,
            status=self.settings.DEFAULT_ORDER_STATUS,
            idempotency_key=idempotency_key,
        )
        self.db.add(order)
        self.db.flush()
        return order

    def _write_lines(self, order: OrderHeader, lines: List[CartLine]):
        for line in lines:
            product = line.product
            order.items.append(OrderLine(
                product_id=line.product_id,
                product_name=product.title,
                sale_price=product.unit_price,
                qty=line.qty,
                img_urls=product.img_urls,
            ))
        self.db.flush()

    def _clear_cart(self, user_id: int, lines: List[CartLine]) -> int:
        # only the lines that were ordered; rows added after the read survive
        ids = [line.id for line in lines]
        result = self.db.execute(
            delete(CartLine).where(CartLine.user_id == user_id, CartLine.id.in_(ids))
        )
        return result.rowcount
