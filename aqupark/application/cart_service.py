from sqlalchemy import select, delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError
from aqupark.core.exceptions import NotFoundError, PersistenceError, ValidationError
from aqupark.core.logging_config import get_logger
from aqupark.domain.models import CartLine, Product

logger = get_logger(__name__)

_WRITE_ATTEMPTS = 3

class CartService:
    def __init__(self, db: Session):
        self.db = db

    def list_lines(self, user_id: int) -> list[dict]:
        rows = self.db.execute(
            select(CartLine, Product)
            .join(Product, CartLine.product_id == Product.id)
            .where(CartLine.user_id == user_id)
            .order_by(CartLine.id)
        ).all()
        return [
            {
                "cart_id": line.id,
                "product_id": line.product_id,
                "title": product.title,
                "price": product.price,
                "sale_price": product.sale_price,
                "qty": line.qty,
                "img_urls": product.img_urls,
            }
            for line, product in rows
        ]

    def _get_line(self, user_id: int, product_id: int):
        return self.db.execute(
            select(CartLine).where(CartLine.user_id == user_id, CartLine.product_id == product_id)
        ).scalar_one_or_none()

    def add(self, user_id: int, product_id: int, qty: int) -> CartLine:
        """Add qty of a product; an existing line for the product is incremented."""
        if isinstance(qty, bool) or not isinstance(qty, int) or qty <= 0:
            raise ValidationError("qty must be a positive integer", {"qty": qty})

        product = self.db.execute(
            select(Product).where(Product.id == product_id, Product.sell.is_(True))
        ).scalar_one_or_none()
        if product is None:
            raise NotFoundError("Product does not exist or is not on sale", {"productId": product_id})

        for _ in range(_WRITE_ATTEMPTS):
            line = self._get_line(user_id, product_id)
            if line is None:
                line = CartLine(user_id=user_id, product_id=product_id, qty=qty)
                self.db.add(line)
            else:
                line.qty = CartLine.qty + qty
            try:
                self.db.commit()
                break
            except (IntegrityError, StaleDataError):
                # the line was inserted or deleted by another request after it was read
                self.db.rollback()
                if line in self.db:
                    self.db.expunge(line)
        else:
            raise PersistenceError("Could not update the cart, please retry", {"productId": product_id})
        self.db.refresh(line)
        logger.info(f"Cart of user {user_id}: product {product_id} now x{line.qty}")
        return line

    def set_quantity(self, user_id: int, product_id: int, qty: int) -> int:
        """Set the quantity of an existing line; 0 removes it."""
        if isinstance(qty, bool) or not isinstance(qty, int) or qty < 0:
            raise ValidationError("qty must be an integer of at least 0", {"qty": qty})

        line = self._get_line(user_id, product_id)
        if line is None:
            raise NotFoundError("Product is not in the cart", {"productId": product_id})

        if qty == 0:
            self.db.delete(line)
        else:
            line.qty = qty
        self.db.commit()
        return qty

    def remove(self, user_id: int, product_id: int):
        line = self._get_line(user_id, product_id)
        if line is None:
            raise NotFoundError("Product is not in the cart", {"productId": product_id})
        self.db.delete(line)
        self.db.commit()

    def clear(self, user_id: int) -> int:
        result = self.db.execute(delete(CartLine).where(CartLine.user_id == user_id))
        self.db.commit()
        logger.info(f"Cart of user {user_id} cleared ({result.rowcount} lines)")
        return result.rowcount
