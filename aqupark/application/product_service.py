from decimal import Decimal
from sqlalchemy import select
from sqlalchemy.orm import Session
from aqupark.core.exceptions import NotFoundError, ValidationError
from aqupark.core.logging_config import get_logger
from aqupark.domain.models import Product
from .schemas import ProductCreate, ProductPatch

logger = get_logger(__name__)

_MONEY_FIELDS = ("price", "sale_price")

def _to_money(value):
    return None if value is None else Decimal(str(value)).quantize(Decimal("0.01"))

class ProductService:
    def __init__(self, db: Session):
        self.db = db

    def list(self):
        return self.db.execute(select(Product).order_by(Product.id)).scalars().all()

    def get(self, product_id: int) -> Product:
        product = self.db.get(Product, product_id)
        if product is None:
            raise NotFoundError("Product not found", {"productId": product_id})
        return product

    def create(self, data: ProductCreate) -> Product:
        values = data.model_dump()
        for field in _MONEY_FIELDS:
            values[field] = _to_money(values[field])
        obj = Product(**values)
        self.db.add(obj)
        self.db.commit()
        self.db.refresh(obj)
        logger.info(f"Product {obj.id} created")
        return obj

    def update(self, product_id: int, patch: ProductPatch) -> Product:
        """Write the populated patch fields; nothing else changes."""
        changes = patch.model_dump(exclude_unset=True)
        if not changes:
            raise ValidationError("No fields to update")
        if changes.get("title", "") is None or changes.get("price", 0) is None or changes.get("sell", True) is None:
            raise ValidationError("title, price and sell cannot be cleared")

        product = self.get(product_id)
        for field, value in changes.items():
            if field in _MONEY_FIELDS:
                value = _to_money(value)
            setattr(product, field, value)
        self.db.commit()
        self.db.refresh(product)
        logger.info(f"Product {product_id} updated: {sorted(changes)}")
        return product

    def delete(self, product_id: int):
        product = self.get(product_id)
        self.db.delete(product)
        self.db.commit()
        logger.info(f"Product {product_id} deleted")
