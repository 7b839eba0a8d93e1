from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy import String, ForeignKey, Numeric, DateTime, Boolean, Text, UniqueConstraint
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)

class Base(DeclarativeBase):
    pass

class User(Base):
    __tablename__ = "users"
    id: Mapped[int] = mapped_column(primary_key=True)
    admin: Mapped[bool] = mapped_column(Boolean, default=False)
    user_name: Mapped[str] = mapped_column(String(100))
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    tel: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    # bcrypt hash, never the plain password
    password: Mapped[str] = mapped_column(String(100))
    edit_time: Mapped[datetime] = mapped_column(DateTime, default=_utcnow, onupdate=_utcnow)

class Product(Base):
    __tablename__ = "products"
    id: Mapped[int] = mapped_column(primary_key=True)
    item_group: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    title: Mapped[str] = mapped_column(String(200))
    content: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    sale_price: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)
    img_urls: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    sell: Mapped[bool] = mapped_column(Boolean, default=True)
    edit_time: Mapped[datetime] = mapped_column(DateTime, default=_utcnow, onupdate=_utcnow)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow)

    @property
    def unit_price(self) -> Decimal:
        """Price charged at checkout: the sale price when one is set."""
        return self.sale_price if self.sale_price is not None else self.price

class CartLine(Base):
    __tablename__ = "cart"
    __table_args__ = (UniqueConstraint("user_id", "product_id", name="uq_cart_user_product"),)
    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    product_id: Mapped[int] = mapped_column(ForeignKey("products.id", ondelete="CASCADE"))
    qty: Mapped[int]
    product: Mapped[Product] = relationship("Product")

class OrderHeader(Base):
    __tablename__ = "order_customers"
    __table_args__ = (UniqueConstraint("user_id", "idempotency_key", name="uq_order_idempotency"),)
    order_number: Mapped[str] = mapped_column(String(10), primary_key=True)
    check_time: Mapped[datetime] = mapped_column(DateTime, default=_utcnow)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)
    consignee: Mapped[str] = mapped_column(String(100))
    tel: Mapped[str] = mapped_column(String(30))
    address: Mapped[str] = mapped_column(String(255))
    # Free-text lifecycle label: paid / shipped / cancelled ...
    status: Mapped[str] = mapped_column(String(30))
    idempotency_key: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    items: Mapped[list["OrderLine"]] = relationship(
        "OrderLine", back_populates="order", cascade="all, delete-orphan", order_by="OrderLine.id"
    )

    @property
    def total_amount(self) -> Decimal:
        return sum((item.subtotal for item in self.items), Decimal("0.00"))

class OrderLine(Base):
    __tablename__ = "order_items"
    id: Mapped[int] = mapped_column(primary_key=True)
    order_number: Mapped[str] = mapped_column(ForeignKey("order_customers.order_number", ondelete="CASCADE"), index=True)
    # Store product_id as integer (no FK - the product may be deleted later)
    product_id: Mapped[int]
    # Snapshot data (captured at checkout time)
    product_name: Mapped[str] = mapped_column(String(200))
    sale_price: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    qty: Mapped[int]
    img_urls: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    order: Mapped[OrderHeader] = relationship("OrderHeader", back_populates="items")

    @property
    def subtotal(self) -> Decimal:
        return self.sale_price * self.qty
