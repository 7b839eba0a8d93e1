from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from datetime import datetime
from typing import Optional

class CamelModel(BaseModel):
    """Bodies are read in camelCase or snake_case and always written in camelCase."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

class MessageResponse(CamelModel):
    message: str

# Users

class UserRegister(CamelModel):
    user_name: str = Field(min_length=1, max_length=100)
    email: str = Field(min_length=3, max_length=255, pattern=r".+@.+")
    tel: Optional[str] = Field(None, max_length=30)
    password: str = Field(min_length=1, max_length=72)

class UserLogin(CamelModel):
    email: str
    password: str

class UserRead(CamelModel):
    id: int
    admin: bool
    user_name: str
    email: str
    tel: Optional[str] = None
    edit_time: Optional[datetime] = None

class LoginResponse(CamelModel):
    message: str
    user_id: int
    admin: bool
    user_name: str
    email: str
    tel: Optional[str] = None
    access_token: str
    token_type: str = "bearer"

class UserPatch(CamelModel):
    """Only the fields present in the body are written."""
    user_name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[str] = Field(None, min_length=3, max_length=255, pattern=r".+@.+")
    tel: Optional[str] = Field(None, max_length=30)
    password: Optional[str] = Field(None, min_length=1, max_length=72)
    target_user_id: Optional[int] = None

class EmailCheck(CamelModel):
    exists: bool

# Products

class ProductCreate(CamelModel):
    item_group: Optional[str] = None
    title: str = Field(min_length=1, max_length=200)
    content: Optional[str] = None
    price: float = Field(ge=0)
    sale_price: Optional[float] = Field(None, ge=0)
    img_urls: Optional[str] = None
    sell: bool = True

class ProductPatch(CamelModel):
    item_group: Optional[str] = None
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    content: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    sale_price: Optional[float] = Field(None, ge=0)
    img_urls: Optional[str] = None
    sell: Optional[bool] = None

class ProductRead(CamelModel):
    id: int
    item_group: Optional[str] = None
    title: str
    content: Optional[str] = None
    price: float
    sale_price: Optional[float] = None
    img_urls: Optional[str] = None
    sell: bool
    edit_time: Optional[datetime] = None
    created_at: Optional[datetime] = None

# Cart

class CartLineRead(CamelModel):
    cart_id: int
    product_id: int
    title: str
    price: float
    sale_price: Optional[float] = None
    qty: int
    img_urls: Optional[str] = None

class CartLineWrite(CamelModel):
    product_id: int
    qty: int
    # admins may act on another user's cart
    target_user_id: Optional[int] = None

# Orders

class CheckoutRequest(CamelModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    consignee: str = Field(min_length=1, max_length=100)
    tel: str = Field(min_length=1, max_length=30)
    address: str = Field(min_length=1, max_length=255)
    user_id: Optional[int] = None
    target_user_id: Optional[int] = None

class OrderItemRead(CamelModel):
    product_id: int
    product_name: str
    sale_price: float
    qty: int
    subtotal: float
    img_urls: Optional[str] = None

class OrderRead(CamelModel):
    order_number: str
    user_id: int
    check_time: datetime
    consignee: str
    tel: str
    address: str
    status: str
    items: list[OrderItemRead]
    total_amount: float

class CheckoutResponse(CamelModel):
    message: str
    order_number: str
    order: OrderRead

class OrderStatusUpdate(CamelModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    status: str = Field(min_length=1, max_length=30)
