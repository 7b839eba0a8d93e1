from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from aqupark.api.deps import get_admin_principal
from aqupark.application.order_service import OrderService
from aqupark.application.product_service import ProductService
from aqupark.application.schemas import (
    MessageResponse,
    OrderRead,
    OrderStatusUpdate,
    ProductCreate,
    ProductPatch,
    ProductRead,
)
from aqupark.infrastructure.db import get_db

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(get_admin_principal)])

@router.post("/products", response_model=ProductRead, status_code=201)
def create_product(payload: ProductCreate, db: Session = Depends(get_db)):
    return ProductService(db).create(payload)

@router.patch("/products/{product_id}", response_model=ProductRead)
def update_product(product_id: int, payload: ProductPatch, db: Session = Depends(get_db)):
    return ProductService(db).update(product_id, payload)

@router.delete("/products/{product_id}", response_model=MessageResponse)
def delete_product(product_id: int, db: Session = Depends(get_db)):
    ProductService(db).delete(product_id)
    return {"message": "Product deleted"}

@router.patch("/orders/{order_number}", response_model=OrderRead)
def update_order_status(order_number: str, payload: OrderStatusUpdate, db: Session = Depends(get_db)):
    return OrderService(db).update_status(order_number, payload.status)
