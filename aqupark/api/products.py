from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from aqupark.application.product_service import ProductService
from aqupark.application.schemas import ProductRead
from aqupark.infrastructure.db import get_db

router = APIRouter(prefix="/products", tags=["products"])

@router.get("", response_model=list[ProductRead])
def list_products(db: Session = Depends(get_db)):
    return ProductService(db).list()

@router.get("/{product_id}", response_model=ProductRead)
def get_product(product_id: int, db: Session = Depends(get_db)):
    return ProductService(db).get(product_id)
