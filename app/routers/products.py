"""
Product catalog router
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List

from app.database import get_db, unit_of_work
from app.security import require_pin
from app.crud.product import crud_product
from app.schemas.product import ProductCreate, ProductUpdate, ProductResponse
from app.utils.money import to_money

router = APIRouter(prefix="/products", tags=["products"], dependencies=[Depends(require_pin)])

@router.post("", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
def create_product(product: ProductCreate, db: Session = Depends(get_db)):
    data = product.model_dump()
    data["price"] = to_money(data["price"])
    with unit_of_work(db):
        db_product = crud_product.create(db, obj_in=data)
    return db_product

@router.get("", response_model=List[ProductResponse])
def list_products(db: Session = Depends(get_db)):
    return crud_product.get_all(db)

@router.get("/{product_id}", response_model=ProductResponse)
def get_product(product_id: int, db: Session = Depends(get_db)):
    return crud_product.get_or_raise(db, product_id)

@router.patch("/{product_id}", response_model=ProductResponse)
def update_product(product_id: int, product: ProductUpdate, db: Session = Depends(get_db)):
    """
    Partial update.
    A new price applies to future orders only; existing order items keep their snapshot.
    """
    data = product.model_dump(exclude_unset=True, exclude_none=True)
    if "price" in data:
        data["price"] = to_money(data["price"])
    with unit_of_work(db):
        db_product = crud_product.get_or_raise(db, product_id)
        db_product = crud_product.update(db, db_obj=db_product, obj_in=data)
    return db_product

@router.delete("/{product_id}", response_model=ProductResponse)
def delete_product(product_id: int, db: Session = Depends(get_db)):
    """
    Delete a product with no order or ledger history (409 otherwise)
    """
    with unit_of_work(db):
        db_product = crud_product.get_or_raise(db, product_id)
        crud_product.remove_unreferenced(db, db_obj=db_product)
    return db_product
