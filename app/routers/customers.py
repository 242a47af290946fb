from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List

from app.database import get_db, unit_of_work
from app.security import require_pin
from app.crud.customer import crud_customer
from app.schemas.product import CustomerCreate, CustomerResponse

router = APIRouter(prefix="/customers", tags=["customers"], dependencies=[Depends(require_pin)])

@router.post("", response_model=CustomerResponse, status_code=status.HTTP_201_CREATED)
def create_customer(customer: CustomerCreate, db: Session = Depends(get_db)):
    with unit_of_work(db):
        db_customer = crud_customer.create(db, obj_in=customer.model_dump())
    return db_customer

@router.get("", response_model=List[CustomerResponse])
def list_customers(db: Session = Depends(get_db)):
    return crud_customer.get_all(db)

@router.get("/{customer_id}", response_model=CustomerResponse)
def get_customer(customer_id: int, db: Session = Depends(get_db)):
    return crud_customer.get_or_raise(db, customer_id)
