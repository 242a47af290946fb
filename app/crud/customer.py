from sqlalchemy import select
from sqlalchemy.orm import Session
from typing import List

from app.models import Customer
from app.crud.base import CRUDBase

class CRUDCustomer(CRUDBase[Customer]):
    def __init__(self):
        super().__init__(Customer, label="Customer")

    def get_all(self, db: Session) -> List[Customer]:
        stmt = select(Customer).order_by(Customer.name, Customer.id)
        return list(db.execute(stmt).scalars().all())

crud_customer = CRUDCustomer()
