"""
Product catalog CRUD.
Price changes affect future orders only: order items keep their own snapshot.
"""
from sqlalchemy import select, exists
from sqlalchemy.orm import Session
import logging
from typing import List

from app.models import Product, OrderItem, LedgerEntry
from app.crud.base import CRUDBase
from app.exceptions import ConflictError

logger = logging.getLogger(__name__)

class CRUDProduct(CRUDBase[Product]):
    def __init__(self):
        super().__init__(Product, label="Product")

    def get_all(self, db: Session) -> List[Product]:
        """Catalog ordered by name"""
        stmt = select(Product).order_by(Product.name, Product.id)
        return list(db.execute(stmt).scalars().all())

    def is_referenced(self, db: Session, product_id: int) -> bool:
        """True when any order item or ledger entry points at the product"""
        in_orders = db.execute(
            select(exists().where(OrderItem.product_id == product_id))
        ).scalar()
        in_ledger = db.execute(
            select(exists().where(LedgerEntry.product_id == product_id))
        ).scalar()
        return bool(in_orders or in_ledger)

    def remove_unreferenced(self, db: Session, *, db_obj: Product) -> Product:
        """
        Delete a product that nothing refers to.
        The ledger is append-only, so a product with history can never go away.
        """
        if self.is_referenced(db, db_obj.id):
            logger.warning(f"Refused to delete referenced product {db_obj.id}")
            raise ConflictError(
                f"Product {db_obj.id} is referenced by orders or ledger entries and cannot be deleted"
            )
        return self.remove(db, db_obj=db_obj)

# Create instances
crud_product = CRUDProduct()
