"""
Stock ledger:
- append-only: every movement is a new signed row, nothing is updated or deleted
- current stock = SUM(quantity) over a product's entries, never stored
- no sufficiency checks: negative stock is allowed and only reported
"""
from sqlalchemy import select, func
from sqlalchemy.orm import Session
import logging
from datetime import datetime, timezone
from typing import List, Optional, Dict, Any

from app.models import LedgerEntry, LedgerEntryType, Product
from app.crud.base import CRUDBase

logger = logging.getLogger(__name__)

class CRUDLedger(CRUDBase[LedgerEntry]):
    def __init__(self):
        super().__init__(LedgerEntry, label="Ledger entry")

    def _append(
        self,
        db: Session,
        *,
        product_id: int,
        quantity: int,
        entry_type: LedgerEntryType,
        order_id: Optional[int] = None,
    ) -> LedgerEntry:
        entry = LedgerEntry(
            product_id=product_id,
            quantity=quantity,
            type=entry_type,
            order_id=order_id,
        )
        db.add(entry)
        db.flush()
        logger.info(
            f"Ledger {entry_type.value}: product={product_id} quantity={quantity:+d} order={order_id}"
        )
        return entry

    def record_stock_in(self, db: Session, *, product_id: int, quantity: int) -> LedgerEntry:
        """Goods received (+quantity)"""
        return self._append(
            db, product_id=product_id, quantity=quantity, entry_type=LedgerEntryType.STOCK_IN
        )

    def record_adjustment(self, db: Session, *, product_id: int, quantity: int) -> LedgerEntry:
        """Free-form correction, signed as given"""
        return self._append(
            db, product_id=product_id, quantity=quantity, entry_type=LedgerEntryType.STOCK_ADJUSTMENT
        )

    def reserve(self, db: Session, *, product_id: int, quantity: int, order_id: int) -> LedgerEntry:
        """Claim stock for an open order (-quantity)"""
        return self._append(
            db, product_id=product_id, quantity=-quantity,
            entry_type=LedgerEntryType.RESERVE, order_id=order_id,
        )

    def release(self, db: Session, *, product_id: int, quantity: int, order_id: int) -> LedgerEntry:
        """Undo a reservation (+quantity)"""
        return self._append(
            db, product_id=product_id, quantity=quantity,
            entry_type=LedgerEntryType.RELEASE, order_id=order_id,
        )

    def record_sale(self, db: Session, *, product_id: int, quantity: int, order_id: int) -> LedgerEntry:
        """Permanent deduction at order completion (-quantity)"""
        return self._append(
            db, product_id=product_id, quantity=-quantity,
            entry_type=LedgerEntryType.SALE, order_id=order_id,
        )

    def get_current_stock(self, db: Session, product_id: int) -> int:
        """Calculate current stock for product (SUM of ledger quantity)"""
        stmt = select(func.coalesce(func.sum(LedgerEntry.quantity), 0)).where(
            LedgerEntry.product_id == product_id
        )
        return int(db.execute(stmt).scalar_one())

    def get_stock_as_of(self, db: Session, product_id: int, moment: datetime) -> int:
        """Reconstruct stock at a past moment from the entries written up to it"""
        if moment.tzinfo is not None:
            moment = moment.astimezone(timezone.utc)
        stmt = select(func.coalesce(func.sum(LedgerEntry.quantity), 0)).where(
            LedgerEntry.product_id == product_id,
            LedgerEntry.created_at <= moment,
        )
        return int(db.execute(stmt).scalar_one())

    def get_product_ledger(
        self, db: Session, product_id: int, *, skip: int = 0, limit: int = 100
    ) -> List[LedgerEntry]:
        """Get ledger entries for specific product, newest first"""
        stmt = (
            select(LedgerEntry)
            .where(LedgerEntry.product_id == product_id)
            .order_by(LedgerEntry.created_at.desc(), LedgerEntry.id.desc())
            .offset(skip)
            .limit(limit)
        )
        return list(db.execute(stmt).scalars().all())

    def get_order_ledger(self, db: Session, order_id: int) -> List[LedgerEntry]:
        """Entries written on behalf of one order, in write order"""
        stmt = select(LedgerEntry).where(LedgerEntry.order_id == order_id).order_by(LedgerEntry.id)
        return list(db.execute(stmt).scalars().all())

    def get_snapshot(self, db: Session) -> List[Dict[str, Any]]:
        """One row per catalog product with its derived stock"""
        stock = func.coalesce(func.sum(LedgerEntry.quantity), 0)
        stmt = (
            select(Product.id, Product.name, stock)
            .outerjoin(LedgerEntry, LedgerEntry.product_id == Product.id)
            .group_by(Product.id, Product.name)
            .order_by(Product.name, Product.id)
        )

        snapshot = []
        for product_id, product_name, current_stock in db.execute(stmt).all():
            current_stock = int(current_stock)
            warnings = None
            if current_stock < 0:
                warnings = [f"Negative stock: {current_stock}"]
            snapshot.append({
                "product_id": product_id,
                "product_name": product_name,
                "current_stock": current_stock,
                "warnings": warnings,
            })
        return snapshot

# Create instance
crud_ledger = CRUDLedger()
