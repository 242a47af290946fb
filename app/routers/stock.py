"""
Stock router.
The ledger is append-only: stock-in and adjustments add entries, nothing edits them.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

from app.database import get_db, unit_of_work
from app.security import require_pin
from app.crud.ledger import crud_ledger
from app.crud.product import crud_product
from app.schemas.stock import (
    StockIn, StockAdjust, StockSnapshotRow, ProductStockResponse,
    LedgerEntryResponse, SuccessResponse
)

router = APIRouter(prefix="/stock", tags=["stock"], dependencies=[Depends(require_pin)])

# ====================
# LEDGER WRITES
# ====================

@router.post("/in", response_model=SuccessResponse)
def stock_in(movement: StockIn, db: Session = Depends(get_db)):
    """Record goods received"""
    with unit_of_work(db):
        crud_product.get_or_raise(db, movement.product_id)
        crud_ledger.record_stock_in(db, product_id=movement.product_id, quantity=movement.quantity)
    return SuccessResponse()

@router.post("/adjust", response_model=SuccessResponse)
def stock_adjust(movement: StockAdjust, db: Session = Depends(get_db)):
    """Signed correction (breakage, recount, ...)"""
    with unit_of_work(db):
        crud_product.get_or_raise(db, movement.product_id)
        crud_ledger.record_adjustment(db, product_id=movement.product_id, quantity=movement.quantity)
    return SuccessResponse()

# ====================
# READS
# ====================

@router.get("/snapshot", response_model=List[StockSnapshotRow])
def stock_snapshot(db: Session = Depends(get_db)):
    """
    Current stock of every product.
    Negative stock is reported in `warnings`, never corrected.
    """
    return crud_ledger.get_snapshot(db)

@router.get("/{product_id}", response_model=ProductStockResponse)
def product_stock(product_id: int, db: Session = Depends(get_db)):
    crud_product.get_or_raise(db, product_id)
    return ProductStockResponse(
        product_id=product_id,
        current_stock=crud_ledger.get_current_stock(db, product_id),
    )

@router.get("/{product_id}/ledger", response_model=List[LedgerEntryResponse])
def product_ledger(product_id: int, skip: int = 0, limit: int = 100, db: Session = Depends(get_db)):
    """Ledger history of one product, newest first"""
    crud_product.get_or_raise(db, product_id)
    return crud_ledger.get_product_ledger(db, product_id, skip=skip, limit=limit)
