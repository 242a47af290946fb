"""
Stock ledger schemas (append-only)
"""
from pydantic import Field, field_validator
from typing import Optional, List
from datetime import datetime

from app.models import LedgerEntryType
from app.schemas.base import APIModel

class StockIn(APIModel):
    product_id: int
    quantity: int = Field(..., gt=0)

class StockAdjust(APIModel):
    product_id: int
    quantity: int

    @field_validator("quantity")
    @classmethod
    def non_zero(cls, v: int) -> int:
        if v == 0:
            raise ValueError("adjustment quantity must not be zero")
        return v

class StockSnapshotRow(APIModel):
    product_id: int
    product_name: str
    current_stock: int
    warnings: Optional[List[str]] = None

class ProductStockResponse(APIModel):
    product_id: int
    current_stock: int

class LedgerEntryResponse(APIModel):
    id: int
    product_id: int
    order_id: Optional[int] = None
    quantity: int
    type: LedgerEntryType
    created_at: datetime

class SuccessResponse(APIModel):
    success: bool = True
