"""
Catalog schemas: products and customers.
"""
from pydantic import Field
from typing import Optional
from datetime import datetime
from decimal import Decimal

from app.schemas.base import APIModel

# Product Schemas
class ProductBase(APIModel):
    name: str = Field(..., min_length=1, max_length=100)
    unit: str = Field(..., min_length=1, max_length=20)
    price: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)

class ProductCreate(ProductBase):
    pass

class ProductUpdate(APIModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    unit: Optional[str] = Field(None, min_length=1, max_length=20)
    price: Optional[Decimal] = Field(None, gt=0, max_digits=10, decimal_places=2)

class ProductResponse(ProductBase):
    id: int
    created_at: datetime
    updated_at: datetime

# Customer Schemas
class CustomerCreate(APIModel):
    name: str = Field(..., min_length=1, max_length=100)
    contact: Optional[str] = Field(None, max_length=100)

class CustomerResponse(CustomerCreate):
    id: int
    created_at: datetime
