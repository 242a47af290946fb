"""
Order schemas.
Items are always sent as a full set; an edit replaces every item.
"""
from pydantic import Field
from typing import Optional, List
from datetime import datetime
from decimal import Decimal

from app.models import OrderStatus
from app.schemas.base import APIModel
from app.schemas.product import ProductResponse, CustomerResponse

class OrderItemCreate(APIModel):
    product_id: int
    quantity: int = Field(..., gt=0)

class OrderCreate(APIModel):
    customer_id: Optional[int] = None
    delivery_fee: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    items: List[OrderItemCreate] = Field(..., min_length=1)

class OrderUpdate(APIModel):
    items: Optional[List[OrderItemCreate]] = Field(None, min_length=1)
    delivery_fee: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    status: Optional[OrderStatus] = None

class OrderItemResponse(APIModel):
    id: int
    order_id: int
    product_id: int
    quantity: int
    unit_price: Decimal
    product: Optional[ProductResponse] = None

class OrderResponse(APIModel):
    id: int
    customer_id: Optional[int] = None
    customer: Optional[CustomerResponse] = None
    status: OrderStatus
    total_price: Decimal
    delivery_fee: Decimal
    created_at: datetime
    updated_at: datetime
    items: List[OrderItemResponse] = []

class OrderWithWarnings(OrderResponse):
    warnings: Optional[List[str]] = None
