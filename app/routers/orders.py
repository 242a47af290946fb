"""
Orders router.
Stock shortfall never fails a request: it comes back in `warnings`.
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from datetime import date
from typing import List, Optional

from app.database import get_db
from app.models import Order, OrderStatus
from app.security import require_pin
from app.services.orders import OrderService
from app.schemas.order import OrderCreate, OrderUpdate, OrderResponse, OrderWithWarnings

router = APIRouter(prefix="/orders", tags=["orders"], dependencies=[Depends(require_pin)])


def get_order_service(db: Session = Depends(get_db)) -> OrderService:
    return OrderService(db)


def _with_warnings(order: Order, warnings: List[str]) -> OrderWithWarnings:
    response = OrderWithWarnings.model_validate(order)
    response.warnings = warnings or None
    return response


@router.post("", response_model=OrderWithWarnings, status_code=status.HTTP_201_CREATED)
def create_order(payload: OrderCreate, service: OrderService = Depends(get_order_service)):
    order, warnings = service.create(payload)
    return _with_warnings(order, warnings)

@router.get("", response_model=List[OrderResponse])
def list_orders(
    status_filter: Optional[OrderStatus] = Query(None, alias="status"),
    day: Optional[date] = Query(None, alias="date"),
    service: OrderService = Depends(get_order_service),
):
    return service.find_all(status_filter, day)

@router.get("/completed", response_model=List[OrderResponse])
def list_completed_orders(
    day: Optional[date] = Query(None, alias="date"),
    service: OrderService = Depends(get_order_service),
):
    """Completed orders of one day (today by default)"""
    return service.find_completed(day)

@router.get("/{order_id}", response_model=OrderResponse)
def get_order(order_id: int, service: OrderService = Depends(get_order_service)):
    return service.find_one(order_id)

@router.patch("/{order_id}", response_model=OrderWithWarnings)
def update_order(
    order_id: int,
    payload: OrderUpdate,
    service: OrderService = Depends(get_order_service),
):
    """
    Edit a non-terminal order.
    `items` replaces the whole item set; `status` is a bare transition without stock effects.
    """
    order, warnings = service.update(order_id, payload)
    return _with_warnings(order, warnings)

@router.post("/{order_id}/complete", response_model=OrderResponse)
def complete_order(order_id: int, service: OrderService = Depends(get_order_service)):
    return service.complete(order_id)

@router.post("/{order_id}/cancel", response_model=OrderResponse)
def cancel_order(order_id: int, service: OrderService = Depends(get_order_service)):
    return service.cancel(order_id)
