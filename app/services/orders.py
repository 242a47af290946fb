"""
Order lifecycle and its stock side effects.

    DRAFT -> PENDING -> READY -> COMPLETED
    DRAFT | PENDING | READY   -> CANCELLED

Every mutating operation is one unit of work: the order row, its items and
all ledger entries it writes are committed together or not at all.

Ledger effects per transition:
- create / item edit: RESERVE each item (an edit first RELEASEs every old item)
- complete:           RELEASE then SALE for each item, plus a Sale record
- cancel:             RELEASE each item
- bare status change: none

Stock shortfall never blocks an operation; it becomes a warning string.
"""
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload
from sqlalchemy.orm.exc import StaleDataError
from contextlib import contextmanager
from datetime import date
from typing import Dict, List, Optional, Tuple
import logging

from app.config import settings
from app.database import unit_of_work
from app.models import Order, OrderItem, OrderStatus, Sale, TERMINAL_STATUSES, utcnow
from app.crud.ledger import crud_ledger
from app.crud.product import crud_product
from app.crud.customer import crud_customer
from app.exceptions import NotFoundError, InvalidStateError, ConflictError
from app.schemas.order import OrderCreate, OrderUpdate, OrderItemCreate
from app.utils.money import to_money, order_total
from app.utils.dates import business_today, day_bounds

logger = logging.getLogger(__name__)

# Natural sequence for bare status updates
NEXT_STATUS: Dict[OrderStatus, OrderStatus] = {
    OrderStatus.DRAFT: OrderStatus.PENDING,
    OrderStatus.PENDING: OrderStatus.READY,
}


class OrderService:
    """Orchestrates catalog lookups, ledger writes and order persistence."""

    def __init__(
        self,
        db: Session,
        *,
        strict_transitions: Optional[bool] = None,
        timezone_name: Optional[str] = None,
    ):
        self.db = db
        if strict_transitions is None:
            strict_transitions = settings.STRICT_STATUS_TRANSITIONS
        self.strict_transitions = strict_transitions
        self.timezone_name = timezone_name or settings.BUSINESS_TIMEZONE

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def find_one(self, order_id: int) -> Order:
        stmt = (
            select(Order)
            .where(Order.id == order_id)
            .options(
                selectinload(Order.items).selectinload(OrderItem.product),
                selectinload(Order.customer),
            )
        )
        order = self.db.execute(stmt).scalar_one_or_none()
        if order is None:
            raise NotFoundError(f"Order {order_id} not found")
        return order

    def find_all(self, status: Optional[OrderStatus] = None, day: Optional[date] = None) -> List[Order]:
        """Newest first, optionally narrowed to one status and one business day."""
        stmt = (
            select(Order)
            .options(
                selectinload(Order.items).selectinload(OrderItem.product),
                selectinload(Order.customer),
            )
            .order_by(Order.created_at.desc(), Order.id.desc())
        )
        if status is not None:
            stmt = stmt.where(Order.status == status)
        if day is not None:
            start, end = day_bounds(day, self.timezone_name)
            stmt = stmt.where(Order.created_at >= start, Order.created_at < end)
        return list(self.db.execute(stmt).scalars().all())

    def find_completed(self, day: Optional[date] = None) -> List[Order]:
        """Completed orders of one day, today when no day is given."""
        return self.find_all(OrderStatus.COMPLETED, day or business_today(self.timezone_name))

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create(self, payload: OrderCreate) -> Tuple[Order, List[str]]:
        with self._transaction():
            if payload.customer_id is not None:
                crud_customer.get_or_raise(self.db, payload.customer_id)

            items, warnings = self._build_items(payload.items)
            order = Order(
                customer_id=payload.customer_id,
                status=OrderStatus.DRAFT,
                delivery_fee=to_money(payload.delivery_fee or 0),
                total_price=order_total(items),
                items=items,
            )
            self.db.add(order)
            self.db.flush()

            self._reserve(order)

        logger.info(
            f"Order {order.id} created: {len(order.items)} items, total {order.total_price}, "
            f"{len(warnings)} warnings"
        )
        return order, warnings

    def update(self, order_id: int, payload: OrderUpdate) -> Tuple[Order, List[str]]:
        warnings: List[str] = []
        with self._transaction(order_id):
            order = self.find_one(order_id)
            if order.is_terminal:
                raise InvalidStateError(
                    f"Order {order_id} is {order.status.value} and can no longer be edited"
                )
            if payload.status is not None:
                self._check_transition(order, payload.status)

            if payload.items is not None:
                warnings = self._replace_items(order, payload.items)

            if payload.delivery_fee is not None:
                order.delivery_fee = to_money(payload.delivery_fee)

            if payload.status is not None and payload.status != order.status:
                logger.info(f"Order {order_id}: {order.status.value} -> {payload.status.value}")
                order.status = payload.status

            order.updated_at = utcnow()
            self.db.flush()

        return order, warnings

    def complete(self, order_id: int) -> Order:
        with self._transaction(order_id):
            order = self.find_one(order_id)
            if order.status == OrderStatus.COMPLETED:
                raise InvalidStateError(f"Order {order_id} is already completed")
            if order.status == OrderStatus.CANCELLED:
                raise InvalidStateError(f"Cancelled order {order_id} cannot be completed")

            # Reservation is converted, not dropped: release then sell each item
            for item in order.items:
                crud_ledger.release(
                    self.db, product_id=item.product_id, quantity=item.quantity, order_id=order.id
                )
                crud_ledger.record_sale(
                    self.db, product_id=item.product_id, quantity=item.quantity, order_id=order.id
                )

            order.sale = Sale(order_id=order.id)
            order.status = OrderStatus.COMPLETED
            order.updated_at = utcnow()
            self.db.flush()

        logger.info(f"Order {order_id} completed, total {order.total_price}")
        return order

    def cancel(self, order_id: int) -> Order:
        with self._transaction(order_id):
            order = self.find_one(order_id)
            if order.status == OrderStatus.COMPLETED:
                raise InvalidStateError(f"Completed order {order_id} cannot be cancelled")
            if order.status == OrderStatus.CANCELLED:
                raise InvalidStateError(f"Order {order_id} is already cancelled")

            self._release(order)

            order.status = OrderStatus.CANCELLED
            order.updated_at = utcnow()
            self.db.flush()

        logger.info(f"Order {order_id} cancelled")
        return order

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @contextmanager
    def _transaction(self, order_id: Optional[int] = None):
        try:
            with unit_of_work(self.db):
                yield
        except StaleDataError as e:
            logger.warning(f"Concurrent modification of order {order_id}: {e}")
            raise ConflictError(
                f"Order {order_id} was modified by another request; reload it and retry"
            ) from e

    def _check_transition(self, order: Order, target: OrderStatus) -> None:
        if target in TERMINAL_STATUSES:
            raise InvalidStateError(
                f"Orders reach {target.value} only through the "
                f"{'complete' if target == OrderStatus.COMPLETED else 'cancel'} operation"
            )
        if target == order.status or not self.strict_transitions:
            return
        if NEXT_STATUS.get(order.status) != target:
            raise InvalidStateError(
                f"Order {order.id} cannot move from {order.status.value} to {target.value}"
            )

    def _build_items(self, requested: List[OrderItemCreate]) -> Tuple[List[OrderItem], List[str]]:
        """
        Snapshot catalog prices into new order items and collect
        negative-stock warnings. Raises NotFoundError for unknown products.
        """
        items: List[OrderItem] = []
        warnings: List[str] = []

        for line in requested:
            product = crud_product.get_or_raise(self.db, line.product_id)

            # Each line is checked on its own against stock before this order reserves
            future_stock = crud_ledger.get_current_stock(self.db, product.id) - line.quantity
            if future_stock < 0:
                message = f'Product "{product.name}" will have negative stock: {future_stock}'
                logger.warning(message)
                warnings.append(message)

            items.append(OrderItem(
                product_id=product.id,
                quantity=line.quantity,
                unit_price=to_money(product.price),
            ))
        return items, warnings

    def _replace_items(self, order: Order, requested: List[OrderItemCreate]) -> List[str]:
        """Release every old item, drop them, then price and reserve the new set."""
        self._release(order)
        order.items.clear()
        self.db.flush()

        items, warnings = self._build_items(requested)
        order.items.extend(items)
        order.total_price = order_total(items)
        self.db.flush()

        self._reserve(order)
        return warnings

    def _reserve(self, order: Order) -> None:
        for item in order.items:
            crud_ledger.reserve(
                self.db, product_id=item.product_id, quantity=item.quantity, order_id=order.id
            )

    def _release(self, order: Order) -> None:
        for item in order.items:
            crud_ledger.release(
                self.db, product_id=item.product_id, quantity=item.quantity, order_id=order.id
            )
