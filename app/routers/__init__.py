"""
Routers for Stockroom Orders
"""

from .auth import router as auth_router
from .customers import router as customers_router
from .orders import router as orders_router
from .products import router as products_router
from .stock import router as stock_router

__all__ = ["auth_router", "customers_router", "orders_router", "products_router", "stock_router"]
