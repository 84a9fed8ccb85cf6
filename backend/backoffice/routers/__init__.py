"""
API routers package.
"""
from backoffice.routers.admin_orders import router as admin_orders_router
from backoffice.routers.dashboard import router as dashboard_router
from backoffice.routers.health import router as health_router
from backoffice.routers.orders import router as orders_router

__all__ = [
    "health_router",
    "orders_router",
    "admin_orders_router",
    "dashboard_router",
]
