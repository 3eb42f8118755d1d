"""Marketplace API package."""

from marketplace.api.routes import (
    cart_router,
    catalog_admin_router,
    catalog_router,
    order_admin_router,
    order_router,
    register_marketplace_exception_handlers,
)

__all__ = [
    "catalog_router",
    "catalog_admin_router",
    "cart_router",
    "order_router",
    "order_admin_router",
    "register_marketplace_exception_handlers",
]
