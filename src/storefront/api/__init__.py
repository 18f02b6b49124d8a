"""Storefront HTTP API package."""

from storefront.api.errors import register_exception_handlers
from storefront.api.routes import auth_router, cart_router, order_router, product_router, user_router

routers = [auth_router, product_router, cart_router, order_router, user_router]

__all__ = [
    "auth_router",
    "cart_router",
    "order_router",
    "product_router",
    "register_exception_handlers",
    "routers",
    "user_router",
]
