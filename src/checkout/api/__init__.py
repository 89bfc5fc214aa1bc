from checkout.api.errors import register_exception_handlers
from checkout.api.routes import (
    analytics_router,
    cart_router,
    checkout_router,
    fulfillment_router,
    inventory_router,
    order_router,
    rating_router,
)

__all__ = [
    "analytics_router",
    "cart_router",
    "checkout_router",
    "fulfillment_router",
    "inventory_router",
    "order_router",
    "rating_router",
    "register_exception_handlers",
]
