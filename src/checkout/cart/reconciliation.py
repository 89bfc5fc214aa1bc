"""Clear placed lines from the customer's cart once the order has committed."""

import json

import structlog
from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from checkout.cart.cart import ShoppingCart
from checkout.domain import checkout

logger = structlog.get_logger(__name__)


@checkout.command(part_of="ShoppingCart")
class RemoveOrderedItems:
    customer_id = Identifier(required=True)
    variant_keys = Text(required=True)  # JSON array
    order_number = String(max_length=50)


@checkout.command_handler(part_of=ShoppingCart)
class CartReconciliationHandler:
    @handle(RemoveOrderedItems)
    def remove_ordered_items(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.for_customer(command.customer_id)
        if cart is None:
            return []

        removed = cart.remove_ordered_items(json.loads(command.variant_keys), order_number=command.order_number)
        if removed:
            repo.add(cart)
        logger.info(
            "Ordered items removed from cart",
            customer_id=str(command.customer_id),
            order_number=command.order_number,
            removed=len(removed),
        )
        return removed
