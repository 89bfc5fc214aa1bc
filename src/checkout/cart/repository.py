"""Repository for the ShoppingCart aggregate."""

from checkout.cart.cart import ShoppingCart
from checkout.domain import checkout


@checkout.repository(part_of=ShoppingCart)
class ShoppingCartRepository:
    def for_customer(self, customer_id) -> ShoppingCart | None:
        """The customer's cart, or None if they never added anything."""
        carts = self._dao.query.filter(customer_id=str(customer_id)).all().items
        return carts[0] if carts else None
