"""Cart item management: commands and handler.

Carts are created on the first add. When a product has an inventory record
and the line carries a size, quantities above that size's current stock are
refused with ``StockExceeded``. This is an availability hint only; stock is
not reserved and can still be gone by the time the order is placed.
"""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from checkout.cart.cart import ShoppingCart, variant_key_for
from checkout.domain import checkout
from checkout.exceptions import StockExceeded
from checkout.inventory.record import InventoryRecord


@checkout.command(part_of="ShoppingCart")
class AddToCart:
    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    unit_price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)
    size = String(max_length=20)
    color = String(max_length=50)
    image = String(max_length=1024)


@checkout.command(part_of="ShoppingCart")
class UpdateCartQuantity:
    customer_id = Identifier(required=True)
    variant_key = String(required=True, max_length=255)
    quantity = Integer(required=True, min_value=1)


@checkout.command(part_of="ShoppingCart")
class RemoveFromCart:
    customer_id = Identifier(required=True)
    variant_key = String(required=True, max_length=255)


def check_availability(product_id, size, quantity):
    """Raise ``StockExceeded`` when ``quantity`` is more than the size has in stock."""
    if not size:
        return
    record = current_domain.repository_for(InventoryRecord).for_product(product_id)
    if record is None:
        return
    available = record.available(size)
    if quantity > available:
        raise StockExceeded({"quantity": [f"Only {available} left in size {size}"]})


def _cart_for(customer_id):
    cart = current_domain.repository_for(ShoppingCart).for_customer(customer_id)
    if cart is None:
        raise ValidationError({"customer_id": ["Cart is empty"]})
    return cart


@checkout.command_handler(part_of=ShoppingCart)
class ManageCartItemsHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.for_customer(command.customer_id) or ShoppingCart.create(command.customer_id)

        existing = cart.find_item(variant_key_for(command.product_id, command.size))
        in_cart = existing.quantity if existing else 0
        check_availability(command.product_id, command.size, in_cart + command.quantity)

        variant_key = cart.add_item(
            product_id=command.product_id,
            name=command.name,
            unit_price=command.unit_price,
            quantity=command.quantity,
            size=command.size,
            color=command.color,
            image=command.image,
        )
        repo.add(cart)
        return variant_key

    @handle(UpdateCartQuantity)
    def update_cart_quantity(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = _cart_for(command.customer_id)

        item = cart.find_item(command.variant_key)
        if item is not None:
            check_availability(item.product_id, item.size, command.quantity)

        cart.update_item_quantity(command.variant_key, command.quantity)
        repo.add(cart)

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = _cart_for(command.customer_id)
        cart.remove_item(command.variant_key)
        repo.add(cart)
