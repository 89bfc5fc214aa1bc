"""Domain events for the ShoppingCart aggregate."""

from protean.fields import Identifier, Integer, String, Text

from checkout.domain import checkout


@checkout.event(part_of="ShoppingCart")
class CartItemAdded:
    """A product variant was added to the cart, or its line grew."""

    __version__ = 1

    cart_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    variant_key = String(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    line_quantity = Integer(required=True)


@checkout.event(part_of="ShoppingCart")
class CartQuantityUpdated:
    __version__ = 1

    cart_id = Identifier(required=True)
    variant_key = String(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)


@checkout.event(part_of="ShoppingCart")
class CartItemRemoved:
    __version__ = 1

    cart_id = Identifier(required=True)
    variant_key = String(required=True)


@checkout.event(part_of="ShoppingCart")
class OrderedItemsRemoved:
    """Lines that became part of a placed order were cleared from the cart."""

    __version__ = 1

    cart_id = Identifier(required=True)
    order_number = String()
    variant_keys = Text(required=True)  # JSON array
