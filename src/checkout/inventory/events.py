"""Domain events for the InventoryRecord aggregate."""

from protean.fields import DateTime, Identifier, Integer, String

from checkout.domain import checkout


@checkout.event(part_of="InventoryRecord")
class InventoryRegistered:
    __version__ = 1

    product_id = Identifier(required=True)
    product_name = String()
    total_stock = Integer(required=True)


@checkout.event(part_of="InventoryRecord")
class SizeRestocked:
    __version__ = 1

    product_id = Identifier(required=True)
    size = String(required=True)
    quantity = Integer(required=True)
    new_stock = Integer(required=True)


@checkout.event(part_of="InventoryRecord")
class StockDecremented:
    """Stock left the shelf for a placed order.

    ``removed`` can be lower than ``requested`` when the size ran out; the
    difference is the oversold quantity.
    """

    __version__ = 1

    product_id = Identifier(required=True)
    order_id = Identifier()
    size = String()
    requested = Integer(required=True)
    removed = Integer(required=True)
    remaining = Integer(required=True)
    decremented_at = DateTime(required=True)
