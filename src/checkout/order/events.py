"""Domain events for the FulfillmentOrder and CustomerOrder aggregates."""

from protean.fields import DateTime, Float, Identifier, Integer, String, Text

from checkout.domain import checkout


@checkout.event(part_of="FulfillmentOrder")
class OrderPlaced:
    """Both copies of an order were written in one transaction."""

    __version__ = 1

    fulfillment_order_id = Identifier(required=True)
    customer_order_id = Identifier(required=True)
    order_number = String(required=True)
    anchor_product_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    items = Text(required=True)  # JSON array of order lines
    total = Float(required=True)
    status = String(required=True)
    placed_at = DateTime(required=True)


@checkout.event(part_of="FulfillmentOrder")
class OrderStatusChanged:
    __version__ = 1

    fulfillment_order_id = Identifier(required=True)
    customer_order_id = Identifier(required=True)
    order_number = String(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    changed_by = String()
    changed_at = DateTime(required=True)
    sequence = Integer(required=True)


@checkout.event(part_of="CustomerOrder")
class OrderCancelled:
    __version__ = 1

    customer_order_id = Identifier(required=True)
    fulfillment_order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    cancelled_at = DateTime(required=True)


@checkout.event(part_of="CustomerOrder")
class OrderReceived:
    __version__ = 1

    customer_order_id = Identifier(required=True)
    fulfillment_order_id = Identifier(required=True)
    received_at = DateTime(required=True)


@checkout.event(part_of="CustomerOrder")
class OrderRated:
    """The customer rated a received order. Applies to every product in it."""

    __version__ = 1

    customer_order_id = Identifier(required=True)
    fulfillment_order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    rating = Integer(required=True)
    feedback = Text()
    rated_at = DateTime(required=True)


@checkout.event(part_of="CustomerOrder")
class ReturnRequested:
    __version__ = 1

    customer_order_id = Identifier(required=True)
    fulfillment_order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    reason = Text(required=True)
    requested_at = DateTime(required=True)


@checkout.event(part_of="CustomerOrder")
class OrderCopyRepaired:
    """The customer copy had drifted from the fulfillment copy and was overwritten."""

    __version__ = 1

    customer_order_id = Identifier(required=True)
    fulfillment_order_id = Identifier(required=True)
    previous_status = String()
    previous_sequence = Integer()
    status = String(required=True)
    sequence = Integer(required=True)
