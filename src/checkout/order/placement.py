"""PlaceOrder: write the fulfillment copy and the customer copy of an order
in a single unit of work.

Both identities are allocated before anything is written, so each record is
created already pointing at the other. If either write fails the unit of
work rolls back and neither record exists.
"""

from uuid import uuid4

from protean import handle
from protean.fields import Identifier, String, ValueObject
from protean.utils.globals import current_domain

from checkout.domain import checkout
from checkout.exceptions import InvalidOrder
from checkout.order.customer_order import CustomerOrder
from checkout.order.fulfillment_order import FulfillmentOrder
from checkout.order.value_objects import OrderSnapshot


@checkout.command(part_of="FulfillmentOrder")
class PlaceOrder:
    customer_id = Identifier(required=True)
    customer_email = String(max_length=254)
    snapshot = ValueObject(OrderSnapshot, required=True)


@checkout.command_handler(part_of=FulfillmentOrder)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        snapshot = command.snapshot
        if not snapshot.lines:
            raise InvalidOrder({"items": ["Cannot place an order without items"]})

        fulfillment_order_id = str(uuid4())
        customer_order_id = str(uuid4())

        fulfillment_order = FulfillmentOrder.place(
            order_id=fulfillment_order_id,
            snapshot=snapshot,
            customer_id=command.customer_id,
            customer_email=command.customer_email,
            customer_order_id=customer_order_id,
        )
        customer_order = CustomerOrder.place(
            order_id=customer_order_id,
            snapshot=snapshot,
            customer_id=command.customer_id,
            customer_email=command.customer_email,
            fulfillment_order_id=fulfillment_order_id,
        )

        current_domain.repository_for(FulfillmentOrder).add(fulfillment_order)
        current_domain.repository_for(CustomerOrder).add(customer_order)

        return {
            "fulfillment_order_id": fulfillment_order_id,
            "customer_order_id": customer_order_id,
            "order_number": snapshot.order_number,
        }
