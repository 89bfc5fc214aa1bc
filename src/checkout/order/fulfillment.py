"""Operator status changes on a fulfillment order, mirrored onto the customer copy."""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from checkout.domain import checkout
from checkout.order.customer_order import CustomerOrder
from checkout.order.fulfillment_order import FulfillmentOrder
from checkout.order.status import OrderStatus

logger = structlog.get_logger(__name__)


@checkout.command(part_of="FulfillmentOrder")
class AdvanceOrderStatus:
    fulfillment_order_id = Identifier(required=True)
    status = String(required=True, choices=OrderStatus)
    changed_by = String(max_length=255)


@checkout.command_handler(part_of=FulfillmentOrder)
class FulfillmentStatusHandler:
    @handle(AdvanceOrderStatus)
    def advance_order_status(self, command):
        fulfillment_repo = current_domain.repository_for(FulfillmentOrder)
        customer_repo = current_domain.repository_for(CustomerOrder)

        fulfillment_order = fulfillment_repo.get(command.fulfillment_order_id)
        customer_order = customer_repo.get(fulfillment_order.customer_order_id)

        previous = fulfillment_order.status
        fulfillment_order.advance_status(command.status, changed_by=command.changed_by)
        customer_order.mirror(fulfillment_order)

        fulfillment_repo.add(fulfillment_order)
        customer_repo.add(customer_order)

        logger.info(
            "Order status changed by operator",
            order_number=fulfillment_order.order_number,
            previous_status=previous,
            new_status=fulfillment_order.status,
            changed_by=command.changed_by,
        )
