"""Repair a customer order copy that drifted from its fulfillment copy.

The fulfillment copy owns transitions, so it wins: its status,
``delivered_at`` and ``sequence`` overwrite the customer copy.
"""

import structlog
from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from checkout.domain import checkout
from checkout.order.customer_order import CustomerOrder
from checkout.order.fulfillment_order import FulfillmentOrder

logger = structlog.get_logger(__name__)


@checkout.command(part_of="CustomerOrder")
class ReconcileOrderCopies:
    fulfillment_order_id = Identifier(required=True)


@checkout.command_handler(part_of=CustomerOrder)
class OrderCopyRepairHandler:
    @handle(ReconcileOrderCopies)
    def reconcile_order_copies(self, command):
        fulfillment_order = current_domain.repository_for(FulfillmentOrder).get(command.fulfillment_order_id)
        customer_repo = current_domain.repository_for(CustomerOrder)
        customer_order = customer_repo.get(fulfillment_order.customer_order_id)

        if not customer_order.diverges_from(fulfillment_order):
            return False

        logger.warning(
            "Repairing diverged customer order",
            order_number=fulfillment_order.order_number,
            customer_status=customer_order.status,
            customer_sequence=customer_order.sequence,
            fulfillment_status=fulfillment_order.status,
            fulfillment_sequence=fulfillment_order.sequence,
        )
        customer_order.repair_from(fulfillment_order)
        customer_repo.add(customer_order)
        return True
