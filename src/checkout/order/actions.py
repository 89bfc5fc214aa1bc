"""Customer actions on their own order: cancel, confirm receipt, rate, return.

Each handler loads both copies, lets the customer copy check its guard,
records the transition on the fulfillment copy and mirrors it back. Ratings
and returns also write their per-product records in the same unit of work.
"""

import structlog
from protean import handle
from protean.fields import Identifier, Integer, Text
from protean.utils.globals import current_domain

from checkout.domain import checkout
from checkout.order.customer_order import CustomerOrder
from checkout.order.fulfillment_order import FulfillmentOrder
from checkout.order.status import OrderStatus
from checkout.reviews.recorder import record_ratings, record_returns

logger = structlog.get_logger(__name__)


@checkout.command(part_of="CustomerOrder")
class CancelOrder:
    customer_order_id = Identifier(required=True)
    customer_id = Identifier(required=True)


@checkout.command(part_of="CustomerOrder")
class ConfirmReceipt:
    customer_order_id = Identifier(required=True)
    customer_id = Identifier(required=True)


@checkout.command(part_of="CustomerOrder")
class RateOrder:
    customer_order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    rating = Integer(required=True, min_value=1, max_value=5)
    feedback = Text()


@checkout.command(part_of="CustomerOrder")
class RequestReturn:
    customer_order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    reason = Text(required=True)


def _load(customer_order_id, customer_id):
    """Both copies, with the customer copy brought in step with the fulfillment copy.

    Guards run against the customer copy, so a copy that drifted is repaired
    first and every check sees the status the fulfillment copy holds.
    """
    customer_order = current_domain.repository_for(CustomerOrder).get(customer_order_id)
    customer_order.assert_owned_by(customer_id)
    fulfillment_order = current_domain.repository_for(FulfillmentOrder).get(customer_order.fulfillment_order_id)
    if customer_order.diverges_from(fulfillment_order):
        logger.warning(
            "Customer order out of step with fulfillment order",
            order_number=customer_order.order_number,
            customer_status=customer_order.status,
            fulfillment_status=fulfillment_order.status,
        )
        customer_order.repair_from(fulfillment_order)
    return customer_order, fulfillment_order


def _save(customer_order, fulfillment_order):
    current_domain.repository_for(FulfillmentOrder).add(fulfillment_order)
    current_domain.repository_for(CustomerOrder).add(customer_order)


@checkout.command_handler(part_of=CustomerOrder)
class CustomerOrderActionsHandler:
    @handle(CancelOrder)
    def cancel_order(self, command):
        customer_order, fulfillment_order = _load(command.customer_order_id, command.customer_id)

        customer_order.cancel()
        fulfillment_order.transition_to(OrderStatus.CANCELLED, changed_by=str(command.customer_id))
        customer_order.mirror(fulfillment_order)
        _save(customer_order, fulfillment_order)

        logger.info("Order cancelled by customer", order_number=customer_order.order_number)

    @handle(ConfirmReceipt)
    def confirm_receipt(self, command):
        customer_order, _ = _load(command.customer_order_id, command.customer_id)

        customer_order.confirm_receipt()
        current_domain.repository_for(CustomerOrder).add(customer_order)

    @handle(RateOrder)
    def rate_order(self, command):
        customer_order, fulfillment_order = _load(command.customer_order_id, command.customer_id)

        customer_order.rate(command.rating, command.feedback)
        fulfillment_order.transition_to(OrderStatus.COMPLETED, changed_by=str(command.customer_id))
        customer_order.mirror(fulfillment_order)
        record_ratings(customer_order, command.rating, command.feedback)
        _save(customer_order, fulfillment_order)

        logger.info(
            "Order rated",
            order_number=customer_order.order_number,
            rating=command.rating,
        )

    @handle(RequestReturn)
    def request_return(self, command):
        customer_order, fulfillment_order = _load(command.customer_order_id, command.customer_id)

        customer_order.request_return(command.reason)
        fulfillment_order.transition_to(OrderStatus.COMPLETED, changed_by=str(command.customer_id))
        customer_order.mirror(fulfillment_order)
        record_returns(customer_order, command.reason)
        _save(customer_order, fulfillment_order)

        logger.info("Return requested", order_number=customer_order.order_number)
