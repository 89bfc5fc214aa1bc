"""Repositories for the two order copies."""

from checkout.domain import checkout
from checkout.order.customer_order import CustomerOrder
from checkout.order.fulfillment_order import FulfillmentOrder


@checkout.repository(part_of=FulfillmentOrder)
class FulfillmentOrderRepository:
    def by_order_number(self, order_number) -> FulfillmentOrder | None:
        orders = self._dao.query.filter(order_number=order_number).all().items
        return orders[0] if orders else None

    def with_status(self, status) -> list[FulfillmentOrder]:
        return self._dao.query.filter(status=status).order_by("-placed_at").all().items

    def latest(self, limit=50) -> list[FulfillmentOrder]:
        """Most recently placed orders first, for order-management views."""
        return self._dao.query.order_by("-placed_at").limit(limit).all().items


@checkout.repository(part_of=CustomerOrder)
class CustomerOrderRepository:
    def for_customer(self, customer_id) -> list[CustomerOrder]:
        return self._dao.query.filter(customer_id=str(customer_id)).order_by("-placed_at").all().items

    def for_fulfillment_order(self, fulfillment_order_id) -> CustomerOrder | None:
        orders = self._dao.query.filter(fulfillment_order_id=str(fulfillment_order_id)).all().items
        return orders[0] if orders else None
