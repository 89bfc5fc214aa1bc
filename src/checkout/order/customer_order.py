"""Customer Order aggregate: the customer-facing copy of a placed order.

Carries the customer-only state (receipt confirmation, rating, return) and a
mirror of the fulfillment copy's status, ``delivered_at`` and ``sequence``.
"""

import json
from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Identifier, Integer, String, Text, ValueObject

from checkout.domain import checkout
from checkout.order.events import (
    OrderCancelled,
    OrderCopyRepaired,
    OrderRated,
    OrderReceived,
    ReturnRequested,
)
from checkout.order.status import (
    PRE_DELIVERY_STATUSES,
    OrderStatus,
    assert_can_cancel,
    assert_can_close,
    assert_can_confirm_receipt,
)
from checkout.order.value_objects import Address, OrderPricing


@checkout.aggregate
class CustomerOrder:
    order_number = String(required=True, max_length=50, unique=True)
    customer_id = Identifier(required=True)
    customer_email = String(max_length=254)
    fulfillment_order_id = Identifier(required=True)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    items = Text(required=True)  # JSON array of order lines
    pricing = ValueObject(OrderPricing)
    shipping_method = String(max_length=50)
    shipping_address = ValueObject(Address)
    billing_address = ValueObject(Address)
    payment_method = String(max_length=50)
    payment_status = String(max_length=50)
    delivered_at = DateTime()
    order_received = Boolean(default=False)
    received_at = DateTime()
    action_completed = Boolean(default=False)
    completed_at = DateTime()
    rating = Integer(min_value=1, max_value=5)
    feedback = Text()
    return_reason = Text()
    sequence = Integer(default=0)
    placed_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def place(cls, order_id, snapshot, customer_id, customer_email, fulfillment_order_id):
        now = datetime.now(UTC)
        return cls(
            id=order_id,
            order_number=snapshot.order_number,
            customer_id=customer_id,
            customer_email=customer_email,
            fulfillment_order_id=fulfillment_order_id,
            status=OrderStatus.PENDING.value,
            items=snapshot.items,
            pricing=snapshot.pricing,
            shipping_method=snapshot.shipping_method,
            shipping_address=snapshot.delivery_address,
            billing_address=snapshot.billing_address,
            payment_method=snapshot.payment_method,
            payment_status=snapshot.payment_status,
            order_received=False,
            action_completed=False,
            sequence=0,
            placed_at=now,
            updated_at=now,
        )

    @property
    def lines(self):
        return json.loads(self.items) if self.items else []

    def assert_owned_by(self, customer_id):
        if str(self.customer_id) != str(customer_id):
            raise ValidationError({"customer_id": ["Order belongs to another customer"]})

    def mirror(self, fulfillment_order):
        """Copy the transition-owned fields from the fulfillment copy.

        An order moved back before delivery loses its receipt confirmation.
        """
        self.status = fulfillment_order.status
        self.delivered_at = fulfillment_order.delivered_at
        self.sequence = fulfillment_order.sequence
        if OrderStatus(self.status) in PRE_DELIVERY_STATUSES:
            self.order_received = False
            self.received_at = None
        self.updated_at = datetime.now(UTC)

    def diverges_from(self, fulfillment_order):
        return (
            self.sequence != fulfillment_order.sequence
            or self.status != fulfillment_order.status
            or self.delivered_at != fulfillment_order.delivered_at
        )

    def repair_from(self, fulfillment_order):
        previous_status, previous_sequence = self.status, self.sequence
        self.mirror(fulfillment_order)
        self.raise_(
            OrderCopyRepaired(
                customer_order_id=str(self.id),
                fulfillment_order_id=str(fulfillment_order.id),
                previous_status=previous_status,
                previous_sequence=previous_sequence,
                status=self.status,
                sequence=self.sequence,
            )
        )

    # -------------------------------------------------------------------
    # Customer actions. Each only checks and records customer-side state;
    # the status itself arrives through ``mirror``.
    # -------------------------------------------------------------------
    def cancel(self):
        assert_can_cancel(self.status)
        self.raise_(
            OrderCancelled(
                customer_order_id=str(self.id),
                fulfillment_order_id=str(self.fulfillment_order_id),
                customer_id=str(self.customer_id),
                cancelled_at=datetime.now(UTC),
            )
        )

    def confirm_receipt(self):
        assert_can_confirm_receipt(self.status, self.order_received)
        now = datetime.now(UTC)
        self.order_received = True
        self.received_at = now
        self.updated_at = now
        self.raise_(
            OrderReceived(
                customer_order_id=str(self.id),
                fulfillment_order_id=str(self.fulfillment_order_id),
                received_at=now,
            )
        )

    def rate(self, rating, feedback=None):
        assert_can_close(self.status, self.order_received, self.action_completed)
        if rating is None or not 1 <= rating <= 5:
            raise ValidationError({"rating": ["Rating must be between 1 and 5"]})

        now = datetime.now(UTC)
        self.rating = rating
        self.feedback = feedback
        self.action_completed = True
        self.completed_at = now
        self.raise_(
            OrderRated(
                customer_order_id=str(self.id),
                fulfillment_order_id=str(self.fulfillment_order_id),
                customer_id=str(self.customer_id),
                rating=rating,
                feedback=feedback,
                rated_at=now,
            )
        )

    def request_return(self, reason):
        assert_can_close(self.status, self.order_received, self.action_completed)
        if not reason or not reason.strip():
            raise ValidationError({"reason": ["A reason is required to return an order"]})

        now = datetime.now(UTC)
        self.return_reason = reason
        self.action_completed = True
        self.completed_at = now
        self.raise_(
            ReturnRequested(
                customer_order_id=str(self.id),
                fulfillment_order_id=str(self.fulfillment_order_id),
                customer_id=str(self.customer_id),
                reason=reason,
                requested_at=now,
            )
        )
