"""Fulfillment Order aggregate: the operator-facing copy of a placed order.

Filed under an anchor product (the first line's product) for compatibility
with per-product fulfillment views, but stored as a top-level record. The
``FulfillmentOrderLine`` projection indexes it by every product it contains.

It owns the status history. The customer copy mirrors ``status``,
``delivered_at`` and ``sequence`` from here after every transition, so the
two copies agree whenever their sequences match.
"""

import json
from datetime import UTC, datetime

from protean.fields import (
    Boolean,
    DateTime,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from checkout.domain import checkout
from checkout.order.events import OrderPlaced, OrderStatusChanged
from checkout.order.status import PRE_DELIVERY_STATUSES, OrderStatus, assert_operator_can_set
from checkout.order.value_objects import Address, OrderPricing


@checkout.entity(part_of="FulfillmentOrder")
class StatusEntry:
    status = String(required=True, choices=OrderStatus)
    changed_by = String(max_length=255)
    changed_at = DateTime(required=True)


@checkout.aggregate
class FulfillmentOrder:
    order_number = String(required=True, max_length=50, unique=True)
    anchor_product_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    customer_email = String(max_length=254)
    customer_order_id = Identifier(required=True)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    items = Text(required=True)  # JSON array of order lines
    pricing = ValueObject(OrderPricing)
    shipping_method = String(max_length=50)
    shipping_address = ValueObject(Address)
    billing_address = ValueObject(Address)
    payment_method = String(max_length=50)
    payment_status = String(max_length=50)
    status_history = HasMany(StatusEntry)
    delivered_at = DateTime()
    sequence = Integer(default=0)
    inventory_reconciled = Boolean(default=False)
    placed_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def place(cls, order_id, snapshot, customer_id, customer_email, customer_order_id):
        """Build the fulfillment copy of a snapshot. Nothing is persisted here."""
        lines = snapshot.lines
        now = datetime.now(UTC)

        order = cls(
            id=order_id,
            order_number=snapshot.order_number,
            anchor_product_id=lines[0]["product_id"],
            customer_id=customer_id,
            customer_email=customer_email,
            customer_order_id=customer_order_id,
            status=OrderStatus.PENDING.value,
            items=snapshot.items,
            pricing=snapshot.pricing,
            shipping_method=snapshot.shipping_method,
            shipping_address=snapshot.delivery_address,
            billing_address=snapshot.billing_address,
            payment_method=snapshot.payment_method,
            payment_status=snapshot.payment_status,
            status_history=[
                StatusEntry(
                    status=OrderStatus.PENDING.value,
                    changed_by=str(customer_id),
                    changed_at=now,
                )
            ],
            sequence=0,
            inventory_reconciled=False,
            placed_at=now,
            updated_at=now,
        )
        order.raise_(
            OrderPlaced(
                fulfillment_order_id=str(order.id),
                customer_order_id=str(customer_order_id),
                order_number=order.order_number,
                anchor_product_id=str(order.anchor_product_id),
                customer_id=str(customer_id),
                items=order.items,
                total=snapshot.total,
                status=order.status,
                placed_at=now,
            )
        )
        return order

    @property
    def lines(self):
        return json.loads(self.items) if self.items else []

    @property
    def product_ids(self):
        seen = []
        for line in self.lines:
            if line["product_id"] not in seen:
                seen.append(line["product_id"])
        return seen

    def transition_to(self, target, changed_by=None):
        """Record a status change. Callers are responsible for guarding it."""
        target = OrderStatus(target)
        previous = self.status
        now = datetime.now(UTC)

        self.status = target.value
        self.add_status_history(StatusEntry(status=target.value, changed_by=changed_by, changed_at=now))
        if target == OrderStatus.DELIVERED:
            self.delivered_at = now
        elif target in PRE_DELIVERY_STATUSES:
            self.delivered_at = None
        self.sequence = (self.sequence or 0) + 1
        self.updated_at = now

        self.raise_(
            OrderStatusChanged(
                fulfillment_order_id=str(self.id),
                customer_order_id=str(self.customer_order_id),
                order_number=self.order_number,
                previous_status=previous,
                new_status=target.value,
                changed_by=changed_by,
                changed_at=now,
                sequence=self.sequence,
            )
        )

    def advance_status(self, target, changed_by=None):
        """Operator-driven change between pending, processing, shipped and delivered."""
        assert_operator_can_set(self.status, target)
        self.transition_to(target, changed_by=changed_by)

    def mark_inventory_reconciled(self):
        self.inventory_reconciled = True
        self.updated_at = datetime.now(UTC)
