"""Fulfillment orders indexed by every product they contain.

A fulfillment order is filed under its anchor product only. This projection
keeps one row per (order, product) so fulfillment views can list the orders
that include any given product.
"""

import json
from collections import Counter

from protean.core.projector import on
from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from checkout.domain import checkout
from checkout.order.events import OrderPlaced, OrderStatusChanged
from checkout.order.fulfillment_order import FulfillmentOrder


@checkout.projection
class FulfillmentOrderLine:
    line_id = String(identifier=True, required=True, max_length=100)
    fulfillment_order_id = Identifier(required=True)
    order_number = String(required=True, max_length=50)
    product_id = Identifier(required=True)
    quantity = Integer(default=0)
    line_total = Float(default=0.0)
    is_anchor = Boolean(default=False)
    status = String(max_length=20)
    placed_at = DateTime()
    updated_at = DateTime()


def line_id_for(fulfillment_order_id, product_id):
    return f"{fulfillment_order_id}:{product_id}"


def orders_for_product(product_id):
    return (
        current_domain.repository_for(FulfillmentOrderLine)
        ._dao.query.filter(product_id=str(product_id))
        .order_by("-placed_at")
        .all()
        .items
    )


@checkout.projector(projector_for=FulfillmentOrderLine, aggregates=[FulfillmentOrder])
class FulfillmentOrderLineProjector:
    @on(OrderPlaced)
    def on_order_placed(self, event):
        quantities = Counter()
        totals = Counter()
        for line in json.loads(event.items):
            quantities[line["product_id"]] += line["quantity"]
            totals[line["product_id"]] += line["unit_price"] * line["quantity"]

        repo = current_domain.repository_for(FulfillmentOrderLine)
        for product_id, quantity in quantities.items():
            repo.add(
                FulfillmentOrderLine(
                    line_id=line_id_for(event.fulfillment_order_id, product_id),
                    fulfillment_order_id=event.fulfillment_order_id,
                    order_number=event.order_number,
                    product_id=product_id,
                    quantity=quantity,
                    line_total=round(totals[product_id], 2),
                    is_anchor=str(product_id) == str(event.anchor_product_id),
                    status=event.status,
                    placed_at=event.placed_at,
                    updated_at=event.placed_at,
                )
            )

    @on(OrderStatusChanged)
    def on_order_status_changed(self, event):
        repo = current_domain.repository_for(FulfillmentOrderLine)
        lines = repo._dao.query.filter(fulfillment_order_id=str(event.fulfillment_order_id)).all().items
        for line in lines:
            line.status = event.new_status
            line.updated_at = event.changed_at
            repo.add(line)
