"""Application tests for PlaceOrder: cross references and all-or-nothing writes."""

from unittest.mock import patch

import pytest
from checkout.cart.cart import ShoppingCart
from checkout.exceptions import InvalidOrder, TransactionFailed
from checkout.order.assembler import assemble_order
from checkout.order.checkout import place_order
from checkout.order.customer_order import CustomerOrder
from checkout.order.fulfillment_order import FulfillmentOrder
from checkout.order.placement import PlaceOrder
from checkout.order.repository import CustomerOrderRepository
from checkout.order.value_objects import OrderSnapshot
from protean import current_domain


def _snapshot(delivery, lines=(("P1", "M", 500.0, 2),)):
    cart = ShoppingCart.create(customer_id="cust-p")
    for product_id, size, price, quantity in lines:
        cart.add_item(product_id, f"Product {product_id}", price, quantity=quantity, size=size)
    return assemble_order(cart.items, delivery)


def _fulfillment_orders(order_number):
    return current_domain.repository_for(FulfillmentOrder)._dao.query.filter(order_number=order_number).all().items


def _customer_orders(order_number):
    return current_domain.repository_for(CustomerOrder)._dao.query.filter(order_number=order_number).all().items


class TestPlaceOrder:
    def test_both_copies_exist_and_reference_each_other(self, delivery):
        snapshot = _snapshot(delivery)
        placed = place_order(snapshot, "cust-p1", "maria@example.com")

        fulfillment = current_domain.repository_for(FulfillmentOrder).get(placed["fulfillment_order_id"])
        customer = current_domain.repository_for(CustomerOrder).get(placed["customer_order_id"])

        assert fulfillment.customer_order_id == customer.id
        assert customer.fulfillment_order_id == fulfillment.id
        assert fulfillment.order_number == customer.order_number == snapshot.order_number

    def test_copies_carry_the_snapshot(self, delivery):
        snapshot = _snapshot(delivery, lines=(("P1", "M", 500.0, 2), ("P2", None, 120.0, 1)))
        placed = place_order(snapshot, "cust-p2")

        fulfillment = current_domain.repository_for(FulfillmentOrder).get(placed["fulfillment_order_id"])
        assert fulfillment.anchor_product_id == "P1"
        assert fulfillment.pricing.total == 1120.0
        assert fulfillment.lines == snapshot.lines
        assert fulfillment.shipping_address.city == "Cebu City"
        assert fulfillment.status == "pending"
        assert fulfillment.inventory_reconciled is False

    def test_returns_ids_from_the_command(self, delivery):
        snapshot = _snapshot(delivery)
        placed = current_domain.process(PlaceOrder(customer_id="cust-p3", snapshot=snapshot), asynchronous=False)
        assert set(placed) == {"fulfillment_order_id", "customer_order_id", "order_number"}

    def test_empty_snapshot_fails_fast(self):
        snapshot = OrderSnapshot(order_number="ORD-empty", items="[]", subtotal=0.0, total=0.0)
        with pytest.raises(InvalidOrder) as exc:
            place_order(snapshot, "cust-p4")
        assert "items" in exc.value.messages
        assert _fulfillment_orders("ORD-empty") == []


class TestPlacementAtomicity:
    def test_failure_between_writes_leaves_nothing(self, delivery):
        snapshot = _snapshot(delivery)

        with patch.object(CustomerOrderRepository, "add", side_effect=RuntimeError("connection reset")):
            with pytest.raises(TransactionFailed) as exc:
                place_order(snapshot, "cust-p5")

        assert isinstance(exc.value.__cause__, RuntimeError)
        assert _fulfillment_orders(snapshot.order_number) == []
        assert _customer_orders(snapshot.order_number) == []


    def test_taken_order_number_is_a_transaction_failure(self, delivery):
        snapshot = _snapshot(delivery)
        place_order(snapshot, "cust-p6")

        with pytest.raises(TransactionFailed):
            place_order(snapshot, "cust-p7")

        assert len(_fulfillment_orders(snapshot.order_number)) == 1
        assert len(_customer_orders(snapshot.order_number)) == 1
