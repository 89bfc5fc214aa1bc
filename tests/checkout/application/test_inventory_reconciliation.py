"""Application tests for post-commit inventory reconciliation."""

from unittest.mock import patch

import pytest
from checkout.cart.cart import ShoppingCart
from checkout.inventory.management import RestockSize
from checkout.inventory.reconciliation import ReconcileInventory
from checkout.inventory.record import InventoryRecord
from checkout.inventory.repository import InventoryRecordRepository
from checkout.order.assembler import assemble_order
from checkout.order.checkout import place_order
from checkout.order.fulfillment_order import FulfillmentOrder
from protean import current_domain
from protean.exceptions import ValidationError


def _record(product_id):
    return current_domain.repository_for(InventoryRecord).for_product(product_id)


def _stock(product_id):
    return {s.size: s.stock for s in _record(product_id).sizes}


class TestReconcileInventory:
    def test_checkout_decrements_ordered_size(self, add_to_cart, register_inventory, checkout_cart):
        register_inventory("P-inv-1", S=4, M=5)
        add_to_cart("cust-i1", "P-inv-1", quantity=2, size="M")

        result = checkout_cart("cust-i1")

        assert "inventory" not in result.failed_steps
        assert _stock("P-inv-1") == {"S": 4, "M": 3}
        record = _record("P-inv-1")
        assert record.total_stock == 7
        assert record.purchased_count == 2

        order = current_domain.repository_for(FulfillmentOrder).get(result.fulfillment_order_id)
        assert order.inventory_reconciled is True

    def test_same_product_in_two_sizes(self, add_to_cart, register_inventory, checkout_cart):
        register_inventory("P-inv-2", S=4, M=5)
        add_to_cart("cust-i2", "P-inv-2", quantity=1, size="S")
        add_to_cart("cust-i2", "P-inv-2", quantity=3, size="M")

        checkout_cart("cust-i2")

        assert _stock("P-inv-2") == {"S": 3, "M": 2}
        assert _record("P-inv-2").purchased_count == 4

    def test_second_run_for_same_order_is_refused(self, add_to_cart, register_inventory, checkout_cart):
        register_inventory("P-inv-3", M=5)
        add_to_cart("cust-i3", "P-inv-3", quantity=2, size="M")
        result = checkout_cart("cust-i3")

        again = current_domain.process(
            ReconcileInventory(fulfillment_order_id=result.fulfillment_order_id), asynchronous=False
        )

        assert again == {}
        assert _stock("P-inv-3") == {"M": 3}

    def test_product_without_inventory_is_skipped(self, add_to_cart, register_inventory, checkout_cart):
        register_inventory("P-inv-4", M=5)
        add_to_cart("cust-i4", "P-untracked-4", quantity=1, size="M")
        add_to_cart("cust-i4", "P-inv-4", quantity=1, size="M")

        result = checkout_cart("cust-i4")

        assert result.failed_steps == []
        assert _stock("P-inv-4") == {"M": 4}

    def test_line_without_size_counts_purchase_only(self, add_to_cart, register_inventory, checkout_cart):
        register_inventory("P-inv-5", M=5)
        add_to_cart("cust-i5", "P-inv-5", quantity=2)

        checkout_cart("cust-i5")

        assert _stock("P-inv-5") == {"M": 5}
        assert _record("P-inv-5").purchased_count == 2


class TestOversell:
    def test_two_orders_for_last_unit_both_place_and_stock_clamps(
        self, add_to_cart, register_inventory, checkout_cart
    ):
        register_inventory("P-last", M=1)
        add_to_cart("cust-o1", "P-last", quantity=1, size="M")
        add_to_cart("cust-o2", "P-last", quantity=1, size="M")

        # Both carts passed the availability check before either order landed
        first = checkout_cart("cust-o1")
        second = checkout_cart("cust-o2")

        repo = current_domain.repository_for(FulfillmentOrder)
        assert repo.get(first.fulfillment_order_id) is not None
        assert repo.get(second.fulfillment_order_id) is not None

        record = _record("P-last")
        assert _stock("P-last") == {"M": 0}
        assert record.total_stock == 0
        assert record.purchased_count == 2

    def test_reconciler_reports_oversold_quantity(self, add_to_cart, register_inventory, delivery):
        add_to_cart("cust-o3", "P-last-2", quantity=2, size="M")
        # Stock dropped to 1 after the line went into the cart
        register_inventory("P-last-2", M=1)
        cart = current_domain.repository_for(ShoppingCart).for_customer("cust-o3")
        snapshot = assemble_order(cart.items, delivery)
        placed = place_order(snapshot, "cust-o3")

        oversold = current_domain.process(
            ReconcileInventory(fulfillment_order_id=placed["fulfillment_order_id"]), asynchronous=False
        )

        assert oversold == {"P-last-2-M": 1}
        assert _stock("P-last-2") == {"M": 0}

    def test_interleaved_reconciliations_both_apply(self, add_to_cart, register_inventory, delivery):
        register_inventory("P-race", M=1)
        placed = {}
        for customer_id in ("cust-r1", "cust-r2"):
            add_to_cart(customer_id, "P-race", quantity=1, size="M")
            cart = current_domain.repository_for(ShoppingCart).for_customer(customer_id)
            placed[customer_id] = place_order(assemble_order(cart.items, delivery), customer_id)

        # First order reads the record, then the second order lands its write
        stale = _record("P-race")
        current_domain.process(
            ReconcileInventory(fulfillment_order_id=placed["cust-r2"]["fulfillment_order_id"]), asynchronous=False
        )

        reads = []
        fresh_read = InventoryRecordRepository.for_product

        def first_read_is_stale(repo, product_id):
            reads.append(product_id)
            return stale if len(reads) == 1 else fresh_read(repo, product_id)

        with patch.object(InventoryRecordRepository, "for_product", first_read_is_stale):
            oversold = current_domain.process(
                ReconcileInventory(fulfillment_order_id=placed["cust-r1"]["fulfillment_order_id"]), asynchronous=False
            )

        assert reads == ["P-race", "P-race"]
        assert oversold == {"P-race-M": 1}
        assert _stock("P-race") == {"M": 0}
        assert _record("P-race").purchased_count == 2

        orders = current_domain.repository_for(FulfillmentOrder)
        assert orders.get(placed["cust-r1"]["fulfillment_order_id"]).inventory_reconciled is True
        assert orders.get(placed["cust-r2"]["fulfillment_order_id"]).inventory_reconciled is True


class TestStockEntry:
    def test_restock(self, register_inventory):
        register_inventory("P-rs-1", M=1)
        current_domain.process(RestockSize(product_id="P-rs-1", size="M", quantity=4), asynchronous=False)
        assert _stock("P-rs-1") == {"M": 5}
        assert _record("P-rs-1").total_stock == 5

    def test_restock_unknown_product_rejected(self):
        with pytest.raises(ValidationError):
            current_domain.process(RestockSize(product_id="P-none", size="M", quantity=1), asynchronous=False)

    def test_register_twice_rejected(self, register_inventory):
        register_inventory("P-rs-2", M=1)
        with pytest.raises(ValidationError):
            register_inventory("P-rs-2", M=3)
