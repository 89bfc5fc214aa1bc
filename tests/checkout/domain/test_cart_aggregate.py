"""Tests for the ShoppingCart aggregate: variant keys, merging, quantities."""

import pytest
from checkout.cart.cart import ShoppingCart, variant_key_for
from checkout.cart.events import CartItemAdded, OrderedItemsRemoved
from protean.exceptions import ValidationError


def _cart():
    return ShoppingCart.create(customer_id="cust-001")


class TestVariantKey:
    def test_includes_size_when_present(self):
        assert variant_key_for("P1", "M") == "P1-M"

    def test_is_product_id_without_size(self):
        assert variant_key_for("P1") == "P1"
        assert variant_key_for("P1", "") == "P1"


class TestAddItem:
    def test_add_new_line(self):
        cart = _cart()
        key = cart.add_item("P1", "Linen Shirt", 500.0, quantity=2, size="M", color="White")

        assert key == "P1-M"
        assert len(cart.items) == 1
        assert cart.items[0].quantity == 2
        assert cart.items[0].color == "White"

    def test_same_variant_merges_quantities(self):
        cart = _cart()
        cart.add_item("P1", "Linen Shirt", 500.0, quantity=1, size="M")
        cart.add_item("P1", "Linen Shirt", 500.0, quantity=3, size="M")

        assert len(cart.items) == 1
        assert cart.find_item("P1-M").quantity == 4

    def test_different_sizes_are_separate_lines(self):
        cart = _cart()
        cart.add_item("P1", "Linen Shirt", 500.0, size="M")
        cart.add_item("P1", "Linen Shirt", 500.0, size="L")

        assert {i.variant_key for i in cart.items} == {"P1-M", "P1-L"}

    def test_raises_event_with_line_quantity(self):
        cart = _cart()
        cart.add_item("P1", "Linen Shirt", 500.0, quantity=1, size="M")
        cart.add_item("P1", "Linen Shirt", 500.0, quantity=2, size="M")

        events = [e for e in cart._events if isinstance(e, CartItemAdded)]
        assert events[-1].quantity == 2
        assert events[-1].line_quantity == 3

    def test_subtotal(self):
        cart = _cart()
        cart.add_item("P1", "Linen Shirt", 500.0, quantity=2, size="M")
        cart.add_item("P2", "Tote", 249.5)
        assert cart.subtotal == 1249.5


class TestUpdateAndRemove:
    def test_update_quantity(self):
        cart = _cart()
        cart.add_item("P1", "Linen Shirt", 500.0, size="M")
        cart.update_item_quantity("P1-M", 5)
        assert cart.find_item("P1-M").quantity == 5

    def test_update_below_one_rejected(self):
        cart = _cart()
        cart.add_item("P1", "Linen Shirt", 500.0, size="M")
        with pytest.raises(ValidationError) as exc:
            cart.update_item_quantity("P1-M", 0)
        assert "quantity" in exc.value.messages

    def test_update_unknown_line_rejected(self):
        with pytest.raises(ValidationError) as exc:
            _cart().update_item_quantity("nope", 2)
        assert "variant_key" in exc.value.messages

    def test_remove_item(self):
        cart = _cart()
        cart.add_item("P1", "Linen Shirt", 500.0, size="M")
        cart.remove_item("P1-M")
        assert len(cart.items) == 0


class TestSelectionAndReconciliation:
    def test_selected_items_all_by_default(self):
        cart = _cart()
        cart.add_item("P1", "Linen Shirt", 500.0, size="M")
        cart.add_item("P2", "Tote", 250.0)
        assert len(cart.selected_items()) == 2

    def test_selected_items_by_key(self):
        cart = _cart()
        cart.add_item("P1", "Linen Shirt", 500.0, size="M")
        cart.add_item("P2", "Tote", 250.0)
        assert [i.variant_key for i in cart.selected_items(["P2"])] == ["P2"]

    def test_remove_ordered_items_ignores_missing_keys(self):
        cart = _cart()
        cart.add_item("P1", "Linen Shirt", 500.0, size="M")
        cart.add_item("P2", "Tote", 250.0)

        removed = cart.remove_ordered_items(["P1-M", "gone"], order_number="ORD-1")

        assert removed == ["P1-M"]
        assert [i.variant_key for i in cart.items] == ["P2"]
        assert any(isinstance(e, OrderedItemsRemoved) for e in cart._events)

    def test_remove_ordered_items_no_match_raises_no_event(self):
        cart = _cart()
        cart._events.clear()
        assert cart.remove_ordered_items(["gone"]) == []
        assert not cart._events

    def test_to_line_drops_unset_optionals(self):
        cart = _cart()
        cart.add_item("P2", "Tote", 250.0)
        line = cart.items[0].to_line()
        assert line == {
            "product_id": "P2",
            "variant_key": "P2",
            "name": "Tote",
            "unit_price": 250.0,
            "quantity": 1,
        }
