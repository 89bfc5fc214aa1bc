"""Shopping Cart aggregate, one per customer.

Lines are keyed by a variant key: ``<product_id>-<size>`` when a size was
chosen, the bare product id otherwise. Adding a variant that is already in
the cart grows the existing line, so a key never appears twice.
"""

import json
from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String

from checkout.cart.events import (
    CartItemAdded,
    CartItemRemoved,
    CartQuantityUpdated,
    OrderedItemsRemoved,
)
from checkout.domain import checkout


def variant_key_for(product_id, size=None):
    return f"{product_id}-{size}" if size else str(product_id)


@checkout.entity(part_of="ShoppingCart")
class CartItem:
    variant_key = String(required=True, max_length=255)
    product_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    image = String(max_length=1024)
    unit_price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)
    size = String(max_length=20)
    color = String(max_length=50)
    added_at = DateTime()

    @property
    def line_total(self):
        return self.unit_price * self.quantity

    def to_line(self):
        """Sanitized order line; unset optional attributes are left out."""
        line = {
            "product_id": str(self.product_id),
            "variant_key": self.variant_key,
            "name": self.name,
            "unit_price": self.unit_price,
            "quantity": self.quantity,
        }
        for optional in ("image", "size", "color"):
            value = getattr(self, optional)
            if value:
                line[optional] = value
        return line


@checkout.aggregate
class ShoppingCart:
    customer_id = Identifier(required=True, unique=True)
    items = HasMany(CartItem)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def variant_keys_are_unique(self):
        keys = [item.variant_key for item in self.items]
        if len(keys) != len(set(keys)):
            raise ValidationError({"items": ["A variant can appear only once in the cart"]})

    @classmethod
    def create(cls, customer_id):
        now = datetime.now(UTC)
        return cls(customer_id=customer_id, created_at=now, updated_at=now)

    def find_item(self, variant_key):
        return next((i for i in self.items if i.variant_key == variant_key), None)

    def _get_item(self, variant_key):
        item = self.find_item(variant_key)
        if item is None:
            raise ValidationError({"variant_key": ["Item not found in cart"]})
        return item

    @property
    def subtotal(self):
        return round(sum(item.line_total for item in self.items), 2)

    # -------------------------------------------------------------------
    # Item management
    # -------------------------------------------------------------------
    def add_item(self, product_id, name, unit_price, quantity=1, size=None, color=None, image=None):
        """Add a variant to the cart, merging into its line if already present."""
        variant_key = variant_key_for(product_id, size)
        existing = self.find_item(variant_key)
        now = datetime.now(UTC)

        if existing:
            existing.quantity += quantity
            line_quantity = existing.quantity
        else:
            self.add_items(
                CartItem(
                    variant_key=variant_key,
                    product_id=product_id,
                    name=name,
                    image=image,
                    unit_price=unit_price,
                    quantity=quantity,
                    size=size,
                    color=color,
                    added_at=now,
                )
            )
            line_quantity = quantity

        self.updated_at = now
        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                customer_id=str(self.customer_id),
                variant_key=variant_key,
                product_id=str(product_id),
                quantity=quantity,
                line_quantity=line_quantity,
            )
        )
        return variant_key

    def update_item_quantity(self, variant_key, new_quantity):
        if new_quantity is None or new_quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        item = self._get_item(variant_key)
        previous_quantity = item.quantity
        item.quantity = new_quantity
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartQuantityUpdated(
                cart_id=str(self.id),
                variant_key=variant_key,
                previous_quantity=previous_quantity,
                new_quantity=new_quantity,
            )
        )

    def remove_item(self, variant_key):
        item = self._get_item(variant_key)
        self.remove_items(item)
        self.updated_at = datetime.now(UTC)

        self.raise_(CartItemRemoved(cart_id=str(self.id), variant_key=variant_key))

    def selected_items(self, variant_keys=None):
        """Lines chosen for checkout. ``None`` selects the whole cart."""
        if variant_keys is None:
            return list(self.items)
        wanted = set(variant_keys)
        return [item for item in self.items if item.variant_key in wanted]

    def remove_ordered_items(self, variant_keys, order_number=None):
        """Drop lines that were placed as an order. Keys no longer present are ignored."""
        removed = []
        for key in variant_keys:
            item = self.find_item(key)
            if item is not None:
                self.remove_items(item)
                removed.append(key)

        if removed:
            self.updated_at = datetime.now(UTC)
            self.raise_(
                OrderedItemsRemoved(
                    cart_id=str(self.id),
                    order_number=order_number,
                    variant_keys=json.dumps(removed),
                )
            )
        return removed
