"""Value objects shared by the order aggregates and the assembler."""

import json

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Float, String, Text, ValueObject

from checkout.domain import checkout


@checkout.value_object
class Address:
    """A delivery or billing address captured at checkout time."""

    first_name = String(max_length=100)
    last_name = String(max_length=100)
    address_line1 = String(max_length=255)
    address_line2 = String(max_length=255)
    city = String(max_length=100)
    region = String(max_length=100, default="Cebu")
    postal_code = String(max_length=20)
    country = String(max_length=100, default="Philippines")
    phone = String(max_length=20)
    email = String(max_length=254)


@checkout.value_object
class OrderPricing:
    """Amounts locked in when the order is placed."""

    subtotal = Float(default=0.0)
    shipping = Float(default=0.0)
    tax = Float(default=0.0)
    total = Float(default=0.0)

    @invariant.post
    def total_is_sum_of_parts(self):
        if round(self.subtotal + self.shipping + self.tax, 2) != round(self.total, 2):
            raise ValidationError({"total": ["Total must equal subtotal + shipping + tax"]})


@checkout.value_object
class OrderSnapshot:
    """The computed, not-yet-persisted form of an order.

    ``items`` is a JSON array of line dicts carrying product_id, variant_key,
    name, image, unit_price, quantity and, when present, size and color.
    """

    order_number = String(required=True, max_length=50)
    items = Text(required=True)
    subtotal = Float(default=0.0)
    shipping = Float(default=0.0)
    tax = Float(default=0.0)
    total = Float(default=0.0)
    shipping_method = String(max_length=50)
    delivery_address = ValueObject(Address)
    billing_address = ValueObject(Address)
    payment_method = String(max_length=50)
    payment_status = String(max_length=50)

    @invariant.post
    def subtotal_matches_items(self):
        lines = json.loads(self.items) if self.items else []
        expected = round(sum(line["unit_price"] * line["quantity"] for line in lines), 2)
        if expected != round(self.subtotal, 2):
            raise ValidationError({"subtotal": ["Subtotal must equal the sum of line totals"]})

    @invariant.post
    def total_matches_parts(self):
        if round(self.subtotal + self.shipping + self.tax, 2) != round(self.total, 2):
            raise ValidationError({"total": ["Total must equal subtotal + shipping + tax"]})

    @property
    def lines(self):
        return json.loads(self.items) if self.items else []

    @property
    def item_count(self):
        return sum(line["quantity"] for line in self.lines)

    @property
    def pricing(self):
        return OrderPricing(
            subtotal=self.subtotal,
            shipping=self.shipping,
            tax=self.tax,
            total=self.total,
        )
