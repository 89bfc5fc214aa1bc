"""Order Assembler: turns selected cart lines and checkout form input into an
``OrderSnapshot``.

Pure computation. All problems with the input are collected into one field
error map and raised as ``InvalidOrder``; nothing is read from or written to
a repository.
"""

import json
import re

from checkout.exceptions import InvalidOrder
from checkout.order.numbering import order_numbers
from checkout.order.value_objects import Address, OrderSnapshot

SHIPPING_FEES = {
    "standard": 0.0,
    "express": 150.0,
}

TAX_RATE = 0.0

# Payment method -> payment status recorded on the order
PAYMENT_METHODS = {
    "cash-on-delivery": "pending",
    "wallet-demo": "paid",
}

REQUIRED_ADDRESS_FIELDS = (
    "first_name",
    "last_name",
    "address_line1",
    "city",
    "region",
    "postal_code",
    "country",
    "phone",
    "email",
)

ADDRESS_FIELDS = REQUIRED_ADDRESS_FIELDS + ("address_line2",)

ADDRESS_DEFAULTS = {"region": "Cebu", "country": "Philippines"}

MOBILE_NUMBER = re.compile(r"^(\+63|0)9\d{9}$")


def _validate_address(details, prefix, errors):
    for field in REQUIRED_ADDRESS_FIELDS:
        value = details.get(field)
        if value is None or not str(value).strip():
            errors[f"{prefix}.{field}"] = ["This field is required"]

    phone = details.get("phone")
    if phone and str(phone).strip() and not MOBILE_NUMBER.match(str(phone).replace(" ", "")):
        errors[f"{prefix}.phone"] = ["Enter a valid mobile number, e.g. +639171234567 or 09171234567"]


def _normalize_address(details):
    cleaned = {key: str(value).strip() for key, value in details.items() if value is not None}
    if "phone" in cleaned:
        cleaned["phone"] = cleaned["phone"].replace(" ", "")
    return Address(**{key: cleaned[key] for key in cleaned if key in ADDRESS_FIELDS})


def assemble_order(
    cart_items,
    delivery,
    selected_keys=None,
    billing=None,
    same_as_shipping=True,
    shipping_method="standard",
    payment_method="cash-on-delivery",
    sequence=None,
):
    """Build an ``OrderSnapshot`` from cart lines and checkout details.

    Args:
        cart_items: ``CartItem`` entities (or anything exposing ``to_line()``).
        delivery: Dict of address fields for delivery.
        selected_keys: Variant keys chosen for checkout, ``None`` for all.
        billing: Dict of billing address fields. Ignored when
            ``same_as_shipping`` is set.
        shipping_method: A key of ``SHIPPING_FEES``.
        payment_method: A key of ``PAYMENT_METHODS``.
        sequence: Order number source, defaults to the process-wide one.

    Raises:
        InvalidOrder: with a field error map when anything is missing or wrong.
    """
    errors = {}

    if selected_keys is None:
        selected = list(cart_items)
    else:
        wanted = set(selected_keys)
        selected = [item for item in cart_items if item.variant_key in wanted]
    if not selected:
        errors["items"] = ["Select at least one item to check out"]

    delivery = {**ADDRESS_DEFAULTS, **(delivery or {})}
    _validate_address(delivery, "delivery", errors)

    if same_as_shipping:
        billing = delivery
    else:
        billing = {**ADDRESS_DEFAULTS, **(billing or {})}
        _validate_address(billing, "billing", errors)

    if shipping_method not in SHIPPING_FEES:
        errors["shipping_method"] = [f"Unknown shipping method: {shipping_method}"]
    if payment_method not in PAYMENT_METHODS:
        errors["payment_method"] = [f"Unknown payment method: {payment_method}"]

    if errors:
        raise InvalidOrder(errors)

    lines = [item.to_line() for item in selected]
    subtotal = round(sum(line["unit_price"] * line["quantity"] for line in lines), 2)
    shipping = SHIPPING_FEES[shipping_method]
    tax = round(subtotal * TAX_RATE, 2)

    return OrderSnapshot(
        order_number=(sequence or order_numbers).next(),
        items=json.dumps(lines),
        subtotal=subtotal,
        shipping=shipping,
        tax=tax,
        total=round(subtotal + shipping + tax, 2),
        shipping_method=shipping_method,
        delivery_address=_normalize_address(delivery),
        billing_address=_normalize_address(billing),
        payment_method=payment_method,
        payment_status=PAYMENT_METHODS[payment_method],
    )
