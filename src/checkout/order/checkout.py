"""Checkout pipeline: cart -> snapshot -> placement -> post-commit reconciliation.

Only assembly and placement can fail the checkout. Once the order has
committed, inventory, analytics and cart cleanup run one after another as
best-effort steps: a failure is logged and reported in the result, and the
order stands as placed.
"""

import json
from dataclasses import dataclass, field

import structlog
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from checkout.analytics.recording import RecordSale
from checkout.cart.cart import ShoppingCart
from checkout.cart.reconciliation import RemoveOrderedItems
from checkout.exceptions import TransactionFailed
from checkout.inventory.reconciliation import ReconcileInventory
from checkout.order.assembler import assemble_order
from checkout.order.placement import PlaceOrder

logger = structlog.get_logger(__name__)


@dataclass
class CheckoutResult:
    fulfillment_order_id: str
    customer_order_id: str
    order_number: str
    total: float
    failed_steps: list[str] = field(default_factory=list)


def place_order(snapshot, customer_id, customer_email=None):
    """Persist both order copies atomically.

    Validation errors pass through unchanged, except a clash on the unique
    ``order_number``, which like anything else that stops the unit of work
    from committing is raised as ``TransactionFailed``.
    """
    try:
        placed = current_domain.process(
            PlaceOrder(customer_id=customer_id, customer_email=customer_email, snapshot=snapshot),
            asynchronous=False,
        )
    except ValidationError as exc:
        if "order_number" not in exc.messages:
            raise
        logger.error(
            "Order number already taken",
            order_number=snapshot.order_number,
            customer_id=str(customer_id),
        )
        raise TransactionFailed(f"Could not place order {snapshot.order_number}") from exc
    except Exception as exc:
        logger.error(
            "Order placement failed",
            order_number=snapshot.order_number,
            customer_id=str(customer_id),
            exc_info=True,
        )
        raise TransactionFailed(f"Could not place order {snapshot.order_number}") from exc

    logger.info("Order placed", **placed, total=snapshot.total)
    return placed


def _post_commit(step, command, order_number):
    """Run one reconciliation step. Returns False if it failed."""
    try:
        current_domain.process(command, asynchronous=False)
    except Exception:
        logger.error(
            "Post-commit step failed; order stands as placed",
            step=step,
            order_number=order_number,
            exc_info=True,
        )
        return False
    return True


def run_checkout(
    customer_id,
    delivery,
    customer_email=None,
    selected_keys=None,
    billing=None,
    same_as_shipping=True,
    shipping_method="standard",
    payment_method="cash-on-delivery",
):
    cart = current_domain.repository_for(ShoppingCart).for_customer(customer_id)
    cart_items = cart.selected_items(selected_keys) if cart else []

    snapshot = assemble_order(
        cart_items,
        delivery,
        billing=billing,
        same_as_shipping=same_as_shipping,
        shipping_method=shipping_method,
        payment_method=payment_method,
    )
    placed = place_order(snapshot, customer_id, customer_email or delivery.get("email"))

    order_id = placed["fulfillment_order_id"]
    variant_keys = [line["variant_key"] for line in snapshot.lines]
    steps = [
        ("inventory", ReconcileInventory(fulfillment_order_id=order_id)),
        ("analytics", RecordSale(fulfillment_order_id=order_id)),
        (
            "cart",
            RemoveOrderedItems(
                customer_id=customer_id,
                variant_keys=json.dumps(variant_keys),
                order_number=snapshot.order_number,
            ),
        ),
    ]
    failed = [name for name, command in steps if not _post_commit(name, command, snapshot.order_number)]

    return CheckoutResult(
        fulfillment_order_id=order_id,
        customer_order_id=placed["customer_order_id"],
        order_number=snapshot.order_number,
        total=snapshot.total,
        failed_steps=failed,
    )
