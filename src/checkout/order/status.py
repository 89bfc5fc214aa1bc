"""Order status machine.

    pending <-> processing <-> shipped <-> delivered      (operator, reversible)
    pending -> cancelled                                  (customer)
    delivered -> completed                                (customer rates or returns)

``completed`` and ``cancelled`` are terminal. Every guard failure raises
``IllegalTransition`` with the reason under the ``status`` key.
"""

from enum import Enum

from checkout.exceptions import IllegalTransition


class OrderStatus(Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


OPERATOR_STATUSES = {
    OrderStatus.PENDING,
    OrderStatus.PROCESSING,
    OrderStatus.SHIPPED,
    OrderStatus.DELIVERED,
}

TERMINAL_STATUSES = {OrderStatus.COMPLETED, OrderStatus.CANCELLED}

# Statuses an order can be moved back to before it reaches the customer
PRE_DELIVERY_STATUSES = {OrderStatus.PENDING, OrderStatus.PROCESSING, OrderStatus.SHIPPED}


def _refuse(message):
    raise IllegalTransition({"status": [message]})


def assert_operator_can_set(current, target):
    current, target = OrderStatus(current), OrderStatus(target)
    if current in TERMINAL_STATUSES:
        _refuse(f"Order is {current.value} and can no longer change")
    if target not in OPERATOR_STATUSES:
        _refuse(f"Operators cannot set an order to {target.value}")
    if current == target:
        _refuse(f"Order is already {current.value}")


def assert_can_cancel(current):
    current = OrderStatus(current)
    if current != OrderStatus.PENDING:
        _refuse(f"Cannot cancel an order that is {current.value}")


def assert_can_confirm_receipt(current, order_received):
    if OrderStatus(current) != OrderStatus.DELIVERED:
        _refuse("Only delivered orders can be marked as received")
    if order_received:
        _refuse("Order was already marked as received")


def assert_can_close(current, order_received, action_completed):
    """Guard shared by rating and returning an order."""
    if action_completed:
        _refuse("A rating or return was already submitted for this order")
    if OrderStatus(current) != OrderStatus.DELIVERED:
        _refuse("Only delivered orders can be rated or returned")
    if not order_received:
        _refuse("Order must be marked as received first")
