import pytest
from checkout.exceptions import IllegalTransition
from checkout.order.actions import CancelOrder
from checkout.order.customer_order import CustomerOrder
from checkout.order.fulfillment import AdvanceOrderStatus
from checkout.order.fulfillment_order import FulfillmentOrder
from checkout.order.repair import ReconcileOrderCopies
from protean import current_domain


def _drift(customer_order_id, status, sequence):
    repo = current_domain.repository_for(CustomerOrder)
    customer_order = repo.get(customer_order_id)
    customer_order.status = status
    customer_order.sequence = sequence
    repo.add(customer_order)


def _repair(fulfillment_order_id):
    return current_domain.process(
        ReconcileOrderCopies(fulfillment_order_id=fulfillment_order_id), asynchronous=False
    )


class TestReconcileOrderCopies:
    def test_copies_in_step_are_left_alone(self, add_to_cart, checkout_cart):
        add_to_cart("cust-rp1", "P1", size="M")
        result = checkout_cart("cust-rp1")

        assert _repair(result.fulfillment_order_id) is False

    def test_stale_customer_copy_is_repaired(self, add_to_cart, checkout_cart):
        add_to_cart("cust-rp2", "P1", size="M")
        result = checkout_cart("cust-rp2")
        current_domain.process(
            AdvanceOrderStatus(fulfillment_order_id=result.fulfillment_order_id, status="processing"),
            asynchronous=False,
        )
        _drift(result.customer_order_id, "pending", 0)

        assert _repair(result.fulfillment_order_id) is True

        fulfillment = current_domain.repository_for(FulfillmentOrder).get(result.fulfillment_order_id)
        customer = current_domain.repository_for(CustomerOrder).get(result.customer_order_id)
        assert customer.status == fulfillment.status == "processing"
        assert customer.sequence == fulfillment.sequence == 1

    def test_fulfillment_copy_wins_over_a_newer_looking_customer_copy(self, add_to_cart, checkout_cart):
        add_to_cart("cust-rp3", "P1", size="M")
        result = checkout_cart("cust-rp3")
        _drift(result.customer_order_id, "shipped", 5)

        assert _repair(result.fulfillment_order_id) is True

        customer = current_domain.repository_for(CustomerOrder).get(result.customer_order_id)
        assert customer.status == "pending"
        assert customer.sequence == 0

    def test_repair_is_idempotent(self, add_to_cart, checkout_cart):
        add_to_cart("cust-rp4", "P1", size="M")
        result = checkout_cart("cust-rp4")
        _drift(result.customer_order_id, "delivered", 3)

        assert _repair(result.fulfillment_order_id) is True
        assert _repair(result.fulfillment_order_id) is False


class TestCustomerActionsOnStaleCopy:
    def test_cancel_refused_when_fulfillment_copy_is_processing(self, add_to_cart, checkout_cart):
        add_to_cart("cust-rp5", "P1", size="M")
        result = checkout_cart("cust-rp5")
        current_domain.process(
            AdvanceOrderStatus(fulfillment_order_id=result.fulfillment_order_id, status="processing"),
            asynchronous=False,
        )
        _drift(result.customer_order_id, "pending", 0)

        with pytest.raises(IllegalTransition):
            current_domain.process(
                CancelOrder(customer_order_id=result.customer_order_id, customer_id="cust-rp5"),
                asynchronous=False,
            )

        fulfillment = current_domain.repository_for(FulfillmentOrder).get(result.fulfillment_order_id)
        assert fulfillment.status == "processing"
        assert [e.status for e in fulfillment.status_history] == ["pending", "processing"]

    def test_cancel_allowed_when_fulfillment_copy_is_pending(self, add_to_cart, checkout_cart):
        add_to_cart("cust-rp6", "P1", size="M")
        result = checkout_cart("cust-rp6")
        _drift(result.customer_order_id, "shipped", 5)

        current_domain.process(
            CancelOrder(customer_order_id=result.customer_order_id, customer_id="cust-rp6"),
            asynchronous=False,
        )

        fulfillment = current_domain.repository_for(FulfillmentOrder).get(result.fulfillment_order_id)
        customer = current_domain.repository_for(CustomerOrder).get(result.customer_order_id)
        assert fulfillment.status == customer.status == "cancelled"
        assert customer.sequence == fulfillment.sequence == 1
