import json

import pytest
from protean import current_domain
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def checkout_bed():
    from checkout.domain import checkout

    bed = DomainFixture(checkout)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(checkout_bed):
    with checkout_bed.domain_context():
        yield


@pytest.fixture
def delivery():
    return {
        "first_name": "Maria",
        "last_name": "Santos",
        "address_line1": "12 Osmena Blvd",
        "city": "Cebu City",
        "region": "Cebu",
        "postal_code": "6000",
        "country": "Philippines",
        "phone": "+639171234567",
        "email": "maria@example.com",
    }


@pytest.fixture
def add_to_cart():
    from checkout.cart.items import AddToCart

    def _add(customer_id, product_id, unit_price=500.0, quantity=1, size=None, name=None):
        return current_domain.process(
            AddToCart(
                customer_id=customer_id,
                product_id=product_id,
                name=name or f"Product {product_id}",
                unit_price=unit_price,
                quantity=quantity,
                size=size,
            ),
            asynchronous=False,
        )

    return _add


@pytest.fixture
def register_inventory():
    from checkout.inventory.management import RegisterInventory

    def _register(product_id, **sizes):
        return current_domain.process(
            RegisterInventory(product_id=product_id, product_name=f"Product {product_id}", sizes=json.dumps(sizes)),
            asynchronous=False,
        )

    return _register


@pytest.fixture
def checkout_cart(delivery):
    """Run the whole checkout pipeline for a customer's current cart."""
    from checkout.order.checkout import run_checkout

    def _checkout(customer_id, **kwargs):
        return run_checkout(customer_id=customer_id, delivery=delivery, **kwargs)

    return _checkout
