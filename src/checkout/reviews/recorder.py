"""Write rating and return records for every product in a customer order.

Products are matched by the ``product_id`` carried on each order line. An
order that lists the same product twice (two sizes, say) yields one record
for that product.
"""

import structlog
from protean.utils.globals import current_domain

from checkout.reviews.records import RatingRecord, ReturnRecord

logger = structlog.get_logger(__name__)


def _distinct_products(order):
    products = []
    for line in order.lines:
        if line["product_id"] not in products:
            products.append(line["product_id"])
    return products


def _already_recorded(record_cls, order_id, product_id):
    existing = (
        current_domain.repository_for(record_cls)
        ._dao.query.filter(order_id=str(order_id), product_id=str(product_id))
        .all()
        .items
    )
    return bool(existing)


def record_ratings(order, rating, feedback=None):
    """Append a ``RatingRecord`` per product of ``order``. Returns the product ids rated."""
    repo = current_domain.repository_for(RatingRecord)
    rated = []
    for product_id in _distinct_products(order):
        if _already_recorded(RatingRecord, order.id, product_id):
            logger.warning("Rating already recorded", order_id=str(order.id), product_id=product_id)
            continue
        repo.add(
            RatingRecord.record(
                product_id=product_id,
                order_id=str(order.id),
                customer_id=str(order.customer_id),
                rating=rating,
                feedback=feedback,
            )
        )
        rated.append(product_id)
    return rated


def record_returns(order, reason):
    repo = current_domain.repository_for(ReturnRecord)
    returned = []
    for product_id in _distinct_products(order):
        if _already_recorded(ReturnRecord, order.id, product_id):
            continue
        repo.add(
            ReturnRecord.record(
                product_id=product_id,
                order_id=str(order.id),
                customer_id=str(order.customer_id),
                reason=reason,
            )
        )
        returned.append(product_id)
    return returned
