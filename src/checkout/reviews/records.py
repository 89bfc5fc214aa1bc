"""Rating and return records, one per (order, product) pair. Immutable once written."""

from datetime import UTC, datetime

from protean.fields import DateTime, Identifier, Integer, Text

from checkout.domain import checkout
from checkout.reviews.events import RatingRecorded, ReturnRecorded


@checkout.aggregate
class RatingRecord:
    product_id = Identifier(required=True)
    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    rating = Integer(required=True, min_value=1, max_value=5)
    feedback = Text()
    recorded_at = DateTime()

    @classmethod
    def record(cls, product_id, order_id, customer_id, rating, feedback=None):
        now = datetime.now(UTC)
        record = cls(
            product_id=product_id,
            order_id=order_id,
            customer_id=customer_id,
            rating=rating,
            feedback=feedback,
            recorded_at=now,
        )
        record.raise_(
            RatingRecorded(
                rating_id=str(record.id),
                product_id=str(product_id),
                order_id=str(order_id),
                rating=rating,
                recorded_at=now,
            )
        )
        return record


@checkout.aggregate
class ReturnRecord:
    product_id = Identifier(required=True)
    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    reason = Text(required=True)
    requested_at = DateTime()

    @classmethod
    def record(cls, product_id, order_id, customer_id, reason):
        now = datetime.now(UTC)
        record = cls(
            product_id=product_id,
            order_id=order_id,
            customer_id=customer_id,
            reason=reason,
            requested_at=now,
        )
        record.raise_(
            ReturnRecorded(
                return_id=str(record.id),
                product_id=str(product_id),
                order_id=str(order_id),
                requested_at=now,
            )
        )
        return record
