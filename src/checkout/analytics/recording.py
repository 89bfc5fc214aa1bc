"""RecordSale: log a placed order's sale and fold it into the week and month buckets.

Runs after the order commits. Each bucket is read, merged and written back
whole. When two sales race for the same bucket the later write is refused by
the bucket's version, and protean re-runs the losing handler on a fresh
read, so neither sale is lost.
"""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier
from protean.utils.globals import current_domain

from checkout.analytics.sales import (
    BucketPeriod,
    SalesBucket,
    SalesEvent,
    month_key,
    week_key,
)
from checkout.domain import checkout
from checkout.order.fulfillment_order import FulfillmentOrder

logger = structlog.get_logger(__name__)


@checkout.command(part_of="SalesEvent")
class RecordSale:
    fulfillment_order_id = Identifier(required=True)


def _get_or_create_bucket(period, at):
    repo = current_domain.repository_for(SalesBucket)
    empty = SalesBucket.empty(period, at)
    try:
        return repo.get(empty.bucket_key)
    except ObjectNotFoundError:
        return empty


def bucket_for(period, key):
    """The stored bucket, or ``None`` if no sale has landed in it yet."""
    try:
        bucket = current_domain.repository_for(SalesBucket).get(key)
    except ObjectNotFoundError:
        return None
    return bucket if bucket.period == BucketPeriod(period).value else None


def recent_sales(limit=50):
    return (
        current_domain.repository_for(SalesEvent)._dao.query.order_by("-occurred_at").limit(limit).all().items
    )


@checkout.command_handler(part_of=SalesEvent)
class RecordSaleHandler:
    @handle(RecordSale)
    def record_sale(self, command):
        order = current_domain.repository_for(FulfillmentOrder).get(command.fulfillment_order_id)
        events_repo = current_domain.repository_for(SalesEvent)

        if events_repo._dao.query.filter(order_id=str(order.id)).all().items:
            logger.warning("Sale already recorded", order_number=order.order_number)
            return False

        at = order.placed_at
        amount = order.pricing.total
        quantity = sum(line["quantity"] for line in order.lines)

        events_repo.add(
            SalesEvent(
                order_id=str(order.id),
                order_number=order.order_number,
                amount=amount,
                quantity=quantity,
                week_key=week_key(at),
                month_key=month_key(at),
                occurred_at=at,
            )
        )

        bucket_repo = current_domain.repository_for(SalesBucket)
        for period in BucketPeriod:
            bucket = _get_or_create_bucket(period, at)
            bucket.merge(amount, quantity, at)
            bucket_repo.add(bucket)

        logger.info(
            "Sale recorded",
            order_number=order.order_number,
            amount=amount,
            quantity=quantity,
            week=week_key(at),
            month=month_key(at),
        )
        return True
