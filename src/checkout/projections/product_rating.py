"""Product rating projection: average rating and review count per product.

Recomputed from every ``RatingRecord`` of the product each time a rating
lands, so it never drifts from the records.
"""

from datetime import UTC, datetime

from protean.core.projector import on
from protean.exceptions import ObjectNotFoundError
from protean.fields import DateTime, Float, Identifier, Integer
from protean.utils.globals import current_domain

from checkout.domain import checkout
from checkout.reviews.events import RatingRecorded
from checkout.reviews.records import RatingRecord


@checkout.projection
class ProductRating:
    product_id = Identifier(identifier=True, required=True)
    average_rating = Float(default=0.0)
    review_count = Integer(default=0)
    updated_at = DateTime()


def recompute_product_rating(product_id):
    ratings = (
        current_domain.repository_for(RatingRecord)._dao.query.filter(product_id=str(product_id)).limit(None).all().items
    )
    count = len(ratings)
    average = round(sum(r.rating for r in ratings) / count, 2) if count else 0.0

    repo = current_domain.repository_for(ProductRating)
    try:
        record = repo.get(str(product_id))
    except ObjectNotFoundError:
        record = ProductRating(product_id=str(product_id))

    record.average_rating = average
    record.review_count = count
    record.updated_at = datetime.now(UTC)
    repo.add(record)
    return record


@checkout.projector(projector_for=ProductRating, aggregates=[RatingRecord])
class ProductRatingProjector:
    @on(RatingRecorded)
    def on_rating_recorded(self, event):
        recompute_product_rating(event.product_id)
