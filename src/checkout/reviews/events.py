"""Domain events for rating and return records."""

from protean.fields import DateTime, Identifier, Integer

from checkout.domain import checkout


@checkout.event(part_of="RatingRecord")
class RatingRecorded:
    __version__ = 1

    rating_id = Identifier(required=True)
    product_id = Identifier(required=True)
    order_id = Identifier(required=True)
    rating = Integer(required=True)
    recorded_at = DateTime(required=True)


@checkout.event(part_of="ReturnRecord")
class ReturnRecorded:
    __version__ = 1

    return_id = Identifier(required=True)
    product_id = Identifier(required=True)
    order_id = Identifier(required=True)
    requested_at = DateTime(required=True)
