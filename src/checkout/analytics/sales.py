"""Sales analytics: raw sale events and weekly/monthly aggregate buckets.

A bucket is keyed by its period (``2024-W33`` for ISO weeks, ``2024-08`` for
months) and holds one slot per day of that period, pre-seeded to zero.
Merging a sale is additive and not idempotent; ``RecordSale`` guards against
replaying the same order instead.
"""

import calendar
import json
from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Identifier, Integer, String, Text

from checkout.domain import checkout

WEEKDAY_LABELS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


class BucketPeriod(Enum):
    WEEK = "week"
    MONTH = "month"


def _utc(at):
    return at.astimezone(UTC) if at.tzinfo else at.replace(tzinfo=UTC)


def week_key(at):
    iso = _utc(at).isocalendar()
    return f"{iso.year}-W{iso.week:02d}"


def month_key(at):
    return _utc(at).strftime("%Y-%m")


def bucket_key(period, at):
    return week_key(at) if BucketPeriod(period) == BucketPeriod.WEEK else month_key(at)


def slot_label(period, at):
    at = _utc(at)
    if BucketPeriod(period) == BucketPeriod.WEEK:
        return WEEKDAY_LABELS[at.weekday()]
    return str(at.day)


def seed_slots(period, at):
    """Zero-filled slots for the period containing ``at``, in calendar order."""
    at = _utc(at)
    if BucketPeriod(period) == BucketPeriod.WEEK:
        labels = WEEKDAY_LABELS
    else:
        days = calendar.monthrange(at.year, at.month)[1]
        labels = [str(day) for day in range(1, days + 1)]
    return {label: 0.0 for label in labels}


@checkout.aggregate
class SalesEvent:
    """Immutable audit record of one placed order's sale."""

    order_id = Identifier(required=True, unique=True)
    order_number = String(required=True, max_length=50)
    amount = Float(required=True)
    quantity = Integer(required=True)
    week_key = String(max_length=10)
    month_key = String(max_length=7)
    occurred_at = DateTime(required=True)


@checkout.aggregate
class SalesBucket:
    bucket_key = String(identifier=True, required=True, max_length=10)
    period = String(required=True, choices=BucketPeriod)
    per_slot = Text(required=True)  # JSON object, slot label -> amount
    total = Float(default=0.0)
    quantity = Integer(default=0)
    updated_at = DateTime()

    @invariant.post
    def total_matches_slots(self):
        if round(sum(self.slots.values()), 2) != round(self.total or 0.0, 2):
            raise ValidationError({"total": ["Bucket total must equal the sum of its slots"]})

    @classmethod
    def empty(cls, period, at):
        period = BucketPeriod(period)
        return cls(
            bucket_key=bucket_key(period, at),
            period=period.value,
            per_slot=json.dumps(seed_slots(period, at)),
            total=0.0,
            quantity=0,
        )

    @property
    def slots(self):
        return json.loads(self.per_slot) if self.per_slot else {}

    def merge(self, amount, quantity, at):
        """Add one sale at instant ``at`` to this bucket."""
        if bucket_key(self.period, at) != self.bucket_key:
            raise ValidationError({"bucket_key": [f"{at.isoformat()} falls outside bucket {self.bucket_key}"]})

        slots = self.slots
        label = slot_label(self.period, at)
        slots[label] = round(slots.get(label, 0.0) + amount, 2)

        with atomic_change(self):
            self.per_slot = json.dumps(slots)
            self.total = round((self.total or 0.0) + amount, 2)
            self.quantity = (self.quantity or 0) + quantity
            self.updated_at = datetime.now(UTC)


def bucket_start(period, key):
    """First instant of the bucket named ``key``. Raises ValidationError for malformed keys."""
    try:
        if BucketPeriod(period) == BucketPeriod.WEEK:
            year, week = key.split("-W")
            return datetime.fromisocalendar(int(year), int(week), 1).replace(tzinfo=UTC)
        return datetime.strptime(key, "%Y-%m").replace(tzinfo=UTC)
    except ValueError as exc:
        raise ValidationError({"bucket_key": [f"Invalid {period} key: {key}"]}) from exc
