"""Inventory Record aggregate: per-size stock for one product.

``total_stock`` is always the sum of the size buckets and no bucket goes
below zero. Decrements clamp at zero, so orders for the last unit that
raced past the cart's availability check oversell instead of driving stock
negative.
"""

from datetime import UTC, datetime

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer, String

from checkout.domain import checkout
from checkout.inventory.events import InventoryRegistered, SizeRestocked, StockDecremented


@checkout.entity(part_of="InventoryRecord")
class SizeStock:
    size = String(required=True, max_length=20)
    stock = Integer(default=0, min_value=0)


@checkout.aggregate
class InventoryRecord:
    product_id = Identifier(required=True, unique=True)
    product_name = String(max_length=255)
    sizes = HasMany(SizeStock)
    total_stock = Integer(default=0)
    purchased_count = Integer(default=0)
    updated_at = DateTime()

    @invariant.post
    def total_stock_matches_sizes(self):
        if self.total_stock != sum(s.stock or 0 for s in self.sizes):
            raise ValidationError({"total_stock": ["Total stock must equal the sum of size stock"]})

    @invariant.post
    def stock_is_never_negative(self):
        if any((s.stock or 0) < 0 for s in self.sizes):
            raise ValidationError({"sizes": ["Stock cannot be negative"]})

    @classmethod
    def register(cls, product_id, product_name=None, sizes=None):
        """Create a record seeded with ``{size: stock}``."""
        sizes = sizes or {}
        record = cls(
            product_id=product_id,
            product_name=product_name,
            sizes=[SizeStock(size=size, stock=stock) for size, stock in sizes.items()],
            total_stock=sum(sizes.values()),
            purchased_count=0,
            updated_at=datetime.now(UTC),
        )
        record.raise_(
            InventoryRegistered(
                product_id=str(product_id),
                product_name=product_name,
                total_stock=record.total_stock,
            )
        )
        return record

    def _find_size(self, size):
        return next((s for s in self.sizes if s.size == size), None)

    def available(self, size):
        bucket = self._find_size(size)
        return bucket.stock if bucket else 0

    def restock(self, size, quantity):
        if quantity < 1:
            raise ValidationError({"quantity": ["Restock quantity must be at least 1"]})

        with atomic_change(self):
            bucket = self._find_size(size)
            if bucket is None:
                bucket = SizeStock(size=size, stock=quantity)
                self.add_sizes(bucket)
            else:
                bucket.stock += quantity
            self.total_stock = sum(s.stock for s in self.sizes)
            self.updated_at = datetime.now(UTC)

        self.raise_(
            SizeRestocked(
                product_id=str(self.product_id),
                size=size,
                quantity=quantity,
                new_stock=bucket.stock,
            )
        )

    def decrement(self, size, quantity, order_id=None):
        """Take ``quantity`` of ``size`` off the shelf, flooring at zero.

        Lines without a size, or with a size this product does not stock,
        leave the buckets alone. ``purchased_count`` grows either way.
        Returns the quantity actually removed.
        """
        removed = 0
        with atomic_change(self):
            bucket = self._find_size(size) if size else None
            if bucket is not None:
                removed = min(bucket.stock, quantity)
                bucket.stock = max(0, bucket.stock - quantity)
                self.total_stock = sum(s.stock for s in self.sizes)
            self.purchased_count = (self.purchased_count or 0) + quantity
            self.updated_at = datetime.now(UTC)

        self.raise_(
            StockDecremented(
                product_id=str(self.product_id),
                order_id=order_id,
                size=size,
                requested=quantity,
                removed=removed,
                remaining=bucket.stock if bucket is not None else 0,
                decremented_at=self.updated_at,
            )
        )
        return removed
