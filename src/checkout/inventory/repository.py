"""Repository for the InventoryRecord aggregate."""

from checkout.domain import checkout
from checkout.inventory.record import InventoryRecord


@checkout.repository(part_of=InventoryRecord)
class InventoryRecordRepository:
    def for_product(self, product_id) -> InventoryRecord | None:
        records = self._dao.query.filter(product_id=str(product_id)).all().items
        return records[0] if records else None
