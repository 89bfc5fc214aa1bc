"""ReconcileInventory: take a placed order's quantities off the shelf.

Runs once per order after placement commits, outside the placement unit of
work. Each affected product's record is read, decremented and written back
with no locking. A write based on a stale read is refused by the record's
version and protean re-runs the handler on a fresh read, so two orders
racing for the last unit both apply: stock clamps at zero and the excess is
oversold. The order's ``inventory_reconciled`` flag is set in the same unit of
work, so a second run for the same order is refused instead of decrementing
twice.
"""

import structlog
from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from checkout.domain import checkout
from checkout.inventory.record import InventoryRecord
from checkout.order.fulfillment_order import FulfillmentOrder

logger = structlog.get_logger(__name__)


@checkout.command(part_of="InventoryRecord")
class ReconcileInventory:
    fulfillment_order_id = Identifier(required=True)


@checkout.command_handler(part_of=InventoryRecord)
class InventoryReconciliationHandler:
    @handle(ReconcileInventory)
    def reconcile_inventory(self, command):
        order_repo = current_domain.repository_for(FulfillmentOrder)
        order = order_repo.get(command.fulfillment_order_id)

        if order.inventory_reconciled:
            logger.warning("Inventory already reconciled for order", order_number=order.order_number)
            return {}

        repo = current_domain.repository_for(InventoryRecord)
        oversold = {}
        records = {}
        for line in order.lines:
            product_id = line["product_id"]
            if product_id not in records:
                records[product_id] = repo.for_product(product_id)
            record = records[product_id]
            if record is None:
                logger.warning(
                    "No inventory record for ordered product",
                    order_number=order.order_number,
                    product_id=product_id,
                )
                continue

            size = line.get("size")
            stocked = bool(size) and size in {s.size for s in record.sizes}
            if size and not stocked:
                logger.warning(
                    "Ordered size is not stocked",
                    order_number=order.order_number,
                    product_id=product_id,
                    size=size,
                )

            removed = record.decrement(size, line["quantity"], order_id=str(order.id))
            if stocked and removed < line["quantity"]:
                oversold[line["variant_key"]] = line["quantity"] - removed

        for record in records.values():
            if record is not None:
                repo.add(record)

        order.mark_inventory_reconciled()
        order_repo.add(order)

        if oversold:
            logger.warning("Order oversold stock", order_number=order.order_number, oversold=oversold)
        logger.info("Inventory reconciled", order_number=order.order_number, products=len(records))
        return oversold
