"""Stock entry: register a product's inventory and restock its sizes."""

import json

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from checkout.domain import checkout
from checkout.inventory.record import InventoryRecord

logger = structlog.get_logger(__name__)


@checkout.command(part_of="InventoryRecord")
class RegisterInventory:
    product_id = Identifier(required=True)
    product_name = String(max_length=255)
    sizes = Text()  # JSON object, size -> stock


@checkout.command(part_of="InventoryRecord")
class RestockSize:
    product_id = Identifier(required=True)
    size = String(required=True, max_length=20)
    quantity = Integer(required=True, min_value=1)


@checkout.command_handler(part_of=InventoryRecord)
class InventoryManagementHandler:
    @handle(RegisterInventory)
    def register_inventory(self, command):
        repo = current_domain.repository_for(InventoryRecord)
        if repo.for_product(command.product_id) is not None:
            raise ValidationError({"product_id": ["Inventory is already registered for this product"]})

        sizes = json.loads(command.sizes) if command.sizes else {}
        if any(stock < 0 for stock in sizes.values()):
            raise ValidationError({"sizes": ["Stock cannot be negative"]})

        record = InventoryRecord.register(
            product_id=command.product_id,
            product_name=command.product_name,
            sizes=sizes,
        )
        repo.add(record)
        return str(record.id)

    @handle(RestockSize)
    def restock_size(self, command):
        repo = current_domain.repository_for(InventoryRecord)
        record = repo.for_product(command.product_id)
        if record is None:
            raise ValidationError({"product_id": ["No inventory registered for this product"]})

        record.restock(command.size, command.quantity)
        repo.add(record)
        logger.info(
            "Size restocked",
            product_id=str(command.product_id),
            size=command.size,
            quantity=command.quantity,
        )
