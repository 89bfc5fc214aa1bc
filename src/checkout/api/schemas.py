"""Pydantic request/response schemas for the checkout API.

These are the external contract. Routes translate them into protean
commands and read models.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class AddressSchema(BaseModel):
    first_name: str | None = None
    last_name: str | None = None
    address_line1: str | None = None
    address_line2: str | None = None
    city: str | None = None
    region: str | None = "Cebu"
    postal_code: str | None = None
    country: str | None = "Philippines"
    phone: str | None = "+63"
    email: str | None = None


class StatusResponse(BaseModel):
    status: str = "ok"


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
class AddToCartRequest(BaseModel):
    product_id: str
    name: str
    unit_price: float = Field(ge=0)
    quantity: int = Field(ge=1, default=1)
    size: str | None = None
    color: str | None = None
    image: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "product_id": "prod-001",
                    "name": "Linen Shirt",
                    "unit_price": 500.0,
                    "quantity": 2,
                    "size": "M",
                    "color": "White",
                }
            ]
        }
    }


class UpdateCartQuantityRequest(BaseModel):
    quantity: int = Field(ge=1)


class CartItemResponse(BaseModel):
    variant_key: str
    product_id: str
    name: str
    unit_price: float
    quantity: int
    size: str | None = None
    color: str | None = None
    image: str | None = None


class CartResponse(BaseModel):
    customer_id: str
    items: list[CartItemResponse] = []
    subtotal: float = 0.0


class VariantKeyResponse(BaseModel):
    variant_key: str


# ---------------------------------------------------------------------------
# Checkout
# ---------------------------------------------------------------------------
class CheckoutRequest(BaseModel):
    selected_keys: list[str] | None = None  # None checks out the whole cart
    delivery: AddressSchema
    billing: AddressSchema | None = None
    same_as_shipping: bool = True
    shipping_method: str = "standard"
    payment_method: Literal["cash-on-delivery", "wallet-demo"] = "cash-on-delivery"


class CheckoutResponse(BaseModel):
    fulfillment_order_id: str
    customer_order_id: str
    order_number: str
    total: float
    failed_steps: list[str] = []


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class OrderLineResponse(BaseModel):
    product_id: str
    variant_key: str
    name: str
    unit_price: float
    quantity: int
    size: str | None = None
    color: str | None = None
    image: str | None = None


class StatusEntryResponse(BaseModel):
    status: str
    changed_by: str | None = None
    changed_at: datetime


class OrderResponse(BaseModel):
    id: str
    order_number: str
    status: str
    items: list[OrderLineResponse]
    subtotal: float
    shipping: float
    tax: float
    total: float
    shipping_method: str | None = None
    payment_method: str | None = None
    payment_status: str | None = None
    delivered_at: datetime | None = None
    placed_at: datetime | None = None
    sequence: int = 0


class CustomerOrderResponse(OrderResponse):
    fulfillment_order_id: str
    order_received: bool = False
    action_completed: bool = False
    rating: int | None = None
    feedback: str | None = None
    return_reason: str | None = None


class FulfillmentOrderResponse(OrderResponse):
    customer_order_id: str
    customer_id: str
    customer_email: str | None = None
    anchor_product_id: str
    shipping_address: AddressSchema | None = None
    billing_address: AddressSchema | None = None
    status_history: list[StatusEntryResponse] = []
    inventory_reconciled: bool = False


class RateOrderRequest(BaseModel):
    rating: int = Field(ge=1, le=5)
    feedback: str | None = None


class RequestReturnRequest(BaseModel):
    reason: str = Field(min_length=1)


class AdvanceStatusRequest(BaseModel):
    status: str


class RepairResponse(BaseModel):
    repaired: bool


class ProductOrderResponse(BaseModel):
    fulfillment_order_id: str
    order_number: str
    quantity: int
    line_total: float
    is_anchor: bool
    status: str | None = None
    placed_at: datetime | None = None


# ---------------------------------------------------------------------------
# Inventory
# ---------------------------------------------------------------------------
class RegisterInventoryRequest(BaseModel):
    product_id: str
    product_name: str | None = None
    sizes: dict[str, int] = {}


class RestockRequest(BaseModel):
    quantity: int = Field(ge=1)


class InventoryResponse(BaseModel):
    product_id: str
    product_name: str | None = None
    sizes: dict[str, int]
    total_stock: int
    purchased_count: int


# ---------------------------------------------------------------------------
# Analytics and ratings
# ---------------------------------------------------------------------------
class BucketResponse(BaseModel):
    bucket_key: str
    period: str
    per_slot: dict[str, float]
    total: float
    quantity: int
    updated_at: datetime | None = None


class SaleResponse(BaseModel):
    order_id: str
    order_number: str
    amount: float
    quantity: int
    week_key: str | None = None
    month_key: str | None = None
    occurred_at: datetime


class ProductRatingResponse(BaseModel):
    product_id: str
    average_rating: float = 0.0
    review_count: int = 0
