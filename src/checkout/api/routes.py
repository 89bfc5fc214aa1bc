"""FastAPI routes for the checkout domain.

The calling actor arrives in the ``X-Actor-Id`` and ``X-Actor-Email``
headers, set by whatever authenticates the request upstream.
"""

import json

from fastapi import APIRouter, Header
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from checkout.analytics.recording import bucket_for, recent_sales
from checkout.analytics.sales import BucketPeriod, SalesBucket, bucket_start
from checkout.api.schemas import (
    AddToCartRequest,
    AdvanceStatusRequest,
    BucketResponse,
    CartItemResponse,
    CartResponse,
    CheckoutRequest,
    CheckoutResponse,
    CustomerOrderResponse,
    FulfillmentOrderResponse,
    InventoryResponse,
    ProductOrderResponse,
    ProductRatingResponse,
    RateOrderRequest,
    RegisterInventoryRequest,
    RepairResponse,
    RequestReturnRequest,
    RestockRequest,
    SaleResponse,
    StatusResponse,
    UpdateCartQuantityRequest,
    VariantKeyResponse,
)
from checkout.cart.cart import ShoppingCart
from checkout.cart.items import AddToCart, RemoveFromCart, UpdateCartQuantity
from checkout.inventory.management import RegisterInventory, RestockSize
from checkout.inventory.record import InventoryRecord
from checkout.order.actions import CancelOrder, ConfirmReceipt, RateOrder, RequestReturn
from checkout.order.checkout import run_checkout
from checkout.order.customer_order import CustomerOrder
from checkout.order.fulfillment import AdvanceOrderStatus
from checkout.order.fulfillment_order import FulfillmentOrder
from checkout.order.repair import ReconcileOrderCopies
from checkout.projections.fulfillment_order_lines import orders_for_product
from checkout.projections.product_rating import ProductRating


def _order_fields(order):
    return {
        "id": str(order.id),
        "order_number": order.order_number,
        "status": order.status,
        "items": order.lines,
        "subtotal": order.pricing.subtotal,
        "shipping": order.pricing.shipping,
        "tax": order.pricing.tax,
        "total": order.pricing.total,
        "shipping_method": order.shipping_method,
        "payment_method": order.payment_method,
        "payment_status": order.payment_status,
        "delivered_at": order.delivered_at,
        "placed_at": order.placed_at,
        "sequence": order.sequence or 0,
    }


def _customer_order_response(order):
    return CustomerOrderResponse(
        **_order_fields(order),
        fulfillment_order_id=str(order.fulfillment_order_id),
        order_received=bool(order.order_received),
        action_completed=bool(order.action_completed),
        rating=order.rating,
        feedback=order.feedback,
        return_reason=order.return_reason,
    )


def _fulfillment_order_response(order):
    return FulfillmentOrderResponse(
        **_order_fields(order),
        customer_order_id=str(order.customer_order_id),
        customer_id=str(order.customer_id),
        customer_email=order.customer_email,
        anchor_product_id=str(order.anchor_product_id),
        shipping_address=order.shipping_address.to_dict() if order.shipping_address else None,
        billing_address=order.billing_address.to_dict() if order.billing_address else None,
        status_history=[
            {"status": e.status, "changed_by": e.changed_by, "changed_at": e.changed_at} for e in order.status_history
        ],
        inventory_reconciled=bool(order.inventory_reconciled),
    )


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/cart", tags=["cart"])


@cart_router.get("", response_model=CartResponse)
async def get_cart(x_actor_id: str = Header()) -> CartResponse:
    cart = current_domain.repository_for(ShoppingCart).for_customer(x_actor_id)
    if cart is None:
        return CartResponse(customer_id=x_actor_id)
    return CartResponse(
        customer_id=x_actor_id,
        items=[
            CartItemResponse(
                variant_key=item.variant_key,
                product_id=str(item.product_id),
                name=item.name,
                unit_price=item.unit_price,
                quantity=item.quantity,
                size=item.size,
                color=item.color,
                image=item.image,
            )
            for item in cart.items
        ],
        subtotal=cart.subtotal,
    )


@cart_router.post("/items", status_code=201, response_model=VariantKeyResponse)
async def add_cart_item(body: AddToCartRequest, x_actor_id: str = Header()) -> VariantKeyResponse:
    command = AddToCart(
        customer_id=x_actor_id,
        product_id=body.product_id,
        name=body.name,
        unit_price=body.unit_price,
        quantity=body.quantity,
        size=body.size,
        color=body.color,
        image=body.image,
    )
    variant_key = current_domain.process(command, asynchronous=False)
    return VariantKeyResponse(variant_key=variant_key)


@cart_router.put("/items/{variant_key}", response_model=StatusResponse)
async def update_cart_item(
    variant_key: str, body: UpdateCartQuantityRequest, x_actor_id: str = Header()
) -> StatusResponse:
    command = UpdateCartQuantity(customer_id=x_actor_id, variant_key=variant_key, quantity=body.quantity)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@cart_router.delete("/items/{variant_key}", response_model=StatusResponse)
async def remove_cart_item(variant_key: str, x_actor_id: str = Header()) -> StatusResponse:
    current_domain.process(RemoveFromCart(customer_id=x_actor_id, variant_key=variant_key), asynchronous=False)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Checkout Router
# ---------------------------------------------------------------------------
checkout_router = APIRouter(prefix="/checkout", tags=["checkout"])


@checkout_router.post("", status_code=201, response_model=CheckoutResponse)
async def place_checkout(
    body: CheckoutRequest,
    x_actor_id: str = Header(),
    x_actor_email: str | None = Header(default=None),
) -> CheckoutResponse:
    """Place an order from the actor's cart.

    A 201 means the order exists. ``failed_steps`` lists post-commit
    reconciliation steps that did not complete.
    """
    result = run_checkout(
        customer_id=x_actor_id,
        customer_email=x_actor_email,
        delivery=body.delivery.model_dump(),
        billing=body.billing.model_dump() if body.billing else None,
        same_as_shipping=body.same_as_shipping,
        selected_keys=body.selected_keys,
        shipping_method=body.shipping_method,
        payment_method=body.payment_method,
    )
    return CheckoutResponse(
        fulfillment_order_id=result.fulfillment_order_id,
        customer_order_id=result.customer_order_id,
        order_number=result.order_number,
        total=result.total,
        failed_steps=result.failed_steps,
    )


# ---------------------------------------------------------------------------
# Customer Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.get("", response_model=list[CustomerOrderResponse])
async def list_my_orders(x_actor_id: str = Header()) -> list[CustomerOrderResponse]:
    orders = current_domain.repository_for(CustomerOrder).for_customer(x_actor_id)
    return [_customer_order_response(order) for order in orders]


@order_router.get("/{order_id}", response_model=CustomerOrderResponse)
async def get_my_order(order_id: str, x_actor_id: str = Header()) -> CustomerOrderResponse:
    order = current_domain.repository_for(CustomerOrder).get(order_id)
    order.assert_owned_by(x_actor_id)
    return _customer_order_response(order)


@order_router.post("/{order_id}/cancel", response_model=StatusResponse)
async def cancel_order(order_id: str, x_actor_id: str = Header()) -> StatusResponse:
    current_domain.process(CancelOrder(customer_order_id=order_id, customer_id=x_actor_id), asynchronous=False)
    return StatusResponse()


@order_router.post("/{order_id}/received", response_model=StatusResponse)
async def confirm_receipt(order_id: str, x_actor_id: str = Header()) -> StatusResponse:
    current_domain.process(ConfirmReceipt(customer_order_id=order_id, customer_id=x_actor_id), asynchronous=False)
    return StatusResponse()


@order_router.post("/{order_id}/rate", response_model=StatusResponse)
async def rate_order(order_id: str, body: RateOrderRequest, x_actor_id: str = Header()) -> StatusResponse:
    command = RateOrder(
        customer_order_id=order_id,
        customer_id=x_actor_id,
        rating=body.rating,
        feedback=body.feedback,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@order_router.post("/{order_id}/return", response_model=StatusResponse)
async def request_return(order_id: str, body: RequestReturnRequest, x_actor_id: str = Header()) -> StatusResponse:
    command = RequestReturn(customer_order_id=order_id, customer_id=x_actor_id, reason=body.reason)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Fulfillment Router (operator)
# ---------------------------------------------------------------------------
fulfillment_router = APIRouter(prefix="/fulfillment-orders", tags=["fulfillment"])


@fulfillment_router.get("", response_model=list[FulfillmentOrderResponse])
async def list_fulfillment_orders(status: str | None = None, limit: int = 50) -> list[FulfillmentOrderResponse]:
    repo = current_domain.repository_for(FulfillmentOrder)
    orders = repo.with_status(status) if status else repo.latest(limit)
    return [_fulfillment_order_response(order) for order in orders]


@fulfillment_router.get("/by-product/{product_id}", response_model=list[ProductOrderResponse])
async def list_orders_for_product(product_id: str) -> list[ProductOrderResponse]:
    return [
        ProductOrderResponse(
            fulfillment_order_id=str(line.fulfillment_order_id),
            order_number=line.order_number,
            quantity=line.quantity,
            line_total=line.line_total,
            is_anchor=bool(line.is_anchor),
            status=line.status,
            placed_at=line.placed_at,
        )
        for line in orders_for_product(product_id)
    ]


@fulfillment_router.get("/{order_id}", response_model=FulfillmentOrderResponse)
async def get_fulfillment_order(order_id: str) -> FulfillmentOrderResponse:
    order = current_domain.repository_for(FulfillmentOrder).get(order_id)
    return _fulfillment_order_response(order)


@fulfillment_router.put("/{order_id}/status", response_model=StatusResponse)
async def advance_order_status(
    order_id: str, body: AdvanceStatusRequest, x_actor_id: str | None = Header(default=None)
) -> StatusResponse:
    command = AdvanceOrderStatus(fulfillment_order_id=order_id, status=body.status, changed_by=x_actor_id)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@fulfillment_router.post("/{order_id}/repair", response_model=RepairResponse)
async def repair_order_copies(order_id: str) -> RepairResponse:
    repaired = current_domain.process(ReconcileOrderCopies(fulfillment_order_id=order_id), asynchronous=False)
    return RepairResponse(repaired=bool(repaired))


# ---------------------------------------------------------------------------
# Inventory Router
# ---------------------------------------------------------------------------
inventory_router = APIRouter(prefix="/inventory", tags=["inventory"])


def _inventory_response(record):
    return InventoryResponse(
        product_id=str(record.product_id),
        product_name=record.product_name,
        sizes={s.size: s.stock for s in record.sizes},
        total_stock=record.total_stock,
        purchased_count=record.purchased_count or 0,
    )


@inventory_router.post("", status_code=201, response_model=InventoryResponse)
async def register_inventory(body: RegisterInventoryRequest) -> InventoryResponse:
    command = RegisterInventory(
        product_id=body.product_id,
        product_name=body.product_name,
        sizes=json.dumps(body.sizes),
    )
    current_domain.process(command, asynchronous=False)
    return _inventory_response(current_domain.repository_for(InventoryRecord).for_product(body.product_id))


@inventory_router.put("/{product_id}/sizes/{size}", response_model=InventoryResponse)
async def restock_size(product_id: str, size: str, body: RestockRequest) -> InventoryResponse:
    current_domain.process(RestockSize(product_id=product_id, size=size, quantity=body.quantity), asynchronous=False)
    return _inventory_response(current_domain.repository_for(InventoryRecord).for_product(product_id))


@inventory_router.get("/{product_id}", response_model=InventoryResponse)
async def get_inventory(product_id: str) -> InventoryResponse:
    record = current_domain.repository_for(InventoryRecord).for_product(product_id)
    if record is None:
        raise ObjectNotFoundError({"_entity": [f"No inventory registered for product `{product_id}`"]})
    return _inventory_response(record)


# ---------------------------------------------------------------------------
# Analytics Router
# ---------------------------------------------------------------------------
analytics_router = APIRouter(prefix="/analytics", tags=["analytics"])


def _bucket_response(period, key):
    bucket = bucket_for(period, key) or SalesBucket.empty(period, bucket_start(period, key))
    return BucketResponse(
        bucket_key=bucket.bucket_key,
        period=bucket.period,
        per_slot=bucket.slots,
        total=bucket.total,
        quantity=bucket.quantity,
        updated_at=bucket.updated_at,
    )


@analytics_router.get("/weekly/{key}", response_model=BucketResponse)
async def get_weekly_bucket(key: str) -> BucketResponse:
    return _bucket_response(BucketPeriod.WEEK, key)


@analytics_router.get("/monthly/{key}", response_model=BucketResponse)
async def get_monthly_bucket(key: str) -> BucketResponse:
    return _bucket_response(BucketPeriod.MONTH, key)


@analytics_router.get("/sales", response_model=list[SaleResponse])
async def list_recent_sales(limit: int = 50) -> list[SaleResponse]:
    return [
        SaleResponse(
            order_id=str(sale.order_id),
            order_number=sale.order_number,
            amount=sale.amount,
            quantity=sale.quantity,
            week_key=sale.week_key,
            month_key=sale.month_key,
            occurred_at=sale.occurred_at,
        )
        for sale in recent_sales(limit)
    ]


# ---------------------------------------------------------------------------
# Product Rating Router
# ---------------------------------------------------------------------------
rating_router = APIRouter(prefix="/products", tags=["ratings"])


@rating_router.get("/{product_id}/rating", response_model=ProductRatingResponse)
async def get_product_rating(product_id: str) -> ProductRatingResponse:
    try:
        rating = current_domain.repository_for(ProductRating).get(product_id)
    except ObjectNotFoundError:
        return ProductRatingResponse(product_id=product_id)
    return ProductRatingResponse(
        product_id=str(rating.product_id),
        average_rating=rating.average_rating,
        review_count=rating.review_count,
    )
