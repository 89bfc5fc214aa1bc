"""Storefront checkout FastAPI application.

Commands are processed synchronously per request inside the checkout
domain context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

# PROTEAN_ENV controls which config overlay is applied:
#   - "test"       -> event_processing = "sync"  (projectors fire in UoW)
#   - "production" -> event_processing = "async" (projectors fire via Engine)
from checkout.domain import checkout
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

checkout.init()

app = FastAPI(
    title="Storefront Checkout API",
    description="Carts, order placement, order status, stock, sales analytics and ratings",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the checkout domain context for each request."""
    if request.url.path == "/health":
        return await call_next(request)
    with checkout.domain_context():
        response = await call_next(request)
    return response


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from checkout.api import (  # noqa: E402
    analytics_router,
    cart_router,
    checkout_router,
    fulfillment_router,
    inventory_router,
    order_router,
    rating_router,
    register_exception_handlers,
)

register_exception_handlers(app)

app.include_router(cart_router)
app.include_router(checkout_router)
app.include_router(order_router)
app.include_router(fulfillment_router)
app.include_router(inventory_router)
app.include_router(analytics_router)
app.include_router(rating_router)


@app.get("/health")
async def health():
    return JSONResponse(content={"status": "ok", "domain": checkout.name})
