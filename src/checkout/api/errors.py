"""HTTP mapping for checkout errors on top of protean's default handlers."""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers as register_protean_handlers

from checkout.exceptions import TransactionFailed


async def _transaction_failed_handler(request: Request, exc: TransactionFailed) -> JSONResponse:
    return JSONResponse(status_code=503, content={"error": exc.message, "retryable": True})


def register_exception_handlers(app: FastAPI) -> None:
    """ValidationError -> 400, ObjectNotFoundError -> 404, TransactionFailed -> 503."""
    register_protean_handlers(app)
    app.add_exception_handler(TransactionFailed, _transaction_failed_handler)
