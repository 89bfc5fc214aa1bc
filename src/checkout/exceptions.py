"""Errors raised at the edges of the checkout domain.

Validation failures subclass protean's ``ValidationError`` so they carry a
field-to-messages map and surface as 400s through the FastAPI exception
handlers. ``TransactionFailed`` is infrastructure trouble and surfaces as 503.
"""

from protean.exceptions import ValidationError


class InvalidOrder(ValidationError):
    """The cart selection or checkout form cannot become an order."""


class IllegalTransition(ValidationError):
    """An order status change was refused by the status machine."""


class StockExceeded(ValidationError):
    """A requested cart quantity is larger than the stock on hand."""


class TransactionFailed(Exception):
    """Order placement could not commit. Nothing was written."""

    def __init__(self, message="Order placement failed"):
        super().__init__(message)
        self.message = message
