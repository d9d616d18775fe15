"""Store error taxonomy.

Raised from the cart/order/payment operations and rendered by the shared
exception handlers as ``{"success": false, "message": ...}``.
"""

from libs.common.error_handler import AppError


class StoreError(AppError):
    """Base class for store failures."""


class ValidationError(StoreError):
    """Malformed or missing input. Not retried."""

    status_code = 400


class NotFoundError(StoreError):
    """Referenced cart, order, product or city does not exist."""

    status_code = 404


class AuthenticityError(StoreError):
    """Payment signature mismatch. The client must restart checkout."""

    status_code = 400


class ConsistencyFailure(StoreError):
    """Cart empty at checkout, product vanished, or paid amount mismatch."""

    status_code = 400


class TransientInfra(StoreError):
    """Gateway unreachable or database failure. Safe to retry the request."""

    status_code = 500
