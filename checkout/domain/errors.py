# checkout/domain/errors.py


class CheckoutError(Exception):
    """Base for business failures surfaced to API clients as {reason, message}."""

    reason = "InternalError"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(CheckoutError):
    reason = "ValidationError"
    status_code = 400


class NotFound(CheckoutError):
    reason = "NotFound"
    status_code = 404


class Unauthorized(CheckoutError):
    reason = "Unauthorized"
    status_code = 403


class Conflict(CheckoutError):
    reason = "Conflict"
    status_code = 400


class InsufficientStock(CheckoutError):
    reason = "InsufficientStock"
    status_code = 400


class BelowMinimum(CheckoutError):
    reason = "BelowMinimum"
    status_code = 400


class StockExceeded(CheckoutError):
    reason = "StockExceeded"
    status_code = 400


class InconsistentBooking(CheckoutError):
    reason = "InconsistentBooking"
    status_code = 400


class EmptyCart(CheckoutError):
    reason = "EmptyCart"
    status_code = 400


class InvalidTransition(CheckoutError):
    reason = "InvalidTransition"
    status_code = 400
