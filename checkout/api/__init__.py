# checkout/api/__init__.py
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from checkout.domain.errors import CheckoutError
from checkout.domain.schemas import ErrorOut
from checkout.utils.logging import get_logger

logger = get_logger(__name__)

# documented on every router, rendered by the handlers below
ERROR_RESPONSES = {
    400: {"model": ErrorOut, "description": "Invalid request or business rule violation"},
    403: {"model": ErrorOut, "description": "Booking belongs to another user"},
    404: {"model": ErrorOut, "description": "Booking, cart item or variant not found"},
}


def _error(status_code: int, reason: str, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"reason": reason, "message": message})


async def checkout_error_handler(request: Request, exc: CheckoutError):
    return _error(exc.status_code, exc.reason, exc.message)


async def request_validation_handler(request: Request, exc: RequestValidationError):
    details = "; ".join(
        f"{'.'.join(str(p) for p in err['loc'] if p != 'body')}: {err['msg']}"
        for err in exc.errors()
    )
    return _error(400, "ValidationError", details or "Invalid request")


async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return _error(500, "InternalError", "Internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(CheckoutError, checkout_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)
