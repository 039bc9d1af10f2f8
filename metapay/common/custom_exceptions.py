from fastapi import FastAPI, HTTPException, Request,status
from fastapi.exceptions import RequestValidationError
from metapay.common.logging_setup import get_logger
from metapay.common.utils import build_error, json_error
from metapay.processor.client import GatewayError

logger = get_logger("metapay.errors")


def first_validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    err = errors[0]
    msg = str(err.get("msg", "Invalid request"))
    # pydantic prefixes messages raised from custom validators
    if msg.startswith("Value error, "):
        msg = msg[len("Value error, "):]
    loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")]
    if err.get("type") in ("missing", "json_invalid") and loc:
        return f"{'.'.join(loc)}: {msg}"
    return msg


async def fallback_handler(request: Request, exc: Exception):

    logger.error(
        "unexpected.exception",
        extra={
            "path": request.url.path,
            "method": request.method,
        },
        exc_info=exc,
    )

    payload = build_error("Internal server error", code="SERVER_ERROR")
    return json_error(payload, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning(
        "request.validation_failed",
        extra={
            "errors": exc.errors(),
            "path": request.url.path,
        },
    )

    payload = build_error(first_validation_message(exc), code="INVALID_REQUEST")
    return json_error(payload, status_code=status.HTTP_400_BAD_REQUEST)


async def http_exception_handler(request: Request, exc: HTTPException):

    payload = build_error(exc.detail, code=f"HTTP_{exc.status_code}")
    return json_error(payload, status_code=exc.status_code, headers=getattr(exc, "headers", None))


async def gateway_exception_handler(request: Request, exc: GatewayError):
    logger.error(
        "processor.call_failed",
        extra={"path": request.url.path, "processor_status": exc.status, "error": exc.message},
    )
    # processor failures surface as 500 with the processor's message
    payload = build_error(exc.message, code="PROCESSOR_ERROR")
    return json_error(payload, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


def register_all_exceptions(app: FastAPI):

    app.add_exception_handler(
        Exception, # catch all unidentified/unhandled exceptions
        fallback_handler
    )

    app.add_exception_handler(
        RequestValidationError,
        validation_exception_handler
    )

    app.add_exception_handler(
        HTTPException,
        http_exception_handler
    )

    app.add_exception_handler(
        GatewayError,
        gateway_exception_handler
    )
