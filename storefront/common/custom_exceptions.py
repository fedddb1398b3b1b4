import traceback
from fastapi import FastAPI, Request,status
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException
from storefront.common.logging_setup import get_logger
from storefront.common.utils import build_error, json_error
from storefront.common.constants import GENERIC_SERVER_ERROR, request_id_ctx
from storefront.config.settings import config_settings

logger = get_logger("storefront.errors")


async def fallback_handler(request: Request, exc: Exception):

    rid = request_id_ctx.get(None)

    logger.error(
        "unexpected.exception",
        extra={
            "path": request.url.path,
            "method": request.method,
        },
        exc_info=exc,
    )

    extra = None
    if config_settings.EXPOSE_ERROR_DETAILS:
        extra = {"details": {
            "type": type(exc).__name__,
            "message": str(exc),
            "traceback": traceback.format_exception(type(exc), exc, exc.__traceback__),
        }}

    payload = build_error(GENERIC_SERVER_ERROR, extra=extra, request_id=rid)
    return json_error(payload, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


def _first_validation_message(errors) -> str:
    if not errors:
        return "Invalid request"
    first = errors[0]
    loc = [str(p) for p in first.get("loc", ()) if p not in ("body", "query", "path")]
    if first.get("type") == "json_invalid":
        return "Invalid JSON body"
    if loc:
        return f"Invalid field '{'.'.join(loc)}': {first.get('msg')}"
    return str(first.get("msg") or "Invalid request")


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    rid = request_id_ctx.get(None)
    errors = exc.errors()
    logger.warning(
        "request.validation_failed",
        extra={
            "errors": errors,
            "path": request.url.path,
        },
    )

    payload = build_error(_first_validation_message(errors), request_id=rid)
    return json_error(payload, status_code=status.HTTP_400_BAD_REQUEST)


async def http_exception_handler(request: Request, exc: HTTPException):

    rid = request_id_ctx.get(None)

    # detail is either a plain message or {"error": msg, **extra}
    detail = exc.detail
    extra = None
    if isinstance(detail, dict):
        extra = {k: v for k, v in detail.items() if k != "error"}
        message = detail.get("error")
    else:
        message = detail

    payload = build_error(message, extra=extra, request_id=rid)
    return json_error(payload, status_code=exc.status_code, headers=getattr(exc, "headers", None))


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
