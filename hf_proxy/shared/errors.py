"""
Error taxonomy for the proxy and the FastAPI handlers that render it.

Every error body uses the OpenAI envelope::

    {"error": {"message": "...", "type": "..."}}
"""

from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from hf_proxy.shared.config import logger


class ProxyError(Exception):
    status_code = 500
    error_type = "internal_server_error"

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class InvalidRequestError(ProxyError):
    """The client sent something we cannot forward."""
    status_code = 400
    error_type = "invalid_request_error"


class UpstreamError(ProxyError):
    """The inference API failed or answered with a non-2xx status."""
    error_type = "upstream_error"


def error_body(message: str, error_type: str) -> dict:
    return {"error": {"message": message, "type": error_type}}


def error_response(message: str, error_type: str, status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=error_body(message, error_type))


async def proxy_error_handler(request: Request, exc: ProxyError) -> JSONResponse:
    logger.warning(
        "%s (%s) on %s %s: %s",
        exc.error_type, exc.status_code, request.method, request.url.path, exc.message
    )
    return error_response(exc.message, exc.error_type, exc.status_code)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    parts = []
    for err in exc.errors():
        location = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{location}: {err.get('msg')}" if location else str(err.get("msg")))
    message = "; ".join(parts) or "Invalid request"
    logger.info("Rejected invalid request on %s: %s", request.url.path, message)
    return error_response(message, InvalidRequestError.error_type, InvalidRequestError.status_code)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ProxyError, proxy_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
