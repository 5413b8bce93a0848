import time
import uuid
from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from hf_proxy.shared.config import logger
from hf_proxy.shared.constants import CORS_HEADERS
from hf_proxy.shared.errors import error_response


class CORSHeadersMiddleware(BaseHTTPMiddleware):
    """
    Adds permissive CORS headers to every response and answers any
    OPTIONS preflight directly with an empty 204.
    """
    async def dispatch(
        self, request: Request, call_next
    ) -> Response:
        if request.method == "OPTIONS":
            return Response(status_code=204, headers=CORS_HEADERS)
        response = await call_next(request)
        response.headers.update(CORS_HEADERS)
        return response


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Injects a unique request ID into every incoming request for tracing.
    """
    async def dispatch(
        self, request: Request, call_next
    ) -> Response:
        request.state.request_id = request.headers.get('X-Request-ID', str(uuid.uuid4()))
        response = await call_next(request)
        response.headers["X-Request-ID"] = request.state.request_id
        return response


async def add_process_time_header(
    request: Request, call_next
) -> Response:
    """
    Adds a custom X-Process-Time header and logs request completion details.
    For streaming responses the time covers header commit only.
    """
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = str(process_time)

    logger.info(
        "Request completed",
        extra={
            "req_id": getattr(request.state, 'request_id', 'N/A'),
            "method": request.method,
            "path": request.url.path,
            "status": response.status_code,
            "duration_sec": round(process_time, 4)
        }
    )
    return response


class UnhandledErrorMiddleware:
    """
    Last line of defence: anything the exception handlers did not map
    becomes a generic 500 in the OpenAI error envelope. Plain ASGI so the
    error is answered here instead of being re-raised to the server.
    """
    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        response_started = False

        async def send_wrapper(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception as e:
            request = Request(scope)
            logger.exception(
                "Unhandled error on %s %s (req_id=%s)",
                request.method, request.url.path, getattr(request.state, 'request_id', 'N/A')
            )
            if response_started:
                raise
            response = error_response(str(e) or "Internal server error", "internal_server_error", 500)
            await response(scope, receive, send)


def install_middleware(app: FastAPI) -> None:
    """Registers middleware; the last one added runs outermost."""
    app.add_middleware(UnhandledErrorMiddleware)
    app.middleware("http")(add_process_time_header)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(CORSHeadersMiddleware)
