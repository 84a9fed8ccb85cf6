"""
Error rendering for domain exceptions and unhandled failures.

Domain errors are turned into JSON by a FastAPI exception handler.
Anything else reaches the pure ASGI middleware (not BaseHTTPMiddleware,
which would break the session dependency) and becomes a JSON 500.
"""
import json

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from backoffice.core.exceptions import BackofficeError
from backoffice.core.logging import get_logger

logger = get_logger(__name__)


async def backoffice_error_handler(request: Request, exc: BackofficeError) -> JSONResponse:
    logger.warning(
        "Request rejected",
        error=exc.error_code,
        message=exc.message,
        status_code=exc.status_code,
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(BackofficeError, backoffice_error_handler)


class ErrorHandlerMiddleware:
    """
    Catches exceptions nothing else handled and answers with a JSON 500.

    HTTPException passes through untouched; FastAPI renders those.
    """

    def __init__(self, app: ASGIApp) -> None:
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
        except HTTPException:
            raise
        except Exception as e:
            logger.exception(
                "Unhandled exception",
                error=str(e),
                path=scope.get("path", "unknown"),
                response_started=response_started,
            )
            if response_started:
                # Headers already sent, can't change the response
                raise

            body = json.dumps({
                "detail": "Internal server error",
                "error": "internal",
            }).encode("utf-8")

            await send({
                "type": "http.response.start",
                "status": 500,
                "headers": [
                    [b"content-type", b"application/json"],
                    [b"content-length", str(len(body)).encode()],
                ],
            })
            await send({
                "type": "http.response.body",
                "body": body,
            })
