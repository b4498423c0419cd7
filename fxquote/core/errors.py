"""Exception taxonomy and FastAPI error handlers.

Service-level failures derive from QuoteError and carry their HTTP status so
the handlers below stay generic. Every error body uses the ``error`` key.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, List

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status

logger = logging.getLogger("fxquote.errors")


class QuoteError(Exception):
    """Base for caller-visible quote failures."""

    def __init__(self, message: str, status_code: int = status.HTTP_400_BAD_REQUEST):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class QuoteValidationError(QuoteError):
    """Bad or missing request input; one message per violated field."""

    def __init__(self, messages: Iterable[str]):
        self.messages: List[str] = list(messages)
        super().__init__("; ".join(self.messages))


class UnsupportedCurrencyError(QuoteError):
    def __init__(self, currency: str, supported: Iterable[str] = ()):
        supported = sorted(supported)
        message = f"Unsupported currency: {currency}"
        if supported:
            message += f". Supported: {', '.join(supported)}"
        super().__init__(message)
        self.currency = currency


class RateFetchError(QuoteError):
    """Remote rate source unreachable or returned unusable data."""


class InvalidPolicyError(ValueError):
    """Unknown rounding policy. Programmer error, not a client error."""

    def __init__(self, policy: Any):
        super().__init__(f"Unknown rounding policy: {policy}")
        self.policy = policy


# Handlers ---------------------------------------------------------


def quote_error_handler(request: Request, exc: QuoteError):  # type: ignore
    if isinstance(exc, QuoteValidationError):
        content: dict[str, Any] = {"error": exc.messages}
    else:
        content = {"error": exc.message}
    logger.info(
        "quote request rejected",
        extra={"path": request.url.path, "reason": exc.message},
    )
    return JSONResponse(status_code=exc.status_code, content=content)


def validation_error_handler(request: Request, exc: RequestValidationError):  # type: ignore
    messages = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p not in ("query", "body"))
        messages.append(f"{loc}: {err['msg']}" if loc else err["msg"])
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": messages},
    )


def http_error_handler(request: Request, exc):  # type: ignore
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": "not_found",
                "detail": f"No route for {request.method} {request.url.path}",
            },
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": "http_error", "detail": exc.detail},
    )


def server_error_handler(request: Request, exc: Exception):  # type: ignore
    logger.exception("unhandled exception")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "internal_error",
            "detail": "An unexpected error occurred.",
        },
    )
