import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core import errors
from .core.config import Settings, get_settings
from .core.logging import init_logging, request_context_middleware
from .routers import general, quote
from .services.quote_service import QuoteService


def create_app(
    settings_override: Settings | None = None,
    quote_service: QuoteService | None = None,
) -> FastAPI:
    """Application factory.

    settings_override: pass an already constructed Settings instance for tests
    to isolate environment. Falls back to cached get_settings().
    quote_service: inject a prebuilt service (e.g. with a stub rate fetcher);
    otherwise one is built from settings and shared by every request.
    """
    settings = settings_override or get_settings()
    if settings_override is not None:
        settings.init_post_load()
    # Initialize logging early
    init_logging(debug=settings.debug)

    app = FastAPI(
        title=settings.app_name, debug=settings.debug, version=settings.version
    )
    app.state.settings = settings
    app.state.quote_service = quote_service or QuoteService.from_settings(settings)
    logging.getLogger("fxquote").info(
        "quote service ready (provider=%s, cache capacity=%d, ttl=%ss)",
        settings.exchange_rate_provider,
        settings.cache_capacity,
        settings.rates_cache_ttl_seconds,
    )

    # Middleware (request id / structured logging)
    app.middleware("http")(request_context_middleware)

    # Error handlers
    app.add_exception_handler(errors.QuoteError, errors.quote_error_handler)
    app.add_exception_handler(StarletteHTTPException, errors.http_error_handler)
    app.add_exception_handler(RequestValidationError, errors.validation_error_handler)
    app.add_exception_handler(Exception, errors.server_error_handler)

    # Routers
    app.include_router(general.router)
    app.include_router(quote.router)

    return app


app = create_app()
