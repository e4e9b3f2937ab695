"""Storefront FastAPI application.

Serves the Ordering (orders, coupons) and Payments (intents, verification)
contexts. Both register their elements on the ``ordering`` domain, which is
initialized here at module level so uvicorn workers share it. PROTEAN_ENV
selects the database overlay from ``domain.toml``.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from protean.exceptions import (
    ExpectedVersionError,
    InvalidDataError,
    InvalidStateError,
    ObjectNotFoundError,
    ValidationError,
)

from ordering.domain import init_domain, ordering
from shared.config import StorefrontSettings, get_settings, set_settings
from shared.exceptions import StorefrontError
from shared.logging import configure_logging

init_domain()

logger = structlog.get_logger(__name__)

# error category → (HTTP status, log level)
_ERROR_RESPONSES = {
    "validation": (400, "info"),
    "precondition": (409, "info"),
    "not_found": (404, "info"),
    "conflict": (409, "warning"),
    "integrity": (400, "warning"),
    "external_dependency": (502, "error"),
    "configuration": (503, "error"),
}

# protean exception → error category
_PROTEAN_CATEGORIES = (
    (ValidationError, "validation"),
    (InvalidDataError, "validation"),
    (ObjectNotFoundError, "not_found"),
    (InvalidStateError, "precondition"),
    (ExpectedVersionError, "conflict"),
)


def _messages(exc: Exception) -> dict:
    messages = getattr(exc, "messages", None)
    if messages is None and exc.args:
        messages = exc.args[0]
    if isinstance(messages, dict):
        return messages
    return {"_entity": [str(messages if messages is not None else exc)]}


def _error_response(request: Request, category: str, messages: dict) -> JSONResponse:
    status_code, level = _ERROR_RESPONSES.get(category, (500, "error"))
    getattr(logger, level)(
        "request.failed",
        method=request.method,
        path=request.url.path,
        status_code=status_code,
        error_category=category,
        messages=messages,
    )
    return JSONResponse(status_code=status_code, content={"error": category, "messages": messages})


async def storefront_error_handler(request: Request, exc: StorefrontError) -> JSONResponse:
    return _error_response(request, exc.category, exc.messages)


def _protean_error_handler(category: str):
    async def handler(request: Request, exc: Exception) -> JSONResponse:
        return _error_response(request, category, _messages(exc))

    return handler


def create_app(settings: StorefrontSettings | None = None) -> FastAPI:
    if settings is not None:
        set_settings(settings)
    settings = get_settings()
    configure_logging(settings)

    app = FastAPI(
        title="Storefront API",
        description="Direct-to-consumer storefront: orders, coupons and payments",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def domain_context_middleware(request: Request, call_next):
        """Push the ordering domain context for each request."""
        with ordering.domain_context():
            response = await call_next(request)
        return response

    app.add_exception_handler(StorefrontError, storefront_error_handler)
    for exc_class, category in _PROTEAN_CATEGORIES:
        app.add_exception_handler(exc_class, _protean_error_handler(category))

    # -----------------------------------------------------------------------
    # Routers
    # -----------------------------------------------------------------------
    from ordering.api.routes import admin_coupon_router, admin_order_router, coupon_router, order_router
    from payments.api.routes import router as payments_router

    app.include_router(order_router)
    app.include_router(admin_order_router)
    app.include_router(coupon_router)
    app.include_router(admin_coupon_router)
    app.include_router(payments_router)

    # -----------------------------------------------------------------------
    # Health
    # -----------------------------------------------------------------------
    @app.get("/health")
    async def health():
        return JSONResponse(
            content={
                "status": "ok",
                "domain": ordering.name,
                "environment": settings.environment,
                "gateway": settings.gateway,
                "storage": ordering.config["databases"]["default"]["provider"],
            }
        )

    return app


app = create_app()
