# backend/gemhub/main.py
"""
FastAPI application entry point.

This file:
- Configures application-wide logging
- Creates the database tables and starts the price refresh scheduler
- Creates the FastAPI application
- Registers global exception handlers
- Registers all routers
- Defines global endpoints (health checks)
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from gemhub.config import settings
from gemhub.database import SessionLocal, check_database_health, init_database
from gemhub.dependencies import get_change_notifier, get_price_refresh_service
from gemhub.middleware import CorrelationIdMiddleware
from gemhub.routers import (
    analytics_router,
    portfolios_router,
    prices_router,
    transactions_router,
    valuation_router,
)
from gemhub.schemas.errors import ErrorDetail, ValidationErrorDetail
from gemhub.services.exceptions import (
    ServiceError,
    ValidationError,
    CategoryMismatchError,
    NotFoundError,
    PersistenceError,
    MarketDataError,
    TickerNotFoundError,
    FXRateError,
)
from gemhub.services.market_data import PriceRefreshScheduler, refresh_all_portfolios
from gemhub.utils import correlation_scope, new_correlation_id, setup_logging

logger = logging.getLogger(__name__)

# =============================================================================
# LOGGING SETUP (must be before app creation)
# =============================================================================

setup_logging()


# =============================================================================
# LIFESPAN
# =============================================================================

def run_scheduled_refresh() -> None:
    """One scheduler tick: refresh every portfolio under its own correlation id."""
    with correlation_scope(new_correlation_id("refresh")):
        refresh_all_portfolios(SessionLocal, get_price_refresh_service(), get_change_notifier())


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_database()

    scheduler: PriceRefreshScheduler | None = None
    if settings.price_refresh_enabled:
        scheduler = PriceRefreshScheduler(settings.price_refresh_interval_seconds, run_scheduled_refresh)
        scheduler.start()
        logger.info(
            f"Price refresh scheduled every {settings.price_refresh_interval_seconds}s "
            f"(mode={settings.price_mode})"
        )

    yield

    if scheduler is not None:
        scheduler.stop()


# =============================================================================
# APPLICATION SETUP
# =============================================================================

app = FastAPI(
    title=settings.app_name,
    description="Crypto and FII portfolio tracking, valuation and rebalancing API",
    version="0.1.0",
    debug=settings.debug,
    lifespan=lifespan,
)


# =============================================================================
# MIDDLEWARE (order matters: last added = first executed)
# =============================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Extracts/generates correlation IDs and adds them to response headers
app.add_middleware(CorrelationIdMiddleware)


# =============================================================================
# GLOBAL EXCEPTION HANDLERS
# =============================================================================
# Service-layer exceptions become consistent ErrorDetail responses.
# Starlette picks the handler of the closest class in the exception's MRO,
# so subclasses registered here win over their parents.
# =============================================================================

@app.exception_handler(CategoryMismatchError)
async def category_mismatch_handler(request: Request, exc: CategoryMismatchError) -> JSONResponse:
    """Handle a category that contradicts the existing asset (400)."""
    logger.warning(f"Category mismatch: {exc}")
    return JSONResponse(
        status_code=400,
        content=ErrorDetail(
            error="CategoryMismatchError",
            message=str(exc),
            details={
                "ticker": exc.ticker,
                "existing": exc.existing,
                "requested": exc.requested,
            },
        ).model_dump(),
    )


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    """Handle validation errors (400)."""
    logger.warning(f"Validation error: {exc}")
    return JSONResponse(
        status_code=400,
        content=ErrorDetail(
            error=type(exc).__name__,
            message=str(exc),
            details={"field": exc.field} if exc.field else None,
        ).model_dump(),
    )


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    """Handle missing portfolios, assets and transactions (404)."""
    logger.warning(f"Not found: {exc}")
    return JSONResponse(
        status_code=404,
        content=ErrorDetail(
            error=type(exc).__name__,
            message=str(exc),
            details={"resource_type": exc.resource_type, "resource_id": str(exc.resource_id)},
        ).model_dump(),
    )


@app.exception_handler(PersistenceError)
async def persistence_error_handler(request: Request, exc: PersistenceError) -> JSONResponse:
    """Handle storage failures (503). The last saved state is intact."""
    logger.error(f"Persistence error: {exc}")
    return JSONResponse(
        status_code=503,
        content=ErrorDetail(
            error="PersistenceError",
            message="Portfolio could not be saved. Please try again.",
            details=None,
        ).model_dump(),
    )


@app.exception_handler(TickerNotFoundError)
async def ticker_not_found_handler(request: Request, exc: TickerNotFoundError) -> JSONResponse:
    """Handle ticker not found on market data provider (404)."""
    logger.warning(f"Ticker not found on provider: {exc.ticker}")
    return JSONResponse(
        status_code=404,
        content=ErrorDetail(
            error="TickerNotFoundError",
            message=str(exc),
            details={"ticker": exc.ticker},
        ).model_dump(),
    )


@app.exception_handler(MarketDataError)
async def market_data_error_handler(request: Request, exc: MarketDataError) -> JSONResponse:
    """Handle price feed failures (503)."""
    logger.error(f"Market data error: {exc}")
    return JSONResponse(
        status_code=503,
        content=ErrorDetail(
            error=type(exc).__name__,
            message=str(exc),
            details={"provider": exc.provider} if exc.provider else None,
        ).model_dump(),
    )


@app.exception_handler(FXRateError)
async def fx_rate_error_handler(request: Request, exc: FXRateError) -> JSONResponse:
    """Handle unsupported currency pairs and conversion errors (400)."""
    logger.warning(f"FX error: {exc}")
    return JSONResponse(
        status_code=400,
        content=ErrorDetail(
            error=type(exc).__name__,
            message=str(exc),
            details={
                "base_currency": exc.base_currency,
                "quote_currency": exc.quote_currency,
            } if exc.base_currency else None,
        ).model_dump(),
    )


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    """Handle generic service errors (500)."""
    logger.error(f"Service error: {exc}")
    return JSONResponse(
        status_code=500,
        content=ErrorDetail(
            error="ServiceError",
            message=str(exc),
            details=None,
        ).model_dump(),
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """
    Handle all HTTPExceptions with consistent error format.

    Converts FastAPI's default {"detail": "..."} format to our standard
    ErrorDetail format for API consistency.
    """
    error_types = {
        400: "BadRequestError",
        404: "NotFoundError",
        405: "MethodNotAllowedError",
        409: "ConflictError",
        422: "ValidationError",
        500: "InternalServerError",
        503: "ServiceUnavailableError",
    }
    error_type = error_types.get(exc.status_code, "HTTPError")

    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorDetail(
            error=error_type,
            message=str(exc.detail) if exc.detail else "An error occurred",
            details=None,
        ).model_dump(),
        headers=exc.headers,
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Handle Pydantic validation errors with consistent format.

    Converts the default 422 validation error to our ValidationErrorDetail format.
    """
    errors = []
    for error in exc.errors():
        errors.append({
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        })

    return JSONResponse(
        status_code=422,
        content=ValidationErrorDetail(
            error="ValidationError",
            message="Request validation failed",
            details=errors,
        ).model_dump(),
    )


# =============================================================================
# ROUTER REGISTRATION
# =============================================================================

app.include_router(portfolios_router)  # /portfolios, /portfolios/{id}, PATCH /portfolios/{id}/assets/{ticker}
app.include_router(transactions_router)  # /portfolios/{id}/transactions, /portfolios/{id}/assets/*
app.include_router(valuation_router)  # /portfolios/{id}/valuation, /portfolios/{id}/rebalance
app.include_router(analytics_router)  # /portfolios/{id}/analytics, /portfolios/{id}/export.csv
app.include_router(prices_router)  # /portfolios/{id}/prices/refresh


# =============================================================================
# GLOBAL ENDPOINTS
# =============================================================================

@app.get("/", tags=["Health"])
def root():
    """API root - returns basic application info."""
    return {
        "message": f"Welcome to {settings.app_name}!",
        "docs": "/docs",
        "redoc": "/redoc",
    }


@app.get("/health", tags=["Health"])
def health_check():
    """
    Health check endpoint.

    Returns HTTP 503 if the database is unreachable.

    **Response Status Codes:**
    - 200: Database reachable
    - 503: Database unhealthy - do not route traffic here
    """
    database = check_database_health()
    response_data = {
        "status": database["status"],
        "environment": settings.environment,
        "price_mode": settings.price_mode,
        "checks": {"database": database},
    }

    if database["status"] != "healthy":
        return JSONResponse(status_code=503, content=response_data)

    return response_data
