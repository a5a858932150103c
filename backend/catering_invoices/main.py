"""
Main Entry Point - FastAPI Application
Project: Catering Invoices

Configures the FastAPI application with middleware, routers and lifecycle.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from catering_invoices.api.routes import api_router
from catering_invoices.core.config import Settings, get_settings
from catering_invoices.core.database import (
    close_db,
    create_engine_from_settings,
    create_session_factory,
    init_db,
)
from catering_invoices.core.exceptions import AppException
from catering_invoices.repositories import MemoryInvoiceRepository, SqlInvoiceRepository
from catering_invoices.services.invoice_number import InvoiceNumberGenerator
from catering_invoices.services.invoice_service import InvoiceService

# ------------------------------------------------------------
# Logging configuration
# ------------------------------------------------------------
logging.basicConfig(
    level=get_settings().log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# ------------------------------------------------------------
# Exception Handlers
# ------------------------------------------------------------
async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """
    Handler for every AppException subclass.

    Uses the status code and error code carried by the exception. Details
    of 5xx errors are logged and replaced by a generic message.
    """
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.detail, exc_info=exc)
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": "Internal server error", "error_code": exc.error_code},
        )

    content = {"detail": exc.detail, "error_code": exc.error_code}
    if exc.extra:
        content.update(exc.extra)
    return JSONResponse(status_code=exc.status_code, content=content)


async def request_validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Handler for malformed requests (body, path or query parameters).

    Converts the error into HTTP 400 with one entry per invalid field.
    """
    errors = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", ""), "type": err.get("type", "")}
        for err in exc.errors()
    ]
    logger.debug("Rejected %s %s: %s", request.method, request.url.path, errors)
    return JSONResponse(
        status_code=400,
        content={
            "detail": "Request validation failed",
            "error_code": "VALIDATION_ERROR",
            "errors": errors,
        },
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Generic handler for every uncaught exception.

    Converts the exception into HTTP 500 and logs the error.
    """
    logger.error("Unhandled exception: %s", exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )


# ------------------------------------------------------------
# Lifespan Handler
# ------------------------------------------------------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manages the application lifecycle.

    - Startup: builds the invoice store and the service. With the database
      backend it also creates the tables and continues the number sequence
      after the invoices already stored.
    - Shutdown: closes the database connections
    """
    settings: Settings = app.state.settings
    logger.info("Starting %s v%s", settings.app_name, settings.app_version)

    engine = None
    generator = InvoiceNumberGenerator(
        prefix=settings.invoice_number_prefix,
        padding=settings.invoice_number_padding,
    )

    if settings.storage_backend == "database":
        engine = create_engine_from_settings(settings)
        await init_db(engine)
        repository = SqlInvoiceRepository(create_session_factory(engine))
        generator.seed(invoice.number for invoice in await repository.list_invoices())
    else:
        repository = MemoryInvoiceRepository()

    app.state.invoice_service = InvoiceService(
        repository,
        generator,
        default_tax_rate=settings.default_tax_rate,
    )
    logger.info("Application started (storage: %s)", settings.storage_backend)

    yield

    logger.info("Shutting down application...")
    if engine is not None:
        await close_db(engine)
    logger.info("Application stopped")


# ------------------------------------------------------------
# FastAPI Application
# ------------------------------------------------------------
def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Settings to use; defaults to ``get_settings()``

    Returns:
        FastAPI: The configured application
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Invoice management for a catering business - Backend API",
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )
    app.state.settings = settings

    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    # ------------------------------------------------------------
    # Middleware CORS
    # ------------------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get(
        "/health",
        name="Health Check",
        summary="Check the application status",
        tags=["System"],
    )
    async def health_check() -> dict[str, str]:
        """
        Health check endpoint.

        Returns:
            dict: Application status
        """
        return {
            "status": "healthy",
            "app": settings.app_name,
            "version": settings.app_version,
            "environment": settings.app_env,
            "storage": settings.storage_backend,
        }

    app.include_router(api_router)
    return app


app = create_app()
