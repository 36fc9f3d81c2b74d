"""
FastAPI Application Entry Point - Marketplace Service
"""
import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_fastapi_instrumentator import Instrumentator
from starlette.exceptions import HTTPException as StarletteHTTPException

from marketplace import __version__
from marketplace.api import health, orders, products, reviews, vendors
from marketplace.config import settings
from marketplace.database import init_db
from marketplace.exceptions import MarketplaceError
from marketplace.logging_config import setup_logging
from marketplace.schemas.common import ErrorResponse

logger = logging.getLogger(__name__)

# Create FastAPI application
app = FastAPI(
    title="Marketplace Service",
    description="Multi-vendor marketplace: catalog, checkout, order lifecycle and reviews",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc"
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health.router)
app.include_router(orders.router)
app.include_router(products.router)
app.include_router(vendors.router)
app.include_router(reviews.router)

# Prometheus metrics
Instrumentator().instrument(app).expose(app)


def error_response(status_code: int, message: str, errors=None) -> JSONResponse:
    body = ErrorResponse(message=message, errors=errors or None)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


@app.exception_handler(MarketplaceError)
def marketplace_error_handler(request: Request, exc: MarketplaceError):
    if exc.status_code >= 500:
        logger.error(exc.message, extra={'extra_fields': {'path': request.url.path}})
    return error_response(exc.status_code, exc.message, exc.errors)


@app.exception_handler(RequestValidationError)
def validation_error_handler(request: Request, exc: RequestValidationError):
    return error_response(400, "Validation failed", jsonable_encoder(exc.errors()))


@app.exception_handler(StarletteHTTPException)
def http_error_handler(request: Request, exc: StarletteHTTPException):
    return error_response(exc.status_code, str(exc.detail))


@app.exception_handler(Exception)
def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(
        "Unhandled error",
        extra={'extra_fields': {'path': request.url.path, 'method': request.method}}
    )
    return error_response(500, "Internal server error")


@app.on_event("startup")
def startup_event():
    """Initialize logging and database on startup"""
    setup_logging(settings.SERVICE_NAME, settings.LOG_LEVEL)
    logger.info(f"Starting {settings.SERVICE_NAME}...")
    init_db()
    logger.info("Database initialized")
    logger.info(f"RabbitMQ URL: {settings.RABBITMQ_URL}, events enabled: {settings.EVENTS_ENABLED}")
    logger.info(f"{settings.SERVICE_NAME} is running on port {settings.SERVICE_PORT}")


@app.on_event("shutdown")
def shutdown_event():
    """Cleanup on shutdown"""
    logger.info(f"Shutting down {settings.SERVICE_NAME}...")
