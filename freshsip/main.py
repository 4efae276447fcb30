"""Main FastAPI application."""
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError

from freshsip.api.v1.api import api_router
from freshsip.config.database import check_mongo_connection, create_mongo_client, ensure_indexes, get_database
from freshsip.config.logging import get_logger, setup_logging
from freshsip.config.settings import Settings, get_settings
from freshsip.core.exceptions import OrderLifecycleError
from freshsip.core.middleware import (
    CorrelationIdMiddleware,
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
)

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the MongoDB client for the lifetime of the process."""
    settings: Settings = app.state.settings
    logger.info(f"Starting {settings.PROJECT_NAME} v{settings.VERSION}")
    logger.info(f"Environment: {settings.ENVIRONMENT}")

    client = create_mongo_client(settings)
    app.state.mongo_client = client
    app.state.database = get_database(client, settings)
    try:
        ensure_indexes(app.state.database)
    except PyMongoError as e:
        # The server may come up after us; queries will retry on their own
        logger.warning(f"Could not ensure indexes at startup: {e}")

    yield

    client.close()
    app.state.database = None
    logger.info("MongoDB client closed")


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    message = str(first.get("msg", "Invalid request")).replace("Value error, ", "")
    location = [str(part) for part in first.get("loc", ()) if part != "body"]
    if first.get("type") == "missing" and location:
        return f"{location[-1]} is required"
    return message


def register_exception_handlers(app: FastAPI) -> None:

    @app.exception_handler(OrderLifecycleError)
    async def order_lifecycle_exception_handler(request: Request, exc: OrderLifecycleError):
        level = logger.error if exc.status_code >= 500 else logger.info
        level(
            f"{request.method} {request.url.path} failed: {exc.message}",
            extra={"request_id": getattr(request.state, "request_id", None)},
        )
        return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(exc.to_response()))

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"error": _validation_message(exc)})

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Catch all unhandled exceptions."""
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    is_prod = settings.ENVIRONMENT.lower() == "production"

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        openapi_url=None if is_prod else f"{settings.API_V1_STR}/openapi.json",
        docs_url=None if is_prod else "/docs",
        redoc_url=None if is_prod else "/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.database = None

    # Last added = first executed; CORS runs first so preflights short-circuit
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(CorrelationIdMiddleware)
    app.add_middleware(SecurityHeadersMiddleware, environment=settings.ENVIRONMENT)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    @app.get("/")
    async def root():
        return {
            "success": True,
            "name": settings.PROJECT_NAME,
            "version": settings.VERSION,
            "docs": "/docs" if not is_prod else None,
            "environment": settings.ENVIRONMENT,
        }

    @app.get("/health")
    def health_check(request: Request):
        """Health check endpoint."""
        client = getattr(request.app.state, "mongo_client", None)
        database_ok = check_mongo_connection(client)
        return JSONResponse(
            status_code=200 if database_ok else 503,
            content={
                "success": database_ok,
                "status": "healthy" if database_ok else "degraded",
                "database": "connected" if database_ok else "unavailable",
                "environment": settings.ENVIRONMENT,
                "version": settings.VERSION,
            },
        )

    app.include_router(api_router, prefix=settings.API_V1_STR)
    return app


setup_logging()
app = create_app()


if __name__ == "__main__":
    import uvicorn

    _settings = get_settings()
    uvicorn.run(
        "freshsip.main:app",
        host=_settings.HOST,
        port=_settings.PORT,
        reload=_settings.DEBUG,
        log_config=None,
    )
