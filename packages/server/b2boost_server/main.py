"""
B2Boost API Server

Entry point for the FastAPI application.
"""

import structlog
import uvicorn
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException

from b2boost_server.api import router as api_router
from b2boost_server.core.config import get_settings
from b2boost_server.core.database import close_client
from b2boost_server.core.logs import configure_logging
from b2boost_server.core.middleware import (
    SecurityHeadersMiddleware,
    http_exception_handler,
    validation_exception_handler,
)

settings = get_settings()
log = structlog.get_logger()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="B2Boost",
        description="Multi-tenant B2B commerce backend.",
        version="0.1.0",
        docs_url="/docs",
        openapi_url="/openapi.json",
    )

    # Middleware (outermost first)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "PUT", "DELETE"],
        allow_headers=["Content-Type", "Authorization"],
    )

    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    app.include_router(api_router, prefix="/api")

    @app.on_event("startup")
    async def on_startup():
        log.info("server.starting", database=settings.mongodb_database)

    @app.on_event("shutdown")
    async def on_shutdown():
        log.info("server.stopping")
        close_client()

    return app


app = create_app()


def run() -> None:
    """CLI entry point for the API server."""
    configure_logging(settings.log_level, settings.log_format)
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
