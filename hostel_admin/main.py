from __future__ import annotations

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from hostel_admin.api.router import api_router
from hostel_admin.config.logging import setup_logging
from hostel_admin.config.settings import settings
from hostel_admin.core.error_handlers import register_exception_handlers
from hostel_admin.core.middleware import register_middlewares
from hostel_admin.db.init_db import init_db


def create_app() -> FastAPI:
    """
    Application factory for the FastAPI app.

    - Configures title, version, debug mode from Settings.
    - Registers CORS, core middleware, and exception handlers.
    - Includes the API router under ``settings.API_PREFIX``.
    """
    app = FastAPI(
        title=settings.APP_NAME,
        debug=settings.DEBUG,
        version=settings.API_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # credentials cannot be combined with a wildcard origin
    wildcard = not settings.CORS_ORIGINS or settings.CORS_ORIGINS == ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if wildcard else settings.CORS_ORIGINS,
        allow_credentials=not wildcard,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_middlewares(app)
    register_exception_handlers(app)

    app.include_router(api_router, prefix=settings.API_PREFIX)

    @app.on_event("startup")
    async def on_startup() -> None:
        setup_logging()
        init_db()

    return app


app = create_app()


def run() -> None:
    """Console entry point."""
    uvicorn.run(
        "hostel_admin.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.RELOAD,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    run()
