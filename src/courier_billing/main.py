"""FastAPI application entry point."""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.errors import register_exception_handlers
from .api.routes import charges, customers, health
from .config import settings


def create_app() -> FastAPI:
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(title=settings.app_name)
    if settings.frontend_allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(settings.frontend_allowed_origins),
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
    register_exception_handlers(app)

    @app.get("/")
    def root():
        return {
            "service": settings.app_name,
            "status": "online",
            "api_prefix": settings.api_prefix,
            "endpoints": {
                "customers": f"{settings.api_prefix}/customers",
                "charges": f"{settings.api_prefix}/charges",
                "health": f"{settings.api_prefix}/health",
            },
            "docs": "/docs",
        }

    app.include_router(health.router, prefix=settings.api_prefix)
    app.include_router(customers.router, prefix=settings.api_prefix)
    app.include_router(charges.router, prefix=settings.api_prefix)
    return app


app = create_app()
