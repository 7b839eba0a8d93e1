"""
AquPark shop service
Accounts, product catalog, shopping cart and checkout over one relational database
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from typing import Optional
import os

from aqupark.core import ServiceHealth, setup_logging, setup_error_handlers, RequestLoggingMiddleware, get_logger
from aqupark.core_settings import Settings, get_settings
from aqupark.infrastructure.db import Database
from aqupark.api import admin, cart, orders, products, users

SERVICE_DESCRIPTION = "Park shop: accounts, catalog, cart and checkout"

logger = get_logger(__name__)

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()

    setup_logging(
        service_name=settings.SERVICE_NAME,
        level=settings.LOG_LEVEL,
        version=settings.SERVICE_VERSION,
    )

    db = Database.from_settings(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifecycle management"""
        logger.info(f"Starting {settings.SERVICE_NAME} version {settings.SERVICE_VERSION}")
        if settings.DB_CREATE_ALL:
            try:
                db.init_models()
                logger.info("Database models initialized")
            except Exception as e:
                logger.error(f"Failed to initialize database models: {e}")
                raise

        yield

        logger.info(f"Shutting down {settings.SERVICE_NAME}")
        db.dispose()

    app = FastAPI(
        title=settings.SERVICE_NAME,
        description=SERVICE_DESCRIPTION,
        version=settings.SERVICE_VERSION,
        lifespan=lifespan,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json"
    )
    app.state.settings = settings
    app.state.db = db

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    setup_error_handlers(app)

    health_service = ServiceHealth(settings.SERVICE_NAME, settings.SERVICE_VERSION, db.engine)
    app.include_router(health_service.create_health_router())

    app.include_router(users.router)
    app.include_router(products.router)
    app.include_router(cart.router)
    app.include_router(orders.router)
    app.include_router(admin.router)

    @app.get("/")
    async def root():
        return {
            "service": settings.SERVICE_NAME,
            "version": settings.SERVICE_VERSION,
            "status": "running",
            "docs": "/api/docs"
        }

    return app

app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
