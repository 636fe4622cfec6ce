"""FastAPI application factory"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from carteira_gateway.api.middleware import RequestIDMiddleware, MetricsMiddleware
from carteira_gateway.api.v1 import categories, classify, confirmations, installments, messages
from carteira_gateway.infrastructure.database.models import Base
from carteira_gateway.infrastructure.database.seed import seed_default_categories
from carteira_gateway.infrastructure.database.session import SessionLocal, engine
from carteira_gateway.infrastructure.observability.logging import setup_logging
from carteira_gateway.config import settings

# Setup structured logging
setup_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables and default categories on startup"""
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        seed_default_categories(db)
        db.commit()
    finally:
        db.close()
    yield


def create_app(init_db: bool = True) -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Carteira Gateway",
        description="Intent classification and wallet service for a Portuguese finance chat assistant",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan if init_db else None,
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(classify.router, prefix="/v1", tags=["intents"])
    app.include_router(categories.router, prefix="/v1", tags=["categories"])
    app.include_router(installments.router, prefix="/v1", tags=["installments"])
    app.include_router(confirmations.router, prefix="/v1", tags=["confirmations"])
    app.include_router(messages.router, prefix="/v1", tags=["messages"])

    return app


app = create_app()
