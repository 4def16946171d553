"""FastAPI application — main entry point."""

import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app.config import get_settings
from app.infrastructure.database import engine, Base, SessionLocal
from app.core.logging import configure_logging
from app.core.middleware import setup_middleware
from app.core.exceptions import setup_exception_handlers

# Import all models so SQLAlchemy knows about them
from app.domain.models.product import Product  # noqa: F401
from app.domain.models.user import User  # noqa: F401

from app.interfaces.api.auth import router as auth_router
from app.interfaces.api.products import router as products_router
from app.interfaces.api.analytics import router as analytics_router

settings = get_settings()

configure_logging()
logger = structlog.get_logger(__name__)

STARTED_AT = time.monotonic()


def ensure_admin_user() -> None:
    """Create the bootstrap admin account when ADMIN_EMAIL/ADMIN_PASSWORD are set."""
    if not (settings.ADMIN_EMAIL and settings.ADMIN_PASSWORD):
        return

    from app.application.services.auth_service import get_user_by_email, create_user

    db = SessionLocal()
    try:
        if not get_user_by_email(db, settings.ADMIN_EMAIL):
            create_user(db, name="Admin", email=settings.ADMIN_EMAIL, password=settings.ADMIN_PASSWORD, role="admin")
            logger.info("Default admin user created", email=settings.ADMIN_EMAIL)
    finally:
        db.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup and shutdown events."""
    logger.info("Starting StockMaster API", env=settings.ENVIRONMENT)

    # Create DB tables (use migrations for production schemas)
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created/verified")

    ensure_admin_user()

    yield

    engine.dispose()
    logger.info("StockMaster API stopped")


app = FastAPI(
    title=settings.APP_NAME,
    description="Inventory tracking API: products, low-stock alerts and analytics",
    version=settings.APP_VERSION,
    lifespan=lifespan,
)

setup_middleware(app)
setup_exception_handlers(app)

# Added last so it is the outermost layer and answers preflight requests first
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Request-ID"],
)

app.include_router(auth_router)
app.include_router(products_router)
app.include_router(analytics_router)


def database_status() -> str:
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return "connected"
    except SQLAlchemyError as e:
        logger.warning("Database health check failed", error=str(e))
        return "disconnected"


@app.get("/", tags=["System"])
def root():
    return {
        "message": f"{settings.APP_NAME} is running",
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "endpoints": {
            "health": "/health",
            "products": "/api/products",
            "auth": "/api/auth",
            "analytics": "/api/analytics",
            "docs": "/api/docs",
        },
    }


@app.get("/health", tags=["System"])
def health():
    return {
        "status": "OK",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "uptime": round(time.monotonic() - STARTED_AT, 2),
        "environment": settings.ENVIRONMENT,
        "database": database_status(),
    }


@app.get("/api/docs", tags=["System"])
def api_docs():
    return {
        "title": f"{settings.APP_NAME} Documentation",
        "version": settings.APP_VERSION,
        "endpoints": {
            "authentication": {
                "POST /api/auth/register": "Register a new user",
                "POST /api/auth/login": "Login user",
                "GET /api/auth/me": "Get current user (protected)",
            },
            "products": {
                "GET /api/products": "List products (page, limit, sort, order, search, category, lowStock)",
                "GET /api/products/stats": "Product statistics",
                "GET /api/products/low-stock": "Products at or below threshold",
                "GET /api/products/{id}": "Get product by id",
                "POST /api/products": "Add new product (protected)",
                "POST /api/products/bulk": "Add many products (protected)",
                "PUT /api/products/{id}": "Update product (protected)",
                "DELETE /api/products/{id}": "Delete product (protected)",
                "DELETE /api/products/bulk": "Delete many products (protected)",
            },
            "analytics": {
                "GET /api/analytics/dashboard": "Dashboard overview (protected)",
                "GET /api/analytics/inventory-value": "Inventory valuation (protected)",
                "GET /api/analytics/stock-movement": "Recent restocks and sales (protected)",
                "GET /api/analytics/category-performance": "Per-category report (protected)",
                "GET /api/analytics/supplier-analysis": "Per-supplier report (protected)",
                "GET /api/analytics/export": "Export report as JSON or CSV (protected)",
            },
            "system": {
                "GET /health": "Health check",
                "GET /": "API info",
            },
        },
        "authentication": "Use Bearer token in Authorization header for protected routes",
    }
