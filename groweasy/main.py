from contextlib import asynccontextmanager
from datetime import datetime, timezone
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from groweasy.config import settings
from groweasy.api.v1.router import api_router
from groweasy.core.exceptions import MarketplaceError
from groweasy.database import init_db, async_session_factory, get_db_session
from groweasy.jobs.scheduler import start_scheduler, shutdown_scheduler

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup:
    - Create tables that do not exist yet
    - Start the background scheduler with the stored payout schedule

    Shutdown:
    - Stop the scheduler
    """
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
    await init_db()

    if settings.SCHEDULER_ENABLED:
        from groweasy.services.settings_service import SettingsService

        async with get_db_session() as db:
            payment = await SettingsService(db).get_section("payment")
        start_scheduler(payment["payout_schedule"])

    yield

    shutdown_scheduler()
    logger.info("Shutting down...")


OPENAPI_TAGS = [
    {"name": "Authentication", "description": "JWT-based registration, login and profile"},
    {"name": "Products", "description": "Storefront catalog with search, filters and categories"},
    {"name": "Orders", "description": "Checkout, Razorpay payment verification and order history"},
    {"name": "Coupons", "description": "Coupon validation at checkout"},
    {"name": "Shops", "description": "Public seller shop pages and affiliate link tracking"},
    {"name": "Seller", "description": "Seller workspace: enquiries, affiliate links, shop, wallet, payouts"},
    {"name": "Admin", "description": "Seller approval, users, dashboard, analytics, settings, audit log"},
    {"name": "Admin Products", "description": "Product catalog administration"},
    {"name": "Admin Orders", "description": "Order status and tracking updates"},
    {"name": "Admin Coupons", "description": "Coupon administration"},
    {"name": "Admin Enquiries", "description": "Review of seller product enquiries"},
    {"name": "Admin Payouts", "description": "Seller payouts through RazorpayX"},
    {"name": "Support", "description": "Contact, feedback, newsletter and support tickets"},
]

API_DESCRIPTION = """
## GrowEasy Marketplace API

Multi-vendor marketplace backend: storefront, seller workspace and admin
back office.

### Authentication

Include the token from `/api/auth/login` in the Authorization header:
`Bearer <token>`. Storefront reads, checkout and public forms work without
one.

### Error Codes

| Code | Description |
|------|-------------|
| 400 | Bad Request - Business rule violated |
| 401 | Unauthorized - Missing/invalid token |
| 403 | Forbidden - Wrong role, pending seller or disabled feature |
| 404 | Not Found - Resource doesn't exist |
| 422 | Unprocessable Entity - Validation failed |
| 502 | Bad Gateway - Razorpay call failed |
"""

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description=API_DESCRIPTION,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_tags=OPENAPI_TAGS,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)


@app.exception_handler(MarketplaceError)
async def marketplace_exception_handler(request: Request, exc: MarketplaceError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message} {exc.details}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint with database validation."""
    health_status = {
        "status": "healthy",
        "database": "connected",
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }

    try:
        async with async_session_factory() as session:
            result = await session.execute(text("SELECT 1"))
            result.scalar()
    except Exception as e:
        logger.error(f"Health check database error: {e}")
        health_status["status"] = "unhealthy"
        health_status["database"] = "disconnected"
        return JSONResponse(status_code=503, content=health_status)

    return health_status


@app.get("/", tags=["Root"])
async def root():
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": settings.APP_VERSION,
        "docs": "/docs",
        "redoc": "/redoc",
    }
