"""
Larder - Main FastAPI Application.

REST layer for checkout, payment settlement and coupon management.
"""
from contextlib import asynccontextmanager
import logging
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from larder import __version__
from larder.infrastructure.database import Database
from larder.settings import get_app_settings
from larder_api.dependencies import build_services
from larder_api.errors import register_exception_handlers
from larder_api.routes import coupons, health, orders, payment


# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


# =============================================================================
# LIFESPAN
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the database and service graph on startup, dispose on shutdown."""
    settings = get_app_settings()
    logger.info("🚀 Larder API starting up...")

    database = Database(settings.database)
    await database.init()

    app.state.database = database
    app.state.services = build_services(database, settings)
    logger.info("📚 Swagger UI available at: /docs")

    try:
        yield
    finally:
        logger.info("👋 Larder API shutting down...")
        await database.close()


# =============================================================================
# CREATE FASTAPI APP
# =============================================================================

def create_app() -> FastAPI:
    app = FastAPI(
        title="Larder - Order Settlement API",
        description="""
        Checkout and payment settlement for the Larder grocery storefront.

        Features:
        - Cart to order conversion with coupon pricing
        - Order status state machine
        - Gateway payment intents, webhooks and refunds
        - Coupon management
        """,
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log all requests with timing."""
        start_time = time.time()
        logger.info(f"→ {request.method} {request.url.path}")

        response = await call_next(request)

        duration = time.time() - start_time
        logger.info(
            f"← {request.method} {request.url.path} "
            f"[{response.status_code}] ({duration:.3f}s)"
        )
        return response

    register_exception_handlers(app)

    app.include_router(health.router, tags=["Health"])
    app.include_router(orders.router, prefix="/api/orders", tags=["Orders"])
    app.include_router(payment.router, prefix="/api/payment", tags=["Payment"])
    app.include_router(coupons.router, prefix="/api/coupons", tags=["Coupons"])

    @app.get("/", tags=["Root"])
    async def root():
        """API root endpoint."""
        return {
            "message": "Larder - Order Settlement API",
            "version": __version__,
            "docs": "/docs",
            "health": "/health",
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
