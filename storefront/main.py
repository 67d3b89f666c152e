"""
Storefront Application

Shopper-facing service: session carts, catalog browsing, checkout and
order tracking on top of the store API.
"""

import os
import asyncio
import logging
from contextlib import asynccontextmanager, suppress

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv

# Load environment variables
load_dotenv(os.path.join(os.path.dirname(__file__), "..", "config", ".env"))

from .core.config import settings
from .routes import cart_router, catalog_router, checkout_router
from .routes import deps

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

SESSION_CLEANUP_INTERVAL_SECONDS = 3600


async def _cleanup_sessions_periodically() -> None:
    while True:
        await asyncio.sleep(SESSION_CLEANUP_INTERVAL_SECONDS)
        removed = deps.get_session_manager().cleanup_old_sessions(settings.session_max_age_hours)
        if removed:
            logger.info(f"Evicted {removed} idle session(s) from memory")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    logger.info("Storefront starting up...")
    logger.info(f"Store API URL: {settings.store_api_base_url}")
    logger.info(f"Cart storage: {settings.cart_storage_path.resolve()}")
    cleanup_task = asyncio.create_task(_cleanup_sessions_periodically())

    yield

    logger.info("Storefront shutting down...")
    cleanup_task.cancel()
    with suppress(asyncio.CancelledError):
        await cleanup_task
    if deps.store_client:
        await deps.store_client.close()


# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Cart, checkout and order tracking for the storefront",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, restrict this
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(catalog_router)
app.include_router(cart_router)
app.include_router(checkout_router)


@app.get("/")
async def home():
    """Storefront API index"""
    return {
        "message": "Storefront API",
        "docs": "/docs",
        "endpoints": {
            "catalog": "/api/catalog",
            "cart": "/api/cart",
            "checkout": "/api/checkout",
        },
    }


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": "storefront",
        "store_api_configured": bool(settings.store_api_base_url),
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "storefront.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
