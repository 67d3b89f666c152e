"""
Store API Application

Catalog and order service for the storefront. Serves product snapshots
and persists orders and their items in memory.
"""

import os
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from dotenv import load_dotenv

from .routes import catalog_router, orders_router

# Load environment variables
load_dotenv(os.path.join(os.path.dirname(__file__), "..", "config", ".env"))

# Configure logging
logging.basicConfig(
    level=os.getenv("STORE_API_LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    logger.info("Store API starting up...")
    yield
    logger.info("Store API shutting down...")


# Create FastAPI app
app = FastAPI(
    title="Store API",
    description="Catalog and order service for the storefront",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=os.getenv("STORE_API_CORS_ORIGINS", "*").split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routers
app.include_router(catalog_router)
app.include_router(orders_router)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Report malformed request bodies as 400 Bad Request"""
    logger.warning(f"Invalid request to {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=400,
        content={"detail": "Invalid request data", "errors": jsonable_encoder(exc.errors())},
    )


@app.get("/")
async def home():
    """Store API index"""
    return {
        "message": "Store API",
        "docs": "/docs",
        "endpoints": {
            "categories": "/api/categories",
            "products": "/api/products",
            "orders": "/api/orders",
        },
    }


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "service": "store-api"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "store_api.main:app",
        host=os.getenv("STORE_API_HOST", "0.0.0.0"),
        port=int(os.getenv("STORE_API_PORT", "8001")),
        reload=True,
    )
