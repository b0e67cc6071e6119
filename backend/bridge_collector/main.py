"""Main FastAPI application serving reconciled bridge records."""

import logging

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from bridge_collector.config import settings
from bridge_collector.api import deposits, withdrawals

logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Bridge Collector API",
    version="1.0.0",
    description="Read-only access to L1 <-> L2 bridge deposits and withdrawals"
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=False,
    allow_methods=["GET"],
    allow_headers=["*"],
)

# Include routers
app.include_router(
    deposits.router,
    prefix=f"{settings.API_V1_PREFIX}",
    tags=["deposits"]
)
app.include_router(
    withdrawals.router,
    prefix=f"{settings.API_V1_PREFIX}",
    tags=["withdrawals"]
)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Bridge Collector API",
        "version": "1.0.0",
        "docs": "/docs",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "environment": settings.ENVIRONMENT,
    }


# Global exception handler
@app.exception_handler(HTTPException)
async def http_exception_handler(request, exc: HTTPException):
    """Handle HTTP exceptions with consistent error format."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail}
    )
