"""
Affiliate Webhook Relay API - Main Application.

FastAPI application receiving Stripe webhooks, with CORS restricted to the
configured frontend origins.
"""

import logging

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api import __version__
from api.settings import get_allowed_origins, get_log_level, get_port

logging.basicConfig(
    level=get_log_level(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

logger = logging.getLogger(__name__)

# Create FastAPI application
app = FastAPI(
    title="Affiliate Webhook Relay API",
    description="Receives Stripe checkout events and records affiliate sales in Supabase",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

# Configure CORS - only the configured frontend origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(get_allowed_origins()),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health", tags=["Health"])
def health_check():
    """
    Health check endpoint.

    Returns the API status and version.
    """
    return {
        "status": "healthy",
        "version": __version__,
        "service": "affiliate-webhook-relay"
    }


@app.get("/", tags=["Root"])
def root():
    """
    Root endpoint with API information.
    """
    return {
        "status": "API is running",
        "version": __version__,
        "docs": "/docs",
        "health": "/health"
    }


# Import and include routers
from api.routers import webhooks

app.include_router(webhooks.router, tags=["Webhooks"])


if __name__ == "__main__":
    port = get_port()
    logger.info(f"API Server running on port {port}")
    uvicorn.run(app, host="0.0.0.0", port=port)
