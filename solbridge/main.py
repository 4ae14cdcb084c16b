from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .api import bridge, health
from .config import settings
from .logging_config import setup_logging
from .middleware import RequestLoggingMiddleware

setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await bridge.close_bridge_service()


# Create FastAPI app
app = FastAPI(
    title="Solbridge API",
    description="Solana to Base bridging engine: quotes, unsigned transactions and transfer status",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health.router, tags=["Health"])
app.include_router(bridge.router, tags=["Bridge"])


@app.get("/")
async def root():
    """Root endpoint with basic info"""
    return {
        "name": "Solbridge API",
        "version": __version__,
        "environment": settings.bridge_environment,
        "destination_tracking": settings.has_indexer,
        "docs": "/docs",
        "health": "/healthz"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "solbridge.main:app",
        host=settings.host,
        port=settings.port,
        reload=True,
        log_level=settings.log_level.lower()
    )
