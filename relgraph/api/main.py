"""
RELGRAPH FastAPI Application

Serves inference passes over HTTP:
- GET  /health
- POST /api/v1/discover/graph
"""

from fastapi import FastAPI

from .. import __version__
from .discover_routes import discover_router

app = FastAPI(
    title="RELGRAPH API",
    description="Relational structure inference as a fact graph",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc"
)

app.include_router(discover_router, tags=["Discover"])


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "message": "RELGRAPH API - Relational Graph Extractor",
        "version": __version__,
        "docs": "/docs",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "RELGRAPH API"}


if __name__ == "__main__":
    import uvicorn
    from .dependencies import get_config

    config = get_config()
    uvicorn.run(app, host=config.get("api.host", "0.0.0.0"), port=int(config.get("api.port", 8000)))
