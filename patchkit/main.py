"""
FastAPI application entry point.
"""

from fastapi import FastAPI

from patchkit import __version__
from patchkit.api import patches
from patchkit.config import settings
from patchkit.utils.logging import setup_logging, get_logger

# Configure structured logging
setup_logging(settings.log_level)

logger = get_logger(__name__)

app = FastAPI(
    title="patchkit",
    description="Unified-diff parsing and hunk application service",
    version=__version__
)


@app.get("/health")
async def health_check():
    """Health check endpoint for container orchestration."""
    return {"status": "healthy", "version": __version__}


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "patchkit API",
        "version": __version__,
        "docs": "/docs"
    }


app.include_router(patches.router)

logger.info(
    "patchkit API configured",
    extra={
        "strict_parsing": settings.strict_parsing,
        "strict_offsets": settings.strict_offsets,
        "max_workers": settings.max_workers,
    }
)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
