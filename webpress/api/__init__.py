"""
API module for the webpress service.
"""
import logging
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from webpress import __version__
from webpress.api.convert import router as convert_router
from webpress.api.download import router as download_router
from webpress.api.health import router as health_router
from webpress.exceptions import InternalError, WebpressError

# Set up logging
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="WebP Batch Conversion API",
    description="""
    API for shrinking images by converting them to WebP:
    - Batch upload of JPEG, PNG, WebP and GIF files
    - Adaptive quality search that keeps a file only when it gets smaller
    - Per-file downloads and a ZIP archive per session
    """,
    version=__version__
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(convert_router)
app.include_router(download_router)
app.include_router(health_router)


@app.exception_handler(WebpressError)
async def webpress_exception_handler(request: Request, exc: WebpressError):
    """Return service errors with their own status and message."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message} {exc.details}", exc_info=exc)
    else:
        logger.warning(f"{request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler for unexpected errors; never leaks internals."""
    logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)
    error = InternalError()
    return JSONResponse(status_code=error.status_code, content={"detail": error.message})
