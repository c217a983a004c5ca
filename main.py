"""
WebP Batch Conversion API Entry Point

This file serves as the main entry point for the application,
importing and running the FastAPI application defined in the webpress package.

Run with uvicorn:
    uvicorn main:app --reload
"""
import logging
import sys

from webpress.config import get_settings
from webpress import app

settings = get_settings()

# Configure logging based on environment variables
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Configure root logger
logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format=LOG_FORMAT,
    stream=sys.stdout
)

# Set up logger
logger = logging.getLogger(__name__)

# Check that Pillow can write WebP
from PIL import features

if features.check("webp"):
    logger.info("Pillow WebP support is available")
else:
    logger.critical("Pillow was built without WebP support")
    logger.critical("Please install a Pillow build with libwebp: pip install --force-reinstall pillow")
    sys.exit(1)

# Entry point for running with uvicorn
if __name__ == "__main__":
    import uvicorn

    logger.info(f"Starting WebP Batch Conversion API on port {settings.port} with {settings.workers} workers")

    uvicorn.run(
        "webpress:app",
        host=settings.host,
        port=settings.port,
        workers=settings.workers,
        reload=settings.debug
    )
