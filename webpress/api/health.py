"""
Health check endpoints.
"""
import os
import time
import shutil
import platform
import logging
from typing import Any, Dict

import psutil
import PIL
from PIL import features
from fastapi import APIRouter, Depends

from webpress import __version__
from webpress.config import Settings, get_settings
from webpress.utils.file_handling import get_temp_filepath
from webpress.utils.metrics import get_cpu_mem

# Set up logging
logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


def directory_status(directory: str) -> Dict[str, Any]:
    """Report whether a directory exists, is writable, and how much space is left."""
    status: Dict[str, Any] = {"path": os.path.abspath(directory), "exists": os.path.isdir(directory)}
    if not status["exists"]:
        return status

    test_file = get_temp_filepath(directory, suffix=".health")
    try:
        with open(test_file, "w") as f:
            f.write("test")
        status["writable"] = True
        os.remove(test_file)
    except OSError as e:
        status["writable"] = False
        status["write_error"] = str(e)

    try:
        status["free_space_mb"] = round(shutil.disk_usage(directory).free / (1024 * 1024), 2)
    except OSError as e:
        status["space_error"] = str(e)
    return status


@router.get("/health")
async def health_check():
    """Check if the API is running."""
    return {"status": "healthy", "version": __version__}


@router.get("/health/detailed")
async def detailed_health_check(settings: Settings = Depends(get_settings)):
    """
    Provides detailed health information including system metrics, codec
    support and the state of the working directories.
    """
    system_info = {
        **get_cpu_mem(),
        "disk_usage": psutil.disk_usage('/').percent,
        "python_version": platform.python_version(),
        "platform": platform.platform()
    }

    webp_supported = features.check("webp")
    codec_status = {
        "pillow_version": PIL.__version__,
        "webp": "ok" if webp_supported else "missing"
    }
    if not webp_supported:
        logger.error("Pillow was built without WebP support")

    return {
        "status": "healthy" if webp_supported else "degraded",
        "version": __version__,
        "system": system_info,
        "codec": codec_status,
        "directories": {
            "output": directory_status(settings.output_dir),
            "upload": directory_status(settings.upload_dir),
            "archive": directory_status(settings.archive_dir)
        },
        "timestamp": time.time()
    }
