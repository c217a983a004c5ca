"""
Utilities for file handling and temporary file management.
"""
import os
import time
import uuid
import logging
from typing import Optional, Union

# Set up logging
logger = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]


def get_temp_filepath(directory: PathLike, file_id: Optional[str] = None, suffix: str = "") -> str:
    """
    Generate a path for a temporary file.

    Args:
        directory: Directory the file will live in
        file_id: Optional file ID to use (generates a new UUID if not provided)
        suffix: Optional file suffix/extension

    Returns:
        Path to a temporary file inside ``directory``
    """
    if file_id is None:
        file_id = uuid.uuid4().hex

    return os.path.join(directory, f"{file_id}{suffix}")


def get_unique_filepath(directory: PathLike, prefix: str = "", suffix: str = "") -> str:
    """
    Generate a path that is unique per call, built from a millisecond
    timestamp and a random component.

    Args:
        directory: Directory the file will live in
        prefix: Text placed before the timestamp
        suffix: Optional file suffix/extension

    Returns:
        Path of the form ``{directory}/{prefix}{timestamp}_{random}{suffix}``
    """
    stamp = int(time.time() * 1000)
    return os.path.join(directory, f"{prefix}{stamp}_{uuid.uuid4().hex[:8]}{suffix}")


def safe_remove(file_path: PathLike) -> bool:
    """
    Delete a file, logging instead of raising on failure.

    Args:
        file_path: Path to the file to delete

    Returns:
        True if the file was deleted, False if it was missing or could not be removed
    """
    try:
        os.remove(file_path)
        logger.debug(f"Removed file: {file_path}")
        return True
    except FileNotFoundError:
        return False
    except OSError as e:
        logger.error(f"Failed to remove file {file_path}: {e}")
        return False


def ensure_dir(directory: PathLike) -> bool:
    """
    Create a directory (and parents) if it does not exist yet.

    Returns:
        True if the directory was created by this call
    """
    if os.path.isdir(directory):
        return False
    os.makedirs(directory, exist_ok=True)
    logger.info(f"Directory created: {directory}")
    return True
