"""
Process-wide configuration.

All settings are read once from environment variables into an immutable
``Settings`` instance. Routes receive it through ``Depends(get_settings)``.
"""
import os
import logging
import tempfile
from dataclasses import dataclass
from functools import lru_cache
from typing import Mapping, Optional, Tuple

from webpress.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_MAX_FILE_SIZE = 100 * 1024 * 1024  # 100MB per file
DEFAULT_MAX_FILES = 100
DEFAULT_ALLOWED_TYPES = ("image/jpeg", "image/png", "image/webp", "image/gif")
DEFAULT_PORT = 3000


def _parse_int(environ: Mapping[str, str], key: str, default: int) -> int:
    raw = environ.get(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigurationError(key, raw)
    if value <= 0:
        raise ConfigurationError(key, raw)
    return value


def _parse_bool(environ: Mapping[str, str], key: str) -> bool:
    return environ.get(key, "").lower() in ("true", "1", "yes")


def _parse_types(environ: Mapping[str, str], key: str) -> Tuple[str, ...]:
    raw = environ.get(key)
    if not raw:
        return DEFAULT_ALLOWED_TYPES
    types = tuple(t.strip().lower() for t in raw.split(",") if t.strip())
    if not types:
        raise ConfigurationError(key, raw)
    return types


@dataclass(frozen=True)
class Settings:
    """
    Immutable service configuration.

    Attributes:
        output_dir: Root directory holding one subdirectory per session
        upload_dir: Directory where incoming uploads are spooled
        archive_dir: Directory for transient ZIP archives
        max_file_size: Maximum size of a single upload in bytes
        max_files: Maximum number of files per batch
        allowed_types: Media types accepted at intake
        host: Bind address for the HTTP server
        port: Bind port for the HTTP server
        workers: Number of uvicorn worker processes
        debug: Enables auto-reload
        log_level: Root logger level name
    """
    output_dir: str = "public"
    upload_dir: str = "uploads"
    archive_dir: str = os.path.join(tempfile.gettempdir(), "webpress-archives")
    max_file_size: int = DEFAULT_MAX_FILE_SIZE
    max_files: int = DEFAULT_MAX_FILES
    allowed_types: Tuple[str, ...] = DEFAULT_ALLOWED_TYPES
    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    workers: int = 1
    debug: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Build settings from environment variables.

        Raises:
            ConfigurationError: If a numeric or list value is malformed
        """
        if environ is None:
            environ = os.environ
        defaults = cls()
        return cls(
            output_dir=environ.get("OUTPUT_DIR", defaults.output_dir),
            upload_dir=environ.get("UPLOAD_DIR", defaults.upload_dir),
            archive_dir=environ.get("ARCHIVE_DIR", defaults.archive_dir),
            max_file_size=_parse_int(environ, "MAX_FILE_SIZE", defaults.max_file_size),
            max_files=_parse_int(environ, "MAX_FILES", defaults.max_files),
            allowed_types=_parse_types(environ, "ALLOWED_TYPES"),
            host=environ.get("HOST", defaults.host),
            port=_parse_int(environ, "PORT", defaults.port),
            workers=_parse_int(environ, "WORKERS", defaults.workers),
            debug=_parse_bool(environ, "DEBUG"),
            log_level=environ.get("LOG_LEVEL", defaults.log_level).upper(),
        )


@lru_cache()
def get_settings() -> Settings:
    """Return the process-wide settings, reading the environment once."""
    settings = Settings.from_env()
    logger.debug(f"Loaded settings: {settings}")
    return settings
