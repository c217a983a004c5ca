"""
Exception classes for the webpress service.

Every error the service raises on purpose derives from ``WebpressError``.
Its ``message`` is written for clients and never contains filesystem paths,
so API handlers may return it as-is; anything else is treated as internal.
"""
from typing import Any, Dict, Optional


class WebpressError(Exception):
    """Base exception for all service errors"""

    status_code = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ConfigurationError(WebpressError):
    """Raised when an environment setting cannot be parsed"""

    def __init__(self, key: str, value: str):
        super().__init__(
            f"Invalid value for {key}: {value!r}",
            {"key": key, "value": value}
        )


class ValidationError(WebpressError):
    """Raised when an upload batch is rejected before conversion"""

    status_code = 400


class NotFoundError(WebpressError):
    """Raised when a session or file cannot be retrieved"""

    status_code = 404


class NoFilesAvailableError(NotFoundError):
    """Raised when an archive is requested for a session with no files"""

    def __init__(self, session_id: str):
        super().__init__("No files available to zip", {"session_id": session_id})


class TranscodeError(WebpressError):
    """Base class for per-file conversion failures"""

    status_code = 422


class EncodeError(TranscodeError):
    """Raised when the image codec cannot decode or encode a file"""


class TooSmallOutputError(TranscodeError):
    """Raised when an encode produces a degenerate output"""

    def __init__(self, size: int, quality: int, minimum: int):
        super().__init__(
            "Converted file size too small",
            {"size": size, "quality": quality, "minimum": minimum}
        )


class ArchiveError(WebpressError):
    """Raised when building a session archive fails"""


class InternalError(WebpressError):
    """Generic error returned for unclassified failures"""

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)
