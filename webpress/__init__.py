"""
WebP Batch Conversion Service

This package implements a FastAPI application that shrinks uploaded images
by re-encoding them as WebP:
- Adaptive quality search bounded by a retry budget
- Per-batch sessions with per-file outcomes
- Single-file and ZIP archive downloads
"""
__version__ = "1.0.0"

# Export the app instance
from webpress.api import app

__all__ = ['app', '__version__']
