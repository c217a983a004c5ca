"""
Data models for the webpress service.

This module provides Pydantic models for the files of a batch, their
conversion outcomes, and the API responses built from them.
"""
from webpress.models.outcome import (
    OutcomeStatus,
    SourceFile,
    ConversionOutcome
)

from webpress.models.responses import (
    FileSizeEntry,
    ConvertResponse,
    ErrorResponse
)

__all__ = [
    # Batch models
    'OutcomeStatus',
    'SourceFile',
    'ConversionOutcome',

    # Response models
    'FileSizeEntry',
    'ConvertResponse',
    'ErrorResponse'
]
