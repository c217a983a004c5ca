"""
Models describing the files of a batch and what happened to each of them.
"""
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class OutcomeStatus(str, Enum):
    """Result of converting one file"""
    CONVERTED = "converted"
    SKIPPED = "skipped"
    FAILED = "failed"


class SourceFile(BaseModel):
    """An uploaded file spooled to temporary storage, awaiting conversion"""
    original_name: str = Field(..., description="Filename as sent by the client")
    temp_path: str = Field(..., description="Path of the spooled upload")
    size: int = Field(..., ge=0, description="Declared size of the upload in bytes")
    media_type: str = Field(..., description="Declared media type of the upload")


class ConversionOutcome(BaseModel):
    """Outcome of converting a single source file"""
    original_name: str = Field(..., description="Filename as sent by the client")
    original_size: int = Field(..., description="Size of the source file in bytes")
    converted_size: int = Field(
        ..., description="Size of the kept output, or the original size when nothing was kept"
    )
    status: OutcomeStatus = Field(..., description="converted, skipped or failed")
    error_detail: Optional[str] = Field(None, description="Reason for a failed conversion")
    download_path: Optional[str] = Field(None, description="Download URL path of the kept output")

    @property
    def converted(self) -> bool:
        return self.status is OutcomeStatus.CONVERTED
