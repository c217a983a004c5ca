"""
Response models for the conversion API.

Field names follow the JSON keys clients already consume (camelCase),
exposed through aliases.
"""
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


class FileSizeEntry(BaseModel):
    """Per-file size report, aligned with the input order"""
    model_config = ConfigDict(populate_by_name=True)

    original_name: str = Field(..., alias="originalName", description="Original filename")
    original_size: int = Field(..., alias="originalSize", description="Size of original file in bytes")
    converted_size: int = Field(..., alias="convertedSize", description="Size of converted file in bytes")
    skipped: Optional[bool] = Field(None, description="Set when the conversion did not shrink the file")
    error: Optional[bool] = Field(None, description="Set when the conversion failed")
    error_detail: Optional[str] = Field(None, alias="errorDetail", description="Reason for the failure")


class ConvertResponse(BaseModel):
    """Response model for a batch conversion"""
    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(..., alias="sessionId", description="Session holding the converted files")
    download_urls: List[str] = Field(
        ..., alias="downloadUrls", description="One URL per input file, empty when nothing was kept"
    )
    zip_download_url: str = Field(
        ..., alias="zipDownloadUrl", description="URL of the session archive, empty when no file was converted"
    )
    file_sizes: List[FileSizeEntry] = Field(..., alias="fileSizes", description="Size report per input file")


class ErrorResponse(BaseModel):
    """Body returned for every error status"""
    detail: str = Field(..., description="Human-readable error message")
