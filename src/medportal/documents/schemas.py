"""Wire shapes for document records and API responses."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class DocumentRecord(BaseModel):
    """One stored document as reported to clients."""

    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., description="Document ID")
    original_filename: str = Field(..., description="Filename supplied by the uploader")
    storage_path: str = Field(..., description="Storage key of the blob")
    size_bytes: int = Field(..., ge=0, description="File size in bytes")
    created_at: datetime = Field(..., description="Upload timestamp")


class DocumentListResponse(BaseModel):
    documents: list[DocumentRecord] = Field(default_factory=list)


class MessageResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    error: str = Field(..., description="Human-readable failure message")
    code: str = Field(..., description="Failure kind")
