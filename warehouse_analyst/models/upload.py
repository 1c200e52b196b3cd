"""Schemas describing stored uploads."""

from __future__ import annotations

from pydantic import BaseModel, Field


class UploadedFileInfo(BaseModel):
    """Metadata describing a file written to the upload directory."""

    filename: str = Field(..., description="Name of the stored file")
    url_path: str = Field(..., description="Path under which the file is served")
    size_bytes: int = Field(..., ge=0, description="Size of the stored file in bytes")
    mime_type: str = Field(..., description="Content type reported by the client")
