"""Data models for local reference documents."""

from pydantic import BaseModel, Field


class DocumentFile(BaseModel):
    """A local file checked and ready for upload."""

    path: str = Field(description="Absolute path of the file")
    title: str = Field(description="Title from PDF metadata, or the file stem")
    author: str = Field(default="", description="Author from PDF metadata")
    page_count: int = Field(ge=0, description="Number of pages")
    size_bytes: int = Field(ge=0, description="File size in bytes")
    file_type: str = Field(default="pdf", description="Upload file type field")
