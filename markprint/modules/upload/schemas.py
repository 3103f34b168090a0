"""Upload module schemas."""

from pydantic import BaseModel


class UploadResponse(BaseModel):
    """Content of an uploaded markdown file."""

    filename: str
    content: str
    size: int
