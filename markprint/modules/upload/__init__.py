"""Upload module - markdown file ingestion."""

from .router import router
from .schemas import UploadResponse
from .service import UploadService

__all__ = ["router", "UploadResponse", "UploadService"]
