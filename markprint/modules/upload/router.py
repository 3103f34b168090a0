"""Upload module routes."""

from fastapi import APIRouter, Depends, File, UploadFile

from markprint.config import Settings, get_settings
from markprint.shared.errors import UploadError

from .schemas import UploadResponse
from .service import UploadService

router = APIRouter(prefix="/api/upload", tags=["upload"])


def get_service(settings: Settings = Depends(get_settings)) -> UploadService:
    """Dependency injection for service."""
    return UploadService(settings.max_file_size)


@router.post("", response_model=UploadResponse)
async def upload_file(
    file: UploadFile | None = File(default=None),
    service: UploadService = Depends(get_service),
) -> UploadResponse:
    """Upload a markdown file and return its text content."""
    if file is None:
        raise UploadError("No file provided. Please upload a markdown file.")

    try:
        return await service.read(file)
    finally:
        await file.close()
