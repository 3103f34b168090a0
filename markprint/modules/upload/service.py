"""Upload service - validate and decode uploaded markdown files."""

from pathlib import PurePath

from fastapi import UploadFile

from markprint.shared.errors import UploadError, UploadTooLargeError
from markprint.shared.logging import get_logger

from .schemas import UploadResponse

logger = get_logger(__name__)

VALID_EXTENSIONS = (".md", ".markdown", ".txt")

CHUNK_SIZE = 64 * 1024


def get_file_extension(filename: str) -> str:
    """Lower-cased extension including the dot, or '' if there is none."""
    return PurePath(filename).suffix.lower()


class UploadService:
    """Reads uploads up to a size limit."""

    def __init__(self, max_file_size: int) -> None:
        self.max_file_size = max_file_size

    def validate_filename(self, filename: str | None) -> str:
        if not filename:
            raise UploadError("No file provided. Please upload a markdown file.")

        extension = get_file_extension(filename)
        if extension not in VALID_EXTENSIONS:
            logger.warning(f"Rejected upload '{filename}' with extension '{extension}'")
            raise UploadError(
                f"Invalid file type. Supported formats: {', '.join(VALID_EXTENSIONS)}",
                details={"extension": extension},
            )
        return filename

    async def read(self, upload: UploadFile) -> UploadResponse:
        """
        Read an uploaded file.

        Raises:
            UploadError: missing name or unsupported extension
            UploadTooLargeError: more than max_file_size bytes
        """
        filename = self.validate_filename(upload.filename)

        chunks: list[bytes] = []
        total = 0
        while chunk := await upload.read(CHUNK_SIZE):
            total += len(chunk)
            if total > self.max_file_size:
                logger.warning(f"Upload '{filename}' exceeds {self.max_file_size} bytes")
                raise UploadTooLargeError(
                    f"File exceeds maximum size of {round(self.max_file_size / 1024 / 1024)}MB",
                    details={"max_bytes": self.max_file_size},
                )
            chunks.append(chunk)

        data = b"".join(chunks)
        logger.info(f"File uploaded: {filename} ({len(data)} bytes)")
        return UploadResponse(
            filename=filename,
            content=data.decode("utf-8", errors="replace"),
            size=len(data),
        )
