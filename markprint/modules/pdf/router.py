"""PDF module routes."""

from fastapi import APIRouter, Depends, Request, Response

from markprint.config import Settings, get_settings
from markprint.shared.errors import (
    MarkPrintError,
    RenderFailedError,
    RenderTimeoutError,
    TooManyPendingError,
    ValidationFailedError,
)
from markprint.shared.logging import get_logger

from .schemas import PdfRequest, PdfStatusResponse
from .service import PdfRenderCoordinator, get_coordinator

logger = get_logger(__name__)
router = APIRouter(prefix="/api/pdf", tags=["pdf"])


@router.post("")
async def generate_pdf(
    request: PdfRequest,
    http_request: Request,
    coordinator: PdfRenderCoordinator = Depends(get_coordinator),
    settings: Settings = Depends(get_settings),
) -> Response:
    """
    Render markdown to a themed PDF.

    Returns the PDF as a binary attachment.
    """
    if len(request.markdown) > settings.max_file_size:
        raise ValidationFailedError(
            f"Content exceeds maximum size of {settings.max_file_size} bytes",
            details={"markdown": ["too long"]},
        )

    logger.info(
        f"Starting PDF generation: theme={request.theme} "
        f"page_size={request.options.page_size} margins={request.options.margins}"
    )

    try:
        pdf_bytes = await coordinator.generate_pdf(request)
    except RenderTimeoutError as e:
        logger.error(f"PDF generation timed out: {e.message}")
        raise
    except TooManyPendingError:
        logger.warning("PDF request queue full")
        raise
    except MarkPrintError as e:
        logger.error(f"PDF generation failed: {e.message}")
        raise
    except Exception as e:
        logger.exception(f"PDF generation failed for {http_request.url.path}")
        raise RenderFailedError() from e

    logger.info(f"PDF generation complete: {len(pdf_bytes)} bytes")

    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={
            "Content-Disposition": 'attachment; filename="document.pdf"',
            "Content-Length": str(len(pdf_bytes)),
        },
    )


@router.get("/status", response_model=PdfStatusResponse)
async def get_pdf_status(
    coordinator: PdfRenderCoordinator = Depends(get_coordinator),
) -> PdfStatusResponse:
    """Current admission state of the PDF renderer."""
    return coordinator.status()
