"""PDF module - bounded-concurrency markdown to PDF rendering."""

from .router import router
from .schemas import PdfOptions, PdfRequest, PdfStatusResponse
from .service import PdfRenderCoordinator, RenderJob, get_coordinator, shutdown_coordinator

__all__ = [
    "router",
    "PdfOptions",
    "PdfRequest",
    "PdfStatusResponse",
    "PdfRenderCoordinator",
    "RenderJob",
    "get_coordinator",
    "shutdown_coordinator",
]
