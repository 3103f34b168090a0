"""
PDF render coordinator.

Owns the shared browser and the admission gate. Each job renders and
sanitizes the markdown, resolves the theme CSS, assembles a print document,
and rasterizes it in its own browser page under a per-phase timeout.
"""

import asyncio
from collections.abc import Awaitable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, TypeVar

from fastapi.concurrency import run_in_threadpool
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from markprint.config import get_settings
from markprint.config.settings import DEFAULT_PAGE_WIDTHS
from markprint.modules.markdown.service import MarkdownRenderer, get_markdown_renderer
from markprint.modules.themes.service import ThemeStore, get_theme_store
from markprint.shared.errors import RenderTimeoutError, UnknownThemeError
from markprint.shared.ids import generate_job_id
from markprint.shared.logging import get_logger
from markprint.shared.types import JobState

from .admission import AdmissionGate
from .browser import BrowserHandle
from .document import EMPTY_HEADER_TEMPLATE, FOOTER_MARGIN, FOOTER_TEMPLATE, build_document, margin_for
from .schemas import PdfOptions, PdfRequest, PdfStatusResponse

logger = get_logger(__name__)

T = TypeVar("T")

# Viewport height for named paper formats; the PDF itself is paginated by format
DEFAULT_VIEWPORT_HEIGHT = 1080

# Page sizes Chromium has no paper format name for
EXPLICIT_DIMENSION_SIZES = frozenset({"B5"})

PHASE_PREPARE = "preparing the document"
PHASE_LOAD = "loading content"
PHASE_RASTERIZE = "rasterizing the document"


@dataclass
class RenderJob:
    """One in-flight PDF generation attempt."""

    job_id: str
    theme: str
    page_size: str
    state: JobState = JobState.QUEUED
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))


class PdfRenderCoordinator:
    """Bounded-concurrency PDF rendering over one shared browser."""

    def __init__(
        self,
        renderer: MarkdownRenderer,
        themes: ThemeStore,
        *,
        concurrency_limit: int = 3,
        max_pending: int | None = None,
        timeout_ms: int = 30_000,
        browser: BrowserHandle | None = None,
        page_widths: dict[str, int] | None = None,
        b5_height_px: int = 945,
    ) -> None:
        self.renderer = renderer
        self.themes = themes
        self.timeout_ms = timeout_ms
        self.gate = AdmissionGate(concurrency_limit, max_pending)
        self.browser = browser or BrowserHandle()
        self.page_widths = page_widths or dict(DEFAULT_PAGE_WIDTHS)
        self.b5_height_px = b5_height_px
        self._jobs: dict[str, RenderJob] = {}

    @property
    def jobs(self) -> list[RenderJob]:
        """Jobs that are queued or running, oldest first."""
        return list(self._jobs.values())

    def count(self, state: JobState) -> int:
        return sum(1 for job in self._jobs.values() if job.state is state)

    def status(self) -> PdfStatusResponse:
        return PdfStatusResponse(
            active=self.gate.active,
            pending=self.gate.pending,
            limit=self.gate.limit,
            max_pending=self.gate.max_pending,
            browser_connected=self.browser.is_connected,
        )

    async def generate_pdf(self, request: PdfRequest) -> bytes:
        """
        Render a request to PDF bytes.

        Raises:
            TooManyPendingError: admission queue is full
            UnknownThemeError / StylesheetLoadError: theme CSS unavailable
            RenderTimeoutError: preparation, content load or rasterization exceeded the budget
        """
        job = RenderJob(
            job_id=generate_job_id(),
            theme=request.theme,
            page_size=request.options.page_size,
        )
        self._jobs[job.job_id] = job

        try:
            await self.gate.acquire()
        except BaseException:
            job.state = JobState.FAILED
            self._jobs.pop(job.job_id, None)
            raise

        job.state = JobState.ADMITTED
        page: Any = None

        try:
            # Parsing, sanitizing and the first stylesheet read run off the event loop
            document = await self._with_timeout(
                run_in_threadpool(self.prepare_document, request),
                PHASE_PREPARE,
            )

            browser = await self.browser.get()
            page = await browser.new_page()
            job.state = JobState.RENDERING

            await page.set_viewport_size(self.viewport_for(request.options.page_size))
            await self._with_timeout(
                page.set_content(document, wait_until="networkidle", timeout=self.timeout_ms),
                PHASE_LOAD,
            )
            pdf_bytes = await self._with_timeout(
                page.pdf(**self.pdf_options(request.options)),
                PHASE_RASTERIZE,
            )

            job.state = JobState.SUCCEEDED
            logger.debug(f"Job {job.job_id} produced {len(pdf_bytes)} bytes")
            return pdf_bytes

        except RenderTimeoutError:
            job.state = JobState.TIMED_OUT
            raise
        except BaseException:
            job.state = JobState.FAILED
            raise
        finally:
            if page is not None:
                try:
                    await page.close()
                except Exception as e:
                    logger.debug(f"Ignoring error while closing page: {e}")
            self.gate.release()
            self._jobs.pop(job.job_id, None)

    def prepare_document(self, request: PdfRequest) -> str:
        """
        Render, sanitize and theme the markdown into a print document.

        Blocking; call it from a worker thread.
        """
        content = self.renderer.render_sanitized(request.markdown)
        try:
            theme_css = self.themes.get_stylesheet(request.theme)
        except UnknownThemeError as e:
            # Theme ids are validated with the request; a miss here is internal
            raise UnknownThemeError(e.theme_id, http_status=500) from e
        return build_document(content, theme_css, request.options)

    async def _with_timeout(self, awaitable: Awaitable[T], phase: str) -> T:
        try:
            return await asyncio.wait_for(awaitable, timeout=self.timeout_ms / 1000)
        except (asyncio.TimeoutError, PlaywrightTimeoutError) as e:
            raise RenderTimeoutError(phase, self.timeout_ms) from e

    def viewport_for(self, page_size: str) -> dict[str, int]:
        height = self.b5_height_px if page_size in EXPLICIT_DIMENSION_SIZES else DEFAULT_VIEWPORT_HEIGHT
        return {"width": self.page_widths[page_size], "height": height}

    def pdf_options(self, options: PdfOptions) -> dict[str, Any]:
        """Keyword arguments for Page.pdf()."""
        margin = margin_for(options)
        pdf_options: dict[str, Any] = {
            "print_background": True,
            "margin": {
                "top": margin,
                "right": margin,
                "bottom": FOOTER_MARGIN if options.include_page_numbers else margin,
                "left": margin,
            },
        }

        if options.page_size in EXPLICIT_DIMENSION_SIZES:
            pdf_options["width"] = f"{self.page_widths[options.page_size]}px"
            pdf_options["height"] = f"{self.b5_height_px}px"
        else:
            pdf_options["format"] = options.page_size

        if options.include_page_numbers:
            pdf_options["display_header_footer"] = True
            pdf_options["header_template"] = EMPTY_HEADER_TEMPLATE
            pdf_options["footer_template"] = FOOTER_TEMPLATE

        return pdf_options

    async def close(self) -> None:
        """Shut down the shared browser."""
        await self.browser.close()


_coordinator: PdfRenderCoordinator | None = None


def get_coordinator() -> PdfRenderCoordinator:
    """Process-wide coordinator built from settings on first use."""
    global _coordinator
    if _coordinator is None:
        settings = get_settings()
        _coordinator = PdfRenderCoordinator(
            get_markdown_renderer(),
            get_theme_store(),
            concurrency_limit=settings.pdf_concurrency_limit,
            max_pending=settings.pdf_max_pending,
            timeout_ms=settings.pdf_timeout_ms,
            browser=BrowserHandle(settings.browser_executable_path),
            page_widths=settings.page_widths,
            b5_height_px=settings.b5_height_px,
        )
    return _coordinator


async def shutdown_coordinator() -> None:
    """Close the coordinator's browser, if one was ever created."""
    global _coordinator
    coordinator, _coordinator = _coordinator, None
    if coordinator is not None:
        await coordinator.close()
