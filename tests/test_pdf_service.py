"""Tests for the PDF render coordinator."""

import asyncio
import threading
import time
from collections.abc import Callable
from unittest.mock import MagicMock

import pytest

from markprint.modules.pdf.document import build_document
from markprint.modules.pdf.schemas import PdfOptions, PdfRequest
from markprint.modules.pdf.service import PdfRenderCoordinator
from markprint.shared.errors import RenderTimeoutError, TooManyPendingError, UnknownThemeError
from markprint.shared.types import JobState


def make_request(**options) -> PdfRequest:
    return PdfRequest(
        markdown="# Test Heading",
        theme="clean",
        options=PdfOptions(**{"include_page_numbers": False, **options}),
    )


async def wait_until(predicate: Callable[[], bool], timeout: float = 5.0) -> None:
    """Poll until predicate holds; documents are prepared on worker threads."""
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(0.01)


class TestGeneratePdf:
    """Happy path against a mocked browser."""

    def test_returns_pdf_bytes(self, coordinator: PdfRenderCoordinator, mock_page: MagicMock):
        """generate_pdf should return the bytes from page.pdf and clean up."""
        result = asyncio.run(coordinator.generate_pdf(make_request()))

        assert result.startswith(b"%PDF-")
        mock_page.close.assert_awaited_once()
        assert coordinator.gate.active == 0
        assert coordinator.jobs == []

    def test_loads_full_document(self, coordinator: PdfRenderCoordinator, mock_page: MagicMock):
        """The page should receive a complete themed HTML document."""
        asyncio.run(coordinator.generate_pdf(make_request()))

        html = mock_page.set_content.await_args.args[0]
        assert html.startswith("<!DOCTYPE html>")
        assert '<meta charset="UTF-8">' in html
        assert "<style>" in html and "</style>" in html
        assert "Test Heading</h1>" in html
        assert "/* Theme: clean */" in html
        assert mock_page.set_content.await_args.kwargs["wait_until"] == "networkidle"

    def test_sanitizes_before_loading(self, coordinator: PdfRenderCoordinator, mock_page: MagicMock):
        """Script from the markdown should never reach the browser."""
        request = PdfRequest(markdown="<script>alert(1)</script>Safe", theme="clean")
        asyncio.run(coordinator.generate_pdf(request))

        html = mock_page.set_content.await_args.args[0]
        assert "Safe" in html
        assert "alert(1)" not in html

    def test_prepares_document_off_event_loop(self, coordinator: PdfRenderCoordinator):
        """Markdown rendering should run on a worker thread, not the loop thread."""
        render_threads: list[int] = []
        original = coordinator.renderer.render_sanitized

        def tracking_render(markdown: str) -> str:
            render_threads.append(threading.get_ident())
            return original(markdown)

        coordinator.renderer.render_sanitized = tracking_render

        async def scenario() -> int:
            await coordinator.generate_pdf(make_request())
            return threading.get_ident()

        loop_thread = asyncio.run(scenario())

        assert len(render_threads) == 1
        assert render_threads[0] != loop_thread

    @pytest.mark.parametrize("page_size,width", [("A4", 794), ("Letter", 816), ("Legal", 816)])
    def test_named_formats(self, coordinator, mock_page, page_size, width):
        """A4, Letter and Legal should use the named paper format."""
        asyncio.run(coordinator.generate_pdf(make_request(page_size=page_size)))

        mock_page.set_viewport_size.assert_awaited_once_with({"width": width, "height": 1080})
        pdf_options = mock_page.pdf.await_args.kwargs
        assert pdf_options["format"] == page_size
        assert "width" not in pdf_options
        assert pdf_options["print_background"] is True

    def test_b5_uses_explicit_dimensions(self, coordinator, mock_page):
        """B5 has no format name and should be sized in pixels."""
        asyncio.run(coordinator.generate_pdf(make_request(page_size="B5")))

        mock_page.set_viewport_size.assert_awaited_once_with({"width": 672, "height": 945})
        pdf_options = mock_page.pdf.await_args.kwargs
        assert "format" not in pdf_options
        assert pdf_options["width"] == "672px"
        assert pdf_options["height"] == "945px"

    @pytest.mark.parametrize("margins,expected", [("normal", "20mm"), ("narrow", "10mm"), ("wide", "25mm")])
    def test_margins(self, coordinator, mock_page, margins, expected):
        """Margin presets should apply to both the PDF and the @page rule."""
        asyncio.run(coordinator.generate_pdf(make_request(margins=margins)))

        margin = mock_page.pdf.await_args.kwargs["margin"]
        assert margin == {"top": expected, "right": expected, "bottom": expected, "left": expected}
        html = mock_page.set_content.await_args.args[0]
        assert f"margin: {expected};" in html

    def test_page_numbers(self, coordinator, mock_page):
        """Page numbers should add the footer and widen the bottom margin."""
        asyncio.run(coordinator.generate_pdf(make_request(margins="narrow", include_page_numbers=True)))

        pdf_options = mock_page.pdf.await_args.kwargs
        assert pdf_options["display_header_footer"] is True
        assert "pageNumber" in pdf_options["footer_template"]
        assert "totalPages" in pdf_options["footer_template"]
        assert pdf_options["margin"]["bottom"] == "25mm"
        assert pdf_options["margin"]["top"] == "10mm"

    def test_no_page_numbers(self, coordinator, mock_page):
        """Without page numbers no header or footer should be printed."""
        asyncio.run(coordinator.generate_pdf(make_request()))
        assert "display_header_footer" not in mock_page.pdf.await_args.kwargs

    def test_unknown_theme_fails_job_and_releases(self, coordinator, mock_browser):
        """An unresolvable theme inside a render should fail with a 500 and free the slot."""
        request = make_request().model_copy(update={"theme": "nope"})

        with pytest.raises(UnknownThemeError) as exc_info:
            asyncio.run(coordinator.generate_pdf(request))

        assert exc_info.value.http_status == 500
        assert exc_info.value.code == "UNKNOWN_THEME"
        mock_browser.new_page.assert_not_awaited()
        assert coordinator.gate.active == 0

    def test_browser_failure_releases_slot(self, coordinator, mock_browser, mock_page):
        """A browser error should still release the admission slot."""
        mock_browser.new_page.side_effect = RuntimeError("browser crashed")

        with pytest.raises(RuntimeError):
            asyncio.run(coordinator.generate_pdf(make_request()))

        assert coordinator.gate.active == 0
        mock_page.close.assert_not_awaited()

    def test_page_close_errors_are_ignored(self, coordinator, mock_page):
        """Failing to close the page should not fail the job."""
        mock_page.close.side_effect = RuntimeError("already closed")

        result = asyncio.run(coordinator.generate_pdf(make_request()))

        assert result.startswith(b"%PDF-")
        assert coordinator.gate.active == 0


class TestTimeouts:
    """Per-phase time budget."""

    def test_content_load_timeout(self, coordinator, mock_page):
        """A hanging content load should time out, close the page and free the slot."""
        coordinator.timeout_ms = 200

        async def hang(*args, **kwargs):
            await asyncio.Event().wait()

        mock_page.set_content.side_effect = hang

        async def scenario():
            with pytest.raises(RenderTimeoutError) as exc_info:
                await coordinator.generate_pdf(make_request())
            assert "loading content" in exc_info.value.message
            mock_page.close.assert_awaited_once()
            assert coordinator.gate.active == 0

            # Capacity is intact: the next job is admitted straight away
            mock_page.set_content.side_effect = None
            assert coordinator.gate.can_admit_now()
            result = await coordinator.generate_pdf(make_request())
            assert result.startswith(b"%PDF-")

        asyncio.run(scenario())

    def test_rasterize_timeout(self, coordinator, mock_page):
        """A hanging rasterization should time out with its own phase."""
        coordinator.timeout_ms = 200

        async def hang(*args, **kwargs):
            await asyncio.Event().wait()

        mock_page.pdf.side_effect = hang

        with pytest.raises(RenderTimeoutError) as exc_info:
            asyncio.run(coordinator.generate_pdf(make_request()))

        assert exc_info.value.phase == "rasterizing the document"
        assert exc_info.value.http_status == 408
        mock_page.close.assert_awaited_once()
        assert coordinator.gate.active == 0

    def test_prepare_timeout(self, coordinator, mock_browser):
        """Slow markdown rendering should count against the time budget."""
        coordinator.timeout_ms = 50

        def slow_render(markdown: str) -> str:
            time.sleep(0.3)
            return "<p>late</p>"

        coordinator.renderer.render_sanitized = slow_render

        with pytest.raises(RenderTimeoutError) as exc_info:
            asyncio.run(coordinator.generate_pdf(make_request()))

        assert exc_info.value.phase == "preparing the document"
        mock_browser.new_page.assert_not_awaited()
        assert coordinator.gate.active == 0

    def test_playwright_timeout_maps_to_render_timeout(self, coordinator, mock_page):
        """Playwright's own timeout should surface as a render timeout."""
        from playwright.async_api import TimeoutError as PlaywrightTimeoutError

        mock_page.set_content.side_effect = PlaywrightTimeoutError("Timeout 100ms exceeded.")

        with pytest.raises(RenderTimeoutError):
            asyncio.run(coordinator.generate_pdf(make_request()))


class TestAdmission:
    """Bounded concurrency over the shared browser."""

    def test_limit_plus_one_leaves_one_queued(self, coordinator, mock_page, mock_browser):
        """With limit N, N+1 jobs should leave N rendering and one queued."""
        async def scenario():
            release = asyncio.Event()

            async def blocked(*args, **kwargs):
                await release.wait()

            mock_page.set_content.side_effect = blocked

            tasks = [asyncio.create_task(coordinator.generate_pdf(make_request())) for _ in range(3)]
            await wait_until(lambda: coordinator.count(JobState.RENDERING) == 2)

            assert coordinator.count(JobState.QUEUED) == 1
            assert coordinator.gate.pending == 1
            # One page per active job
            assert mock_browser.new_page.await_count == 2

            release.set()
            results = await asyncio.gather(*tasks)

            assert all(r.startswith(b"%PDF-") for r in results)
            assert mock_browser.new_page.await_count == 3
            assert mock_page.close.await_count == 3
            assert coordinator.gate.active == 0
            assert coordinator.jobs == []

        asyncio.run(scenario())

    def test_excess_beyond_queue_fails_immediately(self, coordinator, mock_page):
        """Jobs beyond limit plus queue should fail with TooManyPending at once."""
        async def scenario():
            release = asyncio.Event()

            async def blocked(*args, **kwargs):
                await release.wait()

            mock_page.set_content.side_effect = blocked

            # limit 2 + queue 4
            tasks = [asyncio.create_task(coordinator.generate_pdf(make_request())) for _ in range(6)]
            await wait_until(lambda: coordinator.gate.active == 2 and coordinator.gate.pending == 4)

            with pytest.raises(TooManyPendingError):
                await coordinator.generate_pdf(make_request())
            assert len(coordinator.jobs) == 6

            release.set()
            results = await asyncio.gather(*tasks)
            assert len(results) == 6
            assert coordinator.gate.active == 0

        asyncio.run(scenario())

    def test_status_snapshot(self, coordinator):
        """status() should report an idle gate before any job."""
        status = coordinator.status()

        assert status.active == 0
        assert status.pending == 0
        assert status.limit == 2
        assert status.max_pending == 4
        assert status.browser_connected is False


def test_build_document_embeds_page_setup():
    """build_document should include page rules, theme CSS and print tweaks."""
    html = build_document("<p>Body</p>", "h1 { color: red; }", PdfOptions(page_size="Letter", margins="wide"))

    assert "size: Letter;" in html
    assert "margin: 25mm;" in html
    assert "h1 { color: red; }" in html
    assert "<p>Body</p>" in html
    assert "page-break-after: avoid" in html
    assert "orphans: 3" in html
    assert "max-width: 100%" in html


def test_options_accept_camel_case():
    """Options should accept the client's camelCase keys."""
    options = PdfOptions.model_validate({"pageSize": "Legal", "margins": "narrow", "includePageNumbers": False})

    assert options.page_size == "Legal"
    assert options.include_page_numbers is False


def test_option_defaults():
    """Omitted options should default to A4, normal margins and page numbers."""
    request = PdfRequest.model_validate({"markdown": "x", "theme": "clean"})

    assert request.options.page_size == "A4"
    assert request.options.margins == "normal"
    assert request.options.include_page_numbers is True
