"""Shared test fixtures."""

from collections.abc import Callable, Iterator
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from markprint.app import build_app
from markprint.config import Settings, init_settings, reset_settings
from markprint.modules.markdown.service import MarkdownRenderer
from markprint.modules.pdf.service import PdfRenderCoordinator
from markprint.modules.themes.service import ThemeStore, reset_theme_store

PDF_BYTES = b"%PDF-1.4 mock"


@pytest.fixture
def settings() -> Iterator[Settings]:
    """Test settings installed as the process-wide settings."""
    reset_settings()
    reset_theme_store()
    test_settings = init_settings(Settings(environment="test", pdf_timeout_ms=2000))
    yield test_settings
    reset_settings()
    reset_theme_store()


@pytest.fixture
def mock_page() -> MagicMock:
    page = MagicMock()
    page.set_viewport_size = AsyncMock()
    page.set_content = AsyncMock()
    page.pdf = AsyncMock(return_value=PDF_BYTES)
    page.close = AsyncMock()
    return page


@pytest.fixture
def mock_browser(mock_page: MagicMock) -> MagicMock:
    browser = MagicMock()
    browser.new_page = AsyncMock(return_value=mock_page)
    browser.close = AsyncMock()
    browser.is_connected.return_value = True
    return browser


@pytest.fixture
def launch(mock_browser: MagicMock) -> Iterator[AsyncMock]:
    """Replace the Chromium launch with the mock browser."""
    with patch(
        "markprint.modules.pdf.browser.BrowserHandle._launch",
        new=AsyncMock(return_value=mock_browser),
    ) as launch_mock:
        yield launch_mock


@pytest.fixture
def coordinator(settings: Settings, launch: AsyncMock) -> PdfRenderCoordinator:
    """Coordinator with a limit of 2."""
    return PdfRenderCoordinator(
        MarkdownRenderer(),
        ThemeStore(settings.themes_dir),
        concurrency_limit=2,
        timeout_ms=1000,
    )


@pytest.fixture
def make_client(launch: AsyncMock) -> Iterator[Callable[..., TestClient]]:
    """Factory for clients with settings overrides."""
    clients: list[TestClient] = []

    def _make(**overrides) -> TestClient:
        reset_theme_store()
        app = build_app(Settings(environment="test", **overrides))
        client = TestClient(app)
        client.__enter__()
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.__exit__(None, None, None)
    reset_settings()
    reset_theme_store()


@pytest.fixture
def client(make_client: Callable[..., TestClient]) -> TestClient:
    return make_client()
