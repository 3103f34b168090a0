"""
Shared headless browser handle.

One Chromium instance is launched on first demand and reused by every job.
If it disconnects unexpectedly the handle forgets it and the next caller
launches a fresh one.
"""

import asyncio

from playwright.async_api import Browser, Playwright, async_playwright

from markprint.shared.logging import get_logger

logger = get_logger(__name__)

LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
]


class BrowserHandle:
    """Lazily launched, self-healing reference to a Chromium process."""

    def __init__(self, executable_path: str | None = None) -> None:
        self.executable_path = executable_path
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._launch_lock = asyncio.Lock()

    @property
    def is_connected(self) -> bool:
        return self._browser is not None and self._browser.is_connected()

    async def get(self) -> Browser:
        """Return the live browser, launching it if needed."""
        if self._browser is not None and self._browser.is_connected():
            return self._browser

        # Concurrent first callers share one launch
        async with self._launch_lock:
            if self._browser is not None and self._browser.is_connected():
                return self._browser

            browser = await self._launch()
            browser.on("disconnected", self._on_disconnected)
            self._browser = browser
            return browser

    async def _launch(self) -> Browser:
        if self._playwright is None:
            self._playwright = await async_playwright().start()

        logger.info("Launching headless Chromium")
        return await self._playwright.chromium.launch(
            headless=True,
            args=LAUNCH_ARGS,
            executable_path=self.executable_path,
        )

    def _on_disconnected(self, browser: Browser) -> None:
        if browser is self._browser:
            logger.warning("Browser disconnected; it will be relaunched on next use")
            self._browser = None

    async def close(self) -> None:
        """Close the browser and stop the Playwright driver."""
        browser, self._browser = self._browser, None
        if browser is not None:
            try:
                await browser.close()
            except Exception as e:
                logger.warning(f"Error closing browser: {e}")

        playwright, self._playwright = self._playwright, None
        if playwright is not None:
            await playwright.stop()
            logger.info("Browser closed")
