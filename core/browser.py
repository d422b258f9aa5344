"""
Headless browser session for the audit engines.

Every invocation launches its own Chromium process and tears it down on
exit; nothing is shared between jobs.
"""

import logging
from typing import List, Optional

from playwright.async_api import Browser, Playwright, async_playwright

logger = logging.getLogger(__name__)

DEFAULT_ARGS = [
    "--disable-dev-shm-usage",  # Prevents memory issues in Docker
    "--no-sandbox",  # Required in some containerized environments
    "--disable-setuid-sandbox",
    "--disable-gpu",
]


class HeadlessBrowserSession:
    """
    Scoped Chromium process.

    Usage:
        async with HeadlessBrowserSession() as browser:
            page = await browser.new_page()

    The browser and the Playwright driver are released on every exit path.
    Release errors are logged and never replace an error raised inside the
    block.
    """

    def __init__(self, extra_args: Optional[List[str]] = None, headless: bool = True):
        self.args = DEFAULT_ARGS + list(extra_args or [])
        self.headless = headless
        self.playwright: Optional[Playwright] = None
        self.browser: Optional[Browser] = None

    async def __aenter__(self) -> Browser:
        try:
            self.playwright = await async_playwright().start()
            self.browser = await self.playwright.chromium.launch(
                headless=self.headless,
                args=self.args,
            )
        except Exception:
            await self.close()
            raise
        logger.debug("🌐 Headless browser launched")
        return self.browser

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()
        return False

    async def close(self):
        """Close the browser and stop Playwright, swallowing release errors"""
        if self.browser is not None:
            try:
                await self.browser.close()
            except Exception as e:
                logger.warning(f"⚠️  Error closing browser: {str(e)}")
            finally:
                self.browser = None

        if self.playwright is not None:
            try:
                await self.playwright.stop()
            except Exception as e:
                logger.warning(f"⚠️  Error stopping Playwright: {str(e)}")
            finally:
                self.playwright = None
