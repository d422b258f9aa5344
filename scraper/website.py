"""
Website scraper: structural and UX signals plus a viewport screenshot.
"""

import logging
import time
from typing import Callable, Optional

from api.models import PageMetadata, ScrapeResult
from config import settings
from core.browser import HeadlessBrowserSession
from core.exceptions import ScrapeError
from scraper.extraction import (
    CTA_SELECTOR,
    CTA_SNAPSHOT_JS,
    FORM_INPUT_COUNT_JS,
    FORM_SELECTOR,
    HEADING_SELECTOR,
    HEADING_SNAPSHOT_JS,
    META_CONTENT_JS,
    META_DESCRIPTION_SELECTOR,
    NAVIGATION_LINK_COUNT_JS,
    NAVIGATION_SELECTOR,
    WINDOW_SIZE_JS,
    build_forms,
    build_navigation,
    filter_ctas,
    filter_headings,
)
from scraper.screenshots import ScreenshotPathFactory

logger = logging.getLogger(__name__)


class WebsiteScraper:
    """
    Scrapes one URL per call in its own browser process.

    Args:
        session_factory: Callable returning an async context manager that yields a browser
        screenshots: Path factory for viewport screenshots
        viewport_width: Page viewport width
        viewport_height: Page viewport height
        navigation_timeout_ms: Upper bound for reaching network idle
    """

    def __init__(
        self,
        session_factory: Callable = HeadlessBrowserSession,
        screenshots: Optional[ScreenshotPathFactory] = None,
        viewport_width: int = settings.VIEWPORT_WIDTH,
        viewport_height: int = settings.VIEWPORT_HEIGHT,
        navigation_timeout_ms: int = settings.NAVIGATION_TIMEOUT_MS,
    ):
        self.session_factory = session_factory
        self.screenshots = screenshots or ScreenshotPathFactory(settings.SCREENSHOTS_DIR)
        self.viewport_width = viewport_width
        self.viewport_height = viewport_height
        self.navigation_timeout_ms = navigation_timeout_ms

    async def scrape(self, url: str) -> ScrapeResult:
        """
        Navigate to url and extract metadata, headings, CTAs, forms,
        navigation and a screenshot.

        Raises:
            ScrapeError: On any unrecovered failure, naming the URL and cause
        """
        start = time.time()
        try:
            async with self.session_factory() as browser:
                page = await browser.new_page(
                    viewport={"width": self.viewport_width, "height": self.viewport_height}
                )
                try:
                    result = await self._extract(page, url)
                finally:
                    await self._close_page(page)
        except ScrapeError:
            raise
        except Exception as e:
            raise ScrapeError(url, e) from e

        logger.info(
            f"🕸️  Scraped {url} in {time.time() - start:.2f}s: "
            f"{len(result.headings)} headings, {len(result.ctas)} CTAs, {len(result.forms)} forms"
        )
        return result

    async def _extract(self, page, url: str) -> ScrapeResult:
        await self._navigate(page, url)

        viewport = page.viewport_size or {}
        viewport_height = viewport.get("height") or self.viewport_height

        metadata = await self._extract_metadata(page)

        headings = filter_headings(
            await page.eval_on_selector_all(HEADING_SELECTOR, HEADING_SNAPSHOT_JS)
        )

        window = await page.evaluate(WINDOW_SIZE_JS)
        ctas = filter_ctas(
            await page.eval_on_selector_all(CTA_SELECTOR, CTA_SNAPSHOT_JS),
            window_width=window["width"],
            window_height=window["height"],
            viewport_height=viewport_height,
        )

        forms = await self._extract_forms(page)
        navigation = await self._extract_navigation(page)
        screenshot_path = await self._capture_screenshot(page)

        return ScrapeResult(
            metadata=metadata,
            headings=headings,
            ctas=ctas,
            forms=forms,
            navigation=navigation,
            screenshot_path=screenshot_path,
        )

    async def _navigate(self, page, url: str):
        logger.info(f"📡 Navigating to {url}")
        try:
            await page.goto(url, wait_until="networkidle", timeout=self.navigation_timeout_ms)
        except Exception as e:
            raise ScrapeError(url, e, stage="Navigation failed") from e

    async def _extract_metadata(self, page) -> PageMetadata:
        # Best-effort: missing or unreadable values become None
        try:
            title = await page.title()
        except Exception as e:
            logger.debug(f"Title unavailable: {e}")
            title = None

        try:
            description = await page.eval_on_selector(META_DESCRIPTION_SELECTOR, META_CONTENT_JS)
        except Exception:
            description = None

        return PageMetadata(title=title, description=description or None)

    async def _extract_forms(self, page):
        try:
            counts = await page.eval_on_selector_all(FORM_SELECTOR, FORM_INPUT_COUNT_JS)
        except Exception as e:
            logger.debug(f"Form extraction failed, reporting none: {e}")
            return []
        return build_forms(counts)

    async def _extract_navigation(self, page):
        # Only the first nav landmark counts; eval_on_selector raises when there is none
        try:
            link_count = await page.eval_on_selector(NAVIGATION_SELECTOR, NAVIGATION_LINK_COUNT_JS)
        except Exception:
            link_count = 0
        return build_navigation(link_count)

    async def _capture_screenshot(self, page) -> str:
        path = self.screenshots.reserve()
        try:
            await page.screenshot(path=str(path), full_page=False)
        except Exception:
            path.unlink(missing_ok=True)
            raise
        logger.info(f"📸 Screenshot saved to {path}")
        return str(path)

    async def _close_page(self, page):
        try:
            await page.close()
        except Exception as e:
            logger.warning(f"⚠️  Error closing page: {str(e)}")
