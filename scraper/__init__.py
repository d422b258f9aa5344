# Scraper package - Playwright website scraper and extraction rules
from .screenshots import ScreenshotPathFactory
from .website import WebsiteScraper

__all__ = [
    "ScreenshotPathFactory",
    "WebsiteScraper",
]
