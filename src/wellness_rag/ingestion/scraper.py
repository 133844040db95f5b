"""Headless-browser page scraping.

Pages are rendered in Chromium through Playwright so that client-side
rendered articles yield their final DOM text, not the bootstrap HTML.
"""

from __future__ import annotations

import asyncio
import logging
import re
from abc import ABC, abstractmethod

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright

from wellness_rag.errors import FetchError

logger = logging.getLogger(__name__)

_TAG_RE = re.compile(r"<[^>]*>?", re.MULTILINE)


def strip_tags(html: str) -> str:
    """Remove every markup tag from *html*, keeping the text between them."""
    return _TAG_RE.sub("", html)


class Scraper(ABC):
    """Fetches a URL and returns its text with markup removed."""

    @abstractmethod
    async def scrape(self, url: str) -> str:
        """Return the page text; raises :class:`FetchError` on any failure."""
        ...


class PlaywrightScraper(Scraper):
    """Render pages in headless Chromium and return ``document.body`` text.

    Parameters
    ----------
    timeout:
        Seconds allowed for launch, navigation and extraction together.
    headless:
        Run the browser without a window (always ``True`` in production).
    """

    def __init__(self, *, timeout: float = 60.0, headless: bool = True) -> None:
        self._timeout = timeout
        self._headless = headless

    async def scrape(self, url: str) -> str:
        logger.info("Scraping %s", url)
        try:
            html = await asyncio.wait_for(self._render(url), timeout=self._timeout)
        except asyncio.CancelledError:
            raise
        except asyncio.TimeoutError as exc:
            raise FetchError(url, f"timed out after {self._timeout}s") from exc
        except PlaywrightError as exc:
            raise FetchError(url, str(exc)) from exc
        except Exception as exc:
            raise FetchError(url, f"{type(exc).__name__}: {exc}") from exc
        return strip_tags(html)

    async def _render(self, url: str) -> str:
        async with async_playwright() as pw:
            browser = await pw.chromium.launch(headless=self._headless)
            try:
                page = await browser.new_page()
                await page.goto(
                    url,
                    wait_until="domcontentloaded",
                    timeout=self._timeout * 1000,
                )
                html = await page.evaluate("() => document.body ? document.body.innerHTML : ''")
            finally:
                await browser.close()
        return html or ""
