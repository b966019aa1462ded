"""
Pressroom Backend: Page Screenshots
===================================

What:  Renders a public web page to a full-page PNG.
How:   PlaywrightRenderer launches headless Chromium per request, waits for the
       network to go idle and captures the whole scrollable page. The browser is
       always closed, even when navigation fails.

Only absolute http(s) URLs are accepted; anything else (file://, javascript:,
bare hostnames) is rejected before a browser is started.
"""

import logging
import re
from abc import ABC, abstractmethod
from urllib.parse import urlsplit

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright

from pressroom.exceptions import UpstreamServiceError, ValidationError

logger = logging.getLogger(__name__)

# Proxies and path normalisation can collapse "https://" to "https:/"
_COLLAPSED_SCHEME = re.compile(r"^(https?):/(?!/)", re.IGNORECASE)


def normalize_target_url(raw: str) -> str:
    """
    Turn the path segment of GET /screenshot/{url} into a navigable URL.

    Raises:
        ValidationError: not an absolute http(s) URL with a host
    """
    url = _COLLAPSED_SCHEME.sub(r"\1://", (raw or "").strip())
    parts = urlsplit(url)
    if parts.scheme.lower() not in ("http", "https") or not parts.hostname:
        raise ValidationError(
            message="A valid http or https URL is required",
            field="url",
            context={"url": raw},
        )
    return url


class PageRenderer(ABC):
    """Renders a URL to PNG bytes. Failures raise UpstreamServiceError("renderer")."""

    @abstractmethod
    async def render(self, url: str) -> bytes:
        ...


class PlaywrightRenderer(PageRenderer):

    def __init__(self, timeout_ms: int = 30000):
        self.timeout_ms = timeout_ms

    async def render(self, url: str) -> bytes:
        try:
            async with async_playwright() as playwright:
                browser = await playwright.chromium.launch()
                try:
                    page = await browser.new_page()
                    await page.goto(url, wait_until="networkidle", timeout=self.timeout_ms)
                    image = await page.screenshot(full_page=True, type="png")
                finally:
                    await browser.close()
        except PlaywrightError as e:
            logger.error("Screenshot of %s failed: %s", url, e.message)
            raise UpstreamServiceError(
                service="renderer",
                message=f"Error capturing screenshot: {e.message}",
                context={"url": url},
            )

        logger.info("Captured screenshot of %s (%d bytes)", url, len(image))
        return image
