"""
Playwright-backed page sessions.

PlaywrightPageSession satisfies signals.PageSession (goto + evaluate) and can also
take screenshots. Always use it as an async context manager so the browser is
closed on every exit path.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional, Tuple

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from playwright.async_api import async_playwright

from .config import Settings, get_settings
from .errors import BrowserError, CaptureError, EvaluationError, NavigationError, NavigationTimeout

logger = logging.getLogger(__name__)

IMAGE_TYPES = ("png", "jpeg")


def normalize_url(url: str) -> str:
    u = (url or "").strip()
    if u and not u.startswith(("http://", "https://")):
        u = "https://" + u
    return u


@dataclass
class ScreenshotOptions:
    width: Optional[int] = None        # None -> settings viewport
    height: Optional[int] = None
    full_page: bool = False
    image_type: str = "png"            # png | jpeg
    quality: Optional[int] = None      # jpeg only, 0-100

    @property
    def content_type(self) -> str:
        return f"image/{self.image_type}"


class PlaywrightPageSession:
    """One headless Chromium page."""

    def __init__(self, settings: Settings = None, viewport: Tuple[Optional[int], Optional[int]] = (None, None)):
        self.settings = settings or get_settings()
        width, height = viewport
        self.viewport = {
            "width": width or self.settings.viewport_width,
            "height": height or self.settings.viewport_height,
        }
        self._playwright = None
        self._browser = None
        self.page = None

    async def __aenter__(self) -> "PlaywrightPageSession":
        try:
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(
                headless=True, args=list(self.settings.browser_args)
            )
            self.page = await self._browser.new_page(viewport=self.viewport)
        except PlaywrightError as e:
            await self.close()
            raise BrowserError(f"browser launch failed: {e}") from e
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def goto(self, url: str, timeout_ms: int = None) -> None:
        timeout_ms = timeout_ms or self.settings.navigation_timeout_ms
        try:
            await self.page.goto(url, wait_until="networkidle", timeout=timeout_ms)
        except PlaywrightTimeoutError as e:
            raise NavigationTimeout(f"{url} did not settle within {timeout_ms} ms") from e
        except PlaywrightError as e:
            raise NavigationError(f"could not load {url}: {e}") from e

    async def evaluate(self, script: str, arg: Any = None) -> Any:
        try:
            return await self.page.evaluate(script, arg)
        except PlaywrightError as e:
            raise EvaluationError(f"page script failed: {e}") from e

    async def screenshot(self, options: ScreenshotOptions) -> bytes:
        kwargs = {"full_page": options.full_page, "type": options.image_type}
        if options.image_type == "jpeg" and options.quality is not None:
            kwargs["quality"] = options.quality
        try:
            return await self.page.screenshot(**kwargs)
        except PlaywrightError as e:
            raise CaptureError(f"screenshot failed: {e}") from e

    async def close(self) -> None:
        # page closes with the browser
        try:
            if self._browser:
                await self._browser.close()
            if self._playwright:
                await self._playwright.stop()
        except PlaywrightError as e:
            logger.warning(f"browser cleanup warning: {e}")
        finally:
            self._browser = None
            self._playwright = None
            self.page = None


async def capture_screenshot(url: str, options: ScreenshotOptions = None, session_factory=PlaywrightPageSession) -> bytes:
    """Load `url` and return raster bytes of the rendered page."""
    options = options or ScreenshotOptions()
    if options.image_type not in IMAGE_TYPES:
        raise CaptureError(f"unsupported image type {options.image_type!r}")
    url = normalize_url(url)
    async with session_factory(viewport=(options.width, options.height)) as session:
        await session.goto(url)
        image = await session.screenshot(options)
    logger.info(f"captured {url} ({len(image)} bytes, {options.image_type})")
    return image
