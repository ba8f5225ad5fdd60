"""
Theme analysis pipelines.

- analyze_screenshot: raster bytes -> palette -> theme (pixel path)
- analyze_page: live page session -> DOM signals -> theme (DOM path)
- analyze_website_colors: opens a browser session for a URL, runs the DOM path, always closes it

Every entry point returns a ThemeResult; extractor failures become failed results,
never partial themes.
"""

import logging
from datetime import datetime, timezone

from .browser import PlaywrightPageSession, normalize_url
from .config import get_settings
from .errors import ThemeshotError
from .models import ThemeResult, palette_to_dict
from .palette import extract_palette, rank_dominant_colors
from .signals import PageSession, collect_signals
from .themes import logo_info, synthesize_from_palette, synthesize_from_signals

logger = logging.getLogger(__name__)


# ---------- Pixel path ----------
def analyze_screenshot(image_bytes: bytes, max_size: int = None) -> ThemeResult:
    max_size = max_size or get_settings().max_image_side
    try:
        palette = extract_palette(image_bytes, max_size=max_size)
    except ThemeshotError as e:
        logger.warning(f"pixel theme failed: {e}")
        return ThemeResult.failed(e)

    theme = synthesize_from_palette(palette)
    return ThemeResult.ok(
        theme,
        originalPalette=palette_to_dict(palette),
        dominantColors=[entry.to_dict() for entry in rank_dominant_colors(palette)],
    )


generate_ui_theme = analyze_screenshot


# ---------- DOM path ----------
async def analyze_page(session: PageSession, url: str, timeout_ms: int = None) -> ThemeResult:
    timeout_ms = timeout_ms or get_settings().navigation_timeout_ms
    try:
        signals = await collect_signals(session, url, timeout_ms=timeout_ms)
    except ThemeshotError as e:
        logger.warning(f"DOM theme failed for {url}: {e}")
        return ThemeResult.failed(e)

    theme = synthesize_from_signals(signals)
    raw = signals.to_dict()
    return ThemeResult.ok(
        theme,
        logoInfo=logo_info(signals),
        rawAnalysis=raw,
        extractedFonts=raw["fonts"],
        extractedAt=datetime.now(timezone.utc).isoformat(),
    )


async def analyze_website_colors(url: str, session_factory=PlaywrightPageSession) -> ThemeResult:
    url = normalize_url(url)
    try:
        async with session_factory() as session:
            return await analyze_page(session, url)
    except ThemeshotError as e:
        # launch failures surface here; the session is already closed
        logger.error(f"browser session failed for {url}: {e}")
        return ThemeResult.failed(e)
