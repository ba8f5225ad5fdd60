"""
DOM signal extraction.

Two halves:
- COLLECT_PAGE_SIGNALS_JS runs read-only inside the rendered page and dumps raw
  computed styles, geometry and attributes (no decisions are made in the page).
- build_snapshot() and the helpers below reduce that dump to a DomSignalSnapshot:
  color normalization, caps, first-match lookups, logo strategies, font probing.

The reduction is pure, so it can be exercised with a synthetic dump and no browser.
"""

import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Protocol, Tuple

from .colors import css_color_to_hex
from .errors import EvaluationError
from .models import (
    ButtonSignal,
    DomSignalSnapshot,
    FontInfo,
    HeadingSignal,
    LogoCandidate,
    NavigationSignal,
)

logger = logging.getLogger(__name__)

# ---------- Constants / Defaults ----------
NAVIGATION_TIMEOUT_MS = 30000

BUTTON_SELECTORS = [
    'button', '.btn', '.button', '[role="button"]',
    '.btn-primary', '.primary-btn', '.cta', '.call-to-action',
    'input[type="submit"]', 'input[type="button"]',
]
NAVIGATION_SELECTORS = [
    'header', 'nav', '.navbar', '.navigation', '.header',
    '.site-header', '.main-nav', '.top-bar',
]
HEADER_AREA_SELECTOR = 'header, nav, .navbar, .header, .site-header, .top-bar'
EXPLICIT_LOGO_SELECTORS = [
    'img[alt*="logo" i]', 'img[class*="logo" i]', 'img[id*="logo" i]',
    '.logo img', '.brand img', '.site-logo img', '.company-logo img',
    'svg[class*="logo" i]', 'svg[id*="logo" i]', '.logo svg', '.brand svg',
]
BACKGROUND_SELECTORS = ['body', 'main', '.main', '.container', '.wrapper']
FONT_HOSTS = ('fonts.googleapis.com', 'fonts.gstatic.com', 'typekit.net', 'fonts.adobe.com')
LOGO_KEYWORDS = ('logo', 'brand', 'company', 'site')

MAX_BUTTONS = 10
MAX_HEADINGS = 5
MAX_LINKS = 20
MAX_LOGOS = 3
BUTTON_TEXT_LIMIT = 50
HEADING_TEXT_LIMIT = 30
SVG_MARKUP_LIMIT = 300
TOP_AREA_FRACTION = 0.3

SCRIPT_ARGS = {
    "buttonSelectors": BUTTON_SELECTORS,
    "navigationSelectors": NAVIGATION_SELECTORS,
    "headerAreaSelector": HEADER_AREA_SELECTOR,
    "explicitLogoSelectors": EXPLICIT_LOGO_SELECTORS,
    "backgroundSelectors": BACKGROUND_SELECTORS,
    "maxPerButtonSelector": MAX_BUTTONS,
    "maxHeadings": MAX_HEADINGS,
    "maxLinks": MAX_LINKS,
    "svgMarkupLimit": SVG_MARKUP_LIMIT,
}

COLLECT_PAGE_SIGNALS_JS = """
(args) => {
  const rectOf = (el) => {
    const r = el.getBoundingClientRect();
    return { top: r.top, width: r.width, height: r.height };
  };
  const classOf = (el) => el.getAttribute('class') || '';
  const textOf = (el) => (el.textContent || '').trim();
  const safeMatches = (el, selector) => {
    try { return el.matches(selector); } catch (e) { return false; }
  };

  const rootStyles = getComputedStyle(document.documentElement);
  const rootVariables = [];
  for (let i = 0; i < rootStyles.length; i++) {
    const name = rootStyles[i];
    if (name.startsWith('--')) {
      rootVariables.push({ name, value: rootStyles.getPropertyValue(name).trim() });
    }
  }

  const buttons = [];
  args.buttonSelectors.forEach(selector => {
    Array.from(document.querySelectorAll(selector))
      .slice(0, args.maxPerButtonSelector)
      .forEach(el => {
        const s = getComputedStyle(el);
        buttons.push({
          selector,
          backgroundColor: s.backgroundColor,
          color: s.color,
          borderColor: s.borderColor,
          className: classOf(el),
          text: textOf(el),
        });
      });
  });

  const navigation = [];
  args.navigationSelectors.forEach(selector => {
    document.querySelectorAll(selector).forEach(el => {
      const s = getComputedStyle(el);
      navigation.push({ selector, backgroundColor: s.backgroundColor, color: s.color });
    });
  });

  const headings = Array.from(document.querySelectorAll('h1, h2, h3'))
    .slice(0, args.maxHeadings)
    .map(el => ({ tag: el.tagName.toLowerCase(), color: getComputedStyle(el).color, text: textOf(el) }));

  const links = Array.from(document.querySelectorAll('a'))
    .slice(0, args.maxLinks)
    .map(el => getComputedStyle(el).color);

  const backgrounds = {};
  args.backgroundSelectors.forEach(selector => {
    const el = document.querySelector(selector);
    if (el) backgrounds[selector] = getComputedStyle(el).backgroundColor;
  });

  const images = Array.from(document.querySelectorAll('img, svg')).map(el => {
    const isImg = el.tagName.toLowerCase() === 'img';
    return {
      kind: isImg ? 'img' : 'svg',
      src: isImg ? el.src : null,
      alt: isImg ? (el.alt || '') : null,
      markup: isImg ? null : el.outerHTML.substring(0, args.svgMarkupLimit),
      rect: rectOf(el),
      inHeader: !!el.closest(args.headerAreaSelector),
      explicitLogo: args.explicitLogoSelectors.some(sel => safeMatches(el, sel)),
    };
  });

  const stylesheetLinks = Array.from(document.querySelectorAll('link[href]')).map(l => l.href);

  const fontOf = (el, source) => {
    const s = getComputedStyle(el);
    return { fontFamily: s.fontFamily, fontSize: s.fontSize, fontWeight: s.fontWeight, source };
  };
  const headingFonts = ['h1', 'h2', 'h3']
    .map(tag => document.querySelector(tag))
    .filter(el => el)
    .map(el => fontOf(el, el.tagName.toLowerCase()));
  const bodyEl = document.querySelector('p') || document.body;
  const bodyFont = bodyEl ? fontOf(bodyEl, bodyEl.tagName.toLowerCase()) : null;

  return {
    rootVariables, buttons, navigation, headings, links, backgrounds, images,
    stylesheetLinks, headingFonts, bodyFont, viewportHeight: window.innerHeight,
  };
}
"""


class PageSession(Protocol):
    """What the extractor needs from a rendering engine."""

    async def goto(self, url: str, timeout_ms: int = NAVIGATION_TIMEOUT_MS) -> None:
        ...

    async def evaluate(self, script: str, arg: Any = None) -> Any:
        ...


@dataclass(frozen=True)
class PageElement:
    """One img/svg from the raw dump."""
    kind: str
    src: Optional[str]
    alt: str
    markup: Optional[str]
    top: float
    width: float
    height: float
    in_header: bool
    explicit_logo: bool

    @property
    def source_ref(self) -> Optional[str]:
        return self.src if self.kind == "img" else self.markup


# ---------- Raw dump access ----------
def _section(raw: Dict[str, Any], key: str, kind=list):
    value = raw.get(key)
    if value is None:
        return kind()
    if not isinstance(value, kind):
        raise EvaluationError(f"page dump field {key!r} should be {kind.__name__}, got {type(value).__name__}")
    return value


def _records(raw: Dict[str, Any], key: str) -> List[Dict[str, Any]]:
    return [item for item in _section(raw, key) if isinstance(item, dict)]


def _str(value) -> str:
    return value if isinstance(value, str) else ""


def _text(value, limit: int) -> str:
    return _str(value).strip()[:limit]


def _number(value) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


# ---------- Colors ----------
def extract_css_variables(variables: Iterable[Dict[str, Any]]) -> Dict[str, str]:
    found = {}
    for var in variables:
        name = _str(var.get("name"))
        if not name.startswith("--") or "color" not in name:
            continue
        hex_color = css_color_to_hex(var.get("value"))
        if hex_color:
            found[name] = hex_color
    return found


def extract_buttons(records: List[Dict[str, Any]], limit: int = MAX_BUTTONS) -> Tuple[ButtonSignal, ...]:
    buttons = []
    # the cap counts matched elements, colorless ones included
    for rec in records[:limit]:
        bg = css_color_to_hex(rec.get("backgroundColor"))
        fg = css_color_to_hex(rec.get("color"))
        border = css_color_to_hex(rec.get("borderColor"))
        if not (bg or fg or border):
            continue
        buttons.append(ButtonSignal(
            selector=_str(rec.get("selector")),
            background_color=bg,
            color=fg,
            border_color=border,
            class_name=_str(rec.get("className")),
            text=_text(rec.get("text"), BUTTON_TEXT_LIMIT),
        ))
    return tuple(buttons)


def extract_navigation(records: Iterable[Dict[str, Any]]) -> Tuple[NavigationSignal, ...]:
    entries = []
    for rec in records:
        bg = css_color_to_hex(rec.get("backgroundColor"))
        fg = css_color_to_hex(rec.get("color"))
        if bg or fg:
            entries.append(NavigationSignal(selector=_str(rec.get("selector")), background_color=bg, color=fg))
    return tuple(entries)


def extract_headings(records: List[Dict[str, Any]], limit: int = MAX_HEADINGS) -> Tuple[HeadingSignal, ...]:
    headings = []
    for rec in records[:limit]:
        color = css_color_to_hex(rec.get("color"))
        if color:
            headings.append(HeadingSignal(tag=_str(rec.get("tag")), color=color, text=_text(rec.get("text"), HEADING_TEXT_LIMIT)))
    return tuple(headings)


def extract_link_colors(colors: List[Any], limit: int = MAX_LINKS) -> Tuple[str, ...]:
    seen = []
    for value in colors[:limit]:
        hex_color = css_color_to_hex(value)
        if hex_color and hex_color not in seen:
            seen.append(hex_color)
    return tuple(seen)


def extract_backgrounds(raw_backgrounds: Dict[str, Any]) -> Dict[str, str]:
    found = {}
    for selector in BACKGROUND_SELECTORS:
        hex_color = css_color_to_hex(raw_backgrounds.get(selector))
        if hex_color:
            found[selector] = hex_color
    return found


# ---------- Logos ----------
def parse_elements(records: Iterable[Dict[str, Any]]) -> List[PageElement]:
    elements = []
    for rec in records:
        rect = rec.get("rect") if isinstance(rec.get("rect"), dict) else {}
        elements.append(PageElement(
            kind="svg" if rec.get("kind") == "svg" else "img",
            src=_str(rec.get("src")) or None,
            alt=_str(rec.get("alt")),
            markup=_str(rec.get("markup")) or None,
            top=_number(rect.get("top")),
            width=_number(rect.get("width")),
            height=_number(rect.get("height")),
            in_header=bool(rec.get("inHeader")),
            explicit_logo=bool(rec.get("explicitLogo")),
        ))
    return elements


def _candidate(el: PageElement, score: int, reason: str, position: str) -> LogoCandidate:
    return LogoCandidate(
        source_ref=el.source_ref,
        score=score,
        reason=reason,
        width=el.width,
        height=el.height,
        position=position,
        kind=el.kind,
        alt=el.alt if el.kind == "img" else None,
    )


def header_logo_candidates(elements: Iterable[PageElement]) -> List[LogoCandidate]:
    """Images/SVGs inside header or nav areas with logo-like dimensions."""
    found = []
    for el in elements:
        if not el.in_header:
            continue
        if 80 <= el.width <= 400 and 20 <= el.height <= 200:
            if el.kind == "img":
                found.append(_candidate(el, 90, "header-image-good-size", "header"))
            else:
                found.append(_candidate(el, 85, "header-svg-good-size", "header"))
    return found


def explicit_logo_candidates(elements: Iterable[PageElement]) -> List[LogoCandidate]:
    return [
        _candidate(el, 80, "explicit-logo-selector", "explicit")
        for el in elements
        if el.explicit_logo and 60 <= el.width <= 500
    ]


def characteristic_logo_candidates(elements: Iterable[PageElement], viewport_height: float) -> List[LogoCandidate]:
    """Images named like a logo sitting in the top 30% of the viewport."""
    found = []
    for el in elements:
        if el.kind != "img":
            continue
        src, alt = (el.src or "").lower(), el.alt.lower()
        if not any(keyword in src or keyword in alt for keyword in LOGO_KEYWORDS):
            continue
        if el.top > viewport_height * TOP_AREA_FRACTION:
            continue
        if 80 <= el.width <= 350 and 25 <= el.height <= 150:
            found.append(_candidate(el, 70, "logo-characteristics", "top-area"))
    return found


def rank_logo_candidates(candidates: Iterable[LogoCandidate], limit: int = MAX_LOGOS) -> Tuple[LogoCandidate, ...]:
    """First occurrence of each source wins; then score descending (stable), top `limit`."""
    unique, seen = [], set()
    for candidate in candidates:
        if not candidate.source_ref or candidate.source_ref in seen:
            continue
        seen.add(candidate.source_ref)
        unique.append(candidate)
    return tuple(sorted(unique, key=lambda c: c.score, reverse=True)[:limit])


def find_logos(elements: List[PageElement], viewport_height: float) -> Tuple[LogoCandidate, ...]:
    candidates = (
        header_logo_candidates(elements)
        + explicit_logo_candidates(elements)
        + characteristic_logo_candidates(elements, viewport_height)
    )
    return rank_logo_candidates(candidates)


# ---------- Fonts ----------
def clean_font_family(family: str) -> str:
    return re.sub(r"['\"]", "", family or "").strip()


def _font(rec: Optional[Dict[str, Any]]) -> Optional[FontInfo]:
    if not isinstance(rec, dict):
        return None
    family = clean_font_family(_str(rec.get("fontFamily")))
    if not family:
        return None
    return FontInfo(
        font_family=family,
        font_size=_str(rec.get("fontSize")) or None,
        font_weight=str(rec["fontWeight"]) if rec.get("fontWeight") is not None else None,
        source=_str(rec.get("source")) or None,
    )


def extract_font_links(hrefs: Iterable[Any]) -> Tuple[str, ...]:
    return tuple(
        href for href in hrefs
        if isinstance(href, str) and any(host in href for host in FONT_HOSTS)
    )


def extract_heading_font(records: Iterable[Dict[str, Any]]) -> Optional[FontInfo]:
    for rec in records:
        font = _font(rec)
        if font:
            return font
    return None


# ---------- Snapshot ----------
def build_snapshot(raw: Any) -> DomSignalSnapshot:
    """Reduce the in-page dump to a snapshot; EvaluationError when it is not a dump."""
    if not isinstance(raw, dict):
        raise EvaluationError(f"page script returned {type(raw).__name__}, expected an object")

    viewport_height = _number(raw.get("viewportHeight"))
    return DomSignalSnapshot(
        css_variables=extract_css_variables(_records(raw, "rootVariables")),
        buttons=extract_buttons(_records(raw, "buttons")),
        navigation=extract_navigation(_records(raw, "navigation")),
        headings=extract_headings(_records(raw, "headings")),
        links=extract_link_colors(_section(raw, "links")),
        backgrounds=extract_backgrounds(_section(raw, "backgrounds", dict)),
        logos=find_logos(parse_elements(_records(raw, "images")), viewport_height),
        heading_font=extract_heading_font(_records(raw, "headingFonts")),
        body_font=_font(raw.get("bodyFont")),
        font_links=extract_font_links(_section(raw, "stylesheetLinks")),
    )


async def collect_signals(session: PageSession, url: str, timeout_ms: int = NAVIGATION_TIMEOUT_MS) -> DomSignalSnapshot:
    """Navigate, wait for network idle, dump the page and reduce it."""
    await session.goto(url, timeout_ms=timeout_ms)
    raw = await session.evaluate(COLLECT_PAGE_SIGNALS_JS, SCRIPT_ARGS)
    snapshot = build_snapshot(raw)
    logger.info(
        f"signals for {url}: {len(snapshot.css_variables)} css vars, {len(snapshot.buttons)} buttons, "
        f"{len(snapshot.navigation)} nav, {len(snapshot.headings)} headings, {len(snapshot.logos)} logos"
    )
    return snapshot
