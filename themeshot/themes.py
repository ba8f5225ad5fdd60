"""
Theme synthesis.

Both entry points map a signal source onto the same Theme shape and never fail:
missing signals fall back to fixed constants.

- synthesize_from_palette: six pixel swatches -> Theme
- synthesize_from_signals: DOM signal snapshot -> Theme (+ confidence)
"""

from typing import Dict, Optional

from .colors import contrast_color, css_color_to_hex, is_light, rgb_to_hex, scale_brightness, shift_brightness
from .models import DEFAULT_FONT_STACK, DomSignalSnapshot, Palette, Theme

# ---------- Fallbacks ----------
DEFAULT_ACCENT = "#007bff"
DEFAULT_HEADLINE = "#212529"
DEFAULT_TEXT = "#343a40"
DEFAULT_BACKGROUND = "#ffffff"
DEFAULT_CARD_BACKGROUND = "#f8f9fa"
DEFAULT_CARD_TEXT = "#495057"
DEFAULT_GRADIENT = "linear-gradient(120deg, rgb(35, 211, 211) 0%, rgb(30, 38, 109) 100%)"

CARD_SCALE = 0.95
CARD_SHIFT = 0.05
GRADIENT_SHIFT = -0.2

ACCENT_VARIABLE_KEYWORDS = ("primary", "accent", "brand")


def gradient(start: str, end: str) -> str:
    return f"linear-gradient(120deg, {start} 0%, {end} 100%)"


def _first(palette: Palette, *roles):
    for role in roles:
        swatch = palette.get(role)
        if swatch is not None:
            return swatch
    return None


def _color(value, default: str) -> str:
    return css_color_to_hex(value) or default


def _mood(color: str) -> str:
    return "light" if is_light(color) else "dark"


# ---------- Pixel path ----------
def synthesize_from_palette(palette: Palette) -> Theme:
    palette = palette or {}
    accent = _first(palette, "Vibrant", "DarkVibrant")
    headline = _first(palette, "DarkVibrant", "DarkMuted")
    text = _first(palette, "DarkVibrant", "DarkMuted")
    background = _first(palette, "LightMuted", "LightVibrant")
    card_text = _first(palette, "DarkMuted", "DarkVibrant")
    vibrant, dark_vibrant = palette.get("Vibrant"), palette.get("DarkVibrant")

    accent_hex = accent.hex if accent else DEFAULT_ACCENT
    if background is not None:
        card_background = rgb_to_hex(scale_brightness(background.rgb, CARD_SCALE))
    else:
        card_background = DEFAULT_CARD_BACKGROUND

    return Theme(
        accent_color=accent_hex,
        headline_color=headline.hex if headline else DEFAULT_HEADLINE,
        text_color=text.hex if text else DEFAULT_TEXT,
        background_color=background.hex if background else DEFAULT_BACKGROUND,
        card_background_color=card_background,
        card_icon_color=accent_hex,
        card_text_color=card_text.hex if card_text else DEFAULT_CARD_TEXT,
        accent_color_contrast=contrast_color(accent_hex),
        default_gradient=gradient(vibrant.hex, dark_vibrant.hex) if vibrant and dark_vibrant else DEFAULT_GRADIENT,
        color_mood=_mood(accent_hex) if accent else "neutral",
        font_family=DEFAULT_FONT_STACK,
        heading_font_family=DEFAULT_FONT_STACK,
    )


# ---------- DOM path ----------
def resolve_accent(signals: DomSignalSnapshot) -> str:
    for name, value in signals.css_variables.items():
        color = css_color_to_hex(value)
        if color and any(keyword in name for keyword in ACCENT_VARIABLE_KEYWORDS):
            return color
    for button in signals.buttons:
        color = css_color_to_hex(button.background_color)
        if color and not is_light(color):
            return color
    return DEFAULT_ACCENT


def calculate_confidence(signals: DomSignalSnapshot) -> float:
    """Heuristic: how many independent signal kinds were found on the page."""
    score = 0.0
    if signals.css_variables:
        score += 0.4
    if any(button.background_color for button in signals.buttons):
        score += 0.3
    if signals.navigation:
        score += 0.2
    if len(signals.headings) > 2:
        score += 0.1
    return max(0.0, min(1.0, round(score, 2)))


def synthesize_from_signals(signals: DomSignalSnapshot) -> Theme:
    accent = resolve_accent(signals)
    background = _color(signals.backgrounds.get("body"), DEFAULT_BACKGROUND)

    headline = _color(signals.headings[0].color, DEFAULT_HEADLINE) if signals.headings else DEFAULT_HEADLINE
    # second heading, else first link; not the pixel path's chain
    if len(signals.headings) > 1:
        text = _color(signals.headings[1].color, DEFAULT_TEXT)
    elif signals.links:
        text = _color(signals.links[0], DEFAULT_TEXT)
    else:
        text = DEFAULT_TEXT

    card_background = shift_brightness(background, -CARD_SHIFT if is_light(background) else CARD_SHIFT)
    font_link = signals.font_links[0] if signals.font_links else None

    return Theme(
        accent_color=accent,
        headline_color=headline,
        text_color=text,
        background_color=background,
        card_background_color=card_background,
        card_icon_color=accent,
        card_text_color=text,
        accent_color_contrast=contrast_color(accent),
        default_gradient=gradient(accent, shift_brightness(accent, GRADIENT_SHIFT)),
        color_mood=_mood(background),
        font_family=signals.body_font.font_family if signals.body_font else DEFAULT_FONT_STACK,
        heading_font_family=signals.heading_font.font_family if signals.heading_font else DEFAULT_FONT_STACK,
        font_link=font_link,
        heading_font_link=font_link,
        confidence=calculate_confidence(signals),
    )


def logo_info(signals: DomSignalSnapshot) -> Dict[str, Optional[object]]:
    logos = [logo.to_dict() for logo in signals.logos]
    return {"logos": logos, "primaryLogo": logos[0] if logos else None}
