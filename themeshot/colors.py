"""
Color math shared by the pixel and DOM theme paths.

Two brightness helpers, not interchangeable:
- scale_brightness: multiplicative, used by the pixel path (card surface = background * 0.95)
- shift_brightness: additive, used by the DOM path (card surface = background +/- 5%)
"""

import colorsys
import math
import re
from typing import Optional, Sequence, Tuple, Union

RGB = Tuple[int, int, int]
ColorLike = Union[str, Sequence[int]]

HEX_PATTERN = re.compile(r"^#[0-9a-f]{6}$")

_SHORT_HEX = re.compile(r"^#([0-9a-fA-F]{3,4}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")
_NUM = r"([+-]?\d*\.?\d+)"
_RGB_FUNC = re.compile(
    r"^rgba?\(\s*" + _NUM + r"(?:\s*,\s*|\s+)" + _NUM + r"(?:\s*,\s*|\s+)" + _NUM
    + r"(?:\s*[,/]\s*" + _NUM + r"(%?))?\s*\)$",
    re.IGNORECASE,
)

# alpha below this counts as invisible
MIN_VISIBLE_ALPHA = 0.1
LIGHT_LUMINANCE = 0.5


# ---------- Conversions ----------
def clamp_channel(value) -> int:
    # half-up rounding, not banker's rounding
    return int(min(255, max(0, math.floor(value + 0.5))))


def rgb_to_hex(rgb: Sequence[float]) -> str:
    return "#%02x%02x%02x" % tuple(clamp_channel(c) for c in rgb[:3])


def hex_to_rgb(hex_color: str) -> RGB:
    normalized = normalize_hex(hex_color)
    if normalized is None:
        raise ValueError(f"not a hex color: {hex_color!r}")
    return tuple(int(normalized[i:i + 2], 16) for i in (1, 3, 5))


def rgb_to_hsl(rgb: Sequence[int]) -> Tuple[float, float, float]:
    """(hue, saturation, lightness), each in [0, 1]."""
    r, g, b = (c / 255.0 for c in rgb[:3])
    h, l, s = colorsys.rgb_to_hls(r, g, b)
    return (h, s, l)


def _as_rgb(color: ColorLike) -> RGB:
    if isinstance(color, str):
        return hex_to_rgb(color)
    return tuple(clamp_channel(c) for c in color[:3])


# ---------- CSS normalization ----------
def normalize_hex(value: str) -> Optional[str]:
    """
    Expand #rgb / #rgba / #rrggbbaa to lowercase #rrggbb.
    Returns None for non-hex input or a nearly transparent alpha channel.
    """
    if not isinstance(value, str):
        return None
    m = _SHORT_HEX.match(value.strip())
    if not m:
        return None
    digits = m.group(1).lower()
    if len(digits) in (3, 4):
        digits = "".join(ch * 2 for ch in digits)
    if len(digits) == 8:
        alpha = int(digits[6:8], 16) / 255.0
        if alpha < MIN_VISIBLE_ALPHA:
            return None
        digits = digits[:6]
    return "#" + digits


def css_color_to_hex(value: Optional[str]) -> Optional[str]:
    """Convert a computed/declared CSS color to #rrggbb, or None when unusable."""
    if not value or not isinstance(value, str):
        return None
    value = value.strip()
    if not value or value.lower() == "transparent":
        return None
    if value.startswith("#"):
        return normalize_hex(value)

    m = _RGB_FUNC.match(value)
    if not m:
        return None
    r, g, b = (float(m.group(i)) for i in (1, 2, 3))
    if m.group(4) is not None:
        alpha = float(m.group(4))
        if m.group(5):
            alpha /= 100.0
        if alpha < MIN_VISIBLE_ALPHA:
            return None
    return rgb_to_hex((r, g, b))


# ---------- Luminance / contrast ----------
def _linearize(channel: float) -> float:
    c = channel / 255.0
    return c / 12.92 if c <= 0.03928 else ((c + 0.055) / 1.055) ** 2.4


def relative_luminance(color: ColorLike) -> float:
    r, g, b = (_linearize(c) for c in _as_rgb(color))
    return 0.2126 * r + 0.7152 * g + 0.0722 * b


def is_light(color: Optional[ColorLike]) -> bool:
    if not color:
        return False
    return relative_luminance(color) > LIGHT_LUMINANCE


def contrast_color(color: ColorLike) -> str:
    """Black text on light colors, white text on dark ones."""
    return "#000000" if is_light(color) else "#ffffff"


# ---------- Brightness ----------
def scale_brightness(rgb: Sequence[int], factor: float) -> RGB:
    """Multiply every channel by `factor`."""
    return tuple(clamp_channel(c * factor) for c in rgb[:3])


def shift_brightness(hex_color: str, factor: float) -> str:
    """Move every channel by `factor` of itself (c + c * factor)."""
    return rgb_to_hex([c + c * factor for c in hex_to_rgb(hex_color)])


def is_valid_hex(value) -> bool:
    return isinstance(value, str) and bool(HEX_PATTERN.match(value))
