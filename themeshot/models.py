from dataclasses import dataclass, field
from typing import List, Dict, Any, Optional, Tuple

from .colors import hex_to_rgb, rgb_to_hex, rgb_to_hsl, normalize_hex

# enumeration order matters: dominant-color ties keep this order
SWATCH_ROLES = ("Vibrant", "DarkVibrant", "LightVibrant", "Muted", "DarkMuted", "LightMuted")

DEFAULT_FONT_STACK = "Inter, system-ui, -apple-system, sans-serif"


@dataclass(frozen=True)
class ColorSwatch:
    hex: str                              # "#rrggbb"
    rgb: Tuple[int, int, int]
    hsl: Tuple[float, float, float]       # each in [0, 1]
    population: int = 0                  # pixels supporting this color

    @classmethod
    def from_hex(cls, hex_color: str, population: int = 0) -> "ColorSwatch":
        hex_color = normalize_hex(hex_color)
        rgb = hex_to_rgb(hex_color)
        return cls(hex=hex_color, rgb=rgb, hsl=rgb_to_hsl(rgb), population=max(0, int(population)))

    @classmethod
    def from_rgb(cls, rgb, population: int = 0) -> "ColorSwatch":
        return cls.from_hex(rgb_to_hex(rgb), population)

    def to_dict(self) -> Dict[str, Any]:
        return {"hex": self.hex, "rgb": list(self.rgb), "hsl": list(self.hsl), "population": self.population}


# role name -> swatch (None when no pixel cluster satisfies the role)
Palette = Dict[str, Optional[ColorSwatch]]


def empty_palette() -> Palette:
    return {role: None for role in SWATCH_ROLES}


def palette_to_dict(palette: Palette) -> Dict[str, Optional[Dict[str, Any]]]:
    return {role: (palette.get(role).to_dict() if palette.get(role) else None) for role in SWATCH_ROLES}


@dataclass(frozen=True)
class DominantColorEntry:
    name: str
    hex: str
    rgb: Tuple[int, int, int]
    population: int

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "hex": self.hex, "rgb": list(self.rgb), "population": self.population}


@dataclass(frozen=True)
class LogoCandidate:
    source_ref: str          # image src, or truncated outerHTML for inline svg
    score: int
    reason: str              # header-image-good-size | header-svg-good-size | explicit-logo-selector | logo-characteristics
    width: float
    height: float
    position: str            # header | explicit | top-area
    kind: str = "img"        # img | svg
    alt: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "score": self.score,
            "reason": self.reason,
            "width": self.width,
            "height": self.height,
            "position": self.position,
            "type": self.kind,
        }
        if self.kind == "svg":
            data["innerHTML"] = self.source_ref
        else:
            data["src"] = self.source_ref
            data["alt"] = self.alt
        return data


@dataclass(frozen=True)
class FontInfo:
    font_family: str
    font_size: Optional[str] = None
    font_weight: Optional[str] = None
    source: Optional[str] = None   # tag the style was read from

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fontFamily": self.font_family,
            "fontSize": self.font_size,
            "fontWeight": self.font_weight,
            "source": self.source,
        }


@dataclass(frozen=True)
class ButtonSignal:
    selector: str
    background_color: Optional[str]
    color: Optional[str]
    border_color: Optional[str]
    class_name: str = ""
    text: str = ""


@dataclass(frozen=True)
class NavigationSignal:
    selector: str
    background_color: Optional[str]
    color: Optional[str]


@dataclass(frozen=True)
class HeadingSignal:
    tag: str
    color: str
    text: str = ""


@dataclass(frozen=True)
class DomSignalSnapshot:
    """Everything observed on one page render; plain values only."""
    css_variables: Dict[str, str] = field(default_factory=dict)
    buttons: Tuple[ButtonSignal, ...] = ()
    navigation: Tuple[NavigationSignal, ...] = ()
    headings: Tuple[HeadingSignal, ...] = ()
    links: Tuple[str, ...] = ()
    backgrounds: Dict[str, str] = field(default_factory=dict)
    logos: Tuple[LogoCandidate, ...] = ()
    heading_font: Optional[FontInfo] = None
    body_font: Optional[FontInfo] = None
    font_links: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cssVariables": dict(self.css_variables),
            "buttons": [
                {
                    "selector": b.selector,
                    "backgroundColor": b.background_color,
                    "color": b.color,
                    "borderColor": b.border_color,
                    "className": b.class_name,
                    "text": b.text,
                }
                for b in self.buttons
            ],
            "navigation": [
                {"selector": n.selector, "backgroundColor": n.background_color, "color": n.color}
                for n in self.navigation
            ],
            "headers": [{"tag": h.tag, "color": h.color, "text": h.text} for h in self.headings],
            "links": list(self.links),
            "backgrounds": [
                {"selector": selector, "backgroundColor": color} for selector, color in self.backgrounds.items()
            ],
            "logos": [logo.to_dict() for logo in self.logos],
            "fonts": {
                "headingFont": self.heading_font.to_dict() if self.heading_font else None,
                "bodyFont": self.body_font.to_dict() if self.body_font else None,
                "fontLinks": [{"href": href, "type": "external"} for href in self.font_links],
            },
        }


@dataclass(frozen=True)
class Theme:
    accent_color: str
    headline_color: str
    text_color: str
    background_color: str
    card_background_color: str
    card_icon_color: str
    card_text_color: str
    accent_color_contrast: str          # "#000000" | "#ffffff"
    default_gradient: str
    color_mood: str                     # "light" | "dark" | "neutral"
    font_family: str = DEFAULT_FONT_STACK
    heading_font_family: str = DEFAULT_FONT_STACK
    font_link: Optional[str] = None
    heading_font_link: Optional[str] = None
    is_custom: bool = True
    confidence: Optional[float] = None  # DOM path only

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "accentColor": self.accent_color,
            "headlineColor": self.headline_color,
            "textColor": self.text_color,
            "backgroundColor": self.background_color,
            "cardBackgroundColor": self.card_background_color,
            "cardIconColor": self.card_icon_color,
            "cardTextColor": self.card_text_color,
            "accentColorContrast": self.accent_color_contrast,
            "fontFamily": self.font_family,
            "headingFontFamily": self.heading_font_family,
            "fontLink": self.font_link,
            "headingFontLink": self.heading_font_link,
            "defaultGradient": self.default_gradient,
            "colorMood": self.color_mood,
            "isCustom": self.is_custom,
        }
        if self.confidence is not None:
            data["confidence"] = self.confidence
        return data

    def hex_fields(self) -> List[str]:
        return [
            self.accent_color, self.headline_color, self.text_color, self.background_color,
            self.card_background_color, self.card_icon_color, self.card_text_color,
            self.accent_color_contrast,
        ]


@dataclass
class PaletteResult:
    success: bool
    palette: Optional[Palette] = None
    dominant_colors: List[DominantColorEntry] = field(default_factory=list)
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        if not self.success:
            return {"success": False, "error": self.error}
        return {
            "success": True,
            "palette": palette_to_dict(self.palette),
            "dominantColors": [entry.to_dict() for entry in self.dominant_colors],
        }


@dataclass
class ThemeResult:
    """All-or-nothing outcome of one analysis: a theme, or an error message and kind."""
    success: bool
    theme: Optional[Theme] = None
    error: Optional[str] = None
    error_kind: Optional[str] = None
    extras: Dict[str, Any] = field(default_factory=dict)   # debug data, not part of the theme contract

    @classmethod
    def ok(cls, theme: Theme, **extras) -> "ThemeResult":
        return cls(success=True, theme=theme, extras=extras)

    @classmethod
    def failed(cls, exc: Exception) -> "ThemeResult":
        return cls(success=False, error=str(exc), error_kind=getattr(exc, "kind", "error"))

    def to_dict(self) -> Dict[str, Any]:
        if not self.success:
            return {"success": False, "error": self.error, "errorKind": self.error_kind}
        data = {"success": True, "theme": self.theme.to_dict()}
        data.update(self.extras)
        return data
