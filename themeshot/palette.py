"""
Pixel palette extraction.

Turns a raster screenshot into six named swatches
(Vibrant / DarkVibrant / LightVibrant / Muted / DarkMuted / LightMuted):

- decode + downscale with Pillow
- drop transparent and near-white pixels
- 5-bit-per-channel population histogram (numpy)
- per role, pick the bucket closest to the role's saturation/lightness target,
  weighted with its population

No sampling randomness anywhere: identical bytes give identical palettes.
"""

import io
import logging
import math
from typing import Dict, List, Optional, Tuple

import numpy as np
from PIL import Image, ImageDraw, UnidentifiedImageError

from .errors import DecodeError
from .models import (
    SWATCH_ROLES,
    ColorSwatch,
    DominantColorEntry,
    Palette,
    PaletteResult,
    empty_palette,
)

logger = logging.getLogger(__name__)

# ---------- Constants / Defaults ----------
MAX_IMAGE_SIDE = 400
SIGBITS = 5
MIN_ALPHA = 125
WHITE_CUTOFF = 250
MIN_POPULATION_FRACTION = 0.0005

TARGET_DARK_LUMA = 0.26
MAX_DARK_LUMA = 0.45
MIN_LIGHT_LUMA = 0.55
TARGET_LIGHT_LUMA = 0.74
MIN_NORMAL_LUMA = 0.3
TARGET_NORMAL_LUMA = 0.5
MAX_NORMAL_LUMA = 0.7
TARGET_MUTED_SATURATION = 0.3
MAX_MUTED_SATURATION = 0.4
TARGET_VIBRANT_SATURATION = 1.0
MIN_VIBRANT_SATURATION = 0.35

WEIGHT_SATURATION = 3.0
WEIGHT_LUMA = 6.5
WEIGHT_POPULATION = 0.5

# (min, target, max)
DARK_LUMA = (0.0, TARGET_DARK_LUMA, MAX_DARK_LUMA)
NORMAL_LUMA = (MIN_NORMAL_LUMA, TARGET_NORMAL_LUMA, MAX_NORMAL_LUMA)
LIGHT_LUMA = (MIN_LIGHT_LUMA, TARGET_LIGHT_LUMA, 1.0)
VIBRANT_SAT = (MIN_VIBRANT_SATURATION, TARGET_VIBRANT_SATURATION, 1.0)
MUTED_SAT = (0.0, TARGET_MUTED_SATURATION, MAX_MUTED_SATURATION)

ROLE_TARGETS = {
    "Vibrant": (NORMAL_LUMA, VIBRANT_SAT),
    "DarkVibrant": (DARK_LUMA, VIBRANT_SAT),
    "LightVibrant": (LIGHT_LUMA, VIBRANT_SAT),
    "Muted": (NORMAL_LUMA, MUTED_SAT),
    "DarkMuted": (DARK_LUMA, MUTED_SAT),
    "LightMuted": (LIGHT_LUMA, MUTED_SAT),
}


# ---------- Decoding ----------
def load_image_bytes(image_bytes: bytes) -> Image.Image:
    if not image_bytes:
        raise DecodeError("empty image buffer")
    try:
        img = Image.open(io.BytesIO(image_bytes))
        img.load()
    except (UnidentifiedImageError, OSError, ValueError, Image.DecompressionBombError) as e:
        raise DecodeError(f"cannot decode image: {e}") from e
    return img.convert("RGBA")


def preprocess_image(img: Image.Image, max_size=MAX_IMAGE_SIDE) -> Image.Image:
    img_copy = img.copy()
    img_copy.thumbnail((max_size, max_size), Image.Resampling.LANCZOS)
    return img_copy


# ---------- Histogram ----------
def build_histogram(img: Image.Image) -> Tuple[np.ndarray, np.ndarray]:
    """
    Population histogram over 5-bit quantized colors.
    Returns (mean RGB per bucket as float array (n, 3), population per bucket),
    ordered by bucket code.
    """
    arr = np.asarray(img.convert("RGBA"), dtype=np.uint8).reshape(-1, 4)
    rgb = arr[arr[:, 3] >= MIN_ALPHA, :3]
    rgb = rgb[~np.all(rgb > WHITE_CUTOFF, axis=1)].astype(np.int64)
    if rgb.shape[0] == 0:
        return np.zeros((0, 3)), np.zeros(0, dtype=np.int64)

    shift = 8 - SIGBITS
    q = rgb >> shift
    codes = (q[:, 0] << (2 * SIGBITS)) | (q[:, 1] << SIGBITS) | q[:, 2]
    _, inverse, counts = np.unique(codes, return_inverse=True, return_counts=True)
    inverse = inverse.reshape(-1)

    sums = np.stack(
        [np.bincount(inverse, weights=rgb[:, c], minlength=counts.shape[0]) for c in range(3)],
        axis=1,
    )
    means = sums / counts[:, None]
    return means, counts


def histogram_swatches(means: np.ndarray, counts: np.ndarray) -> List[ColorSwatch]:
    total = int(counts.sum())
    if total == 0:
        return []
    min_population = max(1, math.ceil(total * MIN_POPULATION_FRACTION))
    return [
        ColorSwatch.from_rgb(tuple(color), int(population))
        for color, population in zip(means, counts)
        if population >= min_population
    ]


# ---------- Role selection ----------
def _invert_diff(value: float, target: float) -> float:
    return 1.0 - abs(value - target)


def _comparison_value(swatch: ColorSwatch, target_sat: float, target_luma: float, max_population: int) -> float:
    _, sat, luma = swatch.hsl
    parts = (
        (_invert_diff(sat, target_sat), WEIGHT_SATURATION),
        (_invert_diff(luma, target_luma), WEIGHT_LUMA),
        (swatch.population / max_population if max_population else 0.0, WEIGHT_POPULATION),
    )
    return sum(v * w for v, w in parts) / sum(w for _, w in parts)


def find_role_swatch(swatches: List[ColorSwatch], role: str, used: set, max_population: int) -> Optional[ColorSwatch]:
    (min_l, target_l, max_l), (min_s, target_s, max_s) = ROLE_TARGETS[role]
    best, best_value = None, -1.0
    for idx, swatch in enumerate(swatches):
        if idx in used:
            continue
        _, sat, luma = swatch.hsl
        if not (min_s <= sat <= max_s and min_l <= luma <= max_l):
            continue
        value = _comparison_value(swatch, target_s, target_l, max_population)
        if value > best_value:
            best, best_value = idx, value
    if best is None:
        return None
    used.add(best)
    return swatches[best]


def select_palette(swatches: List[ColorSwatch]) -> Palette:
    palette = empty_palette()
    if not swatches:
        return palette
    max_population = max(s.population for s in swatches)
    used = set()
    for role in SWATCH_ROLES:
        palette[role] = find_role_swatch(swatches, role, used, max_population)
    return palette


# ---------- Public API ----------
def extract_palette(image_bytes: bytes, max_size: int = MAX_IMAGE_SIDE) -> Palette:
    """Raises DecodeError when the buffer is not an image."""
    img = preprocess_image(load_image_bytes(image_bytes), max_size=max_size)
    means, counts = build_histogram(img)
    swatches = histogram_swatches(means, counts)
    palette = select_palette(swatches)
    roles = [r for r in SWATCH_ROLES if palette[r]]
    logger.debug(f"palette from {img.width}x{img.height} image: {len(swatches)} buckets, roles={roles}")
    return palette


def rank_dominant_colors(palette: Palette) -> List[DominantColorEntry]:
    entries = [
        DominantColorEntry(name=role, hex=swatch.hex, rgb=swatch.rgb, population=swatch.population)
        for role in SWATCH_ROLES
        for swatch in [palette.get(role)]
        if swatch is not None and swatch.population > 0
    ]
    # sorted() is stable, so ties keep role order
    return sorted(entries, key=lambda e: e.population, reverse=True)


def simplify(palette: Palette) -> Dict:
    colors = {role: palette[role].hex for role in SWATCH_ROLES if palette.get(role)}
    dominant = [{"name": e.name, "hex": e.hex} for e in rank_dominant_colors(palette)]
    return {"colors": colors, "dominantColors": dominant}


def extract_color_palette(image_bytes: bytes, max_size: int = MAX_IMAGE_SIDE) -> PaletteResult:
    try:
        palette = extract_palette(image_bytes, max_size=max_size)
    except DecodeError as e:
        logger.warning(f"palette extraction failed: {e}")
        return PaletteResult(success=False, error=str(e))
    return PaletteResult(success=True, palette=palette, dominant_colors=rank_dominant_colors(palette))


def get_simple_color_palette(image_bytes: bytes, max_size: int = MAX_IMAGE_SIDE) -> Dict:
    result = extract_color_palette(image_bytes, max_size=max_size)
    if not result.success:
        return result.to_dict()
    return {"success": True, **simplify(result.palette)}


# ---------- Debug preview ----------
def render_palette_strip(palette: Palette, swatch_size=64) -> io.BytesIO:
    """One PNG square per populated swatch, in role order; an empty palette gives one grey square."""
    swatches = [palette[role] for role in SWATCH_ROLES if palette.get(role)]
    width = swatch_size * max(1, len(swatches))
    strip = Image.new("RGB", (width, swatch_size), (204, 204, 204))
    draw = ImageDraw.Draw(strip)
    for i, swatch in enumerate(swatches):
        draw.rectangle([i * swatch_size, 0, (i + 1) * swatch_size - 1, swatch_size - 1], fill=swatch.rgb)
    buf = io.BytesIO()
    strip.save(buf, format="PNG")
    buf.seek(0)
    return buf
