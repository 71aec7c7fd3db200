#!/usr/bin/env python3
"""
Extract dominant, mutually distinct colors from an image.

The image is resampled to a fixed 100x100 grid, each channel is quantized to
multiples of 10, and buckets are ranked by pixel count. A diversity filter
then keeps the most frequent buckets that are not near-duplicates of each
other.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import numpy as np
from PIL import Image, UnidentifiedImageError

from color_convert import Color, MAX_RGB_DISTANCE


# =============================================================================
# Constants
# =============================================================================

ANALYSIS_WIDTH = 100  # Resample grid, bounds cost regardless of source size
ANALYSIS_HEIGHT = 100
ALPHA_THRESHOLD = 128  # Pixels below this alpha are skipped
QUANTIZE_STEP = 10  # Channel bucket size

# Diversity filter
MIN_DISTANCE = 50.0  # Initial minimum RGB distance between kept colors
RELAX_FACTOR = 0.7  # Threshold multiplier per relaxation round
MIN_RELAXED_DISTANCE = 10.0  # Relaxation never goes below this
DEFAULT_MAX_COLORS = 10

# Image size limits (security: prevent decompression bombs)
MAX_IMAGE_PIXELS = 50_000_000  # 50 megapixels
MAX_IMAGE_DIMENSION = 10_000  # 10k pixels per side


class NotLoadedError(RuntimeError):
    """Raised when an operation needs an image and none is loaded."""


class OutOfRangeError(IndexError):
    """Raised when pixel coordinates fall outside the image."""


@dataclass(frozen=True)
class RankedColor(Color):
    """A quantized color bucket with its share of the analysis grid."""
    count: int = 1
    percentage: str = '0.0'


# =============================================================================
# Quantization and Counting
# =============================================================================

def quantize(rgb: np.ndarray, step: int = QUANTIZE_STEP) -> np.ndarray:
    """
    Snap each channel to the nearest multiple of `step`.

    Halves round up. Values that would round past 255 are capped at the
    largest multiple of `step` that is still a valid channel.
    """
    cap = 255 // step * step
    snapped = np.floor(rgb.astype(np.float64) / step + 0.5) * step
    return np.clip(snapped, 0, cap).astype(np.int32)


def count_colors(rgba: np.ndarray, total_pixels: int) -> list[RankedColor]:
    """
    Count quantized colors in a flat RGBA pixel array.

    Args:
        rgba: Array of shape (n, 4)
        total_pixels: Percentage denominator. Skipped transparent pixels
            still count towards it.

    Returns:
        RankedColor list sorted by count descending.
    """
    opaque = rgba[rgba[:, 3] >= ALPHA_THRESHOLD][:, :3]
    if len(opaque) == 0:
        return []

    buckets, counts = np.unique(quantize(opaque), axis=0, return_counts=True)
    order = np.argsort(-counts, kind='stable')

    return [
        RankedColor(
            r=int(buckets[i, 0]),
            g=int(buckets[i, 1]),
            b=int(buckets[i, 2]),
            count=int(counts[i]),
            percentage=f"{counts[i] / total_pixels * 100:.1f}",
        )
        for i in order
    ]


# =============================================================================
# Diversity Filtering
# =============================================================================

def select_diverse(rgb: np.ndarray, max_colors: int = DEFAULT_MAX_COLORS,
                   min_distance: float = MIN_DISTANCE) -> tuple[list[int], float]:
    """
    Pick up to `max_colors` rows of a frequency-sorted RGB array that are far
    apart from each other.

    The first row is always kept. A greedy pass keeps rows at least
    `min_distance` from every kept row. If that leaves fewer than
    `max_colors`, the threshold is relaxed by RELAX_FACTOR per round (never
    below MIN_RELAXED_DISTANCE) and rows whose nearest kept row meets the
    relaxed threshold are added in frequency order.

    Returns:
        (kept row indices in selection order, last threshold applied).
        Every pair of kept rows is at least that threshold apart.
    """
    n = len(rgb)
    if n == 0 or max_colors < 1:
        return [], min_distance

    points = rgb.astype(np.float64)
    kept = [0]
    is_kept = np.zeros(n, dtype=bool)
    is_kept[0] = True

    def nearest_kept(i: int) -> float:
        return float(np.linalg.norm(points[kept] - points[i], axis=1).min())

    for i in range(1, n):
        if len(kept) >= max_colors:
            break
        if nearest_kept(i) >= min_distance:
            kept.append(i)
            is_kept[i] = True

    threshold = min_distance
    while len(kept) < max_colors and len(kept) < n:
        relaxed = threshold * RELAX_FACTOR
        if relaxed < MIN_RELAXED_DISTANCE:
            break
        threshold = relaxed

        for i in range(1, n):
            if len(kept) >= max_colors:
                break
            if is_kept[i]:
                continue
            if nearest_kept(i) >= threshold:
                kept.append(i)
                is_kept[i] = True

    return kept, threshold


def filter_similar_colors(colors: list[RankedColor], max_colors: int = DEFAULT_MAX_COLORS,
                          min_distance: float = MIN_DISTANCE) -> list[RankedColor]:
    """
    Reduce a frequency-sorted color list to distinct representatives.

    Returns:
        At most `max_colors` colors, always including colors[0], sorted by
        count descending.
    """
    if not colors:
        return []

    rgb = np.array([c.rgb for c in colors])
    kept, _ = select_diverse(rgb, max_colors, min_distance)

    selected = [colors[i] for i in kept]
    selected.sort(key=lambda c: -c.count)
    return selected


def calculate_diversity(colors: list) -> int:
    """
    Score how spread out a set of colors is, 0-100.

    Mean pairwise RGB distance normalized by the black-to-white distance.
    Fewer than two colors score 0.
    """
    if not colors or len(colors) < 2:
        return 0

    rgb = np.array([c.rgb for c in colors], dtype=np.float64)
    i, j = np.triu_indices(len(rgb), k=1)
    distances = np.linalg.norm(rgb[i] - rgb[j], axis=1)

    score = distances.mean() / MAX_RGB_DISTANCE * 100
    return int(np.floor(score + 0.5))


# =============================================================================
# Extractor
# =============================================================================

def open_image(source) -> Image.Image:
    """
    Open an image from a path or pass a Pillow image through.

    Raises:
        FileNotFoundError: If image file doesn't exist
        ValueError: If file is not a valid image or exceeds size limits
    """
    if isinstance(source, Image.Image):
        img = source
    else:
        path = Path(source)
        if not path.exists():
            raise FileNotFoundError(f"Image not found: {path}")
        try:
            img = Image.open(path)
            img.load()
        except (UnidentifiedImageError, OSError) as e:
            raise ValueError(f"Could not open image: {e}")

    width, height = img.size
    if width > MAX_IMAGE_DIMENSION or height > MAX_IMAGE_DIMENSION:
        raise ValueError(
            f"Image dimensions {width}x{height} exceed maximum "
            f"{MAX_IMAGE_DIMENSION}x{MAX_IMAGE_DIMENSION}"
        )
    if width * height > MAX_IMAGE_PIXELS:
        raise ValueError(
            f"Image has {width * height:,} pixels, exceeding maximum {MAX_IMAGE_PIXELS:,}"
        )
    if width == 0 or height == 0:
        raise ValueError("Image is empty")

    return img


class ColorExtractor:
    """Holds one decoded image and extracts colors from it."""

    def __init__(self, image: Optional[Image.Image] = None):
        self.image = None
        self._rgba = None  # native-resolution RGBA buffer, reused by pixel picks
        if image is not None:
            self.load_image(image)

    @property
    def width(self) -> int:
        return self._require_image().width

    @property
    def height(self) -> int:
        return self._require_image().height

    def load_image(self, source) -> Image.Image:
        """Load an image from a path or a Pillow image, replacing any previous one."""
        img = open_image(source).convert('RGBA')
        self.image = img
        self._rgba = None
        return img

    def _require_image(self) -> Image.Image:
        if self.image is None:
            raise NotLoadedError("No image loaded")
        return self.image

    def get_pixel_color(self, x: int, y: int) -> Color:
        """Return the color of one pixel at native resolution."""
        img = self._require_image()
        if not (0 <= x < img.width and 0 <= y < img.height):
            raise OutOfRangeError(
                f"Pixel ({x}, {y}) outside image bounds {img.width}x{img.height}"
            )

        if self._rgba is None:
            self._rgba = np.asarray(img)
        r, g, b, _ = self._rgba[y, x]
        return Color(int(r), int(g), int(b))

    def analyze(self, max_colors: int = DEFAULT_MAX_COLORS) -> list[RankedColor]:
        """
        Find the most common distinct colors in the loaded image.

        Args:
            max_colors: Upper bound on returned colors

        Returns:
            RankedColor list sorted by count descending. Percentages use the
            full analysis grid as denominator, so they need not sum to 100
            when transparent pixels were skipped.
        """
        img = self._require_image()
        if max_colors < 1:
            raise ValueError(f"max_colors must be at least 1, got {max_colors}")

        sample = img.resize((ANALYSIS_WIDTH, ANALYSIS_HEIGHT), Image.Resampling.BILINEAR)
        pixels = np.asarray(sample).reshape(-1, 4)
        total_pixels = ANALYSIS_WIDTH * ANALYSIS_HEIGHT

        ranked = count_colors(pixels, total_pixels)
        return filter_similar_colors(ranked, max_colors)
