"""
Histogram Extraction

Single bulk pass over a pixel buffer producing the frequency table of
opaque colors. Pixels whose alpha is below the visibility threshold are
counted as transparent and excluded from both the entries and the
percentage denominator.
"""

from dataclasses import dataclass, field
from typing import Iterator, List, Sequence, Union

import numpy as np
from loguru import logger

from chromiq.config import config
from chromiq.errors import InvalidInputError
from chromiq.services.imaging import PixelBuffer, as_pixel_buffer
from chromiq.services.observability import performance_monitor
from .conversion import rgb_array_to_lab
from .models import ColorSample, HistogramEntry, percentage_of


@dataclass
class HistogramResult:
    """Entries sorted by descending count, plus pixel accounting."""
    entries: List[HistogramEntry]
    width: int
    height: int
    visible_pixels: int
    transparent_pixels: int
    total_pixels: int = field(init=False)

    def __post_init__(self):
        self.total_pixels = self.width * self.height

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[HistogramEntry]:
        return iter(self.entries)

    def __getitem__(self, index):
        return self.entries[index]

    @property
    def is_empty(self) -> bool:
        return not self.entries


def extract_histogram(image: Union[PixelBuffer, np.ndarray],
                      alpha_threshold: int = None) -> HistogramResult:
    """
    Count every distinct visible RGB value in the image.

    Args:
        image: PixelBuffer or (H, W, 3/4) array
        alpha_threshold: Minimum alpha (0-255) for a pixel to count as visible

    Returns:
        HistogramResult whose entries are sorted by count, most frequent
        first; equal counts keep ascending RGB order

    Raises:
        InvalidInputError: If the image is missing or malformed
    """
    if image is None:
        raise InvalidInputError("Image cannot be None")
    buffer = as_pixel_buffer(image)
    if alpha_threshold is None:
        alpha_threshold = config.ALPHA_THRESHOLD

    width, height = buffer.width, buffer.height
    logger.info(f"Starting color extraction for {width}x{height} image")

    with performance_monitor("histogram_extraction", pixel_count=width * height):
        pixels = buffer.rgba.reshape(-1, 4)
        visible_mask = pixels[:, 3] >= alpha_threshold
        visible = pixels[visible_mask]

        visible_pixels = int(visible.shape[0])
        transparent_pixels = int(pixels.shape[0] - visible_pixels)

        # Pack RGB (alpha excluded) into one integer key per pixel
        rgb = visible[:, :3].astype(np.uint32)
        keys = (rgb[:, 0] << 16) | (rgb[:, 1] << 8) | rgb[:, 2]
        unique_keys, first_index, counts = np.unique(
            keys, return_index=True, return_counts=True
        )

        order = np.argsort(-counts, kind='stable')
        entries = []
        for idx in order:
            key = int(unique_keys[idx])
            count = int(counts[idx])
            # Alpha of the first pixel seen with this RGB
            alpha = int(visible[first_index[idx], 3]) / 255.0
            color = ColorSample((key >> 16) & 0xFF, (key >> 8) & 0xFF, key & 0xFF, alpha=alpha)
            entries.append(HistogramEntry(color, count, percentage_of(count, visible_pixels)))

    logger.info(f"Color extraction complete: {len(entries)} unique colors found")
    logger.info(f"Processed {width * height} pixels "
                f"({visible_pixels} visible, {transparent_pixels} transparent)")

    return HistogramResult(
        entries=entries,
        width=width,
        height=height,
        visible_pixels=visible_pixels,
        transparent_pixels=transparent_pixels,
    )


def entry_lab_array(entries: Sequence[HistogramEntry]) -> np.ndarray:
    """(N, 3) LAB coordinates of the entries' colors, in entry order."""
    if not entries:
        return np.empty((0, 3), dtype=np.float64)
    rgb = np.array([entry.color.rgb for entry in entries], dtype=np.float64)
    return rgb_array_to_lab(rgb)


def entry_count_array(entries: Sequence[HistogramEntry]) -> np.ndarray:
    """(N,) pixel counts of the entries, in entry order."""
    return np.array([entry.count for entry in entries], dtype=np.int64)


def extract_unique_colors(image: Union[PixelBuffer, np.ndarray]) -> List[ColorSample]:
    """Distinct visible colors, most frequent first."""
    return [entry.color for entry in extract_histogram(image)]


def extract_top_colors(image: Union[PixelBuffer, np.ndarray], limit: int) -> List[HistogramEntry]:
    """
    The `limit` most frequent colors without any grouping.

    Small, precise accents can be missed this way; the quantizer and the
    dominant-color orchestrator are the better tools for real palettes.
    """
    if limit <= 0:
        raise InvalidInputError("Limit must be positive")
    return extract_histogram(image).entries[:limit]


def color_statistics_report(histogram: HistogramResult) -> str:
    """Human-readable summary of a histogram extraction."""
    if histogram.is_empty:
        return "No visible colors found in image (all transparent)"

    total = histogram.total_pixels
    visible = histogram.visible_pixels
    transparent = histogram.transparent_pixels
    most_common = histogram.entries[0]
    least_common = histogram.entries[-1]
    plural = "" if least_common.count == 1 else "s"

    lines = [
        "ChromiQ Color Analysis Report",
        "============================",
        f"Image Size: {histogram.width}x{histogram.height} pixels ({total:,} total)",
        f"Visible Pixels: {visible:,} ({visible * 100.0 / total:.1f}%)",
        f"Transparent Pixels: {transparent:,} ({transparent * 100.0 / total:.1f}%)",
        f"Unique Colors: {len(histogram):,}",
        "",
        "Color Distribution:",
        f"• Most common: {most_common.color.hex} ({most_common.count:,} pixels, "
        f"{most_common.percentage:.2f}%)",
        f"• Least common: {least_common.color.hex} ({least_common.count} pixel{plural}, "
        f"{least_common.percentage:.2f}%)",
        f"• Average pixels per color: {visible / len(histogram):.1f}",
    ]
    return "\n".join(lines)
