"""
Dominant color extraction.

Chooses per image between returning histogram entries as they are
(simple images: flat graphics, logos, solid fills) and clustering them
with weighted LAB k-means.
"""

from typing import List, Sequence, Union

import numpy as np
from loguru import logger

from chromiq.config import config
from chromiq.errors import InvalidInputError, require_in_range
from chromiq.services.imaging import PixelBuffer, as_pixel_buffer
from chromiq.services.observability import performance_monitor
from .clusterer import cluster_colors
from .histogram import extract_histogram
from .models import DominantColor, HistogramEntry, by_percentage_desc


def should_use_all_colors(color_count: int, max_colors: int,
                          min_colors_for_clustering: int = None) -> bool:
    """True when clustering would add nothing for this many distinct colors."""
    if min_colors_for_clustering is None:
        min_colors_for_clustering = config.MIN_COLORS_FOR_CLUSTERING
    return color_count <= max_colors or color_count < min_colors_for_clustering


def _natural_palette(entries: Sequence[HistogramEntry], max_colors: int) -> List[DominantColor]:
    return [
        DominantColor(entry.color, entry.percentage, entry.count)
        for entry in entries[:max_colors]
    ]


def _clustered_palette(entries: Sequence[HistogramEntry], max_colors: int) -> List[DominantColor]:
    clusters = cluster_colors(entries, max_colors)
    return [
        DominantColor(cluster.center_color, cluster.total_percentage, cluster.total_pixel_count)
        for cluster in clusters
    ]


def extract_dominant_colors(image: Union[PixelBuffer, np.ndarray],
                            max_colors: int = None) -> List[DominantColor]:
    """
    Extract up to max_colors representative colors from an image.

    Args:
        image: PixelBuffer or (H, W, 3/4) array
        max_colors: Requested color count, 1 to config.DEFAULT_MAX_COLORS

    Returns:
        DominantColor list sorted by percentage, largest first. Empty when
        the image has no visible pixels.

    Raises:
        InvalidInputError: If the image is missing
        OutOfRangeError: If max_colors is out of bounds
    """
    if image is None:
        raise InvalidInputError("Image cannot be None")
    if max_colors is None:
        max_colors = config.DEFAULT_MAX_COLORS
    require_in_range("max_colors", max_colors, 1, config.DEFAULT_MAX_COLORS)

    buffer = as_pixel_buffer(image)
    logger.info(f"Starting dominant color extraction: {buffer.width}x{buffer.height} image, "
                f"max colors: {max_colors}")

    with performance_monitor("dominant_color_extraction",
                             pixel_count=buffer.width * buffer.height,
                             cluster_count=max_colors):
        histogram = extract_histogram(buffer)
        if histogram.is_empty:
            logger.info("No visible colors found in image (all transparent)")
            return []

        logger.info(f"Found {len(histogram)} unique colors in image")

        if should_use_all_colors(len(histogram), max_colors):
            dominant = _natural_palette(histogram.entries, max_colors)
            logger.info(f"Using natural palette: returning {len(dominant)} colors without clustering")
        else:
            dominant = _clustered_palette(histogram.entries, max_colors)
            logger.info(f"Used k-means clustering: extracted {len(dominant)} dominant colors")

        dominant.sort(key=by_percentage_desc)

    logger.info(f"Dominant color extraction complete: {len(dominant)} colors")
    return dominant


def extraction_report(image: Union[PixelBuffer, np.ndarray],
                      dominant_colors: Sequence[DominantColor]) -> str:
    """Human-readable listing of extracted colors with total coverage."""
    if not dominant_colors:
        return "No dominant colors extracted from image"

    buffer = as_pixel_buffer(image)
    lines = [
        "ChromiQ Dominant Color Extraction Report",
        "=====================================",
        f"Image: {buffer.width}x{buffer.height} pixels",
        f"Dominant Colors Found: {len(dominant_colors)}",
        "",
    ]
    for rank, dominant in enumerate(dominant_colors, start=1):
        lines.append(f"{rank:2d}. {dominant.color.hex} - {dominant.pixel_count:,} pixels "
                     f"({dominant.percentage:.2f}%)")

    coverage = sum(dominant.percentage for dominant in dominant_colors)
    lines.extend(["", f"Total Coverage: {coverage:.1f}% of visible pixels"])
    return "\n".join(lines)
