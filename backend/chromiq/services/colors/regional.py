"""
Regional color picking.

Two ways of answering "what color is at this point":

- exact: the single pixel at the coordinate, verbatim
- region: a window centered on the coordinate, clamped to the image
  edges, reduced to one representative color
"""

from dataclasses import dataclass
from typing import Union

import numpy as np
from loguru import logger

from chromiq.config import config
from chromiq.errors import InvalidInputError, OutOfRangeError, require_in_range
from chromiq.services.imaging import PixelBuffer, as_pixel_buffer
from chromiq.services.observability import performance_monitor
from .histogram import extract_histogram
from .models import ColorSample, by_count_desc
from .quantizer import quantize_to_single_group

EXACT_PIXEL_NAME = "Exact Pixel"
FALLBACK_NAME = "Fallback White"


@dataclass(frozen=True)
class RegionBounds:
    """Half-open window [start_x, end_x) x [start_y, end_y) inside the image."""
    start_x: int
    end_x: int
    start_y: int
    end_y: int

    @property
    def width(self) -> int:
        return self.end_x - self.start_x

    @property
    def height(self) -> int:
        return self.end_y - self.start_y


def _validate_point(buffer: PixelBuffer, x: int, y: int) -> None:
    if x < 0 or x >= buffer.width:
        raise OutOfRangeError("x", x, 0, buffer.width - 1)
    if y < 0 or y >= buffer.height:
        raise OutOfRangeError("y", y, 0, buffer.height - 1)


def compute_region_bounds(width: int, height: int, x: int, y: int, region_size: int) -> RegionBounds:
    """
    Window of region_size centered on (x, y), clamped to the image.

    The window never starts below zero or ends past the image edge, and is
    always at least 1x1.
    """
    half = region_size // 2

    start_x = max(0, x - half)
    end_x = min(width, x + half)
    start_y = max(0, y - half)
    end_y = min(height, y + half)

    if end_x <= start_x:
        end_x = start_x + 1
    if end_y <= start_y:
        end_y = start_y + 1

    return RegionBounds(start_x, end_x, start_y, end_y)


def pick_exact_pixel(image: Union[PixelBuffer, np.ndarray], x: int, y: int) -> ColorSample:
    """
    Color of the single pixel at (x, y), alpha normalized to 0.0-1.0.

    Raises:
        InvalidInputError: If the image is missing
        OutOfRangeError: If (x, y) is outside the image
    """
    if image is None:
        raise InvalidInputError("Image cannot be None")
    buffer = as_pixel_buffer(image)
    _validate_point(buffer, x, y)

    logger.info(f"Extracting exact pixel color at ({x},{y})")
    r, g, b, a = buffer.pixel(x, y)
    color = ColorSample(r, g, b, alpha=a / 255.0, name=EXACT_PIXEL_NAME)
    logger.info(f"Exact pixel extraction complete: {color.hex}")
    return color


def pick_region_color(image: Union[PixelBuffer, np.ndarray], x: int, y: int,
                      region_size: int = None) -> ColorSample:
    """
    Representative color of the window around (x, y).

    Windows with at most SIMPLE_REGION_MAX_COLORS distinct colors report
    the most frequent one; busier windows report the pixel-weighted LAB
    mean of all their colors. A window with no visible pixels reports
    white.

    Raises:
        InvalidInputError: If the image is missing
        OutOfRangeError: If (x, y) is outside the image or region_size is
            outside [MIN_REGION_SIZE, MAX_REGION_SIZE]
    """
    if image is None:
        raise InvalidInputError("Image cannot be None")
    if region_size is None:
        region_size = config.DEFAULT_REGION_SIZE

    buffer = as_pixel_buffer(image)
    _validate_point(buffer, x, y)
    require_in_range("region_size", region_size, config.MIN_REGION_SIZE, config.MAX_REGION_SIZE)

    logger.info(f"Extracting color from region at ({x},{y}) with size {region_size}x{region_size}")

    with performance_monitor("regional_pick", pixel_count=region_size * region_size):
        bounds = compute_region_bounds(buffer.width, buffer.height, x, y, region_size)
        logger.info(f"Region bounds: x={bounds.start_x}-{bounds.end_x}, "
                    f"y={bounds.start_y}-{bounds.end_y} "
                    f"(actual size: {bounds.width}x{bounds.height})")

        window = buffer.region(bounds.start_x, bounds.start_y, bounds.end_x, bounds.end_y)
        histogram = extract_histogram(window)

        if histogram.is_empty:
            logger.info("No colors found in region, returning white as fallback")
            color = ColorSample(255, 255, 255, name=FALLBACK_NAME)
        elif len(histogram) <= config.SIMPLE_REGION_MAX_COLORS:
            color = min(histogram.entries, key=by_count_desc).color
            logger.info(f"Simple region with {len(histogram)} colors, "
                        f"using most common: {color.hex}")
        else:
            color = quantize_to_single_group(histogram.entries).representative
            logger.info(f"Complex region with {len(histogram)} colors, "
                        f"quantized to: {color.hex}")

    logger.info(f"Regional color extraction complete: {color.hex}")
    return color
