"""
ChromiQ Imaging Utilities
Pixel buffer abstraction consumed by the color engine, plus the decoding
collaborator that turns encoded image bytes into such a buffer.
"""
import io
from pathlib import Path
from typing import Tuple, Union

import cv2
import numpy as np
from loguru import logger
from PIL import Image, UnidentifiedImageError

from chromiq.config import config
from chromiq.errors import InvalidInputError, OutOfRangeError


class PixelBuffer:
    """
    Read-only RGBA pixel buffer of fixed width and height.

    Backed by a (height, width, 4) uint8 array. The engine never writes to
    the array; `region` returns a view sharing the same memory.
    """

    def __init__(self, rgba: np.ndarray):
        if rgba is None:
            raise InvalidInputError("Pixel buffer cannot be None")
        if rgba.ndim != 3 or rgba.shape[2] != 4:
            raise InvalidInputError(f"Expected (H, W, 4) RGBA array, got shape {rgba.shape}")
        if rgba.shape[0] == 0 or rgba.shape[1] == 0:
            raise InvalidInputError("Pixel buffer must be at least 1x1")
        if rgba.dtype != np.uint8:
            rgba = np.clip(rgba, 0, 255).astype(np.uint8)
        # Private read-only view; the caller's array keeps its own flags
        self._rgba = rgba.view()
        self._rgba.flags.writeable = False

    @classmethod
    def from_array(cls, array: np.ndarray) -> "PixelBuffer":
        """
        Wrap an (H, W, 3) RGB or (H, W, 4) RGBA array.

        RGB input is treated as fully opaque.
        """
        if array is None:
            raise InvalidInputError("Image array cannot be None")
        array = np.asarray(array)
        if array.ndim != 3 or array.shape[2] not in (3, 4):
            raise InvalidInputError(
                f"Expected (H, W, 3) or (H, W, 4) array, got shape {array.shape}"
            )
        if array.shape[2] == 3:
            alpha = np.full(array.shape[:2] + (1,), 255, dtype=np.uint8)
            array = np.concatenate([array.astype(np.uint8), alpha], axis=2)
        return cls(np.ascontiguousarray(array))

    @property
    def width(self) -> int:
        return int(self._rgba.shape[1])

    @property
    def height(self) -> int:
        return int(self._rgba.shape[0])

    @property
    def rgba(self) -> np.ndarray:
        """The underlying read-only (H, W, 4) array."""
        return self._rgba

    def contains(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def pixel(self, x: int, y: int) -> Tuple[int, int, int, int]:
        """RGBA components of the pixel at column x, row y."""
        if not 0 <= x < self.width:
            raise OutOfRangeError("x", x, 0, self.width - 1)
        if not 0 <= y < self.height:
            raise OutOfRangeError("y", y, 0, self.height - 1)
        r, g, b, a = self._rgba[y, x]
        return int(r), int(g), int(b), int(a)

    def region(self, x0: int, y0: int, x1: int, y1: int) -> "PixelBuffer":
        """Sub-buffer covering columns [x0, x1) and rows [y0, y1)."""
        if not (0 <= x0 < x1 <= self.width and 0 <= y0 < y1 <= self.height):
            raise OutOfRangeError(
                "region", (x0, y0, x1, y1),
                message=f"Region ({x0},{y0})-({x1},{y1}) is outside {self.width}x{self.height} buffer"
            )
        return PixelBuffer(self._rgba[y0:y1, x0:x1])

    def __repr__(self) -> str:
        return f"PixelBuffer({self.width}x{self.height})"


def as_pixel_buffer(image: Union[PixelBuffer, np.ndarray, None]) -> PixelBuffer:
    """Coerce engine input into a PixelBuffer, rejecting a missing image."""
    if image is None:
        raise InvalidInputError("Image cannot be None")
    if isinstance(image, PixelBuffer):
        return image
    return PixelBuffer.from_array(image)


def fit_within(width: int, height: int, max_width: int, max_height: int) -> Tuple[int, int]:
    """
    Dimensions scaled down to fit max_width x max_height, keeping aspect ratio.

    Returns the input unchanged when it already fits.
    """
    if width <= max_width and height <= max_height:
        return width, height
    scale = min(max_width / width, max_height / height)
    return max(1, int(width * scale)), max(1, int(height * scale))


def resize_to_limits(rgba: np.ndarray, max_width: int = None, max_height: int = None) -> np.ndarray:
    """
    Downscale an RGBA array so it fits the configured maximum dimensions.

    Args:
        rgba: (H, W, 4) uint8 array
        max_width: Maximum width (default from config)
        max_height: Maximum height (default from config)

    Returns:
        Resized array, or the input when no resize is needed
    """
    if max_width is None:
        max_width = config.MAX_IMAGE_WIDTH
    if max_height is None:
        max_height = config.MAX_IMAGE_HEIGHT

    height, width = rgba.shape[:2]
    new_width, new_height = fit_within(width, height, max_width, max_height)
    if (new_width, new_height) == (width, height):
        return rgba

    # INTER_AREA for downscaling (better quality)
    resized = cv2.resize(rgba, (new_width, new_height), interpolation=cv2.INTER_AREA)
    logger.info(f"Resized image to {new_width}x{new_height}")
    return resized


def decode_image(image: Image.Image) -> PixelBuffer:
    """Convert a PIL image to a size-limited RGBA PixelBuffer."""
    if image.mode != 'RGBA':
        image = image.convert('RGBA')
        logger.info("Converted image to RGBA format")
    rgba = np.array(image, dtype=np.uint8)
    return PixelBuffer(resize_to_limits(rgba))


def load_image_bytes(data: bytes) -> PixelBuffer:
    """
    Decode encoded image bytes (PNG, JPEG, ...) into a PixelBuffer.

    Raises:
        InvalidInputError: For empty, unsupported or corrupt data
    """
    if not data:
        raise InvalidInputError("Image data cannot be empty")
    try:
        with Image.open(io.BytesIO(data)) as pil_image:
            pil_image.load()
            buffer = decode_image(pil_image)
    except (UnidentifiedImageError, OSError) as e:
        raise InvalidInputError(f"Unsupported image format or corrupted image data: {e}") from e

    logger.info(f"Loaded image from bytes: {buffer.width}x{buffer.height}")
    return buffer


def load_image_file(path: Union[str, Path]) -> PixelBuffer:
    """
    Load an image file from disk into a PixelBuffer.

    Raises:
        InvalidInputError: If the path is empty, missing, or not a readable image
    """
    if path is None or not str(path).strip():
        raise InvalidInputError("File path cannot be empty")
    image_path = Path(path)
    if not image_path.is_file():
        raise InvalidInputError(f"Image file does not exist: {image_path}")

    buffer = load_image_bytes(image_path.read_bytes())
    logger.info(f"Loaded image from: {image_path}")
    return buffer


def describe_image(buffer: PixelBuffer) -> str:
    """Short human-readable description of a buffer."""
    if buffer is None:
        return "No image loaded"
    return f"Image: {buffer.width}x{buffer.height} pixels, Type: RGBA"
