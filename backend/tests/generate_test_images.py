"""
Generate synthetic RGBA test images for ChromiQ color analysis testing.
"""
import io
from typing import Sequence, Tuple

import cv2
import numpy as np
from PIL import Image

RGB = Tuple[int, int, int]


def create_solid_image(width: int = 50, height: int = 50,
                       color: RGB = (200, 30, 40), alpha: int = 255) -> np.ndarray:
    """Single flat color."""
    img = np.zeros((height, width, 4), dtype=np.uint8)
    img[:, :, :3] = color
    img[:, :, 3] = alpha
    return img


def create_split_image(width: int = 10, height: int = 10,
                       first: RGB = (255, 0, 0), second: RGB = (0, 0, 255),
                       first_rows: int = 7) -> np.ndarray:
    """Two colors split horizontally: the first `first_rows` rows use `first`."""
    img = create_solid_image(width, height, second)
    img[:first_rows, :, :3] = first
    return img


def create_transparent_image(width: int = 20, height: int = 20) -> np.ndarray:
    """Fully transparent image."""
    return create_solid_image(width, height, (0, 0, 0), alpha=0)


def create_half_transparent_image(width: int = 20, height: int = 20,
                                  color: RGB = (10, 120, 60)) -> np.ndarray:
    """Left half opaque color, right half fully transparent white."""
    img = create_solid_image(width, height, (255, 255, 255), alpha=0)
    img[:, :width // 2, :3] = color
    img[:, :width // 2, 3] = 255
    return img


def create_stripes_image(colors: Sequence[RGB], stripe_width: int = 2,
                         height: int = 10) -> np.ndarray:
    """Vertical stripes, one per color, each `stripe_width` wide."""
    width = stripe_width * len(colors)
    img = create_solid_image(width, height, colors[0])
    for i, color in enumerate(colors):
        img[:, i * stripe_width:(i + 1) * stripe_width, :3] = color
    return img


def create_gradient_image(width: int = 64, height: int = 8) -> np.ndarray:
    """Horizontal red ramp, one distinct color per column."""
    img = create_solid_image(width, height, (0, 0, 0))
    ramp = np.linspace(0, 255, width).astype(np.uint8)
    img[:, :, 0] = ramp[None, :]
    img[:, :, 1] = 40
    img[:, :, 2] = 255 - ramp[None, :]
    return img


def create_color_families_image(seed: int = 7) -> Tuple[np.ndarray, dict]:
    """
    Three widely separated color families with 60/30/10 weighting.

    Each family is a small jitter around a base color so that the image
    holds many distinct RGB values. Returns the image and the family
    base colors keyed by name.
    """
    rng = np.random.default_rng(seed)
    families = {
        "red": (200, 30, 30),
        "green": (30, 170, 60),
        "blue": (40, 60, 210),
    }
    width, height = 100, 50
    img = create_solid_image(width, height, families["red"])

    # Column bands: red 60, green 30, blue 10
    cv2.rectangle(img, (60, 0), (89, height - 1), families["green"] + (255,), -1)
    cv2.rectangle(img, (90, 0), (99, height - 1), families["blue"] + (255,), -1)

    jitter = rng.integers(-4, 5, size=(height, width, 3))
    img[:, :, :3] = np.clip(img[:, :, :3].astype(np.int64) + jitter, 0, 255).astype(np.uint8)
    return img, families


def create_noise_image(width: int = 40, height: int = 40, seed: int = 3) -> np.ndarray:
    """Uniform random colors; nearly every pixel distinct."""
    rng = np.random.default_rng(seed)
    img = np.full((height, width, 4), 255, dtype=np.uint8)
    img[:, :, :3] = rng.integers(0, 256, size=(height, width, 3), dtype=np.uint8)
    return img


def encode_png(rgba: np.ndarray) -> bytes:
    """Encode an RGBA array as PNG bytes."""
    buf = io.BytesIO()
    Image.fromarray(rgba).save(buf, format="PNG")
    return buf.getvalue()
