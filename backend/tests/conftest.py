"""
Test configuration and fixtures for ChromiQ color engine tests.
"""
import pytest
from loguru import logger

from chromiq.services.imaging import PixelBuffer
from chromiq.services.observability import reset_metrics as _reset_metrics

from generate_test_images import (
    create_color_families_image,
    create_gradient_image,
    create_half_transparent_image,
    create_noise_image,
    create_solid_image,
    create_split_image,
    create_transparent_image,
)


@pytest.fixture(autouse=True)
def reset_metrics():
    """Reset metrics before each test."""
    _reset_metrics()


@pytest.fixture
def log_messages():
    """Capture loguru messages emitted during a test."""
    messages = []
    handler_id = logger.add(lambda m: messages.append(m.record), level="DEBUG")
    yield messages
    logger.remove(handler_id)


@pytest.fixture
def solid_image():
    """50x50 solid red-ish image."""
    return PixelBuffer(create_solid_image(50, 50, (200, 30, 40)))


@pytest.fixture
def split_image():
    """10x10 image: 70 red pixels, 30 blue pixels."""
    return PixelBuffer(create_split_image(10, 10, (255, 0, 0), (0, 0, 255), first_rows=7))


@pytest.fixture
def transparent_image():
    return PixelBuffer(create_transparent_image())


@pytest.fixture
def half_transparent_image():
    return PixelBuffer(create_half_transparent_image(20, 20, (10, 120, 60)))


@pytest.fixture
def gradient_image():
    """64 distinct colors, 8 pixels each."""
    return PixelBuffer(create_gradient_image(64, 8))


@pytest.fixture
def families_image():
    """Three jittered color families at a 60/30/10 split, plus their base colors."""
    img, families = create_color_families_image()
    return PixelBuffer(img), families


@pytest.fixture
def noise_image():
    return PixelBuffer(create_noise_image())
