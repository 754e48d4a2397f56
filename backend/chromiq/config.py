"""
ChromiQ Configuration
Defaults for the color analysis engine plus environment-driven ambient settings.
"""
import os

from dotenv import load_dotenv

load_dotenv()


class Config:
    """Configuration class for the ChromiQ engine and its collaborators."""

    # Logging and observability
    LOG_LEVEL: str = os.environ.get("CHROMIQ_LOG_LEVEL", "INFO")
    METRICS_ENABLED: bool = bool(int(os.environ.get("CHROMIQ_METRICS_ENABLED", "1")))

    # Image decoding collaborator
    MAX_IMAGE_WIDTH: int = int(os.environ.get("CHROMIQ_MAX_IMAGE_WIDTH", "1920"))
    MAX_IMAGE_HEIGHT: int = int(os.environ.get("CHROMIQ_MAX_IMAGE_HEIGHT", "1080"))

    # Histogram extraction (alpha on the 0-255 scale)
    ALPHA_THRESHOLD: int = 128

    # Quantization
    DEFAULT_DELTA_E_THRESHOLD: float = 3.0
    MAX_COLOR_GROUPS: int = 500
    COVERAGE_WARNING_PERCENT: float = 10.0

    # K-means clustering
    KMEANS_MAX_ITERATIONS: int = 50
    KMEANS_CONVERGENCE_THRESHOLD: float = 0.1
    KMEANS_SEED: int = 42

    # Dominant color extraction
    DEFAULT_MAX_COLORS: int = 10
    MIN_COLORS_FOR_CLUSTERING: int = 15

    # Regional picking
    DEFAULT_REGION_SIZE: int = 20
    MIN_REGION_SIZE: int = 5
    MAX_REGION_SIZE: int = 50
    SIMPLE_REGION_MAX_COLORS: int = 3

    # Palette
    MAX_PALETTE_SIZE: int = 10
    PALETTE_SIMILARITY_THRESHOLD: float = 10.0

    @classmethod
    def validate_max_colors(cls, max_colors: int) -> bool:
        """Validate requested dominant color count."""
        return 1 <= max_colors <= cls.DEFAULT_MAX_COLORS

    @classmethod
    def validate_region_size(cls, region_size: int) -> bool:
        """Validate regional picking window size."""
        return cls.MIN_REGION_SIZE <= region_size <= cls.MAX_REGION_SIZE


# Global config instance
config = Config()
