"""
Color Models

Value types flowing through the color engine:

- ColorSample: an immutable RGB(A) color with lazily memoized HEX/HSL/LAB
- HistogramEntry: one distinct visible color with its pixel statistics
- DominantColor: terminal output record of full-image extraction

Ordering policy lives in the named sort-key functions at the bottom of this
module rather than on the types themselves.
"""

from dataclasses import dataclass, replace
from functools import cached_property
from typing import Optional

from chromiq.errors import InvalidInputError
from .conversion import (
    HslTuple, LabTuple, RGBTuple,
    hex_to_rgb, lab_to_rgb, rgb_to_hex, rgb_to_hsl, rgb_to_lab,
)


def _validate_component(value: int, component: str) -> int:
    try:
        coerced = int(value)
    except (TypeError, ValueError) as e:
        raise InvalidInputError(f"{component} value must be an integer") from e
    if coerced != value:
        raise InvalidInputError(f"{component} value must be an integer")
    if coerced < 0 or coerced > 255:
        raise InvalidInputError(f"{component} value must be between 0 and 255")
    return coerced


@dataclass(frozen=True)
class ColorSample:
    """
    A single color: RGB in [0, 255], alpha in [0.0, 1.0], optional name.

    RGB is the source of truth. HEX, HSL and LAB are computed on first
    access and memoized on the instance; since the sample is frozen, a
    "mutation" (with_rgb, with_alpha, with_name) builds a new validated
    sample with empty caches, so a cached value can never go stale.
    """
    red: int
    green: int
    blue: int
    alpha: float = 1.0
    name: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, 'red', _validate_component(self.red, "Red"))
        object.__setattr__(self, 'green', _validate_component(self.green, "Green"))
        object.__setattr__(self, 'blue', _validate_component(self.blue, "Blue"))
        try:
            alpha = float(self.alpha)
        except (TypeError, ValueError) as e:
            raise InvalidInputError("Alpha must be a number") from e
        if alpha < 0.0 or alpha > 1.0:
            raise InvalidInputError("Alpha must be between 0.0 and 1.0")
        object.__setattr__(self, 'alpha', alpha)

    # --- Alternate constructors ---

    @classmethod
    def from_hex(cls, hex_color: str, name: Optional[str] = None) -> "ColorSample":
        """Build a sample from '#RRGGBB', 'RRGGBB' or '#RGB'."""
        r, g, b = hex_to_rgb(hex_color)
        return cls(r, g, b, name=name)

    @classmethod
    def from_lab(cls, l: float, a: float, b: float,
                 name: Optional[str] = None) -> "ColorSample":
        """Build a sample from LAB coordinates, clamping out-of-gamut values."""
        r, g, bl = lab_to_rgb((l, a, b))
        return cls(r, g, bl, name=name)

    # --- Derived copies ---

    def with_rgb(self, red: int, green: int, blue: int) -> "ColorSample":
        return replace(self, red=red, green=green, blue=blue)

    def with_alpha(self, alpha: float) -> "ColorSample":
        return replace(self, alpha=alpha)

    def with_name(self, name: Optional[str]) -> "ColorSample":
        return replace(self, name=name)

    # --- Representations ---

    @property
    def rgb(self) -> RGBTuple:
        return (self.red, self.green, self.blue)

    @cached_property
    def hex(self) -> str:
        """Upper-case '#RRGGBB'."""
        return rgb_to_hex(self.rgb)

    @cached_property
    def hsl(self) -> HslTuple:
        """(hue 0-360, saturation 0-100, lightness 0-100)."""
        return rgb_to_hsl(self.rgb)

    @cached_property
    def lab(self) -> LabTuple:
        """(L 0-100, a, b) under D65."""
        return rgb_to_lab(self.rgb)

    def has_name(self) -> bool:
        return self.name is not None and bool(self.name.strip())

    def __str__(self) -> str:
        rgba = f"RGBA({self.red},{self.green},{self.blue},{self.alpha:.2f}) {self.hex}"
        if self.has_name():
            return f"ColorSample{{{self.name}: {rgba}}}"
        return f"ColorSample{{{rgba}}}"


@dataclass(frozen=True)
class HistogramEntry:
    """One distinct visible color with its occurrence count and percentage."""
    color: ColorSample
    count: int
    percentage: float

    def __str__(self) -> str:
        return f"HistogramEntry{{{self.color.hex}: {self.count} pixels ({self.percentage:.2f}%)}}"


@dataclass(frozen=True)
class DominantColor:
    """A representative image color with its share of the visible pixels."""
    color: ColorSample
    percentage: float
    pixel_count: int

    def __str__(self) -> str:
        return f"DominantColor{{{self.color.hex}: {self.percentage:.2f}% ({self.pixel_count:,} pixels)}}"


def percentage_of(count: int, visible_pixels: int) -> float:
    """100 * count / visible_pixels, or 0.0 when nothing is visible."""
    if visible_pixels <= 0:
        return 0.0
    return (count * 100.0) / visible_pixels


# Sort keys. Python's sort is stable, so ties keep their input order.

def by_count_desc(entry: HistogramEntry) -> int:
    """Sort key: histogram entries with more pixels first."""
    return -entry.count


def by_percentage_desc(dominant: DominantColor) -> float:
    """Sort key: dominant colors covering more of the image first."""
    return -dominant.percentage
