"""
Color space conversions and perceptual distance (sRGB, D65).

RGB is the source of truth; HEX, HSL and CIE LAB are derived from it.
Array functions are vectorised over a trailing axis of size 3 and are the
single implementation behind the scalar helpers, so a color converted on
its own and the same color converted inside a batch produce identical LAB.
"""

import colorsys
from typing import Sequence, Tuple

import numpy as np

from chromiq.errors import InvalidInputError

RGBTuple = Tuple[int, int, int]
LabTuple = Tuple[float, float, float]
HslTuple = Tuple[float, float, float]

# D65 reference white
WHITE_X = 0.95047
WHITE_Y = 1.00000
WHITE_Z = 1.08883

_RGB_TO_XYZ = np.array([
    [0.4124, 0.3576, 0.1805],
    [0.2126, 0.7152, 0.0722],
    [0.0193, 0.1192, 0.9505],
], dtype=np.float64)

_XYZ_TO_RGB = np.linalg.inv(_RGB_TO_XYZ)

_EPSILON = 0.008856
_KAPPA = 7.787


def rgb_to_hex(rgb: Sequence[int]) -> str:
    """Convert an RGB triple to an upper-case '#RRGGBB' string."""
    r, g, b = [int(x) for x in rgb[:3]]
    return f"#{r:02X}{g:02X}{b:02X}"


def hex_to_rgb(hex_color: str) -> RGBTuple:
    """
    Parse '#RRGGBB', 'RRGGBB' or the short '#RGB' form into an RGB tuple.

    Raises:
        InvalidInputError: If the string is empty or not a valid hex color
    """
    if hex_color is None or not hex_color.strip():
        raise InvalidInputError("HEX color cannot be empty")

    value = hex_color.strip()
    if value.startswith('#'):
        value = value[1:]
    if len(value) == 3:
        value = ''.join(ch * 2 for ch in value)
    if len(value) != 6:
        raise InvalidInputError(f"Invalid HEX format: {hex_color}")

    try:
        return tuple(int(value[i:i + 2], 16) for i in (0, 2, 4))
    except ValueError as e:
        raise InvalidInputError(f"Invalid HEX value: {hex_color}") from e


def rgb_to_hsl(rgb: Sequence[int]) -> HslTuple:
    """RGB triple to (hue 0-360, saturation 0-100, lightness 0-100)."""
    r, g, b = [int(x) / 255.0 for x in rgb[:3]]
    h, l, s = colorsys.rgb_to_hls(r, g, b)
    return (h * 360.0, s * 100.0, l * 100.0)


def _srgb_to_linear(c: np.ndarray) -> np.ndarray:
    return np.where(c <= 0.04045, c / 12.92, ((c + 0.055) / 1.055) ** 2.4)


def _linear_to_srgb(c: np.ndarray) -> np.ndarray:
    c = np.clip(c, 0.0, None)
    return np.where(c <= 0.0031308, c * 12.92, 1.055 * np.power(c, 1.0 / 2.4) - 0.055)


def _apply_matrix(matrix: np.ndarray, v: np.ndarray) -> np.ndarray:
    # Element-wise rather than BLAS so single colors and batches round identically
    out = np.empty(v.shape, dtype=np.float64)
    for row in range(3):
        out[..., row] = (matrix[row, 0] * v[..., 0]
                         + matrix[row, 1] * v[..., 1]
                         + matrix[row, 2] * v[..., 2])
    return out


def _pivot_xyz(t: np.ndarray) -> np.ndarray:
    return np.where(t > _EPSILON, np.cbrt(t), _KAPPA * t + 16.0 / 116.0)


def _unpivot_xyz(f: np.ndarray) -> np.ndarray:
    cubed = f ** 3
    return np.where(cubed > _EPSILON, cubed, (f - 16.0 / 116.0) / _KAPPA)


def rgb_array_to_lab(rgb: np.ndarray) -> np.ndarray:
    """
    sRGB to CIE LAB (D65), vectorised.

    Args:
        rgb: array[..., 3] of 0-255 values (any integer or float dtype)

    Returns:
        float64 array[..., 3] of (L, a, b)
    """
    rgb_f = np.asarray(rgb, dtype=np.float64)[..., :3] / 255.0
    linear = _srgb_to_linear(rgb_f)

    xyz = _apply_matrix(_RGB_TO_XYZ, linear)
    xyz = xyz / np.array([WHITE_X, WHITE_Y, WHITE_Z])

    f = _pivot_xyz(xyz)
    fx, fy, fz = f[..., 0], f[..., 1], f[..., 2]

    out = np.empty(f.shape, dtype=np.float64)
    out[..., 0] = 116.0 * fy - 16.0
    out[..., 1] = 500.0 * (fx - fy)
    out[..., 2] = 200.0 * (fy - fz)
    return out


def lab_array_to_rgb(lab: np.ndarray) -> np.ndarray:
    """
    CIE LAB (D65) to sRGB, vectorised. Out-of-gamut values are clamped.

    Args:
        lab: array[..., 3] of (L, a, b)

    Returns:
        int64 array[..., 3] of 0-255 values
    """
    lab_f = np.asarray(lab, dtype=np.float64)
    fy = (lab_f[..., 0] + 16.0) / 116.0
    fx = lab_f[..., 1] / 500.0 + fy
    fz = fy - lab_f[..., 2] / 200.0

    xyz = np.stack([_unpivot_xyz(fx), _unpivot_xyz(fy), _unpivot_xyz(fz)], axis=-1)
    xyz = xyz * np.array([WHITE_X, WHITE_Y, WHITE_Z])

    linear = _apply_matrix(_XYZ_TO_RGB, xyz)
    srgb = np.clip(_linear_to_srgb(linear), 0.0, 1.0)
    return np.floor(srgb * 255.0 + 0.5).astype(np.int64)


def rgb_to_lab(rgb: Sequence[int]) -> LabTuple:
    """Single RGB triple to an (L, a, b) tuple."""
    lab = rgb_array_to_lab(np.asarray(rgb[:3], dtype=np.float64))
    return (float(lab[0]), float(lab[1]), float(lab[2]))


def lab_to_rgb(lab: Sequence[float]) -> RGBTuple:
    """Single (L, a, b) triple to a clamped RGB tuple."""
    rgb = lab_array_to_rgb(np.asarray(lab[:3], dtype=np.float64))
    return (int(rgb[0]), int(rgb[1]), int(rgb[2]))


def delta_e_cie76(lab1: Sequence[float], lab2: Sequence[float]) -> float:
    """
    CIE76 color difference: Euclidean distance in LAB space.

    0 means identical; around 2-3 is barely noticeable; above 10 the
    colors read as clearly different.
    """
    dl = float(lab1[0]) - float(lab2[0])
    da = float(lab1[1]) - float(lab2[1])
    db = float(lab1[2]) - float(lab2[2])
    return float(np.sqrt(dl * dl + da * da + db * db))


def delta_e_to_many(lab: Sequence[float], labs: np.ndarray) -> np.ndarray:
    """CIE76 distance from one LAB point to each row of an (N, 3) array."""
    diff = np.asarray(labs, dtype=np.float64) - np.asarray(lab, dtype=np.float64)
    return np.sqrt(np.sum(diff * diff, axis=-1))


def pairwise_delta_e(labs_a: np.ndarray, labs_b: np.ndarray) -> np.ndarray:
    """(N, M) matrix of CIE76 distances between two sets of LAB rows."""
    a = np.asarray(labs_a, dtype=np.float64)[:, None, :]
    b = np.asarray(labs_b, dtype=np.float64)[None, :, :]
    return np.sqrt(np.sum((a - b) ** 2, axis=2))
