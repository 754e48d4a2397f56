"""
Unit tests for color space conversion.

Tests:
- HEX parsing and formatting
- HSL conversion
- LAB conversion under D65 and its inverse
- CIE76 Delta-E helpers
"""

import numpy as np
import pytest

from chromiq.errors import InvalidInputError
from chromiq.services.colors.conversion import (
    delta_e_cie76, delta_e_to_many, hex_to_rgb, lab_array_to_rgb, lab_to_rgb,
    pairwise_delta_e, rgb_array_to_lab, rgb_to_hex, rgb_to_hsl, rgb_to_lab,
)


class TestHex:
    """Test HEX formatting and parsing"""

    def test_rgb_to_hex_uppercase(self):
        assert rgb_to_hex((255, 0, 128)) == "#FF0080"
        assert rgb_to_hex(np.array([1, 2, 3], dtype=np.uint8)) == "#010203"

    def test_hex_to_rgb_forms(self):
        assert hex_to_rgb("#FF0080") == (255, 0, 128)
        assert hex_to_rgb("ff0080") == (255, 0, 128)
        assert hex_to_rgb("#f08") == (255, 0, 136)

    @pytest.mark.parametrize("bad", ["", "   ", "#12345", "#GGGGGG", "#1234567"])
    def test_hex_to_rgb_invalid(self, bad):
        with pytest.raises(InvalidInputError):
            hex_to_rgb(bad)

    def test_invalid_hex_is_value_error(self):
        """Generic callers can catch engine input errors as ValueError"""
        with pytest.raises(ValueError):
            hex_to_rgb("nothex")


class TestHsl:
    """Test HSL conversion"""

    def test_primary_colors(self):
        assert rgb_to_hsl((255, 0, 0)) == pytest.approx((0.0, 100.0, 50.0))
        assert rgb_to_hsl((0, 255, 0)) == pytest.approx((120.0, 100.0, 50.0))
        assert rgb_to_hsl((0, 0, 255)) == pytest.approx((240.0, 100.0, 50.0))

    def test_gray_has_no_saturation(self):
        h, s, l = rgb_to_hsl((128, 128, 128))
        assert s == pytest.approx(0.0)
        assert l == pytest.approx(50.2, abs=0.1)


class TestLab:
    """Test LAB conversion and its inverse"""

    def test_black(self):
        assert rgb_to_lab((0, 0, 0)) == pytest.approx((0.0, 0.0, 0.0), abs=1e-9)

    def test_white(self):
        l, a, b = rgb_to_lab((255, 255, 255))
        assert l == pytest.approx(100.0, abs=0.01)
        assert abs(a) < 0.05
        assert abs(b) < 0.05

    def test_red_reference_values(self):
        l, a, b = rgb_to_lab((255, 0, 0))
        assert l == pytest.approx(53.24, abs=0.5)
        assert a == pytest.approx(80.09, abs=0.5)
        assert b == pytest.approx(67.20, abs=0.5)

    def test_lightness_increases_with_gray_level(self):
        grays = np.array([[v, v, v] for v in range(0, 256, 15)])
        lightness = rgb_array_to_lab(grays)[:, 0]
        assert np.all(np.diff(lightness) > 0)

    @pytest.mark.parametrize("rgb", [
        (0, 0, 0), (255, 255, 255), (255, 0, 0), (0, 255, 0),
        (0, 0, 255), (12, 200, 99), (128, 128, 128), (250, 240, 10),
    ])
    def test_round_trip(self, rgb):
        assert lab_to_rgb(rgb_to_lab(rgb)) == rgb

    def test_array_round_trip(self):
        rng = np.random.default_rng(0)
        rgb = rng.integers(0, 256, size=(200, 3))
        back = lab_array_to_rgb(rgb_array_to_lab(rgb))
        assert np.array_equal(back, rgb)

    def test_out_of_gamut_is_clamped(self):
        r, g, b = lab_to_rgb((50.0, 200.0, -200.0))
        for component in (r, g, b):
            assert 0 <= component <= 255

    def test_batch_matches_single(self):
        colors = [(10, 20, 30), (200, 100, 50), (0, 255, 128)]
        batch = rgb_array_to_lab(np.array(colors))
        for color, row in zip(colors, batch):
            assert rgb_to_lab(color) == pytest.approx(tuple(row), abs=1e-9)

    def test_image_shaped_input(self):
        img = np.zeros((4, 5, 3), dtype=np.uint8)
        assert rgb_array_to_lab(img).shape == (4, 5, 3)


class TestDeltaE:
    """Test CIE76 color difference helpers"""

    def test_identical_colors(self):
        lab = rgb_to_lab((90, 40, 200))
        assert delta_e_cie76(lab, lab) == 0.0

    def test_euclidean(self):
        assert delta_e_cie76((0, 0, 0), (3, 4, 0)) == pytest.approx(5.0)

    def test_to_many_matches_scalar(self):
        origin = (50.0, 10.0, -10.0)
        labs = np.array([[50.0, 10.0, -10.0], [53.0, 14.0, -10.0], [0.0, 0.0, 0.0]])
        distances = delta_e_to_many(origin, labs)
        expected = [delta_e_cie76(origin, row) for row in labs]
        assert distances == pytest.approx(expected)

    def test_pairwise_shape(self):
        a = np.zeros((3, 3))
        b = np.ones((4, 3))
        matrix = pairwise_delta_e(a, b)
        assert matrix.shape == (3, 4)
        assert np.allclose(matrix, np.sqrt(3.0))

    def test_similar_reds_are_close(self):
        assert delta_e_cie76(rgb_to_lab((255, 0, 0)), rgb_to_lab((254, 1, 0))) < 3.0
        assert delta_e_cie76(rgb_to_lab((255, 0, 0)), rgb_to_lab((0, 0, 255))) > 100.0
