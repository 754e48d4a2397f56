"""
Unit tests for dominant color extraction.

Tests the pass-through vs clustering decision, bounds on the requested
color count, ordering and the extraction report.
"""

import pytest

from chromiq.errors import InvalidInputError, OutOfRangeError
from chromiq.services.colors.dominant import (
    extract_dominant_colors, extraction_report, should_use_all_colors,
)

from generate_test_images import create_split_image, create_stripes_image

TWELVE_COLORS = [
    (255, 0, 0), (0, 255, 0), (0, 0, 255), (255, 255, 0), (0, 255, 255), (255, 0, 255),
    (0, 0, 0), (255, 255, 255), (128, 128, 128), (255, 128, 0), (128, 0, 128), (0, 128, 128),
]


class TestDecisionRule:
    """Test when clustering is skipped"""

    def test_few_colors_pass_through(self):
        assert should_use_all_colors(5, 10)
        assert should_use_all_colors(10, 10)

    def test_below_clustering_minimum(self):
        assert should_use_all_colors(14, 5)

    def test_many_colors_cluster(self):
        assert not should_use_all_colors(15, 10)
        assert not should_use_all_colors(500, 3)


class TestExtractDominantColors:
    """Test full-image dominant color extraction"""

    def test_none_image(self):
        with pytest.raises(InvalidInputError):
            extract_dominant_colors(None)

    @pytest.mark.parametrize("max_colors", [0, 11, -2])
    def test_max_colors_out_of_range(self, solid_image, max_colors):
        with pytest.raises(OutOfRangeError):
            extract_dominant_colors(solid_image, max_colors)

    def test_transparent_image_is_empty(self, transparent_image):
        assert extract_dominant_colors(transparent_image) == []

    def test_solid_image(self, solid_image):
        colors = extract_dominant_colors(solid_image)
        assert len(colors) == 1
        assert colors[0].color.rgb == (200, 30, 40)
        assert colors[0].percentage == pytest.approx(100.0)
        assert colors[0].pixel_count == 2500

    def test_two_color_split(self, split_image):
        colors = extract_dominant_colors(split_image)
        assert [c.color.rgb for c in colors] == [(255, 0, 0), (0, 0, 255)]
        assert [c.percentage for c in colors] == pytest.approx([70.0, 30.0])

    def test_pass_through_truncates_to_max_colors(self, split_image):
        colors = extract_dominant_colors(split_image, 1)
        assert len(colors) == 1
        assert colors[0].percentage == pytest.approx(70.0)

    def test_simple_image_not_clustered(self):
        img = create_stripes_image(TWELVE_COLORS)
        colors = extract_dominant_colors(img, 10)
        assert len(colors) == 10
        assert {c.color.rgb for c in colors} <= set(TWELVE_COLORS)

    def test_clustered_gradient(self, gradient_image):
        colors = extract_dominant_colors(gradient_image, 5)
        assert len(colors) == 5
        percentages = [c.percentage for c in colors]
        assert percentages == sorted(percentages, reverse=True)
        assert sum(percentages) == pytest.approx(100.0)
        assert sum(c.pixel_count for c in colors) == 64 * 8

    def test_noise_default_count(self, noise_image):
        assert len(extract_dominant_colors(noise_image)) == 10

    def test_color_families(self, families_image):
        image, _ = families_image
        colors = extract_dominant_colors(image, 3)
        assert [c.percentage for c in colors] == pytest.approx([60.0, 30.0, 10.0])
        assert colors[0].color.red > colors[0].color.green

    def test_accepts_raw_array(self):
        img = create_split_image(4, 4, (10, 10, 10), (200, 200, 200), first_rows=3)
        colors = extract_dominant_colors(img)
        assert colors[0].pixel_count == 12


class TestExtractionReport:
    """Test the textual extraction report"""

    def test_report(self, split_image):
        report = extraction_report(split_image, extract_dominant_colors(split_image))
        assert "Image: 10x10 pixels" in report
        assert "Dominant Colors Found: 2" in report
        assert " 1. #FF0000 - 70 pixels (70.00%)" in report
        assert "Total Coverage: 100.0% of visible pixels" in report

    def test_empty_report(self, transparent_image):
        assert extraction_report(transparent_image, []) == "No dominant colors extracted from image"
