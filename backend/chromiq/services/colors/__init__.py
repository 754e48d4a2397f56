"""
ChromiQ Colors Module

Color model, histogram extraction, Delta-E quantization, weighted LAB
k-means clustering, dominant color extraction and regional picking.
"""

from .models import ColorSample, HistogramEntry, DominantColor, by_count_desc, by_percentage_desc
from .histogram import HistogramResult, extract_histogram, extract_unique_colors, extract_top_colors
from .quantizer import (
    ColorGroup, QuantizationResult, by_total_count_desc, quantize_colors, quantize_to_single_group,
)
from .clusterer import Cluster, by_total_pixel_count_desc, cluster_colors
from .dominant import extract_dominant_colors, extraction_report
from .regional import RegionBounds, compute_region_bounds, pick_exact_pixel, pick_region_color

__all__ = [
    'ColorSample',
    'HistogramEntry',
    'DominantColor',
    'by_count_desc',
    'by_percentage_desc',
    'HistogramResult',
    'extract_histogram',
    'extract_unique_colors',
    'extract_top_colors',
    'ColorGroup',
    'by_total_count_desc',
    'QuantizationResult',
    'quantize_colors',
    'quantize_to_single_group',
    'Cluster',
    'by_total_pixel_count_desc',
    'cluster_colors',
    'extract_dominant_colors',
    'extraction_report',
    'RegionBounds',
    'compute_region_bounds',
    'pick_exact_pixel',
    'pick_region_color',
]
