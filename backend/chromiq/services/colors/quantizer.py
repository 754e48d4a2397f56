"""
Color quantization service.

Greedy Delta-E bucketing of histogram entries into a bounded number of
perceptually averaged groups. Entries are processed most frequent first
and join the first existing group whose representative lies within the
threshold; representatives are pixel-weighted means taken in LAB space
and mapped back to RGB.
"""

from dataclasses import dataclass, field
from typing import List, Sequence

import numpy as np
from loguru import logger

from chromiq.config import config
from chromiq.errors import InvalidInputError
from chromiq.services.observability import performance_monitor
from .conversion import delta_e_to_many
from .histogram import entry_lab_array
from .models import ColorSample, HistogramEntry


@dataclass(eq=False)
class ColorGroup:
    """
    A bucket of similar colors.

    Keeps running pixel-weighted LAB sums so that adding a member updates
    the representative without rescanning earlier members.
    """
    members: List[HistogramEntry]
    representative: ColorSample
    total_count: int
    total_percentage: float
    _lab_sum: np.ndarray = field(repr=False)

    @classmethod
    def start(cls, entry: HistogramEntry, lab: Sequence[float] = None) -> "ColorGroup":
        """New group seeded with a single entry; its color is the representative."""
        if lab is None:
            lab = entry.color.lab
        return cls(
            members=[entry],
            representative=entry.color,
            total_count=entry.count,
            total_percentage=entry.percentage,
            _lab_sum=np.asarray(lab, dtype=np.float64) * entry.count,
        )

    def add(self, entry: HistogramEntry, lab: Sequence[float] = None) -> None:
        """Add a member and recompute the representative as the weighted LAB mean."""
        if lab is None:
            lab = entry.color.lab
        self.members.append(entry)
        self.total_count += entry.count
        self.total_percentage += entry.percentage
        self._lab_sum = self._lab_sum + np.asarray(lab, dtype=np.float64) * entry.count

        if self.total_count > 0:
            mean = self._lab_sum / self.total_count
            self.representative = ColorSample.from_lab(mean[0], mean[1], mean[2])

    @property
    def color_count(self) -> int:
        return len(self.members)

    def __str__(self) -> str:
        return (f"ColorGroup{{{self.representative.hex}: {self.total_count} pixels "
                f"({self.total_percentage:.2f}%) from {self.color_count} colors}}")


def by_total_count_desc(group: ColorGroup) -> int:
    """Sort key: groups covering more pixels first."""
    return -group.total_count


@dataclass
class QuantizationResult:
    """Groups sorted by descending total count, plus coverage diagnostics."""
    groups: List[ColorGroup]
    input_colors: int
    processed_colors: int
    uncovered_percentage: float = 0.0

    @property
    def truncated(self) -> bool:
        return self.processed_colors < self.input_colors

    def __len__(self) -> int:
        return len(self.groups)

    def __iter__(self):
        return iter(self.groups)

    def __getitem__(self, index):
        return self.groups[index]


def quantize_colors(entries: Sequence[HistogramEntry],
                    threshold: float = None,
                    max_groups: int = None) -> QuantizationResult:
    """
    Group similar colors together using CIE76 Delta-E.

    Args:
        entries: Histogram entries, most frequent first
        threshold: Maximum Delta-E between an entry and a group representative
        max_groups: Hard cap on the number of groups

    Returns:
        QuantizationResult; when the cap is hit the remaining entries are
        left out and their share is reported as uncovered_percentage
    """
    if threshold is None:
        threshold = config.DEFAULT_DELTA_E_THRESHOLD
    if max_groups is None:
        max_groups = config.MAX_COLOR_GROUPS
    if max_groups < 1:
        raise InvalidInputError("max_groups must be at least 1")

    if not entries:
        logger.info("No colors to quantize - returning empty list")
        return QuantizationResult(groups=[], input_colors=0, processed_colors=0)

    logger.info(f"Starting color quantization: {len(entries)} input colors, "
                f"Delta E threshold: {threshold:.1f}")

    with performance_monitor("color_quantization", color_count=len(entries)):
        entry_labs = entry_lab_array(entries)
        groups: List[ColorGroup] = []
        # Representative LAB per group, in creation order
        group_labs = np.empty((min(max_groups, len(entries)), 3), dtype=np.float64)

        processed = 0
        for entry, lab in zip(entries, entry_labs):
            matched = False
            if groups:
                distances = delta_e_to_many(lab, group_labs[:len(groups)])
                within = np.flatnonzero(distances <= threshold)
                if within.size:
                    first = int(within[0])
                    group = groups[first]
                    group.add(entry, lab)
                    group_labs[first] = group.representative.lab
                    matched = True

            if not matched:
                group_labs[len(groups)] = entry.color.lab
                groups.append(ColorGroup.start(entry, lab))

            processed += 1
            if len(groups) >= max_groups:
                break

        uncovered = float(sum(entry.percentage for entry in entries[processed:]))
        groups.sort(key=by_total_count_desc)

    if processed < len(entries):
        logger.info(f"Reached maximum color groups limit: {max_groups} "
                    f"(processed {processed}/{len(entries)} colors, "
                    f"{uncovered:.2f}% coverage remaining)")
        if uncovered > config.COVERAGE_WARNING_PERCENT:
            logger.warning(f"Significant color coverage ({uncovered:.1f}%) was not processed. "
                           "Consider a higher Delta E threshold or fewer input colors.")

    ratio = len(groups) / len(entries)
    logger.info(f"Color quantization complete: {len(groups)} groups created")
    logger.info(f"Quantization ratio: {len(entries)} → {len(groups)} colors "
                f"({ratio * 100:.1f}% of original)")

    return QuantizationResult(
        groups=groups,
        input_colors=len(entries),
        processed_colors=processed,
        uncovered_percentage=uncovered,
    )


def quantize_to_single_group(entries: Sequence[HistogramEntry]) -> ColorGroup:
    """
    Merge every entry into one group.

    The representative is the pixel-weighted LAB mean over all entries,
    which is what a region pick reports for busy windows.
    """
    if not entries:
        raise InvalidInputError("Cannot build a color group from an empty entry list")

    labs = entry_lab_array(entries)
    group = ColorGroup.start(entries[0], labs[0])
    for entry, lab in zip(entries[1:], labs[1:]):
        group.add(entry, lab)
    return group


def representative_colors(groups: Sequence[ColorGroup]) -> List[ColorSample]:
    """Representative color of each group, in group order."""
    return [group.representative for group in groups]


def quantization_report(entries: Sequence[HistogramEntry],
                        groups: Sequence[ColorGroup],
                        threshold: float = None) -> str:
    """Human-readable statistics about a quantization run."""
    if not entries:
        return "No colors to analyze"
    if threshold is None:
        threshold = config.DEFAULT_DELTA_E_THRESHOLD

    total_colors = len(entries)
    total_groups = len(groups)
    ratio = total_groups / total_colors

    lines = [
        "ChromiQ Color Quantization Report",
        "=================================",
        f"Original Colors: {total_colors:,}",
        f"Color Groups: {total_groups:,}",
    ]
    if total_groups:
        lines.append(f"Compression Ratio: {ratio * 100:.1f}% ({1.0 / ratio:.1f}x reduction)")
    lines.append(f"Delta E Threshold: {threshold:.1f}")

    if groups:
        largest = max(groups, key=lambda g: g.total_percentage)
        smallest = min(groups, key=lambda g: g.total_percentage)
        lines.extend([
            "",
            "Group Statistics:",
            f"• Largest group: {largest.representative.hex} "
            f"({largest.total_percentage:.2f}%, {largest.color_count} original colors)",
            f"• Smallest group: {smallest.representative.hex} "
            f"({smallest.total_percentage:.2f}%, {smallest.color_count} original colors)",
        ])
    return "\n".join(lines)
