"""
Weighted k-means clustering in LAB space.

Histogram entries are clustered with each entry weighted by its pixel
count. Seeding follows k-means++ from the most frequent color, with a
fixed random seed so repeated runs over the same input agree exactly.
"""

from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

import numpy as np
from loguru import logger

from chromiq.config import config
from chromiq.errors import InvalidInputError, require_in_range
from chromiq.services.observability import performance_tracked
from .conversion import LabTuple, delta_e_cie76, pairwise_delta_e
from .histogram import entry_count_array, entry_lab_array
from .models import ColorSample, HistogramEntry


@dataclass(eq=False)
class Cluster:
    """A k-means cluster: LAB center, its RGB rendering, and assigned members."""
    center_lab: LabTuple
    center_color: ColorSample
    members: List[HistogramEntry] = field(default_factory=list)
    total_pixel_count: int = 0
    total_percentage: float = 0.0

    @classmethod
    def at(cls, center_lab: Sequence[float]) -> "Cluster":
        lab = tuple(float(v) for v in center_lab)
        return cls(center_lab=lab, center_color=ColorSample.from_lab(*lab))

    @property
    def cluster_size(self) -> int:
        return len(self.members)

    def __str__(self) -> str:
        return (f"Cluster{{center={self.center_color.hex}, members={self.cluster_size}, "
                f"pixels={self.total_pixel_count} ({self.total_percentage:.2f}%)}}")


def by_total_pixel_count_desc(cluster: Cluster) -> int:
    """Sort key: clusters holding more pixels first."""
    return -cluster.total_pixel_count


def _seed_centers(labs: np.ndarray, k: int, rng: np.random.Generator) -> np.ndarray:
    """
    k-means++ seeding.

    The first center is the first (most frequent) entry. Every further
    center is drawn from the remaining entries with probability
    proportional to the squared distance to the nearest chosen center.
    """
    chosen = [0]
    remaining = list(range(1, len(labs)))

    while len(chosen) < k and remaining:
        candidates = labs[remaining]
        min_distance = pairwise_delta_e(candidates, labs[chosen]).min(axis=1)
        weights = min_distance * min_distance
        cumulative = np.cumsum(weights)

        target = rng.random() * cumulative[-1]
        pick = int(np.searchsorted(cumulative, target, side='left'))
        if pick >= len(remaining):
            pick = len(remaining) - 1

        chosen.append(remaining.pop(pick))

    logger.info(f"Initialized {len(chosen)} cluster centers using k-means++")
    return labs[chosen].copy()


def _weighted_means(labs: np.ndarray, weights: np.ndarray,
                    labels: np.ndarray, k: int) -> Tuple[np.ndarray, np.ndarray]:
    """Per-cluster pixel-weighted LAB means and total weights."""
    totals = np.bincount(labels, weights=weights, minlength=k)
    sums = np.stack([
        np.bincount(labels, weights=labs[:, axis] * weights, minlength=k)
        for axis in range(3)
    ], axis=1)
    means = np.zeros((k, 3), dtype=np.float64)
    occupied = totals > 0
    means[occupied] = sums[occupied] / totals[occupied, None]
    return means, totals


@performance_tracked("kmeans_clustering")
def cluster_colors(entries: Sequence[HistogramEntry], k: int,
                   max_iterations: int = None,
                   convergence_threshold: float = None,
                   seed: int = None) -> List[Cluster]:
    """
    Cluster histogram entries into exactly k weighted LAB clusters.

    Args:
        entries: Histogram entries, most frequent first
        k: Number of clusters, 1 <= k <= len(entries)
        max_iterations: Iteration cap (default from config)
        convergence_threshold: Stop once no center moves more than this
        seed: Seed for the k-means++ draw

    Returns:
        k clusters sorted by total pixel count, largest first

    Raises:
        InvalidInputError: If entries is empty
        OutOfRangeError: If k is outside [1, len(entries)]
    """
    if not entries:
        raise InvalidInputError("Cannot cluster an empty color list")
    require_in_range("k", k, 1, len(entries))

    if max_iterations is None:
        max_iterations = config.KMEANS_MAX_ITERATIONS
    if convergence_threshold is None:
        convergence_threshold = config.KMEANS_CONVERGENCE_THRESHOLD
    if seed is None:
        seed = config.KMEANS_SEED

    logger.info(f"Starting LAB k-means clustering: {len(entries)} colors → {k} clusters")

    labs = entry_lab_array(entries)
    weights = entry_count_array(entries).astype(np.float64)
    centers = _seed_centers(labs, k, np.random.default_rng(seed))
    labels = np.zeros(len(entries), dtype=np.int64)

    iteration = 0
    centers_changed = True
    while centers_changed and iteration < max_iterations:
        iteration += 1

        # argmin keeps the first cluster on equal distances
        labels = np.argmin(pairwise_delta_e(labs, centers), axis=1)
        means, totals = _weighted_means(labs, weights, labels, k)

        centers_changed = False
        for index in range(k):
            if totals[index] <= 0:
                # Empty cluster keeps its previous center
                continue
            if delta_e_cie76(centers[index], means[index]) > convergence_threshold:
                centers_changed = True
            centers[index] = means[index]

        logger.debug(f"K-means iteration {iteration}: centers "
                     f"{'moved' if centers_changed else 'converged'}")

    clusters = [Cluster.at(center) for center in centers]
    for entry, label in zip(entries, labels):
        cluster = clusters[int(label)]
        cluster.members.append(entry)
        cluster.total_pixel_count += entry.count
        cluster.total_percentage += entry.percentage

    clusters.sort(key=by_total_pixel_count_desc)

    logger.info(f"LAB k-means clustering complete: {iteration} iterations")
    return clusters
