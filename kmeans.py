"""
Deterministic k-means over a dataset of 3-float working-space points.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np
from scipy.spatial.distance import cdist
from sklearn.cluster import kmeans_plusplus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class KMeansConfig:
    """Clustering parameters."""
    k: int
    max_iters: int = 40
    tol: float = 1e-3  # Max centroid movement treated as converged
    seed: int = 1
    warm_start: Optional[np.ndarray] = None  # (m, 3) initial centroids
    mini_batch: Optional[int] = None  # Refine on a seeded subsample of this size


@dataclass
class KMeansResult:
    """Output of run_kmeans()."""
    centroids: np.ndarray  # (k, 3) working-space coordinates
    counts: np.ndarray  # (k,) points assigned over the full dataset
    iterations: int  # Refinement passes actually run


def assign_points(points: np.ndarray, centroids: np.ndarray) -> np.ndarray:
    """Index of the nearest centroid for each point (lowest index wins ties)."""
    distances = cdist(points, centroids, metric='sqeuclidean')
    return np.argmin(distances, axis=1)


def seed_centroids(points: np.ndarray, config: KMeansConfig) -> np.ndarray:
    """
    Pick k initial centroids.

    Warm-start rows come first; remaining slots are filled with k-means++
    picks driven by config.seed, drawn from points no warm row already sits
    on. The same dataset and seed always yield the same start.
    """
    k = config.k
    seeded = np.empty((0, points.shape[1]))

    if config.warm_start is not None:
        seeded = np.asarray(config.warm_start, dtype=np.float64).reshape(-1, points.shape[1])[:k]

    missing = k - len(seeded)
    if missing > 0:
        pool = points
        if len(seeded):
            uncovered = cdist(points, seeded, metric='sqeuclidean').min(axis=1) > 0
            if uncovered.sum() >= missing:
                pool = points[uncovered]
        picks, _ = kmeans_plusplus(pool, n_clusters=missing, random_state=config.seed)
        seeded = np.vstack([seeded, picks])

    return seeded.copy()


def update_centroids(points: np.ndarray, labels: np.ndarray, centroids: np.ndarray) -> np.ndarray:
    """Move each centroid to the mean of its points; empty ones stay put."""
    k = len(centroids)
    counts = np.bincount(labels, minlength=k)
    sums = np.zeros_like(centroids)
    np.add.at(sums, labels, points)

    updated = centroids.copy()
    filled = counts > 0
    updated[filled] = sums[filled] / counts[filled, None]
    return updated


def run_kmeans(dataset: np.ndarray, config: KMeansConfig) -> KMeansResult:
    """
    Iteratively refine centroids until movement drops below config.tol.

    Args:
        dataset: (n, 3) points in the working color space
        config: clustering parameters; k must not exceed n

    Returns:
        KMeansResult with counts covering every point in the dataset.
        Centroids with zero points are kept here and dropped by the caller.

    Raises:
        ValueError: If the dataset is empty or k is outside [1, n]
    """
    points = np.asarray(dataset, dtype=np.float64)
    if points.ndim != 2 or len(points) == 0:
        raise ValueError("Cannot cluster an empty dataset")
    if config.k < 1 or config.k > len(points):
        raise ValueError(f"k must be between 1 and {len(points)}, got {config.k}")

    fit_points = points
    if config.mini_batch is not None and 0 < config.mini_batch < len(points):
        rng = np.random.default_rng(config.seed)
        batch = np.sort(rng.choice(len(points), size=config.mini_batch, replace=False))
        fit_points = points[batch]
        logger.debug("Refining on %d of %d points", len(fit_points), len(points))

    refit = KMeansConfig(
        k=min(config.k, len(fit_points)),
        seed=config.seed,
        warm_start=config.warm_start,
    )
    centroids = seed_centroids(fit_points, refit)
    if len(centroids) < config.k:
        # Batch smaller than k: top up from the full dataset
        centroids = seed_centroids(points, KMeansConfig(k=config.k, seed=config.seed, warm_start=centroids))

    iterations = 0
    for _ in range(config.max_iters):
        iterations += 1
        labels = assign_points(fit_points, centroids)
        updated = update_centroids(fit_points, labels, centroids)
        shift = np.linalg.norm(updated - centroids, axis=1).max()
        centroids = updated
        if shift < config.tol:
            break

    labels = assign_points(points, centroids)
    counts = np.bincount(labels, minlength=len(centroids))
    logger.debug(
        "k-means: k=%d, %d iterations, %d non-empty clusters",
        config.k, iterations, int((counts > 0).sum()),
    )

    return KMeansResult(centroids=centroids, counts=counts, iterations=iterations)
