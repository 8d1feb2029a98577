"""
Palette pipeline: samples -> clusters -> eight UI role assignments.

Role resolution order is fixed:
    Background -> Text -> {Accent, Active} -> Border
    -> InactiveItem (= Border) -> ProgressBar (= Accent) -> Scrollbar (= Active)
"""

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from candidates import build_accent_candidates, build_active_candidates
from clusters import ColorCluster, build_clusters, to_dataset
from color_math import ColorSpace
from kmeans import KMeansConfig, run_kmeans
from pairwise import PairwiseTrace, select_pair
from roles import (
    INACTIVE_CONFIDENCE,
    ColorRole,
    RoleAssignment,
    assignment_from_lab,
    clone_for_role,
    mark_used,
    resolve_background,
    resolve_border,
    resolve_text,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClusteringConfig:
    """How samples are clustered before role mapping."""
    space: str = 'CIELAB'
    k: int = 12
    max_iters: int = 40
    tol: float = 1e-3
    seed: int = 1
    mini_batch: Optional[int] = None


@dataclass
class PaletteResult:
    clusters: list  # ColorCluster, most populous first
    assignments: list  # RoleAssignment, one per ColorRole in enum order
    iterations: int
    color_space: ColorSpace
    trace: Optional[PairwiseTrace] = None


# =============================================================================
# Role mapping
# =============================================================================

def resolve_accent_and_active(clusters: list[ColorCluster], used: tuple, background: RoleAssignment,
                              text: RoleAssignment, debug: bool = False
                              ) -> tuple[RoleAssignment, RoleAssignment, tuple, Optional[PairwiseTrace]]:
    """Solve the accent/active pair together and claim their source clusters."""
    bg_lab, text_lab = background.lab, text.lab
    accent_candidates = build_accent_candidates(clusters, bg_lab, text_lab, used)
    active_candidates = build_active_candidates(clusters, bg_lab, text_lab, used)

    solution = select_pair(accent_candidates, active_candidates, bg_lab, text_lab)
    accent, active = solution.result.accent, solution.result.active

    accent_assignment = assignment_from_lab(
        ColorRole.ACCENT, accent.lab, accent.confidence,
        source_cluster_index=accent.source_cluster_index, origin=accent.origin_label,
        bg_lab=bg_lab, text_lab=text_lab,
    )
    active_assignment = assignment_from_lab(
        ColorRole.ACTIVE_ITEM, active.lab, active.confidence,
        source_cluster_index=active.source_cluster_index, origin=active.origin_label,
        bg_lab=bg_lab, text_lab=text_lab,
    )

    used = mark_used(used, accent.source_cluster_index)
    used = mark_used(used, active.source_cluster_index)

    trace = solution.trace(accent_candidates, active_candidates) if debug else None
    return accent_assignment, active_assignment, used, trace


def map_colors_to_roles(clusters: list[ColorCluster], debug: bool = False
                        ) -> tuple[list[RoleAssignment], Optional[PairwiseTrace]]:
    """
    Assign one color to each of the eight UI roles.

    Args:
        clusters: Non-empty, sorted by count descending
        debug: Also return the pairwise solver trace

    Returns:
        (assignments in ColorRole order, trace or None)
    """
    used = ()

    background, used = resolve_background(clusters, used)
    text, used = resolve_text(clusters, used, background)
    accent, active, used, trace = resolve_accent_and_active(clusters, used, background, text, debug)
    border, used = resolve_border(clusters, used, background)

    assignments = [
        background,
        text,
        accent,
        border,
        active,
        clone_for_role(ColorRole.INACTIVE_ITEM, border, INACTIVE_CONFIDENCE),
        clone_for_role(ColorRole.PROGRESS_BAR, accent, accent.confidence),
        clone_for_role(ColorRole.SCROLLBAR, active, active.confidence),
    ]
    logger.debug("Claimed clusters in order: %s", used)

    return assignments, trace


# =============================================================================
# Main Pipeline
# =============================================================================

def generate_palette(samples: np.ndarray, total_pixels: int, config: ClusteringConfig = ClusteringConfig(),
                     debug: bool = False) -> PaletteResult:
    """
    Cluster RGB8 samples and map them to UI roles.

    Args:
        samples: (n, 3) RGB8 samples, n >= 1
        total_pixels: Sampled pixel total used for cluster shares
        config: Clustering parameters
        debug: Attach the pairwise solver trace to the result

    Raises:
        ValueError: If samples are empty or the color space is unknown
    """
    space = ColorSpace.from_name(config.space)
    dataset = to_dataset(samples, space)
    if len(dataset) == 0:
        raise ValueError("No samples to cluster")

    k = max(1, min(config.k, len(dataset)))
    kmeans_result = run_kmeans(dataset, KMeansConfig(
        k=k,
        max_iters=config.max_iters,
        tol=config.tol,
        seed=config.seed,
        mini_batch=config.mini_batch,
    ))

    clusters = build_clusters(kmeans_result.centroids, kmeans_result.counts, space, total_pixels)
    assignments, trace = map_colors_to_roles(clusters, debug=debug)

    logger.info(
        "%d samples -> %d clusters in %s (%d iterations)",
        len(dataset), len(clusters), space.value, kmeans_result.iterations,
    )

    return PaletteResult(
        clusters=clusters,
        assignments=assignments,
        iterations=kmeans_result.iterations,
        color_space=space,
        trace=trace,
    )
