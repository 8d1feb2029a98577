"""
UI role records and the single-color role heuristics (background, text, border).

Every step takes the clusters, the tuple of cluster indices already claimed
and whatever earlier roles it needs, and returns its result with the
updated tuple. Nothing is mutated in place.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

from clusters import ColorCluster, canonical_color
from color_math import contrast_ratio, delta_e_cie76, lab_to_rgb8, rgb_to_hex, rgb_to_lab


# =============================================================================
# Constants
# =============================================================================

BACKGROUND_MAX_SATURATION = 0.4
BACKGROUND_LIGHTNESS_RANGE = (15.0, 85.0)  # Exclusive bounds on LAB L

TEXT_MIN_CONTRAST = 4.5  # WCAG AA
LIGHT_TEXT_RGB = (220, 220, 220)
DARK_TEXT_RGB = (30, 30, 30)

BORDER_MIN_DELTA_E = 20.0
BORDER_SATURATION_RANGE = (0.2, 0.6)

INACTIVE_CONFIDENCE = 0.7


class ColorRole(Enum):
    BACKGROUND = 'background'
    TEXT = 'text'
    ACCENT = 'accent'
    BORDER = 'border'
    ACTIVE_ITEM = 'activeItem'
    INACTIVE_ITEM = 'inactiveItem'
    PROGRESS_BAR = 'progressBar'
    SCROLLBAR = 'scrollbar'


@dataclass(frozen=True)
class RoleAssignment:
    """Final color for one UI role. rgb/hsv/lab/hex all come from one RGB8 value."""
    role: ColorRole
    rgb: tuple
    hsv: tuple
    lab: tuple
    hex: str
    confidence: float
    source_cluster_index: Optional[int] = None
    contrast_against_background: Optional[float] = None
    contrast_against_text: Optional[float] = None
    origin: Optional[str] = None

    def to_dict(self) -> dict:
        data = {
            'role': self.role.value,
            'rgb': {'r': self.rgb[0], 'g': self.rgb[1], 'b': self.rgb[2]},
            'hsv': list(self.hsv),
            'lab': list(self.lab),
            'hex': self.hex,
            'sourceClusterIndex': self.source_cluster_index,
            'confidence': self.confidence,
            'contrastAgainstBackground': self.contrast_against_background,
            'contrastAgainstText': self.contrast_against_text,
            'origin': self.origin,
        }
        return {key: value for key, value in data.items() if value is not None}


def assignment_from_lab(role: ColorRole, lab, confidence: float,
                        source_cluster_index: Optional[int] = None,
                        origin: Optional[str] = None,
                        bg_lab=None, text_lab=None) -> RoleAssignment:
    """
    Canonicalize a LAB color into a RoleAssignment.

    The color is snapped to RGB8 first; contrast figures are measured on
    the snapped color.
    """
    rgb, hsv, canonical_lab = canonical_color(lab_to_rgb8(lab))

    return RoleAssignment(
        role=role,
        rgb=rgb,
        hsv=hsv,
        lab=canonical_lab,
        hex=rgb_to_hex(rgb),
        confidence=confidence,
        source_cluster_index=source_cluster_index,
        contrast_against_background=(
            contrast_ratio(canonical_lab, bg_lab) if bg_lab is not None else None
        ),
        contrast_against_text=(
            contrast_ratio(canonical_lab, text_lab) if text_lab is not None else None
        ),
        origin=origin,
    )


def clone_for_role(role: ColorRole, base: RoleAssignment, confidence: float) -> RoleAssignment:
    """Alias an already-resolved assignment under another role."""
    return replace(base, role=role, confidence=confidence)


def mark_used(used: tuple, index: Optional[int]) -> tuple:
    """Append a cluster index to the ordered used tuple if it is new."""
    if index is None or index in used:
        return used
    return used + (index,)


# =============================================================================
# Background
# =============================================================================

def select_background(clusters: list[ColorCluster]) -> tuple[int, float]:
    """Most dominant cluster with low saturation and mid lightness."""
    low, high = BACKGROUND_LIGHTNESS_RANGE
    for idx, cluster in enumerate(clusters):
        if cluster.hsv[1] < BACKGROUND_MAX_SATURATION and low < cluster.lab[0] < high:
            return idx, 0.9

    # Fallback: most dominant color regardless of properties
    return 0, 0.5


def resolve_background(clusters: list[ColorCluster], used: tuple) -> tuple[RoleAssignment, tuple]:
    idx, confidence = select_background(clusters)
    assignment = assignment_from_lab(
        ColorRole.BACKGROUND, clusters[idx].lab, confidence,
        source_cluster_index=idx, origin='cluster',
    )
    return assignment, mark_used(used, idx)


# =============================================================================
# Text
# =============================================================================

def select_text_color(clusters: list[ColorCluster], bg_lab) -> tuple[int, float, float]:
    """
    Cluster with the highest contrast against the background.

    Returns:
        (index, confidence, contrast); first cluster wins ties
    """
    best_idx = 0
    best_contrast = 0.0
    for idx, cluster in enumerate(clusters):
        contrast = contrast_ratio(bg_lab, cluster.lab)
        if contrast > best_contrast:
            best_idx = idx
            best_contrast = contrast

    confidence = 0.9 if best_contrast >= TEXT_MIN_CONTRAST else 0.6
    return best_idx, confidence, best_contrast


def synthetic_text_lab(bg_lab) -> tuple:
    """Near-white on dark backgrounds, near-black otherwise."""
    rgb = LIGHT_TEXT_RGB if bg_lab[0] < 50.0 else DARK_TEXT_RGB
    return tuple(float(c) for c in rgb_to_lab(rgb))


def resolve_text(clusters: list[ColorCluster], used: tuple,
                 background: RoleAssignment) -> tuple[RoleAssignment, tuple]:
    bg_lab = background.lab
    idx, confidence, contrast = select_text_color(clusters, bg_lab)

    if contrast < TEXT_MIN_CONTRAST:
        assignment = assignment_from_lab(
            ColorRole.TEXT, synthetic_text_lab(bg_lab), 0.45,
            origin='synthetic', bg_lab=bg_lab,
        )
        return assignment, used

    assignment = assignment_from_lab(
        ColorRole.TEXT, clusters[idx].lab, confidence,
        source_cluster_index=idx, origin='cluster', bg_lab=bg_lab,
    )
    return assignment, mark_used(used, idx)


# =============================================================================
# Border
# =============================================================================

def select_border_color(clusters: list[ColorCluster], bg_lab, used: tuple) -> tuple[int, float]:
    """
    Unused cluster far from the background, preferring mid saturation.

    Falls back to the first unused cluster (or the dominant one when every
    cluster is taken) with confidence 0.5.
    """
    low, high = BORDER_SATURATION_RANGE
    best_idx = None
    best_score = 0.0

    for idx, cluster in enumerate(clusters):
        if idx in used:
            continue

        sat = cluster.hsv[1]
        delta_e = delta_e_cie76(bg_lab, cluster.lab)
        score = delta_e / 100.0 + sat if low <= sat <= high else delta_e / 100.0

        if delta_e > BORDER_MIN_DELTA_E and score > best_score:
            best_idx = idx
            best_score = score

    if best_idx is None:
        unused = [idx for idx in range(len(clusters)) if idx not in used]
        return (unused[0] if unused else 0), 0.5

    return best_idx, 0.8 if best_score > 0.5 else 0.5


def resolve_border(clusters: list[ColorCluster], used: tuple,
                   background: RoleAssignment) -> tuple[RoleAssignment, tuple]:
    idx, confidence = select_border_color(clusters, background.lab, used)
    assignment = assignment_from_lab(
        ColorRole.BORDER, clusters[idx].lab, confidence,
        source_cluster_index=idx, origin='cluster',
    )
    return assignment, mark_used(used, idx)
