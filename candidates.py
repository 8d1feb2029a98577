"""
Candidate colors for the accent and active-item roles.

Candidates come from three places, in decreasing order of trust:
  0. a cluster color used as-is
  1. a cluster color with its lightness nudged until it passes guardrails
  2. synthesized colors (background/text interpolation, neutral grays)
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional

from clusters import ColorCluster
from color_math import contrast_ratio, delta_e_cie76

logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

ACCENT_BG_MIN = 3.0
ACCENT_TEXT_MIN = 4.5
ACTIVE_BG_MIN = 2.0
ACTIVE_TEXT_MIN = 4.5

ADJUST_STEP = 4.0  # LAB L units per lightness nudge
MAX_ADJUST_STEPS = 12
MAX_RANKED_CLUSTERS = 12
DUPLICATE_DELTA_E = 0.5  # Candidates closer than this are the same color

MIDLINE_T_START = -0.3
MIDLINE_T_STEP = 0.05
MIDLINE_T_STEPS = 33  # -0.3 .. 1.3 inclusive

ACCENT_GRAY_ANCHORS = (25.0, 75.0)
ACTIVE_GRAY_ANCHORS = (30.0, 50.0, 70.0)


def desc_key(value: float) -> tuple:
    """
    Sort key ordering floats from largest to smallest, NaN always last.

    Every ranking in candidate generation and pair solving goes through this.
    """
    if math.isnan(value):
        return (1, 0.0)
    return (0, -value)


# =============================================================================
# Guardrails
# =============================================================================

@dataclass(frozen=True)
class GuardrailConfig:
    """Minimum requirements for a single-role candidate."""
    min_contrast_bg: float
    min_contrast_text: float
    min_contrast_peer: Optional[float] = None
    min_delta_e_peer: Optional[float] = None
    adjust_step: float = ADJUST_STEP
    max_adjust_steps: int = MAX_ADJUST_STEPS


ACCENT_GUARDRAILS = GuardrailConfig(min_contrast_bg=ACCENT_BG_MIN, min_contrast_text=ACCENT_TEXT_MIN)
ACTIVE_GUARDRAILS = GuardrailConfig(min_contrast_bg=ACTIVE_BG_MIN, min_contrast_text=ACTIVE_TEXT_MIN)


def meets_guardrails(contrast_bg: float, contrast_text: float, config: GuardrailConfig,
                     peer_contrast: Optional[float] = None,
                     peer_delta_e: Optional[float] = None) -> bool:
    """True when every configured threshold is met; a missing peer value fails."""
    if contrast_bg < config.min_contrast_bg or contrast_text < config.min_contrast_text:
        return False

    if config.min_contrast_peer is not None:
        if peer_contrast is None or not peer_contrast >= config.min_contrast_peer:
            return False

    if config.min_delta_e_peer is not None:
        if peer_delta_e is None or not peer_delta_e >= config.min_delta_e_peer:
            return False

    return True


def passes(lab, bg_lab, text_lab, config: GuardrailConfig, peer_lab=None) -> bool:
    """Measure a LAB color against background/text (and peer) and apply guardrails."""
    peer_contrast = peer_delta_e = None
    if peer_lab is not None:
        peer_contrast = contrast_ratio(lab, peer_lab)
        peer_delta_e = delta_e_cie76(lab, peer_lab)

    return meets_guardrails(
        contrast_ratio(lab, bg_lab),
        contrast_ratio(lab, text_lab),
        config,
        peer_contrast,
        peer_delta_e,
    )


# =============================================================================
# Candidate records
# =============================================================================

@dataclass(frozen=True)
class RankedCluster:
    index: int
    score: float


@dataclass(frozen=True)
class RoleColorCandidate:
    """A possible color for a role and where it came from."""
    lab: tuple
    source_cluster_index: Optional[int]
    origin_label: str
    provenance_rank: int  # 0 direct, 1 lightness-adjusted, 2 synthetic
    base_score: float

    @property
    def confidence(self) -> float:
        if self.provenance_rank == 0:
            return 0.9 if self.base_score > 2.0 else 0.75
        if self.provenance_rank == 1:
            return 0.7
        return 0.45


def push_candidate_if_unique(candidates: list, candidate: RoleColorCandidate) -> None:
    if not any(delta_e_cie76(existing.lab, candidate.lab) < DUPLICATE_DELTA_E for existing in candidates):
        candidates.append(candidate)


# =============================================================================
# Cluster ranking
# =============================================================================

def rank_accent_candidates(clusters: list[ColorCluster], bg_lab, used: tuple) -> list[RankedCluster]:
    """Saturated clusters with usable contrast against the background."""
    ranked = []
    for idx, cluster in enumerate(clusters):
        if idx in used:
            continue

        contrast = contrast_ratio(bg_lab, cluster.lab)
        if contrast > 1.5:
            score = cluster.hsv[1] * 2.0 + (contrast / 21.0) * 3.0
            ranked.append(RankedCluster(idx, score))

    return sorted(ranked, key=lambda c: desc_key(c.score))


def rank_active_item_candidates(clusters: list[ColorCluster], bg_lab, used: tuple) -> list[RankedCluster]:
    """Bright, saturated clusters."""
    ranked = []
    for idx, cluster in enumerate(clusters):
        if idx in used:
            continue

        _, sat, val = cluster.hsv
        if val > 0.4:
            score = val + sat + contrast_ratio(bg_lab, cluster.lab) / 21.0
            ranked.append(RankedCluster(idx, score))

    return sorted(ranked, key=lambda c: desc_key(c.score))


# =============================================================================
# Variant generation
# =============================================================================

def collect_adjusted_variants(base_lab, bg_lab, text_lab, config: GuardrailConfig,
                              peer_lab=None) -> list[tuple[tuple, float]]:
    """
    Walk LAB lightness down, then up, from base_lab.

    Each direction keeps only its first passing step. Returns
    (lab, delta_L) pairs.
    """
    variants = []

    for direction in (-1.0, 1.0):
        lightness, a, b = base_lab
        for _ in range(config.max_adjust_steps):
            lightness = min(100.0, max(0.0, lightness + direction * config.adjust_step))
            candidate = (lightness, a, b)
            if passes(candidate, bg_lab, text_lab, config, peer_lab):
                if not any(delta_e_cie76(existing, candidate) < DUPLICATE_DELTA_E for existing, _ in variants):
                    variants.append((candidate, lightness - base_lab[0]))
                break

    return variants


def synthesize_color_between(bg_lab, text_lab, config: GuardrailConfig, peer_lab=None) -> Optional[tuple]:
    """First point on the bg->text line (extended 30% past both ends) that passes."""
    for step in range(MIDLINE_T_STEPS):
        t = MIDLINE_T_START + MIDLINE_T_STEP * step
        candidate = tuple(bg + (text - bg) * t for bg, text in zip(bg_lab, text_lab))
        if passes(candidate, bg_lab, text_lab, config, peer_lab):
            return candidate
    return None


def _build_candidates(clusters: list[ColorCluster], ranked: list[RankedCluster],
                      bg_lab, text_lab, config: GuardrailConfig, adjusted_weight: float,
                      midline_score: float, gray_anchors: tuple) -> list[RoleColorCandidate]:
    results = []

    for entry in ranked[:MAX_RANKED_CLUSTERS]:
        cluster = clusters[entry.index]
        if passes(cluster.lab, bg_lab, text_lab, config):
            push_candidate_if_unique(results, RoleColorCandidate(
                lab=cluster.lab,
                source_cluster_index=entry.index,
                origin_label=f"cluster:{entry.index}",
                provenance_rank=0,
                base_score=entry.score,
            ))

        for adjusted, delta_l in collect_adjusted_variants(cluster.lab, bg_lab, text_lab, config):
            push_candidate_if_unique(results, RoleColorCandidate(
                lab=adjusted,
                source_cluster_index=entry.index,
                origin_label=f"adjusted:{entry.index}:{delta_l:+.1f}",
                provenance_rank=1,
                base_score=entry.score * adjusted_weight,
            ))

    midline = synthesize_color_between(bg_lab, text_lab, config)
    if midline is not None:
        push_candidate_if_unique(results, RoleColorCandidate(
            lab=midline,
            source_cluster_index=None,
            origin_label="synthetic:midline",
            provenance_rank=2,
            base_score=midline_score,
        ))

    for lightness in gray_anchors:
        gray = (lightness, 0.0, 0.0)
        if passes(gray, bg_lab, text_lab, config):
            push_candidate_if_unique(results, RoleColorCandidate(
                lab=gray,
                source_cluster_index=None,
                origin_label=f"synthetic:gray-{lightness:.0f}",
                provenance_rank=2,
                base_score=0.35,
            ))

    return results


def build_accent_candidates(clusters: list[ColorCluster], bg_lab, text_lab,
                            used: tuple) -> list[RoleColorCandidate]:
    """Accent candidates; never empty (falls back to a background-lightness neutral)."""
    ranked = rank_accent_candidates(clusters, bg_lab, used)
    results = _build_candidates(
        clusters, ranked, bg_lab, text_lab, ACCENT_GUARDRAILS,
        adjusted_weight=0.85, midline_score=0.5, gray_anchors=ACCENT_GRAY_ANCHORS,
    )

    if not results:
        logger.debug("No accent candidates passed guardrails; using background neutral")
        results.append(RoleColorCandidate(
            lab=(min(100.0, max(0.0, bg_lab[0])), 0.0, 0.0),
            source_cluster_index=None,
            origin_label="synthetic:bg-neutral",
            provenance_rank=2,
            base_score=0.3,
        ))

    return results


def build_active_candidates(clusters: list[ColorCluster], bg_lab, text_lab,
                            used: tuple) -> list[RoleColorCandidate]:
    """Active-item candidates; never empty (falls back to a text-lightness neutral)."""
    ranked = rank_active_item_candidates(clusters, bg_lab, used)
    results = _build_candidates(
        clusters, ranked, bg_lab, text_lab, ACTIVE_GUARDRAILS,
        adjusted_weight=0.8, midline_score=0.4, gray_anchors=ACTIVE_GRAY_ANCHORS,
    )

    if not results:
        logger.debug("No active candidates passed guardrails; using text neutral")
        results.append(RoleColorCandidate(
            lab=(min(100.0, max(0.0, text_lab[0])), 0.0, 0.0),
            source_cluster_index=None,
            origin_label="synthetic:text-neutral",
            provenance_rank=2,
            base_score=0.3,
        ))

    return results
