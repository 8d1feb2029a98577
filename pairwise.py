"""
Joint selection of the accent and active-item colors.

Every accent x active pair is scored and filtered through a strict tier,
then a relaxed tier, then an unconditional fallback. The first tier with
any admissible pair wins, and within it pairs are ranked by:
  1. highest minimum contrast
  2. largest lightness separation
  3. lowest summed provenance rank
  4. highest average contrast
  5. highest summed base score
Remaining ties go to the earliest pair in enumeration order.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from candidates import (
    ACCENT_BG_MIN,
    ACCENT_TEXT_MIN,
    ACTIVE_BG_MIN,
    ACTIVE_TEXT_MIN,
    RoleColorCandidate,
    desc_key,
)
from color_math import contrast_ratio, delta_e_cie76, lab_to_hex

logger = logging.getLogger(__name__)


PEER_CONTRAST_MIN = 4.5
PEER_DELTA_E_MIN = 25.0
BRIGHTNESS_SEPARATION_MIN = 25.0
RELAXED_PEER_CONTRAST_MIN = 3.5
RELAXED_PEER_DELTA_E_MIN = 20.0
RELAXED_SEPARATION_FACTOR = 0.7

MAX_TOP_PAIRS = 8


@dataclass(frozen=True)
class PairwiseGuardrails:
    """One tier of minimum requirements on an accent/active pair."""
    min_accent_vs_bg: float
    min_accent_vs_text: float
    min_active_vs_bg: float
    min_active_vs_text: float
    min_peer_contrast: float
    min_peer_delta_e: float
    min_brightness_separation: float


STRICT_GUARDRAILS = PairwiseGuardrails(
    min_accent_vs_bg=ACCENT_BG_MIN,
    min_accent_vs_text=ACCENT_TEXT_MIN,
    min_active_vs_bg=ACTIVE_BG_MIN,
    min_active_vs_text=ACTIVE_TEXT_MIN,
    min_peer_contrast=PEER_CONTRAST_MIN,
    min_peer_delta_e=PEER_DELTA_E_MIN,
    min_brightness_separation=BRIGHTNESS_SEPARATION_MIN,
)

RELAXED_GUARDRAILS = PairwiseGuardrails(
    min_accent_vs_bg=ACCENT_BG_MIN,
    min_accent_vs_text=ACCENT_TEXT_MIN,
    min_active_vs_bg=ACTIVE_BG_MIN,
    min_active_vs_text=ACTIVE_TEXT_MIN,
    min_peer_contrast=RELAXED_PEER_CONTRAST_MIN,
    min_peer_delta_e=RELAXED_PEER_DELTA_E_MIN,
    min_brightness_separation=BRIGHTNESS_SEPARATION_MIN * RELAXED_SEPARATION_FACTOR,
)

# (pass mode, guardrails); None admits every pair
TIERS = (
    ('strict', STRICT_GUARDRAILS),
    ('relaxed', RELAXED_GUARDRAILS),
    ('fallback', None),
)


@dataclass(frozen=True)
class PairwiseMetrics:
    accent_bg: float
    accent_text: float
    accent_active: float
    active_bg: float
    active_text: float
    delta_e: float
    accent_l: float
    active_l: float

    @property
    def contrasts(self) -> tuple:
        return (self.accent_bg, self.accent_text, self.accent_active, self.active_bg, self.active_text)

    @property
    def min_contrast(self) -> float:
        return min(self.contrasts)

    @property
    def avg_contrast(self) -> float:
        return sum(self.contrasts) / 5.0

    @property
    def brightness_separation(self) -> float:
        return abs(self.accent_l - self.active_l)


@dataclass(frozen=True)
class PairwiseResult:
    accent: RoleColorCandidate
    active: RoleColorCandidate
    metrics: PairwiseMetrics

    @property
    def provenance_score(self) -> int:
        return self.accent.provenance_rank + self.active.provenance_rank

    def sort_key(self) -> tuple:
        """Ascending key: smaller is better. NaN metrics rank last."""
        return (
            desc_key(self.metrics.min_contrast),
            desc_key(self.metrics.brightness_separation),
            self.provenance_score,
            desc_key(self.metrics.avg_contrast),
            desc_key(self.accent.base_score + self.active.base_score),
        )


def build_pair_metrics(accent_lab, active_lab, bg_lab, text_lab) -> PairwiseMetrics:
    return PairwiseMetrics(
        accent_bg=contrast_ratio(accent_lab, bg_lab),
        accent_text=contrast_ratio(accent_lab, text_lab),
        accent_active=contrast_ratio(accent_lab, active_lab),
        active_bg=contrast_ratio(active_lab, bg_lab),
        active_text=contrast_ratio(active_lab, text_lab),
        delta_e=delta_e_cie76(accent_lab, active_lab),
        accent_l=float(accent_lab[0]),
        active_l=float(active_lab[0]),
    )


def passes_pairwise_guardrails(metrics: PairwiseMetrics, guard: PairwiseGuardrails) -> bool:
    return (
        metrics.accent_bg >= guard.min_accent_vs_bg
        and metrics.accent_text >= guard.min_accent_vs_text
        and metrics.active_bg >= guard.min_active_vs_bg
        and metrics.active_text >= guard.min_active_vs_text
        and metrics.accent_active >= guard.min_peer_contrast
        and metrics.delta_e >= guard.min_peer_delta_e
        and metrics.brightness_separation >= guard.min_brightness_separation
    )


# =============================================================================
# Diagnostics
# =============================================================================

@dataclass(frozen=True)
class PairDiagnostic:
    accent_hex: str
    accent_origin: str
    active_hex: str
    active_origin: str
    accent_bg: float
    accent_text: float
    accent_active: float
    active_bg: float
    active_text: float
    delta_e: float
    min_contrast: float
    brightness_separation: float
    provenance_score: int

    @classmethod
    def from_result(cls, result: PairwiseResult) -> 'PairDiagnostic':
        m = result.metrics
        return cls(
            accent_hex=lab_to_hex(result.accent.lab),
            accent_origin=result.accent.origin_label,
            active_hex=lab_to_hex(result.active.lab),
            active_origin=result.active.origin_label,
            accent_bg=m.accent_bg,
            accent_text=m.accent_text,
            accent_active=m.accent_active,
            active_bg=m.active_bg,
            active_text=m.active_text,
            delta_e=m.delta_e,
            min_contrast=m.min_contrast,
            brightness_separation=m.brightness_separation,
            provenance_score=result.provenance_score,
        )

    def to_dict(self) -> dict:
        return {
            'accentHex': self.accent_hex,
            'accentOrigin': self.accent_origin,
            'activeHex': self.active_hex,
            'activeOrigin': self.active_origin,
            'accentBg': self.accent_bg,
            'accentText': self.accent_text,
            'accentActive': self.accent_active,
            'activeBg': self.active_bg,
            'activeText': self.active_text,
            'deltaE': self.delta_e,
            'minContrast': self.min_contrast,
            'brightnessSeparation': self.brightness_separation,
            'provenanceScore': self.provenance_score,
        }


@dataclass(frozen=True)
class CandidateDiagnostic:
    hex: str
    origin: str
    provenance_rank: int
    base_score: float

    @classmethod
    def from_candidate(cls, candidate: RoleColorCandidate) -> 'CandidateDiagnostic':
        return cls(
            hex=lab_to_hex(candidate.lab),
            origin=candidate.origin_label,
            provenance_rank=candidate.provenance_rank,
            base_score=candidate.base_score,
        )

    def to_dict(self) -> dict:
        return {
            'hex': self.hex,
            'origin': self.origin,
            'provenanceRank': self.provenance_rank,
            'baseScore': self.base_score,
        }


@dataclass(frozen=True)
class PairwiseTrace:
    evaluated_pairs: int
    pass_mode: str
    winning_pair: PairDiagnostic
    top_pairs: list
    accent_candidates: list
    active_candidates: list

    def to_dict(self) -> dict:
        return {
            'evaluatedPairs': self.evaluated_pairs,
            'passMode': self.pass_mode,
            'winningPair': self.winning_pair.to_dict(),
            'topPairs': [p.to_dict() for p in self.top_pairs],
            'accentCandidates': [c.to_dict() for c in self.accent_candidates],
            'activeCandidates': [c.to_dict() for c in self.active_candidates],
        }


# =============================================================================
# Solver
# =============================================================================

@dataclass(frozen=True)
class PairwiseSolution:
    result: PairwiseResult
    pass_mode: str
    evaluated_pairs: int
    top_pairs: list  # Best admissible pairs of the winning tier, best first

    def trace(self, accent_candidates: list, active_candidates: list) -> PairwiseTrace:
        return PairwiseTrace(
            evaluated_pairs=self.evaluated_pairs,
            pass_mode=self.pass_mode,
            winning_pair=PairDiagnostic.from_result(self.result),
            top_pairs=[PairDiagnostic.from_result(r) for r in self.top_pairs],
            accent_candidates=[CandidateDiagnostic.from_candidate(c) for c in accent_candidates],
            active_candidates=[CandidateDiagnostic.from_candidate(c) for c in active_candidates],
        )


def solve_with_guardrails(accent_candidates: list, active_candidates: list, bg_lab, text_lab,
                          guardrails: Optional[PairwiseGuardrails]) -> tuple[list, int]:
    """
    Enumerate accent-major over the cross product.

    Returns:
        (admissible pairs in enumeration order, number of pairs evaluated)
    """
    admissible = []
    evaluated = 0

    for accent in accent_candidates:
        for active in active_candidates:
            evaluated += 1
            metrics = build_pair_metrics(accent.lab, active.lab, bg_lab, text_lab)
            if guardrails is not None and not passes_pairwise_guardrails(metrics, guardrails):
                continue
            admissible.append(PairwiseResult(accent=accent, active=active, metrics=metrics))

    return admissible, evaluated


def select_pair(accent_candidates: list, active_candidates: list, bg_lab, text_lab) -> PairwiseSolution:
    """
    Pick the best accent/active pair, relaxing guardrails tier by tier.

    Both candidate lists must be non-empty; the fallback tier then always
    produces a result.
    """
    if not accent_candidates or not active_candidates:
        raise ValueError("Pair selection needs at least one accent and one active candidate")

    total_evaluated = 0
    for pass_mode, guardrails in TIERS:
        admissible, evaluated = solve_with_guardrails(
            accent_candidates, active_candidates, bg_lab, text_lab, guardrails,
        )
        total_evaluated += evaluated
        if admissible:
            break
        logger.debug("No pair passed %s guardrails (%d evaluated)", pass_mode, evaluated)

    # The last tier admits every pair. sorted() is stable, so equal keys keep enumeration order
    ranked = sorted(admissible, key=PairwiseResult.sort_key)
    logger.debug(
        "Pair selected in %s tier: %d admissible of %d evaluated",
        pass_mode, len(admissible), total_evaluated,
    )
    return PairwiseSolution(
        result=ranked[0],
        pass_mode=pass_mode,
        evaluated_pairs=total_evaluated,
        top_pairs=ranked[:MAX_TOP_PAIRS],
    )
