"""Tests for guardrails and accent/active candidate generation."""

import math

import pytest

from candidates import (
    ACCENT_GUARDRAILS,
    ACTIVE_GUARDRAILS,
    GuardrailConfig,
    RoleColorCandidate,
    build_accent_candidates,
    build_active_candidates,
    collect_adjusted_variants,
    desc_key,
    meets_guardrails,
    passes,
    rank_accent_candidates,
    rank_active_item_candidates,
    synthesize_color_between,
)
from color_math import contrast_ratio, delta_e_cie76, rgb_to_lab

BLACK = tuple(rgb_to_lab((0, 0, 0)))
LIGHT_GRAY = tuple(rgb_to_lab((220, 220, 220)))
WHITE = tuple(rgb_to_lab((255, 255, 255)))


class TestGuardrails:

    def test_background_and_text_minimums(self):
        config = GuardrailConfig(min_contrast_bg=3.0, min_contrast_text=4.5)
        assert meets_guardrails(3.0, 4.5, config)
        assert not meets_guardrails(2.99, 10.0, config)
        assert not meets_guardrails(10.0, 4.49, config)

    def test_missing_peer_value_fails(self):
        config = GuardrailConfig(min_contrast_bg=1.0, min_contrast_text=1.0, min_contrast_peer=2.0)
        assert not meets_guardrails(5.0, 5.0, config)
        assert meets_guardrails(5.0, 5.0, config, peer_contrast=2.0)

    def test_peer_delta_e(self):
        config = GuardrailConfig(min_contrast_bg=1.0, min_contrast_text=1.0, min_delta_e_peer=25.0)
        assert not meets_guardrails(5.0, 5.0, config, peer_delta_e=24.9)
        assert meets_guardrails(5.0, 5.0, config, peer_delta_e=25.0)

    def test_passes_measures_peer(self):
        config = GuardrailConfig(min_contrast_bg=1.0, min_contrast_text=1.0, min_delta_e_peer=10.0)
        assert passes((50.0, 0.0, 0.0), BLACK, WHITE, config, peer_lab=(70.0, 0.0, 0.0))
        assert not passes((50.0, 0.0, 0.0), BLACK, WHITE, config, peer_lab=(55.0, 0.0, 0.0))


def test_desc_key_orders_nan_last():
    values = [1.0, float('nan'), 3.0, 2.0]
    ordered = sorted(values, key=desc_key)
    assert ordered[:3] == [3.0, 2.0, 1.0]
    assert math.isnan(ordered[3])


@pytest.mark.parametrize('rank, score, expected', [
    (0, 2.5, 0.9),
    (0, 2.0, 0.75),
    (1, 9.0, 0.7),
    (2, 9.0, 0.45),
])
def test_confidence_from_provenance(rank, score, expected):
    candidate = RoleColorCandidate((50.0, 0.0, 0.0), None, 'x', rank, score)
    assert candidate.confidence == expected


class TestRanking:

    def test_accent_prefers_saturated_contrasting(self, cluster_factory):
        clusters = [
            cluster_factory((30, 30, 35), 500),
            cluster_factory((40, 40, 45), 200),  # too close to background
            cluster_factory((150, 150, 150), 150),
            cluster_factory((240, 60, 40), 150),
        ]
        ranked = rank_accent_candidates(clusters, clusters[0].lab, used=(0,))
        assert [r.index for r in ranked] == [3, 2]

    def test_active_requires_value(self, cluster_factory):
        clusters = [
            cluster_factory((30, 30, 35), 500),
            cluster_factory((90, 20, 20), 200),  # value 0.35
            cluster_factory((240, 200, 40), 150),
        ]
        ranked = rank_active_item_candidates(clusters, clusters[0].lab, used=(0,))
        assert [r.index for r in ranked] == [2]


class TestVariants:

    def test_adjusted_variants_pass_guardrails(self):
        base = tuple(rgb_to_lab((150, 150, 150)))
        variants = collect_adjusted_variants(base, BLACK, LIGHT_GRAY, ACCENT_GUARDRAILS)

        # Lighter only loses contrast against the light text; six steps down passes
        assert len(variants) == 1
        lab, delta_l = variants[0]
        assert delta_l == pytest.approx(-24.0)
        assert passes(lab, BLACK, LIGHT_GRAY, ACCENT_GUARDRAILS)

    def test_midline_is_first_passing_point(self):
        lab = synthesize_color_between(BLACK, LIGHT_GRAY, ACCENT_GUARDRAILS)
        assert lab is not None
        assert contrast_ratio(lab, BLACK) >= 3.0
        assert contrast_ratio(lab, LIGHT_GRAY) >= 4.5
        earlier = tuple(c * (0.40 / 0.45) for c in lab)
        assert not passes(earlier, BLACK, LIGHT_GRAY, ACCENT_GUARDRAILS)

    def test_midline_can_fail(self):
        assert synthesize_color_between(WHITE, WHITE, ACCENT_GUARDRAILS) is None


class TestBuildCandidates:

    def test_only_synthetic_when_no_free_clusters(self, cluster_factory):
        clusters = [cluster_factory((0, 0, 0), 100)]
        accent = build_accent_candidates(clusters, BLACK, LIGHT_GRAY, used=(0,))
        active = build_active_candidates(clusters, BLACK, LIGHT_GRAY, used=(0,))

        assert [c.origin_label for c in accent] == ['synthetic:midline']
        assert [c.origin_label for c in active] == ['synthetic:midline', 'synthetic:gray-30']
        assert all(c.provenance_rank == 2 and c.source_cluster_index is None for c in accent + active)

    def test_neutral_fallback_when_nothing_passes(self, cluster_factory):
        clusters = [cluster_factory((128, 128, 128), 100)]
        gray = clusters[0].lab
        accent = build_accent_candidates(clusters, gray, gray, used=(0,))
        active = build_active_candidates(clusters, gray, gray, used=(0,))

        assert len(accent) == 1 and accent[0].origin_label == 'synthetic:bg-neutral'
        assert len(active) == 1 and active[0].origin_label == 'synthetic:text-neutral'
        assert accent[0].lab == (gray[0], 0.0, 0.0)

    def test_cluster_candidates_pass_and_are_distinct(self, cluster_factory):
        clusters = [
            cluster_factory((0, 0, 0), 600),
            cluster_factory((255, 255, 255), 200),
            cluster_factory((230, 120, 20), 100),
            cluster_factory((60, 140, 230), 100),
        ]
        bg, text = clusters[0].lab, clusters[1].lab
        accent = build_accent_candidates(clusters, bg, text, used=(0, 1))

        assert accent
        for candidate in accent:
            assert passes(candidate.lab, bg, text, ACCENT_GUARDRAILS)
            if candidate.provenance_rank < 2:
                assert candidate.source_cluster_index in (2, 3)
        for i, a in enumerate(accent):
            for b in accent[i + 1:]:
                assert delta_e_cie76(a.lab, b.lab) >= 0.5

    def test_adjusted_score_is_discounted(self, cluster_factory):
        clusters = [
            cluster_factory((0, 0, 0), 600),
            cluster_factory((255, 255, 255), 200),
            cluster_factory((230, 120, 20), 100),
        ]
        bg, text = clusters[0].lab, clusters[1].lab
        direct_score = rank_active_item_candidates(clusters, bg, (0, 1))[0].score
        active = build_active_candidates(clusters, bg, text, used=(0, 1))
        for candidate in active:
            if candidate.provenance_rank == 1:
                assert candidate.base_score == pytest.approx(direct_score * 0.8)
                assert candidate.origin_label.startswith("adjusted:2:")
