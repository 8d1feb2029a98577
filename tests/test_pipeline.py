"""End-to-end tests for clustering and role mapping."""

import json

import numpy as np
import pytest

from color_math import ColorSpace, contrast_ratio
from pipeline import ClusteringConfig, generate_palette
from roles import ColorRole

SPACES = ['CIELAB', 'RGB', 'HSL', 'HSV', 'YUV', 'CIELUV']


def by_role(result):
    return {a.role: a for a in result.assignments}


def test_every_role_assigned_once(album_samples):
    result = generate_palette(album_samples, len(album_samples), ClusteringConfig(k=4))

    roles = [a.role for a in result.assignments]
    assert roles == list(ColorRole)
    for assignment in result.assignments:
        assert 0.0 <= assignment.confidence <= 1.0
        assert assignment.hex.startswith('#') and len(assignment.hex) == 7


@pytest.mark.parametrize('space', SPACES)
def test_all_color_spaces(album_samples, space):
    result = generate_palette(album_samples, len(album_samples), ClusteringConfig(space=space, k=4))

    assert result.color_space is ColorSpace.from_name(space)
    assert len(result.assignments) == len(ColorRole)
    assert sum(c.count for c in result.clusters) == len(album_samples)
    counts = [c.count for c in result.clusters]
    assert counts == sorted(counts, reverse=True)


def test_text_is_readable_or_synthetic(album_samples):
    roles = by_role(generate_palette(album_samples, len(album_samples), ClusteringConfig(k=4)))
    bg, text = roles[ColorRole.BACKGROUND], roles[ColorRole.TEXT]

    assert text.contrast_against_background == pytest.approx(contrast_ratio(bg.lab, text.lab))
    if text.origin == 'cluster':
        assert text.contrast_against_background >= 4.5
    else:
        assert text.origin == 'synthetic'
        assert text.confidence == 0.45
        assert text.source_cluster_index is None


def test_derived_roles_mirror_their_sources(album_samples):
    roles = by_role(generate_palette(album_samples, len(album_samples), ClusteringConfig(k=4)))

    assert roles[ColorRole.INACTIVE_ITEM].hex == roles[ColorRole.BORDER].hex
    assert roles[ColorRole.INACTIVE_ITEM].confidence == 0.7
    assert roles[ColorRole.PROGRESS_BAR].hex == roles[ColorRole.ACCENT].hex
    assert roles[ColorRole.PROGRESS_BAR].confidence == roles[ColorRole.ACCENT].confidence
    assert roles[ColorRole.SCROLLBAR].hex == roles[ColorRole.ACTIVE_ITEM].hex


def test_repeat_runs_are_identical(album_samples):
    config = ClusteringConfig(k=5)
    first = generate_palette(album_samples, len(album_samples), config, debug=True)
    second = generate_palette(album_samples, len(album_samples), config, debug=True)

    assert first.assignments == second.assignments
    assert first.clusters == second.clusters
    assert json.dumps(first.trace.to_dict()) == json.dumps(second.trace.to_dict())


def test_white_cover_with_red_title():
    samples = np.vstack([
        np.tile([240, 240, 240], (900, 1)),
        np.tile([200, 30, 30], (100, 1)),
    ]).astype(np.uint8)

    result = generate_palette(samples, len(samples), ClusteringConfig(k=2))
    roles = by_role(result)

    assert [c.hex for c in result.clusters] == ['#f0f0f0', '#c81e1e']
    # Too light to qualify as a background, so the dominant cluster is used at low confidence
    assert roles[ColorRole.BACKGROUND].hex == '#f0f0f0'
    assert roles[ColorRole.BACKGROUND].confidence == 0.5
    assert roles[ColorRole.TEXT].hex == '#c81e1e'
    assert roles[ColorRole.TEXT].confidence == 0.9


def test_all_black_image_synthesizes_colors():
    samples = np.zeros((50, 3), dtype=np.uint8)
    result = generate_palette(samples, len(samples), ClusteringConfig(k=3), debug=True)
    roles = by_role(result)

    assert len(result.clusters) == 1
    assert roles[ColorRole.BACKGROUND].hex == '#000000'

    accent, active = roles[ColorRole.ACCENT], roles[ColorRole.ACTIVE_ITEM]
    assert accent.hex != '#000000'
    assert active.hex != '#000000'
    assert accent.hex != active.hex
    assert accent.source_cluster_index is None
    assert result.trace.pass_mode == 'fallback'
    assert roles[ColorRole.BORDER].source_cluster_index == 0


def test_single_cluster():
    samples = np.tile([90, 60, 140], (30, 1)).astype(np.uint8)
    result = generate_palette(samples, len(samples), ClusteringConfig(k=1))

    assert len(result.clusters) == 1
    assert result.clusters[0].share == 1.0
    assert len(result.assignments) == len(ColorRole)


def test_k_larger_than_samples_is_clamped():
    samples = np.array([[10, 10, 10], [250, 250, 250]], dtype=np.uint8)
    result = generate_palette(samples, 2, ClusteringConfig(k=12))
    assert len(result.clusters) == 2


def test_trace_only_in_debug(album_samples):
    result = generate_palette(album_samples, len(album_samples), ClusteringConfig(k=4))
    assert result.trace is None


def test_unknown_space(album_samples):
    with pytest.raises(ValueError, match='Unsupported color space'):
        generate_palette(album_samples, len(album_samples), ClusteringConfig(space='CMYK'))


def test_empty_samples():
    with pytest.raises(ValueError):
        generate_palette(np.empty((0, 3), dtype=np.uint8), 0)
