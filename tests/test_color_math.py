"""Tests for color conversions, contrast and distance."""

import numpy as np
import pytest

from color_math import (
    ColorSpace,
    contrast_ratio,
    delta_e_cie76,
    hsv_to_rgb8,
    lab_to_hex,
    lab_to_rgb8,
    rgb_to_hex,
    rgb_to_hsl,
    rgb_to_hsv,
    rgb_to_lab,
)


def _rgb_grid(step=5):
    values = np.arange(0, 256, step)
    r, g, b = np.meshgrid(values, values, values, indexing='ij')
    return np.column_stack([r.ravel(), g.ravel(), b.ravel()])


GRID = _rgb_grid()
GRAYS = np.repeat(np.arange(256)[:, None], 3, axis=1)


def test_lab_round_trip_within_one_step():
    back = lab_to_rgb8(rgb_to_lab(GRID)).astype(int)
    assert np.abs(back - GRID).max() <= 1


def test_lab_round_trip_on_every_gray_level():
    back = lab_to_rgb8(rgb_to_lab(GRAYS)).astype(int)
    assert np.abs(back - GRAYS).max() <= 1


@pytest.mark.parametrize('space', list(ColorSpace))
def test_working_space_round_trip(space):
    back = space.from_working(space.to_working(GRID)).astype(int)
    assert back.shape == GRID.shape
    assert np.abs(back - GRID).max() <= 1


def test_single_color_keeps_shape():
    lab = rgb_to_lab((255, 0, 0))
    assert lab.shape == (3,)
    assert tuple(lab_to_rgb8(lab)) == (255, 0, 0)


def test_lab_reference_points():
    assert rgb_to_lab((255, 255, 255))[0] == pytest.approx(100.0, abs=0.01)
    assert rgb_to_lab((0, 0, 0))[0] == pytest.approx(0.0, abs=1e-9)
    white_a, white_b = rgb_to_lab((255, 255, 255))[1:]
    assert abs(white_a) < 0.01 and abs(white_b) < 0.01


def test_out_of_gamut_lab_is_clamped():
    rgb = lab_to_rgb8((150.0, 200.0, -200.0))
    assert rgb.dtype == np.uint8
    assert rgb.min() >= 0 and rgb.max() <= 255


def test_hsv_known_values():
    assert rgb_to_hsv((255, 0, 0)) == pytest.approx([0.0, 1.0, 1.0])
    assert rgb_to_hsv((0, 0, 255)) == pytest.approx([240.0, 1.0, 1.0])
    assert rgb_to_hsv((128, 128, 128))[1] == 0.0
    assert tuple(hsv_to_rgb8((120.0, 1.0, 1.0))) == (0, 255, 0)


def test_hsl_known_values():
    assert rgb_to_hsl((255, 0, 0)) == pytest.approx([0.0, 1.0, 0.5])
    assert rgb_to_hsl((255, 255, 255)) == pytest.approx([0.0, 0.0, 1.0])


class TestContrast:

    def test_black_on_white_is_21(self):
        black = rgb_to_lab((0, 0, 0))
        white = rgb_to_lab((255, 255, 255))
        assert contrast_ratio(black, white) == pytest.approx(21.0, abs=0.01)

    def test_identical_colors_are_1(self):
        lab = rgb_to_lab((120, 40, 200))
        assert contrast_ratio(lab, lab) == pytest.approx(1.0)

    def test_symmetric_and_bounded(self):
        rng = np.random.default_rng(7)
        labs = rgb_to_lab(rng.integers(0, 256, size=(200, 3)))
        for a, b in zip(labs[:100], labs[100:]):
            forward = contrast_ratio(a, b)
            assert forward == contrast_ratio(b, a)
            assert 1.0 <= forward <= 21.0 + 1e-9

    def test_known_aa_pair(self):
        # #767676 on white is the classic 4.5:1 boundary gray
        gray = rgb_to_lab((0x76, 0x76, 0x76))
        white = rgb_to_lab((255, 255, 255))
        assert contrast_ratio(gray, white) == pytest.approx(4.54, abs=0.02)


class TestDeltaE:

    def test_zero_for_identical(self):
        lab = rgb_to_lab((10, 200, 30))
        assert delta_e_cie76(lab, lab) == 0.0

    def test_euclidean(self):
        assert delta_e_cie76((50.0, 0.0, 0.0), (53.0, 4.0, 0.0)) == pytest.approx(5.0)

    def test_symmetric(self):
        a, b = (20.0, 5.0, -3.0), (70.0, -20.0, 40.0)
        assert delta_e_cie76(a, b) == delta_e_cie76(b, a)


def test_hex_formatting():
    assert rgb_to_hex((255, 0, 16)) == '#ff0010'
    assert lab_to_hex(rgb_to_lab((18, 52, 86))) == '#123456'


class TestColorSpaceNames:

    @pytest.mark.parametrize('name, expected', [
        ('CIELAB', ColorSpace.LAB),
        ('lab', ColorSpace.LAB),
        ('CIELUV', ColorSpace.LUV),
        ('Luv', ColorSpace.LUV),
        ('rgb', ColorSpace.RGB),
        ('HSL', ColorSpace.HSL),
        ('hsv', ColorSpace.HSV),
        ('YUV', ColorSpace.YUV),
    ])
    def test_aliases(self, name, expected):
        assert ColorSpace.from_name(name) is expected

    def test_unknown_name(self):
        with pytest.raises(ValueError, match='Unsupported color space'):
            ColorSpace.from_name('CMYK')
