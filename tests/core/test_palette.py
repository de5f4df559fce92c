"""Tests for the feature-seeded color palette."""

import colorsys
import itertools

import pytest

from spiralscope.core.palette import (
    AudioFeatures,
    ColorPalette,
    barycentric_weights,
    hsl_to_rgb,
    lerp_color,
    mix,
    to_rgb255,
)


def _features(**overrides) -> AudioFeatures:
    values = dict(
        danceability=0.5,
        energy=0.25,
        key=11,
        valence=1.0,
        acousticness=0.0,
        track_id="spotify:track:abc",
    )
    values.update(overrides)
    return AudioFeatures(**values)


class TestBarycentricWeights:
    @pytest.mark.parametrize(
        "r1, r2",
        list(itertools.product([0.0, 0.01, 0.25, 0.5, 0.999999], [0.0, 0.3, 0.7, 0.999999])),
    )
    def test_weights_sum_to_one_and_non_negative(self, r1, r2):
        weights = barycentric_weights(r1, r2)
        assert sum(weights) == pytest.approx(1.0)
        assert all(w >= 0 for w in weights)

    def test_zero_draw_is_first_vertex(self):
        assert barycentric_weights(0.0, 0.5) == (1.0, 0.0, 0.0)


class TestKeyColors:
    def test_hues_from_features(self):
        palette = ColorPalette(_features())
        # saturation 100%, lightness 50%
        expected = [
            colorsys.hls_to_rgb(0.5, 0.5, 1.0),
            colorsys.hls_to_rgb(0.25, 0.5, 1.0),
            colorsys.hls_to_rgb(0.0, 0.5, 1.0),  # key 11 -> 360 degrees wraps to red
        ]
        for color, (r, g, b) in zip(palette.key_colors, expected):
            assert color == pytest.approx((r * 255, g * 255, b * 255))

    def test_hsl_to_rgb_grey(self):
        assert hsl_to_rgb(120.0, 0.0, 50.0) == pytest.approx((127.5, 127.5, 127.5))


class TestSampling:
    def test_same_seed_same_sequence(self):
        a = ColorPalette(_features())
        b = ColorPalette(_features())
        assert a.sample_colors(50) == b.sample_colors(50)

    def test_different_seed_different_sequence(self):
        a = ColorPalette(_features())
        b = ColorPalette(_features(track_id="spotify:track:xyz"))
        assert a.sample_colors(10) != b.sample_colors(10)

    def test_sampling_advances_stream(self):
        palette = ColorPalette(_features())
        assert palette.sample_color() != palette.sample_color()

    def test_explicit_seed_overrides_track_id(self):
        a = ColorPalette(_features(), seed="custom")
        b = ColorPalette(_features(track_id="other"), seed="custom")
        assert a.sample_colors(5) == b.sample_colors(5)

    def test_samples_stay_inside_key_color_range(self):
        palette = ColorPalette(_features(valence=0.3, acousticness=0.6))
        for color in palette.sample_colors(200):
            for channel in range(3):
                values = [key[channel] for key in palette.key_colors]
                assert min(values) - 1e-9 <= color[channel] <= max(values) + 1e-9


def test_mix_and_lerp():
    colors = [(255.0, 0.0, 0.0), (0.0, 255.0, 0.0), (0.0, 0.0, 255.0)]
    assert mix(colors, (0.5, 0.25, 0.25)) == pytest.approx((127.5, 63.75, 63.75))
    assert lerp_color((0, 0, 0), (100, 200, 50), 0.5) == pytest.approx((50, 100, 25))


def test_to_rgb255_clips():
    assert to_rgb255((-3.0, 127.6, 300.0)) == (0, 128, 255)
