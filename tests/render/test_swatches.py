"""Tests for the palette swatch preview."""

from spiralscope.core.palette import ColorPalette, to_rgb255
from spiralscope.render.swatches import render_swatches


def test_swatch_layout(features):
    surface = render_swatches(ColorPalette(features), n_samples=16, swatch_size=10, gap=2)
    assert surface.get_size() == (2 + 16 * 12, 2 + 2 * 12)


def test_key_colors_on_first_row(features):
    palette = ColorPalette(features)
    surface = render_swatches(ColorPalette(features), n_samples=4, swatch_size=10, gap=2)
    for i, color in enumerate(palette.key_colors):
        pixel = surface.get_at((2 + i * 12 + 5, 7))
        assert tuple(pixel)[:3] == to_rgb255(color)


def test_samples_on_second_row(features):
    reference = ColorPalette(features).sample_colors(4)
    surface = render_swatches(ColorPalette(features), n_samples=4, swatch_size=10, gap=2)
    for i, color in enumerate(reference):
        pixel = surface.get_at((2 + i * 12 + 5, 14 + 5))
        assert tuple(pixel)[:3] == to_rgb255(color)
