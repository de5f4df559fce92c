"""
Palette swatch preview: the three key colors over a row of samples.
"""

import pygame

from spiralscope.core.palette import ColorPalette, to_rgb255


def render_swatches(
    palette: ColorPalette,
    n_samples: int = 16,
    swatch_size: int = 48,
    gap: int = 6,
    background: tuple[int, int, int] = (20, 20, 24),
) -> pygame.Surface:
    """
    Draw key colors on the first row and ``n_samples`` sampled colors below.

    Sampling advances the palette's stream, so pass a fresh palette rather
    than the one that colored the analysis.
    """
    columns = max(3, n_samples)
    width = gap + columns * (swatch_size + gap)
    height = gap + 2 * (swatch_size + gap)

    surface = pygame.Surface((width, height))
    surface.fill(background)

    rows = (palette.key_colors, palette.sample_colors(n_samples))
    for row, colors in enumerate(rows):
        y = gap + row * (swatch_size + gap)
        for col, color in enumerate(colors):
            x = gap + col * (swatch_size + gap)
            pygame.draw.rect(surface, to_rgb255(color), (x, y, swatch_size, swatch_size))

    return surface
