"""
Feature-seeded color palette.

Three key colors are derived from a track's audio features; further
colors are sampled uniformly from the triangle they span in RGB space.
"""

import colorsys
import hashlib
import math
from dataclasses import dataclass

import numpy as np

# (r, g, b) in 0-255 channel space, unclamped floats
Color = tuple[float, float, float]


@dataclass(frozen=True)
class AudioFeatures:
    """Scalar audio descriptors for a track."""

    danceability: float
    energy: float
    key: int
    valence: float
    acousticness: float
    track_id: str
    loudness: float = 0.0
    mode: int = 0
    speechiness: float = 0.0
    instrumentalness: float = 0.0
    liveness: float = 0.0
    tempo: float = 0.0
    duration_ms: int = 0
    time_signature: int = 4


def hsl_to_rgb(hue: float, saturation: float, lightness: float) -> Color:
    """
    Convert HSL to an RGB tuple.

    Args:
        hue: Degrees, wrapped into [0, 360).
        saturation: Percent (0-100).
        lightness: Percent (0-100).
    """
    r, g, b = colorsys.hls_to_rgb((hue % 360.0) / 360.0, lightness / 100.0, saturation / 100.0)
    return (r * 255.0, g * 255.0, b * 255.0)


def barycentric_weights(r1: float, r2: float) -> tuple[float, float, float]:
    """Weights for a uniform sample over a triangle from two uniform draws."""
    root = math.sqrt(r1)
    return (1.0 - root, root * (1.0 - r2), r2 * root)


def mix(colors, weights) -> Color:
    """Component-wise weighted sum of colors."""
    return tuple(
        sum(color[channel] * weight for color, weight in zip(colors, weights))
        for channel in range(3)
    )


def lerp_color(c1: Color, c2: Color, t: float) -> Color:
    return tuple(a + (b - a) * t for a, b in zip(c1, c2))


def to_rgb255(color: Color) -> tuple[int, int, int]:
    """Round and clip a float color for drawing."""
    return tuple(int(min(255, max(0, round(channel)))) for channel in color)


def seed_from_string(seed: str) -> int:
    """Stable integer seed derived from a string identifier."""
    return int.from_bytes(hashlib.sha256(seed.encode("utf-8")).digest()[:8], "big")


class ColorPalette:
    """
    Deterministic color generator for a single track.

    ``sample_color`` advances a private random stream, so the order of
    calls decides which event gets which color. Two palettes built from
    the same features and seed yield the same sequence.
    """

    def __init__(self, features: AudioFeatures, seed: str | None = None):
        self.seed = seed if seed is not None else features.track_id
        self.rng = np.random.default_rng(seed_from_string(self.seed))

        hue1 = features.danceability * 360.0
        hue2 = features.energy * 360.0
        hue3 = features.key / 11.0 * 360.0

        saturation = 25.0 + features.valence * 75.0
        lightness = 50.0 + features.acousticness * 25.0

        self.key_colors: tuple[Color, Color, Color] = (
            hsl_to_rgb(hue1, saturation, lightness),
            hsl_to_rgb(hue2, saturation, lightness),
            hsl_to_rgb(hue3, saturation, lightness),
        )

    def sample_color(self) -> Color:
        """Draw the next color from inside the key-color triangle."""
        r1 = float(self.rng.random())
        r2 = float(self.rng.random())
        return mix(self.key_colors, barycentric_weights(r1, r2))

    def sample_colors(self, n: int) -> list[Color]:
        return [self.sample_color() for _ in range(n)]
