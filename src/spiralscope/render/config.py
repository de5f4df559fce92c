"""
Configuration for the spiral renderer.
"""

import math
from dataclasses import dataclass, fields
from typing import Any

from spiralscope.core.spiral import SpiralGeometry


@dataclass
class SceneConfig:
    """Configuration for the spiral scene and its render cache."""

    width: int = 1200
    height: int = 1200
    fps: int = 60

    # Cache layout
    num_sections: int = 10  # Section layers, each covering 1/num_sections of the arc

    # Spiral
    a: float = 1.0
    b: float = math.pi
    theta_start: float = 16 * math.pi
    rotations: float = 28.0
    rotation_turns: float = 2.0  # Full turns of the whole record over the track

    # Pulse
    pulse_peak: float = 1.04
    pulse_width_ms: float = 150.0

    # Markers
    marker_radius: float = 3.0  # Pixels, multiplied by relative loudness
    pitch_jitter: float = 1.5  # Spiral units per pitch class away from the middle
    traveling_marker_radius: float = 7.0

    # Strokes & guides
    guide_color: tuple[int, int, int] = (60, 60, 70)
    played_width: int = 2
    guide_margin: float = 20.0  # Spiral units between spiral and guide circles
    background_dim: float = 0.35  # Key colors are darkened by this factor for the gradient
    gradient_steps: int = 48

    # Text
    font_size: int = 32
    text_color: tuple[int, int, int] = (235, 235, 235)

    def spiral(self) -> SpiralGeometry:
        return SpiralGeometry(
            a=self.a,
            b=self.b,
            theta_start=self.theta_start,
            rotations=self.rotations,
        )

    @property
    def size(self) -> tuple[int, int]:
        return (self.width, self.height)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SceneConfig":
        """Build from a JSON-style dict, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        values = {}
        for key, value in data.items():
            if key not in known:
                continue
            if isinstance(value, list):
                value = tuple(value)
            values[key] = value
        return cls(**values)
