"""
Beat-proximity pulse envelope.

Produces a per-frame scale factor that swells smoothly around the
nearest beat and is weighted by that beat's confidence.
"""

import math
from dataclasses import dataclass

import numpy as np


def _flat(t: float) -> float:
    """``e^(-1/t)`` for positive ``t``, else 0 (smooth, all derivatives vanish at 0)."""
    if t <= 0:
        return 0.0
    return math.exp(-1.0 / t)


def smooth_step(t: float) -> float:
    """Smooth 0 -> 1 transition over ``[0, 1]``, flat outside it."""
    a = _flat(t)
    return a / (a + _flat(1.0 - t))


@dataclass
class PulseEnvelope:
    """
    Scale factor driven by distance to the nearest beat.

    Args:
        beat_starts_ms: Beat start times in milliseconds, in beat order.
        beat_confidences: Confidence per beat (0-1).
        peak: Scale factor at the exact beat with full confidence.
        width_ms: Distance at which the bump has fully decayed.
    """

    beat_starts_ms: np.ndarray
    beat_confidences: np.ndarray
    peak: float = 1.04
    width_ms: float = 150.0

    @classmethod
    def from_beats(cls, beats, peak: float = 1.04, width_ms: float = 150.0) -> "PulseEnvelope":
        """Build from enriched beats (anything with ``start_ms`` and ``confidence``)."""
        return cls(
            beat_starts_ms=np.array([beat.start_ms for beat in beats], dtype=np.float64),
            beat_confidences=np.array([beat.confidence for beat in beats], dtype=np.float64),
            peak=peak,
            width_ms=width_ms,
        )

    def bump(self, distance_ms: float, confidence: float) -> float:
        """Confidence-weighted bump; exactly 1 once ``|distance_ms| >= width_ms``."""
        x = (distance_ms / self.width_ms) ** 2
        value = 1.0 + (self.peak - 1.0) * (1.0 - smooth_step(x))
        return 1.0 + (value - 1.0) * confidence

    def nearest_beat(self, progress_ms: float) -> int | None:
        """Index of the beat closest in time, first one on ties."""
        if self.beat_starts_ms.size == 0:
            return None
        return int(np.argmin(np.abs(self.beat_starts_ms - progress_ms)))

    def scale_at(self, progress_ms: float) -> float:
        """Scale factor for the frame at ``progress_ms``; 1 when there are no beats."""
        index = self.nearest_beat(progress_ms)
        if index is None:
            return 1.0
        distance = progress_ms - self.beat_starts_ms[index]
        return self.bump(float(distance), float(self.beat_confidences[index]))
