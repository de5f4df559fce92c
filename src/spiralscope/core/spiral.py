"""
Archimedean spiral geometry.

The spiral is traversed by arc length rather than raw angle so that
playback progress moves along the curve at a perceptually even speed,
regardless of the growing radius.
"""

import math
from dataclasses import dataclass
from typing import Iterator

Point = tuple[float, float]


@dataclass(frozen=True)
class SpiralGeometry:
    """Spiral ``r = a + b * theta`` drawn from ``theta_start`` to ``theta_end``."""

    a: float = 1.0  # Moves the center of the spiral outward from the origin
    b: float = math.pi  # Distance between loops
    theta_start: float = 16 * math.pi  # Every 2*pi is one rotation
    rotations: float = 28.0

    STEP_MAX = 2 * math.pi / 180
    PRECISION = 20.0
    MAX_ITERATIONS = 10_000

    @property
    def theta_end(self) -> float:
        return self.rotations * 2 * math.pi

    def distance(self, theta: float) -> float:
        """Radius of the spiral at ``theta``."""
        return self.a + self.b * theta

    def arc_length(self, theta: float) -> float:
        """Closed-form arc length from 0 to ``theta``."""
        return 0.5 * self.a * (theta * math.sqrt(theta * theta + 1) + math.asinh(theta))

    def angular_step(self, theta: float) -> float:
        """Angular increment for rasterizing the curve near ``theta``."""
        if theta <= 0:
            return self.STEP_MAX
        return min(self.STEP_MAX, self.PRECISION / (2 * math.pi * theta))

    def point_at(self, theta: float, offset: float = 0.0) -> Point:
        """Cartesian point at ``theta``, pushed ``offset`` units outward."""
        radius = self.distance(theta) + offset
        return (math.cos(theta) * radius, math.sin(theta) * radius)

    def find_theta(self, target_arc_length: float, tolerance: float = 0.1) -> float:
        """
        Numerically invert ``arc_length`` by bisection over ``[0, theta_end]``.

        Returns the first midpoint within ``tolerance`` of the target, or the
        last midpoint once the iteration cap is hit. Targets outside the
        spiral's range settle on the nearest boundary.
        """
        low = 0.0
        high = self.theta_end
        theta = high / 2

        for _ in range(self.MAX_ITERATIONS):
            current = self.arc_length(theta)
            if abs(current - target_arc_length) < tolerance:
                break

            if current > target_arc_length:
                high = theta
            else:
                low = theta

            midpoint = low + (high - low) / 2
            if midpoint == theta:
                # interval has collapsed to float resolution
                break
            theta = midpoint

        return theta

    def progress_pct(self, theta: float) -> float:
        """Fraction of the drawn spiral's arc length covered at ``theta``."""
        start = self.arc_length(self.theta_start)
        end = self.arc_length(self.theta_end)
        return (self.arc_length(theta) - start) / (end - start)

    def theta_for_progress(self, pct: float) -> float:
        """Inverse of :meth:`progress_pct`; ``pct`` is clamped to [0, 1]."""
        if pct <= 0:
            return self.theta_start
        if pct >= 1:
            return self.theta_end

        start = self.arc_length(self.theta_start)
        end = self.arc_length(self.theta_end)
        return self.find_theta(start + pct * (end - start))

    def iter_polyline(
        self,
        theta_from: float,
        theta_to: float,
        offset: float = 0.0,
    ) -> Iterator[tuple[float, Point, Point]]:
        """Yield ``(theta, start, end)`` line segments covering ``[theta_from, theta_to]``."""
        theta = theta_from
        while theta < theta_to:
            following = min(theta_to, theta + self.angular_step(theta))
            yield theta, self.point_at(theta, offset), self.point_at(following, offset)
            theta = following
