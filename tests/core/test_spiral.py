"""Tests for Archimedean spiral geometry."""

import math

import numpy as np
import pytest

from spiralscope.core.spiral import SpiralGeometry


@pytest.fixture
def spiral() -> SpiralGeometry:
    return SpiralGeometry(a=1.0, b=math.pi, theta_start=16 * math.pi, rotations=28)


class TestArcLength:
    def test_zero_at_origin(self, spiral):
        assert spiral.arc_length(0.0) == 0.0

    def test_strictly_increasing(self, spiral):
        thetas = np.linspace(0.0, spiral.theta_end, 2000)
        lengths = [spiral.arc_length(t) for t in thetas]
        assert all(b > a for a, b in zip(lengths, lengths[1:]))

    def test_derivative_matches_closed_form(self, spiral):
        # d/dtheta arc_length = a * sqrt(theta^2 + 1)
        theta, h = 10.0, 1e-5
        numeric = (spiral.arc_length(theta + h) - spiral.arc_length(theta - h)) / (2 * h)
        assert numeric == pytest.approx(spiral.a * math.sqrt(theta ** 2 + 1), rel=1e-6)


class TestFindTheta:
    @pytest.mark.parametrize("fraction", [0.0, 0.001, 0.1, 0.37, 0.5, 0.9, 1.0])
    def test_round_trip(self, spiral, fraction):
        theta = fraction * spiral.theta_end
        found = spiral.find_theta(spiral.arc_length(theta))
        assert found == pytest.approx(theta, abs=0.1)

    def test_within_tolerance(self, spiral):
        target = spiral.arc_length(42.0)
        found = spiral.find_theta(target, tolerance=0.01)
        assert abs(spiral.arc_length(found) - target) < 0.01

    def test_out_of_range_settles_on_boundary(self, spiral):
        above = spiral.find_theta(spiral.arc_length(spiral.theta_end) * 2)
        below = spiral.find_theta(-100.0)
        assert above == pytest.approx(spiral.theta_end, abs=1e-6)
        assert below == pytest.approx(0.0, abs=1e-6)


class TestProgress:
    def test_endpoints_exact(self, spiral):
        assert spiral.progress_pct(spiral.theta_start) == 0.0
        assert spiral.progress_pct(spiral.theta_end) == 1.0

    def test_theta_end(self, spiral):
        assert spiral.theta_end == pytest.approx(56 * math.pi)

    def test_theta_for_progress_endpoints(self, spiral):
        assert spiral.theta_for_progress(0.0) == spiral.theta_start
        assert spiral.theta_for_progress(1.0) == spiral.theta_end

    def test_theta_for_progress_clamps(self, spiral):
        assert spiral.theta_for_progress(-0.2) == spiral.theta_start
        assert spiral.theta_for_progress(1.3) == spiral.theta_end

    @pytest.mark.parametrize("pct", [0.05, 0.25, 0.5, 0.75, 0.99])
    def test_inverse(self, spiral, pct):
        theta = spiral.theta_for_progress(pct)
        assert spiral.theta_start < theta < spiral.theta_end
        assert spiral.progress_pct(theta) == pytest.approx(pct, abs=1e-4)

    def test_uniform_arc_speed(self, spiral):
        """Equal progress steps cover equal arc length, so angle steps shrink outward."""
        thetas = [spiral.theta_for_progress(p) for p in (0.1, 0.2, 0.8, 0.9)]
        inner_step = thetas[1] - thetas[0]
        outer_step = thetas[3] - thetas[2]
        assert outer_step < inner_step


class TestDrawingHelpers:
    def test_distance(self, spiral):
        assert spiral.distance(0.0) == 1.0
        assert spiral.distance(2.0) == pytest.approx(1.0 + 2 * math.pi)

    def test_point_at(self, spiral):
        x, y = spiral.point_at(math.pi / 2)
        assert x == pytest.approx(0.0, abs=1e-9)
        assert y == pytest.approx(spiral.distance(math.pi / 2))

    def test_point_at_offset(self, spiral):
        x, y = spiral.point_at(0.0, offset=5.0)
        assert (x, y) == pytest.approx((6.0, 0.0))

    def test_angular_step_capped(self, spiral):
        assert spiral.angular_step(0.0) == SpiralGeometry.STEP_MAX
        assert spiral.angular_step(0.01) == SpiralGeometry.STEP_MAX
        large = 1000.0
        assert spiral.angular_step(large) == pytest.approx(
            SpiralGeometry.PRECISION / (2 * math.pi * large)
        )

    def test_polyline_is_continuous(self, spiral):
        pieces = list(spiral.iter_polyline(spiral.theta_start, spiral.theta_start + 1.0))
        assert pieces[0][0] == spiral.theta_start
        for (_, _, end), (_, start, _) in zip(pieces, pieces[1:]):
            assert end == pytest.approx(start)
        assert pieces[-1][2] == pytest.approx(spiral.point_at(spiral.theta_start + 1.0))
