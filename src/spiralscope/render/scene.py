"""
Frame orchestrator for the spiral visualization.

Composites the cached layers for a playback progress fraction, applies
the beat pulse and record rotation, and draws the live tail of the
spiral plus the traveling marker on top.
"""

import math
from dataclasses import replace
from typing import Iterator

import numpy as np
import pygame

from spiralscope.core.analysis import SegmentInfo
from spiralscope.core.palette import lerp_color
from spiralscope.core.pulse import PulseEnvelope
from spiralscope.core.spiral import Point
from spiralscope.core.track import Track
from spiralscope.io.exporter import surface_to_array
from spiralscope.playback import PlaybackClock
from spiralscope.render.cache import RenderBuffers, RenderCache, SpiralPainter
from spiralscope.render.config import SceneConfig


class SegmentBoundsError(RuntimeError):
    """No pair of segments brackets the requested progress; input is malformed."""


def clamp_progress(pct: float) -> float:
    return min(1.0, max(0.0, pct))


class SpiralScene:
    """
    Renders one frame of the spiral per progress fraction.

    The scene owns a :class:`RenderCache`; loading a new track or resizing
    the canvas changes the cache key, and the next frame rebuilds.
    """

    def __init__(
        self,
        track: Track,
        config: SceneConfig | None = None,
        cache: RenderCache | None = None,
    ):
        self.cfg = config or SceneConfig()
        self.cache = cache or RenderCache(self.cfg)
        self.spiral = self.cfg.spiral()
        self.finished = False
        self.load_track(track)

    def load_track(self, track: Track):
        """Switch to ``track``; the previous cache is discarded."""
        self.track = track
        self.pulse = PulseEnvelope.from_beats(
            track.analysis.beats,
            peak=self.cfg.pulse_peak,
            width_ms=self.cfg.pulse_width_ms,
        )
        self.painter = SpiralPainter(self.cfg, self.spiral, track)
        self.finished = False
        self.cache.invalidate()

    def resize(self, width: int, height: int):
        self.cfg = replace(self.cfg, width=width, height=height)
        self.painter = SpiralPainter(self.cfg, self.spiral, self.track)

    @property
    def buffers(self) -> RenderBuffers:
        return self.cache.get(self.track, self.cfg)

    def _bracket(self, pct: float) -> tuple[int, int, float]:
        segments = self.track.analysis.segments
        last = len(segments) - 1

        if pct >= segments[last].progress_pct:
            return last, last, 0.5
        if pct < segments[0].progress_pct:
            return 0, 0, 0.0

        progress_ms = pct * self.track.analysis.duration_ms
        low, high = 0, last - 1
        for _ in range(len(segments)):
            if low > high:
                break
            mid = (low + high) // 2
            current, following = segments[mid], segments[mid + 1]
            if current.progress_pct <= pct < following.progress_pct:
                span = following.start_ms - current.start_ms
                t = (progress_ms - current.start_ms) / span if span > 0 else 0.0
                return mid, mid + 1, t
            if pct < current.progress_pct:
                high = mid - 1
            else:
                low = mid + 1

        raise SegmentBoundsError(
            f"Could not bracket progress {pct:.4f} between segments; "
            "segments must be sorted by start time"
        )

    def find_bounds(self, pct: float) -> tuple[SegmentInfo, SegmentInfo, float]:
        """
        Find the segments surrounding ``pct``.

        Returns:
            ``(current, next, t)`` with ``current.progress_pct <= pct <
            next.progress_pct`` and ``t`` the interpolation fraction between
            their start times. Past the last segment, ``(last, last, 0.5)``.

        Raises:
            SegmentBoundsError: If the search cannot bracket ``pct``.
        """
        segments = self.track.analysis.segments
        i, j, t = self._bracket(pct)
        return segments[i], segments[j], t

    def traveling_marker(self, pct: float, head_theta: float) -> tuple[Point, tuple]:
        """Interpolated position and color of the marker riding the spiral head."""
        buffers = self.buffers
        segments = self.track.analysis.segments
        i, j, t = self._bracket(pct)

        p0, p1 = buffers.marker_points[i], buffers.marker_points[j]
        point = (p0[0] + (p1[0] - p0[0]) * t, p0[1] + (p1[1] - p0[1]) * t)

        # never float inside the played spiral
        if math.hypot(*point) < self.spiral.distance(head_theta):
            point = self.spiral.point_at(head_theta)

        c0 = segments[i].color or self.cfg.text_color
        c1 = segments[j].color or self.cfg.text_color
        return point, lerp_color(c0, c1, t)

    def pulse_scale(self, pct: float) -> float:
        return self.pulse.scale_at(pct * self.track.analysis.duration_ms)

    def rotation(self, pct: float) -> float:
        """Record rotation in radians for ``pct``."""
        return self.cfg.rotation_turns * 2 * math.pi * pct

    def _draw_content(self, pct: float) -> pygame.Surface:
        """Cached layers plus the live section, unrotated."""
        buffers = self.buffers
        painter = self.painter
        k = len(buffers.sections)

        content = buffers.fixed.copy()
        elapsed = min(k, int(math.floor(pct * k)))
        for layer in buffers.sections[:elapsed]:
            content.blit(layer, (0, 0))

        head_theta = self.spiral.theta_for_progress(pct)

        if elapsed < k:
            painter.draw_spiral(
                content,
                buffers.section_thetas[elapsed],
                head_theta,
                width=self.cfg.played_width,
            )
            low = elapsed / k
            for segment, point in zip(self.track.analysis.segments, buffers.marker_points):
                if low <= segment.progress_pct <= pct and segment.color is not None:
                    painter.draw_marker(content, point, segment.color, painter.marker_radius(segment))

        point, color = self.traveling_marker(pct, head_theta)
        painter.draw_marker(content, point, color, int(self.cfg.traveling_marker_radius))
        return content

    def render(self, progress_pct: float) -> pygame.Surface:
        """
        Render the frame for a playback progress fraction.

        Args:
            progress_pct: Playback position in [0, 1]. Values outside are
                clamped; anything past 1 marks the scene as finished.

        Returns:
            Canvas-sized pygame Surface.
        """
        self.finished = progress_pct > 1.0
        pct = clamp_progress(progress_pct)

        buffers = self.buffers
        frame = buffers.background.copy()
        content = self._draw_content(pct)

        angle = -math.degrees(self.rotation(pct))
        transformed = pygame.transform.rotozoom(content, angle, self.pulse_scale(pct))
        frame.blit(transformed, transformed.get_rect(center=(self.cfg.width / 2, self.cfg.height / 2)))
        return frame

    def render_at(self, clock: PlaybackClock, now_ms: float) -> pygame.Surface | None:
        """
        Render the frame for the clock's extrapolated progress at ``now_ms``.

        Returns ``None`` when the clock has nothing playing or its snapshot
        belongs to a different track than the one loaded.
        """
        if clock.state is None or clock.state.track_id != self.track.track_id:
            return None
        pct = clock.progress_pct(now_ms)
        if pct is None:
            return None
        return self.render(pct)

    def render_frame(self, progress_pct: float) -> np.ndarray:
        """Render to an (H, W, 3) uint8 array."""
        return surface_to_array(self.render(progress_pct))

    def render_timeline(
        self,
        fps: int | None = None,
        duration_s: float | None = None,
        progress_callback: callable = None,
    ) -> Iterator[np.ndarray]:
        """
        Yield frames across the track at a fixed frame rate.

        Args:
            fps: Frames per second (defaults to the config).
            duration_s: Seconds to render from the start (default: whole track).
            progress_callback: Optional callback(current, total).
        """
        fps = fps or self.cfg.fps
        track_s = self.track.analysis.track.duration
        duration_s = min(track_s, duration_s) if duration_s is not None else track_s
        total = max(1, int(duration_s * fps))

        for i in range(total):
            yield self.render_frame((i / fps) / track_s)
            if progress_callback:
                progress_callback(i + 1, total)
