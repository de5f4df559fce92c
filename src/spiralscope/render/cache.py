"""
Layered buffer cache for the spiral scene.

Thousands of short line segments make up the spiral, far too many to
redraw every frame. Everything that is fully elapsed is rasterized once
into transparent layers; a frame only draws the currently active section live.
"""

import math
from dataclasses import dataclass

import pygame

from spiralscope.core.palette import Color, lerp_color, to_rgb255
from spiralscope.core.spiral import Point, SpiralGeometry
from spiralscope.core.track import Track
from spiralscope.render.config import SceneConfig


@dataclass(frozen=True)
class RenderBuffers:
    """Prerendered layers for one ``(track, canvas size)`` pair."""

    key: tuple[str, tuple[int, int]]
    background: pygame.Surface
    fixed: pygame.Surface
    sections: tuple[pygame.Surface, ...]
    section_thetas: tuple[float, ...]  # K + 1 boundaries, theta_start .. theta_end
    marker_points: tuple[Point, ...]  # Spiral-space position per segment
    scale: float  # Pixels per spiral unit


class SpiralPainter:
    """Draws spiral primitives onto pygame surfaces in spiral coordinates."""

    def __init__(self, config: SceneConfig, spiral: SpiralGeometry, track: Track):
        self.cfg = config
        self.spiral = spiral
        self.track = track
        self.center = (config.width / 2, config.height / 2)

        outer = spiral.distance(spiral.theta_end) + config.guide_margin
        self.scale = (min(config.width, config.height) / 2 - 4) / outer

    def to_screen(self, point: Point) -> tuple[float, float]:
        return (
            self.center[0] + point[0] * self.scale,
            self.center[1] + point[1] * self.scale,
        )

    def marker_offset(self, segment) -> float:
        """Radial jitter for a segment marker, centered on the middle pitch class."""
        return (segment.avg_pitch - 5.5) * self.cfg.pitch_jitter

    def marker_point(self, segment) -> Point:
        theta = self.spiral.theta_for_progress(segment.progress_pct)
        return self.spiral.point_at(theta, self.marker_offset(segment))

    def marker_radius(self, segment) -> int:
        return max(1, int(round(self.cfg.marker_radius * segment.relative_loudness)))

    def section_color_at(self, pct: float) -> Color:
        """Color of the analysis section playing at ``pct``."""
        sections = self.track.analysis.sections
        for section in sections:
            if section.start_progress_pct <= pct < section.end_progress_pct:
                if section.color is not None:
                    return section.color
                break
        if sections and sections[-1].color is not None and pct >= sections[-1].start_progress_pct:
            return sections[-1].color
        return tuple(float(c) for c in self.cfg.text_color)

    def draw_spiral(
        self,
        surface: pygame.Surface,
        theta_from: float,
        theta_to: float,
        color=None,
        width: int = 1,
    ):
        """Stroke the spiral between two angles; ``color=None`` follows section colors."""
        for theta, start, end in self.spiral.iter_polyline(theta_from, theta_to):
            if color is None:
                stroke = to_rgb255(self.section_color_at(self.spiral.progress_pct(theta)))
            else:
                stroke = color
            pygame.draw.line(surface, stroke, self.to_screen(start), self.to_screen(end), width)

    def draw_marker(
        self,
        surface: pygame.Surface,
        point: Point,
        color: Color,
        radius: int,
        width: int = 0,
    ):
        pygame.draw.circle(surface, to_rgb255(color), self.to_screen(point), radius, width)


class RenderCache:
    """
    Memoizes :class:`RenderBuffers` keyed by ``(track id, canvas size)``.

    A key change triggers a full rebuild; the new buffer set replaces the
    old one in a single assignment, so readers never see a partial cache.
    """

    def __init__(self, config: SceneConfig | None = None):
        self.cfg = config or SceneConfig()
        self._buffers: RenderBuffers | None = None
        self.builds = 0

    @property
    def buffers(self) -> RenderBuffers | None:
        return self._buffers

    def invalidate(self):
        """Drop the cached buffers; the next :meth:`get` rebuilds."""
        self._buffers = None

    def get(self, track: Track, config: SceneConfig | None = None) -> RenderBuffers:
        """Return buffers for ``track`` at the configured size, rebuilding on key change."""
        if config is not None:
            self.cfg = config
        key = (track.track_id, self.cfg.size)
        if self._buffers is None or self._buffers.key != key:
            self._buffers = self.build(track)
        return self._buffers

    def build(self, track: Track) -> RenderBuffers:
        """Prerender background, fixed and section layers for ``track``."""
        cfg = self.cfg
        spiral = cfg.spiral()
        painter = SpiralPainter(cfg, spiral, track)
        k = max(1, cfg.num_sections)

        section_thetas = tuple(spiral.theta_for_progress(i / k) for i in range(k + 1))
        marker_points = tuple(painter.marker_point(segment) for segment in track.analysis.segments)

        background = self._render_background(track, cfg)
        fixed = self._render_fixed(track, painter, marker_points)
        sections = tuple(
            self._render_section(track, painter, marker_points, section_thetas, i, k)
            for i in range(k)
        )

        self.builds += 1
        return RenderBuffers(
            key=(track.track_id, cfg.size),
            background=background,
            fixed=fixed,
            sections=sections,
            section_thetas=section_thetas,
            marker_points=marker_points,
            scale=painter.scale,
        )

    def _render_background(self, track: Track, cfg: SceneConfig) -> pygame.Surface:
        """Radial gradient through the three key colors, center to edge."""
        surface = pygame.Surface(cfg.size)
        c1, c2, c3 = (
            tuple(channel * cfg.background_dim for channel in color)
            for color in track.palette.key_colors
        )
        center = (cfg.width // 2, cfg.height // 2)
        max_radius = int(math.hypot(cfg.width, cfg.height) / 2) + 1
        steps = max(2, cfg.gradient_steps)

        surface.fill(to_rgb255(c3))
        for i in range(steps, 0, -1):
            ratio = i / steps
            if ratio > 0.5:
                color = lerp_color(c2, c3, (ratio - 0.5) * 2)
            else:
                color = lerp_color(c1, c2, ratio * 2)
            pygame.draw.circle(surface, to_rgb255(color), center, max(1, int(max_radius * ratio)))
        return surface

    def _render_fixed(
        self,
        track: Track,
        painter: SpiralPainter,
        marker_points: tuple[Point, ...],
    ) -> pygame.Surface:
        """Guide circles, title text, the full spiral outline and ghost markers."""
        cfg = self.cfg
        spiral = painter.spiral
        surface = pygame.Surface(cfg.size, pygame.SRCALPHA)

        center = painter.to_screen((0.0, 0.0))
        outer = (spiral.distance(spiral.theta_end) + cfg.guide_margin) * painter.scale
        inner = max(1.0, (spiral.distance(spiral.theta_start) - cfg.guide_margin) * painter.scale)
        pygame.draw.circle(surface, cfg.guide_color, center, int(outer), 2)
        pygame.draw.circle(surface, cfg.guide_color, center, int(inner), 2)

        painter.draw_spiral(surface, spiral.theta_start, spiral.theta_end, color=cfg.guide_color)

        for segment, point in zip(track.analysis.segments, marker_points):
            color = segment.color if segment.color is not None else cfg.guide_color
            painter.draw_marker(surface, point, color, painter.marker_radius(segment), width=1)

        self._render_title(surface, track, center, inner)
        return surface

    def _render_title(self, surface: pygame.Surface, track: Track, center, inner_radius: float):
        cfg = self.cfg
        lines = [text for text in (track.title, track.artist) if text]
        if not lines:
            return

        if not pygame.font.get_init():
            pygame.font.init()

        sizes = [cfg.font_size, max(8, int(cfg.font_size * 0.7))]
        rendered = []
        for text, size in zip(lines, sizes):
            font = pygame.font.Font(None, size)
            image = font.render(text, True, cfg.text_color)
            # shrink to fit inside the inner guide circle
            max_width = int(inner_radius * 1.6)
            if image.get_width() > max_width > 0:
                ratio = max_width / image.get_width()
                image = pygame.transform.smoothscale(
                    image, (max_width, max(1, int(image.get_height() * ratio)))
                )
            rendered.append(image)

        total_height = sum(image.get_height() for image in rendered)
        y = center[1] - total_height / 2
        for image in rendered:
            surface.blit(image, image.get_rect(midtop=(center[0], y)))
            y += image.get_height()

    def _render_section(
        self,
        track: Track,
        painter: SpiralPainter,
        marker_points: tuple[Point, ...],
        section_thetas: tuple[float, ...],
        index: int,
        k: int,
    ) -> pygame.Surface:
        """Played spiral and filled markers whose progress lies in ``[i/k, (i+1)/k)``."""
        surface = pygame.Surface(self.cfg.size, pygame.SRCALPHA)
        painter.draw_spiral(
            surface,
            section_thetas[index],
            section_thetas[index + 1],
            width=self.cfg.played_width,
        )

        low = index / k
        high = (index + 1) / k
        last = index == k - 1
        for segment, point in zip(track.analysis.segments, marker_points):
            pct = segment.progress_pct
            if low <= pct < high or (last and pct == high):
                if segment.color is not None:
                    painter.draw_marker(surface, point, segment.color, painter.marker_radius(segment))
        return surface
