"""
Analysis enrichment module.

Turns raw music-analysis events (bars, beats, tatums, sections, segments)
into read-only records carrying the timing and progress fields the
spiral renderer needs.
"""

from dataclasses import dataclass, field, fields
from typing import Any, Optional

from spiralscope.core.palette import Color, ColorPalette


class AnalysisError(ValueError):
    """Raised when analysis input cannot drive the visualization."""


@dataclass(frozen=True)
class TimedEvent:
    """A single timed analysis event (bar, beat or tatum)."""

    start: float
    duration: float
    confidence: float


@dataclass(frozen=True)
class Section(TimedEvent):
    """Broad structural section of a track."""

    loudness: float
    tempo: float
    tempo_confidence: float
    key: int
    key_confidence: float
    mode: int
    mode_confidence: float
    time_signature: int
    time_signature_confidence: float


@dataclass(frozen=True)
class Segment(TimedEvent):
    """Short, roughly uniform sound region."""

    loudness_start: float
    loudness_max_time: float
    loudness_max: float
    loudness_end: float
    pitches: tuple[float, ...]  # 12 pitch classes, C..B
    timbre: tuple[float, ...]


@dataclass(frozen=True)
class TrackInfo:
    """Track-level analysis metadata."""

    duration: float
    num_samples: int = 0
    sample_md5: str = ""
    offset_seconds: float = 0.0
    window_seconds: float = 0.0
    analysis_sample_rate: int = 0
    analysis_channels: int = 0
    end_of_fade_in: float = 0.0
    start_of_fade_out: float = 0.0
    loudness: float = 0.0
    tempo: float = 0.0
    tempo_confidence: float = 0.0
    time_signature: int = 4
    time_signature_confidence: float = 0.0
    key: int = 0
    key_confidence: float = 0.0
    mode: int = 0
    mode_confidence: float = 0.0
    codestring: str = ""
    code_version: float = 0.0
    echoprintstring: str = ""
    echoprint_version: float = 0.0
    synchstring: str = ""
    synch_version: float = 0.0
    rhythmstring: str = ""
    rhythm_version: float = 0.0


@dataclass(frozen=True)
class RawAnalysis:
    """Analysis document exactly as supplied by the metadata collaborator."""

    bars: tuple[TimedEvent, ...]
    beats: tuple[TimedEvent, ...]
    sections: tuple[Section, ...]
    segments: tuple[Segment, ...]
    tatums: tuple[TimedEvent, ...]
    track: TrackInfo
    meta: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class BarInfo(TimedEvent):
    progress_pct: float


@dataclass(frozen=True)
class TatumInfo(TimedEvent):
    progress_pct: float


@dataclass(frozen=True)
class BeatInfo(TimedEvent):
    progress_pct: float
    start_ms: float


@dataclass(frozen=True)
class SectionInfo(Section):
    progress_pct: float
    start_progress_pct: float
    end_progress_pct: float
    color: Optional[Color] = None


@dataclass(frozen=True)
class SegmentInfo(Segment):
    progress_pct: float
    start_ms: float
    avg_pitch: int  # arg-max pitch class, not a mean
    relative_loudness: float  # loudness_max remapped onto [1, 2]
    color: Optional[Color] = None


@dataclass(frozen=True)
class TrackSummary(TrackInfo):
    beat_timings_ms: tuple[float, ...] = ()


@dataclass(frozen=True)
class DerivedAnalysis:
    """Enriched analysis, built once per track and read-only afterwards."""

    bars: tuple[BarInfo, ...]
    beats: tuple[BeatInfo, ...]
    sections: tuple[SectionInfo, ...]
    segments: tuple[SegmentInfo, ...]
    tatums: tuple[TatumInfo, ...]
    track: TrackSummary

    @property
    def duration_ms(self) -> float:
        return self.track.duration * 1000.0


def _extend(cls, event, **extra):
    """Copy every field of ``event`` into a richer record type."""
    values = {f.name: getattr(event, f.name) for f in fields(event)}
    values.update(extra)
    return cls(**values)


def remap(value: float, in_min: float, in_max: float, out_min: float, out_max: float) -> float:
    """Linearly remap ``value`` from one range onto another."""
    return out_min + (value - in_min) * (out_max - out_min) / (in_max - in_min)


def dominant_pitch(pitches) -> int:
    """
    Index of the strongest pitch class.

    Scans from ``(0, 0)`` and only replaces on strictly greater values,
    so the first maximum wins on ties.
    """
    best_value, best_index = 0.0, 0
    for index, value in enumerate(pitches):
        if value > best_value:
            best_value, best_index = value, index
    return best_index


def relative_loudness(segments) -> list[float]:
    """Remap each segment's ``loudness_max`` onto ``[1, 2]``."""
    if not segments:
        return []

    min_loudness = max_loudness = segments[0].loudness_max
    for segment in segments:
        min_loudness = min(min_loudness, segment.loudness_max)
        max_loudness = max(max_loudness, segment.loudness_max)

    if min_loudness == max_loudness:
        return [1.0] * len(segments)

    return [
        remap(segment.loudness_max, min_loudness, max_loudness, 1.0, 2.0)
        for segment in segments
    ]


def process_raw_analysis(
    raw: RawAnalysis,
    palette: ColorPalette | None = None,
) -> DerivedAnalysis:
    """
    Enrich a raw analysis with progress, timing and color fields.

    Args:
        raw: Validated raw analysis.
        palette: Palette to draw segment and section colors from. Colors
            are sampled for all segments first, then all sections, each in
            event order. Without a palette every color is ``None``.

    Returns:
        DerivedAnalysis sharing no mutable state with ``raw``.
    """
    duration = raw.track.duration

    def sample():
        return palette.sample_color() if palette is not None else None

    bars = tuple(
        _extend(BarInfo, bar, progress_pct=bar.start / duration)
        for bar in raw.bars
    )
    tatums = tuple(
        _extend(TatumInfo, tatum, progress_pct=tatum.start / duration)
        for tatum in raw.tatums
    )
    beats = tuple(
        _extend(
            BeatInfo,
            beat,
            progress_pct=beat.start / duration,
            start_ms=beat.start * 1000.0,
        )
        for beat in raw.beats
    )

    loudness = relative_loudness(raw.segments)
    segments = tuple(
        _extend(
            SegmentInfo,
            segment,
            progress_pct=segment.start / duration,
            start_ms=segment.start * 1000.0,
            avg_pitch=dominant_pitch(segment.pitches),
            relative_loudness=loudness[i],
            color=sample(),
        )
        for i, segment in enumerate(raw.segments)
    )

    sections = tuple(
        _extend(
            SectionInfo,
            section,
            progress_pct=section.start / duration,
            start_progress_pct=section.start / duration,
            end_progress_pct=(section.start + section.duration) / duration,
            color=sample(),
        )
        for section in raw.sections
    )

    track = _extend(
        TrackSummary,
        raw.track,
        beat_timings_ms=tuple(beat.start * 1000.0 for beat in raw.beats),
    )

    return DerivedAnalysis(
        bars=bars,
        beats=beats,
        sections=sections,
        segments=segments,
        tatums=tatums,
        track=track,
    )
