"""
Analysis and feature document loading.

Converts JSON-shaped analysis/feature documents into typed records and
rejects input the renderer cannot draw.
"""

import json
from dataclasses import fields
from pathlib import Path
from typing import Any, Union

from spiralscope.core.analysis import (
    AnalysisError,
    RawAnalysis,
    Section,
    Segment,
    TimedEvent,
    TrackInfo,
)
from spiralscope.core.palette import AudioFeatures

# Largest gap or overlap tolerated between consecutive sections, in seconds
SECTION_GAP_TOLERANCE = 0.05


def _build(cls, data: dict[str, Any], where: str):
    """Instantiate a dataclass from ``data``, ignoring unknown keys."""
    if not isinstance(data, dict):
        raise AnalysisError(f"{where}: expected an object, got {type(data).__name__}")
    values = {}
    for f in fields(cls):
        if f.name in data:
            value = data[f.name]
            values[f.name] = tuple(value) if isinstance(value, list) else value
    try:
        return cls(**values)
    except TypeError as e:
        raise AnalysisError(f"{where}: {e}") from e


def _events(cls, items, name: str) -> tuple:
    if not isinstance(items, list):
        raise AnalysisError(f"'{name}' must be a list")
    return tuple(_build(cls, item, f"{name}[{i}]") for i, item in enumerate(items))


def _check_sorted(events, name: str):
    previous = None
    for i, event in enumerate(events):
        if not isinstance(event.start, (int, float)):
            raise AnalysisError(f"{name}[{i}] start must be a number")
        if previous is not None and not event.start >= previous:
            raise AnalysisError(f"'{name}' must be sorted by start (index {i})")
        previous = event.start


def validate_raw_analysis(raw: RawAnalysis) -> RawAnalysis:
    """
    Check the invariants the renderer relies on.

    Raises:
        AnalysisError: On non-positive duration, unsorted event sequences,
            fewer than two segments, malformed pitch vectors, or sections
            that do not partition the track.
    """
    if not isinstance(raw.track.duration, (int, float)) or not raw.track.duration > 0:
        raise AnalysisError(f"Track duration must be positive, got {raw.track.duration}")

    for name in ("bars", "beats", "tatums", "sections", "segments"):
        _check_sorted(getattr(raw, name), name)

    if len(raw.segments) < 2:
        raise AnalysisError(f"At least two segments are required, got {len(raw.segments)}")

    for i, segment in enumerate(raw.segments):
        if not isinstance(segment.pitches, tuple):
            raise AnalysisError(f"segments[{i}] pitches must be a list of 12 values")
        if len(segment.pitches) != 12:
            raise AnalysisError(
                f"segments[{i}] has {len(segment.pitches)} pitch values, expected 12"
            )

    if not raw.sections:
        raise AnalysisError("At least one section is required")

    expected = 0.0
    for i, section in enumerate(raw.sections):
        if not isinstance(section.duration, (int, float)):
            raise AnalysisError(f"sections[{i}] duration must be a number")
        if abs(section.start - expected) > SECTION_GAP_TOLERANCE:
            raise AnalysisError(
                f"sections[{i}] starts at {section.start:.3f}s, expected {expected:.3f}s"
            )
        expected = section.start + section.duration

    if abs(expected - raw.track.duration) > SECTION_GAP_TOLERANCE:
        raise AnalysisError(
            f"Sections end at {expected:.3f}s, track duration is {raw.track.duration:.3f}s"
        )

    return raw


def parse_raw_analysis(data: dict[str, Any]) -> RawAnalysis:
    """Build and validate a :class:`RawAnalysis` from a decoded JSON document."""
    if not isinstance(data, dict):
        raise AnalysisError("Analysis document must be a JSON object")
    for key in ("bars", "beats", "sections", "segments", "tatums", "track"):
        if key not in data:
            raise AnalysisError(f"Analysis document is missing '{key}'")

    raw = RawAnalysis(
        bars=_events(TimedEvent, data["bars"], "bars"),
        beats=_events(TimedEvent, data["beats"], "beats"),
        sections=_events(Section, data["sections"], "sections"),
        segments=_events(Segment, data["segments"], "segments"),
        tatums=_events(TimedEvent, data["tatums"], "tatums"),
        track=_build(TrackInfo, data["track"], "track"),
        meta=dict(data.get("meta", {})),
    )
    return validate_raw_analysis(raw)


def parse_audio_features(data: dict[str, Any]) -> AudioFeatures:
    """
    Build :class:`AudioFeatures` from a decoded JSON document.

    The track identifier is taken from ``track_id``, falling back to the
    ``uri`` and then ``id`` keys used by streaming-service payloads.
    """
    if not isinstance(data, dict):
        raise AnalysisError("Audio features document must be a JSON object")
    data = dict(data)
    if "track_id" not in data:
        track_id = data.get("uri") or data.get("id")
        if not track_id:
            raise AnalysisError("Audio features need a 'track_id', 'uri' or 'id'")
        data["track_id"] = track_id
    return _build(AudioFeatures, data, "features")


def load_json(path: Union[str, Path]) -> dict[str, Any]:
    """Decode a JSON file; malformed JSON raises :class:`AnalysisError`."""
    with open(path, "r", encoding="utf-8") as f:
        try:
            return json.load(f)
        except json.JSONDecodeError as e:
            raise AnalysisError(f"{path}: {e}") from e


def load_analysis(path: Union[str, Path]) -> RawAnalysis:
    return parse_raw_analysis(load_json(path))


def load_features(path: Union[str, Path]) -> AudioFeatures:
    return parse_audio_features(load_json(path))
