"""Pytest configuration and shared fixtures."""

import os

# pygame must not try to open a window during tests
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

import pytest

from spiralscope.core.palette import AudioFeatures
from spiralscope.core.track import Track
from spiralscope.io.loader import parse_raw_analysis
from spiralscope.render.config import SceneConfig


def _events(duration: float, step: float, offset: float = 0.0, confidence: float = 0.8) -> list[dict]:
    events = []
    t = offset
    while t < duration:
        events.append({"start": round(t, 6), "duration": step, "confidence": confidence})
        t += step
    return events


def build_analysis_doc(
    duration: float = 20.0,
    segment_step: float = 0.5,
    section_bounds: tuple[float, ...] = (0.0, 8.0, 14.0),
) -> dict:
    """
    Build a synthetic analysis document.

    Segments cycle through pitch classes and loudness; sections split the
    track at ``section_bounds``.
    """
    segments = []
    for i, event in enumerate(_events(duration, segment_step)):
        pitches = [0.1] * 12
        pitches[i % 12] = 1.0
        segments.append({
            **event,
            "loudness_start": -30.0,
            "loudness_max_time": 0.05,
            "loudness_max": -20.0 + (i % 5) * 3.0,
            "loudness_end": -35.0,
            "pitches": pitches,
            "timbre": [0.0] * 12,
        })

    bounds = list(section_bounds) + [duration]
    sections = []
    for start, end in zip(bounds[:-1], bounds[1:]):
        sections.append({
            "start": start,
            "duration": end - start,
            "confidence": 1.0,
            "loudness": -10.0,
            "tempo": 120.0,
            "tempo_confidence": 0.9,
            "key": 2,
            "key_confidence": 0.5,
            "mode": 1,
            "mode_confidence": 0.5,
            "time_signature": 4,
            "time_signature_confidence": 1.0,
        })

    return {
        "meta": {"analyzer_version": "test"},
        "bars": _events(duration, 2.0),
        "beats": _events(duration, 0.5, offset=0.25),
        "tatums": _events(duration, 0.25),
        "sections": sections,
        "segments": segments,
        "track": {"duration": duration, "tempo": 120.0, "key": 2, "mode": 1},
    }


@pytest.fixture
def make_analysis_doc():
    """Factory for analysis documents with custom layout."""
    return build_analysis_doc


@pytest.fixture
def analysis_doc() -> dict:
    """Synthetic 20 second analysis document."""
    return build_analysis_doc()


@pytest.fixture
def features_doc() -> dict:
    return {
        "danceability": 0.7,
        "energy": 0.4,
        "key": 2,
        "valence": 0.6,
        "acousticness": 0.2,
        "loudness": -7.5,
        "tempo": 120.0,
        "uri": "spotify:track:test0001",
    }


@pytest.fixture
def features() -> AudioFeatures:
    return AudioFeatures(
        danceability=0.7,
        energy=0.4,
        key=2,
        valence=0.6,
        acousticness=0.2,
        track_id="spotify:track:test0001",
    )


@pytest.fixture
def raw_analysis(analysis_doc):
    return parse_raw_analysis(analysis_doc)


@pytest.fixture
def track(raw_analysis, features) -> Track:
    return Track.load(raw_analysis, features, title="Test Song", artist="Test Artist")


@pytest.fixture
def small_config() -> SceneConfig:
    """Small canvas so rendering tests stay fast."""
    return SceneConfig(width=160, height=160, fps=10, num_sections=4, font_size=14)
