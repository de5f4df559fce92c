"""
Playback clock.

Playback state arrives as occasional snapshots from a polling
collaborator; frames in between extrapolate progress from wall-clock
time since the last snapshot.
"""

import enum
from dataclasses import dataclass


class PlaybackChange(enum.Enum):
    """What a new snapshot means for the scene."""

    UNCHANGED = "unchanged"
    STARTED = "started"  # Playback began; build a scene
    STOPPED = "stopped"  # Nothing is playing; tear the scene down
    TRACK_CHANGED = "track_changed"  # New track; rebuild the cache
    IDLE = "idle"  # Still nothing playing


@dataclass(frozen=True)
class PlaybackState:
    """A single playback-state snapshot."""

    progress_ms: float
    duration_ms: float
    track_id: str
    is_playing: bool = True
    timestamp: float = 0.0


class PlaybackClock:
    """
    Interpolates playback progress between snapshots.

    All times are supplied by the caller in milliseconds, so the clock
    itself never reads the system time.
    """

    # Compensates for the delay between the snapshot and the first frame
    LATENCY_MS = 20.0

    def __init__(self, latency_ms: float = LATENCY_MS):
        self.latency_ms = latency_ms
        self.state: PlaybackState | None = None
        self.updated_at_ms = 0.0

    def update(self, state: PlaybackState | None, now_ms: float) -> PlaybackChange:
        """Store a new snapshot taken at ``now_ms`` and classify the transition."""
        previous = self.state
        self.state = state
        self.updated_at_ms = now_ms

        if previous is None and state is None:
            return PlaybackChange.IDLE
        if previous is None:
            return PlaybackChange.STARTED
        if state is None:
            return PlaybackChange.STOPPED
        if previous.track_id != state.track_id:
            return PlaybackChange.TRACK_CHANGED
        return PlaybackChange.UNCHANGED

    def progress_ms(self, now_ms: float) -> float | None:
        if self.state is None:
            return None
        elapsed = now_ms - self.updated_at_ms if self.state.is_playing else 0.0
        return self.state.progress_ms + self.latency_ms + elapsed

    def progress_pct(self, now_ms: float) -> float | None:
        """
        Extrapolated progress fraction, or ``None`` when nothing is playing.

        Not clamped; the scene clamps and treats values past 1 as finished.
        """
        progress = self.progress_ms(now_ms)
        if progress is None or self.state.duration_ms <= 0:
            return None
        return progress / self.state.duration_ms
