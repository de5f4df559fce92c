"""Spiral timeline visualizer for analyzed music tracks."""

from spiralscope.core.analysis import AnalysisError, process_raw_analysis
from spiralscope.core.palette import AudioFeatures, ColorPalette
from spiralscope.core.pulse import PulseEnvelope
from spiralscope.core.spiral import SpiralGeometry
from spiralscope.core.track import Track
from spiralscope.playback import PlaybackChange, PlaybackClock, PlaybackState
from spiralscope.render.cache import RenderCache
from spiralscope.render.config import SceneConfig
from spiralscope.render.scene import SegmentBoundsError, SpiralScene

__version__ = "0.1.0"
__all__ = [
    "AnalysisError",
    "AudioFeatures",
    "ColorPalette",
    "PlaybackChange",
    "PlaybackClock",
    "PlaybackState",
    "PulseEnvelope",
    "RenderCache",
    "SceneConfig",
    "SegmentBoundsError",
    "SpiralGeometry",
    "SpiralScene",
    "Track",
    "process_raw_analysis",
]
