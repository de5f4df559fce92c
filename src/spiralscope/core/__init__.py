"""Geometry, color and analysis modules."""

from spiralscope.core.analysis import process_raw_analysis
from spiralscope.core.palette import ColorPalette
from spiralscope.core.pulse import PulseEnvelope
from spiralscope.core.spiral import SpiralGeometry

__all__ = ["ColorPalette", "PulseEnvelope", "SpiralGeometry", "process_raw_analysis"]
