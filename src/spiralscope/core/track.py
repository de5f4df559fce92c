"""
Per-track bundle built once when a track loads.
"""

from dataclasses import dataclass

from spiralscope.core.analysis import (
    AnalysisError,
    DerivedAnalysis,
    RawAnalysis,
    process_raw_analysis,
)
from spiralscope.core.palette import AudioFeatures, ColorPalette


@dataclass(frozen=True)
class Track:
    """Enriched analysis plus the palette and display strings for one track."""

    analysis: DerivedAnalysis
    palette: ColorPalette
    features: AudioFeatures
    title: str = ""
    artist: str = ""

    def __post_init__(self):
        if len(self.analysis.segments) < 2:
            raise AnalysisError(
                f"At least two segments are required, got {len(self.analysis.segments)}"
            )

    @property
    def track_id(self) -> str:
        return self.features.track_id

    @classmethod
    def load(
        cls,
        raw: RawAnalysis,
        features: AudioFeatures,
        title: str = "",
        artist: str = "",
    ) -> "Track":
        """Build the palette and enrich ``raw`` with it."""
        palette = ColorPalette(features)
        analysis = process_raw_analysis(raw, palette)
        return cls(
            analysis=analysis,
            palette=palette,
            features=features,
            title=title,
            artist=artist,
        )
