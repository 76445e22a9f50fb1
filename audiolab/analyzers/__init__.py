"""
Descriptor implementations grouped by domain: spectral, temporal,
harmonic, tonal, plus the quick overview analyzer.
"""

from audiolab.analyzers.overview.overview_analyzer import AudioOverviewAnalyzer

__all__ = [
    "AudioOverviewAnalyzer",
]
