"""
Quick audio overview (level, spectral summary, tempo, key).
"""

from audiolab.analyzers.overview.overview_analyzer import (
    AudioOverviewAnalyzer,
    create_overview_analyzer,
    rms_to_db,
)

__all__ = ["AudioOverviewAnalyzer", "create_overview_analyzer", "rms_to_db"]
