"""
Core module containing data models, feature extraction, audio loading
and the analysis engine.

Uses lazy imports for modules with heavy dependencies (librosa).
"""

# Models are lightweight - import directly
from audiolab.core.models import (
    PITCH_CLASSES,
    SampleBuffer,
    SpectralFeatures,
    TemporalFeatures,
    HarmonicFeatures,
    FeatureRecord,
    AudioOverview,
    WaveformData,
    validate_unit_interval,
)

__all__ = [
    # Models (always available)
    "PITCH_CLASSES",
    "SampleBuffer",
    "SpectralFeatures",
    "TemporalFeatures",
    "HarmonicFeatures",
    "FeatureRecord",
    "AudioOverview",
    "WaveformData",
    "validate_unit_interval",
    # Heavy modules (lazy loaded)
    "Analyzer",
    "BaseAnalyzer",
    "FeatureExtractor",
    "create_feature_extractor",
    "extract_features",
    "AudioLoader",
    "create_audio_loader",
    "AnalysisEngine",
    "AnalysisReport",
    "create_analysis_engine",
]


def __getattr__(name: str):
    """Lazy load modules with heavy dependencies."""
    if name in ("Analyzer", "BaseAnalyzer"):
        from audiolab.core import analyzer_base
        return getattr(analyzer_base, name)
    elif name in ("FeatureExtractor", "create_feature_extractor", "extract_features"):
        from audiolab.core import features
        return getattr(features, name)
    elif name in ("AudioLoader", "create_audio_loader"):
        from audiolab.core import loader
        return getattr(loader, name)
    elif name in ("AnalysisEngine", "AnalysisReport", "create_analysis_engine"):
        from audiolab.core import engine
        return getattr(engine, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
