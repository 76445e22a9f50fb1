"""
audiolab

Audio feature extraction (spectral, temporal, harmonic, MFCC, chroma,
tonnetz) from decoded PCM samples, and heuristic ranking of audio
plugins against the extracted features.
"""

__version__ = "1.0.0"
__author__ = "Audio Analysis Team"

__all__ = [
    "SampleBuffer",
    "FeatureRecord",
    "extract_features",
    "find_matches",
    "create_analysis_engine",
]


def __getattr__(name: str):
    """Lazy load the public entry points."""
    if name in ("SampleBuffer", "FeatureRecord"):
        from audiolab.core import models
        return getattr(models, name)
    elif name == "extract_features":
        from audiolab.core.features import extract_features
        return extract_features
    elif name == "find_matches":
        from audiolab.plugins.matcher import find_matches
        return find_matches
    elif name == "create_analysis_engine":
        from audiolab.core.engine import create_analysis_engine
        return create_analysis_engine
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
