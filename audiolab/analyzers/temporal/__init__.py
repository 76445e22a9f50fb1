"""
Time-domain descriptors and tempo estimation.

``estimate_tempo`` pulls in librosa and is loaded on first use.
"""

from audiolab.analyzers.temporal.descriptors import (
    zero_crossing_rate,
    signal_energy,
    compute_temporal_features,
)

__all__ = [
    "zero_crossing_rate",
    "signal_energy",
    "compute_temporal_features",
    "estimate_tempo",
]


def __getattr__(name: str):
    """Lazy load the librosa-backed tempo estimator."""
    if name == "estimate_tempo":
        from audiolab.analyzers.temporal.tempo import estimate_tempo
        return estimate_tempo
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
