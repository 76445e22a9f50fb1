"""
Fundamental-frequency estimation and harmonicity.
"""

from audiolab.analyzers.harmonic.pitch import (
    lag_autocorrelation,
    estimate_fundamental,
    harmonicity,
    compute_harmonic_features,
)

__all__ = [
    "lag_autocorrelation",
    "estimate_fundamental",
    "harmonicity",
    "compute_harmonic_features",
]
