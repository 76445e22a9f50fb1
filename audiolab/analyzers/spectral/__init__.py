"""
Spectral transform and spectral shape descriptors.
"""

from audiolab.analyzers.spectral.transform import (
    magnitude_spectrum,
    direct_dft_magnitude,
    bin_frequencies,
)
from audiolab.analyzers.spectral.descriptors import (
    spectral_centroid,
    spectral_bandwidth,
    spectral_rolloff,
    spectral_flatness,
    band_energy_ratio,
    compute_spectral_features,
)

__all__ = [
    "magnitude_spectrum",
    "direct_dft_magnitude",
    "bin_frequencies",
    "spectral_centroid",
    "spectral_bandwidth",
    "spectral_rolloff",
    "spectral_flatness",
    "band_energy_ratio",
    "compute_spectral_features",
]
