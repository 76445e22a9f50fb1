"""
Spectral shape descriptors: centroid, bandwidth, rolloff, flatness.

All functions take a magnitude spectrum and the sample rate it was
computed at, and return a neutral value (0.0, or Nyquist for rolloff)
for silent or empty spectra instead of raising. ``frame_size`` is the
length of the frame behind the spectrum; leave it unset for even-length
frames.
"""

from typing import Optional

import numpy as np

from audiolab.analyzers.spectral.transform import bin_frequencies
from audiolab.core.models import SpectralFeatures, finite_or_zero

DEFAULT_ROLLOFF_THRESHOLD = 0.85


def spectral_centroid(
    spectrum: np.ndarray, sample_rate: int, frame_size: Optional[int] = None
) -> float:
    """Magnitude-weighted mean frequency in Hz."""
    spectrum = np.asarray(spectrum, dtype=np.float64)
    total = spectrum.sum()
    if total <= 0:
        return 0.0
    freqs = bin_frequencies(spectrum.size, sample_rate, frame_size)
    return float(np.dot(freqs, spectrum) / total)


def spectral_bandwidth(
    spectrum: np.ndarray,
    sample_rate: int,
    centroid: Optional[float] = None,
    frame_size: Optional[int] = None,
) -> float:
    """Magnitude-weighted standard deviation around the centroid, in Hz."""
    spectrum = np.asarray(spectrum, dtype=np.float64)
    total = spectrum.sum()
    if total <= 0:
        return 0.0
    if centroid is None:
        centroid = spectral_centroid(spectrum, sample_rate, frame_size)
    freqs = bin_frequencies(spectrum.size, sample_rate, frame_size)
    variance = np.dot(spectrum, (freqs - centroid) ** 2) / total
    return float(np.sqrt(variance))


def spectral_rolloff(
    spectrum: np.ndarray,
    sample_rate: int,
    threshold: float = DEFAULT_ROLLOFF_THRESHOLD,
    frame_size: Optional[int] = None,
) -> float:
    """
    Lowest bin frequency below which ``threshold`` of the energy lies.

    Returns the Nyquist frequency when the threshold is never reached
    (including the all-zero spectrum).
    """
    spectrum = np.asarray(spectrum, dtype=np.float64)
    energy = spectrum * spectrum
    total = energy.sum()
    if spectrum.size == 0 or total <= 0:
        return sample_rate / 2.0

    cumulative = np.cumsum(energy)
    reached = np.nonzero(cumulative >= threshold * total)[0]
    if reached.size == 0:
        return sample_rate / 2.0
    return float(bin_frequencies(spectrum.size, sample_rate, frame_size)[reached[0]])


def spectral_flatness(spectrum: np.ndarray) -> float:
    """
    Geometric over arithmetic mean of the non-zero, non-DC magnitudes.

    Near 1 for noise-like spectra, near 0 for tonal ones.
    """
    spectrum = np.asarray(spectrum, dtype=np.float64)
    valid = spectrum[1:]
    valid = valid[valid > 0]
    if valid.size == 0:
        return 0.0

    # Log domain keeps the geometric mean from underflowing on long spectra
    geometric_mean = np.exp(np.mean(np.log(valid)))
    arithmetic_mean = np.mean(valid)
    return float(min(1.0, geometric_mean / arithmetic_mean))


def band_energy_ratio(
    spectrum: np.ndarray,
    sample_rate: int,
    low_hz: float,
    high_hz: float,
    frame_size: Optional[int] = None,
) -> float:
    """Fraction of total squared magnitude in ``[low_hz, high_hz)``."""
    spectrum = np.asarray(spectrum, dtype=np.float64)
    energy = spectrum * spectrum
    total = energy.sum()
    if total <= 0:
        return 0.0
    freqs = bin_frequencies(spectrum.size, sample_rate, frame_size)
    in_band = (freqs >= low_hz) & (freqs < high_hz)
    return float(energy[in_band].sum() / total)


def compute_spectral_features(
    spectrum: np.ndarray,
    sample_rate: int,
    rolloff_threshold: float = DEFAULT_ROLLOFF_THRESHOLD,
    frame_size: Optional[int] = None,
) -> SpectralFeatures:
    """Derive all four spectral descriptors from one spectrum."""
    centroid = spectral_centroid(spectrum, sample_rate, frame_size)
    bandwidth = spectral_bandwidth(spectrum, sample_rate, centroid, frame_size)
    rolloff = spectral_rolloff(spectrum, sample_rate, rolloff_threshold, frame_size)
    return SpectralFeatures(
        centroid=finite_or_zero(centroid),
        bandwidth=finite_or_zero(bandwidth),
        rolloff=finite_or_zero(rolloff),
        flatness=finite_or_zero(spectral_flatness(spectrum)),
    )
