"""
Time-domain descriptors computed over an entire sample buffer.
"""

import numpy as np

from audiolab.core.models import TemporalFeatures, finite_or_zero


def zero_crossing_rate(samples: np.ndarray, sample_rate: int) -> float:
    """
    Sign changes per second.

    A crossing is counted whenever ``x > 0`` differs between consecutive
    samples, so exact zeros count as non-positive.
    """
    samples = np.asarray(samples, dtype=np.float64)
    if samples.size == 0:
        return 0.0
    positive = samples > 0
    crossings = np.count_nonzero(positive[1:] != positive[:-1])
    return float(crossings / (samples.size / sample_rate))


def signal_energy(samples: np.ndarray) -> float:
    """Mean squared amplitude."""
    samples = np.asarray(samples, dtype=np.float64)
    if samples.size == 0:
        return 0.0
    return float(np.mean(samples * samples))


def compute_temporal_features(samples: np.ndarray, sample_rate: int) -> TemporalFeatures:
    """Zero-crossing rate, energy and RMS of the whole buffer."""
    energy = signal_energy(samples)
    return TemporalFeatures(
        zcr=finite_or_zero(zero_crossing_rate(samples, sample_rate)),
        energy=finite_or_zero(energy),
        rms=finite_or_zero(np.sqrt(energy)),
    )
