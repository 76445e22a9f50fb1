"""
Fundamental-frequency estimation and harmonicity scoring.

Pitch is found by a brute-force search over candidate periods of the
time-domain autocorrelation, restricted to 80-800 Hz by default. It is
not tuned for polyphonic or noisy material and will report a spurious
pitch for unpitched audio.
"""

from typing import Optional

import numpy as np

from audiolab.analyzers.spectral.transform import bin_frequencies
from audiolab.core.models import HarmonicFeatures, finite_or_zero

DEFAULT_MIN_HZ = 80.0
DEFAULT_MAX_HZ = 800.0
DEFAULT_PEAK_THRESHOLD = 0.9
DEFAULT_TOLERANCE_HZ = 20.0

# Samples per block in lag_autocorrelation
AUTOCORRELATION_BLOCK = 65536


def lag_autocorrelation(samples: np.ndarray, min_lag: int, max_lag: int) -> np.ndarray:
    """
    Mean of ``x[i] * x[i + p]`` over the valid ``i`` for each lag p.

    The buffer is processed in blocks; each block is correlated against
    itself plus the next ``max_lag`` samples with a zero-padded FFT. Only
    lags up to ``max_lag`` are kept, so memory grows with the block size
    and not with the buffer. Equals the direct sum up to floating-point
    rounding.

    Returns:
        np.ndarray: Values for lags ``min_lag..max_lag`` inclusive
    """
    x = np.asarray(samples, dtype=np.float64)
    n = x.size
    block = min(AUTOCORRELATION_BLOCK, n)
    n_fft = 1 << (block + max_lag).bit_length()

    sums = np.zeros(max_lag + 1)
    for start in range(0, n, block):
        head = np.fft.rfft(x[start:start + block], n_fft)
        tail = np.fft.rfft(x[start:start + block + max_lag], n_fft)
        sums += np.fft.irfft(np.conj(head) * tail, n_fft)[:max_lag + 1]

    lags = np.arange(min_lag, max_lag + 1)
    return sums[lags] / (n - lags)


def estimate_fundamental(
    samples: np.ndarray,
    sample_rate: int,
    min_hz: float = DEFAULT_MIN_HZ,
    max_hz: float = DEFAULT_MAX_HZ,
    peak_threshold: float = DEFAULT_PEAK_THRESHOLD,
) -> float:
    """
    Estimate the fundamental frequency in Hz.

    Searches periods ``floor(sr / max_hz)`` to ``floor(sr / min_hz)`` and
    picks the shortest period that is a local maximum of the lag
    autocorrelation and reaches ``peak_threshold`` times the global
    maximum. A pure argmax (``peak_threshold=1.0``) tends to lock onto a
    multiple of the true period, e.g. 110 Hz for a 440 Hz sine; the
    default keeps the first strong peak instead. Like the argmax search it
    still reports a spurious pitch for unpitched audio.

    Returns:
        float: ``sample_rate / best_period``. When no candidate period fits
        in the buffer, or no lag correlates positively, the shortest
        period is used, so the result always lies in the search range.
    """
    x = np.asarray(samples, dtype=np.float64)
    min_period = max(1, int(np.floor(sample_rate / max_hz)))
    max_period = min(int(np.floor(sample_rate / min_hz)), x.size - 1)
    if max_period < min_period:
        return float(sample_rate / min_period)

    values = lag_autocorrelation(x, min_period, max_period)
    best = values.max()
    if not best > 0:
        # No positive correlation at any lag (e.g. silence)
        return float(sample_rate / min_period)

    rising = np.concatenate(([True], values[1:] >= values[:-1]))
    falling = np.concatenate((values[:-1] >= values[1:], [True]))
    peaks = rising & falling & (values >= peak_threshold * best)
    best_period = min_period + int(np.argmax(peaks))
    return float(sample_rate / best_period)


def harmonicity(
    spectrum: np.ndarray,
    fundamental: float,
    sample_rate: int,
    tolerance_hz: float = DEFAULT_TOLERANCE_HZ,
    frame_size: Optional[int] = None,
) -> float:
    """
    Fraction of spectral energy within ``tolerance_hz`` of a harmonic.

    Harmonics are the positive integer multiples of ``fundamental``.
    Returns 0.0 if the fundamental is not positive or the spectrum is silent.
    """
    if fundamental <= 0:
        return 0.0

    spectrum = np.asarray(spectrum, dtype=np.float64)
    energy = spectrum * spectrum
    total = energy.sum()
    if total <= 0:
        return 0.0

    freqs = bin_frequencies(spectrum.size, sample_rate, frame_size)
    harmonic_number = np.floor(freqs / fundamental + 0.5)
    near = (harmonic_number > 0) & (
        np.abs(freqs - harmonic_number * fundamental) < tolerance_hz
    )
    return float(min(1.0, energy[near].sum() / total))


def compute_harmonic_features(
    samples: np.ndarray,
    spectrum: np.ndarray,
    sample_rate: int,
    min_hz: float = DEFAULT_MIN_HZ,
    max_hz: float = DEFAULT_MAX_HZ,
    peak_threshold: float = DEFAULT_PEAK_THRESHOLD,
    tolerance_hz: float = DEFAULT_TOLERANCE_HZ,
    frame_size: Optional[int] = None,
) -> HarmonicFeatures:
    """
    Pitch from the whole buffer, harmonicity from the frame spectrum.
    """
    pitch = finite_or_zero(
        estimate_fundamental(samples, sample_rate, min_hz, max_hz, peak_threshold)
    )
    score = finite_or_zero(
        harmonicity(spectrum, pitch, sample_rate, tolerance_hz, frame_size)
    )
    return HarmonicFeatures.from_harmonicity(score, pitch)
