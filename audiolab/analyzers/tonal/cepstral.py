"""
Mel filter bank and MFCC computed from a single magnitude spectrum.

This is a simplified MFCC: one frame, triangular filters on the HTK mel
scale, natural log, and an unnormalized DCT-II.
"""

from typing import Optional

import librosa
import numpy as np

DEFAULT_N_FILTERS = 26
DEFAULT_N_COEFFICIENTS = 13
LOG_EPSILON = 1e-10


def mel_filter_bank(
    n_bins: int,
    sample_rate: int,
    n_filters: int = DEFAULT_N_FILTERS,
    frame_size: Optional[int] = None,
) -> np.ndarray:
    """
    Build triangular filters spaced evenly in mel between 0 Hz and Nyquist.

    Args:
        n_bins: Number of spectrum bins (frame_size // 2)
        sample_rate: Sample rate in Hz
        n_filters: Number of triangular filters
        frame_size: Length of the analysed frame (default ``2 * n_bins``)

    Returns:
        np.ndarray: Filter weights, shape (n_filters, n_bins)
    """
    if frame_size is None:
        frame_size = 2 * n_bins

    mel_max = librosa.hz_to_mel(sample_rate / 2.0, htk=True)
    mel_points = np.linspace(0.0, mel_max, n_filters + 2)
    hz_points = librosa.mel_to_hz(mel_points, htk=True)
    bin_points = np.floor(hz_points * frame_size / sample_rate).astype(int)
    bin_points = np.clip(bin_points, 0, n_bins)

    bins = np.arange(n_bins)
    filters = np.zeros((n_filters, n_bins))
    for i in range(1, n_filters + 1):
        left, center, right = bin_points[i - 1], bin_points[i], bin_points[i + 1]

        if center > left:
            rising = (bins >= left) & (bins < center)
            filters[i - 1, rising] = (bins[rising] - left) / (center - left)

        if right > center:
            falling = (bins >= center) & (bins < right)
            filters[i - 1, falling] = (right - bins[falling]) / (right - center)

    return filters


def dct_ii(values: np.ndarray, n_coefficients: int) -> np.ndarray:
    """Unnormalized DCT-II, ``sum x[n] cos(pi k (2n + 1) / 2N)`` for k < n_coefficients."""
    values = np.asarray(values, dtype=np.float64)
    n = values.size
    if n == 0:
        return np.zeros(n_coefficients)
    k = np.arange(n_coefficients)[:, np.newaxis]
    basis = np.cos(np.pi * k * (2 * np.arange(n) + 1) / (2 * n))
    return basis @ values


def mfcc(
    spectrum: np.ndarray,
    sample_rate: int,
    n_coefficients: int = DEFAULT_N_COEFFICIENTS,
    n_filters: int = DEFAULT_N_FILTERS,
    epsilon: float = LOG_EPSILON,
    frame_size: Optional[int] = None,
) -> np.ndarray:
    """
    Mel-frequency cepstral coefficients of one spectrum.

    Returns:
        np.ndarray: Exactly ``n_coefficients`` values
    """
    spectrum = np.asarray(spectrum, dtype=np.float64)
    filters = mel_filter_bank(spectrum.size, sample_rate, n_filters, frame_size)
    mel_energies = filters @ spectrum
    log_mel = np.log(mel_energies + epsilon)
    return dct_ii(log_mel, n_coefficients)
