"""
Magnitude spectrum of a single analysis frame.

The reference behavior is the direct discrete Fourier sum without a
window function; the FFT path reproduces it within floating-point
tolerance and is the default.
"""

from typing import Optional

import numpy as np

from audiolab.utils.errors import ConfigurationError, InvalidBufferError

TRANSFORM_METHODS = ("fft", "dft")


def magnitude_spectrum(frame: Optional[np.ndarray], method: str = "fft") -> np.ndarray:
    """
    Compute the non-negative-frequency magnitude spectrum of a frame.

    Args:
        frame: Real-valued samples (N of them)
        method: "fft" (numpy real FFT) or "dft" (direct O(N^2) sum)

    Returns:
        np.ndarray: N // 2 magnitudes; bin k is k * sample_rate / N Hz

    Raises:
        InvalidBufferError: If the frame is missing or empty
        ConfigurationError: If the method is unknown
    """
    if frame is None:
        raise InvalidBufferError("Analysis frame is missing", reason="frame is None")

    x = np.asarray(frame, dtype=np.float64)
    if x.ndim != 1 or x.size == 0:
        raise InvalidBufferError(
            f"Analysis frame must be a non-empty 1-D array, got shape {x.shape}",
            reason="empty_frame",
        )

    if method == "fft":
        return _fft_magnitude(x)
    if method == "dft":
        return direct_dft_magnitude(x)
    raise ConfigurationError(
        f"Unknown transform method {method!r}; expected one of {TRANSFORM_METHODS}",
        config_key="analysis.transform",
    )


def _fft_magnitude(x: np.ndarray) -> np.ndarray:
    n_bins = x.size // 2
    return np.abs(np.fft.rfft(x))[:n_bins]


def direct_dft_magnitude(x: np.ndarray) -> np.ndarray:
    """
    Direct discrete Fourier sum, one row of the DFT matrix per bin.

    real_k = sum x[n] cos(-2 pi k n / N), imag_k = sum x[n] sin(-2 pi k n / N)
    """
    x = np.asarray(x, dtype=np.float64)
    n = x.size
    n_bins = n // 2
    k = np.arange(n_bins)[:, np.newaxis]
    angles = -2.0 * np.pi * k * np.arange(n) / n
    real = np.cos(angles) @ x
    imag = np.sin(angles) @ x
    return np.sqrt(real * real + imag * imag)


def bin_frequencies(
    n_bins: int, sample_rate: int, frame_size: Optional[int] = None
) -> np.ndarray:
    """
    Frequency in Hz of each bin: ``k * sample_rate / frame_size``.

    ``frame_size`` is the length of the frame the spectrum came from. It
    defaults to ``2 * n_bins``, which is only exact for even-length frames.
    """
    if n_bins == 0:
        return np.zeros(0)
    if frame_size is None:
        frame_size = 2 * n_bins
    return np.arange(n_bins) * sample_rate / float(frame_size)
