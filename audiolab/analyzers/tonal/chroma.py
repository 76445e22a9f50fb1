"""
Pitch-class features: chroma vector, tonnetz projection, and key guess.
"""

from typing import Optional, Sequence

import librosa
import numpy as np

from audiolab.analyzers.spectral.transform import bin_frequencies
from audiolab.core.models import PITCH_CLASSES

DEFAULT_MIN_HZ = 80.0
DEFAULT_MAX_HZ = 8000.0
REFERENCE_HZ = 440.0


def chroma_vector(
    spectrum: np.ndarray,
    sample_rate: int,
    min_hz: float = DEFAULT_MIN_HZ,
    max_hz: float = DEFAULT_MAX_HZ,
    reference_hz: float = REFERENCE_HZ,
    frame_size: Optional[int] = None,
) -> np.ndarray:
    """
    Fold spectral magnitude into 12 pitch classes (C, C#, ..., B).

    Only bins strictly between ``min_hz`` and ``max_hz`` contribute; the
    DC bin never does. Each bin goes to the pitch class of its nearest
    MIDI note, with ``reference_hz`` tuned to A4 (note 69).
    ``frame_size`` is the length of the analysed frame.

    Returns:
        np.ndarray: 12 values summing to 1, or all zeros without in-range energy
    """
    spectrum = np.asarray(spectrum, dtype=np.float64)
    chroma = np.zeros(len(PITCH_CLASSES))
    if spectrum.size < 2:
        return chroma

    freqs = bin_frequencies(spectrum.size, sample_rate, frame_size)[1:]
    magnitudes = spectrum[1:]
    in_range = (freqs > min_hz) & (freqs < max_hz)
    if not np.any(in_range):
        return chroma

    midi = librosa.hz_to_midi(freqs[in_range] * (REFERENCE_HZ / reference_hz))
    pitch_class = np.mod(np.floor(midi + 0.5).astype(int), 12)
    chroma = np.bincount(
        pitch_class, weights=magnitudes[in_range], minlength=12
    ).astype(np.float64)

    total = chroma.sum()
    if total > 0:
        chroma = chroma / total
    return chroma


def tonnetz(chroma: Sequence[float]) -> np.ndarray:
    """
    Three harmonic-relationship projections of a chroma vector.

    Major-third (cosine at period 3), minor-third (sine at period 3) and
    perfect-fifth (cosine at period 12/7) components. An approximation,
    not the 6-dimensional tonal centroid.
    """
    c = np.asarray(chroma, dtype=np.float64)
    i = np.arange(c.size)
    return np.array([
        np.dot(c, np.cos(2 * np.pi * i / 3)),
        np.dot(c, np.sin(2 * np.pi * i / 3)),
        np.dot(c, np.cos(7 * 2 * np.pi * i / 12)),
    ])


def estimate_key(chroma: Sequence[float]) -> str:
    """Pitch-class name of the strongest chroma bin (first on ties)."""
    c = np.asarray(chroma, dtype=np.float64)
    if c.size != len(PITCH_CLASSES):
        raise ValueError(f"Chroma must have 12 elements, got {c.size}")
    return PITCH_CLASSES[int(np.argmax(c))]
