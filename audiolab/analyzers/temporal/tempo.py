"""
Tempo estimation from an onset-strength envelope.

Uses librosa's onset envelope and beat tracker, which estimate tempo by
autocorrelating the onset envelope.
"""

import logging

import librosa
import numpy as np

logger = logging.getLogger(__name__)

DEFAULT_START_BPM = 120.0
MIN_TEMPO_SAMPLES = 2048


def estimate_tempo(
    samples: np.ndarray,
    sample_rate: int,
    start_bpm: float = DEFAULT_START_BPM,
    hop_length: int = 512,
) -> float:
    """
    Estimate the global tempo in beats per minute.

    Args:
        samples: Mono samples
        sample_rate: Sample rate in Hz
        start_bpm: Prior tempo for the beat tracker
        hop_length: Hop between onset-envelope frames

    Returns:
        float: Tempo in BPM, or 0.0 if the buffer is shorter than one
        analysis frame or has no onset energy
    """
    y = np.asarray(samples, dtype=np.float32)
    if y.size < MIN_TEMPO_SAMPLES:
        logger.debug(f"Buffer too short for tempo estimation: {y.size} samples")
        return 0.0

    onset_env = librosa.onset.onset_strength(
        y=y, sr=sample_rate, hop_length=hop_length
    )
    if onset_env.size == 0 or not np.any(onset_env > 0):
        return 0.0

    tempo, _ = librosa.beat.beat_track(
        onset_envelope=onset_env,
        sr=sample_rate,
        hop_length=hop_length,
        start_bpm=start_bpm,
    )
    bpm = float(np.atleast_1d(tempo)[0])
    return bpm if np.isfinite(bpm) else 0.0
