"""
Buffer processing helpers: normalization, fades, waveform display data
and time conversions.

All functions return new arrays and never modify their input. Functions
taking ``samples`` accept a 1-D mono array or a 2-D (channels, samples)
array.
"""

from typing import Sequence, Union

import numpy as np

from audiolab.core.models import WaveformData

ArrayLike = Union[np.ndarray, Sequence[float], Sequence[Sequence[float]]]


def normalize(samples: ArrayLike) -> np.ndarray:
    """
    Scale each channel so its peak absolute value is 1.0.

    Silent channels are returned unchanged.
    """
    data = np.array(samples, dtype=np.float64)
    if data.size == 0:
        return data
    peak = np.max(np.abs(data), axis=-1, keepdims=True)
    return data / np.where(peak > 0, peak, 1.0)


def apply_fade(
    samples: ArrayLike,
    sample_rate: int,
    fade_in: float = 0.0,
    fade_out: float = 0.0,
) -> np.ndarray:
    """
    Apply linear fade-in and fade-out gain ramps.

    Args:
        samples: Mono or (channels, samples) audio
        sample_rate: Sample rate in Hz
        fade_in: Fade-in duration in seconds
        fade_out: Fade-out duration in seconds

    Returns:
        np.ndarray: Faded copy. Gain ramps from 0 at the first sample and
        reaches ``1 / fade_out_samples`` at the last one.
    """
    data = np.array(samples, dtype=np.float64)
    length = data.shape[-1] if data.ndim else 0
    fade_in_samples = time_to_samples(fade_in, sample_rate)
    fade_out_samples = time_to_samples(fade_out, sample_rate)

    index = np.arange(length, dtype=np.float64)
    gain = np.ones(length)
    if fade_in_samples > 0:
        ramp = index < fade_in_samples
        gain[ramp] *= index[ramp] / fade_in_samples
    if fade_out_samples > 0:
        ramp = index >= length - fade_out_samples
        gain[ramp] *= (length - index[ramp]) / fade_out_samples

    return data * gain


def waveform_peaks(
    channels: ArrayLike, sample_rate: int, n_points: int = 1000
) -> WaveformData:
    """
    Reduce audio to ``n_points`` peak values per channel for display.

    Each point is the largest absolute sample in a window of
    ``len // n_points`` samples; trailing samples that do not fill a
    window are ignored. Buffers shorter than ``n_points`` give all zeros.
    """
    data = np.array(channels, dtype=np.float64)
    if data.ndim == 1:
        data = data[np.newaxis, :]

    length = data.shape[1]
    window = length // n_points

    peaks = []
    for channel in data:
        if window == 0:
            peaks.append(np.zeros(n_points))
            continue
        frames = np.abs(channel[:window * n_points]).reshape(n_points, window)
        peaks.append(frames.max(axis=1))

    return WaveformData(
        peaks=tuple(peaks),
        duration=samples_to_time(length, sample_rate),
        sample_rate=sample_rate,
        channels=data.shape[0],
        length=length,
    )


def time_to_samples(time: float, sample_rate: int) -> int:
    """Seconds to a whole number of samples (rounded down)."""
    return int(np.floor(time * sample_rate))


def samples_to_time(samples: int, sample_rate: int) -> float:
    """Sample count to seconds."""
    return samples / sample_rate


def format_time(seconds: float) -> str:
    """Format seconds as ``MM:SS.mmm``."""
    minutes = int(seconds // 60)
    secs = int(seconds % 60)
    milliseconds = int((seconds % 1) * 1000)
    return f"{minutes:02d}:{secs:02d}.{milliseconds:03d}"
