"""
Core data models for the audiolab analysis engine.

Immutable value records for decoded audio and the descriptors derived
from it. Records are created once per analysis pass and never mutated.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Sequence, Tuple

import numpy as np

from audiolab.utils.errors import InvalidBufferError


PITCH_CLASSES: Tuple[str, ...] = (
    'C', 'C#', 'D', 'D#', 'E', 'F', 'F#', 'G', 'G#', 'A', 'A#', 'B'
)


@dataclass(frozen=True)
class SampleBuffer:
    """
    A single channel of decoded PCM audio.

    Samples are stored as a read-only float64 copy so analysis routines
    can share the buffer without defensive copies.
    """

    samples: np.ndarray  # Shape: (n_samples,), approx. [-1, 1]
    sample_rate: int  # Hz

    def __post_init__(self) -> None:
        """Validate and freeze the sample data."""
        if self.samples is None:
            raise InvalidBufferError(
                "Sample data is missing", reason="samples is None"
            )
        try:
            data = np.array(self.samples, dtype=np.float64)
        except (TypeError, ValueError) as e:
            raise InvalidBufferError(
                f"Sample data is not numeric: {e}", reason="non_numeric"
            ) from e

        if data.ndim != 1:
            raise InvalidBufferError(
                f"Expected a single channel (1-D) buffer, got shape {data.shape}",
                reason="not_mono",
            )
        if data.size == 0:
            raise InvalidBufferError(
                "Sample buffer is empty", reason="empty"
            )
        if not np.all(np.isfinite(data)):
            raise InvalidBufferError(
                "Sample buffer contains NaN or infinite values",
                reason="non_finite",
            )

        if isinstance(self.sample_rate, bool) or not isinstance(
            self.sample_rate, (int, np.integer)
        ):
            raise InvalidBufferError(
                f"Sample rate must be an integer, got {self.sample_rate!r}",
                reason="sample_rate_type",
            )
        if self.sample_rate <= 0:
            raise InvalidBufferError(
                f"Sample rate must be positive, got {self.sample_rate}",
                reason="sample_rate_range",
            )

        data.setflags(write=False)
        object.__setattr__(self, 'samples', data)
        object.__setattr__(self, 'sample_rate', int(self.sample_rate))

    @classmethod
    def from_channels(
        cls, channel_data: Any, sample_rate: int
    ) -> "SampleBuffer":
        """
        Build a buffer from multi-channel data by taking the first channel.

        Args:
            channel_data: 2-D array (channels, samples), a list of
                per-channel sequences, or a 1-D mono sequence
            sample_rate: Sample rate in Hz

        Returns:
            SampleBuffer: First channel of ``channel_data``
        """
        if channel_data is None:
            raise InvalidBufferError(
                "Channel data is missing", reason="channel_data is None"
            )

        if isinstance(channel_data, np.ndarray):
            if channel_data.ndim == 2:
                if channel_data.shape[0] == 0:
                    raise InvalidBufferError(
                        "Channel data has no channels", reason="no_channels"
                    )
                return cls(channel_data[0], sample_rate)
            return cls(channel_data, sample_rate)

        if isinstance(channel_data, Sequence) and not isinstance(channel_data, (str, bytes)):
            if len(channel_data) == 0:
                raise InvalidBufferError(
                    "Channel data has no channels", reason="no_channels"
                )
            first = channel_data[0]
            if isinstance(first, (Sequence, np.ndarray)) and not isinstance(first, (str, bytes)):
                return cls(np.asarray(first), sample_rate)
            return cls(np.asarray(channel_data), sample_rate)

        raise InvalidBufferError(
            f"Unsupported channel data type: {type(channel_data).__name__}",
            reason="channel_data_type",
        )

    @classmethod
    def from_mapping(cls, source: Mapping[str, Any]) -> "SampleBuffer":
        """
        Build a buffer from ``{"channel_data": ..., "sample_rate": ...}``.

        ``channelData``/``sampleRate`` keys are accepted as well so payloads
        produced by a browser decoder can be passed through unchanged.
        """
        channel_data = source.get('channel_data', source.get('channelData'))
        sample_rate = source.get('sample_rate', source.get('sampleRate'))
        if sample_rate is None:
            raise InvalidBufferError(
                "Sample rate is missing", reason="sample_rate is None"
            )
        return cls.from_channels(channel_data, sample_rate)

    def __len__(self) -> int:
        return int(self.samples.shape[0])

    @property
    def duration(self) -> float:
        """Duration in seconds."""
        return len(self) / self.sample_rate

    @property
    def nyquist(self) -> float:
        """Highest representable frequency in Hz."""
        return self.sample_rate / 2.0

    def frame(self, frame_size: int) -> np.ndarray:
        """First ``frame_size`` samples (fewer if the buffer is shorter)."""
        return self.samples[:frame_size]


@dataclass(frozen=True)
class SpectralFeatures:
    """Shape descriptors of one magnitude spectrum."""

    centroid: float  # Hz
    bandwidth: float  # Hz
    rolloff: float  # Hz
    flatness: float  # [0.0 (tonal), 1.0 (noise-like)]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            'centroid': self.centroid,
            'bandwidth': self.bandwidth,
            'rolloff': self.rolloff,
            'flatness': self.flatness,
        }


@dataclass(frozen=True)
class TemporalFeatures:
    """Whole-buffer time-domain descriptors."""

    zcr: float  # zero crossings per second
    energy: float  # mean squared amplitude
    rms: float

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {'zcr': self.zcr, 'energy': self.energy, 'rms': self.rms}


@dataclass(frozen=True)
class HarmonicFeatures:
    """Pitch and harmonic-energy descriptors."""

    harmonicity: float  # [0.0, 1.0]
    inharmonicity: float  # 1.0 - harmonicity
    pitch: float  # Hz, within the pitch search range

    def __post_init__(self) -> None:
        """Validate fields."""
        validate_unit_interval(self.harmonicity, 'harmonicity')
        validate_unit_interval(self.inharmonicity, 'inharmonicity')

    @classmethod
    def from_harmonicity(cls, harmonicity: float, pitch: float) -> "HarmonicFeatures":
        """Build the record with inharmonicity as the exact complement."""
        return cls(
            harmonicity=harmonicity,
            inharmonicity=1.0 - harmonicity,
            pitch=pitch,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            'harmonicity': self.harmonicity,
            'inharmonicity': self.inharmonicity,
            'pitch': self.pitch,
        }


@dataclass(frozen=True)
class FeatureRecord:
    """Composite descriptor record for one analyzed audio buffer."""

    spectral_features: SpectralFeatures
    temporal_features: TemporalFeatures
    harmonic_features: HarmonicFeatures
    mfcc: Tuple[float, ...]
    chroma: Tuple[float, ...]  # 12 pitch classes, C..B
    tonnetz: Tuple[float, ...]  # major third, minor third, fifth
    band_energy: Mapping[str, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate fields and freeze the band energy mapping."""
        if len(self.chroma) != len(PITCH_CLASSES):
            raise ValueError(
                f"Chroma must have {len(PITCH_CLASSES)} elements, got {len(self.chroma)}"
            )
        object.__setattr__(self, 'band_energy', MappingProxyType(dict(self.band_energy)))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'spectral_features': self.spectral_features.to_dict(),
            'temporal_features': self.temporal_features.to_dict(),
            'harmonic_features': self.harmonic_features.to_dict(),
            'mfcc': list(self.mfcc),
            'chroma': list(self.chroma),
            'tonnetz': list(self.tonnetz),
            'band_energy': dict(self.band_energy),
        }

    def to_json(self, indent: int = 2) -> str:
        """Export as JSON string."""
        return json.dumps(self.to_dict(), indent=indent)


@dataclass(frozen=True)
class AudioOverview:
    """Quick summary of an audio buffer for display."""

    rms: float
    peak: float
    spectral_centroid: float  # Hz
    spectral_rolloff: float  # Hz
    zero_crossing_rate: float  # crossings per second
    mfcc: Tuple[float, ...]
    chroma: Tuple[float, ...]
    tempo: float  # BPM, 0.0 when not detectable
    key: str  # pitch class of the dominant chroma bin
    loudness: float  # dB relative to full scale, RMS based

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            'rms': self.rms,
            'peak': self.peak,
            'spectral_centroid': self.spectral_centroid,
            'spectral_rolloff': self.spectral_rolloff,
            'zero_crossing_rate': self.zero_crossing_rate,
            'mfcc': list(self.mfcc),
            'chroma': list(self.chroma),
            'tempo': self.tempo,
            'key': self.key,
            'loudness': self.loudness,
        }


@dataclass(frozen=True)
class WaveformData:
    """Downsampled peak envelope per channel for waveform display."""

    peaks: Tuple[np.ndarray, ...]  # one array of n_points per channel
    duration: float  # seconds
    sample_rate: int
    channels: int
    length: int  # samples per channel


# Validation helpers

def validate_unit_interval(value: float, name: str = 'value') -> None:
    """Validate a score lies in [0.0, 1.0]."""
    if not (0.0 <= value <= 1.0):
        raise ValueError(f"{name} must be in [0.0, 1.0], got {value}")


def finite_or_zero(value: float) -> float:
    """Coerce NaN/inf to 0.0 and numpy scalars to float."""
    value = float(value)
    return value if math.isfinite(value) else 0.0
