"""
Feature extractor for the audiolab engine.

Computes the full descriptor record of one sample buffer: a single
magnitude spectrum of the leading frame feeds the spectral, cepstral,
tonal and band-energy descriptors; temporal descriptors and pitch use the
whole buffer.
"""

from typing import Any, Dict, Mapping, Optional, Union

import numpy as np

from audiolab.analyzers.harmonic.pitch import compute_harmonic_features
from audiolab.analyzers.spectral.descriptors import (
    band_energy_ratio,
    compute_spectral_features,
)
from audiolab.analyzers.spectral.transform import magnitude_spectrum
from audiolab.analyzers.temporal.descriptors import compute_temporal_features
from audiolab.analyzers.tonal.cepstral import mfcc
from audiolab.analyzers.tonal.chroma import chroma_vector, tonnetz
from audiolab.core.analyzer_base import BaseAnalyzer
from audiolab.core.models import (
    FeatureRecord,
    SampleBuffer,
    finite_or_zero,
)
from audiolab.utils.errors import InvalidBufferError

DEFAULT_FRAME_SIZE = 2048

# Frequency bands (Hz) reported in FeatureRecord.band_energy
ENERGY_BANDS: Dict[str, tuple] = {
    'low': (0.0, 200.0),
    'high': (5000.0, 20000.0),
}


class FeatureExtractor(BaseAnalyzer[FeatureRecord]):
    """
    Deterministic single-frame feature extraction.

    Holds only configuration; the same extractor can be shared across
    threads.
    """

    def __init__(
        self,
        frame_size: int = DEFAULT_FRAME_SIZE,
        transform: str = "fft",
        rolloff_threshold: float = 0.85,
        n_mfcc: int = 13,
        n_mel_filters: int = 26,
        log_epsilon: float = 1e-10,
        pitch_min_hz: float = 80.0,
        pitch_max_hz: float = 800.0,
        pitch_peak_threshold: float = 0.9,
        harmonic_tolerance_hz: float = 20.0,
        chroma_min_hz: float = 80.0,
        chroma_max_hz: float = 8000.0,
    ):
        """
        Initialize feature extractor.

        Args:
            frame_size: Samples taken from the start of the buffer for the spectrum
            transform: "fft" or "dft" (direct O(N^2) reference transform)
            rolloff_threshold: Energy fraction for spectral rolloff
            n_mfcc: Number of cepstral coefficients
            n_mel_filters: Number of triangular mel filters
            log_epsilon: Offset added before the log of mel energies
            pitch_min_hz: Lowest fundamental searched
            pitch_max_hz: Highest fundamental searched
            pitch_peak_threshold: Fraction of the best autocorrelation a
                shorter period must reach to be chosen
            harmonic_tolerance_hz: Distance from a harmonic counted as harmonic energy
            chroma_min_hz: Lower bound of bins folded into chroma
            chroma_max_hz: Upper bound of bins folded into chroma
        """
        super().__init__("feature_extractor", "1.0.0")
        if frame_size < 1:
            raise ValueError(f"frame_size must be positive, got {frame_size}")
        self.frame_size = int(frame_size)
        self.transform = transform
        self.rolloff_threshold = rolloff_threshold
        self.n_mfcc = int(n_mfcc)
        self.n_mel_filters = int(n_mel_filters)
        self.log_epsilon = log_epsilon
        self.pitch_min_hz = pitch_min_hz
        self.pitch_max_hz = pitch_max_hz
        self.pitch_peak_threshold = pitch_peak_threshold
        self.harmonic_tolerance_hz = harmonic_tolerance_hz
        self.chroma_min_hz = chroma_min_hz
        self.chroma_max_hz = chroma_max_hz

    def _analyze_impl(self, buffer: SampleBuffer) -> FeatureRecord:
        """
        Extract every descriptor from one buffer.

        Args:
            buffer: SampleBuffer to analyze

        Returns:
            FeatureRecord: All descriptors, NaN/inf coerced to 0.0
        """
        samples = buffer.samples
        sr = buffer.sample_rate

        # One transform per call, shared by all spectrum-based descriptors
        frame = buffer.frame(self.frame_size)
        spectrum = magnitude_spectrum(frame, self.transform)
        # Bin spacing follows the analysed frame, which may be odd or short
        frame_len = len(frame)

        spectral = compute_spectral_features(
            spectrum, sr, self.rolloff_threshold, frame_size=frame_len
        )
        temporal = compute_temporal_features(samples, sr)
        harmonic = compute_harmonic_features(
            samples,
            spectrum,
            sr,
            min_hz=self.pitch_min_hz,
            max_hz=self.pitch_max_hz,
            peak_threshold=self.pitch_peak_threshold,
            tolerance_hz=self.harmonic_tolerance_hz,
            frame_size=frame_len,
        )

        coefficients = mfcc(
            spectrum,
            sr,
            n_coefficients=self.n_mfcc,
            n_filters=self.n_mel_filters,
            epsilon=self.log_epsilon,
            frame_size=frame_len,
        )
        chroma = chroma_vector(
            spectrum,
            sr,
            min_hz=self.chroma_min_hz,
            max_hz=self.chroma_max_hz,
            frame_size=frame_len,
        )

        if temporal.rms == 0.0:
            self.logger.warning("Buffer is silent; descriptors fall back to neutral values")

        return FeatureRecord(
            spectral_features=spectral,
            temporal_features=temporal,
            harmonic_features=harmonic,
            mfcc=_finite_tuple(coefficients),
            chroma=_finite_tuple(chroma),
            tonnetz=_finite_tuple(tonnetz(chroma)),
            band_energy={
                name: finite_or_zero(band_energy_ratio(spectrum, sr, low, high, frame_len))
                for name, (low, high) in ENERGY_BANDS.items()
            },
        )


def _finite_tuple(values: np.ndarray) -> tuple:
    return tuple(finite_or_zero(v) for v in values)


def to_sample_buffer(source: Union[SampleBuffer, Mapping[str, Any], None]) -> SampleBuffer:
    """
    Coerce caller input into a SampleBuffer.

    Accepts a SampleBuffer or a ``{"channel_data", "sample_rate"}`` mapping
    (first channel used).

    Raises:
        InvalidBufferError: For None or anything that is not a valid buffer
    """
    if source is None:
        raise InvalidBufferError(
            "No audio supplied: expected a SampleBuffer or channel data mapping",
            reason="source is None",
        )
    if isinstance(source, SampleBuffer):
        return source
    if isinstance(source, Mapping):
        return SampleBuffer.from_mapping(source)
    raise InvalidBufferError(
        f"Unsupported audio source type: {type(source).__name__}",
        reason="source_type",
    )


def create_feature_extractor(config: Optional[Dict[str, Any]] = None) -> FeatureExtractor:
    """
    Factory function to create FeatureExtractor with configuration.

    Args:
        config: Full configuration dict; only the ``analysis`` section is read

    Returns:
        FeatureExtractor: Configured extractor
    """
    if config is None:
        config = {}

    analysis = config.get('analysis', {})

    return FeatureExtractor(
        frame_size=analysis.get('frame_size', DEFAULT_FRAME_SIZE),
        transform=analysis.get('transform', "fft"),
        rolloff_threshold=analysis.get('rolloff_threshold', 0.85),
        n_mfcc=analysis.get('n_mfcc', 13),
        n_mel_filters=analysis.get('n_mel_filters', 26),
        log_epsilon=analysis.get('log_epsilon', 1e-10),
        pitch_min_hz=analysis.get('pitch_min_hz', 80.0),
        pitch_max_hz=analysis.get('pitch_max_hz', 800.0),
        pitch_peak_threshold=analysis.get('pitch_peak_threshold', 0.9),
        harmonic_tolerance_hz=analysis.get('harmonic_tolerance_hz', 20.0),
        chroma_min_hz=analysis.get('chroma_min_hz', 80.0),
        chroma_max_hz=analysis.get('chroma_max_hz', 8000.0),
    )


def extract_features(
    source: Union[SampleBuffer, Mapping[str, Any], None],
    config: Optional[Dict[str, Any]] = None,
) -> FeatureRecord:
    """
    Extract the full FeatureRecord of decoded audio.

    Args:
        source: SampleBuffer or ``{"channel_data": ..., "sample_rate": ...}``
        config: Optional configuration dict (``analysis`` section)

    Returns:
        FeatureRecord: Descriptor record

    Raises:
        InvalidBufferError: Missing, empty, or malformed input
        AnalysisError: Unexpected failure during extraction
    """
    buffer = to_sample_buffer(source)
    return create_feature_extractor(config).analyze(buffer)
