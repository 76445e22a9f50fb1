"""
Overview analyzer for the audiolab engine.

Produces the quick summary shown next to a loaded sample: level, a few
spectral descriptors from the first frame, tempo, and a key guess.
"""

from typing import Any, Dict, Optional

import numpy as np

from audiolab.analyzers.spectral.descriptors import spectral_centroid, spectral_rolloff
from audiolab.analyzers.spectral.transform import magnitude_spectrum
from audiolab.analyzers.temporal.descriptors import signal_energy, zero_crossing_rate
from audiolab.analyzers.temporal.tempo import estimate_tempo
from audiolab.analyzers.tonal.cepstral import mfcc
from audiolab.analyzers.tonal.chroma import chroma_vector, estimate_key
from audiolab.core.analyzer_base import BaseAnalyzer
from audiolab.core.models import AudioOverview, SampleBuffer, finite_or_zero

LOUDNESS_EPSILON = 1e-10


def rms_to_db(rms: float) -> float:
    """RMS level in dB relative to full scale (not true LUFS)."""
    return float(20 * np.log10(rms + LOUDNESS_EPSILON))


class AudioOverviewAnalyzer(BaseAnalyzer[AudioOverview]):
    """
    Quick whole-buffer summary.

    Level and zero-crossing rate use every sample; spectral descriptors,
    MFCC and chroma use the first ``frame_size`` samples.
    """

    def __init__(
        self,
        frame_size: int = 2048,
        transform: str = "fft",
        n_mfcc: int = 13,
        estimate_tempo_enabled: bool = True,
    ):
        super().__init__("overview", "1.0.0")
        self.frame_size = frame_size
        self.transform = transform
        self.n_mfcc = n_mfcc
        self.estimate_tempo_enabled = estimate_tempo_enabled

    def _analyze_impl(self, buffer: SampleBuffer) -> AudioOverview:
        samples = buffer.samples
        sr = buffer.sample_rate

        rms = float(np.sqrt(signal_energy(samples)))
        peak = float(np.max(np.abs(samples)))
        if peak > 1.0:
            self.logger.warning(f"Buffer exceeds full scale (peak {peak:.2f})")

        frame = buffer.frame(self.frame_size)
        n = len(frame)
        spectrum = magnitude_spectrum(frame, self.transform)
        chroma = chroma_vector(spectrum, sr, frame_size=n)

        tempo = 0.0
        if self.estimate_tempo_enabled:
            tempo = estimate_tempo(samples, sr)

        return AudioOverview(
            rms=finite_or_zero(rms),
            peak=finite_or_zero(peak),
            spectral_centroid=finite_or_zero(spectral_centroid(spectrum, sr, n)),
            spectral_rolloff=finite_or_zero(spectral_rolloff(spectrum, sr, frame_size=n)),
            zero_crossing_rate=finite_or_zero(zero_crossing_rate(samples, sr)),
            mfcc=tuple(finite_or_zero(c) for c in mfcc(spectrum, sr, self.n_mfcc, frame_size=n)),
            chroma=tuple(float(c) for c in chroma),
            tempo=finite_or_zero(tempo),
            key=estimate_key(chroma),
            loudness=rms_to_db(rms),
        )


def create_overview_analyzer(config: Optional[Dict[str, Any]] = None) -> AudioOverviewAnalyzer:
    """
    Factory function to create AudioOverviewAnalyzer.

    Args:
        config: Full configuration dict; reads the ``analysis`` section

    Returns:
        AudioOverviewAnalyzer: Configured analyzer
    """
    if config is None:
        config = {}

    analysis = config.get('analysis', {})

    return AudioOverviewAnalyzer(
        frame_size=analysis.get('frame_size', 2048),
        transform=analysis.get('transform', "fft"),
        n_mfcc=analysis.get('n_mfcc', 13),
        estimate_tempo_enabled=analysis.get('estimate_tempo', True),
    )
