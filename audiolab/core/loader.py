"""
Audio loader for the audiolab engine.

Decodes audio files into a SampleBuffer. The analysis core only ever
sees decoded samples; this is the adapter for callers starting from a
file on disk.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Tuple, Union

import librosa
import numpy as np
import soundfile as sf

from audiolab.core.models import SampleBuffer
from audiolab.utils.errors import (
    AudioLoadError,
    FileTooLargeError,
    InvalidBufferError,
    UnsupportedFormatError,
)


# Constants
SUPPORTED_FORMATS: Tuple[str, ...] = ('.wav', '.aiff', '.aif', '.flac', '.ogg', '.mp3')

MAX_FILE_SIZE: int = 524288000  # 500 MB

logger = logging.getLogger(__name__)


class AudioLoader:
    """
    Loads audio files as SampleBuffer instances (first channel).

    Thread-safe and stateless - can be used concurrently.
    """

    def __init__(
        self,
        target_sr: Optional[int] = None,
        max_file_size: int = MAX_FILE_SIZE,
        supported_formats: Iterable[str] = SUPPORTED_FORMATS,
    ):
        """
        Initialize loader with configuration.

        Args:
            target_sr: Resample to this rate; None keeps the file's native rate
            max_file_size: Maximum file size in bytes
            supported_formats: Accepted file suffixes (with leading dot)
        """
        self.target_sr = target_sr
        self.max_file_size = max_file_size
        self.supported_suffixes = {s.lower() for s in supported_formats}

    def load(self, file_path: Union[str, Path]) -> SampleBuffer:
        """
        Load an audio file.

        Args:
            file_path: Path to audio file

        Returns:
            SampleBuffer: First channel of the decoded audio

        Raises:
            FileNotFoundError: File doesn't exist
            UnsupportedFormatError: File format not supported
            FileTooLargeError: File exceeds size limit
            AudioLoadError: Audio data is invalid
        """
        file_path = Path(file_path)

        self._validate_file(file_path)
        self._log_metadata(file_path)

        audio_data, sample_rate = self._load_audio_data(file_path)
        audio_data = self._validate_audio_data(audio_data, file_path)

        try:
            return SampleBuffer.from_channels(audio_data, int(sample_rate))
        except InvalidBufferError as e:
            raise AudioLoadError(
                f"Decoded audio is not usable: {e}", file_path=str(file_path)
            ) from e

    def _validate_file(self, file_path: Path) -> None:
        """Validate file exists, has supported format, and is within size limit."""
        if not file_path.exists():
            raise FileNotFoundError(f"Audio file not found: {file_path}")

        suffix = file_path.suffix.lower()
        if suffix not in self.supported_suffixes:
            raise UnsupportedFormatError(
                f"Format {suffix} not supported. "
                f"Supported formats: {', '.join(sorted(self.supported_suffixes))}",
                format=suffix
            )

        file_size = file_path.stat().st_size
        if file_size > self.max_file_size:
            raise FileTooLargeError(
                f"File too large: {file_size / 1024 / 1024:.1f} MB. "
                f"Maximum: {self.max_file_size / 1024 / 1024:.1f} MB",
                file_size=file_size,
                max_size=self.max_file_size
            )

    def _validate_audio_data(
        self, audio_data: np.ndarray, file_path: Path
    ) -> np.ndarray:
        """Validate audio data integrity and level."""
        if audio_data.size == 0:
            raise AudioLoadError(
                f"Audio file is empty: {file_path}", file_path=str(file_path)
            )

        rms = np.sqrt(np.mean(audio_data ** 2))
        if rms < 1e-6:
            logger.warning(f"Audio appears to be silent: {file_path}")

        max_abs = np.max(np.abs(audio_data))
        if max_abs > 1.0:
            logger.warning(
                f"Audio contains clipping (max: {max_abs:.2f}), normalizing: {file_path}"
            )
            audio_data = audio_data / max_abs

        return audio_data

    def _log_metadata(self, file_path: Path) -> None:
        """Log the file's native format before decoding."""
        try:
            info = sf.info(str(file_path))
        except RuntimeError as e:
            # soundfile cannot parse some compressed formats; librosa falls back to audioread
            logger.debug(f"Could not read metadata with soundfile: {e}")
            return

        logger.info(
            f"Loading audio: {info.samplerate} Hz, "
            f"{info.channels} ch, {info.subtype}"
        )

    def _load_audio_data(self, file_path: Path) -> Tuple[np.ndarray, int]:
        """Decode all channels, resampling only when a target rate is set."""
        try:
            audio_data, sample_rate = librosa.load(
                str(file_path),
                sr=self.target_sr,
                mono=False,
                dtype=np.float32
            )
        except Exception as e:
            raise AudioLoadError(
                f"Failed to load audio data from {file_path}: {e}",
                file_path=str(file_path)
            ) from e

        return audio_data, sample_rate


def create_audio_loader(config: Optional[Dict[str, Any]] = None) -> AudioLoader:
    """
    Factory function to create AudioLoader with configuration.

    Args:
        config: Optional ``audio`` configuration section

    Returns:
        AudioLoader: Configured loader instance
    """
    if config is None:
        config = {}

    return AudioLoader(
        target_sr=config.get('target_sample_rate'),
        max_file_size=config.get('max_file_size', MAX_FILE_SIZE),
        supported_formats=config.get('supported_formats', SUPPORTED_FORMATS),
    )
