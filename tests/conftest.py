"""Shared fixtures for audiolab tests."""

import logging

import numpy as np
import pytest

from audiolab.core.models import SampleBuffer
from audiolab.utils.logging import ROOT_LOGGER_NAME


SAMPLE_RATE = 44100
FRAME_SIZE = 2048

# Frequency of spectrum bin 20 for a 2048-sample frame at 44.1 kHz.
# A sine at exactly this frequency completes whole cycles within the frame,
# so its energy lands in a single bin.
BIN_ALIGNED_HZ = 20 * SAMPLE_RATE / FRAME_SIZE


def _sine(frequency: float, amplitude: float = 0.5, duration: float = 1.0) -> np.ndarray:
    t = np.arange(int(SAMPLE_RATE * duration)) / SAMPLE_RATE
    return amplitude * np.sin(2 * np.pi * frequency * t)


# ---------------------------------------------------------------------------
# Raw sample arrays
# ---------------------------------------------------------------------------


@pytest.fixture
def sample_rate():
    return SAMPLE_RATE


@pytest.fixture
def sine_440():
    """1 s, 440 Hz, amplitude 0.5."""
    return _sine(440.0)


@pytest.fixture
def bin_aligned_sine():
    """1 s sine centred exactly on spectrum bin 20 (~430.66 Hz)."""
    return _sine(BIN_ALIGNED_HZ)


@pytest.fixture
def white_noise():
    """1 s of seeded uniform noise in [-1, 1)."""
    return np.random.RandomState(0).uniform(-1.0, 1.0, SAMPLE_RATE)


@pytest.fixture
def silence():
    return np.zeros(SAMPLE_RATE)


# ---------------------------------------------------------------------------
# Buffers
# ---------------------------------------------------------------------------


@pytest.fixture
def sine_buffer(sine_440):
    return SampleBuffer(sine_440, SAMPLE_RATE)


@pytest.fixture
def aligned_buffer(bin_aligned_sine):
    return SampleBuffer(bin_aligned_sine, SAMPLE_RATE)


@pytest.fixture
def noise_buffer(white_noise):
    return SampleBuffer(white_noise, SAMPLE_RATE)


@pytest.fixture
def silent_buffer(silence):
    return SampleBuffer(silence, SAMPLE_RATE)


@pytest.fixture(autouse=True)
def reset_audiolab_logger():
    """Undo any setup_logging() call so caplog keeps working across tests."""
    yield
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in logger.handlers:
        handler.close()
    logger.handlers = []
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
