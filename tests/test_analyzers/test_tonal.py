"""Tests for mel filter bank, MFCC, chroma, tonnetz and key estimation."""

import numpy as np
import pytest

from audiolab.analyzers.spectral import magnitude_spectrum
from audiolab.analyzers.tonal import (
    chroma_vector,
    dct_ii,
    estimate_key,
    mel_filter_bank,
    mfcc,
    tonnetz,
)


class TestMelFilterBank:
    def test_shape(self):
        assert mel_filter_bank(1024, 44100).shape == (26, 1024)
        assert mel_filter_bank(512, 22050, n_filters=40).shape == (40, 512)

    def test_weights_are_triangular(self):
        filters = mel_filter_bank(1024, 44100)
        assert filters.min() >= 0.0
        assert filters.max() <= 1.0
        # filters are ordered by centre frequency
        peaks = filters.argmax(axis=1)
        assert np.all(np.diff(peaks) >= 0)

    def test_tiny_spectrum_does_not_fail(self):
        assert mel_filter_bank(2, 44100).shape == (26, 2)

    def test_default_frame_is_twice_the_bins(self):
        np.testing.assert_array_equal(
            mel_filter_bank(150, 8000), mel_filter_bank(150, 8000, frame_size=300)
        )

    def test_edges_scale_with_frame_size(self):
        # Doubling the frame doubles the bin index of each mel edge
        short = mel_filter_bank(512, 8000).argmax(axis=1)[0]
        long = mel_filter_bank(512, 8000, frame_size=2048).argmax(axis=1)[0]
        assert abs(long - 2 * short) <= 1


class TestDctII:
    def test_constant_input(self):
        coefficients = dct_ii(np.ones(8), 4)
        assert coefficients[0] == pytest.approx(8.0)
        np.testing.assert_allclose(coefficients[1:], 0.0, atol=1e-12)

    def test_more_coefficients_than_inputs(self):
        assert dct_ii(np.ones(4), 10).shape == (10,)


class TestMfcc:
    def test_length_matches_request(self, sine_440, sample_rate):
        spectrum = magnitude_spectrum(sine_440[:2048])
        assert len(mfcc(spectrum, sample_rate)) == 13
        assert len(mfcc(spectrum, sample_rate, n_coefficients=20)) == 20
        assert len(mfcc(spectrum, sample_rate, n_coefficients=40)) == 40

    def test_silence_is_log_epsilon(self, sample_rate):
        coefficients = mfcc(np.zeros(1024), sample_rate)
        assert coefficients[0] == pytest.approx(26 * np.log(1e-10))
        np.testing.assert_allclose(coefficients[1:], 0.0, atol=1e-6)

    def test_finite_for_noise(self, white_noise, sample_rate):
        coefficients = mfcc(magnitude_spectrum(white_noise[:2048]), sample_rate)
        assert np.all(np.isfinite(coefficients))


class TestChromaVector:
    def test_sums_to_one(self, sine_440, sample_rate):
        chroma = chroma_vector(magnitude_spectrum(sine_440[:2048]), sample_rate)
        assert chroma.shape == (12,)
        assert chroma.sum() == pytest.approx(1.0)

    def test_a440_peaks_at_a(self, sine_440, sample_rate):
        chroma = chroma_vector(magnitude_spectrum(sine_440[:2048]), sample_rate)
        assert int(np.argmax(chroma)) == 9

    def test_silence_is_all_zero(self, sample_rate):
        chroma = chroma_vector(np.zeros(1024), sample_rate)
        np.testing.assert_array_equal(chroma, np.zeros(12))

    def test_energy_outside_range_is_ignored(self, sample_rate):
        spectrum = np.zeros(1024)
        spectrum[1] = 5.0    # ~21.5 Hz, below 80 Hz
        spectrum[900] = 5.0  # ~19.4 kHz, above 8 kHz
        np.testing.assert_array_equal(chroma_vector(spectrum, sample_rate), np.zeros(12))

    def test_dc_bin_is_ignored(self, sample_rate):
        spectrum = np.zeros(1024)
        spectrum[0] = 10.0
        np.testing.assert_array_equal(chroma_vector(spectrum, sample_rate), np.zeros(12))

    def test_odd_frame_bin_spacing(self):
        # Bin 34 of a 301-sample frame is 903.7 Hz (A); of a 300-sample frame, 906.7 Hz (A#)
        spectrum = np.zeros(150)
        spectrum[34] = 1.0
        assert int(np.argmax(chroma_vector(spectrum, 8000, frame_size=301))) == 9
        assert int(np.argmax(chroma_vector(spectrum, 8000))) == 10

    def test_reference_tuning_shifts_pitch_class(self, sample_rate):
        spectrum = np.zeros(1024)
        spectrum[20] = 1.0  # ~430.7 Hz, nearest A at 440 Hz tuning
        assert int(np.argmax(chroma_vector(spectrum, sample_rate))) == 9
        # with A4 = 456 Hz the same bin is more than half a semitone flat of A
        tuned = chroma_vector(spectrum, sample_rate, reference_hz=456.0)
        assert int(np.argmax(tuned)) == 8


class TestTonnetz:
    def test_pure_c(self):
        chroma = np.zeros(12)
        chroma[0] = 1.0
        np.testing.assert_allclose(tonnetz(chroma), [1.0, 0.0, 1.0], atol=1e-12)

    def test_pure_e(self):
        chroma = np.zeros(12)
        chroma[4] = 1.0
        np.testing.assert_allclose(
            tonnetz(chroma), [-0.5, np.sqrt(3) / 2, -0.5], atol=1e-12
        )

    def test_length(self):
        assert tonnetz(np.full(12, 1 / 12)).shape == (3,)


class TestEstimateKey:
    def test_strongest_bin(self):
        chroma = np.zeros(12)
        chroma[7] = 1.0
        assert estimate_key(chroma) == 'G'

    def test_ties_pick_first(self):
        assert estimate_key(np.zeros(12)) == 'C'

    def test_wrong_length_raises(self):
        with pytest.raises(ValueError):
            estimate_key(np.zeros(11))
