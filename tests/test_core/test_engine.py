"""Tests for AnalysisEngine orchestration."""

from unittest.mock import MagicMock

import pytest

from audiolab.analyzers.overview import AudioOverviewAnalyzer
from audiolab.core.engine import (
    FAILURE_MESSAGE,
    AnalysisEngine,
    AnalysisReport,
    create_analysis_engine,
)
from audiolab.core.features import FeatureExtractor
from audiolab.plugins.matcher import PluginMatcher
from audiolab.utils.config import get_default_config
from audiolab.utils.errors import AnalysisError, AudioLoadError


@pytest.fixture
def mock_loader(sine_buffer):
    loader = MagicMock()
    loader.load.return_value = sine_buffer
    return loader


@pytest.fixture
def engine(mock_loader):
    engine = AnalysisEngine(
        loader=mock_loader,
        extractor=FeatureExtractor(),
        matcher=PluginMatcher(),
        max_workers=2,
    )
    yield engine
    engine.shutdown()


class TestAnalyzeFile:
    def test_report(self, engine, mock_loader):
        report = engine.analyze_file("kick.wav")
        assert isinstance(report, AnalysisReport)
        assert report.source == "kick.wav"
        assert len(report.matches) == 4
        assert report.overview is None
        assert report.processing_time >= 0
        mock_loader.load.assert_called_once()

    def test_matches_sorted(self, engine):
        similarities = [m.similarity for m in engine.analyze_file("a.wav").matches]
        assert similarities == sorted(similarities, reverse=True)

    def test_load_failure_is_user_facing(self, engine, mock_loader):
        mock_loader.load.side_effect = AudioLoadError("bad header", file_path="x.wav")
        with pytest.raises(AnalysisError) as exc_info:
            engine.analyze_file("x.wav")
        assert str(exc_info.value).startswith(FAILURE_MESSAGE)
        assert isinstance(exc_info.value.original_error, AudioLoadError)

    def test_missing_file_propagates(self, engine, mock_loader):
        mock_loader.load.side_effect = FileNotFoundError("missing.wav")
        with pytest.raises(FileNotFoundError):
            engine.analyze_file("missing.wav")

    def test_overview_included(self, mock_loader):
        with AnalysisEngine(
            loader=mock_loader,
            extractor=FeatureExtractor(),
            matcher=PluginMatcher(),
            overview_analyzer=AudioOverviewAnalyzer(estimate_tempo_enabled=False),
        ) as engine:
            report = engine.analyze_file("tone.wav")
        assert report.overview.key == 'A'
        assert report.to_dict()['overview']['key'] == 'A'


class TestAnalyzeBuffer:
    def test_extractor_failure_is_wrapped(self, mock_loader, sine_buffer):
        extractor = MagicMock()
        extractor.analyze.side_effect = AnalysisError("boom", analyzer_name="feature_extractor")
        engine = AnalysisEngine(mock_loader, extractor, PluginMatcher())
        try:
            with pytest.raises(AnalysisError, match=FAILURE_MESSAGE) as exc_info:
                engine.analyze_buffer(sine_buffer)
            assert exc_info.value.analyzer_name == "feature_extractor"
        finally:
            engine.shutdown()

    def test_report_to_dict(self, engine, sine_buffer):
        data = engine.analyze_buffer(sine_buffer).to_dict()
        assert set(data) == {'features', 'matches', 'overview', 'processing_time', 'source'}
        assert len(data['matches']) == 4


class TestAnalyzeBatch:
    def test_order_preserved_with_failures(self, engine, mock_loader, sine_buffer):
        def load(path):
            if "bad" in str(path):
                raise AudioLoadError("corrupt", file_path=str(path))
            return sine_buffer

        mock_loader.load.side_effect = load
        results = engine.analyze_batch(["one.wav", "bad.wav", "three.wav"])

        assert len(results) == 3
        assert results[0].source == "one.wav"
        assert results[1] is None
        assert results[2].source == "three.wav"

    def test_empty_batch(self, engine):
        assert engine.analyze_batch([]) == []


class TestFactory:
    def test_from_default_config(self):
        config = get_default_config()
        config['analysis']['estimate_tempo'] = False
        with create_analysis_engine(config) as engine:
            assert engine.loader.target_sr is None
            assert len(engine.matcher.get_available_plugins()) == 4
            assert engine.overview_analyzer.estimate_tempo_enabled is False
