"""
Analysis engine for the audiolab package.

Main orchestration entry point: loads audio, extracts features, ranks
plugins and builds the overview, one file at a time or in batches.
"""

import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from audiolab.analyzers.overview.overview_analyzer import (
    AudioOverviewAnalyzer,
    create_overview_analyzer,
)
from audiolab.core.features import FeatureExtractor, create_feature_extractor
from audiolab.core.loader import AudioLoader, create_audio_loader
from audiolab.core.models import AudioOverview, FeatureRecord, SampleBuffer
from audiolab.plugins.matcher import PluginMatch, PluginMatcher, create_plugin_matcher
from audiolab.utils.errors import AnalysisError, AudioAnalysisError
from audiolab.utils.logging import configure_logging, create_logger_with_context, get_logger

FAILURE_MESSAGE = "Unable to analyze this audio file"


@dataclass(frozen=True)
class AnalysisReport:
    """Everything the engine derives from one buffer."""

    features: FeatureRecord
    matches: List[PluginMatch] = field(default_factory=list)
    overview: Optional[AudioOverview] = None
    processing_time: float = 0.0  # seconds
    source: Optional[str] = None  # file path when loaded from disk

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'features': self.features.to_dict(),
            'matches': [m.to_dict() for m in self.matches],
            'overview': self.overview.to_dict() if self.overview else None,
            'processing_time': self.processing_time,
            'source': self.source,
        }


class AnalysisEngine:
    """
    Main analysis engine - orchestrates all components.

    Design:
    - Dependency Injection: loader, extractor, matcher and overview
      analyzer are passed in (testable)
    - Batch Execution: files analyzed concurrently on a thread pool
    - Error Handling: failures surface as AnalysisError with a
      user-facing message; batches record None for failed files
    """

    def __init__(
        self,
        loader: AudioLoader,
        extractor: FeatureExtractor,
        matcher: PluginMatcher,
        overview_analyzer: Optional[AudioOverviewAnalyzer] = None,
        max_workers: int = 4,
    ):
        """
        Initialize analysis engine.

        Args:
            loader: AudioLoader instance
            extractor: Feature extractor
            matcher: Plugin matcher
            overview_analyzer: Optional quick-summary analyzer
            max_workers: Max parallel workers for batches
        """
        self.loader = loader
        self.extractor = extractor
        self.matcher = matcher
        self.overview_analyzer = overview_analyzer
        self.executor = ThreadPoolExecutor(max_workers=max_workers)
        self.logger = get_logger('engine')

    def analyze_buffer(self, buffer: SampleBuffer, source: Optional[str] = None) -> AnalysisReport:
        """
        Analyze decoded audio.

        Args:
            buffer: SampleBuffer to analyze
            source: Optional label (file path) carried into the report

        Returns:
            AnalysisReport: Features, ranked matches and overview

        Raises:
            AnalysisError: Message starts with "Unable to analyze this audio file"
        """
        start_time = time.time()

        try:
            features = self.extractor.analyze(buffer)
            matches = self.matcher.find_matches(features)
            overview = (
                self.overview_analyzer.analyze(buffer)
                if self.overview_analyzer is not None else None
            )
        except AnalysisError as e:
            self.logger.error(f"Analysis failed: {e}")
            raise AnalysisError(
                f"{FAILURE_MESSAGE}: {e.message}",
                analyzer_name=e.analyzer_name,
                original_error=e
            ) from e

        processing_time = time.time() - start_time
        self.logger.info(f"Analysis complete in {processing_time:.3f}s")

        return AnalysisReport(
            features=features,
            matches=matches,
            overview=overview,
            processing_time=processing_time,
            source=source,
        )

    def analyze_file(self, file_path: Union[str, Path]) -> AnalysisReport:
        """
        Load and analyze an audio file.

        Raises:
            FileNotFoundError: File doesn't exist
            AnalysisError: Decoding or analysis failed
        """
        file_path = Path(file_path)
        log = create_logger_with_context('engine', {'file_path': str(file_path)})
        log.info(f"Loading audio: {file_path}")

        try:
            buffer = self.loader.load(file_path)
        except FileNotFoundError:
            raise
        except AudioAnalysisError as e:
            log.error(f"Load failed: {e}")
            raise AnalysisError(
                f"{FAILURE_MESSAGE}: {e.message}",
                analyzer_name="loader",
                original_error=e
            ) from e

        return self.analyze_buffer(buffer, source=str(file_path))

    def analyze_batch(
        self, file_paths: Sequence[Union[str, Path]]
    ) -> List[Optional[AnalysisReport]]:
        """
        Analyze multiple files.

        Args:
            file_paths: List of file paths

        Returns:
            List[Optional[AnalysisReport]]: Results in same order as input,
            None for files that failed
        """
        self.logger.info(f"Analyzing batch of {len(file_paths)} files")

        futures = {
            self.executor.submit(self.analyze_file, path): index
            for index, path in enumerate(file_paths)
        }

        results: List[Optional[AnalysisReport]] = [None] * len(file_paths)
        for future in as_completed(futures):
            index = futures[future]
            try:
                results[index] = future.result()
            except (AudioAnalysisError, FileNotFoundError) as e:
                self.logger.error(f"Failed to analyze {file_paths[index]}: {e}")

        return results

    def shutdown(self) -> None:
        """Shutdown thread pool gracefully."""
        self.logger.info("Shutting down analysis engine")
        self.executor.shutdown(wait=True)

    def __enter__(self) -> "AnalysisEngine":
        """Context manager support."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Cleanup on context exit."""
        self.shutdown()


def create_analysis_engine(config: Optional[Dict[str, Any]] = None) -> AnalysisEngine:
    """
    Factory function to create fully configured analysis engine.

    Args:
        config: Configuration dict (see ``get_default_config``)

    Returns:
        AnalysisEngine: Configured engine
    """
    if config is None:
        config = {}

    configure_logging(config)

    performance_config = config.get('performance', {})

    return AnalysisEngine(
        loader=create_audio_loader(config.get('audio', {})),
        extractor=create_feature_extractor(config),
        matcher=create_plugin_matcher(config),
        overview_analyzer=create_overview_analyzer(config),
        max_workers=performance_config.get('max_workers', 4),
    )
