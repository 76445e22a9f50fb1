"""
Analyzer base interface for the audiolab engine.

Defines the contract for all analyzers using Protocol (structural subtyping).
"""

import time
from abc import abstractmethod
from typing import Generic, Protocol, TypeVar

from audiolab.core.models import SampleBuffer
from audiolab.utils.errors import AnalysisError, InvalidBufferError
from audiolab.utils.logging import get_logger

# Type variable for result types
T = TypeVar('T')


class Analyzer(Protocol[T]):
    """
    Base protocol for all analyzers.

    Any object with ``name``, ``version`` and ``analyze(buffer)`` fits;
    inheriting from BaseAnalyzer is optional.
    """

    @property
    def name(self) -> str:
        """Analyzer name (e.g., 'feature_extractor', 'overview')."""
        ...

    @property
    def version(self) -> str:
        """Analyzer version for result tracking."""
        ...

    def analyze(self, buffer: SampleBuffer) -> T:
        """
        Analyze a sample buffer and return a typed result.

        Raises:
            AnalysisError: If analysis fails
        """
        ...


class BaseAnalyzer(Generic[T]):
    """
    Shared timing, logging and error wrapping for analyzers.

    Template Method: analyze() provides the template, subclasses
    implement _analyze_impl().
    """

    def __init__(self, name: str, version: str):
        """
        Initialize analyzer with name and version.

        Args:
            name: Unique analyzer name
            version: Version string for tracking
        """
        self._name = name
        self._version = version
        self.logger = get_logger(f"analyzer.{name}")

    @property
    def name(self) -> str:
        """Return analyzer name."""
        return self._name

    @property
    def version(self) -> str:
        """Return analyzer version."""
        return self._version

    def analyze(self, buffer: SampleBuffer) -> T:
        """
        Template method with timing and error handling.

        Args:
            buffer: SampleBuffer to analyze

        Returns:
            T: Analysis result

        Raises:
            AnalysisError: If analysis fails. AnalysisError subclasses
                (e.g. InvalidBufferError) propagate unchanged.
        """
        start_time = time.time()

        try:
            if not isinstance(buffer, SampleBuffer):
                raise InvalidBufferError(
                    f"{self.name} expects a SampleBuffer, got {type(buffer).__name__}",
                    reason="not_a_buffer",
                )

            self.logger.debug(
                f"Starting analysis: {len(buffer)} samples @ {buffer.sample_rate} Hz"
            )

            result = self._analyze_impl(buffer)

            elapsed = time.time() - start_time
            self.logger.info(f"Analysis complete in {elapsed:.3f}s")

            return result

        except AnalysisError:
            raise

        except Exception as e:
            self.logger.error(f"Analysis failed: {e}")
            raise AnalysisError(
                f"{self.name} analysis failed: {e}",
                analyzer_name=self.name,
                original_error=e
            ) from e

    @abstractmethod
    def _analyze_impl(self, buffer: SampleBuffer) -> T:
        """Subclasses implement actual analysis logic."""
        raise NotImplementedError
