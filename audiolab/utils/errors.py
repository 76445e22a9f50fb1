"""
Custom exceptions for the audiolab analysis engine.

This module defines a hierarchy of exceptions for handling the error
conditions of loading, analysis, configuration, and plugin matching.
"""

from typing import Optional, Any


class AudioAnalysisError(Exception):
    """Base exception for all audiolab errors."""

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (Details: {self.details})"
        return self.message


class AudioLoadError(AudioAnalysisError):
    """Raised when an audio file cannot be decoded into a sample buffer."""

    def __init__(self, message: str, file_path: Optional[str] = None):
        super().__init__(message, details={"file_path": file_path})
        self.file_path = file_path


class UnsupportedFormatError(AudioLoadError):
    """Raised when audio format is not supported."""

    def __init__(self, message: str, format: Optional[str] = None):
        super().__init__(message)
        self.format = format
        self.details = {"format": format}


class FileTooLargeError(AudioLoadError):
    """Raised when audio file exceeds size limit."""

    def __init__(
        self,
        message: str,
        file_size: Optional[int] = None,
        max_size: Optional[int] = None,
    ):
        super().__init__(message)
        self.file_size = file_size
        self.max_size = max_size
        self.details = {"file_size": file_size, "max_size": max_size}


class AnalysisError(AudioAnalysisError):
    """Raised when audio analysis fails."""

    def __init__(
        self,
        message: str,
        analyzer_name: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.analyzer_name = analyzer_name
        self.original_error = original_error
        self.details = {
            "analyzer_name": analyzer_name,
            "original_error": str(original_error) if original_error else None,
        }


class InvalidBufferError(AnalysisError):
    """Raised when a sample buffer is missing, empty, or malformed."""

    def __init__(self, message: str, reason: Optional[str] = None):
        super().__init__(message, analyzer_name="sample_buffer")
        self.reason = reason
        self.details["reason"] = reason


class FeatureExtractionError(AnalysisError):
    """Raised when feature extraction fails."""

    def __init__(self, message: str, feature_name: Optional[str] = None):
        super().__init__(message, analyzer_name="feature_extractor")
        self.feature_name = feature_name
        self.details["feature_name"] = feature_name


class ConfigurationError(AudioAnalysisError):
    """Raised when configuration is invalid or missing."""

    def __init__(self, message: str, config_key: Optional[str] = None):
        super().__init__(message)
        self.config_key = config_key
        self.details = {"config_key": config_key}


class CatalogError(ConfigurationError):
    """Raised when the plugin catalog cannot be loaded or fails validation."""

    def __init__(
        self,
        message: str,
        source: Optional[str] = None,
        plugin_id: Optional[str] = None,
    ):
        super().__init__(message, config_key=source)
        self.source = source
        self.plugin_id = plugin_id
        self.details = {"source": source, "plugin_id": plugin_id}


class PluginNotFoundError(AudioAnalysisError):
    """Raised when a plugin id is not present in the catalog."""

    def __init__(self, plugin_id: str):
        super().__init__(
            f"Plugin '{plugin_id}' is not in the catalog.",
            details={"plugin_id": plugin_id},
        )
        self.plugin_id = plugin_id
