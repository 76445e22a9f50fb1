"""
Utility modules for configuration, logging, and error handling.
"""

from audiolab.utils.errors import (
    AudioAnalysisError,
    AudioLoadError,
    UnsupportedFormatError,
    FileTooLargeError,
    AnalysisError,
    InvalidBufferError,
    FeatureExtractionError,
    ConfigurationError,
    CatalogError,
    PluginNotFoundError,
)
from audiolab.utils.logging import (
    get_logger,
    setup_logging,
    configure_logging,
    JSONFormatter,
)
from audiolab.utils.config import ConfigManager, load_config, get_default_config

__all__ = [
    "AudioAnalysisError",
    "AudioLoadError",
    "UnsupportedFormatError",
    "FileTooLargeError",
    "AnalysisError",
    "InvalidBufferError",
    "FeatureExtractionError",
    "ConfigurationError",
    "CatalogError",
    "PluginNotFoundError",
    "get_logger",
    "setup_logging",
    "configure_logging",
    "JSONFormatter",
    "ConfigManager",
    "load_config",
    "get_default_config",
]
