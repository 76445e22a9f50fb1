"""
Configuration management for the audiolab analysis engine.

Loads and validates configuration from YAML files with environment
variable interpolation support. A ``.env`` file next to the working
directory is loaded first so that ``${VAR}`` references can be satisfied
from it.
"""

import copy
import os
import re
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

from audiolab.utils.errors import ConfigurationError


class ConfigManager:
    """
    Manages application configuration loaded from YAML files.

    Features:
    - YAML configuration loading
    - Environment variable interpolation (${VAR_NAME})
    - Nested key access with dot notation
    - Configuration validation
    """

    def __init__(self, config_dict: Optional[Dict[str, Any]] = None):
        self._config: Dict[str, Any] = config_dict or {}
        self._env_pattern = re.compile(r'\$\{([^}]+)\}')

    @classmethod
    def from_file(cls, file_path: Path) -> "ConfigManager":
        """
        Create ConfigManager from YAML file.

        Raises:
            ConfigurationError: If file cannot be loaded or parsed
        """
        file_path = Path(file_path)
        if not file_path.exists():
            raise ConfigurationError(
                f"Configuration file not found: {file_path}",
                config_key=str(file_path)
            )

        try:
            with open(file_path, 'r') as f:
                config_dict = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Failed to parse YAML configuration: {e}",
                config_key=str(file_path)
            ) from e

        if not isinstance(config_dict, dict):
            raise ConfigurationError(
                f"Configuration root must be a mapping: {file_path}",
                config_key=str(file_path)
            )

        manager = cls(config_dict)
        manager._interpolate_env_vars()
        return manager

    def _interpolate_env_vars(self) -> None:
        """Replace ${ENV_VAR} patterns with environment variable values."""
        self._config = self._interpolate(self._config)

    def _interpolate(self, value: Any) -> Any:
        if isinstance(value, dict):
            return {k: self._interpolate(v) for k, v in value.items()}
        if isinstance(value, list):
            return [self._interpolate(item) for item in value]
        if isinstance(value, str):
            return self._interpolate_string(value)
        return value

    def _interpolate_string(self, s: str) -> str:
        """Replace ${ENV_VAR} with environment variable value."""
        def replace(match: re.Match) -> str:
            value = os.environ.get(match.group(1))
            if value is None:
                return match.group(0)  # Keep original if not found
            return value

        return self._env_pattern.sub(replace, s)

    def get(
        self,
        key: str,
        default: Any = None,
        required: bool = False
    ) -> Any:
        """
        Get configuration value using dot notation.

        Example:
            config.get("analysis.frame_size", default=2048)
            config.get("plugins.catalog_path", required=True)

        Raises:
            ConfigurationError: If required key is not found
        """
        value = self._config

        for k in key.split('.'):
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                if required:
                    raise ConfigurationError(
                        f"Required configuration key not found: {key}",
                        config_key=key
                    )
                return default

        return value

    def get_section(self, key: str) -> Dict[str, Any]:
        """Get an entire configuration section (empty dict if not found)."""
        value = self.get(key, default={})
        if not isinstance(value, dict):
            return {}
        return value

    def set(self, key: str, value: Any) -> None:
        """Set a configuration value using dot notation."""
        keys = key.split('.')
        current = self._config

        for k in keys[:-1]:
            if not isinstance(current.get(k), dict):
                current[k] = {}
            current = current[k]

        current[keys[-1]] = value

    def merge(self, overrides: Dict[str, Any]) -> None:
        """Deep-merge ``overrides`` into the current configuration."""
        self._config = _deep_merge(self._config, overrides)

    def to_dict(self) -> Dict[str, Any]:
        """Return a deep copy of the configuration."""
        return copy.deepcopy(self._config)

    def validate(self, schema: Dict[str, Any]) -> None:
        """
        Validate configuration against a schema.

        Schema format:
            {
                "analysis.frame_size": {"type": int, "required": True},
                "analysis.transform": {"type": str, "choices": ["fft", "dft"]},
            }

        Raises:
            ConfigurationError: If validation fails
        """
        for key, rules in schema.items():
            value = self.get(key)
            expected_type = rules.get("type")

            if value is None:
                if rules.get("required", False):
                    raise ConfigurationError(
                        f"Required configuration missing: {key}",
                        config_key=key
                    )
                continue

            if expected_type and not isinstance(value, expected_type):
                if not isinstance(expected_type, tuple):
                    expected_type = (expected_type,)
                names = "/".join(t.__name__ for t in expected_type)
                raise ConfigurationError(
                    f"Invalid type for {key}: expected {names}, "
                    f"got {type(value).__name__}",
                    config_key=key
                )

            choices = rules.get("choices")
            if choices is not None and value not in choices:
                raise ConfigurationError(
                    f"Invalid value for {key}: {value!r} not in {choices}",
                    config_key=key
                )

            minimum = rules.get("min")
            if minimum is not None and value < minimum:
                raise ConfigurationError(
                    f"Invalid value for {key}: {value} < {minimum}",
                    config_key=key
                )


CONFIG_SCHEMA: Dict[str, Dict[str, Any]] = {
    "analysis.frame_size": {"type": int, "min": 2},
    "analysis.transform": {"type": str, "choices": ["fft", "dft"]},
    "analysis.rolloff_threshold": {"type": (int, float), "min": 0},
    "analysis.n_mfcc": {"type": int, "min": 1},
    "analysis.n_mel_filters": {"type": int, "min": 1},
    "analysis.pitch_min_hz": {"type": (int, float), "min": 1},
    "analysis.pitch_max_hz": {"type": (int, float), "min": 1},
    "analysis.pitch_peak_threshold": {"type": (int, float), "min": 0},
    "analysis.harmonic_tolerance_hz": {"type": (int, float), "min": 0},
    "analysis.estimate_tempo": {"type": bool},
    "audio.max_file_size": {"type": int, "min": 1},
    "logging.level": {
        "type": str,
        "choices": ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
    },
    "logging.format": {"type": str, "choices": ["text", "json"]},
    "performance.max_workers": {"type": int, "min": 1},
}


def _deep_merge(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    result = copy.deepcopy(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = copy.deepcopy(value)
    return result


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load configuration from file, layered over the defaults.

    Args:
        config_path: Optional path to config file.
                    If None, tries "config/config.yaml" and "config.yaml"

    Returns:
        Dict[str, Any]: Validated configuration dictionary
    """
    load_dotenv()

    if config_path is None:
        default_paths = [
            Path("config/config.yaml"),
            Path("config.yaml"),
        ]
        for path in default_paths:
            if path.exists():
                config_path = str(path)
                break

    manager = ConfigManager(get_default_config())
    if config_path:
        manager.merge(ConfigManager.from_file(Path(config_path)).to_dict())

    manager.validate(CONFIG_SCHEMA)
    return manager.to_dict()


def get_default_config() -> Dict[str, Any]:
    """Return default configuration values."""
    return {
        "analysis": {
            "frame_size": 2048,
            "transform": "fft",
            "rolloff_threshold": 0.85,
            "n_mfcc": 13,
            "n_mel_filters": 26,
            "log_epsilon": 1e-10,
            "pitch_min_hz": 80.0,
            "pitch_max_hz": 800.0,
            "pitch_peak_threshold": 0.9,
            "harmonic_tolerance_hz": 20.0,
            "chroma_min_hz": 80.0,
            "chroma_max_hz": 8000.0,
            "estimate_tempo": True,
        },
        "audio": {
            "supported_formats": [".wav", ".aiff", ".aif", ".flac", ".ogg", ".mp3"],
            "max_file_size": 524288000,  # 500MB
            "target_sample_rate": None,  # keep the file's native rate
        },
        "plugins": {
            "catalog_path": None,  # bundled catalog
        },
        "logging": {
            "level": "INFO",
            "format": "text",
        },
        "performance": {
            "max_workers": 4,
        },
    }
