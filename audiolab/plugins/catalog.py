"""
Plugin catalog for the audiolab plugin matcher.

Plugin descriptors are static data: they are read once from a YAML file
(the bundled ``data/catalog.yaml`` by default), validated, and held in
catalog order as immutable records.
"""

import logging
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple, Union

import yaml

from audiolab.utils.errors import CatalogError, PluginNotFoundError

PARAMETER_TYPES: Tuple[str, ...] = ('knob', 'slider', 'toggle', 'select')

DEFAULT_CATALOG_PATH = Path(__file__).parent / "data" / "catalog.yaml"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PluginParameter:
    """One adjustable plugin control with its numeric range."""

    id: str
    name: str
    type: str  # knob, slider, toggle, select
    value: float
    min: float
    max: float
    default: float
    unit: Optional[str] = None
    options: Optional[Tuple[str, ...]] = None

    def __post_init__(self) -> None:
        """Validate fields."""
        if self.type not in PARAMETER_TYPES:
            raise ValueError(
                f"Parameter '{self.id}' has unknown type '{self.type}'; "
                f"expected one of {PARAMETER_TYPES}"
            )
        if self.min > self.max:
            raise ValueError(
                f"Parameter '{self.id}' has min {self.min} > max {self.max}"
            )
        if not (self.min <= self.default <= self.max):
            raise ValueError(
                f"Parameter '{self.id}' default {self.default} outside "
                f"[{self.min}, {self.max}]"
            )

    def clamp(self, value: float) -> float:
        """Limit ``value`` to this parameter's range."""
        return float(max(self.min, min(self.max, value)))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        result: Dict[str, Any] = {
            'id': self.id,
            'name': self.name,
            'type': self.type,
            'value': self.value,
            'min': self.min,
            'max': self.max,
            'default': self.default,
        }
        if self.unit is not None:
            result['unit'] = self.unit
        if self.options is not None:
            result['options'] = list(self.options)
        return result


@dataclass(frozen=True)
class PluginPreset:
    """Named set of parameter values."""

    id: str
    name: str
    parameters: Mapping[str, float]
    tags: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            'id': self.id,
            'name': self.name,
            'parameters': dict(self.parameters),
            'tags': list(self.tags),
        }


@dataclass(frozen=True)
class PluginDescriptor:
    """Catalog entry for one audio plugin."""

    id: str
    name: str
    manufacturer: str
    category: str  # e.g. EQ, Dynamics, Distortion, Saturation, Reverb
    parameters: Tuple[PluginParameter, ...] = field(default_factory=tuple)
    presets: Tuple[PluginPreset, ...] = field(default_factory=tuple)

    def get_parameter(self, parameter_id: str) -> Optional[PluginParameter]:
        """Return the parameter with ``parameter_id``, or None."""
        for parameter in self.parameters:
            if parameter.id == parameter_id:
                return parameter
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'id': self.id,
            'name': self.name,
            'manufacturer': self.manufacturer,
            'category': self.category,
            'parameters': [p.to_dict() for p in self.parameters],
            'presets': [p.to_dict() for p in self.presets],
        }


class PluginCatalog:
    """
    Ordered, read-only collection of plugin descriptors.

    Iteration order is the order of the source file; the matcher relies
    on it to break similarity ties.
    """

    def __init__(self, plugins: List[PluginDescriptor], source: Optional[str] = None):
        self.source = source
        self._plugins: Tuple[PluginDescriptor, ...] = tuple(plugins)
        self._by_id: Dict[str, PluginDescriptor] = {}
        for plugin in self._plugins:
            if plugin.id in self._by_id:
                raise CatalogError(
                    f"Duplicate plugin id '{plugin.id}'",
                    source=source,
                    plugin_id=plugin.id,
                )
            self._by_id[plugin.id] = plugin

    @classmethod
    def from_yaml(cls, file_path: Union[str, Path]) -> "PluginCatalog":
        """
        Load and validate a catalog file.

        Raises:
            CatalogError: File missing, unparsable, or failing validation
        """
        file_path = Path(file_path)
        if not file_path.exists():
            raise CatalogError(
                f"Plugin catalog not found: {file_path}", source=str(file_path)
            )

        try:
            with open(file_path, 'r') as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise CatalogError(
                f"Invalid YAML in plugin catalog: {e}", source=str(file_path)
            ) from e

        catalog = cls.from_dict(data, source=str(file_path))
        logger.info(f"Loaded {len(catalog)} plugins from {file_path}")
        return catalog

    @classmethod
    def from_dict(cls, data: Any, source: Optional[str] = None) -> "PluginCatalog":
        """Build a catalog from ``{"plugins": [...]}`` data."""
        if not isinstance(data, dict) or not isinstance(data.get('plugins'), list):
            raise CatalogError(
                "Plugin catalog must be a mapping with a 'plugins' list",
                source=source,
            )
        return cls(
            [_parse_plugin(entry, source) for entry in data['plugins']],
            source=source,
        )

    @property
    def plugins(self) -> Tuple[PluginDescriptor, ...]:
        """All descriptors in catalog order."""
        return self._plugins

    def get(self, plugin_id: str) -> Optional[PluginDescriptor]:
        """Return the descriptor with ``plugin_id``, or None."""
        return self._by_id.get(plugin_id)

    def require(self, plugin_id: str) -> PluginDescriptor:
        """
        Return the descriptor with ``plugin_id``.

        Raises:
            PluginNotFoundError: No such plugin
        """
        plugin = self._by_id.get(plugin_id)
        if plugin is None:
            raise PluginNotFoundError(plugin_id)
        return plugin

    def __iter__(self) -> Iterator[PluginDescriptor]:
        return iter(self._plugins)

    def __len__(self) -> int:
        return len(self._plugins)

    def __contains__(self, plugin_id: object) -> bool:
        return plugin_id in self._by_id


def _require_keys(entry: Any, keys: Tuple[str, ...], what: str,
                  source: Optional[str], plugin_id: Optional[str]) -> None:
    if not isinstance(entry, dict):
        raise CatalogError(
            f"{what} must be a mapping, got {type(entry).__name__}",
            source=source,
            plugin_id=plugin_id,
        )
    missing = [key for key in keys if key not in entry]
    if missing:
        raise CatalogError(
            f"{what} is missing required keys: {', '.join(missing)}",
            source=source,
            plugin_id=plugin_id,
        )


def _parse_plugin(entry: Any, source: Optional[str]) -> PluginDescriptor:
    plugin_id = entry.get('id') if isinstance(entry, dict) else None
    _require_keys(entry, ('id', 'name', 'manufacturer', 'category'),
                  "Plugin entry", source, plugin_id)

    try:
        parameters = tuple(
            _parse_parameter(p, source, plugin_id) for p in entry.get('parameters') or []
        )
    except (TypeError, ValueError) as e:
        raise CatalogError(
            f"Invalid parameter in plugin '{plugin_id}': {e}",
            source=source,
            plugin_id=plugin_id,
        ) from e

    parameter_ids = [p.id for p in parameters]
    if len(set(parameter_ids)) != len(parameter_ids):
        raise CatalogError(
            f"Plugin '{plugin_id}' declares duplicate parameter ids",
            source=source,
            plugin_id=plugin_id,
        )

    presets = tuple(
        _parse_preset(p, set(parameter_ids), source, plugin_id)
        for p in entry.get('presets') or []
    )

    return PluginDescriptor(
        id=str(entry['id']),
        name=str(entry['name']),
        manufacturer=str(entry['manufacturer']),
        category=str(entry['category']),
        parameters=parameters,
        presets=presets,
    )


def _parse_parameter(entry: Any, source: Optional[str], plugin_id: str) -> PluginParameter:
    _require_keys(entry, ('id', 'name', 'type', 'min', 'max', 'default'),
                  f"Parameter of plugin '{plugin_id}'", source, plugin_id)

    default = float(entry['default'])
    options = entry.get('options')
    return PluginParameter(
        id=str(entry['id']),
        name=str(entry['name']),
        type=str(entry['type']),
        value=float(entry.get('value', default)),
        min=float(entry['min']),
        max=float(entry['max']),
        default=default,
        unit=entry.get('unit'),
        options=tuple(str(o) for o in options) if options is not None else None,
    )


def _parse_preset(entry: Any, parameter_ids: set, source: Optional[str],
                  plugin_id: str) -> PluginPreset:
    _require_keys(entry, ('id', 'name', 'parameters'),
                  f"Preset of plugin '{plugin_id}'", source, plugin_id)

    values = entry['parameters']
    if not isinstance(values, dict):
        raise CatalogError(
            f"Preset '{entry['id']}' parameters must be a mapping",
            source=source,
            plugin_id=plugin_id,
        )
    unknown = sorted(set(values) - parameter_ids)
    if unknown:
        raise CatalogError(
            f"Preset '{entry['id']}' sets unknown parameters: {', '.join(unknown)}",
            source=source,
            plugin_id=plugin_id,
        )

    try:
        parameters = {key: float(value) for key, value in values.items()}
    except (TypeError, ValueError) as e:
        raise CatalogError(
            f"Invalid value in preset '{entry['id']}': {e}",
            source=source,
            plugin_id=plugin_id,
        ) from e

    return PluginPreset(
        id=str(entry['id']),
        name=str(entry['name']),
        parameters=parameters,
        tags=tuple(str(tag) for tag in entry.get('tags') or ()),
    )


@lru_cache(maxsize=1)
def load_default_catalog() -> PluginCatalog:
    """Load the catalog bundled with the package (cached)."""
    return PluginCatalog.from_yaml(DEFAULT_CATALOG_PATH)


def load_catalog(catalog_path: Optional[Union[str, Path]] = None) -> PluginCatalog:
    """Load ``catalog_path``, or the bundled catalog when None."""
    if catalog_path is None:
        return load_default_catalog()
    return PluginCatalog.from_yaml(catalog_path)
