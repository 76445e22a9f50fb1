"""
Plugin catalog and heuristic plugin matching.
"""

from audiolab.plugins.catalog import (
    PluginCatalog,
    PluginDescriptor,
    PluginParameter,
    PluginPreset,
    load_catalog,
    load_default_catalog,
)
from audiolab.plugins.matcher import (
    PluginMatch,
    PluginMatcher,
    create_plugin_matcher,
    find_matches,
)

__all__ = [
    "PluginCatalog",
    "PluginDescriptor",
    "PluginParameter",
    "PluginPreset",
    "load_catalog",
    "load_default_catalog",
    "PluginMatch",
    "PluginMatcher",
    "create_plugin_matcher",
    "find_matches",
]
