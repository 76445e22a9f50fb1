"""
Plugin matcher for the audiolab engine.

Ranks every catalog plugin against a FeatureRecord with fixed heuristic
rules per plugin category. These are hand-tuned scores, not a trained
model.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Union

from audiolab.core.features import (
    FeatureExtractor,
    create_feature_extractor,
    to_sample_buffer,
)
from audiolab.core.models import FeatureRecord, SampleBuffer
from audiolab.plugins.catalog import (
    PluginCatalog,
    PluginDescriptor,
    PluginParameter,
    load_catalog,
    load_default_catalog,
)
from audiolab.utils.logging import get_logger

DYNAMICS_EPSILON = 1e-10
BAND_NEUTRAL = 0.5

logger = get_logger("plugins.matcher")


@dataclass(frozen=True)
class PluginMatch:
    """How well one plugin fits the analyzed audio."""

    plugin_id: str
    similarity: float  # [0.0, 1.0]
    confidence: float  # [0.0, 1.0]
    suggested_parameters: Dict[str, float] = field(default_factory=dict)
    description: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            'plugin_id': self.plugin_id,
            'similarity': self.similarity,
            'confidence': self.confidence,
            'suggested_parameters': dict(self.suggested_parameters),
            'description': self.description,
        }


def dynamic_range(features: FeatureRecord) -> float:
    """Energy over RMS, the matcher's dynamic-range proxy."""
    temporal = features.temporal_features
    return temporal.energy / (temporal.rms + DYNAMICS_EPSILON)


def _clamp_unit(value: float) -> float:
    return max(0.0, min(1.0, value))


def calculate_similarity(features: FeatureRecord, plugin: PluginDescriptor) -> float:
    """Category-specific similarity score in [0, 1]."""
    spectral = features.spectral_features
    score = 0.0

    if plugin.category == 'EQ':
        score += min(spectral.centroid / 8000, 1) * 0.4
        score += spectral.flatness * 0.3

    if plugin.category == 'Dynamics':
        score += min(dynamic_range(features) / 10, 1) * 0.5
        score += min(features.temporal_features.zcr / 1000, 1) * 0.3

    if plugin.category in ('Distortion', 'Saturation'):
        score += (1 - features.harmonic_features.harmonicity) * 0.4

    return _clamp_unit(score)


def suggest_parameter(features: FeatureRecord, parameter: PluginParameter) -> float:
    """Suggested value for one parameter, clamped to its range."""
    if parameter.id == 'threshold':
        loudness = 20 * math.log10(features.temporal_features.rms + DYNAMICS_EPSILON)
        return parameter.clamp(loudness - 10)

    if parameter.id == 'ratio':
        return parameter.clamp(2 + dynamic_range(features))

    if parameter.id in ('low', 'high'):
        ratio = features.band_energy.get(parameter.id, BAND_NEUTRAL)
        return parameter.clamp((ratio - BAND_NEUTRAL) * 10)

    return parameter.clamp(parameter.default)


def suggest_parameters(features: FeatureRecord, plugin: PluginDescriptor) -> Dict[str, float]:
    """Suggested values for every parameter of ``plugin``."""
    return {p.id: suggest_parameter(features, p) for p in plugin.parameters}


def calculate_confidence(
    features: FeatureRecord, plugin: PluginDescriptor, similarity: float
) -> float:
    """Similarity boosted by clear category indicators, within [0, 1]."""
    confidence = similarity
    temporal = features.temporal_features

    if plugin.category == 'EQ' and features.spectral_features.flatness > 0.7:
        confidence += 0.2

    if plugin.category == 'Dynamics' and temporal.energy > temporal.rms * 5:
        confidence += 0.3

    return _clamp_unit(confidence)


def generate_description(
    features: FeatureRecord, plugin: PluginDescriptor, similarity: float
) -> str:
    """Human-readable reasons for the match."""
    spectral = features.spectral_features
    descriptions: List[str] = []

    if plugin.category == 'EQ':
        if spectral.centroid > 2000:
            descriptions.append(
                'High frequency content detected - EQ can help balance the spectrum'
            )
        if spectral.flatness < 0.3:
            descriptions.append(
                'Uneven frequency distribution - EQ can smooth the response'
            )

    if plugin.category == 'Dynamics':
        if dynamic_range(features) > 5:
            descriptions.append(
                'High dynamic range detected - compression can control peaks'
            )
        if features.temporal_features.zcr > 500:
            descriptions.append(
                'Transient content detected - compression can smooth dynamics'
            )

    if plugin.category in ('Distortion', 'Saturation'):
        if features.harmonic_features.harmonicity < 0.5:
            descriptions.append(
                'Weak harmonic structure detected - saturation can add harmonic density'
            )

    if not descriptions:
        descriptions.append(
            f"This plugin scored {similarity * 100:.1f}% similarity based on audio analysis"
        )

    return '. '.join(descriptions)


class PluginMatcher:
    """
    Scores a plugin catalog against analyzed audio.

    Stateless apart from the catalog and extractor it was built with.
    """

    def __init__(
        self,
        catalog: Optional[PluginCatalog] = None,
        extractor: Optional[FeatureExtractor] = None,
    ):
        """
        Initialize matcher.

        Args:
            catalog: Plugin catalog (bundled catalog if None)
            extractor: Used when find_matches receives raw audio
        """
        self.catalog = catalog if catalog is not None else load_default_catalog()
        self.extractor = extractor or FeatureExtractor()

    def find_matches(
        self, source: Union[FeatureRecord, SampleBuffer, Mapping[str, Any]]
    ) -> List[PluginMatch]:
        """
        Rank every catalog plugin for the given audio.

        Args:
            source: FeatureRecord, or audio to extract one from

        Returns:
            List[PluginMatch]: One match per plugin, highest similarity
            first; equal scores keep catalog order
        """
        if isinstance(source, FeatureRecord):
            features = source
        else:
            features = self.extractor.analyze(to_sample_buffer(source))

        matches = []
        for plugin in self.catalog:
            similarity = calculate_similarity(features, plugin)
            matches.append(PluginMatch(
                plugin_id=plugin.id,
                similarity=similarity,
                confidence=calculate_confidence(features, plugin, similarity),
                suggested_parameters=suggest_parameters(features, plugin),
                description=generate_description(features, plugin, similarity),
            ))

        # sorted() is stable, which keeps catalog order on ties
        matches = sorted(matches, key=lambda m: m.similarity, reverse=True)
        logger.debug(
            f"Ranked {len(matches)} plugins; best: "
            f"{matches[0].plugin_id if matches else None}"
        )
        return matches

    def get_available_plugins(self) -> List[PluginDescriptor]:
        """All plugins in catalog order."""
        return list(self.catalog.plugins)

    def get_plugin(self, plugin_id: str) -> Optional[PluginDescriptor]:
        """Plugin with ``plugin_id``, or None."""
        return self.catalog.get(plugin_id)


def create_plugin_matcher(config: Optional[Dict[str, Any]] = None) -> PluginMatcher:
    """
    Factory function to create PluginMatcher with configuration.

    Args:
        config: Full configuration dict; reads ``plugins.catalog_path``
            and the ``analysis`` section

    Returns:
        PluginMatcher: Configured matcher
    """
    if config is None:
        config = {}

    catalog = load_catalog(config.get('plugins', {}).get('catalog_path'))
    return PluginMatcher(catalog=catalog, extractor=create_feature_extractor(config))


def find_matches(
    source: Union[FeatureRecord, SampleBuffer, Mapping[str, Any]],
    catalog: Optional[PluginCatalog] = None,
) -> List[PluginMatch]:
    """Rank ``catalog`` (bundled by default) against ``source``."""
    return PluginMatcher(catalog).find_matches(source)
