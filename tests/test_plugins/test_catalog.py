"""Tests for the plugin catalog."""

import pytest
import yaml

from audiolab.plugins.catalog import (
    PluginCatalog,
    PluginParameter,
    load_catalog,
    load_default_catalog,
)
from audiolab.utils.errors import CatalogError, ConfigurationError, PluginNotFoundError


def _plugin(plugin_id="eq-test", **overrides):
    entry = {
        'id': plugin_id,
        'name': 'Test EQ',
        'manufacturer': 'Test Audio',
        'category': 'EQ',
        'parameters': [
            {'id': 'low', 'name': 'Low', 'type': 'knob', 'min': -20, 'max': 20, 'default': 0},
        ],
    }
    entry.update(overrides)
    return entry


class TestDefaultCatalog:
    def test_contents_and_order(self):
        catalog = load_default_catalog()
        assert [p.id for p in catalog] == [
            'eq-vintage', 'compressor-vintage', 'saturator-tape', 'reverb-plate',
        ]
        assert len(catalog) == 4

    def test_is_cached(self):
        assert load_default_catalog() is load_default_catalog()
        assert load_catalog() is load_default_catalog()

    def test_lookup(self):
        catalog = load_default_catalog()
        compressor = catalog.require('compressor-vintage')
        assert compressor.category == 'Dynamics'
        assert compressor.get_parameter('ratio').max == 20.0
        assert compressor.get_parameter('knee') is None
        assert 'reverb-plate' in catalog
        assert catalog.get('nope') is None

    def test_require_unknown(self):
        with pytest.raises(PluginNotFoundError) as exc_info:
            load_default_catalog().require('nope')
        assert exc_info.value.plugin_id == 'nope'

    def test_select_parameter_options(self):
        saturator = load_default_catalog().require('saturator-tape')
        oversample = saturator.get_parameter('oversample')
        assert oversample.type == 'select'
        assert oversample.options == ('1x', '2x', '4x')

    def test_presets(self):
        eq = load_default_catalog().require('eq-vintage')
        assert [p.id for p in eq.presets] == ['bright', 'warm']
        assert eq.presets[0].parameters['high'] == 4.0

    def test_to_dict(self):
        data = load_default_catalog().require('eq-vintage').to_dict()
        assert data['parameters'][0]['unit'] == 'dB'
        assert 'options' not in data['parameters'][0]


class TestPluginParameter:
    def test_clamp(self):
        parameter = PluginParameter('gain', 'Gain', 'knob', 0, -10, 10, 0)
        assert parameter.clamp(25) == 10.0
        assert parameter.clamp(-25) == -10.0
        assert parameter.clamp(3) == 3.0

    def test_unknown_type(self):
        with pytest.raises(ValueError):
            PluginParameter('gain', 'Gain', 'wheel', 0, -10, 10, 0)

    def test_inverted_range(self):
        with pytest.raises(ValueError):
            PluginParameter('gain', 'Gain', 'knob', 0, 10, -10, 0)


class TestFromYaml:
    def test_custom_file(self, tmp_path):
        path = tmp_path / "catalog.yaml"
        path.write_text(yaml.safe_dump({'plugins': [_plugin()]}))
        catalog = load_catalog(path)
        assert len(catalog) == 1
        assert catalog.source == str(path)
        # value falls back to default
        assert catalog.require('eq-test').parameters[0].value == 0.0

    def test_missing_file(self, tmp_path):
        with pytest.raises(CatalogError):
            PluginCatalog.from_yaml(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("plugins: [unclosed")
        with pytest.raises(CatalogError):
            PluginCatalog.from_yaml(path)

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        with pytest.raises(CatalogError):
            PluginCatalog.from_yaml(path)

    def test_catalog_error_is_configuration_error(self, tmp_path):
        with pytest.raises(ConfigurationError):
            PluginCatalog.from_yaml(tmp_path / "missing.yaml")


class TestValidation:
    def test_root_must_hold_plugins_list(self):
        with pytest.raises(CatalogError):
            PluginCatalog.from_dict([_plugin()])
        with pytest.raises(CatalogError):
            PluginCatalog.from_dict({'plugins': {'id': 'x'}})

    def test_missing_required_keys(self):
        entry = _plugin()
        del entry['category']
        with pytest.raises(CatalogError, match="category"):
            PluginCatalog.from_dict({'plugins': [entry]})

    def test_plugin_entry_not_mapping(self):
        with pytest.raises(CatalogError):
            PluginCatalog.from_dict({'plugins': ['eq']})

    def test_unknown_parameter_type(self):
        entry = _plugin(parameters=[
            {'id': 'low', 'name': 'Low', 'type': 'wheel', 'min': 0, 'max': 1, 'default': 0},
        ])
        with pytest.raises(CatalogError) as exc_info:
            PluginCatalog.from_dict({'plugins': [entry]})
        assert exc_info.value.plugin_id == 'eq-test'

    def test_default_outside_range(self):
        entry = _plugin(parameters=[
            {'id': 'low', 'name': 'Low', 'type': 'knob', 'min': 0, 'max': 1, 'default': 5},
        ])
        with pytest.raises(CatalogError):
            PluginCatalog.from_dict({'plugins': [entry]})

    def test_non_numeric_range(self):
        entry = _plugin(parameters=[
            {'id': 'low', 'name': 'Low', 'type': 'knob', 'min': 'lots', 'max': 1, 'default': 0},
        ])
        with pytest.raises(CatalogError):
            PluginCatalog.from_dict({'plugins': [entry]})

    def test_duplicate_plugin_ids(self):
        with pytest.raises(CatalogError) as exc_info:
            PluginCatalog.from_dict({'plugins': [_plugin(), _plugin()]})
        assert exc_info.value.plugin_id == 'eq-test'

    def test_duplicate_parameter_ids(self):
        parameter = {'id': 'low', 'name': 'Low', 'type': 'knob', 'min': 0, 'max': 1, 'default': 0}
        entry = _plugin(parameters=[parameter, dict(parameter)])
        with pytest.raises(CatalogError):
            PluginCatalog.from_dict({'plugins': [entry]})

    def test_preset_with_unknown_parameter(self):
        entry = _plugin(presets=[
            {'id': 'p', 'name': 'P', 'parameters': {'low': 1, 'air': 2}},
        ])
        with pytest.raises(CatalogError, match="air"):
            PluginCatalog.from_dict({'plugins': [entry]})

    @pytest.mark.parametrize("value", ['loud', None, [1, 2]])
    def test_preset_with_non_numeric_value(self, value):
        entry = _plugin(presets=[
            {'id': 'p', 'name': 'P', 'parameters': {'low': value}},
        ])
        with pytest.raises(CatalogError, match="preset 'p'") as exc_info:
            PluginCatalog.from_dict({'plugins': [entry]})
        assert exc_info.value.plugin_id == 'eq-test'

    def test_plugin_without_parameters(self):
        entry = _plugin()
        del entry['parameters']
        catalog = PluginCatalog.from_dict({'plugins': [entry]})
        assert catalog.require('eq-test').parameters == ()
