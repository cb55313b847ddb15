import json

import pytest
import yaml

from api_normalizer.exceptions import UnknownMappingConfigError
from api_normalizer.mapping.configs import MAPPING_CONFIGS, RAML_CONFIG, get_mapping_config
from api_normalizer.mapping.engine import map_metadata
from api_normalizer.mapping.validator import check_examples, validate_mapping

CONFIG_NAMES = list(MAPPING_CONFIGS)


def test_registry_keys():
    assert CONFIG_NAMES == ["raml", "apiBlueprint", "customJson"]


@pytest.mark.parametrize("name", CONFIG_NAMES)
def test_examples_map_exactly(name):
    config = get_mapping_config(name)
    assert config.examples
    for example in config.examples:
        assert map_metadata(example.source, config) == example.expected


@pytest.mark.parametrize("name", CONFIG_NAMES)
def test_examples_pass_structure_check(name):
    assert check_examples(get_mapping_config(name)) == []


@pytest.mark.parametrize("name", CONFIG_NAMES)
def test_example_sources_validate(name):
    config = get_mapping_config(name)
    for example in config.examples:
        assert validate_mapping(example.source, config) == []


@pytest.mark.parametrize("name", CONFIG_NAMES)
def test_templates_map_cleanly(name):
    config = get_mapping_config(name)
    source = yaml.safe_load(config.template)
    assert validate_mapping(source, config) == []
    result = map_metadata(source, config)
    assert result["info"]["title"]
    assert result["paths"]


def test_custom_json_template_is_json():
    assert json.loads(MAPPING_CONFIGS["customJson"].template)["api"]["name"] == "Custom API"


@pytest.mark.parametrize("name", CONFIG_NAMES)
def test_required_fields_are_described(name):
    required = [field.name for field in get_mapping_config(name).fields if field.required]
    assert len(required) == 2


def test_raml_resource_display_name_becomes_summary():
    result = map_metadata(
        {
            "title": "Example API",
            "version": "v1",
            "resources": [{"relativeUri": "/users", "displayName": "Get Users", "methods": [{"method": "GET"}]}],
        },
        RAML_CONFIG,
    )
    assert result["paths"]["/users"]["get"]["summary"] == "Get Users"
    assert result["servers"] == []


def test_raml_nested_resources_and_methods():
    result = map_metadata(yaml.safe_load(RAML_CONFIG.template), RAML_CONFIG)
    assert set(result["paths"]) == {"/users", "/users/{userId}"}
    assert result["paths"]["/users/{userId}"]["get"]["parameters"] == [{"name": "userId", "type": "string"}]


def test_raml_documentation_paragraphs_are_joined():
    result = map_metadata(
        {"title": "T", "version": "1", "documentation": [{"content": "One"}, {"title": "empty"}, {"content": "Two"}]},
        RAML_CONFIG,
    )
    assert result["info"]["description"] == "One\n\nTwo"


def test_blueprint_host_keeps_existing_scheme():
    config = get_mapping_config("apiBlueprint")
    result = map_metadata({"metadata": {"title": "T", "version": "1", "host": "http://local:8080"}}, config)
    assert result["servers"] == [{"url": "http://local:8080"}]


def test_blueprint_actions_across_groups():
    config = get_mapping_config("apiBlueprint")
    source = yaml.safe_load(config.template)
    source["resourceGroups"].append({"resources": [{"uriTemplate": "/notes", "actions": [{"method": "DELETE", "name": "Drop"}]}]})
    paths = map_metadata(source, config)["paths"]
    assert set(paths["/users"]) == {"get", "post"}
    assert paths["/notes"]["delete"] == {"summary": "Drop"}


def test_custom_json_method_defaults_to_get():
    config = get_mapping_config("customJson")
    result = map_metadata({"api": {"name": "C", "version": "1", "endpoints": [{"path": "/x"}]}}, config)
    assert result["paths"] == {"/x": {"get": {}}}


def test_malformed_resource_is_skipped(caplog):
    result = map_metadata({"title": "T", "version": "1", "resources": [{"methods": []}]}, RAML_CONFIG)
    assert result["info"] == {"title": "T", "version": "1"}
    assert result["paths"] == {}
    assert "Error applying mapping rule $.resources[*] -> paths" in caplog.text


def test_unknown_config():
    with pytest.raises(UnknownMappingConfigError) as exc_info:
        get_mapping_config("wsdl")
    assert exc_info.value.name == "wsdl"
