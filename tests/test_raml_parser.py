import logging
from pathlib import Path

import pytest

from api_normalizer.exceptions import ResourceDepthError
from api_normalizer.parser.base import AuthDescriptor
from api_normalizer.parser.loader import parse_metadata
from api_normalizer.parser.raml import parse_raml_document, walk_resources

FIXTURES = Path(__file__).parent / "fixtures"


def _load_fixture():
    return parse_metadata((FIXTURES / "sample.raml").read_text(encoding="utf-8"))


class TestRawRaml:
    def test_document_fields(self):
        meta = _load_fixture()
        assert meta.title == "Example API"
        assert meta.version == "v1"
        assert meta.base_url == "https://api.example.com/v1"

    def test_depth_first_order(self):
        meta = _load_fixture()
        assert [(ep.method, ep.path) for ep in meta.endpoints] == [
            ("GET", "/users"),
            ("POST", "/users"),
            ("GET", "/users/{userId}"),
            ("GET", "/users/{userId}/orders"),
            ("GET", "/health"),
        ]

    def test_summary_from_display_name(self):
        meta = _load_fixture()
        assert meta.endpoints[0].summary == "List Users"
        assert meta.endpoints[0].description == "Returns all users"

    def test_optional_query_parameter(self):
        page = _load_fixture().endpoints[0].parameters.query[0]
        assert page.name == "page"
        assert page.type == "integer"
        assert page.default == 1
        assert page.required is False

    def test_uri_parameters_are_inherited(self):
        meta = _load_fixture()
        assert [p.name for p in meta.endpoints[2].parameters.path] == ["userId"]
        assert [p.name for p in meta.endpoints[3].parameters.path] == ["userId"]
        assert meta.endpoints[2].parameters.path[0].required is True

    def test_responses(self):
        response = _load_fixture().endpoints[0].responses["200"]
        assert response.description == "A list of users"
        assert response.schema_ == "array"

    def test_security(self):
        meta = _load_fixture()
        assert meta.authentication == AuthDescriptor(type="OAuth 2.0", required=True, location="header")
        assert meta.endpoints[0].authentication is None
        assert meta.endpoints[1].authentication.type == "multiple"

    def test_include_tag_is_kept_as_text(self, caplog):
        with caplog.at_level(logging.WARNING):
            meta = _load_fixture()
        body = meta.endpoints[1].parameters.body
        assert body["application/json"]["example"] == "examples/user.json"
        assert "!include" in caplog.text


class TestResourceTree:
    def test_ast_shape(self):
        meta = parse_raml_document({
            "title": "Tree",
            "resources": [
                {
                    "relativeUri": "/users",
                    "methods": [{"method": "get", "displayName": "Get Users"}],
                    "resources": [
                        {"relativeUri": "/{id}", "methods": [{"method": "delete", "securedBy": {"type": "basic"}}]}
                    ],
                },
                {"relativeUri": "/teams", "methods": [{"method": "GET"}]},
            ],
        })
        assert [(ep.method, ep.path) for ep in meta.endpoints] == [
            ("GET", "/users"),
            ("DELETE", "/users/{id}"),
            ("GET", "/teams"),
        ]
        assert meta.endpoints[1].authentication == AuthDescriptor(type="basic", required=True, location="header")
        assert meta.base_url == ""

    def test_resource_level_security_applies_to_methods(self):
        endpoints = walk_resources({"/admin": {"securedBy": ["oauth"], "get": {}}})
        assert endpoints[0].authentication.type == "multiple"

    def test_depth_cap(self):
        root: dict = {}
        node = root
        for _ in range(10):
            node["/x"] = {"get": {}}
            node = node["/x"]
        assert len(walk_resources(root, max_depth=10)) == 10
        with pytest.raises(ResourceDepthError):
            walk_resources(root, max_depth=5)

    def test_deep_tree_does_not_recurse(self):
        root: dict = {}
        node = root
        for _ in range(2000):
            node["/n"] = {}
            node = node["/n"]
        node["get"] = {}
        endpoints = walk_resources(root, max_depth=5000)
        assert len(endpoints) == 1
        assert endpoints[0].path == "/n" * 2000

    def test_raml_08_security_list(self):
        meta = parse_raml_document({
            "title": "Old",
            "securitySchemes": [{"token": {"type": "x-custom"}}],
        })
        assert meta.authentication == AuthDescriptor(type="x-custom", required=True, location="query")
