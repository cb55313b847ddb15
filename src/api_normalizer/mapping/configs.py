"""Declarative mapping rules and the built-in mapping configs.

A MappingConfig is an ordered list of ``source -> target`` rules. ``source``
is a JSONPath-like query into the input document, ``target`` a dotted path
into the canonical OpenAPI document (``servers[0].url`` indexes a list).
An optional ``transform`` receives the full list of matches.
"""

from types import MappingProxyType
from typing import Any, Callable, Mapping

from pydantic import BaseModel, ConfigDict

from api_normalizer.exceptions import UnknownMappingConfigError


class MappingRule(BaseModel):
    model_config = ConfigDict(frozen=True)

    source: str
    target: str
    transform: Callable[[list], Any] | None = None


class MappingExample(BaseModel):
    """A source document and the canonical document it must map to."""

    model_config = ConfigDict(frozen=True)

    source: Any
    expected: Any


class FieldSpec(BaseModel):
    """Form-field metadata describing the expected top-level source shape."""

    model_config = ConfigDict(frozen=True)

    name: str  # dotted path into the source document
    type: str  # string / array / object
    description: str = ""
    required: bool = False
    default: Any = None


class MappingConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    rules: tuple[MappingRule, ...] = ()
    examples: tuple[MappingExample, ...] = ()
    template: str | None = None
    fields: tuple[FieldSpec, ...] = ()


def _operation(summary: Any, description: Any, parameters: Any) -> dict:
    op = {"summary": summary, "description": description, "parameters": parameters}
    return {key: value for key, value in op.items() if value is not None}


def _join_paragraphs(docs: list) -> str | None:
    parts = [str(doc) for doc in docs if doc]
    return "\n\n".join(parts) if parts else None


def _host_url(hosts: list) -> str | None:
    if not hosts or not hosts[0]:
        return None
    host = str(hosts[0])
    return host if "://" in host else f"https://{host}"


def _raml_paths(resources: list) -> dict | None:
    """Build ``paths`` from RAML resources, nested resources included."""
    if not resources:
        return None
    paths: dict = {}
    stack = [(res, "") for res in reversed(resources)]
    while stack:
        res, prefix = stack.pop()
        path = prefix + res["relativeUri"]
        for method in res.get("methods") or []:
            paths.setdefault(path, {})[str(method["method"]).lower()] = _operation(
                method.get("displayName") or res.get("displayName"),
                method.get("description") or res.get("description"),
                res.get("uriParameters"),
            )
        stack.extend((child, path) for child in reversed(res.get("resources") or []))
    return paths


def _blueprint_paths(resources: list) -> dict | None:
    if not resources:
        return None
    paths: dict = {}
    for res in resources:
        for action in res.get("actions") or []:
            paths.setdefault(res["uriTemplate"], {})[str(action["method"]).lower()] = _operation(
                res.get("name") or action.get("name"),
                res.get("description") or action.get("description"),
                res.get("parameters") or action.get("parameters"),
            )
    return paths


def _custom_json_paths(endpoints: list) -> dict | None:
    if not endpoints:
        return None
    paths: dict = {}
    for endpoint in endpoints:
        method = str(endpoint.get("method") or "get").lower()
        paths.setdefault(endpoint["path"], {})[method] = _operation(
            endpoint.get("summary"),
            endpoint.get("description"),
            endpoint.get("params"),
        )
    return paths


RAML_CONFIG = MappingConfig(
    name="RAML",
    description="Maps RAML metadata to OpenAPI format",
    rules=(
        MappingRule(source="$.title", target="info.title"),
        MappingRule(source="$.version", target="info.version"),
        MappingRule(source="$.baseUri", target="servers[0].url"),
        MappingRule(source="$.documentation[*].content", target="info.description", transform=_join_paragraphs),
        MappingRule(source="$.resources[*]", target="paths", transform=_raml_paths),
    ),
    examples=(
        MappingExample(
            source={
                "title": "Example API",
                "version": "v1",
                "baseUri": "https://api.example.com",
                "documentation": [{"content": "API Documentation"}],
                "resources": [
                    {
                        "relativeUri": "/users",
                        "methods": [{"method": "GET"}],
                        "displayName": "Get Users",
                        "description": "List all users",
                    }
                ],
            },
            expected={
                "openapi": "3.0.3",
                "info": {"title": "Example API", "version": "v1", "description": "API Documentation"},
                "servers": [{"url": "https://api.example.com"}],
                "paths": {"/users": {"get": {"summary": "Get Users", "description": "List all users"}}},
            },
        ),
    ),
    template="""\
title: Example API
version: v1
baseUri: https://api.example.com
documentation:
  - title: Overview
    content: API Documentation
resources:
  - relativeUri: /users
    displayName: Get Users
    description: List all users
    methods:
      - method: GET
    resources:
      - relativeUri: /{userId}
        displayName: Get User
        description: Fetch a single user
        uriParameters:
          - name: userId
            type: string
        methods:
          - method: GET
""",
    fields=(
        FieldSpec(name="title", type="string", description="API title", required=True),
        FieldSpec(name="version", type="string", description="API version", required=True, default="v1"),
        FieldSpec(name="baseUri", type="string", description="Base URI of the API"),
        FieldSpec(name="documentation", type="array", description="Documentation sections with title and content"),
        FieldSpec(name="resources", type="array", description="Resources with relativeUri, displayName and methods"),
    ),
)

API_BLUEPRINT_CONFIG = MappingConfig(
    name="API Blueprint",
    description="Maps API Blueprint metadata to OpenAPI format",
    rules=(
        MappingRule(source="$.metadata.title", target="info.title"),
        MappingRule(source="$.metadata.version", target="info.version"),
        MappingRule(source="$.metadata.description", target="info.description"),
        MappingRule(source="$.metadata.host", target="servers[0].url", transform=_host_url),
        MappingRule(source="$.resourceGroups[*].resources[*]", target="paths", transform=_blueprint_paths),
    ),
    examples=(
        MappingExample(
            source={
                "metadata": {
                    "title": "Example API",
                    "version": "1.0",
                    "description": "API Description",
                    "host": "api.example.com",
                },
                "resourceGroups": [
                    {
                        "resources": [
                            {
                                "uriTemplate": "/users",
                                "name": "Users",
                                "description": "User operations",
                                "actions": [{"method": "GET"}],
                            }
                        ]
                    }
                ],
            },
            expected={
                "openapi": "3.0.3",
                "info": {"title": "Example API", "version": "1.0", "description": "API Description"},
                "servers": [{"url": "https://api.example.com"}],
                "paths": {"/users": {"get": {"summary": "Users", "description": "User operations"}}},
            },
        ),
    ),
    template="""\
metadata:
  title: Example API
  version: "1.0"
  description: API Description
  host: api.example.com
resourceGroups:
  - name: Users
    resources:
      - uriTemplate: /users
        name: Users
        description: User operations
        actions:
          - method: GET
          - method: POST
""",
    fields=(
        FieldSpec(name="metadata.title", type="string", description="API title", required=True),
        FieldSpec(name="metadata.version", type="string", description="API version", required=True, default="1.0"),
        FieldSpec(name="metadata.description", type="string", description="API description"),
        FieldSpec(name="metadata.host", type="string", description="Host name, https is assumed"),
        FieldSpec(name="resourceGroups", type="array", description="Groups of resources with uriTemplate and actions"),
    ),
)

CUSTOM_JSON_CONFIG = MappingConfig(
    name="Custom JSON",
    description="Maps custom JSON metadata to OpenAPI format",
    rules=(
        MappingRule(source="$.api.name", target="info.title"),
        MappingRule(source="$.api.version", target="info.version"),
        MappingRule(source="$.api.description", target="info.description"),
        MappingRule(source="$.api.endpoints[*]", target="paths", transform=_custom_json_paths),
    ),
    examples=(
        MappingExample(
            source={
                "api": {
                    "name": "Custom API",
                    "version": "1.0.0",
                    "description": "Custom API Description",
                    "endpoints": [
                        {
                            "path": "/data",
                            "method": "GET",
                            "summary": "Get Data",
                            "description": "Retrieve data",
                        }
                    ],
                }
            },
            expected={
                "openapi": "3.0.3",
                "info": {"title": "Custom API", "version": "1.0.0", "description": "Custom API Description"},
                "servers": [],
                "paths": {"/data": {"get": {"summary": "Get Data", "description": "Retrieve data"}}},
            },
        ),
    ),
    template="""\
{
  "api": {
    "name": "Custom API",
    "version": "1.0.0",
    "description": "Custom API Description",
    "endpoints": [
      {
        "path": "/data",
        "method": "GET",
        "summary": "Get Data",
        "description": "Retrieve data"
      }
    ]
  }
}
""",
    fields=(
        FieldSpec(name="api.name", type="string", description="API title", required=True),
        FieldSpec(name="api.version", type="string", description="API version", required=True, default="1.0.0"),
        FieldSpec(name="api.description", type="string", description="API description"),
        FieldSpec(name="api.endpoints", type="array", description="Endpoints with path, method, summary and params"),
    ),
)

MAPPING_CONFIGS: Mapping[str, MappingConfig] = MappingProxyType({
    "raml": RAML_CONFIG,
    "apiBlueprint": API_BLUEPRINT_CONFIG,
    "customJson": CUSTOM_JSON_CONFIG,
})


def get_mapping_config(name: str) -> MappingConfig:
    try:
        return MAPPING_CONFIGS[name]
    except KeyError:
        raise UnknownMappingConfigError(name) from None
