"""Generic JSON / YAML metadata parser.

Treats a loaded document as a bag of conventionally named fields. Documents
that turn out to be OpenAPI/Swagger are handed to the OpenAPI parser.
"""

import json
from typing import Any, Callable

import yaml

from api_normalizer.exceptions import InvalidDocumentError

from .auth import detect_document_auth
from .base import EndpointParameters, ParsedEndpoint, ParsedMetadata
from .swagger import (
    build_responses,
    coerce_params,
    extract_path_operations,
    parse_openapi_document,
    partition_parameters,
)


def first_present(data: dict, *candidates: str | Callable[[dict], Any], default: Any = None) -> Any:
    """Return the first candidate that resolves to a non-empty value.

    A candidate is either a key of ``data`` or a callable taking ``data``.
    """
    for candidate in candidates:
        value = candidate(data) if callable(candidate) else data.get(candidate)
        if value not in (None, ""):
            return value
    return default


def parse_json_text(text: str) -> ParsedMetadata:
    return parse_json_document(_require_mapping(json.loads(text)))


def parse_yaml_text(text: str) -> ParsedMetadata:
    # Loaded YAML has the same shape as loaded JSON
    return parse_json_document(_require_mapping(yaml.safe_load(text)))


def parse_json_document(data: dict) -> ParsedMetadata:
    """Build ParsedMetadata from a loaded JSON/YAML mapping."""
    if data.get("swagger") or data.get("openapi"):
        return parse_openapi_document(data)

    return ParsedMetadata(
        title=first_present(data, "title", "name"),
        version=first_present(data, "version"),
        base_url=first_present(data, "baseUrl", "basePath", default=""),
        description=data.get("description"),
        endpoints=_extract_endpoints(data),
        authentication=detect_document_auth(data),
    )


def _extract_endpoints(data: dict) -> list[ParsedEndpoint]:
    if isinstance(data.get("paths"), dict):
        return extract_path_operations(data["paths"], root=data)

    endpoint_list = first_present(data, "endpoints", "resources", default=[])
    if not isinstance(endpoint_list, list):
        return []
    return [_build_listed_endpoint(item) for item in endpoint_list if isinstance(item, dict)]


def _build_listed_endpoint(item: dict) -> ParsedEndpoint:
    # An item may also carry an OpenAPI-style "parameters" list
    listed = partition_parameters(
        [p for p in item.get("parameters") or [] if isinstance(p, dict)]
    )
    parameters = EndpointParameters(
        query=listed.query + coerce_params(item.get("queryParameters"), "query"),
        path=listed.path + coerce_params(item.get("pathParameters"), "path"),
        header=listed.header + coerce_params(item.get("headers"), "header"),
        body=item.get("body", listed.body),
    )

    return ParsedEndpoint(
        path=first_present(item, "path", "url", default=""),
        method=first_present(item, "method", default="GET"),
        summary=first_present(item, "summary", "name"),
        description=item.get("description"),
        parameters=parameters,
        responses=build_responses(item.get("responses")),
    )


def _require_mapping(data: Any) -> dict:
    if not isinstance(data, dict):
        raise InvalidDocumentError(f"Expected a mapping at the top level, got {type(data).__name__}")
    return data
