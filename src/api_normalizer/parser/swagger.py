"""OpenAPI / Swagger document parser.

Parses OpenAPI 3.x and Swagger 2.0 documents into ParsedMetadata. The
parameter, response and path-walking helpers here are shared with the
generic JSON/YAML and RAML parsers.
"""

import logging
from typing import Any

from api_normalizer.config import HTTP_METHODS
from api_normalizer.exceptions import InvalidDocumentError

from .auth import detect_document_auth, detect_operation_auth
from .base import EndpointParameters, Param, ParsedEndpoint, ParsedMetadata, ResponseSpec
from .document import load_document

logger = logging.getLogger(__name__)

PARAM_LOCATIONS = ("query", "path", "header")


def parse_openapi_text(text: str) -> ParsedMetadata:
    """Parse OpenAPI/Swagger JSON or YAML text."""
    doc = load_document(text)
    if not isinstance(doc, dict):
        raise InvalidDocumentError("OpenAPI document must be a mapping")
    return parse_openapi_document(doc)


def parse_openapi_document(api: dict) -> ParsedMetadata:
    """Build ParsedMetadata from an already-loaded OpenAPI/Swagger dict."""
    info = api.get("info") or {}
    return ParsedMetadata(
        title=info.get("title"),
        version=info.get("version"),
        base_url=_base_url(api),
        description=info.get("description"),
        endpoints=extract_path_operations(api.get("paths") or {}, root=api, with_auth=True),
        authentication=detect_document_auth(api),
    )


def extract_path_operations(paths: dict, root: dict | None = None, with_auth: bool = False) -> list[ParsedEndpoint]:
    """Build one ParsedEndpoint per (path, method) pair, in document order."""
    endpoints = []
    for path, path_item in paths.items():
        if not isinstance(path_item, dict):
            continue
        shared = path_item.get("parameters") or []

        for method, operation in path_item.items():
            # Skips "parameters", "$ref", "summary", "servers" and x- extensions
            if str(method).lower() not in HTTP_METHODS:
                logger.debug("Skipping non-operation key %r under %s", method, path)
                continue
            endpoints.append(
                _build_operation(str(path), str(method), operation or {}, shared, root or {}, with_auth)
            )
    return endpoints


def _build_operation(
    path: str, method: str, operation: dict, shared: list, root: dict, with_auth: bool
) -> ParsedEndpoint:
    raw_params = _merge_parameters(
        [_resolve_local_ref(p, root) for p in shared],
        [_resolve_local_ref(p, root) for p in operation.get("parameters") or []],
    )
    auth = detect_operation_auth(operation) if with_auth else None

    return ParsedEndpoint(
        path=path,
        method=method,
        summary=operation.get("summary"),
        description=operation.get("description"),
        parameters=partition_parameters(raw_params, body=operation.get("requestBody")),
        responses=build_responses(operation.get("responses")),
        authentication=None if auth is None or auth.is_none else auth,
    )


def _merge_parameters(shared: list, own: list) -> list[dict]:
    """Path-level parameters first; operation parameters override by (name, in)."""
    own_keys = {(p.get("name"), p.get("in")) for p in own}
    inherited = [p for p in shared if (p.get("name"), p.get("in")) not in own_keys]
    return inherited + own


def _resolve_local_ref(param: Any, root: dict) -> dict:
    if not isinstance(param, dict):
        return {}
    ref = param.get("$ref")
    if not isinstance(ref, str) or not ref.startswith("#/"):
        return param

    current: Any = root
    for segment in ref[2:].split("/"):
        segment = segment.replace("~1", "/").replace("~0", "~")
        if not isinstance(current, dict) or segment not in current:
            logger.debug("Leaving unresolvable parameter reference %s", ref)
            return param
        current = current[segment]
    return current if isinstance(current, dict) else param


def partition_parameters(raw_params: list[dict], body: Any = None) -> EndpointParameters:
    """Split a flat parameter list into query/path/header buckets by ``in``.

    A Swagger 2 ``in: body`` parameter supplies the body schema when no
    OpenAPI 3 request body is given.
    """
    buckets: dict[str, list[Param]] = {location: [] for location in PARAM_LOCATIONS}
    for raw in raw_params:
        location = raw.get("in")
        if location == "body" and body is None:
            body = raw.get("schema")
        elif location in buckets and raw.get("name") is not None:
            buckets[location].append(build_param(raw))
    return EndpointParameters(**buckets, body=body)


def build_param(raw: dict, location: str | None = None) -> Param:
    schema = raw.get("schema") if isinstance(raw.get("schema"), dict) else {}
    enum = raw.get("enum", schema.get("enum"))
    return Param(
        name=raw["name"],
        location=location or raw.get("in", "query"),
        description=raw.get("description"),
        required=bool(raw.get("required", False)),
        type=_type_name(raw.get("type") or schema.get("type")),
        format=raw.get("format") or schema.get("format"),
        enum=enum if isinstance(enum, list) else None,
        default=raw.get("default", schema.get("default")),
    )


def coerce_params(raw: Any, location: str) -> list[Param]:
    """Build Params from a list of parameter objects or a name -> spec mapping.

    The mapping form is what RAML and most hand-written endpoint lists use;
    a value may be a full spec, a bare type name, or empty.
    """
    if not raw:
        return []

    items: list[dict] = []
    if isinstance(raw, dict):
        for name, spec in raw.items():
            if isinstance(spec, str):
                spec = {"type": spec}
            elif not isinstance(spec, dict):
                spec = {}
            name = str(spec.get("name", name))
            # RAML 1.0 marks optional parameters with a trailing "?"
            if name.endswith("?"):
                name, spec = name[:-1], {**spec, "required": False}
            items.append({**spec, "name": name})
    elif isinstance(raw, list):
        items = [item for item in raw if isinstance(item, dict) and item.get("name") is not None]

    return [build_param(item, location) for item in items]


def build_responses(raw: Any) -> dict[str, ResponseSpec]:
    if not isinstance(raw, dict):
        return {}
    result = {}
    for status_code, resp in raw.items():
        resp = resp if isinstance(resp, dict) else {}
        result[str(status_code)] = ResponseSpec(
            description=resp.get("description"),
            schema=_response_schema(resp),
        )
    return result


def _response_schema(resp: dict) -> Any:
    if "schema" in resp:
        return resp["schema"]
    content = resp.get("content") or resp.get("body")
    if not isinstance(content, dict):
        return None
    # RAML bodies may skip the media type level
    if "schema" in content or "type" in content:
        return content.get("schema") or content.get("type")
    for media in content.values():
        if isinstance(media, dict):
            return media.get("schema") or media.get("type")
    return None


def _type_name(value: Any) -> str:
    # OpenAPI 3.1 allows a list such as ["string", "null"]
    if isinstance(value, list):
        value = next((t for t in value if t != "null"), None)
    return str(value) if value else "string"


def _base_url(api: dict) -> str:
    servers = api.get("servers")
    if isinstance(servers, list) and servers and isinstance(servers[0], dict) and servers[0].get("url"):
        return str(servers[0]["url"])

    base_path = api.get("basePath") or ""
    host = api.get("host")
    if host:
        schemes = api.get("schemes") or ["https"]
        return f"{schemes[0]}://{host}{base_path}"
    return base_path
