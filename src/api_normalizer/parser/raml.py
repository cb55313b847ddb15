"""RAML document parser.

Accepts two shapes of resource tree:

* raw RAML, where resources are keys starting with ``/`` and methods are
  HTTP verb keys inside them;
* the parser-AST shape, where each resource has ``relativeUri``, a
  ``methods`` list of ``{method, ...}`` and a nested ``resources`` list.

The tree is walked depth-first in document order with an explicit stack, so
deeply nested documents cannot exhaust the interpreter's recursion limit.
"""

from api_normalizer.config import get_settings
from api_normalizer.exceptions import InvalidDocumentError, ResourceDepthError

from .auth import detect_document_auth, detect_operation_auth
from .base import EndpointParameters, Param, ParsedEndpoint, ParsedMetadata
from .document import load_raml
from .swagger import build_responses, coerce_params

RAML_METHODS = ("get", "patch", "put", "post", "delete", "options", "head", "connect", "trace")


def parse_raml_text(text: str) -> ParsedMetadata:
    """Parse RAML text (``#%RAML`` header, YAML body)."""
    doc = load_raml(text)
    if not isinstance(doc, dict):
        raise InvalidDocumentError("RAML document must be a mapping")
    return parse_raml_document(doc)


def parse_raml_document(api: dict) -> ParsedMetadata:
    version = api.get("version")
    base_uri = str(api.get("baseUri") or "")
    if version is not None:
        base_uri = base_uri.replace("{version}", str(version))

    return ParsedMetadata(
        title=api.get("title"),
        version=version,
        base_url=base_uri,
        description=api.get("description"),
        endpoints=walk_resources(api),
        authentication=detect_document_auth(api),
    )


def walk_resources(root: dict, max_depth: int | None = None) -> list[ParsedEndpoint]:
    """Emit one ParsedEndpoint per method, visiting resources in pre-order.

    Each resource's path is its parent's path plus its ``relativeUri``.
    URI parameters declared on ancestors carry over to nested resources.

    Raises ResourceDepthError when nesting exceeds ``max_depth``.
    """
    limit = get_settings().max_resource_depth if max_depth is None else max_depth
    endpoints = []
    stack: list[tuple[dict, str, list[Param], int]] = [(root, "", [], 0)]

    while stack:
        resource, parent_path, inherited, depth = stack.pop()
        if depth > limit:
            raise ResourceDepthError(f"RAML resources nest deeper than {limit} levels at {parent_path}")

        path = parent_path + str(resource.get("relativeUri") or "")
        uri_params = _merge_by_name(inherited, coerce_params(resource.get("uriParameters"), "path"))

        for method in _methods(resource):
            endpoints.append(_build_endpoint(path, resource, method, uri_params))

        # Reversed so the first child is popped (and emitted) first
        for child in reversed(_children(resource)):
            stack.append((child, path, uri_params, depth + 1))

    return endpoints


def _build_endpoint(path: str, resource: dict, method: dict, uri_params: list[Param]) -> ParsedEndpoint:
    auth = detect_operation_auth(method)
    if auth.is_none:
        auth = detect_operation_auth(resource)

    return ParsedEndpoint(
        path=path,
        method=method["method"],
        summary=method.get("displayName"),
        description=method.get("description"),
        parameters=EndpointParameters(
            query=coerce_params(method.get("queryParameters"), "query"),
            path=uri_params,
            header=coerce_params(method.get("headers"), "header"),
            body=method.get("body"),
        ),
        responses=build_responses(method.get("responses")),
        authentication=None if auth.is_none else auth,
    )


def _methods(resource: dict) -> list[dict]:
    methods = []
    if isinstance(resource.get("methods"), list):
        methods = [m for m in resource["methods"] if isinstance(m, dict) and m.get("method")]

    for key, value in resource.items():
        if isinstance(key, str) and key.lower() in RAML_METHODS:
            methods.append({**(value if isinstance(value, dict) else {}), "method": key})
    return methods


def _children(resource: dict) -> list[dict]:
    children = []
    if isinstance(resource.get("resources"), list):
        children = [r for r in resource["resources"] if isinstance(r, dict)]

    for key, value in resource.items():
        if isinstance(key, str) and key.startswith("/"):
            child = dict(value) if isinstance(value, dict) else {}
            child.setdefault("relativeUri", key)
            children.append(child)
    return children


def _merge_by_name(inherited: list[Param], own: list[Param]) -> list[Param]:
    own_names = {p.name for p in own}
    return [p for p in inherited if p.name not in own_names] + own
