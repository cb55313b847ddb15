"""Build the canonical OpenAPI document straight from ParsedMetadata."""

from typing import Any

from api_normalizer.parser.base import Param, ParsedEndpoint, ParsedMetadata

from .engine import new_canonical_document

DEFAULT_RESPONSES = {"200": {"description": "Successful response"}}


def to_canonical(metadata: ParsedMetadata, servers: list[dict] | None = None) -> dict:
    """Render ParsedMetadata as an OpenAPI 3.0.3 shaped document.

    ``servers`` replaces the single server derived from ``base_url``;
    entries without a ``url`` are dropped.
    """
    document = new_canonical_document()

    info = {"title": metadata.title, "version": metadata.version}
    if metadata.description:
        info["description"] = metadata.description
    document["info"] = info

    if servers is not None:
        document["servers"] = [dict(server) for server in servers if server.get("url")]
    elif metadata.base_url:
        document["servers"] = [{"url": metadata.base_url}]

    for endpoint in metadata.endpoints:
        document["paths"].setdefault(endpoint.path, {})[endpoint.method.lower()] = _operation(endpoint)
    return document


def _operation(endpoint: ParsedEndpoint) -> dict:
    op: dict[str, Any] = {
        "summary": endpoint.summary or f"{endpoint.method} {endpoint.path}",
        "description": endpoint.description or "",
        "parameters": [_parameter(param) for param in endpoint.parameters.flatten()],
    }

    body = endpoint.parameters.body
    if body is not None:
        if isinstance(body, dict) and "content" in body:
            op["requestBody"] = body
        else:
            op["requestBody"] = {"content": {"application/json": {"schema": body}}}

    responses = {}
    for status_code, response in endpoint.responses.items():
        rendered: dict[str, Any] = {"description": response.description or ""}
        if isinstance(response.schema_, dict):
            rendered["content"] = {"application/json": {"schema": response.schema_}}
        responses[status_code] = rendered
    op["responses"] = responses or dict(DEFAULT_RESPONSES)
    return op


def _parameter(param: Param) -> dict:
    schema = {"type": param.type}
    for key in ("format", "enum", "default"):
        value = getattr(param, key)
        if value is not None:
            schema[key] = value

    rendered = {
        "name": param.name,
        "in": param.location,
        # OpenAPI requires path parameters to be required
        "required": param.required or param.location == "path",
        "schema": schema,
    }
    if param.description:
        rendered["description"] = param.description
    return rendered
