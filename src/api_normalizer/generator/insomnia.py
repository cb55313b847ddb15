"""Insomnia v4 export generator.

Turns ParsedMetadata (or a canonical OpenAPI document) into an Insomnia
collection: one workspace, a base environment holding ``base_url``, one
folder per first path segment and one request per endpoint.
"""

import json
from datetime import datetime, timezone
from typing import Any

from api_normalizer.config import VERSION
from api_normalizer.parser.base import AuthDescriptor, Param, ParsedEndpoint, ParsedMetadata
from api_normalizer.parser.swagger import parse_openapi_document

EXPORT_SOURCE = f"api-normalizer:v{VERSION}"


def generate_collection(source: ParsedMetadata | dict, now: datetime | None = None) -> dict:
    """Build an Insomnia export from parsed metadata or a canonical document.

    Resource IDs derive from ``now`` and the endpoint order, so the same
    input and timestamp always give the same export.
    """
    metadata = source if isinstance(source, ParsedMetadata) else parse_openapi_document(source)
    now = now or datetime.now(timezone.utc)
    stamp = int(now.timestamp() * 1000)

    workspace_id = f"wrk_{stamp}"
    resources = [
        {
            "_id": workspace_id,
            "_type": "workspace",
            "name": metadata.title,
            "description": metadata.description or f"Generated from {metadata.title} API metadata",
            "scope": "collection",
        },
        {
            "_id": f"env_{workspace_id}",
            "_type": "environment",
            "parentId": workspace_id,
            "name": "Base Environment",
            "data": {"base_url": metadata.base_url},
        },
    ]

    request_number = 0
    for group_name, endpoints in group_endpoints(metadata.endpoints).items():
        folder_id = f"fld_{stamp}_{group_name}"
        resources.append({
            "_id": folder_id,
            "_type": "request_group",
            "parentId": workspace_id,
            "name": group_name,
        })
        for endpoint in endpoints:
            request_id = f"req_{stamp}_{request_number}"
            resources.append(_request(request_id, folder_id, endpoint, metadata.authentication))
            request_number += 1

    return {
        "_type": "export",
        "__export_format": 4,
        "__export_date": now.isoformat(),
        "__export_source": EXPORT_SOURCE,
        "resources": resources,
    }


def group_endpoints(endpoints: list[ParsedEndpoint]) -> dict[str, list[ParsedEndpoint]]:
    """Group endpoints by first path segment; ``/`` goes to 'root'."""
    groups: dict[str, list[ParsedEndpoint]] = {}
    for endpoint in endpoints:
        segments = [s for s in endpoint.path.split("/") if s]
        groups.setdefault(segments[0] if segments else "root", []).append(endpoint)
    return groups


def _request(request_id: str, parent_id: str, endpoint: ParsedEndpoint, default_auth: AuthDescriptor | None) -> dict:
    request = {
        "_id": request_id,
        "_type": "request",
        "parentId": parent_id,
        "name": endpoint.summary or f"{endpoint.method} {endpoint.path}",
        "description": endpoint.description or "",
        "method": endpoint.method,
        "url": f"{{{{ base_url }}}}{endpoint.path}",
        "parameters": [_pair(p) for p in endpoint.parameters.query],
        "headers": [_pair(p) for p in endpoint.parameters.header],
        "authentication": {},
    }

    if endpoint.parameters.body is not None:
        request["body"] = {
            "mimeType": "application/json",
            "text": json.dumps(endpoint.parameters.body, indent=2, default=str),
        }

    auth = endpoint.authentication or default_auth
    if auth and not auth.is_none:
        request["authentication"] = {
            "type": auth.type.lower(),
            "disabled": False,
            "token": "{{ auth_token }}",
        }
        if auth.type == "bearer":
            request["authentication"]["prefix"] = "Bearer"
    return request


def _pair(param: Param) -> dict:
    return {
        "name": param.name,
        "value": _value(param.default),
        "description": param.description or "",
        "disabled": not param.required,
    }


def _value(default: Any) -> str:
    # Insomnia holds raw text; non-string defaults use JSON spelling
    if default is None:
        return ""
    if isinstance(default, str):
        return default
    return json.dumps(default, default=str)
