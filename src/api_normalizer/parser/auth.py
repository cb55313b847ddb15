"""Infer authentication requirements from parsed documents and operations."""

from typing import Any

from .base import AuthDescriptor

NO_AUTH = AuthDescriptor(type="none", required=False)


def detect_document_auth(doc: dict) -> AuthDescriptor:
    """Work out the document-level default authentication.

    Resolution order, first applicable wins: OpenAPI security schemes
    (``components.securitySchemes`` or Swagger 2 ``securityDefinitions``),
    RAML ``securitySchemes``, a generic ``auth``/``authentication`` object.
    Documents with none of these get ``type='none'``.
    """
    schemes = (doc.get("components") or {}).get("securitySchemes") or doc.get("securityDefinitions")
    if isinstance(schemes, dict) and schemes:
        scheme = _first_value(schemes)
        return AuthDescriptor(
            type=str(scheme.get("type") or "apiKey"),
            required=bool(doc.get("security")),
            location=scheme.get("in") or "header",
        )

    raml_schemes = doc.get("securitySchemes")
    if raml_schemes:
        scheme = _first_raml_scheme(raml_schemes)
        described_by = scheme.get("describedBy") or {}
        return AuthDescriptor(
            type=str(scheme.get("type") or "apiKey"),
            required=True,
            location="header" if described_by.get("headers") else "query",
        )

    auth = doc.get("auth") or doc.get("authentication")
    if auth:
        if not isinstance(auth, dict):
            auth = {"type": str(auth)}
        return AuthDescriptor(
            type=auth.get("type") or "apiKey",
            required=auth.get("required") is not False,
            location=auth.get("location") or "header",
        )

    return NO_AUTH


def detect_operation_auth(operation: dict) -> AuthDescriptor:
    """Work out the authentication of a single operation or RAML method.

    Any ``security`` or ``securedBy`` value that is present counts, an
    empty list included; only a missing (or null) key resolves to
    ``type='none'``.
    """
    security = operation.get("security")
    if security is None:
        security = operation.get("securedBy")
    if security is None:
        return NO_AUTH

    if isinstance(security, list):
        auth_type = "multiple"
    elif isinstance(security, dict):
        auth_type = security.get("type") or "apiKey"
    else:
        auth_type = "apiKey"
    return AuthDescriptor(type=auth_type, required=True, location="header")


def _first_value(mapping: dict) -> dict:
    value = next(iter(mapping.values()))
    return value if isinstance(value, dict) else {}


def _first_raml_scheme(schemes: Any) -> dict:
    # RAML 1.0 declares a mapping, RAML 0.8 a list of single-key mappings
    if isinstance(schemes, list):
        first = schemes[0] if schemes else {}
        if isinstance(first, dict) and len(first) == 1:
            inner = _first_value(first)
            if "type" in inner:
                return inner
        return first if isinstance(first, dict) else {}
    if isinstance(schemes, dict):
        return _first_value(schemes)
    return {}
