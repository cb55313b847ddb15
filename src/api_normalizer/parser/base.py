"""Unified data models for parsed API documentation.

All parsers (OpenAPI/Swagger, RAML, generic JSON/YAML) convert their input
into these format-agnostic models. The models are frozen: once a parser has
built a ParsedMetadata it is treated as an immutable value.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator, model_validator

from api_normalizer.config import DEFAULT_TITLE, DEFAULT_VERSION


class _Model(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    def to_dict(self) -> dict:
        """Dump using the wire field names, leaving out absent values."""
        return self.model_dump(by_alias=True, exclude_none=True)


class Param(_Model):
    """A single API parameter (query, path, or header)."""

    name: str
    location: str = Field(alias="in")  # query / path / header
    description: str | None = None
    required: bool = False
    type: str = "string"
    format: str | None = None
    enum: list | None = None
    default: Any = None

    @field_validator("name", mode="before")
    @classmethod
    def _name_as_str(cls, value: Any) -> Any:
        return value if value is None else str(value)


class AuthDescriptor(_Model):
    """Authentication requirement of a document or a single operation."""

    type: str  # none / apiKey / bearer / basic / multiple / ...
    required: bool = False
    location: str | None = None  # header / query

    @model_validator(mode="after")
    def _none_is_never_required(self) -> "AuthDescriptor":
        if self.type == "none" and self.required:
            raise ValueError("authentication of type 'none' cannot be required")
        return self

    @property
    def is_none(self) -> bool:
        return self.type == "none"


class ResponseSpec(_Model):
    description: str | None = None
    schema_: Any = Field(default=None, alias="schema")


class EndpointParameters(_Model):
    query: list[Param] = Field(default_factory=list)
    path: list[Param] = Field(default_factory=list)
    header: list[Param] = Field(default_factory=list)
    body: Any = None

    def flatten(self) -> list[Param]:
        return [*self.path, *self.query, *self.header]


class ParsedEndpoint(_Model):
    """A single API operation with all its metadata."""

    path: str  # /pets/{petId}
    method: str  # GET / POST / PUT / DELETE / PATCH ...
    summary: str | None = None
    description: str | None = None
    parameters: EndpointParameters = Field(default_factory=EndpointParameters)
    responses: dict[str, ResponseSpec] = Field(default_factory=dict)
    # Only set when the operation overrides the document default.
    authentication: AuthDescriptor | None = None

    @field_validator("method", mode="before")
    @classmethod
    def _upper_method(cls, value: Any) -> Any:
        return str(value).upper() if value is not None else value

    @field_validator("responses", mode="before")
    @classmethod
    def _status_codes_as_str(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return {str(code): resp for code, resp in value.items()}
        return value


class ParsedMetadata(_Model):
    """Format-agnostic description of a whole API document."""

    title: str = DEFAULT_TITLE
    version: str = DEFAULT_VERSION
    base_url: str = Field(default="", alias="baseUrl")
    description: str | None = None
    endpoints: list[ParsedEndpoint] = Field(default_factory=list)
    authentication: AuthDescriptor | None = None

    @field_validator("title", "version", "base_url", mode="before")
    @classmethod
    def _scalar_as_str(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            return {"title": DEFAULT_TITLE, "version": DEFAULT_VERSION}.get(info.field_name, "")
        return str(value)
