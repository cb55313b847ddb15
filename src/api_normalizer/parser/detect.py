"""Auto-detect API documentation format."""

import json
import logging
from enum import Enum

import yaml

from api_normalizer.exceptions import DetectionError

logger = logging.getLogger(__name__)


class FormatTag(str, Enum):
    JSON = "json"
    YAML = "yaml"
    OPENAPI = "openapi"
    RAML = "raml"


def detect_format(text: str) -> FormatTag:
    """Classify raw document text without fully parsing it where avoidable.

    Checks run in order and the first match wins: strict JSON, the
    ``#%RAML`` directive, YAML (only when the text looks like YAML), then
    OpenAPI/Swagger keys inside non-JSON text.

    Raises DetectionError if nothing matches.
    """
    trimmed = text.strip()

    # Strict JSON first, so JSON is never classified as generic YAML
    if trimmed.startswith(("{", "[")):
        try:
            json.loads(trimmed)
            return FormatTag.JSON
        except ValueError:
            logger.debug("Input looks like JSON but does not parse, continuing")

    # RAML is line-oriented and may not be valid YAML, so no parse here.
    # Checked before the YAML sniff so a RAML body mentioning "openapi:"
    # still classifies as RAML.
    if trimmed.startswith("#%RAML"):
        return FormatTag.RAML

    if trimmed.startswith("---") or "swagger:" in trimmed or "openapi:" in trimmed:
        try:
            yaml.safe_load(trimmed)
            return FormatTag.YAML
        except yaml.YAMLError:
            logger.debug("Input looks like YAML but does not parse, continuing")

    if '"swagger":' in trimmed or '"openapi":' in trimmed:
        return FormatTag.OPENAPI

    raise DetectionError()


def is_openapi_text(text: str) -> bool:
    """Return True if the text carries an OpenAPI/Swagger version key."""
    return any(token in text for token in ("swagger:", "openapi:", '"swagger"', '"openapi"'))
