"""Format dispatch: pick the parser for a format tag and run it."""

import json
import logging
from types import MappingProxyType
from typing import Callable, Mapping

from api_normalizer.exceptions import UnsupportedFormatError

from .base import ParsedMetadata
from .detect import FormatTag, detect_format
from .generic import parse_json_text, parse_yaml_text
from .raml import parse_raml_text
from .swagger import parse_openapi_text

logger = logging.getLogger(__name__)

PARSERS: Mapping[FormatTag, Callable[[str], ParsedMetadata]] = MappingProxyType({
    FormatTag.JSON: parse_json_text,
    FormatTag.YAML: parse_yaml_text,
    FormatTag.OPENAPI: parse_openapi_text,
    FormatTag.RAML: parse_raml_text,
})

FORMAT_ALIASES = {
    "yml": FormatTag.YAML,
    "swagger": FormatTag.OPENAPI,
}


def resolve_format(fmt: str | FormatTag) -> FormatTag:
    """Map a user-supplied format name onto a FormatTag (case-insensitive)."""
    if isinstance(fmt, FormatTag):
        return fmt
    name = str(fmt).strip().lower()
    if name in FORMAT_ALIASES:
        return FORMAT_ALIASES[name]
    try:
        return FormatTag(name)
    except ValueError:
        raise UnsupportedFormatError(str(fmt)) from None


def parse_metadata(text: str, fmt: str | FormatTag | None = None) -> ParsedMetadata:
    """Parse raw document text into ParsedMetadata.

    Without an explicit format the text is classified first; a JSON attempt
    that fails falls through to YAML. Syntax errors from the JSON and YAML
    libraries propagate unchanged.

    Raises:
        DetectionError: no format signature matched.
        UnsupportedFormatError: ``fmt`` is not a known format.
    """
    if fmt is not None:
        return PARSERS[resolve_format(fmt)](text)

    tag = detect_format(text)
    logger.debug("Detected format: %s", tag.value)
    if tag is FormatTag.JSON:
        try:
            return parse_json_text(text)
        except json.JSONDecodeError:
            logger.debug("JSON parse failed, retrying as YAML")
            return parse_yaml_text(text)
    return PARSERS[tag](text)
