"""Turn raw document text into Python objects."""

import json
import logging
from typing import Any

import yaml

logger = logging.getLogger(__name__)


class RamlLoader(yaml.SafeLoader):
    """SafeLoader that keeps RAML tags (``!include`` etc.) as plain values."""


def _construct_tagged(loader: RamlLoader, tag_suffix: str, node: yaml.Node) -> Any:
    logger.warning("Keeping RAML tag !%s unresolved", tag_suffix)
    if isinstance(node, yaml.ScalarNode):
        return loader.construct_scalar(node)
    if isinstance(node, yaml.SequenceNode):
        return loader.construct_sequence(node)
    return loader.construct_mapping(node)


RamlLoader.add_multi_constructor("!", _construct_tagged)


def load_document(text: str) -> Any:
    """Parse JSON or YAML text.

    Strict JSON is tried first when the text opens like JSON; JSON syntax
    errors fall through to the YAML attempt, whose error propagates.
    """
    trimmed = text.strip()
    if trimmed.startswith(("{", "[")):
        try:
            return json.loads(trimmed)
        except json.JSONDecodeError:
            logger.debug("JSON parse failed, retrying as YAML")
    return yaml.safe_load(trimmed)


def load_raml(text: str) -> Any:
    # The "#%RAML 1.0" directive is a YAML comment line
    return yaml.load(text, Loader=RamlLoader)
