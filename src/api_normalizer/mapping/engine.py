"""Rule-based mapping of arbitrary metadata onto the canonical OpenAPI shape."""

import copy
import logging
import re
from typing import Any

from api_normalizer.config import CANONICAL_OPENAPI_VERSION
from api_normalizer.exceptions import RuleApplicationWarning

from .configs import MappingConfig, MappingRule
from .jsonpath import query

logger = logging.getLogger(__name__)

_TARGET_PART = re.compile(r"^([^\[\]]+)((?:\[\d+\])*)$")
_INDEX = re.compile(r"\[(\d+)\]")


def new_canonical_document() -> dict:
    return {"openapi": CANONICAL_OPENAPI_VERSION, "info": {}, "servers": [], "paths": {}}


def map_metadata(source: Any, config: MappingConfig) -> dict:
    """Apply every rule of ``config`` to ``source``, in order.

    Rules whose query matches nothing (or whose transform returns None)
    contribute nothing. A rule that fails is logged and skipped; this
    function does not raise for bad rules. When two rules target the same
    path the later one wins.
    """
    document = new_canonical_document()
    for rule in config.rules:
        try:
            value = resolve_rule(source, rule)
            if value is None:
                logger.debug("Rule %s -> %s matched nothing, skipping", rule.source, rule.target)
                continue
            # Copied so later rules never write through into the source
            assign(document, rule.target, copy.deepcopy(value))
        except Exception as exc:
            logger.warning(
                "Error applying mapping rule %s -> %s: %s",
                rule.source,
                rule.target,
                exc,
                extra={"category": RuleApplicationWarning.__name__},
            )
    return document


def resolve_rule(source: Any, rule: MappingRule) -> Any:
    """Return the value a rule contributes, or None for no contribution."""
    matches = query(source, rule.source)
    if rule.transform is not None:
        return rule.transform(matches)
    return matches[0] if matches else None


def split_target(target: str) -> list[str | int]:
    """Split ``servers[0].url`` into ``["servers", 0, "url"]``."""
    segments: list[str | int] = []
    for part in target.split("."):
        match = _TARGET_PART.match(part)
        if not match:
            raise ValueError(f"Invalid target path: {target!r}")
        segments.append(match.group(1))
        segments.extend(int(index) for index in _INDEX.findall(match.group(2)))
    return segments


def assign(document: dict, target: str, value: Any) -> None:
    """Set ``value`` at ``target``, creating missing dicts and lists on the way.

    Integer segments index into lists, which grow (padded with None) to fit.
    Raises TypeError if an existing value on the path is the wrong kind of
    container; nothing is modified in that case.
    """
    segments = split_target(target)
    current: Any = document
    for segment, following in zip(segments, segments[1:]):
        current = _child(current, segment, [] if isinstance(following, int) else {})
    _store(current, segments[-1], value)


def _child(container: Any, key: str | int, empty: dict | list) -> Any:
    _check_container(container, key)
    if isinstance(key, int):
        _pad(container, key)
    elif key not in container:
        container[key] = empty
    if container[key] is None:
        container[key] = empty
    return container[key]


def _store(container: Any, key: str | int, value: Any) -> None:
    _check_container(container, key)
    if isinstance(key, int):
        _pad(container, key)
    container[key] = value


def _check_container(container: Any, key: str | int) -> None:
    if isinstance(key, int) and not isinstance(container, list):
        raise TypeError(f"cannot index {type(container).__name__} with [{key}]")
    if isinstance(key, str) and not isinstance(container, dict):
        raise TypeError(f"cannot set key {key!r} on {type(container).__name__}")


def _pad(items: list, index: int) -> None:
    if len(items) <= index:
        items.extend([None] * (index + 1 - len(items)))
