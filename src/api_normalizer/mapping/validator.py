"""Early checks for a mapping config against a source document."""

from typing import Any

from api_normalizer.exceptions import JsonPathError

from .configs import MappingConfig
from .engine import map_metadata
from .jsonpath import query

REQUIRED_FIELDS = ("info.title", "info.version")


def validate_mapping(source: Any, config: MappingConfig) -> list[str]:
    """Check that the required canonical fields are mapped and present.

    Returns a list of error messages; an empty list means the source can be
    mapped with every required field filled in. Malformed queries are
    reported, never raised.
    """
    errors = []
    for field in REQUIRED_FIELDS:
        rules = [rule for rule in config.rules if rule.target == field]
        if not rules:
            errors.append(f"Missing mapping rule for required field: {field}")
            continue

        for rule in rules:
            try:
                matches = query(source, rule.source)
            except JsonPathError:
                errors.append(f"Invalid JSONPath expression: {rule.source}")
                continue
            if not matches:
                errors.append(f"Required field {field} not found in source data ({rule.source})")
    return errors


def check_examples(config: MappingConfig) -> list[str]:
    """Map each bundled example and report those that miss their expectation."""
    errors = []
    for number, example in enumerate(config.examples, start=1):
        result = map_metadata(example.source, config)
        if not matches_structure(example.expected, result):
            errors.append(f"{config.name} example {number} does not match its expected document")
    return errors


def matches_structure(expected: Any, actual: Any) -> bool:
    """True if every key and value of ``expected`` is present in ``actual``.

    Mappings may carry extra keys; lists must have the same length and
    match element-wise.
    """
    if isinstance(expected, dict):
        return isinstance(actual, dict) and all(
            key in actual and matches_structure(value, actual[key]) for key, value in expected.items()
        )
    if isinstance(expected, list):
        return (
            isinstance(actual, list)
            and len(expected) == len(actual)
            and all(matches_structure(e, a) for e, a in zip(expected, actual))
        )
    return expected == actual
