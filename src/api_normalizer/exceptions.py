"""Exception hierarchy for api-normalizer.

Parse and detection errors abort a conversion and are shown to the caller
verbatim. Mapping problems never escape :func:`map_metadata`; they are
logged under the :class:`RuleApplicationWarning` category instead.

Hierarchy::

    NormalizerError
    +-- DetectionError
    +-- UnsupportedFormatError
    +-- InvalidDocumentError
    +-- ResourceDepthError
    +-- JsonPathError
    +-- UnknownMappingConfigError
"""


class NormalizerError(Exception):
    """Base exception for all api-normalizer errors."""


class DetectionError(NormalizerError):
    """Raised when no known format signature matches the input text."""

    def __init__(self, message: str = "unable to detect format"):
        super().__init__(message)


class UnsupportedFormatError(NormalizerError):
    """Raised for an explicit format argument outside the known set."""

    def __init__(self, format: str):
        super().__init__(f"Unsupported format: {format}")
        self.format = format


class InvalidDocumentError(NormalizerError):
    """Raised when a parsed document is not a mapping at the top level."""


class ResourceDepthError(NormalizerError):
    """Raised when a RAML resource tree nests deeper than allowed."""


class JsonPathError(NormalizerError):
    """Raised for a query expression outside the supported JSONPath subset."""

    def __init__(self, expression: str, reason: str):
        super().__init__(f"Invalid JSONPath expression {expression!r}: {reason}")
        self.expression = expression
        self.reason = reason


class UnknownMappingConfigError(NormalizerError):
    """Raised when a built-in mapping config name is not registered."""

    def __init__(self, name: str):
        super().__init__(f"Unknown mapping config: {name}")
        self.name = name


class RuleApplicationWarning(UserWarning):
    """Category for a mapping rule that failed and was skipped."""
