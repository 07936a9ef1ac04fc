"""Exception hierarchy for docmap.

All docmap exceptions inherit from DocmapError, allowing catch-all handling:

    try:
        person = mapper.read(Person, document)
    except DocmapError as e:
        print(f"Mapping error: {e}")

Exception hierarchy:
    DocmapError (base)
    ├── ConfigurationError       - Entity metadata cannot be resolved
    │   └── InstantiationError   - Entity type has no usable no-arg construction
    ├── ConversionError          - No conversion rule, or the rule rejected a value
    ├── StructuralMismatchError  - Stored shape does not fit the declared property
    └── UnsupportedShapeError    - Map/collection combination or non-str map key
"""

from __future__ import annotations

from typing import Any


class DocmapError(Exception):
    """Base exception for all docmap-related errors."""


class ConfigurationError(DocmapError):
    """Raised when an entity type cannot be described or used for mapping."""


class InstantiationError(ConfigurationError):
    """Raised when an entity type cannot be constructed without arguments."""


class ConversionError(DocmapError):
    """Raised when a value cannot be converted to the requested type."""

    def __init__(self, value: Any, target_type: Any, reason: str | None = None) -> None:
        self.value = value
        self.target_type = target_type
        self.reason = reason
        target_name = getattr(target_type, "__name__", repr(target_type))
        message = f"Cannot convert {type(value).__name__} value {value!r} to {target_name}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class StructuralMismatchError(DocmapError):
    """Raised when a document field's shape does not match its property.

    The reader absorbs this error per property: it logs a warning and leaves
    the property at its default value.
    """

    def __init__(self, key: str, prop: str, expected: str, actual: Any) -> None:
        self.key = key
        self.prop = prop
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Unable to map document field '{key}' to property '{prop}': "
            f"expected {expected} but was {type(actual).__name__}"
        )


class UnsupportedShapeError(DocmapError):
    """Raised for shapes the mapper explicitly rejects."""


__all__ = [
    "DocmapError",
    "ConfigurationError",
    "InstantiationError",
    "ConversionError",
    "StructuralMismatchError",
    "UnsupportedShapeError",
]
