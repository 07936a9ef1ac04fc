"""Type classification and value conversion primitives."""

from .conversion import DOCUMENT_TYPES, ConversionRegistry, ConversionRule
from .types import SIMPLE_TYPES, STORAGE_TYPES, is_simple, is_simple_value, storage_type

__all__ = [
    "DOCUMENT_TYPES",
    "ConversionRegistry",
    "ConversionRule",
    "SIMPLE_TYPES",
    "STORAGE_TYPES",
    "is_simple",
    "is_simple_value",
    "storage_type",
]
