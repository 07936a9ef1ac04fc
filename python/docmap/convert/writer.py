"""Entity → document conversion.

DocumentWriter walks the PROPERTY-mode descriptors of an object's runtime
type and stores each non-None mappable value under its document key:

    enum member              →  member name (str), at any nesting level
    identifier, ObjectId str →  ObjectId (raw str kept if conversion fails)
    simple value             →  stored as-is, or converted to its
                                STORAGE_TYPES counterpart (date → datetime,
                                Decimal → Decimal128, UUID → Binary, ...)
    mapping                  →  nested dict (str keys only)
    list/tuple/set/deque     →  list; compound elements become nested dicts
    registry target found    →  converted value (custom conversion hook)
    anything else            →  nested entity dict

Simplicity is decided from the runtime type of each value, so subclass
instances are written with all of their own properties. Recursion is
depth-first without cycle detection: object graphs must be acyclic.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Mapping, MutableMapping
from enum import Enum
from typing import Any

import structlog
from bson.objectid import ObjectId

from docmap.config import MapperConfig
from docmap.core.conversion import ConversionRegistry
from docmap.core.types import is_simple_value, storage_type
from docmap.exceptions import ConversionError, UnsupportedShapeError
from docmap.models.descriptors import AccessMode, DescriptorResolver

logger = structlog.get_logger(__name__)

_SEQUENCE_TYPES = (list, tuple, set, frozenset, deque)


class DocumentWriter:
    """Writes entities into documents."""

    def __init__(
        self,
        resolver: DescriptorResolver,
        registry: ConversionRegistry,
        config: MapperConfig | None = None,
    ) -> None:
        self._resolver = resolver
        self._registry = registry
        self._config = config or resolver.config

    def write(self, obj: Any, document: MutableMapping[str, Any]) -> MutableMapping[str, Any]:
        """Write the mappable properties of obj into document and return it."""
        for descriptor in self._resolver.describe(type(obj), AccessMode.PROPERTY):
            if not descriptor.is_mappable:
                if not descriptor.is_synthetic:
                    logger.debug(
                        "skipping_unmappable_property",
                        entity=type(obj).__name__,
                        property=descriptor.name,
                    )
                continue

            value = getattr(obj, descriptor.name, None)
            if value is None:
                continue

            if descriptor.is_id:
                value = self._coerce_id(value)
            self._write_value(document, descriptor.key, value)
        return document

    def _coerce_id(self, value: Any) -> Any:
        if not (
            self._config.coerce_object_ids
            and isinstance(value, str)
            and ObjectId.is_valid(value)
        ):
            return value
        try:
            return self._registry.convert(value, ObjectId)
        except ConversionError:
            logger.warning("identifier_coercion_failed", value=value)
            return value

    def _write_value(self, document: MutableMapping[str, Any], key: str, value: Any) -> None:
        document[key] = self._document_value(value)

    def _document_value(self, value: Any) -> Any:
        if isinstance(value, Enum):
            return value.name
        if is_simple_value(value):
            return self._storable(value)
        if isinstance(value, Mapping):
            return self._write_map(value)
        if isinstance(value, _SEQUENCE_TYPES):
            return self._write_sequence(value)

        target = self._registry.find_first_supported_target(value)
        if target is not None:
            return self._registry.convert(value, target)

        return self.write(value, {})

    def _storable(self, value: Any) -> Any:
        target = storage_type(type(value))
        if target is None:
            return value
        return self._registry.convert(value, target)

    def _write_map(self, value: Mapping[Any, Any]) -> dict[str, Any]:
        nested: dict[str, Any] = {}
        for entry_key, entry_value in value.items():
            if not isinstance(entry_key, str):
                raise UnsupportedShapeError(
                    f"Map keys must be str, got {type(entry_key).__name__} ({entry_key!r})"
                )
            self._write_value(nested, entry_key, entry_value)
        return nested

    def _write_sequence(self, values: Any) -> list[Any]:
        return [self._document_value(element) for element in values]


__all__ = ["DocumentWriter"]
