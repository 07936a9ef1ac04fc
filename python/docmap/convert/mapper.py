"""DocumentMapper: the public read/write entry point.

A mapper owns one conversion registry, one descriptor resolver and the
reader/writer built on them:

    mapper = DocumentMapper()
    mapper.register(Money, str, Money.to_str)
    mapper.register(str, Money, Money.parse)

    document = mapper.write(person)        # {"_id": ObjectId(...), "name": ...}
    person = mapper.read(Person, document)

Register conversions before the mapper is shared between threads. After
setup, read() and write() only read the registry and the descriptor cache.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, MutableMapping
from typing import Any, TypeVar

from bson.objectid import ObjectId

from docmap.config import MapperConfig
from docmap.convert.reader import DocumentReader
from docmap.convert.writer import DocumentWriter
from docmap.core.conversion import ConversionRegistry, ConversionRule
from docmap.models.descriptors import AccessMode, DescriptorResolver, PropertyDescriptor
from docmap.models.entity import EntityInformation

T = TypeVar("T")


class DocumentMapper:
    """Converts entities to documents and back."""

    def __init__(
        self,
        config: MapperConfig | None = None,
        registry: ConversionRegistry | None = None,
        converters: Iterable[ConversionRule] = (),
    ) -> None:
        self.config = config or MapperConfig()
        self.registry = registry or ConversionRegistry()
        self.registry.register_all(converters)
        self.resolver = DescriptorResolver(self.config)
        self._writer = DocumentWriter(self.resolver, self.registry, self.config)
        self._reader = DocumentReader(self.resolver, self.registry)

    def read(self, entity_type: type[T], document: Mapping[str, Any] | None) -> T | None:
        return self._reader.read(entity_type, document)

    def write(
        self,
        obj: Any,
        document: MutableMapping[str, Any] | None = None,
    ) -> MutableMapping[str, Any]:
        """Write obj into document (a new dict by default) and return it."""
        if document is None:
            document = {}
        return self._writer.write(obj, document)

    def describe(
        self,
        entity_type: type,
        mode: AccessMode = AccessMode.FIELD,
    ) -> tuple[PropertyDescriptor, ...]:
        return self.resolver.describe(entity_type, mode)

    def register(self, source_type: type, target_type: type, func: Callable[[Any], Any]) -> None:
        self.registry.register(source_type, target_type, func)

    def register_all(self, rules: Iterable[ConversionRule]) -> None:
        self.registry.register_all(rules)

    def convert_object_id(self, value: Any, target_type: type | None = None) -> Any:
        """Convert an ObjectId to target_type, or any value to ObjectId.

        convert_object_id(oid, str)  →  "5f0c..."
        convert_object_id("5f0c...") →  ObjectId("5f0c...")
        """
        if target_type is None:
            return self.registry.convert(value, ObjectId)
        return self.registry.convert(value, target_type)

    def entity_information(self, entity_type: type) -> EntityInformation:
        return EntityInformation(entity_type, self.resolver)


__all__ = ["DocumentMapper"]
