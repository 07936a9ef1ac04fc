"""docmap - object-document mapping for MongoDB/BSON documents.

Example:
    from dataclasses import dataclass, field

    from docmap import DocumentMapper

    @dataclass
    class Address:
        city: str = ""

    @dataclass
    class Person:
        id: str | None = None
        name: str = ""
        tags: list[str] = field(default_factory=list)
        address: Address | None = None

    mapper = DocumentMapper()
    document = mapper.write(Person(name="Ada", address=Address(city="London")))
    # {"name": "Ada", "tags": [], "address": {"city": "London"}}
    person = mapper.read(Person, document)
"""

from docmap.config import MapperConfig
from docmap.convert import DocumentMapper, DocumentReader, DocumentWriter
from docmap.core import ConversionRegistry, ConversionRule, is_simple
from docmap.exceptions import (
    ConfigurationError,
    ConversionError,
    DocmapError,
    InstantiationError,
    StructuralMismatchError,
    UnsupportedShapeError,
)
from docmap.models import (
    AccessMode,
    DescriptorResolver,
    DocField,
    EntityInformation,
    Field,
    PropertyDescriptor,
)

__all__ = [
    "MapperConfig",
    "DocumentMapper",
    "DocumentReader",
    "DocumentWriter",
    "ConversionRegistry",
    "ConversionRule",
    "is_simple",
    "AccessMode",
    "DescriptorResolver",
    "DocField",
    "EntityInformation",
    "Field",
    "PropertyDescriptor",
    "DocmapError",
    "ConfigurationError",
    "ConversionError",
    "InstantiationError",
    "StructuralMismatchError",
    "UnsupportedShapeError",
]
