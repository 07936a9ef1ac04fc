"""Identifier and collection metadata for a mapped entity type.

EntityInformation is what repositories need on top of the descriptors: which
property is the identifier, what the identifier of an instance is, whether
the instance has been persisted yet, and which collection it lives in.

    info = EntityInformation(Person, resolver)
    info.id_key            # "_id"
    info.collection_name   # "person"  (or Person.Meta.collection)
    info.is_new(person)    # True while person.id is None

Unlike plain mapping, EntityInformation requires an identifier property:
an entity type without one raises ConfigurationError.
"""

from __future__ import annotations

from typing import Any

from docmap.exceptions import ConfigurationError
from docmap.models.descriptors import DescriptorResolver, PropertyDescriptor


def _default_collection_name(entity_type: type) -> str:
    name = entity_type.__name__
    return name[:1].lower() + name[1:]


class EntityInformation:
    """Identifier access for instances of a single entity type."""

    def __init__(self, entity_type: type, resolver: DescriptorResolver | None = None) -> None:
        resolver = resolver or DescriptorResolver()
        descriptor = resolver.id_descriptor(entity_type)
        if descriptor is None:
            raise ConfigurationError(
                f"{entity_type.__name__} has no identifier property; declare an "
                "'id' field or mark one with DocField(id=True)"
            )
        self.entity_type = entity_type
        self.id_descriptor: PropertyDescriptor = descriptor

    @property
    def id_key(self) -> str:
        return self.id_descriptor.key

    @property
    def id_type(self) -> type | None:
        return self.id_descriptor.property_type

    @property
    def collection_name(self) -> str:
        meta = getattr(self.entity_type, "Meta", None)
        name = getattr(meta, "collection", None)
        return name or _default_collection_name(self.entity_type)

    def get_id(self, entity: Any) -> Any:
        if not isinstance(entity, self.entity_type):
            raise TypeError(
                f"Expected {self.entity_type.__name__} instance, "
                f"got {type(entity).__name__}"
            )
        return getattr(entity, self.id_descriptor.name, None)

    def is_new(self, entity: Any) -> bool:
        """Return True if the entity has not been assigned an identifier."""
        return self.get_id(entity) is None

    def __repr__(self) -> str:
        return (
            f"EntityInformation({self.entity_type.__name__}, "
            f"id={self.id_descriptor.name!r}, collection={self.collection_name!r})"
        )


__all__ = ["EntityInformation"]
