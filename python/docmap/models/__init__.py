"""Entity metadata: property discovery, overrides and identifier lookup.

Classes:
    DescriptorResolver: Resolves an entity class into PropertyDescriptors.
        - pydantic models, dataclasses and plain annotated classes
        - Optional/Annotated unwrapping
        - generic argument resolution for collections, arrays and maps
        - per-(type, AccessMode) cache

    PropertyDescriptor: Immutable per-property mapping metadata
        (document key, declared type, generic arguments, shape flags).

    EntityInformation: Identifier and collection metadata for repositories.

    DocField / Field: Per-property overrides:
        - key / doc_key: document key
        - id / doc_id: identifier designation
        - transient / doc_transient: exclusion from mapping

Entity-level options live on an inner Meta class:

    @dataclass
    class Person:
        id: str | None = None
        name: str = ""
        password: str = ""

        class Meta:
            collection = "people"
            exclude = ("password",)
"""

from .descriptors import AccessMode, DescriptorResolver, PropertyDescriptor
from .entity import EntityInformation
from .field import DocField, Field

__all__ = [
    "AccessMode",
    "DescriptorResolver",
    "PropertyDescriptor",
    "EntityInformation",
    "DocField",
    "Field",
]
