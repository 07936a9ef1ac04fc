"""Entity descriptor resolution.

DescriptorResolver turns an entity class into an ordered tuple of
PropertyDescriptor objects, one per candidate property:

    @dataclass
    class Person:
        id: str | None = None
        name: str = ""
        tags: list[str] = field(default_factory=list)
        address: Address | None = None

    resolver.describe(Person)
        PropertyDescriptor(name="id", key="_id", property_type=str, is_id=True, ...)
        PropertyDescriptor(name="name", key="name", property_type=str, ...)
        PropertyDescriptor(name="tags", key="tags", property_type=list,
                           type_args=(str,), is_collection=True, ...)
        PropertyDescriptor(name="address", key="address", property_type=Address, ...)

Property sources:
    pydantic models:      model_fields (+ __class_vars__ as synthetic entries)
    other classes:        typing.get_type_hints(include_extras=True), base first
    AccessMode.PROPERTY:  additionally public property objects of the class

Non-mappable candidates keep a descriptor with is_mappable=False:
    - ClassVar/InitVar annotations (synthetic)
    - private names (leading underscore, except "_id")
    - names listed in the entity's Meta.exclude
    - DocField(transient=True) / Field(doc_transient=True)

Descriptors are resolved once per (type, mode) and cached for the lifetime of
the resolver. There is no eviction; entity types are a finite set.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Collection, Iterable, Mapping, Sequence
from collections.abc import Set as AbstractSet
from dataclasses import InitVar, dataclass
from enum import Enum
from typing import Any, ClassVar, get_args, get_origin, get_type_hints

from pydantic import BaseModel
from pydantic.fields import FieldInfo

from docmap.config import MapperConfig
from docmap.core.types import array_element_type, is_simple
from docmap.exceptions import ConfigurationError, UnsupportedShapeError
from docmap.models.field import DocField, overrides_from
from docmap.models.utils import (
    _raw_type,
    _unpack_annotated,
    _unwrap_optional,
    resolve_generic_parameters,
    resolve_type_argument,
)


class AccessMode(str, Enum):
    """How properties of an entity are discovered."""

    FIELD = "field"
    PROPERTY = "property"


@dataclass(frozen=True, slots=True)
class PropertyDescriptor:
    """Resolved mapping metadata for one property of an entity type."""

    name: str
    key: str
    type_hint: Any = Any
    property_type: type | None = None
    type_args: tuple[type | None, ...] = ()
    is_id: bool = False
    is_enum: bool = False
    is_collection: bool = False
    is_map: bool = False
    is_array: bool = False
    is_mappable: bool = True
    is_nullable: bool = False
    is_synthetic: bool = False
    is_read_only: bool = False

    @property
    def element_type(self) -> type | None:
        """Element class of a collection or array property."""
        if (self.is_collection or self.is_array) and self.type_args:
            return self.type_args[0]
        return None

    @property
    def key_type(self) -> type | None:
        if self.is_map and self.type_args:
            return self.type_args[0]
        return None

    @property
    def value_type(self) -> type | None:
        if self.is_map and len(self.type_args) > 1:
            return self.type_args[1]
        return None

    @property
    def is_untyped(self) -> bool:
        return self.property_type is None

    @property
    def is_entity(self) -> bool:
        """True if the property holds a single nested entity."""
        return not (
            self.is_untyped
            or self.is_collection
            or self.is_map
            or self.is_array
            or is_simple(self.property_type)
        )


def _is_collection_type(raw: type) -> bool:
    if issubclass(raw, (str, bytes, bytearray, tuple)):
        return False
    if raw in (Collection, Iterable):
        return True
    return issubclass(raw, (list, set, frozenset, deque, Sequence, AbstractSet))


def _meta_option(entity_type: type, name: str, default: Any) -> Any:
    meta = getattr(entity_type, "Meta", None)
    return getattr(meta, name, default)


def _is_synthetic(hint: Any) -> bool:
    return hint is ClassVar or get_origin(hint) is ClassVar or isinstance(hint, InitVar)


@dataclass(slots=True)
class _Candidate:
    name: str
    hint: Any
    overrides: DocField
    synthetic: bool = False
    read_only: bool = False


class DescriptorResolver:
    """Resolves and caches property descriptors per (entity type, access mode)."""

    def __init__(self, config: MapperConfig | None = None) -> None:
        self._config = config or MapperConfig()
        self._cache: dict[tuple[type, AccessMode], tuple[PropertyDescriptor, ...]] = {}

    @property
    def config(self) -> MapperConfig:
        return self._config

    def describe(
        self,
        entity_type: type,
        mode: AccessMode = AccessMode.FIELD,
    ) -> tuple[PropertyDescriptor, ...]:
        """Return the descriptors of entity_type, resolving them on first use."""
        cache_key = (entity_type, mode)
        descriptors = self._cache.get(cache_key)
        if descriptors is None:
            descriptors = self._resolve(entity_type, mode)
            self._cache[cache_key] = descriptors
        return descriptors

    def id_descriptor(self, entity_type: type) -> PropertyDescriptor | None:
        for descriptor in self.describe(entity_type):
            if descriptor.is_id:
                return descriptor
        return None

    def _resolve(
        self,
        entity_type: type,
        mode: AccessMode,
    ) -> tuple[PropertyDescriptor, ...]:
        if not isinstance(entity_type, type):
            raise ConfigurationError(f"Expected an entity class, got {entity_type!r}")

        candidates = self._field_candidates(entity_type)
        if mode is AccessMode.PROPERTY:
            known = {candidate.name for candidate in candidates}
            candidates.extend(
                c for c in self._property_candidates(entity_type) if c.name not in known
            )

        excluded = set(_meta_option(entity_type, "exclude", ()))
        mappable = {
            c.name: not (
                c.synthetic
                or c.overrides.transient
                or c.name in excluded
                or (c.name.startswith("_") and c.name != "_id")
            )
            for c in candidates
        }
        id_name = self._find_id_name(entity_type, candidates, mappable)

        return tuple(
            self._build(entity_type, c, mappable[c.name], c.name == id_name)
            for c in candidates
        )

    def _find_id_name(
        self,
        entity_type: type,
        candidates: list[_Candidate],
        mappable: dict[str, bool],
    ) -> str | None:
        explicit = [c.name for c in candidates if c.overrides.id and mappable[c.name]]
        if len(explicit) > 1:
            raise ConfigurationError(
                f"{entity_type.__name__} designates more than one identifier: "
                f"{', '.join(explicit)}"
            )
        if explicit:
            return explicit[0]
        for name in self._config.id_names:
            if mappable.get(name):
                return name
        return None

    def _field_candidates(self, entity_type: type) -> list[_Candidate]:
        if issubclass(entity_type, BaseModel):
            return self._model_candidates(entity_type)

        try:
            hints = get_type_hints(entity_type, include_extras=True)
        except NameError as exc:
            raise ConfigurationError(
                f"Cannot resolve annotations of {entity_type.__name__}: {exc}"
            ) from exc

        candidates = []
        for name, hint in hints.items():
            base, metadata = _unpack_annotated(hint)
            candidates.append(
                _Candidate(
                    name=name,
                    hint=hint,
                    overrides=overrides_from(metadata),
                    synthetic=_is_synthetic(base),
                )
            )
        return candidates

    def _model_candidates(self, model: type[BaseModel]) -> list[_Candidate]:
        candidates = []
        field_info: FieldInfo
        for name, field_info in model.model_fields.items():
            candidates.append(
                _Candidate(
                    name=name,
                    hint=field_info.annotation,
                    overrides=overrides_from((), field_info),
                )
            )
        for name in sorted(getattr(model, "__class_vars__", ())):
            candidates.append(_Candidate(name, Any, DocField(), synthetic=True))
        return candidates

    def _property_candidates(self, entity_type: type) -> list[_Candidate]:
        found: dict[str, _Candidate] = {}
        for klass in reversed(entity_type.__mro__):
            if klass is object or klass.__module__.startswith("pydantic"):
                continue
            for name, attr in vars(klass).items():
                if not isinstance(attr, property) or name.startswith("_"):
                    continue
                try:
                    hints = get_type_hints(attr.fget, include_extras=True)
                except NameError as exc:
                    raise ConfigurationError(
                        f"Cannot resolve return type of {entity_type.__name__}.{name}: {exc}"
                    ) from exc
                hint = hints.get("return", Any)
                _, metadata = _unpack_annotated(hint)
                found[name] = _Candidate(
                    name=name,
                    hint=hint,
                    overrides=overrides_from(metadata),
                    read_only=attr.fset is None,
                )
        return list(found.values())

    def _build(
        self,
        entity_type: type,
        candidate: _Candidate,
        mappable: bool,
        is_id: bool,
    ) -> PropertyDescriptor:
        key = candidate.overrides.key
        if key is None:
            key = self._config.id_key if is_id else candidate.name

        if not mappable:
            return PropertyDescriptor(
                name=candidate.name,
                key=key,
                type_hint=candidate.hint,
                is_mappable=False,
                is_synthetic=candidate.synthetic,
                is_read_only=candidate.read_only,
            )

        hint, _ = _unpack_annotated(candidate.hint)
        hint, nullable = _unwrap_optional(hint)
        hint, _ = _unpack_annotated(hint)
        raw = _raw_type(hint)

        is_enum = raw is not None and issubclass(raw, Enum)
        is_map = raw is not None and issubclass(raw, Mapping)
        is_array = raw is tuple
        is_collection = raw is not None and not is_array and _is_collection_type(raw)
        if is_map and is_collection:
            raise UnsupportedShapeError(
                f"{entity_type.__name__}.{candidate.name}: {raw.__name__} is both "
                "a mapping and a collection"
            )

        type_args: tuple[type | None, ...] = ()
        if is_array:
            type_args = self._array_args(entity_type, candidate.name, hint)
        elif is_collection or is_map:
            type_args = resolve_generic_parameters(hint)

        if is_map and type_args and type_args[0] not in (None, str):
            raise UnsupportedShapeError(
                f"{entity_type.__name__}.{candidate.name}: only str map keys are "
                f"supported, got {type_args[0].__name__}"
            )

        return PropertyDescriptor(
            name=candidate.name,
            key=key,
            type_hint=hint,
            property_type=raw,
            type_args=type_args,
            is_id=is_id,
            is_enum=is_enum,
            is_collection=is_collection,
            is_map=is_map,
            is_array=is_array,
            is_nullable=nullable,
            is_read_only=candidate.read_only,
        )

    @staticmethod
    def _array_args(entity_type: type, name: str, hint: Any) -> tuple[type | None, ...]:
        if not get_args(hint):
            return ()
        element = array_element_type(hint)
        if element is None:
            raise ConfigurationError(
                f"{entity_type.__name__}.{name}: heterogeneous tuple {hint!r} "
                "cannot be mapped as an array"
            )
        return (resolve_type_argument(element, hint),)


__all__ = ["AccessMode", "PropertyDescriptor", "DescriptorResolver"]
