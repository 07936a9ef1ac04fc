"""Document → entity conversion.

DocumentReader instantiates the requested type through its no-argument
construction path and populates every FIELD-mode property whose document key
is present, dispatching on the stored shape:

    simple value   →  assigned, converted by the registry to the declared type
    list / tuple   →  nested dicts read into the element type, simple elements
                      converted to it where the registry can, coerced into
                      the declared collection (list, set, frozenset, deque)
                      or into a tuple for arrays
    nested dict    →  map property: entries converted/read into the value type
                      entity property: read recursively as the declared type
    anything else  →  structural mismatch

Nested entity types always come from the declared property metadata, never
from document content. A structural mismatch affects a single property: it is
logged and the property keeps its default value.
"""

from __future__ import annotations

from collections import OrderedDict, deque
from collections.abc import Iterable, Mapping
from collections.abc import Set as AbstractSet
from typing import Any, TypeVar

import structlog
from pydantic import BaseModel

from docmap.core.conversion import ConversionRegistry
from docmap.core.types import is_simple, is_simple_value
from docmap.exceptions import (
    InstantiationError,
    StructuralMismatchError,
    UnsupportedShapeError,
)
from docmap.models.descriptors import AccessMode, DescriptorResolver, PropertyDescriptor

logger = structlog.get_logger(__name__)

T = TypeVar("T")


def create_collection(collection_type: type | None, values: Iterable[Any]) -> Any:
    """Build a collection of the declared type from values.

    Abstract set types become set, other abstract or unknown collection
    types become list.
    """
    if collection_type is None:
        return list(values)
    if issubclass(collection_type, (list, tuple, set, frozenset, deque)):
        return collection_type(values)
    if issubclass(collection_type, AbstractSet):
        return set(values)
    return list(values)


def create_map(map_type: type | None) -> dict[str, Any]:
    if map_type is not None and issubclass(map_type, OrderedDict):
        return OrderedDict()
    return {}


def instantiate(entity_type: type[T]) -> T:
    """Create an empty instance of entity_type.

    pydantic models are built with model_construct(), which skips validation
    and applies field defaults. Other classes are called without arguments.
    """
    if issubclass(entity_type, BaseModel):
        return entity_type.model_construct()
    try:
        return entity_type()
    except TypeError as exc:
        raise InstantiationError(
            f"Cannot instantiate {entity_type.__name__} without arguments: {exc}"
        ) from exc


def _is_frozen(instance: Any) -> bool:
    if isinstance(instance, BaseModel):
        return bool(instance.model_config.get("frozen"))
    params = getattr(type(instance), "__dataclass_params__", None)
    return bool(params is not None and params.frozen)


def assign(instance: Any, descriptor: PropertyDescriptor, value: Any) -> None:
    """Set a property, bypassing the immutability of frozen entities."""
    if _is_frozen(instance):
        object.__setattr__(instance, descriptor.name, value)
    else:
        setattr(instance, descriptor.name, value)
    if isinstance(instance, BaseModel):
        instance.__pydantic_fields_set__.add(descriptor.name)


class DocumentReader:
    """Reads documents into entities."""

    def __init__(self, resolver: DescriptorResolver, registry: ConversionRegistry) -> None:
        self._resolver = resolver
        self._registry = registry

    def read(self, entity_type: type[T], source: Mapping[str, Any] | None) -> T | None:
        """Build an instance of entity_type from source, or None if source is None."""
        if source is None:
            return None
        if entity_type is None:
            raise ValueError("Mapped class was not specified")

        target = instantiate(entity_type)
        for descriptor in self._resolver.describe(entity_type, AccessMode.FIELD):
            if descriptor.key not in source:
                continue
            if not descriptor.is_mappable:
                logger.warning(
                    "unmappable_document_field",
                    entity=entity_type.__name__,
                    key=descriptor.key,
                    property=descriptor.name,
                )
                continue

            value = source[descriptor.key]
            if value is None:
                continue
            try:
                assign(target, descriptor, self._read_property(descriptor, value))
            except StructuralMismatchError as exc:
                logger.warning(
                    "structural_mismatch",
                    entity=entity_type.__name__,
                    key=exc.key,
                    property=exc.prop,
                    expected=exc.expected,
                    actual=type(exc.actual).__name__,
                )
        return target

    def _read_property(self, descriptor: PropertyDescriptor, value: Any) -> Any:
        if is_simple_value(value):
            return self._read_simple(descriptor, value)
        if isinstance(value, (list, tuple)):
            return self._read_sequence(descriptor, value)
        if isinstance(value, Mapping):
            return self._read_compound(descriptor, value)
        raise StructuralMismatchError(
            descriptor.key, descriptor.name, "a document, sequence or simple value", value
        )

    def _read_simple(self, descriptor: PropertyDescriptor, value: Any) -> Any:
        declared = descriptor.property_type
        if declared is None:
            return value
        if is_simple(declared) or self._registry.can_convert(type(value), declared):
            return self._registry.convert(value, declared)
        raise StructuralMismatchError(
            descriptor.key, descriptor.name, _shape_name(descriptor), value
        )

    def _read_sequence(self, descriptor: PropertyDescriptor, values: Any) -> Any:
        if not (descriptor.is_collection or descriptor.is_array or descriptor.is_untyped):
            raise StructuralMismatchError(
                descriptor.key, descriptor.name, _shape_name(descriptor), values
            )

        element_type = descriptor.element_type
        items = [self._read_element(element_type, element) for element in values]
        if descriptor.is_array:
            return tuple(items)
        return create_collection(descriptor.property_type, items)

    def _read_element(self, element_type: type | None, element: Any) -> Any:
        if isinstance(element, Mapping) and _is_entity_type(element_type):
            return self.read(element_type, element)
        if isinstance(element, Mapping):
            return dict(element)
        if element is not None and element_type is not None and is_simple(element_type):
            if self._registry.can_convert(type(element), element_type):
                return self._registry.convert(element, element_type)
        return element

    def _read_compound(self, descriptor: PropertyDescriptor, value: Mapping[str, Any]) -> Any:
        if descriptor.is_collection or descriptor.is_array:
            raise UnsupportedShapeError(
                f"Property '{descriptor.name}' is a collection and cannot be read "
                f"from the nested document at '{descriptor.key}'"
            )
        if descriptor.is_map:
            return self._read_map(descriptor, value)
        if descriptor.is_untyped:
            return dict(value)
        if not descriptor.is_entity:
            raise StructuralMismatchError(
                descriptor.key, descriptor.name, _shape_name(descriptor), value
            )
        return self.read(descriptor.property_type, value)

    def _read_map(self, descriptor: PropertyDescriptor, source: Mapping[str, Any]) -> Any:
        value_type = descriptor.value_type
        result = create_map(descriptor.property_type)
        for key, value in source.items():
            if isinstance(value, Mapping):
                result[key] = (
                    self.read(value_type, value)
                    if _is_entity_type(value_type)
                    else dict(value)
                )
            elif value is None:
                result[key] = None
            elif is_simple_value(value):
                result[key] = self._registry.convert(value, value_type)
            else:
                result[key] = value
        return result


def _is_entity_type(tp: type | None) -> bool:
    if tp is None or is_simple(tp):
        return False
    return not issubclass(tp, (Mapping, list, tuple, set, frozenset, deque))


def _shape_name(descriptor: PropertyDescriptor) -> str:
    if descriptor.property_type is None:
        return "a value"
    return descriptor.property_type.__name__


__all__ = ["DocumentReader", "create_collection", "create_map", "instantiate", "assign"]
