"""Tests for entity descriptor resolution."""

from __future__ import annotations

from collections import OrderedDict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Annotated, Any, ClassVar, Generic, TypeVar

import pytest
from bson.objectid import ObjectId
from pydantic import BaseModel

from docmap import (
    AccessMode,
    ConfigurationError,
    DescriptorResolver,
    DocField,
    Field,
    MapperConfig,
    UnsupportedShapeError,
)

T = TypeVar("T")


class Color(Enum):
    RED = "red"
    BLUE = "blue"


@dataclass
class Address:
    street: str = ""
    city: str = ""


@dataclass
class Person:
    id: str | None = None
    name: str = ""
    age: int = 0
    color: Color | None = None
    tags: list[str] = field(default_factory=list)
    scores: tuple[int, ...] = ()
    attributes: dict[str, Address] = field(default_factory=dict)
    address: Address | None = None
    registry_name: ClassVar[str] = "people"
    _cache: dict = field(default_factory=dict)

    @property
    def display_name(self) -> str:
        return self.name.title()


@dataclass
class Keyed:
    pk: Annotated[str | None, DocField(id=True)] = None
    email: Annotated[str, DocField(key="mail")] = ""
    secret: Annotated[str, DocField(transient=True)] = ""


@dataclass
class Excluding:
    id: int | None = None
    password: str = ""

    class Meta:
        exclude = ("password",)


@dataclass
class TwoIds:
    first: Annotated[str, DocField(id=True)] = ""
    second: Annotated[str, DocField(id=True)] = ""


@dataclass
class ExplicitBeatsConvention:
    id: str = ""
    code: Annotated[str, DocField(id=True)] = ""


@dataclass
class Shapes:
    nested: list[list[int]] = field(default_factory=list)
    ordered: OrderedDict[str, int] = field(default_factory=OrderedDict)
    sequence: Sequence[Address] = ()
    untyped_list: list = field(default_factory=list)
    anything: Any = None
    pair: tuple[str, str] = ("", "")
    unions: int | str = 0
    ids: set[ObjectId] = field(default_factory=set)
    stream: Iterable[int] = ()


@dataclass
class Box(Generic[T]):
    items: list[T] = field(default_factory=list)


@dataclass
class UnboundProperty(Generic[T]):
    item: T | None = None


@dataclass
class NonTextKeys:
    counts: dict[int, str] = field(default_factory=dict)


@dataclass
class Heterogeneous:
    pair: tuple[int, str] = (0, "")


class PlainPerson:
    id: ObjectId | None = None
    name: str = ""


class Animal:
    name: str = ""


class Dog(Animal):
    breed: str = ""


class Account(BaseModel):
    id: str | None = None
    owner: str = Field(default="", doc_key="owner_name")
    balance: float = 0.0
    note: str = Field(default="", doc_transient=True)
    kind: ClassVar[str] = "account"


class Ledger(BaseModel):
    number: str = Field(default="", doc_id=True)
    entries: list[Account] = []


@pytest.fixture
def resolver() -> DescriptorResolver:
    return DescriptorResolver()


def by_name(descriptors):
    return {d.name: d for d in descriptors}


class TestDataclassDescriptors:
    """Test descriptors resolved from dataclass annotations."""

    def test_declaration_order(self, resolver):
        names = [d.name for d in resolver.describe(Person)]
        assert names[:8] == [
            "id",
            "name",
            "age",
            "color",
            "tags",
            "scores",
            "attributes",
            "address",
        ]

    def test_identifier_by_convention(self, resolver):
        descriptors = by_name(resolver.describe(Person))
        assert descriptors["id"].is_id is True
        assert descriptors["id"].key == "_id"
        assert descriptors["id"].property_type is str
        assert descriptors["id"].is_nullable is True
        assert descriptors["name"].is_id is False

    def test_simple_property(self, resolver):
        name = by_name(resolver.describe(Person))["name"]
        assert name.key == "name"
        assert name.property_type is str
        assert name.is_mappable is True
        assert name.is_entity is False

    def test_enum_property(self, resolver):
        color = by_name(resolver.describe(Person))["color"]
        assert color.is_enum is True
        assert color.property_type is Color

    def test_collection_property(self, resolver):
        tags = by_name(resolver.describe(Person))["tags"]
        assert tags.is_collection is True
        assert tags.property_type is list
        assert tags.element_type is str

    def test_array_property(self, resolver):
        scores = by_name(resolver.describe(Person))["scores"]
        assert scores.is_array is True
        assert scores.is_collection is False
        assert scores.element_type is int

    def test_map_property(self, resolver):
        attributes = by_name(resolver.describe(Person))["attributes"]
        assert attributes.is_map is True
        assert attributes.key_type is str
        assert attributes.value_type is Address

    def test_nested_entity_property(self, resolver):
        address = by_name(resolver.describe(Person))["address"]
        assert address.is_entity is True
        assert address.property_type is Address

    def test_class_var_is_synthetic(self, resolver):
        registry_name = by_name(resolver.describe(Person))["registry_name"]
        assert registry_name.is_mappable is False
        assert registry_name.is_synthetic is True

    def test_private_attribute_is_not_mappable(self, resolver):
        cache = by_name(resolver.describe(Person))["_cache"]
        assert cache.is_mappable is False
        assert cache.is_synthetic is False


class TestOverrides:
    def test_docfield_overrides(self, resolver):
        descriptors = by_name(resolver.describe(Keyed))
        assert descriptors["pk"].is_id is True
        assert descriptors["pk"].key == "_id"
        assert descriptors["email"].key == "mail"
        assert descriptors["secret"].is_mappable is False

    def test_meta_exclude(self, resolver):
        descriptors = by_name(resolver.describe(Excluding))
        assert descriptors["password"].is_mappable is False
        assert descriptors["id"].is_id is True

    def test_two_explicit_ids_rejected(self, resolver):
        with pytest.raises(ConfigurationError, match="more than one identifier"):
            resolver.describe(TwoIds)

    def test_explicit_id_beats_convention(self, resolver):
        descriptors = by_name(resolver.describe(ExplicitBeatsConvention))
        assert descriptors["code"].is_id is True
        assert descriptors["id"].is_id is False
        assert descriptors["id"].key == "id"

    def test_configured_id_key(self):
        resolver = DescriptorResolver(MapperConfig(id_key="ident"))
        assert by_name(resolver.describe(Person))["id"].key == "ident"

    def test_configured_id_names(self):
        resolver = DescriptorResolver(MapperConfig(id_names=("name",)))
        descriptors = by_name(resolver.describe(Person))
        assert descriptors["name"].is_id is True
        assert descriptors["id"].is_id is False


class TestShapes:
    def test_nested_parameterization_resolves_to_origin(self, resolver):
        nested = by_name(resolver.describe(Shapes))["nested"]
        assert nested.element_type is list

    def test_ordered_dict(self, resolver):
        ordered = by_name(resolver.describe(Shapes))["ordered"]
        assert ordered.is_map is True
        assert ordered.value_type is int

    def test_abstract_sequence(self, resolver):
        sequence = by_name(resolver.describe(Shapes))["sequence"]
        assert sequence.is_collection is True
        assert sequence.element_type is Address

    def test_iterable_is_collection(self, resolver):
        stream = by_name(resolver.describe(Shapes))["stream"]
        assert stream.is_collection is True
        assert stream.is_map is False
        assert stream.element_type is int

    def test_untyped_list(self, resolver):
        untyped = by_name(resolver.describe(Shapes))["untyped_list"]
        assert untyped.is_collection is True
        assert untyped.element_type is None

    def test_any_is_untyped(self, resolver):
        anything = by_name(resolver.describe(Shapes))["anything"]
        assert anything.is_untyped is True
        assert anything.is_entity is False

    def test_homogeneous_fixed_tuple(self, resolver):
        pair = by_name(resolver.describe(Shapes))["pair"]
        assert pair.is_array is True
        assert pair.element_type is str

    def test_union_is_untyped(self, resolver):
        assert by_name(resolver.describe(Shapes))["unions"].is_untyped is True

    def test_set_of_ids(self, resolver):
        ids = by_name(resolver.describe(Shapes))["ids"]
        assert ids.is_collection is True
        assert ids.element_type is ObjectId

    def test_unbound_type_variable_argument(self, resolver):
        with pytest.raises(ConfigurationError, match="T"):
            resolver.describe(Box)

    def test_unbound_type_variable_property(self, resolver):
        with pytest.raises(ConfigurationError):
            resolver.describe(UnboundProperty)

    def test_non_text_map_keys_rejected(self, resolver):
        with pytest.raises(UnsupportedShapeError, match="str map keys"):
            resolver.describe(NonTextKeys)

    def test_heterogeneous_tuple_rejected(self, resolver):
        with pytest.raises(ConfigurationError, match="heterogeneous"):
            resolver.describe(Heterogeneous)

    def test_not_a_class(self, resolver):
        with pytest.raises(ConfigurationError):
            resolver.describe("Person")


class TestPlainClasses:
    def test_class_annotations(self, resolver):
        descriptors = by_name(resolver.describe(PlainPerson))
        assert descriptors["id"].property_type is ObjectId
        assert descriptors["id"].is_id is True

    def test_inherited_annotations_come_first(self, resolver):
        assert [d.name for d in resolver.describe(Dog)] == ["name", "breed"]


class TestPydanticModels:
    def test_model_fields(self, resolver):
        descriptors = by_name(resolver.describe(Account))
        assert descriptors["id"].is_id is True
        assert descriptors["owner"].key == "owner_name"
        assert descriptors["balance"].property_type is float
        assert descriptors["note"].is_mappable is False

    def test_class_vars_are_synthetic(self, resolver):
        kind = by_name(resolver.describe(Account))["kind"]
        assert kind.is_synthetic is True

    def test_field_doc_id(self, resolver):
        descriptors = by_name(resolver.describe(Ledger))
        assert descriptors["number"].is_id is True
        assert descriptors["entries"].element_type is Account

    def test_pydantic_properties_are_skipped(self, resolver):
        names = {d.name for d in resolver.describe(Account, AccessMode.PROPERTY)}
        assert "model_extra" not in names
        assert "model_fields_set" not in names


class TestAccessModes:
    def test_field_mode_ignores_properties(self, resolver):
        names = {d.name for d in resolver.describe(Person)}
        assert "display_name" not in names

    def test_property_mode_includes_properties(self, resolver):
        display = by_name(resolver.describe(Person, AccessMode.PROPERTY))["display_name"]
        assert display.is_read_only is True
        assert display.property_type is str
        assert display.is_mappable is True


class TestCache:
    def test_descriptors_are_cached(self, resolver):
        assert resolver.describe(Person) is resolver.describe(Person)

    def test_cache_is_per_mode(self, resolver):
        assert resolver.describe(Person) is not resolver.describe(Person, AccessMode.PROPERTY)

    def test_descriptors_are_immutable(self, resolver):
        descriptor = resolver.describe(Person)[0]
        with pytest.raises(AttributeError):
            descriptor.key = "other"


class TestFieldHelper:
    def test_field_without_default_is_required(self, resolver):
        class Tagged(BaseModel):
            label: str = Field(doc_key="lbl")

        assert Tagged.model_fields["label"].is_required() is True
        assert by_name(resolver.describe(Tagged))["label"].key == "lbl"

    def test_field_keeps_json_schema_extra(self):
        class Tagged(BaseModel):
            label: str = Field("x", doc_id=True, json_schema_extra={"title": "Label"})

        extra = Tagged.model_fields["label"].json_schema_extra
        assert extra == {"title": "Label", "doc_id": True}
