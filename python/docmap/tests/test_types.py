"""Tests for simple-type classification."""

from __future__ import annotations

import re
from collections import deque
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

import pytest
from bson.code import Code
from bson.dbref import DBRef
from bson.binary import Binary
from bson.decimal128 import Decimal128
from bson.int64 import Int64
from bson.objectid import ObjectId

from docmap.core.types import array_element_type, is_simple, is_simple_value, storage_type


class Color(Enum):
    RED = 1
    GREEN = 2


class Address:
    city: str = ""


class TestIsSimple:
    """Test is_simple() against declared and runtime types."""

    @pytest.mark.parametrize(
        "tp",
        [bool, int, float, str, bytes, datetime, date, Decimal, UUID, re.Pattern],
    )
    def test_python_scalars(self, tp):
        assert is_simple(tp) is True

    @pytest.mark.parametrize("tp", [ObjectId, DBRef, Code, Int64])
    def test_bson_types(self, tp):
        assert is_simple(tp) is True

    def test_enum_subclass_is_simple(self):
        assert is_simple(Color) is True

    def test_type_reference_is_simple(self):
        assert is_simple(type) is True
        assert is_simple_value(int) is True

    @pytest.mark.parametrize("tp", [list, dict, set, deque, list[int], dict[str, int]])
    def test_collections_are_compound(self, tp):
        assert is_simple(tp) is False

    def test_entity_is_compound(self):
        assert is_simple(Address) is False

    def test_simple_array(self):
        assert is_simple(tuple[int, ...]) is True
        assert is_simple(tuple[str, str]) is True

    def test_array_of_entities_is_compound(self):
        assert is_simple(tuple[Address, ...]) is False

    def test_heterogeneous_tuple_is_compound(self):
        assert is_simple(tuple[int, str]) is False

    def test_non_types(self):
        assert is_simple(None) is False
        assert is_simple(Any) is False

    def test_runtime_classification(self):
        assert is_simple_value("text") is True
        assert is_simple_value(None) is True
        assert is_simple_value(Color.RED) is True
        assert is_simple_value([1, 2]) is False
        assert is_simple_value({"a": 1}) is False
        assert is_simple_value(Address()) is False


class TestArrayElementType:
    def test_variadic(self):
        assert array_element_type(tuple[int, ...]) is int

    def test_homogeneous_fixed(self):
        assert array_element_type(tuple[str, str, str]) is str

    def test_heterogeneous(self):
        assert array_element_type(tuple[int, str]) is None

    def test_not_a_tuple(self):
        assert array_element_type(list[int]) is None


class TestStorageType:
    @pytest.mark.parametrize(
        "tp, stored",
        [(date, datetime), (time, str), (Decimal, Decimal128), (UUID, Binary), (type, str)],
    )
    def test_types_without_bson_encoding(self, tp, stored):
        assert storage_type(tp) is stored

    @pytest.mark.parametrize("tp", [datetime, str, int, bytes, ObjectId, re.Pattern])
    def test_native_types_stored_as_is(self, tp):
        assert storage_type(tp) is None

    def test_metaclass_instances_stored_as_text(self):
        assert storage_type(type(Color)) is str
