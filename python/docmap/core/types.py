"""Simple-type classification for document mapping.

SIMPLE_TYPES holds the types a document field can hold directly, without
recursive decomposition into nested documents or sequences: Python scalars,
temporal values, identifiers and the BSON value types pymongo encodes natively.

Besides the exact lookup in SIMPLE_TYPES, two families are simple by subclass:
    - enum.Enum subclasses (written by member name)
    - type objects (type-reference values)

Some simple types have no BSON encoding of their own. The writer stores them
as the type STORAGE_TYPES names, through the conversion registry:
    date      →  datetime (midnight)
    time      →  str (ISO format)
    Decimal   →  Decimal128
    UUID      →  Binary (subtype 4)
    type      →  str ("module:QualName")

Homogeneous arrays (tuple[T, ...]) are simple when their element type is.
Collections and mappings are always compound, whatever their element types.

The writer classifies the runtime type of a value; the reader consults the
declared type of a property.
"""

from __future__ import annotations

import re
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from types import NoneType
from typing import Any, get_args, get_origin
from uuid import UUID

from bson.binary import Binary
from bson.code import Code
from bson.dbref import DBRef
from bson.decimal128 import Decimal128
from bson.int64 import Int64
from bson.max_key import MaxKey
from bson.min_key import MinKey
from bson.objectid import ObjectId
from bson.regex import Regex
from bson.timestamp import Timestamp

SIMPLE_TYPES: frozenset[type] = frozenset(
    {
        NoneType,
        bool,
        int,
        float,
        str,
        bytes,
        datetime,
        date,
        time,
        Decimal,
        UUID,
        re.Pattern,
        # BSON value types
        ObjectId,
        DBRef,
        Code,
        Regex,
        Int64,
        Decimal128,
        Timestamp,
        MinKey,
        MaxKey,
        Binary,
    }
)


STORAGE_TYPES: dict[type, type] = {
    date: datetime,
    time: str,
    Decimal: Decimal128,
    UUID: Binary,
    type: str,
}


def array_element_type(hint: Any) -> Any | None:
    """Return the element type of a homogeneous tuple hint.

    tuple[int, ...]  →  int
    tuple[str, str]  →  str
    tuple[int, str]  →  None (heterogeneous)
    """
    if get_origin(hint) is not tuple:
        return None
    args = [arg for arg in get_args(hint) if arg is not Ellipsis]
    if not args:
        return None
    first = args[0]
    if all(arg == first for arg in args[1:]):
        return first
    return None


def is_simple(tp: Any) -> bool:
    """Return True if values of type tp are stored without recursion."""
    if tp is None:
        return False
    if get_origin(tp) is tuple:
        element = array_element_type(tp)
        return element is not None and is_simple(element)
    if not isinstance(tp, type) or get_origin(tp) is not None:
        return False
    if tp in SIMPLE_TYPES:
        return True
    return issubclass(tp, (Enum, type))


def is_simple_value(value: Any) -> bool:
    """Classify a value by its runtime type."""
    return is_simple(type(value))


def storage_type(tp: type) -> type | None:
    """Return the BSON-storable type values of simple type tp are written as.

    None when tp is stored as-is. Classes of any metaclass count as type.
    """
    if tp in STORAGE_TYPES:
        return STORAGE_TYPES[tp]
    if issubclass(tp, type):
        return STORAGE_TYPES[type]
    return None


__all__ = [
    "SIMPLE_TYPES",
    "STORAGE_TYPES",
    "array_element_type",
    "is_simple",
    "is_simple_value",
    "storage_type",
]
