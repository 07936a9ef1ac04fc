"""Pluggable value conversion registry.

ConversionRegistry maps (source_type, target_type) pairs to plain conversion
functions. Resolution is a single exact-type table lookup:

    registry.convert(value, target)
        1. rule for (type(value), target)      →  rule applied
        2. value is already a target instance  →  returned unchanged
        3. built-in fallback                   →  str → Enum member, int → float,
                                                  any class → str
        4. otherwise                           →  ConversionError

Default rules shipped with every registry:
    str        ↔  ObjectId
    ObjectId   ↔  int (base-16 value of the identifier's 12 bytes)
    date       ↔  datetime
    time       ↔  str (ISO format)
    Decimal    ↔  Decimal128
    UUID       ↔  Binary
    type       ↔  str ("module:QualName")
    Regex      →  re.Pattern (stored patterns decode as Regex)

A rule for a value's exact type wins over the instance check, so a stored
datetime read into a date property becomes a date.

find_first_supported_target() lets a registered rule opt an arbitrary value
type into direct document storage: it scans DOCUMENT_TYPES in priority order
and returns the first target a rule exists for.

Rules are registered during setup. Once mapping starts the registry is only
read, which keeps concurrent read/write calls lock-free.
"""

from __future__ import annotations

import importlib
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

from bson.binary import Binary
from bson.decimal128 import Decimal128
from bson.errors import InvalidId
from bson.objectid import ObjectId
from bson.regex import Regex

from docmap.exceptions import ConversionError

# Ordinal/numeric, temporal, textual, nested document
DOCUMENT_TYPES: tuple[type, ...] = (int, float, datetime, str, dict)

_OBJECT_ID_BITS = 96


@dataclass(frozen=True, slots=True)
class ConversionRule:
    """A directed conversion between two concrete types."""

    source_type: type
    target_type: type
    convert: Callable[[Any], Any]


def object_id_to_str(value: ObjectId) -> str:
    return str(value)


def str_to_object_id(value: str) -> ObjectId:
    return ObjectId(value)


def object_id_to_int(value: ObjectId) -> int:
    return int(str(value), 16)


def int_to_object_id(value: int) -> ObjectId:
    if value < 0 or value.bit_length() > _OBJECT_ID_BITS:
        raise ValueError(f"{value} does not fit in a 12-byte ObjectId")
    return ObjectId(f"{value:024x}")


def date_to_datetime(value: date) -> datetime:
    return datetime(value.year, value.month, value.day)


def datetime_to_date(value: datetime) -> date:
    return value.date()


def type_to_str(value: type) -> str:
    return f"{value.__module__}:{value.__qualname__}"


def str_to_type(value: str) -> type:
    """Import a class from its "module:QualName" reference."""
    module_name, sep, qualname = value.partition(":")
    if not sep or not qualname:
        raise ValueError(f"Expected module:QualName, got '{value}'")
    try:
        found: Any = importlib.import_module(module_name)
        for part in qualname.split("."):
            found = getattr(found, part)
    except (ImportError, AttributeError) as exc:
        raise ValueError(str(exc)) from exc
    if not isinstance(found, type):
        raise TypeError(f"{value} is not a class")
    return found


DEFAULT_RULES: tuple[ConversionRule, ...] = (
    ConversionRule(ObjectId, str, object_id_to_str),
    ConversionRule(str, ObjectId, str_to_object_id),
    ConversionRule(ObjectId, int, object_id_to_int),
    ConversionRule(int, ObjectId, int_to_object_id),
    ConversionRule(date, datetime, date_to_datetime),
    ConversionRule(datetime, date, datetime_to_date),
    ConversionRule(time, str, time.isoformat),
    ConversionRule(str, time, time.fromisoformat),
    ConversionRule(Decimal, Decimal128, Decimal128),
    ConversionRule(Decimal128, Decimal, Decimal128.to_decimal),
    ConversionRule(UUID, Binary, Binary.from_uuid),
    ConversionRule(Binary, UUID, Binary.as_uuid),
    ConversionRule(type, str, type_to_str),
    ConversionRule(str, type, str_to_type),
    ConversionRule(Regex, re.Pattern, Regex.try_compile),
)


def _fallback(source_type: type, target_type: Any) -> Callable[[Any], Any] | None:
    if not isinstance(target_type, type):
        return None
    if source_type is str and issubclass(target_type, Enum):
        return lambda name: target_type[name]
    if source_type is int and target_type is float:
        return float
    if issubclass(source_type, type) and target_type is str:
        return type_to_str
    return None


class ConversionRegistry:
    """Directed type-to-type conversion table, scoped to one mapper."""

    def __init__(self, rules: Iterable[ConversionRule] = DEFAULT_RULES) -> None:
        self._rules: dict[tuple[type, type], ConversionRule] = {}
        self.register_all(rules)

    def register(
        self,
        source_type: type,
        target_type: type,
        func: Callable[[Any], Any],
    ) -> None:
        """Add a rule converting source_type values into target_type."""
        self.register_rule(ConversionRule(source_type, target_type, func))

    def register_rule(self, rule: ConversionRule) -> None:
        if not isinstance(rule, ConversionRule):
            raise TypeError(
                f"Expected ConversionRule, got {type(rule).__name__}"
            )
        self._rules[(rule.source_type, rule.target_type)] = rule

    def register_all(self, rules: Iterable[ConversionRule]) -> None:
        for rule in rules:
            self.register_rule(rule)

    def has_rule(self, source_type: type, target_type: type) -> bool:
        """Return True if an explicit rule exists for the pair."""
        return (source_type, target_type) in self._rules

    def can_convert(self, source_type: type, target_type: Any) -> bool:
        if _is_untyped(target_type):
            return True
        if isinstance(source_type, type) and isinstance(target_type, type):
            if issubclass(source_type, target_type):
                return True
        if self.has_rule(source_type, target_type):
            return True
        return _fallback(source_type, target_type) is not None

    def convert(self, value: Any, target_type: Any) -> Any:
        """Convert value into target_type.

        Raises ConversionError when no rule applies or the rule rejects the
        value.
        """
        if _is_untyped(target_type):
            return value

        source_type = type(value)
        rule = self._rules.get((source_type, target_type))
        if rule is None and isinstance(target_type, type) and isinstance(value, target_type):
            return value
        func = rule.convert if rule is not None else _fallback(source_type, target_type)
        if func is None:
            raise ConversionError(value, target_type, "no conversion rule registered")
        try:
            return func(value)
        except ConversionError:
            raise
        except (ValueError, TypeError, KeyError, ArithmeticError, InvalidId) as exc:
            raise ConversionError(value, target_type, str(exc)) from exc

    def find_first_supported_target(
        self,
        value: Any,
        candidates: Iterable[type] = DOCUMENT_TYPES,
    ) -> type | None:
        """Return the first candidate type a registered rule can produce."""
        source_type = type(value)
        for candidate in candidates:
            if self.has_rule(source_type, candidate):
                return candidate
        return None


def _is_untyped(target_type: Any) -> bool:
    return target_type is None or target_type is Any or target_type is object


__all__ = [
    "DOCUMENT_TYPES",
    "DEFAULT_RULES",
    "ConversionRule",
    "ConversionRegistry",
    "object_id_to_str",
    "str_to_object_id",
    "object_id_to_int",
    "int_to_object_id",
    "date_to_datetime",
    "datetime_to_date",
    "type_to_str",
    "str_to_type",
]
