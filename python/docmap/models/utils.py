"""Type introspection utilities for entity property parsing.

This module provides helper functions for extracting type information
from Python type hints. Used by the descriptor resolver.

Functions:
    _unpack_annotated(hint) -> (base_type, metadata_tuple):
        Extract base type from Annotated[T, ...].
        Returns (hint, ()) if not Annotated.

        Annotated[str, DocField(id=True)]  →  (str, (DocField(id=True),))

    _unwrap_optional(hint) -> (inner_type, is_optional):
        Check if type is Optional[T] or T | None.
        Returns (T, True) if nullable, (hint, False) otherwise.

        int | None  →  (int, True)
        str         →  (str, False)

    _raw_type(hint) -> type | None:
        Class behind a hint. list[int] → list, Address → Address.
        None for Any and for unions with more than one member.

    resolve_generic_parameters(hint) -> tuple:
        Concrete classes for the type arguments of a parameterized hint,
        walking through nested parameterizations.

        dict[str, list[int]]  →  (str, list)
        list[T]               →  ConfigurationError
"""

from __future__ import annotations

from types import NoneType, UnionType
from typing import Annotated, Any, ForwardRef, TypeVar, Union, get_args, get_origin

from docmap.exceptions import ConfigurationError


def _unpack_annotated(hint: Any) -> tuple[Any, tuple[Any, ...]]:
    """Extract base type and metadata from Annotated type hint."""
    if get_origin(hint) is Annotated:
        args = get_args(hint)
        if args:
            return args[0], tuple(args[1:])
    return hint, ()


def _unwrap_optional(hint: Any) -> tuple[Any, bool]:
    """Check if type is Optional/Union with None and extract base type."""
    origin = get_origin(hint)
    if origin in (Union, UnionType):
        args = []
        nullable = False
        for arg in get_args(hint):
            if arg is NoneType:
                nullable = True
            else:
                args.append(arg)
        if nullable and len(args) == 1:
            return args[0], True
    return hint, False


def _is_union(hint: Any) -> bool:
    return get_origin(hint) in (Union, UnionType)


def _raw_type(hint: Any) -> type | None:
    """Return the class a hint stands for, or None if it has no single class."""
    if hint is Any or hint is None or _is_union(hint):
        return None
    origin = get_origin(hint)
    if origin is not None:
        return origin if isinstance(origin, type) else None
    if isinstance(hint, TypeVar):
        raise ConfigurationError(f"Can not map unbound type variable {hint.__name__}")
    if isinstance(hint, (str, ForwardRef)):
        raise ConfigurationError(f"Can not map unresolved forward reference {hint!r}")
    return hint if isinstance(hint, type) else None


def resolve_type_argument(arg: Any, hint: Any = None) -> type | None:
    """Resolve a single type argument to a class.

    Nested parameterizations resolve to their origin class; Any, unions and
    special forms resolve to None (untyped).
    """
    arg, _ = _unpack_annotated(arg)
    arg, _ = _unwrap_optional(arg)
    if isinstance(arg, TypeVar):
        raise ConfigurationError(f"Can not map {arg.__name__} in {hint!r}")
    if arg is Any or _is_union(arg):
        return None
    origin = get_origin(arg)
    if origin is not None:
        return origin if isinstance(origin, type) else None
    if isinstance(arg, type):
        return arg
    raise ConfigurationError(f"Can not map {arg!r} in {hint!r}")


def resolve_generic_parameters(hint: Any) -> tuple[type | None, ...]:
    """Resolve the type arguments of a parameterized hint to classes.

    Any resolves to None (untyped). Unbound type variables and unresolved
    forward references raise ConfigurationError.
    """
    return tuple(
        resolve_type_argument(arg, hint) for arg in get_args(hint) if arg is not Ellipsis
    )


__all__ = [
    "_unpack_annotated",
    "_unwrap_optional",
    "_raw_type",
    "resolve_type_argument",
    "resolve_generic_parameters",
]
