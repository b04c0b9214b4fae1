"""
Core value types shared across Amalgam.

This module provides:
- UNDEFINED: the "no value" sentinel, distinct from None
- Record: the default output record, a dict that can carry an ancestry tag
- Type aliases for rule functions, rule maps and chain strategies
"""

from __future__ import annotations

import collections.abc as _abc
import typing as _typing

import amalgam.constants as constants


# Helper function to reconstruct the UNDEFINED singleton during unpickle
def _get_undefined_singleton() -> _UndefinedType:
    """Return the UNDEFINED singleton. Called by pickle to reconstruct."""
    return UNDEFINED


class _UndefinedType:
    """
    Sentinel type for "no value".

    A rule function receives UNDEFINED as ``existing`` when the target has
    no such property, and returns UNDEFINED to leave the target untouched.
    None is an ordinary value and is written like any other.
    """

    __slots__ = ()

    def __repr__(self) -> str:
        return "<UNDEFINED>"

    def __bool__(self) -> bool:
        return False

    def __reduce__(self) -> tuple[_typing.Callable[[], _UndefinedType], tuple[()]]:
        """Pickle support: ensure singleton is preserved."""
        return (_get_undefined_singleton, ())


UNDEFINED = _UndefinedType()


def is_undefined(value: _typing.Any) -> bool:
    """Check whether a value is the UNDEFINED sentinel."""
    return value is UNDEFINED


class Record(dict):  # type: ignore[type-arg]
    """
    Default output record for composition.

    Behaves exactly like a dict. The only difference is a slot that holds
    the ancestry tag of a composed object, so the tag never shows up as a
    key, in iteration or in equality.
    """

    __slots__ = (constants.ANCESTRY_ATTRIBUTE,)

    def __repr__(self) -> str:
        return f"Record({dict.__repr__(self)})"


# Type aliases
RuleFunction: _typing.TypeAlias = _typing.Callable[
    [_typing.Any, _typing.Any, "RuleMap"], _typing.Any
]
"""``(existing, incoming, derived_rules) -> value | UNDEFINED``."""

RuleMap: _typing.TypeAlias = dict[str, RuleFunction]
"""Property path (dot separated, ``*`` wildcard) to rule function."""

RuleSpec: _typing.TypeAlias = (
    RuleFunction | _abc.Mapping[str, "RuleFunction | str"] | None
)
"""Anything accepted as the rule argument of merge()."""

Strategy: _typing.TypeAlias = _typing.Callable[
    [_typing.Any, _typing.Sequence[_typing.Any], _typing.Sequence[_typing.Callable[..., _typing.Any]]],
    _typing.Any,
]
"""``(scope, args, functions) -> result``."""
