"""
Property-name markers.

A source property may select its own override rule through its name:

- ``name__`` merges into ``name`` with the APPEND rule
- ``__name`` merges into ``name`` with the PREPEND rule

Dunder names such as ``__init__`` are not markers. Decoding is opt-in:
only ``merge(..., markers=True)`` uses it, once per source before the merge
loop, so rule resolution never slices property names.
"""

from __future__ import annotations

import collections.abc as _abc
import typing as _typing

import amalgam.constants as constants
import amalgam.types as types

_MARKER_LENGTH = len(constants.MARKER)


class MarkedProperty(_typing.NamedTuple):
    """One source property after marker decoding."""

    name: str
    """Property name on the target (marker stripped)."""

    value: _typing.Any
    """Incoming value."""

    rule: types.RuleFunction | None
    """Rule selected by the marker, or None when unmarked."""


def split_marker(key: str) -> tuple[str, str | None]:
    """
    Split a property key into its target name and marker kind.

    Returns:
        ``(name, "append")``, ``(name, "prepend")`` or ``(key, None)``.
    """
    if not isinstance(key, str) or len(key) <= _MARKER_LENGTH:
        return key, None
    starts = key.startswith(constants.MARKER)
    ends = key.endswith(constants.MARKER)
    if starts and not ends:
        return key[_MARKER_LENGTH:], "prepend"
    if ends and not starts:
        return key[:-_MARKER_LENGTH], "append"
    return key, None


def normalize(source: _abc.Mapping[str, _typing.Any]) -> list[MarkedProperty]:
    """
    Decode the markers of every property of a source mapping.

    Args:
        source: The mapping being merged.

    Returns:
        The properties in source order, with marker rules attached.
    """
    # Imported here to avoid circular imports
    import amalgam.rules.catalog as catalog

    rules_by_kind = {"append": catalog.APPEND, "prepend": catalog.PREPEND}
    properties = []
    for key, value in source.items():
        name, kind = split_marker(key)
        properties.append(MarkedProperty(name, value, rules_by_kind.get(kind) if kind else None))
    return properties


def marker_rules(source: _abc.Mapping[str, _typing.Any]) -> types.RuleMap:
    """Return the rule map selected by the markers of a source mapping."""
    return {prop.name: prop.rule for prop in normalize(source) if prop.rule is not None}
