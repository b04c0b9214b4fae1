"""
Ancestry tags for composed objects.

Every object returned by create() carries a hidden reference to what it
was composed from: the primary definition plus the implementors passed to
create(). The tag is stored as an attribute, never as a key, so it does not
show up when the object is iterated, compared or merged.
"""

from __future__ import annotations

import collections.abc as _abc
import dataclasses as _dataclasses
import typing as _typing

import amalgam.constants as constants
import amalgam.errors as errors


@_dataclasses.dataclass(frozen=True, eq=False)
class Ancestry:
    """
    What a composed object was built from.

    Attributes:
        definition: The primary definition passed to create().
        implementors: Implementors passed to create() ahead of the
            definition's own ``implement`` list.
    """

    definition: _abc.Mapping[str, _typing.Any]
    implementors: tuple[_typing.Any, ...] = ()

    @property
    def children(self) -> tuple[_typing.Any, ...]:
        """Implementors of this node, in application order."""
        own = self.definition.get(constants.IMPLEMENT_KEY)
        if own is None:
            return self.implementors
        if not isinstance(own, (list, tuple)):
            raise errors.UsageError(
                f"'{constants.IMPLEMENT_KEY}' must be a list, got {type(own).__name__}"
            )
        return (*self.implementors, *own)


def ancestry_of(obj: _typing.Any) -> Ancestry | None:
    """Return the ancestry tag of a composed object, or None."""
    return getattr(obj, constants.ANCESTRY_ATTRIBUTE, None)


def is_composed(obj: _typing.Any) -> bool:
    """Check whether an object was produced by create()."""
    return ancestry_of(obj) is not None


def origin(obj: _typing.Any) -> _abc.Mapping[str, _typing.Any] | None:
    """Return the primary definition a composed object was created from."""
    ancestry = ancestry_of(obj)
    return ancestry.definition if ancestry is not None else None


def tag(obj: _typing.Any, ancestry: Ancestry) -> None:
    """
    Attach an ancestry tag to an object.

    Raises:
        UsageError: If the object cannot hold the tag.
    """
    try:
        setattr(obj, constants.ANCESTRY_ATTRIBUTE, ancestry)
    except (AttributeError, TypeError):
        raise errors.UsageError(
            f"A {type(obj).__name__} cannot carry an ancestry tag; "
            "base factories should return a Record or another mapping with attributes"
        ) from None


def as_node(item: _typing.Any) -> Ancestry:
    """
    Resolve an implementor to a traversal node.

    Composed objects resolve to their own ancestry, plain definitions to a
    node without extra implementors.

    Raises:
        UsageError: If the implementor is missing or not a mapping.
    """
    ancestry = ancestry_of(item)
    if ancestry is not None:
        return ancestry
    if item is None:
        raise errors.UsageError("Implementor not defined")
    if not isinstance(item, _abc.Mapping):
        raise errors.UsageError(
            f"Implementors must be definitions (mappings), got {type(item).__name__}"
        )
    return Ancestry(item)
