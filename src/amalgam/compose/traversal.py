"""
Implementor graph traversal.

Definitions are visited depth-first, left to right, post-order: every
implementor (and everything it implements) comes before the definition
that implements it.

Diamond deduplication: the caller owns a seen-set of definition
identities, threaded through the whole walk. A definition that was already
visited is skipped together with its subtree, unless it declares
``reinherit``, in which case it is walked again in full.
"""

from __future__ import annotations

import collections.abc as _abc
import typing as _typing

import amalgam.compose.ancestry as ancestry
import amalgam.constants as constants
import amalgam.errors as errors

Definition = _abc.Mapping[str, _typing.Any]


def walk(
    node: ancestry.Ancestry,
    seen: set[int],
) -> _typing.Iterator[Definition]:
    """
    Yield the definitions of an implementor graph in application order.

    Args:
        node: The root of the walk.
        seen: Identities of definitions already applied; updated as
            definitions are yielded.

    Yields:
        Definitions, leaves first.

    Raises:
        UsageError: On a malformed implement list or an implementor cycle.
    """
    yield from _walk(node, seen, [])


def _walk(
    node: ancestry.Ancestry,
    seen: set[int],
    path: list[int],
) -> _typing.Iterator[Definition]:
    definition = node.definition
    identity = id(definition)
    if identity in path:
        raise errors.UsageError("Implementor cycle detected: a definition implements itself")

    path.append(identity)
    try:
        for item in node.children:
            child = ancestry.as_node(item)
            if _should_skip(child.definition, seen):
                continue
            yield from _walk(child, seen, path)
    finally:
        path.pop()

    seen.add(identity)
    yield definition


def _should_skip(definition: Definition, seen: set[int]) -> bool:
    return id(definition) in seen and not definition.get(constants.REINHERIT_KEY)
