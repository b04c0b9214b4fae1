"""
Multiple-inheritance composition.

create() builds a new object by merging a definition and everything it
implements, leaves first, under an accumulating rule map.

Reserved definition keys:
- base: factory ``base(definition)`` producing the initial output. The
  first definition in traversal order that has one wins.
- extend_rules: rule map folded into the accumulated rules after this
  definition has been merged, so it governs the definitions after it.
- implement: implementors (definitions or composed objects).
- reinherit: apply this definition again each time it is reached.
- make: ``make(output, definition, node)`` run right after the merge.
- integrate: ``integrate(output, node, definition)`` run before each
  later definition is merged; may return a rule map used for that merge only.
- built: ``built(output, definition)`` run once after the traversal.

Definitions are only ever read. Hooks change the output, and integrate
hooks steer merges by returning rules instead of editing definitions.
"""

from __future__ import annotations

import collections.abc as _abc
import logging as _logging
import typing as _typing

import amalgam.chains as chains
import amalgam.compose.ancestry as ancestry
import amalgam.compose.traversal as traversal
import amalgam.constants as constants
import amalgam.errors as errors
import amalgam.rules as rules
import amalgam.types as types

_logger = _logging.getLogger(__name__)

Definition = _abc.Mapping[str, _typing.Any]

_SEED_RULES: types.RuleMap = {key: rules.IGNORE for key in constants.RESERVED_KEYS}
"""Reserved keys steer composition and are never copied onto the output."""


def create(
    implementors: _typing.Any = None,
    definition: Definition | None = None,
) -> _abc.MutableMapping[str, _typing.Any]:
    """
    Compose a new object from a definition and its implementors.

    Forms:
        create(definition)
        create([implementors], definition)
        create([implementors])   # empty definition

    Args:
        implementors: Definitions or composed objects applied before the
            definition's own ``implement`` list.
        definition: The primary definition. Never modified.

    Returns:
        The composed object (a Record unless a base factory says otherwise),
        tagged with its ancestry.

    Raises:
        UsageError: If the primary definition is already a composed object
            or the arguments have the wrong shape.
    """
    implementors, definition = _normalize_arguments(implementors, definition)
    root = ancestry.Ancestry(definition, implementors)

    output = _make_base(root)
    # Tagged up front so hooks can already ask inherits() about the output
    ancestry.tag(output, root)

    accumulated = dict(_SEED_RULES)
    integrators: list[_typing.Callable[..., _typing.Any]] = []
    built = chains.make_chain(chains.LAST_DEFINED).bind_scope(output)

    for node in traversal.walk(root, set()):
        override = _run_integrators(integrators, output, node, definition, accumulated)
        rules.merge(output, node, override if override is not None else accumulated)

        own_rules = node.get(constants.EXTEND_RULES_KEY)
        if own_rules:
            accumulated = _fold_rules(accumulated, own_rules)

        make = node.get(constants.MAKE_KEY)
        if make is not None:
            make(output, definition, node)

        integrate = node.get(constants.INTEGRATE_KEY)
        if integrate is not None:
            integrators.append(integrate)

        built_hook = node.get(constants.BUILT_KEY)
        if built_hook is not None:
            built.add(built_hook)

    if len(built):
        _logger.debug("Running %d built hook(s)", len(built))
        built(definition)

    return output


def _normalize_arguments(
    implementors: _typing.Any,
    definition: Definition | None,
) -> tuple[tuple[_typing.Any, ...], Definition]:
    """Sort out the create(definition) / create([implementors], definition) forms."""
    if definition is None and not isinstance(implementors, (list, tuple)):
        definition, implementors = implementors, ()
    if definition is None:
        definition = {}
    if implementors is None:
        implementors = ()

    if ancestry.is_composed(definition):
        raise errors.UsageError(
            "Only new definitions can be created. "
            "To build on a composed object, pass it as an implementor: create([obj], definition)"
        )
    if not isinstance(definition, _abc.Mapping):
        raise errors.UsageError(f"Definition must be a mapping, got {type(definition).__name__}")
    if not isinstance(implementors, (list, tuple)):
        raise errors.UsageError(
            f"Implementors must be a list, got {type(implementors).__name__}"
        )
    return tuple(implementors), definition


def _make_base(root: ancestry.Ancestry) -> _abc.MutableMapping[str, _typing.Any]:
    """Create the initial output from the first base factory in traversal order."""
    factory = None
    for node in traversal.walk(root, set()):
        factory = node.get(constants.BASE_KEY)
        if factory is not None:
            break

    if factory is None:
        return types.Record()

    output = factory(root.definition)
    if type(output) is dict:
        return types.Record(output)
    if not isinstance(output, _abc.MutableMapping):
        raise errors.UsageError(
            f"Base factory must return a mutable mapping, got {type(output).__name__}"
        )
    return output


def _run_integrators(
    integrators: list[_typing.Callable[..., _typing.Any]],
    output: _abc.MutableMapping[str, _typing.Any],
    node: Definition,
    definition: Definition,
    accumulated: types.RuleMap,
) -> types.RuleMap | None:
    """
    Run the registered integrate hooks for one node.

    Returns:
        Rules for this node's merge only (the accumulated rules with every
        returned rule map folded over them), or None if no hook returned
        rules.
    """
    override: types.RuleMap | None = None
    for integrate in integrators:
        returned = integrate(output, node, definition)
        if returned is None:
            continue
        override = _fold_rules(override if override is not None else accumulated, returned)
    return override


def _fold_rules(current: types.RuleMap, extra: types.RuleSpec) -> types.RuleMap:
    """Return a new rule map with ``extra`` replacing entries of ``current``."""
    folded = dict(current)
    folded.update(rules.normalize_rules(extra))
    return folded


def inherits(obj: _typing.Any, definition: _typing.Any) -> bool:
    """
    Check whether an object or definition implements a definition.

    Either argument may be a composed object, in which case its ancestry is
    used. A definition counts as inheriting itself.

    Args:
        obj: Composed object or definition to inspect.
        definition: Definition (or composed object) to look for.

    Returns:
        True if ``definition`` is reached when walking ``obj``.
    """
    target = ancestry.origin(definition)
    if target is None:
        target = definition
    node = ancestry.as_node(obj)
    return any(visited is target for visited in traversal.walk(node, set()))
