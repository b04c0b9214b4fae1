"""
Built-in rule functions.

Every rule has the signature ``rule(existing, incoming, derived_rules)``
and returns the value to write, or UNDEFINED to leave the target alone.
``existing`` is UNDEFINED when the target has no such property.

| Rule            | Behavior                                                      |
|-----------------|---------------------------------------------------------------|
| DEFINE          | incoming if nothing is there yet, else RuleConflict           |
| REPLACE         | incoming wins                                                 |
| FILL            | existing wins                                                 |
| IGNORE          | never writes                                                  |
| DEEP_REPLACE    | mappings merge recursively under DEEP_REPLACE, else REPLACE   |
| DEEP_FILL       | mappings merge recursively under DEEP_FILL, else FILL         |
| STRING_APPEND   | existing + incoming                                           |
| STRING_PREPEND  | incoming + existing                                           |
| ARRAY_APPEND    | existing list + incoming items                                |
| ARRAY_PREPEND   | incoming items + existing list                                |
| CHAIN_APPEND    | existing chain (or callable), then incoming                   |
| CHAIN_PREPEND   | incoming, then existing chain (or callable)                   |
| APPEND/PREPEND  | pick one of the above by the type of incoming                 |
| MERGE           | merge incoming into existing under the derived rules          |

Rules that build on an existing mapping or chain work on a copy, so values
shared with a definition are never modified in place.

Rules can be looked up by name with get_rule(); the lookup returns the
same function object as the module attribute.
"""

from __future__ import annotations

import collections.abc as _abc
import typing as _typing

import amalgam.chains as chains
import amalgam.errors as errors
import amalgam.rules.engine as engine
import amalgam.types as types

RuleMap = types.RuleMap


def _is_record(value: _typing.Any) -> bool:
    return isinstance(value, _abc.Mapping)


def _is_sequence(value: _typing.Any) -> bool:
    return isinstance(value, (list, tuple))


def _copy_record(existing: _typing.Any) -> types.Record:
    """Fresh record holding the items of ``existing`` (empty if not a mapping)."""
    if _is_record(existing):
        return types.Record(existing)
    return types.Record()


# =============================================================================
# Basic rules
# =============================================================================


def DEFINE(existing: _typing.Any, incoming: _typing.Any, derived_rules: RuleMap) -> _typing.Any:  # noqa: N802
    """Define a property that does not exist yet; anything else is a conflict."""
    if existing is not types.UNDEFINED:
        raise errors.RuleConflict(existing, incoming)
    return incoming


def REPLACE(existing: _typing.Any, incoming: _typing.Any, derived_rules: RuleMap) -> _typing.Any:  # noqa: N802
    """Incoming value wins."""
    if incoming is not types.UNDEFINED:
        return incoming
    return existing


def FILL(existing: _typing.Any, incoming: _typing.Any, derived_rules: RuleMap) -> _typing.Any:  # noqa: N802
    """Existing value wins; only fills in what is missing."""
    if existing is types.UNDEFINED:
        return incoming
    return existing


def IGNORE(existing: _typing.Any, incoming: _typing.Any, derived_rules: RuleMap) -> _typing.Any:  # noqa: N802
    """Leave the property out entirely."""
    return types.UNDEFINED


# =============================================================================
# Deep rules
# =============================================================================


def DEEP_REPLACE(existing: _typing.Any, incoming: _typing.Any, derived_rules: RuleMap) -> _typing.Any:  # noqa: N802
    """Merge mappings recursively with incoming values winning."""
    if _is_record(incoming):
        return engine.merge(_copy_record(existing), incoming, DEEP_REPLACE)
    return REPLACE(existing, incoming, derived_rules)


def DEEP_FILL(existing: _typing.Any, incoming: _typing.Any, derived_rules: RuleMap) -> _typing.Any:  # noqa: N802
    """Merge mappings recursively, only filling in missing values."""
    if _is_record(incoming) and (existing is types.UNDEFINED or _is_record(existing)):
        return engine.merge(_copy_record(existing), incoming, DEEP_FILL)
    return FILL(existing, incoming, derived_rules)


def MERGE(existing: _typing.Any, incoming: _typing.Any, derived_rules: RuleMap) -> _typing.Any:  # noqa: N802
    """Merge a mapping into (a copy of) the existing one under the derived rules."""
    if not _is_record(incoming):
        raise TypeError(f"MERGE expects a mapping, got {type(incoming).__name__}")
    return engine.merge(_copy_record(existing), incoming, derived_rules)


# =============================================================================
# String and array rules
# =============================================================================


def _check_strings(existing: _typing.Any, incoming: _typing.Any) -> None:
    if not isinstance(incoming, str):
        raise TypeError(f"expected a string, got {type(incoming).__name__}")
    if not isinstance(existing, str):
        raise TypeError(f"cannot concatenate a string onto {type(existing).__name__}")


def STRING_APPEND(existing: _typing.Any, incoming: _typing.Any, derived_rules: RuleMap) -> _typing.Any:  # noqa: N802
    """Concatenate incoming after existing."""
    if existing is types.UNDEFINED or existing is None:
        return incoming
    _check_strings(existing, incoming)
    return existing + incoming


def STRING_PREPEND(existing: _typing.Any, incoming: _typing.Any, derived_rules: RuleMap) -> _typing.Any:  # noqa: N802
    """Concatenate incoming before existing."""
    if existing is types.UNDEFINED or existing is None:
        return incoming
    _check_strings(existing, incoming)
    return incoming + existing


def _as_items(value: _typing.Any) -> list[_typing.Any]:
    if value is types.UNDEFINED or value is None:
        return []
    if _is_sequence(value):
        return list(value)
    return [value]


def ARRAY_APPEND(existing: _typing.Any, incoming: _typing.Any, derived_rules: RuleMap) -> _typing.Any:  # noqa: N802
    """Concatenate incoming items after the existing list."""
    if existing is not types.UNDEFINED and existing is not None and not _is_sequence(existing):
        raise TypeError(f"cannot append items to {type(existing).__name__}")
    return _as_items(existing) + _as_items(incoming)


def ARRAY_PREPEND(existing: _typing.Any, incoming: _typing.Any, derived_rules: RuleMap) -> _typing.Any:  # noqa: N802
    """Concatenate incoming items before the existing list."""
    if existing is not types.UNDEFINED and existing is not None and not _is_sequence(existing):
        raise TypeError(f"cannot prepend items to {type(existing).__name__}")
    return _as_items(incoming) + _as_items(existing)


# =============================================================================
# Chain rules
# =============================================================================


def chain_rule(
    strategy: types.Strategy | str | None = None,
    *,
    prepend: bool = False,
) -> types.RuleFunction:
    """
    Build a rule that grows a chain.

    The rule coerces ``existing`` into a chain under ``strategy`` (an
    existing chain keeps its own strategy and is copied), then appends or
    prepends ``incoming`` as a new member.

    Args:
        strategy: Strategy for newly created chains. None uses the
            configured default at merge time.
        prepend: Add incoming before the existing members.

    Returns:
        The rule function.
    """

    def rule(existing: _typing.Any, incoming: _typing.Any, derived_rules: RuleMap) -> _typing.Any:
        if not callable(incoming):
            raise TypeError(f"chain members must be callable, got {type(incoming).__name__}")
        chain = chains.as_chain(existing, strategy)
        if chain is existing:
            chain = chain.copy()
        if prepend:
            chain.add_first(incoming)
        else:
            chain.add(incoming)
        return chain

    name = getattr(strategy, "__name__", strategy or "default")
    rule.__name__ = f"chain_{'prepend' if prepend else 'append'}_{name}".lower()
    return rule


_chain_append = chain_rule()
_chain_prepend = chain_rule(prepend=True)


def CHAIN_APPEND(existing: _typing.Any, incoming: _typing.Any, derived_rules: RuleMap) -> _typing.Any:  # noqa: N802
    """Run incoming after the existing function(s)."""
    return _chain_append(existing, incoming, derived_rules)


def CHAIN_PREPEND(existing: _typing.Any, incoming: _typing.Any, derived_rules: RuleMap) -> _typing.Any:  # noqa: N802
    """Run incoming before the existing function(s)."""
    return _chain_prepend(existing, incoming, derived_rules)


CHAIN = CHAIN_APPEND


# =============================================================================
# Type-dispatching rules
# =============================================================================


def APPEND(existing: _typing.Any, incoming: _typing.Any, derived_rules: RuleMap) -> _typing.Any:  # noqa: N802
    """
    Append in whatever way suits the incoming value.

    Mappings merge structurally (under the derived rules, or APPEND all the
    way down when there are none), callables chain after, strings and lists
    concatenate after, anything else replaces.
    """
    if _is_record(incoming):
        return engine.merge(_copy_record(existing), incoming, derived_rules or APPEND)
    if callable(incoming):
        return CHAIN_APPEND(existing, incoming, derived_rules)
    if isinstance(incoming, str):
        return STRING_APPEND(existing, incoming, derived_rules)
    if _is_sequence(incoming):
        return ARRAY_APPEND(existing, incoming, derived_rules)
    return REPLACE(existing, incoming, derived_rules)


def PREPEND(existing: _typing.Any, incoming: _typing.Any, derived_rules: RuleMap) -> _typing.Any:  # noqa: N802
    """Mirror of APPEND with incoming going first."""
    if _is_record(incoming):
        return engine.merge(_copy_record(existing), incoming, derived_rules or PREPEND)
    if callable(incoming):
        return CHAIN_PREPEND(existing, incoming, derived_rules)
    if isinstance(incoming, str):
        return STRING_PREPEND(existing, incoming, derived_rules)
    if _is_sequence(incoming):
        return ARRAY_PREPEND(existing, incoming, derived_rules)
    return REPLACE(existing, incoming, derived_rules)


# =============================================================================
# Factories and registry
# =============================================================================


def merging(rule_spec: types.RuleSpec = None) -> types.RuleFunction:
    """
    Build a rule that merges a mapping into (a copy of) the existing one.

    Args:
        rule_spec: Rules for the nested merge. None uses the derived rules
            passed to the rule, which makes it equivalent to MERGE.
    """
    if rule_spec is None:
        return MERGE
    fixed = engine.normalize_rules(rule_spec)

    def rule(existing: _typing.Any, incoming: _typing.Any, derived_rules: RuleMap) -> _typing.Any:
        if not _is_record(incoming):
            raise TypeError(f"expected a mapping, got {type(incoming).__name__}")
        return engine.merge(_copy_record(existing), incoming, fixed)

    return rule


_BUILTIN_RULES: dict[str, types.RuleFunction] = {
    "DEFINE": DEFINE,
    "REPLACE": REPLACE,
    "FILL": FILL,
    "IGNORE": IGNORE,
    "DEEP_REPLACE": DEEP_REPLACE,
    "DEEP_FILL": DEEP_FILL,
    "MERGE": MERGE,
    "STRING_APPEND": STRING_APPEND,
    "STRING_PREPEND": STRING_PREPEND,
    "ARRAY_APPEND": ARRAY_APPEND,
    "ARRAY_PREPEND": ARRAY_PREPEND,
    "CHAIN_APPEND": CHAIN_APPEND,
    "CHAIN_PREPEND": CHAIN_PREPEND,
    "CHAIN": CHAIN,
    "APPEND": APPEND,
    "PREPEND": PREPEND,
}

_rules: dict[str, types.RuleFunction] = dict(_BUILTIN_RULES)


def rule_names() -> list[str]:
    """Names of all registered rules."""
    return list(_rules)


def get_rule(name: str) -> types.RuleFunction:
    """
    Look up a rule by name.

    Returns:
        The registered function itself, so ``get_rule("REPLACE") is REPLACE``.

    Raises:
        UsageError: If no rule has that name.
    """
    try:
        return _rules[name]
    except KeyError:
        raise errors.UsageError(
            f"Unknown rule '{name}'. Available: {', '.join(_rules)}"
        ) from None


def register_rule(name: str, rule: types.RuleFunction) -> types.RuleFunction:
    """
    Add a named rule to the catalog.

    Raises:
        UsageError: If the name belongs to a built-in rule or the rule is
            not callable.
    """
    if name in _BUILTIN_RULES:
        raise errors.UsageError(f"Built-in rule '{name}' cannot be redefined")
    if not callable(rule):
        raise errors.UsageError(f"Rule '{name}' must be callable")
    _rules[name] = rule
    return rule


def unregister_rule(name: str) -> None:
    """Remove a rule added with register_rule(). Unknown names are ignored."""
    if name not in _BUILTIN_RULES:
        _rules.pop(name, None)
