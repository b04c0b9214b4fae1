"""
Rule-dispatch merge engine.

merge() copies the properties of a source mapping onto a target mapping,
asking a rule function how every property combines:

    rule(existing, incoming, derived_rules) -> value | UNDEFINED

The rule for a property is found by priority:
1. A rule map entry for the property name
2. The ``*`` entry
3. DEFINE

Property-name markers (see markers) are only decoded with
``markers=True``. A marked key such as ``"init__"`` then writes to
``"init"`` under the rule map entry for the raw key, or else the rule its
marker selects.

``derived_rules`` is the rule map scoped to the property: entries whose
first path segment is the property name or ``*``, with that segment
stripped. This is how nested merges inherit their sub-rules.

Every property is its own fault boundary: a rule that raises is reported
through the logging sink and the property is left unwritten, but the merge
carries on with the next property.
"""

from __future__ import annotations

import collections.abc as _abc
import logging as _logging
import typing as _typing

import amalgam.config as config
import amalgam.constants as constants
import amalgam.errors as errors
import amalgam.logging as amalgam_logging
import amalgam.rules.catalog as catalog
import amalgam.rules.markers as property_markers
import amalgam.types as types

_logger = _logging.getLogger(__name__)


def normalize_rules(rule_spec: types.RuleSpec) -> types.RuleMap:
    """
    Turn any accepted rule argument into a rule map.

    Args:
        rule_spec: None (empty map, so every property falls back to
            DEFINE), a single rule function (becomes the ``*`` entry), or a
            mapping of paths to rule functions or catalog rule names.

    Returns:
        A new rule map with every rule resolved to a function.

    Raises:
        UsageError: If the rules have an invalid shape or name an unknown rule.
    """
    if rule_spec is None:
        return {}
    if isinstance(rule_spec, _abc.Mapping):
        rule_map: types.RuleMap = {}
        for path, rule in rule_spec.items():
            if not isinstance(path, str):
                raise errors.UsageError(f"Rule paths must be strings, got {path!r}")
            rule_map[path] = _resolve_rule_value(path, rule)
        return rule_map
    if callable(rule_spec):
        return {constants.WILDCARD: rule_spec}
    raise errors.UsageError(
        f"Rules must be a rule function or a rule map, got {type(rule_spec).__name__}"
    )


def _resolve_rule_value(path: str, rule: _typing.Any) -> types.RuleFunction:
    if isinstance(rule, str):
        return catalog.get_rule(rule)
    if not callable(rule):
        raise errors.UsageError(
            f'Rule for "{path}" must be a rule function or name, got {type(rule).__name__}'
        )
    return rule


def derive_rules(rules: _abc.Mapping[str, types.RuleFunction], prop: str) -> types.RuleMap:
    """
    Scope a rule map to one property.

    Example:
        >>> derive_rules({"options.*": REPLACE, "*.name": FILL, "other.x": IGNORE}, "options")
        {'*': REPLACE, 'name': FILL}

    The ``*.*`` entry is carried down unchanged and also becomes the ``*``
    entry of the derived map, so it applies at every depth below. Explicit
    entries take priority over it. The bare ``*`` entry is not carried.

    Args:
        rules: The rule map at the current level.
        prop: The property being merged.

    Returns:
        The rule map for merging inside ``prop``.
    """
    derived: types.RuleMap = {}
    deep = rules.get(constants.DEEP_WILDCARD)
    if deep is not None:
        derived[constants.WILDCARD] = deep
        derived[constants.DEEP_WILDCARD] = deep

    for path, rule in rules.items():
        if path in (constants.WILDCARD, constants.DEEP_WILDCARD):
            continue
        head, separator, rest = path.partition(constants.PATH_SEPARATOR)
        if separator and head in (prop, constants.WILDCARD):
            derived[rest] = rule
    return derived


def resolve_rule(rules: _abc.Mapping[str, types.RuleFunction], prop: str) -> types.RuleFunction:
    """Return the rule for a property: its own entry, else ``*``, else DEFINE."""
    rule = rules.get(prop)
    if rule is None:
        rule = rules.get(constants.WILDCARD)
    if rule is None:
        rule = catalog.DEFINE
    return rule


def merge(
    target: _abc.MutableMapping[str, _typing.Any],
    source: _abc.Mapping[str, _typing.Any],
    rule_spec: types.RuleSpec = None,
    *,
    markers: bool = False,
) -> _abc.MutableMapping[str, _typing.Any]:
    """
    Merge the properties of ``source`` into ``target``.

    Example:
        >>> merge({"a": {"x": 1}}, {"a": {"y": 2}}, DEEP_REPLACE)
        {'a': {'x': 1, 'y': 2}}

    Args:
        target: The mapping to modify.
        source: The mapping providing new properties. Never modified.
        rule_spec: None (DEFINE for everything), a rule function, or a
            rule map.
        markers: Decode ``name__`` / ``__name`` keys into APPEND / PREPEND
            merges of ``name``. Off by default, so keys are never renamed.

    Returns:
        ``target``, modified in place.

    Raises:
        UsageError: If the arguments have the wrong shape. Rule faults are
            never raised.
    """
    if not isinstance(target, _abc.MutableMapping):
        raise errors.UsageError(f"merge target must be a mutable mapping, got {type(target).__name__}")
    if not isinstance(source, _abc.Mapping):
        raise errors.UsageError(f"merge source must be a mapping, got {type(source).__name__}")

    rules = normalize_rules(rule_spec)

    if markers:
        properties = property_markers.normalize(source)
    else:
        properties = [
            property_markers.MarkedProperty(key, value, None) for key, value in source.items()
        ]

    for key, marked in zip(source, properties):
        prop = marked.name
        rule = rules.get(key) if key != prop else None
        if rule is None:
            rule = marked.rule or resolve_rule(rules, prop)
        derived = derive_rules(rules, prop)
        existing = target.get(prop, types.UNDEFINED)

        try:
            output = rule(existing, marked.value, derived)
        except errors.RuleConflict as conflict:
            _report_fault(prop, conflict, existing, marked.value, derived)
            continue
        except Exception as e:
            fault = errors.RuleExecutionFault(prop, existing, marked.value, derived, e)
            fault.__cause__ = e
            _report_fault(prop, fault, existing, marked.value, derived)
            continue

        if output is not types.UNDEFINED:
            target[prop] = output

    return target


def _report_fault(
    prop: str,
    fault: errors.AmalgamError,
    existing: _typing.Any,
    incoming: _typing.Any,
    derived: types.RuleMap,
) -> None:
    """Report a recovered per-property fault through the sink."""
    settings = config.get_settings()
    if isinstance(fault, errors.RuleConflict) and not settings.log_conflicts:
        _logger.debug('Conflict on "%s" not reported (log_conflicts disabled)', prop)
        return

    sink = amalgam_logging.get_sink()
    if settings.dump_operands:
        sink.dump(existing)
        sink.dump(incoming)
        sink.dump(derived)
    sink.log(f'merge: "{prop}" override error.\n -> {fault}')
