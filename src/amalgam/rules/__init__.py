"""
Rule-driven merging for Amalgam.

Example usage:
    import amalgam.rules as rules

    config = rules.merge({}, defaults)
    rules.merge(config, overrides, {
        "*": rules.REPLACE,
        "plugins": rules.ARRAY_APPEND,
        "options": rules.MERGE,
        "options.*": rules.FILL,
    })
"""

from amalgam.rules.engine import derive_rules, merge, normalize_rules, resolve_rule
from amalgam.rules.catalog import (  # noqa: I001
    APPEND,
    ARRAY_APPEND,
    ARRAY_PREPEND,
    CHAIN,
    CHAIN_APPEND,
    CHAIN_PREPEND,
    DEEP_FILL,
    DEEP_REPLACE,
    DEFINE,
    FILL,
    IGNORE,
    MERGE,
    PREPEND,
    REPLACE,
    STRING_APPEND,
    STRING_PREPEND,
    chain_rule,
    get_rule,
    merging,
    register_rule,
    rule_names,
    unregister_rule,
)
from amalgam.rules.markers import marker_rules, split_marker

__all__ = [
    "APPEND",
    "ARRAY_APPEND",
    "ARRAY_PREPEND",
    "CHAIN",
    "CHAIN_APPEND",
    "CHAIN_PREPEND",
    "DEEP_FILL",
    "DEEP_REPLACE",
    "DEFINE",
    "FILL",
    "IGNORE",
    "MERGE",
    "PREPEND",
    "REPLACE",
    "STRING_APPEND",
    "STRING_PREPEND",
    "chain_rule",
    "derive_rules",
    "get_rule",
    "marker_rules",
    "merge",
    "merging",
    "normalize_rules",
    "register_rule",
    "resolve_rule",
    "rule_names",
    "split_marker",
    "unregister_rule",
]
