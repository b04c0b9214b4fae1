"""
Shared constants for Amalgam.

This module provides a single source of truth for names and defaults
that are used across the rule, chain and composition modules.
"""

# Reserved definition keys
BASE_KEY = "base"
"""Factory producing the initial output record."""

EXTEND_RULES_KEY = "extend_rules"
"""Rule map governing the merges of subsequent definitions."""

IMPLEMENT_KEY = "implement"
"""Ordered list of implementors (definitions or composed objects)."""

REINHERIT_KEY = "reinherit"
"""Opt out of diamond deduplication."""

MAKE_KEY = "make"
"""Hook run right after a definition is merged."""

INTEGRATE_KEY = "integrate"
"""Hook run before every later definition is merged."""

BUILT_KEY = "built"
"""Hook run once after the whole traversal."""

RESERVED_KEYS = (
    BASE_KEY,
    EXTEND_RULES_KEY,
    IMPLEMENT_KEY,
    REINHERIT_KEY,
    MAKE_KEY,
    INTEGRATE_KEY,
    BUILT_KEY,
)
"""Keys that steer composition and are never merged into the output."""

# Rule paths
PATH_SEPARATOR = "."
WILDCARD = "*"
DEEP_WILDCARD = "*.*"
"""Rule path meaning "this rule at any depth below"."""

# Property-name markers
MARKER = "__"
"""Prefix selects PREPEND, suffix selects APPEND (e.g. ``__init`` / ``init__``)."""

# Chains
DEFAULT_STRATEGY = "last_defined"
"""Strategy used when a chain is created without one."""

# Hidden ancestry tag on composed objects
ANCESTRY_ATTRIBUTE = "__amalgam_ancestry__"
