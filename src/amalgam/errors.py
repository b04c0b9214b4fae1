"""
Error types for Amalgam.

Only UsageError is ever raised out of merge() or create(). RuleConflict and
RuleExecutionFault are contained per property by the merge engine: they
are reported through the logging sink and the property is left unwritten.
"""

from __future__ import annotations

import typing as _typing


class AmalgamError(Exception):
    """Base class for all Amalgam errors."""

    pass


class UsageError(AmalgamError, TypeError):
    """Raised when an operation is called with a contractually invalid shape."""

    pass


class RuleConflict(AmalgamError):
    """Raised by the DEFINE rule when the target already holds a value."""

    def __init__(self, existing: _typing.Any, incoming: _typing.Any) -> None:
        self.existing = existing
        self.incoming = incoming
        super().__init__("Property is already defined and no override rule was given.")


class RuleExecutionFault(AmalgamError):
    """Wraps an exception raised by a rule function during merge."""

    def __init__(
        self,
        prop: str,
        existing: _typing.Any,
        incoming: _typing.Any,
        derived_rules: dict[str, _typing.Any],
        cause: BaseException,
    ) -> None:
        self.prop = prop
        self.existing = existing
        self.incoming = incoming
        self.derived_rules = derived_rules
        self.cause = cause
        super().__init__(f'Rule for "{prop}" failed: {cause}')
