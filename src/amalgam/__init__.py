"""
Amalgam - rule-driven merging and composition for dynamic records.

Builds objects by merging ordered definitions under per-property override
rules, with diamond-safe multiple inheritance, lifecycle hooks and
invocable function chains.
"""

import importlib.metadata as _metadata
import logging as _logging

# Version is defined in pyproject.toml - read it and parse into tuple (primary representation)
_raw_version = _metadata.version("amalgam")
__version_info__: tuple[int, int, int] = tuple(int(x) for x in _raw_version.split(".")[:3])  # type: ignore[assignment]
__version__: str = ".".join(str(x) for x in __version_info__)
__author__ = "Amalgam Contributors"

_logging.getLogger(__name__).addHandler(_logging.NullHandler())

from amalgam.errors import (  # noqa: E402
    AmalgamError,
    RuleConflict,
    RuleExecutionFault,
    UsageError,
)
from amalgam.types import UNDEFINED, Record  # noqa: E402
from amalgam.logging import get_sink, set_sink, use_sink  # noqa: E402
from amalgam.chains import Chain, make_chain, off, on  # noqa: E402
from amalgam.config import Settings, get_settings  # noqa: E402
from amalgam.rules import derive_rules, get_rule, merge, register_rule  # noqa: E402
from amalgam.compose import create, inherits, is_composed, origin  # noqa: E402

__all__ = [
    "UNDEFINED",
    "AmalgamError",
    "Chain",
    "Record",
    "RuleConflict",
    "RuleExecutionFault",
    "Settings",
    "UsageError",
    "__version__",
    "__version_info__",
    "create",
    "derive_rules",
    "get_rule",
    "get_settings",
    "get_sink",
    "inherits",
    "is_composed",
    "make_chain",
    "merge",
    "off",
    "on",
    "origin",
    "register_rule",
    "set_sink",
    "use_sink",
]
