"""
Function chains for Amalgam.

A chain is an invocable, ordered list of functions whose results are
combined by an execution strategy. Chains back the CHAIN_* merge rules
and the post-composition built hooks, and can be used standalone for
eventing and callback pipelines.
"""

from amalgam.chains.strategies import (
    AND,
    LAST_DEFINED,
    OR,
    PARALLEL_ASYNC,
    SEQUENTIAL_ASYNC,
    STOP_AT_DEFINED,
    STOP_FIRST_DEFINED,
    get_strategy,
    is_defined,
    strategy_names,
)
from amalgam.chains.chain import (  # noqa: I001
    Chain,
    as_chain,
    is_chain,
    make_chain,
    off,
    on,
    resolve_strategy,
)

__all__ = [
    "AND",
    "Chain",
    "LAST_DEFINED",
    "OR",
    "PARALLEL_ASYNC",
    "SEQUENTIAL_ASYNC",
    "STOP_AT_DEFINED",
    "STOP_FIRST_DEFINED",
    "as_chain",
    "get_strategy",
    "is_chain",
    "is_defined",
    "make_chain",
    "off",
    "on",
    "resolve_strategy",
    "strategy_names",
]
