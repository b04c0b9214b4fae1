"""
Function chains.

A Chain is an ordered list of functions with a pluggable execution
strategy and an optional fixed scope. Calling the chain hands the scope,
the call arguments and a snapshot of the member list to the strategy.

Example:
    >>> import amalgam.chains as chains
    >>> greet = chains.make_chain(chains.STOP_AT_DEFINED)
    >>> greet.add(lambda name: None).add(lambda name: f"hello {name}")
    >>> greet("world")
    'hello world'
"""

from __future__ import annotations

import collections.abc as _abc
import typing as _typing

import amalgam.chains.strategies as strategies
import amalgam.config as config
import amalgam.errors as errors
import amalgam.types as types

Function = _typing.Callable[..., _typing.Any]


def resolve_strategy(strategy: types.Strategy | str | None) -> types.Strategy:
    """
    Turn a strategy argument into a strategy function.

    Args:
        strategy: A strategy function, a registered strategy name, or None
            for the configured default.

    Raises:
        UsageError: If the name is unknown or the value is not callable.
    """
    if strategy is None:
        strategy = config.get_settings().default_strategy
    if isinstance(strategy, str):
        try:
            return strategies.get_strategy(strategy)
        except KeyError as e:
            raise errors.UsageError(str(e)) from None
    if not callable(strategy):
        raise errors.UsageError(f"Chain strategy must be callable, got {type(strategy).__name__}")
    return strategy


class Chain:
    """
    Invocable, ordered list of functions.

    Chains are mutable: members can be appended, prepended and removed
    after creation. Each call runs against a snapshot of the members, so a
    member removing itself (see add_once) does not disturb the running call.
    """

    __slots__ = ("_functions", "_strategy", "_scope", "__weakref__")

    def __init__(
        self,
        strategy: types.Strategy | str | None = None,
        functions: _abc.Iterable[Function] | Function | None = None,
    ) -> None:
        """
        Initialize a chain.

        Args:
            strategy: Execution strategy (function or registered name).
                Defaults to the configured default strategy.
            functions: Initial members, or a single callable.
        """
        self._strategy = resolve_strategy(strategy)
        self._scope: _typing.Any = None
        if functions is None:
            self._functions: list[Function] = []
        elif callable(functions):
            self._functions = [functions]
        else:
            self._functions = list(functions)
        for fn in self._functions:
            self._check_member(fn)

    @staticmethod
    def _check_member(fn: _typing.Any) -> None:
        if not callable(fn):
            raise errors.UsageError(f"Chain members must be callable, got {type(fn).__name__}")

    @property
    def functions(self) -> tuple[Function, ...]:
        """The current members, in execution order."""
        return tuple(self._functions)

    @property
    def strategy(self) -> types.Strategy:
        """The execution strategy."""
        return self._strategy

    @property
    def scope(self) -> _typing.Any:
        """The bound scope, or None when unbound."""
        return self._scope

    def add(self, fn: Function) -> Chain:
        """Append a member. Returns the chain."""
        self._check_member(fn)
        self._functions.append(fn)
        return self

    def add_first(self, fn: Function) -> Chain:
        """Prepend a member. Returns the chain."""
        self._check_member(fn)
        self._functions.insert(0, fn)
        return self

    def add_once(self, fn: Function) -> Chain:
        """Append a member that removes itself after its first call."""
        return self.add(self._once(fn))

    def add_first_once(self, fn: Function) -> Chain:
        """Prepend a member that removes itself after its first call."""
        return self.add_first(self._once(fn))

    def _once(self, fn: Function) -> Function:
        def once(*args: _typing.Any, **kwargs: _typing.Any) -> _typing.Any:
            self.remove(once)
            return fn(*args, **kwargs)

        once.__wrapped__ = fn  # type: ignore[attr-defined]
        return once

    def remove(self, fn: Function | None = None) -> None:
        """
        Remove a member by identity.

        Args:
            fn: The member to remove (first occurrence). None removes all
                members. Removing a function that is not a member does
                nothing.
        """
        if fn is None:
            self._functions.clear()
            return
        for index, member in enumerate(self._functions):
            if member is fn or getattr(member, "__wrapped__", None) is fn:
                del self._functions[index]
                return

    def bind_scope(self, scope: _typing.Any) -> Chain:
        """Fix the scope passed to every member. None unbinds. Returns the chain."""
        self._scope = scope
        return self

    def bound(self, scope: _typing.Any, *args: _typing.Any) -> Function:
        """
        Return a callable running this chain with a fixed scope and leading args.

        The chain's own bound scope is left untouched.
        """

        def run(*more: _typing.Any) -> _typing.Any:
            return self._strategy(scope, (*args, *more), list(self._functions))

        return run

    def copy(self) -> Chain:
        """Return an independent chain with the same strategy, scope and members."""
        clone = Chain(self._strategy, self._functions)
        clone._scope = self._scope
        return clone

    def __call__(self, *args: _typing.Any) -> _typing.Any:
        return self._strategy(self._scope, args, list(self._functions))

    def __len__(self) -> int:
        return len(self._functions)

    def __iter__(self) -> _typing.Iterator[Function]:
        return iter(tuple(self._functions))

    def __contains__(self, fn: object) -> bool:
        return any(member is fn for member in self._functions)

    def __repr__(self) -> str:
        name = getattr(self._strategy, "__name__", repr(self._strategy))
        return f"Chain({name}, {len(self._functions)} functions)"


def make_chain(
    strategy: types.Strategy | str | None = None,
    functions: _abc.Iterable[Function] | Function | None = None,
) -> Chain:
    """
    Create a chain.

    Args:
        strategy: Execution strategy (function or registered name).
            Defaults to the configured default strategy.
        functions: Initial members, or a single callable.

    Returns:
        A new Chain.
    """
    return Chain(strategy, functions)


def is_chain(value: _typing.Any) -> bool:
    """Check whether a value is a Chain (as opposed to a plain callable)."""
    return isinstance(value, Chain)


def as_chain(value: _typing.Any, strategy: types.Strategy | str | None = None) -> Chain:
    """
    Coerce a value into a chain.

    A Chain is returned as is. A plain callable becomes the first member of
    a new chain; None or UNDEFINED gives an empty chain.

    Raises:
        TypeError: If the value cannot be a chain member.
    """
    if isinstance(value, Chain):
        return value
    if value is None or value is types.UNDEFINED:
        return Chain(strategy)
    if callable(value):
        return Chain(strategy, [value])
    raise TypeError(f"Cannot turn a {type(value).__name__} into a chain")


def on(record: _abc.MutableMapping[str, _typing.Any], name: str, fn: Function) -> Chain:
    """
    Append a function to the chain stored at ``record[name]``.

    A plain callable already stored there becomes the first member of a
    new chain; a missing entry becomes an empty chain. A chain already
    stored there is copied, never grown in place.

    Returns:
        The chain now stored at ``record[name]``.
    """
    existing = record.get(name, types.UNDEFINED)
    chain = as_chain(existing)
    if chain is existing:
        chain = chain.copy()
    chain.add(fn)
    record[name] = chain
    return chain


def off(
    record: _abc.MutableMapping[str, _typing.Any],
    name: str,
    fn: Function | None = None,
) -> None:
    """
    Remove a function from the chain at ``record[name]``, if it is a chain.

    The chain is replaced by a copy without ``fn``; the stored chain itself
    is left untouched.
    """
    chain = record.get(name)
    if isinstance(chain, Chain):
        chain = chain.copy()
        chain.remove(fn)
        record[name] = chain
