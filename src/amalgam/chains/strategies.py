"""
Execution strategies for function chains.

A strategy is called as ``strategy(scope, args, functions)`` and decides
how the member functions run and what the chain returns. Members are
invoked as ``fn(scope, *args)`` when the chain has a bound scope and as
``fn(*args)`` otherwise.

A member result counts as "no value" when it is None or UNDEFINED.

Synchronous strategies:
- LAST_DEFINED: result of the last member that returned a value
- STOP_AT_DEFINED: first member result that is a value; the rest never run
- STOP_FIRST_DEFINED: the first member may pre-empt all the others
- AND / OR: truthiness folds over every member

Continuation-passing strategies:
- SEQUENTIAL_ASYNC: each member receives a ``next`` continuation
- PARALLEL_ASYNC: each member receives its own completion callback
"""

from __future__ import annotations

import inspect as _inspect
import logging as _logging
import typing as _typing

import amalgam.types as types

_logger = _logging.getLogger(__name__)

Function = _typing.Callable[..., _typing.Any]

_POSITIONAL_KINDS = (
    _inspect.Parameter.POSITIONAL_ONLY,
    _inspect.Parameter.POSITIONAL_OR_KEYWORD,
)


def is_defined(value: _typing.Any) -> bool:
    """Check whether a member result counts as a value."""
    return value is not None and value is not types.UNDEFINED


def invoke(fn: Function, scope: _typing.Any, args: _typing.Sequence[_typing.Any]) -> _typing.Any:
    """Call a chain member with the chain's scope (if bound) and arguments."""
    if scope is None:
        return fn(*args)
    return fn(scope, *args)


def accepts_continuation(fn: Function, scope: _typing.Any, arg_count: int) -> bool:
    """
    Check whether a member takes a continuation after its arguments.

    Only required positional parameters count: ``*args`` and parameters
    with defaults do not. A member counts as taking the continuation when
    it requires at least as many positional parameters as the call
    supplies including the continuation. Everything else is a synchronous
    member of an async chain and is considered done when it returns.

    Args:
        fn: The chain member.
        scope: The chain scope (adds one positional argument when bound).
        arg_count: Number of call arguments, excluding the continuation.

    Returns:
        True if ``fn`` takes the continuation.
    """
    try:
        signature = _inspect.signature(fn)
    except (TypeError, ValueError):
        # No introspectable signature (some builtins)
        return False

    required = sum(
        1
        for parameter in signature.parameters.values()
        if parameter.kind in _POSITIONAL_KINDS and parameter.default is parameter.empty
    )
    return required >= arg_count + 1 + (0 if scope is None else 1)


def _split_completion(
    args: _typing.Sequence[_typing.Any],
) -> tuple[list[_typing.Any], Function | None]:
    """Pop a trailing callable argument off as the completion callback."""
    call_args = list(args)
    if call_args and callable(call_args[-1]):
        return call_args, call_args.pop()
    return call_args, None


# =============================================================================
# Synchronous strategies
# =============================================================================


def LAST_DEFINED(  # noqa: N802
    scope: _typing.Any,
    args: _typing.Sequence[_typing.Any],
    functions: _typing.Sequence[Function],
) -> _typing.Any:
    """Run every member; return the last result that was a value."""
    output: _typing.Any = None
    for fn in functions:
        result = invoke(fn, scope, args)
        if is_defined(result):
            output = result
    return output


def STOP_AT_DEFINED(  # noqa: N802
    scope: _typing.Any,
    args: _typing.Sequence[_typing.Any],
    functions: _typing.Sequence[Function],
) -> _typing.Any:
    """Run members in order until one returns a value, and return it."""
    for fn in functions:
        result = invoke(fn, scope, args)
        if is_defined(result):
            return result
    return None


def STOP_FIRST_DEFINED(  # noqa: N802
    scope: _typing.Any,
    args: _typing.Sequence[_typing.Any],
    functions: _typing.Sequence[Function],
) -> None:
    """
    Let the first member pre-empt the rest.

    If the first member returns a value, no other member runs. Otherwise
    every remaining member runs. Nothing is returned either way.
    """
    if not functions:
        return None
    if is_defined(invoke(functions[0], scope, args)):
        return None
    for fn in functions[1:]:
        invoke(fn, scope, args)
    return None


def AND(  # noqa: N802
    scope: _typing.Any,
    args: _typing.Sequence[_typing.Any],
    functions: _typing.Sequence[Function],
) -> bool:
    """Logical AND of every member result. Every member runs."""
    output = True
    for fn in functions:
        result = invoke(fn, scope, args)
        output = output and bool(result)
    return output


def OR(  # noqa: N802
    scope: _typing.Any,
    args: _typing.Sequence[_typing.Any],
    functions: _typing.Sequence[Function],
) -> bool:
    """Logical OR of every member result. Every member runs."""
    output = False
    for fn in functions:
        result = invoke(fn, scope, args)
        output = output or bool(result)
    return output


# =============================================================================
# Continuation-passing strategies
# =============================================================================


def SEQUENTIAL_ASYNC(  # noqa: N802
    scope: _typing.Any,
    args: _typing.Sequence[_typing.Any],
    functions: _typing.Sequence[Function],
) -> None:
    """
    Run members one after another, each one deciding when to continue.

    A trailing callable argument is the completion callback. Each member is
    called with the remaining arguments plus a ``next`` continuation; the
    following member runs when ``next`` is called, and the completion
    callback runs after the last one. Members that cannot take a
    continuation are called synchronously and the chain moves on by itself.

    Each continuation only advances the chain the first time it is called.
    A continuation called before its member returns takes effect once the
    member has returned, so chains of any length run in constant stack
    depth. Exceptions raised by a member propagate to whoever called the
    chain (or the continuation).
    """
    call_args, complete = _split_completion(args)
    resume_at: int | None = None
    running = False

    def run_from(index: int) -> None:
        # A continuation called while a member is still running only records
        # where to resume; the outermost call advances the chain in a loop.
        nonlocal resume_at, running
        resume_at = index
        if running:
            return
        running = True
        try:
            while resume_at is not None:
                start, resume_at = resume_at, None
                advance(start)
        finally:
            running = False
            resume_at = None

    def advance(index: int) -> None:
        while index < len(functions):
            fn = functions[index]
            if accepts_continuation(fn, scope, len(call_args)):
                invoke(fn, scope, [*call_args, continuation(index + 1)])
                return
            invoke(fn, scope, call_args)
            index += 1
        if complete is not None:
            complete()

    def continuation(index: int) -> Function:
        called = False

        def next_(*_ignored: _typing.Any) -> None:
            nonlocal called
            if called:
                _logger.debug("Continuation %d called more than once; ignoring", index)
                return
            called = True
            run_from(index)

        return next_

    run_from(0)


def PARALLEL_ASYNC(  # noqa: N802
    scope: _typing.Any,
    args: _typing.Sequence[_typing.Any],
    functions: _typing.Sequence[Function],
) -> None:
    """
    Start every member at once and complete when all of them are done.

    A trailing callable argument is the completion callback. Each member
    is called with the remaining arguments plus its own done-callback. The
    completion callback fires exactly once, when every member has called
    its done-callback (immediately for an empty chain). Members that cannot
    take a done-callback count as done when they return.
    """
    call_args, complete = _split_completion(args)
    total = len(functions)
    finished = 0

    def mark_done() -> None:
        nonlocal finished
        finished += 1
        if finished == total and complete is not None:
            complete()

    def done_callback(index: int) -> Function:
        called = False

        def done(*_ignored: _typing.Any) -> None:
            nonlocal called
            if called:
                _logger.debug("Done-callback %d called more than once; ignoring", index)
                return
            called = True
            mark_done()

        return done

    if total == 0:
        if complete is not None:
            complete()
        return

    for index, fn in enumerate(functions):
        if accepts_continuation(fn, scope, len(call_args)):
            invoke(fn, scope, [*call_args, done_callback(index)])
        else:
            invoke(fn, scope, call_args)
            mark_done()


# =============================================================================
# Registry
# =============================================================================

_STRATEGIES: dict[str, types.Strategy] = {
    "last_defined": LAST_DEFINED,
    "stop_at_defined": STOP_AT_DEFINED,
    "stop_first_defined": STOP_FIRST_DEFINED,
    "sequential_async": SEQUENTIAL_ASYNC,
    "parallel_async": PARALLEL_ASYNC,
    "and": AND,
    "or": OR,
}


def strategy_names() -> list[str]:
    """Names of all registered strategies."""
    return list(_STRATEGIES)


def get_strategy(name: str) -> types.Strategy:
    """
    Look up a strategy by name (case-insensitive).

    Raises:
        KeyError: If no strategy has that name.
    """
    try:
        return _STRATEGIES[name.lower()]
    except KeyError:
        raise KeyError(
            f"Unknown chain strategy '{name}'. Available: {', '.join(_STRATEGIES)}"
        ) from None
