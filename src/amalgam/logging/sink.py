"""
Logging sink for recovered faults.

The merge engine reports per-property faults through a sink with two
operations: log a message and dump a structure. The default sink routes
both to the standard library logger; tests and embedders can install their
own with set_sink() or use_sink().
"""

from __future__ import annotations

import abc as _abc
import contextlib as _contextlib
import logging as _logging
import pprint as _pprint
import typing as _typing

_logger = _logging.getLogger("amalgam.rules")


class Sink(_abc.ABC):
    """Destination for fault messages and diagnostic dumps."""

    @_abc.abstractmethod
    def log(self, message: str) -> None:
        """Record a message."""
        ...

    @_abc.abstractmethod
    def dump(self, value: _typing.Any) -> None:
        """Record a structure for diagnosis."""
        ...


class NullSink(Sink):
    """Sink that discards everything."""

    def log(self, message: str) -> None:
        pass

    def dump(self, value: _typing.Any) -> None:
        pass


class LoggerSink(Sink):
    """
    Sink backed by the standard logging module.

    Messages are logged at WARNING, dumps at DEBUG so they only show up
    when diagnosing.
    """

    def __init__(self, logger: _logging.Logger | None = None) -> None:
        self._logger = logger or _logger

    def log(self, message: str) -> None:
        self._logger.warning("%s", message)

    def dump(self, value: _typing.Any) -> None:
        if self._logger.isEnabledFor(_logging.DEBUG):
            self._logger.debug("%s", _pprint.pformat(value))


class RecordingSink(Sink):
    """Sink that keeps everything it receives, in order."""

    def __init__(self) -> None:
        self.messages: list[str] = []
        self.dumps: list[_typing.Any] = []

    def log(self, message: str) -> None:
        self.messages.append(message)

    def dump(self, value: _typing.Any) -> None:
        self.dumps.append(value)

    def clear(self) -> None:
        """Forget everything recorded so far."""
        self.messages.clear()
        self.dumps.clear()


_sink: Sink = LoggerSink()


def get_sink() -> Sink:
    """Return the currently installed sink."""
    return _sink


def set_sink(sink: Sink | None) -> Sink:
    """
    Install a sink.

    Args:
        sink: The sink to install. None restores the default LoggerSink.

    Returns:
        The previously installed sink.
    """
    global _sink
    previous = _sink
    _sink = sink if sink is not None else LoggerSink()
    return previous


@_contextlib.contextmanager
def use_sink(sink: Sink) -> _typing.Iterator[Sink]:
    """Install a sink for the duration of a with-block."""
    previous = set_sink(sink)
    try:
        yield sink
    finally:
        set_sink(previous)
