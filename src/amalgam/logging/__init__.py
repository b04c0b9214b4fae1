"""
Fault reporting for Amalgam.

Provides the injectable sink used by the merge engine to report recovered
rule faults.
"""

from amalgam.logging.sink import (
    LoggerSink,
    NullSink,
    RecordingSink,
    Sink,
    get_sink,
    set_sink,
    use_sink,
)

__all__ = [
    "LoggerSink",
    "NullSink",
    "RecordingSink",
    "Sink",
    "get_sink",
    "set_sink",
    "use_sink",
]
