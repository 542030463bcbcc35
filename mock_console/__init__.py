"""
Console call interception and expectation reconciliation for test suites.

Intercepts log / warn / error channels, matches what arrives against what a
test expects in order, and lets known noise through via allow rules.

INVARIANTS:
1. Mismatches raise at the call that detected them, never later
2. After every reconciliation step at least one queue is empty
3. revert() always restores the channels and clears all state
"""
from mock_console.types import (
    LogKind,
    Message,
    Expectation,
    AllowRule,
    DecisionType,
    ReconcileEvent,
)
from mock_console.errors import (
    ReconcileError,
    UnexpectedMismatch,
    UnconsumedReceived,
    UnmetExpectation,
    InterceptionError,
)
from mock_console.channels import (
    ChannelInterceptor,
    AttributeChannels,
    ConsoleChannels,
    LoggerChannels,
    Console,
    console,
)
from mock_console.config import ReconcilerConfig
from mock_console.audit import AuditSink, MemoryAuditSink, LoggingAuditSink
from mock_console.formatting import render_entry
from mock_console.reconciler import Reconciler

__version__ = "0.1.0"

__all__ = [
    "Reconciler",
    "ReconcilerConfig",
    "LogKind",
    "Message",
    "Expectation",
    "AllowRule",
    "DecisionType",
    "ReconcileEvent",
    "ReconcileError",
    "UnexpectedMismatch",
    "UnconsumedReceived",
    "UnmetExpectation",
    "InterceptionError",
    "ChannelInterceptor",
    "AttributeChannels",
    "ConsoleChannels",
    "LoggerChannels",
    "Console",
    "console",
    "AuditSink",
    "MemoryAuditSink",
    "LoggingAuditSink",
    "render_entry",
]
