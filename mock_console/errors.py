"""
Error types for the console reconciler.

Matching failures derive from AssertionError so test runners report them
as failed assertions. All errors carry structured data via to_dict().
"""
from typing import Optional, Sequence

from mock_console.formatting import (
    UNCONSUMED_HEADER,
    UNMET_HEADER,
    format_listing,
    format_mismatch,
    render_entry,
)
from mock_console.types import Expectation, Message, QueueEntry


class ReconcileError(AssertionError):
    """
    Base error for reconciliation failures.

    Raised synchronously at the call that detected the failure.
    """

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict:
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
        }


class UnexpectedMismatch(ReconcileError):
    """
    Head of one queue disagreed with the entry arriving on the other side.

    Both entries were consumed; neither stays queued.
    """

    def __init__(
        self,
        expected: Expectation,
        received: Message,
        just_received: bool,
    ):
        super().__init__(format_mismatch(expected, received, just_received))
        self.expected = expected
        self.received = received
        self.just_received = just_received

    @property
    def origin_stack(self) -> str:
        return self.received.origin_stack

    def to_dict(self) -> dict:
        d = super().to_dict()
        d["expected"] = render_entry(self.expected)
        d["received"] = render_entry(self.received)
        d["just_received"] = self.just_received
        d["origin_stack"] = self.received.origin_stack
        return d


class _DrainError(ReconcileError):
    """Leftover entries found by revert()."""

    header = ""

    def __init__(self, entries: Sequence[QueueEntry]):
        self.entries = tuple(entries)
        super().__init__(format_listing(self.header, self.entries))

    def to_dict(self) -> dict:
        d = super().to_dict()
        d["entries"] = [render_entry(entry) for entry in self.entries]
        return d


class UnconsumedReceived(_DrainError):
    """Messages were received but never expected or allowed."""

    header = UNCONSUMED_HEADER

    @property
    def messages(self) -> tuple:
        return self.entries

    def to_dict(self) -> dict:
        d = super().to_dict()
        d["origin_stacks"] = [m.origin_stack for m in self.entries]
        return d


class UnmetExpectation(_DrainError):
    """Expectations were declared but never satisfied."""

    header = UNMET_HEADER

    @property
    def expectations(self) -> tuple:
        return self.entries


class InterceptionError(RuntimeError):
    """
    Channel interception was used out of order.

    Not a matching failure: raised for double installs and similar misuse.
    """

    def __init__(self, message: str, target: Optional[str] = None):
        self.message = message
        self.target = target
        super().__init__(message)

    def to_dict(self) -> dict:
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "target": self.target,
        }
