"""
Reconciler — matching intercepted console calls against expectations.

Three collections drive every decision:
- received: FIFO of messages that arrived before anyone expected them
- expected: FIFO of expectations declared before their message arrived
- allowed:  persistent rules for messages that may appear at any time

Every producer call (receive) and consumer call (expect) runs the same
step: drop allowed messages, otherwise compare against the head of the
opposite queue or join the back of its own. After each pass at least one
queue is empty.

Usage:
    reconciler = Reconciler.for_console(console)
    with reconciler:
        console.warn("deprecated")
        reconciler.expect_warn("deprecated")
"""
import logging
import os
import traceback
from collections import deque
from collections.abc import Mapping
from typing import Any, Callable, Iterable, Optional, Union

from mock_console.audit import AuditSink, AuditTrail
from mock_console.channels import ChannelInterceptor, ConsoleChannels, LoggerChannels
from mock_console.config import ReconcilerConfig
from mock_console.errors import (
    ReconcileError,
    UnconsumedReceived,
    UnexpectedMismatch,
    UnmetExpectation,
)
from mock_console.formatting import render_entry
from mock_console.matching import entries_match, rule_matches
from mock_console.types import (
    AllowRule,
    DecisionType,
    Expectation,
    LogKind,
    MatchPredicate,
    Message,
    QueueEntry,
    ReconcileEvent,
)

logger = logging.getLogger(__name__)

PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__)) + os.sep


def capture_origin_stack(limit: int) -> str:
    """Formatted caller stack without frames from this package."""
    frames = [
        frame for frame in traceback.extract_stack()
        if not os.path.abspath(frame.filename).startswith(PACKAGE_DIR)
    ]
    return "".join(traceback.format_list(frames[-limit:]))


# ═══════════════════════════════════════════════════════════════════════════════
# RECONCILER
# ═══════════════════════════════════════════════════════════════════════════════

class Reconciler:
    """
    Console call reconciler for one test scope.

    Not thread-safe. Use one instance per test and never share it between
    concurrently running tests.
    """

    def __init__(
        self,
        channels: ChannelInterceptor,
        config: Optional[ReconcilerConfig] = None,
        audit_sinks: Optional[Iterable[AuditSink]] = None,
    ):
        """
        Args:
            channels: Interceptor for the log / warn / error channels
            config: Verbose flag and stack capture settings
            audit_sinks: Where decisions are recorded (defaults to logging)
        """
        self.channels = channels
        self.config = config or ReconcilerConfig()
        self.audit = AuditTrail(audit_sinks)

        self._received: deque[Message] = deque()
        self._expected: deque[Expectation] = deque()
        self._allowed: list[AllowRule] = []
        self._empty_callback: Optional[Callable[[], Any]] = None

    @classmethod
    def for_console(cls, target: Any = None, **kwargs) -> "Reconciler":
        """Reconciler over a console-like object (the shared console by default)."""
        return cls(ConsoleChannels(target), **kwargs)

    @classmethod
    def for_logger(cls, target: Union[logging.Logger, str], **kwargs) -> "Reconciler":
        """Reconciler over a logging.Logger or logger name."""
        return cls(LoggerChannels(target), **kwargs)

    def __repr__(self) -> str:
        return (
            f"<Reconciler {self.channels.describe()} installed={self.installed} "
            f"received={len(self._received)} expected={len(self._expected)} "
            f"allowed={len(self._allowed)}>"
        )

    # ── Introspection ──

    @property
    def verbose(self) -> bool:
        return self.config.verbose

    @property
    def installed(self) -> bool:
        return self.channels.installed

    @property
    def is_empty(self) -> bool:
        return not self._received and not self._expected

    @property
    def pending_received(self) -> tuple:
        return tuple(self._received)

    @property
    def pending_expected(self) -> tuple:
        return tuple(self._expected)

    @property
    def allowed_rules(self) -> tuple:
        return tuple(self._allowed)

    # ═══════════════════════════════════════════════════════════════════════
    # LIFECYCLE
    # ═══════════════════════════════════════════════════════════════════════

    def wrap_console(self) -> None:
        """Start intercepting the channels. No-op when already wrapped."""
        if self.channels.installed:
            logger.debug(f"MOCK_CONSOLE: {self.channels.describe()} already wrapped")
            return
        self.channels.install(self._on_channel_call)
        logger.info(f"MOCK_CONSOLE: wrapped {self.channels.describe()}")

    def revert(self, ignore_checks: bool = False) -> None:
        """
        Stop intercepting and clear all state.

        Unless ignore_checks is set, leftover received messages raise
        UnconsumedReceived, otherwise leftover expectations raise
        UnmetExpectation. The channels are restored and state cleared
        before the error is raised, so the next scope starts clean.
        """
        error: Optional[ReconcileError] = None

        if not ignore_checks:
            if self._received:
                error = UnconsumedReceived(self._received)
            elif self._expected:
                error = UnmetExpectation(self._expected)

        if error is not None:
            for entry in error.entries:
                self._record(DecisionType.DRAIN_FAIL, entry, success=False, detail=error.header)

        self.channels.uninstall()
        self.reset()
        logger.info(
            f"MOCK_CONSOLE: reverted {self.channels.describe()} "
            f"(ignore_checks={ignore_checks}, failed={error is not None})"
        )

        if error is not None:
            raise error

    def reset(self) -> None:
        """Drop queued entries, allow rules and any pending callback."""
        self._received.clear()
        self._expected.clear()
        self._allowed.clear()
        self._empty_callback = None

    def __enter__(self) -> "Reconciler":
        self.wrap_console()
        return self

    def __exit__(self, exc_type, exc_value, tb) -> bool:
        # A failure inside the block is already being reported.
        self.revert(ignore_checks=exc_type is not None)
        return False

    # ═══════════════════════════════════════════════════════════════════════
    # PRODUCER PATH
    # ═══════════════════════════════════════════════════════════════════════

    def _on_channel_call(self, kind: LogKind, args: tuple) -> None:
        self.receive(kind, args)

    def receive(
        self,
        kind: Union[LogKind, str],
        args: Iterable[Any],
        origin_stack: Optional[str] = None,
    ) -> None:
        """
        Handle one channel call.

        Raises:
            UnexpectedMismatch: the head of the expected queue is a different message
        """
        kind = LogKind.coerce(kind)
        if origin_stack is None:
            origin_stack = self._capture_stack()
        message = Message(kind, tuple(args), origin_stack)

        if self._is_allowed(message):
            self._record(DecisionType.SUPPRESS, message)
            return

        if self._expected:
            expectation = self._expected.popleft()
            self._consume(expectation, message, just_received=True)
            return

        self._received.append(message)
        self._record(DecisionType.QUEUE, message)

    # ═══════════════════════════════════════════════════════════════════════
    # CONSUMER PATH
    # ═══════════════════════════════════════════════════════════════════════

    def expect(
        self,
        kind: Union[LogKind, str],
        args: Iterable[Any],
        dev_only: bool = False,
    ) -> None:
        """
        Declare the next unmatched message.

        Raises:
            UnexpectedMismatch: the oldest received message is a different one
        """
        expectation = Expectation(LogKind.coerce(kind), tuple(args), dev_only)

        if dev_only and not self.verbose:
            self._record(DecisionType.AUTO_PASS, expectation)
            return

        if self._received:
            message = self._received.popleft()
            self._consume(expectation, message, just_received=False)
            return

        self._expected.append(expectation)
        self._record(DecisionType.QUEUE, expectation)

    def expect_log(self, *args: Any) -> None:
        self.expect(LogKind.LOG, args)

    def expect_warn(self, *args: Any) -> None:
        self.expect(LogKind.WARN, args)

    def expect_error(self, *args: Any) -> None:
        self.expect(LogKind.ERROR, args)

    def expect_log_dev(self, *args: Any) -> None:
        self.expect(LogKind.LOG, args, dev_only=True)

    def expect_warn_dev(self, *args: Any) -> None:
        self.expect(LogKind.WARN, args, dev_only=True)

    def expect_error_dev(self, *args: Any) -> None:
        self.expect(LogKind.ERROR, args, dev_only=True)

    # ═══════════════════════════════════════════════════════════════════════
    # ALLOW RULES
    # ═══════════════════════════════════════════════════════════════════════

    def allow(
        self,
        rule: Union[AllowRule, Mapping, LogKind, str],
        *args: Any,
        dev: bool = False,
        match: Optional[MatchPredicate] = None,
    ) -> AllowRule:
        """
        Register a persistent allow rule and return it.

        Accepts a prepared AllowRule, a mapping with keys type / args / dev /
        match, or a kind followed by the positional args to match:

            reconciler.allow("warn", "deprecated")
            reconciler.allow({"type": "error", "args": ["x"], "match": pred})

        Messages already waiting in the received queue that the new rule
        covers are dropped as if they had arrived after it.
        """
        if isinstance(rule, AllowRule):
            if args or dev or match is not None:
                raise TypeError("Pass either an AllowRule or rule fields, not both")
        elif isinstance(rule, Mapping):
            if args or dev or match is not None:
                raise TypeError("Pass either a rule mapping or rule fields, not both")
            rule = AllowRule(
                type=rule["type"],
                args=rule.get("args", ()),
                dev_only=rule.get("dev", False),
                match=rule.get("match"),
            )
        else:
            rule = AllowRule(type=rule, args=args, dev_only=dev, match=match)

        self._allowed.append(rule)
        active = self._rule_active(rule)
        logger.debug(
            f"MOCK_CONSOLE [{rule.type.value}]: allow rule registered "
            f"args={list(rule.args)!r} custom_match={rule.match is not None} active={active}"
        )
        if active:
            self._purge_received(rule)
        return rule

    def disallow(self, rule: AllowRule) -> None:
        """Revoke a rule returned by allow()."""
        try:
            self._allowed.remove(rule)
        except ValueError:
            raise KeyError(f"Allow rule {rule.to_dict()} is not registered") from None

    def _rule_active(self, rule: AllowRule) -> bool:
        return self.verbose or not rule.dev_only

    def _is_allowed(self, message: Message) -> bool:
        return any(
            rule_matches(rule, message)
            for rule in self._allowed
            if self._rule_active(rule)
        )

    def _purge_received(self, rule: AllowRule) -> None:
        kept: deque[Message] = deque()
        for message in self._received:
            if rule_matches(rule, message):
                self._record(DecisionType.SUPPRESS, message, detail="allowed after arrival")
            else:
                kept.append(message)

        if len(kept) != len(self._received):
            self._received = kept
            self._settle()

    # ═══════════════════════════════════════════════════════════════════════
    # EMPTY EVENT
    # ═══════════════════════════════════════════════════════════════════════

    def once_empty(self, callback: Callable[[], Any]) -> None:
        """
        Call callback once both queues are empty.

        Fires immediately when they already are; otherwise replaces any
        pending callback and fires on the next transition to empty.
        """
        if self.is_empty:
            # A callback left pending by a mismatch is superseded.
            self._empty_callback = None
            callback()
            return
        self._empty_callback = callback

    def _settle(self) -> None:
        if self.is_empty and self._empty_callback is not None:
            callback, self._empty_callback = self._empty_callback, None
            logger.debug("MOCK_CONSOLE: queues empty, firing callback")
            callback()

    # ═══════════════════════════════════════════════════════════════════════
    # HELPERS
    # ═══════════════════════════════════════════════════════════════════════

    def _consume(self, expectation: Expectation, message: Message, just_received: bool) -> None:
        """Compare a popped pair. Both are gone afterwards whatever the outcome."""
        if not entries_match(expectation, message):
            error = UnexpectedMismatch(expectation, message, just_received)
            self._record(DecisionType.MISMATCH, message, success=False, detail=error.message)
            raise error

        self._record(DecisionType.MATCH, message)
        self._settle()

    def _capture_stack(self) -> str:
        if not self.config.capture_stack:
            return ""
        return capture_origin_stack(self.config.stack_limit)

    def _record(
        self,
        decision: DecisionType,
        entry: QueueEntry,
        success: bool = True,
        detail: Optional[str] = None,
    ) -> None:
        rendered = render_entry(entry)
        logger.debug(f"MOCK_CONSOLE [{entry.type.value}]: {decision.name} {rendered}")
        self.audit.write_event(
            ReconcileEvent.create(decision, entry.type, rendered, success=success, detail=detail)
        )
