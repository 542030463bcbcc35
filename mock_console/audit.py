"""
Audit — decision trail for a reconciler.

Every decision the reconciler takes (suppress, match, queue, mismatch,
auto-pass, drain failure) becomes a ReconcileEvent written to the
reconciler's sinks.

Supports:
- In-memory sink for inspection from tests
- Logging sink routed through the standard logging module

Events live only as long as the sink; nothing is persisted across runs.
"""
import logging
from typing import Iterable, Optional

from mock_console.types import ReconcileEvent

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════════
# AUDIT SINK INTERFACE
# ═══════════════════════════════════════════════════════════════════════════════

class AuditSink:
    """Abstract interface for audit sinks."""

    def write_event(self, event: ReconcileEvent) -> None:
        """Write an audit event."""
        raise NotImplementedError


# ═══════════════════════════════════════════════════════════════════════════════
# MEMORY AUDIT SINK
# ═══════════════════════════════════════════════════════════════════════════════

class MemoryAuditSink(AuditSink):
    """In-memory audit sink for testing."""

    def __init__(self):
        self.events: list[ReconcileEvent] = []

    def write_event(self, event: ReconcileEvent) -> None:
        self.events.append(event)

    def clear(self) -> None:
        self.events.clear()

    def get_events(self) -> list[ReconcileEvent]:
        return list(self.events)

    def decisions(self) -> list[str]:
        """Decision names in the order they were taken."""
        return [event.decision.name for event in self.events]


# ═══════════════════════════════════════════════════════════════════════════════
# LOGGING AUDIT SINK
# ═══════════════════════════════════════════════════════════════════════════════

class LoggingAuditSink(AuditSink):
    """Audit sink that writes to Python logging."""

    def __init__(self, logger_name: str = "mock_console.audit"):
        self.logger = logging.getLogger(logger_name)

    def write_event(self, event: ReconcileEvent) -> None:
        log_level = logging.INFO if event.success else logging.WARNING

        self.logger.log(
            log_level,
            "AUDIT: %s %s [%s] %s",
            event.event_id,
            event.decision.name,
            event.kind.value,
            event.entry,
        )

        if event.detail:
            self.logger.debug("  DETAIL: %s", event.detail)


# ═══════════════════════════════════════════════════════════════════════════════
# PER-RECONCILER ROUTING
# ═══════════════════════════════════════════════════════════════════════════════

class AuditTrail:
    """
    Routes events to a reconciler's sinks.

    One trail per reconciler; there is no process-wide manager.
    """

    def __init__(self, sinks: Optional[Iterable[AuditSink]] = None):
        if sinks is None:
            sinks = [LoggingAuditSink()]
        self.sinks: list[AuditSink] = list(sinks)

    def add_sink(self, sink: AuditSink) -> None:
        """Add an audit sink."""
        self.sinks.append(sink)

    def remove_sink(self, sink: AuditSink) -> None:
        """Remove an audit sink."""
        if sink in self.sinks:
            self.sinks.remove(sink)

    def write_event(self, event: ReconcileEvent) -> None:
        """Write event to all sinks. A failing sink is logged and skipped."""
        for sink in self.sinks:
            try:
                sink.write_event(event)
            except Exception as e:
                logger.error(f"Audit sink {sink} failed: {e}")
