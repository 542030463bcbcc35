"""
Type definitions for the console reconciler.

Channel kinds, received messages, expectations, allow rules and the
audit event model.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum, auto
from typing import Any, Callable, Optional, Union
import json
import uuid


# ═══════════════════════════════════════════════════════════════════════════════
# CHANNEL KINDS
# ═══════════════════════════════════════════════════════════════════════════════

class LogKind(Enum):
    """
    The three intercepted console channels.

    The value is the wire name used in diagnostics ({"type":"log",...}).
    """
    LOG = "log"
    WARN = "warn"
    ERROR = "error"

    @classmethod
    def coerce(cls, kind: Union["LogKind", str]) -> "LogKind":
        """Accept a LogKind or its wire name."""
        if isinstance(kind, cls):
            return kind
        try:
            return cls(kind)
        except ValueError:
            raise ValueError(
                f"Unknown log kind {kind!r}, expected one of "
                f"{[k.value for k in cls]}"
            ) from None


class DecisionType(Enum):
    """Decision taken by the reconciler for a single entry."""
    SUPPRESS = auto()       # Dropped by an allow rule
    MATCH = auto()          # Expectation and message consumed together
    QUEUE = auto()          # Deferred until the opposite side arrives
    MISMATCH = auto()       # Head-of-queue comparison failed
    AUTO_PASS = auto()      # Dev-only expectation while verbose is off
    DRAIN_FAIL = auto()     # Left over at revert()


# ═══════════════════════════════════════════════════════════════════════════════
# QUEUE ENTRIES
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Message:
    """A call received on an intercepted channel."""
    type: LogKind
    args: tuple
    origin_stack: str = ""

    def to_dict(self) -> dict:
        return {
            "type": self.type.value,
            "arguments": list(self.args),
        }


@dataclass(frozen=True)
class Expectation:
    """
    A message a test declared it will see.

    dev_only expectations are only enforced when the reconciler runs verbose.
    """
    type: LogKind
    args: tuple
    dev_only: bool = False

    def to_dict(self) -> dict:
        return {
            "type": self.type.value,
            "arguments": list(self.args),
        }


MatchPredicate = Callable[["AllowRule", Message], bool]


@dataclass(eq=False)
class AllowRule:
    """
    Persistent filter for messages that may arrive at any time.

    With no predicate the rule matches on kind plus positional equality of
    its args. A predicate replaces the args comparison entirely; the kind
    must still agree.

    Rules compare by identity so the same arguments can be registered and
    revoked independently.
    """
    type: LogKind
    args: tuple = ()
    dev_only: bool = False
    match: Optional[MatchPredicate] = None

    def __post_init__(self):
        self.type = LogKind.coerce(self.type)
        self.args = tuple(self.args)

    def to_dict(self) -> dict:
        return {
            "type": self.type.value,
            "arguments": list(self.args),
            "dev": self.dev_only,
            "custom_match": self.match is not None,
        }


QueueEntry = Union[Message, Expectation]


# ═══════════════════════════════════════════════════════════════════════════════
# AUDIT EVENTS
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass
class ReconcileEvent:
    """
    Audit event for a single reconciliation decision.

    Kept in memory or written to logging, never persisted across runs.
    """
    event_id: str
    timestamp: str
    decision: DecisionType
    kind: LogKind
    entry: str
    success: bool
    detail: Optional[str] = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "event_id": self.event_id,
            "timestamp": self.timestamp,
            "decision": self.decision.name,
            "kind": self.kind.value,
            "entry": self.entry,
            "success": self.success,
            "detail": self.detail,
            "extra": self.extra,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2, default=str)

    @staticmethod
    def create(
        decision: DecisionType,
        kind: LogKind,
        entry: str,
        success: bool = True,
        detail: Optional[str] = None,
        **extra: Any,
    ) -> "ReconcileEvent":
        """Factory method with auto-generated id and timestamp."""
        return ReconcileEvent(
            event_id=str(uuid.uuid4()),
            timestamp=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            decision=decision,
            kind=kind,
            entry=entry,
            success=success,
            detail=detail,
            extra=extra,
        )
