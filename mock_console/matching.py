"""
Matching — structural equality between queue entries.

entries_match(a, b) -> bool
rule_matches(rule, message) -> bool

Equality is structural over primitives, sequences and mappings. Anything
else falls back to the value's own __eq__, which for plain objects is
identity. Display strings are never compared.
"""
from collections.abc import Mapping
from typing import Any

from mock_console.types import AllowRule, Message, QueueEntry


# ═══════════════════════════════════════════════════════════════════════════════
# DEEP EQUALITY
# ═══════════════════════════════════════════════════════════════════════════════

SEQUENCE_TYPES = (list, tuple)


def deep_equal(left: Any, right: Any) -> bool:
    """
    Structural equality for argument values.

    - bool is never equal to a number (True != 1)
    - list and tuple compare element-wise with each other
    - mappings need the same keys and deep-equal values
    """
    if left is right:
        return True

    if isinstance(left, bool) or isinstance(right, bool):
        return type(left) is type(right) and left == right

    if isinstance(left, SEQUENCE_TYPES) and isinstance(right, SEQUENCE_TYPES):
        return sequences_equal(left, right)

    if isinstance(left, Mapping) and isinstance(right, Mapping):
        if left.keys() != right.keys():
            return False
        return all(deep_equal(left[key], right[key]) for key in left)

    if isinstance(left, (SEQUENCE_TYPES, Mapping)) or isinstance(right, (SEQUENCE_TYPES, Mapping)):
        return False

    return bool(left == right)


def sequences_equal(left, right) -> bool:
    """Positional equality: same length, each pair deep-equal."""
    if len(left) != len(right):
        return False
    return all(deep_equal(a, b) for a, b in zip(left, right))


# ═══════════════════════════════════════════════════════════════════════════════
# ENTRY MATCHING
# ═══════════════════════════════════════════════════════════════════════════════

def entries_match(expected: QueueEntry, received: QueueEntry) -> bool:
    """Same channel kind and positionally equal arguments."""
    return expected.type is received.type and sequences_equal(expected.args, received.args)


def rule_matches(rule: AllowRule, message: Message) -> bool:
    """
    Does an allow rule cover this message?

    The kind must agree. A custom predicate then decides on its own;
    exceptions it raises propagate to the caller.
    """
    if rule.type is not message.type:
        return False
    if rule.match is not None:
        return bool(rule.match(rule, message))
    return sequences_equal(rule.args, message.args)
