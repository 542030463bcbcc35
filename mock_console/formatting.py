"""
Formatting — diagnostic rendering for queue entries.

Display only. Nothing in here takes part in matching.
"""
import json
from typing import Any, Iterable

from mock_console.types import QueueEntry


MISMATCH_HEADER = "Log error, expected message:"
RECEIVED_LABEL = "But received message:"
HAD_RECEIVED_LABEL = "But had received message:"
UNCONSUMED_HEADER = "Messages received but not expected:"
UNMET_HEADER = "Messages expected but not received:"


def _display_fallback(value: Any) -> str:
    """json.dumps default= hook: show what JSON cannot encode as its repr."""
    return repr(value)


def _dumps(value: Any) -> str:
    return json.dumps(
        value,
        separators=(",", ":"),
        ensure_ascii=False,
        default=_display_fallback,
    )


def _render_argument(arg: Any) -> str:
    """
    One argument as JSON, or its repr() as a JSON string when JSON cannot
    walk it (circular references, mappings with non-string keys).
    """
    try:
        return _dumps(arg)
    except (TypeError, ValueError, RecursionError):
        return _dumps(repr(arg))


def render_entry(entry: QueueEntry) -> str:
    """
    Render a message or expectation as compact JSON.

    {"type":"log","arguments":["one","two"]}

    Each argument is rendered on its own, so one value JSON cannot encode
    only changes how that value is shown.
    """
    arguments = ",".join(_render_argument(arg) for arg in entry.args)
    return f'{{"type":{_dumps(entry.type.value)},"arguments":[{arguments}]}}'


def format_mismatch(expected: QueueEntry, received: QueueEntry, just_received: bool) -> str:
    """
    Text for a head-of-queue disagreement.

    just_received is True when the message arrived after the expectation was
    declared, False when the message was already waiting.
    """
    label = RECEIVED_LABEL if just_received else HAD_RECEIVED_LABEL
    return (
        f"{MISMATCH_HEADER}\n"
        f"> {render_entry(expected)}\n"
        f"{label}\n"
        f"> {render_entry(received)}"
    )


def format_listing(header: str, entries: Iterable[QueueEntry]) -> str:
    """Header line followed by one indexed line per entry, each newline-terminated."""
    lines = [f"{header}\n"]
    for index, entry in enumerate(entries):
        lines.append(f"{index}: {render_entry(entry)}\n")
    return "".join(lines)
