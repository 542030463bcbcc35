"""
Pytest plugin — fixtures and options for console reconciliation.

Fixtures:
    mock_console: reconciler over the shared console, wrapped for the test
    mock_logger:  factory returning wrapped reconcilers over loggers
    mock_console_config: ReconcilerConfig built from options and ini keys

Every reconciler created by these fixtures is drained at teardown. The
drain is strict when the test body passed and skips the checks when it did
not, so a failing test never leaks queued state into the next one.
"""
import logging
from typing import Optional, Union

import pytest

from mock_console.channels import ConsoleChannels, console
from mock_console.config import (
    DEFAULT_STACK_LIMIT,
    INI_CAPTURE_STACK,
    INI_STACK_LIMIT,
    INI_VERBOSE,
    ReconcilerConfig,
)
from mock_console.errors import ReconcileError
from mock_console.reconciler import Reconciler

logger = logging.getLogger(__name__)

CALL_REPORT_KEY = pytest.StashKey[pytest.TestReport]()


# ═══════════════════════════════════════════════════════════════════════════════
# OPTIONS
# ═══════════════════════════════════════════════════════════════════════════════

def pytest_addoption(parser):
    group = parser.getgroup("mock_console", "console call reconciliation")
    group.addoption(
        "--mock-console-verbose",
        action="store_true",
        dest="mock_console_verbose",
        default=None,
        help="Enforce dev-only expectations and allow rules.",
    )
    group.addoption(
        "--no-mock-console-verbose",
        action="store_false",
        dest="mock_console_verbose",
        default=None,
        help="Auto-pass dev-only expectations and skip dev-only allow rules.",
    )
    parser.addini(
        INI_VERBOSE,
        type="bool",
        default=__debug__,
        help="Enforce dev-only expectations and allow rules.",
    )
    parser.addini(
        INI_CAPTURE_STACK,
        type="bool",
        default=True,
        help="Record the caller stack of every intercepted message.",
    )
    parser.addini(
        INI_STACK_LIMIT,
        default=str(DEFAULT_STACK_LIMIT),
        help="Frames kept per captured stack.",
    )


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    outcome = yield
    report = outcome.get_result()
    if report.when == "call":
        item.stash[CALL_REPORT_KEY] = report


# ═══════════════════════════════════════════════════════════════════════════════
# TEARDOWN
# ═══════════════════════════════════════════════════════════════════════════════

def drain_reconcilers(node, reconcilers: list[Reconciler]) -> None:
    """
    Revert every reconciler, newest first.

    All of them are reverted before the first drain failure is raised.
    """
    report = node.stash.get(CALL_REPORT_KEY, None)
    body_passed = report is not None and report.passed

    failures: list[ReconcileError] = []
    for reconciler in reversed(reconcilers):
        try:
            reconciler.revert(ignore_checks=not body_passed)
        except ReconcileError as e:
            failures.append(e)

    if not body_passed:
        logger.debug(f"MOCK_CONSOLE: {node.nodeid} did not pass, drained without checks")

    if failures:
        raise failures[0]


# ═══════════════════════════════════════════════════════════════════════════════
# FIXTURES
# ═══════════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_console_config(request) -> ReconcilerConfig:
    """Reconciler settings from command-line options and ini keys."""
    return ReconcilerConfig.from_pytest(request.config)


@pytest.fixture
def mock_console(request, mock_console_config):
    """Reconciler over the shared console, wrapped for the duration of the test."""
    reconciler = Reconciler(ConsoleChannels(console), config=mock_console_config)
    reconciler.wrap_console()
    yield reconciler
    drain_reconcilers(request.node, [reconciler])


@pytest.fixture
def mock_logger(request, mock_console_config):
    """
    Factory for wrapped logger reconcilers.

    Usage:
        def test_warns(mock_logger):
            reconciler = mock_logger("app.db")
            run_migration()
            reconciler.expect_warn("slow query: %s", "SELECT 1")
    """
    created: list[Reconciler] = []

    def factory(
        target: Union[logging.Logger, str],
        config: Optional[ReconcilerConfig] = None,
    ) -> Reconciler:
        reconciler = Reconciler.for_logger(target, config=config or mock_console_config)
        reconciler.wrap_console()
        created.append(reconciler)
        return reconciler

    yield factory
    drain_reconcilers(request.node, created)
