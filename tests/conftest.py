"""
Pytest configuration and fixtures for mock_console tests.
"""
import io
import logging

import pytest

from mock_console import (
    Console,
    ConsoleChannels,
    MemoryAuditSink,
    Reconciler,
    ReconcilerConfig,
)

pytest_plugins = ["pytester"]


# ============================================================
# Console Fixtures
# ============================================================

@pytest.fixture
def fake_console():
    """Console writing to in-memory streams instead of the terminal."""
    return Console(stdout=io.StringIO(), stderr=io.StringIO())


@pytest.fixture
def memory_audit():
    """Memory-based audit sink for testing."""
    sink = MemoryAuditSink()
    yield sink
    sink.clear()


@pytest.fixture
def verbose_config():
    """Dev-only entries enforced."""
    return ReconcilerConfig(verbose=True)


@pytest.fixture
def quiet_config():
    """Dev-only entries auto-pass / never apply."""
    return ReconcilerConfig(verbose=False)


# ============================================================
# Reconciler Fixtures
# ============================================================

@pytest.fixture
def make_reconciler(fake_console, memory_audit):
    """
    Factory for wrapped reconcilers over the fake console.

    Cleans up with revert(ignore_checks=True) like an afterEach hook would.
    """
    created = []

    def factory(config=None):
        reconciler = Reconciler(
            ConsoleChannels(fake_console),
            config=config or ReconcilerConfig(verbose=True),
            audit_sinks=[memory_audit],
        )
        reconciler.wrap_console()
        created.append(reconciler)
        return reconciler

    yield factory

    for reconciler in created:
        reconciler.revert(ignore_checks=True)


@pytest.fixture
def reconciler(make_reconciler):
    """Wrapped reconciler in verbose mode."""
    return make_reconciler()


@pytest.fixture
def app_logger():
    """Isolated logger that does not propagate to the root handlers."""
    log = logging.getLogger("tests.mock_console.app")
    log.propagate = False
    log.setLevel(logging.DEBUG)
    yield log
    log.propagate = True
