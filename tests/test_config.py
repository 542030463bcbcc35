"""
Tests for ReconcilerConfig.
"""
import pytest

from mock_console.config import ReconcilerConfig, parse_bool


class FakePytestConfig:
    """Stand-in for pytest.Config exposing getoption / getini."""

    def __init__(self, option=None, ini=None):
        self.option = option
        self.ini = {
            "mock_console_verbose": True,
            "mock_console_capture_stack": True,
            "mock_console_stack_limit": "10",
        }
        self.ini.update(ini or {})

    def getoption(self, name, default=None):
        return default if self.option is None else self.option

    def getini(self, name):
        return self.ini[name]


def test_defaults():
    """Verbose follows __debug__, stacks are captured."""
    config = ReconcilerConfig()

    assert config.verbose is __debug__
    assert config.capture_stack is True
    assert config.stack_limit == 10


def test_stack_limit_must_be_positive():
    """Zero frames is not a useful limit."""
    with pytest.raises(ValueError):
        ReconcilerConfig(stack_limit=0)


def test_parse_bool():
    """ini strings and real booleans are both understood."""
    assert parse_bool("yes", "x") is True
    assert parse_bool("Off", "x") is False
    assert parse_bool(True, "x") is True
    with pytest.raises(ValueError):
        parse_bool("maybe", "x")


def test_from_pytest_ini_values():
    """ini keys feed the config when no option is given."""
    config = ReconcilerConfig.from_pytest(FakePytestConfig(ini={
        "mock_console_verbose": "false",
        "mock_console_capture_stack": False,
        "mock_console_stack_limit": "3",
    }))

    assert config == ReconcilerConfig(verbose=False, capture_stack=False, stack_limit=3)


def test_command_line_option_wins():
    """--mock-console-verbose overrides the ini key."""
    config = ReconcilerConfig.from_pytest(FakePytestConfig(option=True, ini={"mock_console_verbose": False}))

    assert config.verbose is True
