"""
Configuration for the console reconciler.

There are no environment variables. Values come from constructor arguments
or, under pytest, from command-line options and ini keys.
"""
from dataclasses import dataclass


# ini key -> attribute
INI_VERBOSE = "mock_console_verbose"
INI_CAPTURE_STACK = "mock_console_capture_stack"
INI_STACK_LIMIT = "mock_console_stack_limit"

DEFAULT_STACK_LIMIT = 10

TRUE_VALUES = frozenset({"true", "1", "yes", "on"})
FALSE_VALUES = frozenset({"false", "0", "no", "off", ""})


def parse_bool(value, name: str) -> bool:
    """Booleans from ini files arrive as strings."""
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in TRUE_VALUES:
        return True
    if text in FALSE_VALUES:
        return False
    raise ValueError(f"Invalid boolean for {name}: {value!r}")


@dataclass
class ReconcilerConfig:
    """
    Reconciler settings.

    verbose: dev-only expectations and allow rules are enforced. Off means
        dev expectations pass immediately and dev rules never apply.
        Defaults to __debug__, so running Python with -O turns it off.
    capture_stack: record the caller stack for every intercepted message.
    stack_limit: frames kept per captured stack.
    """
    verbose: bool = __debug__
    capture_stack: bool = True
    stack_limit: int = DEFAULT_STACK_LIMIT

    def __post_init__(self):
        if self.stack_limit < 1:
            raise ValueError(f"stack_limit must be positive, got {self.stack_limit}")

    @classmethod
    def from_pytest(cls, config) -> "ReconcilerConfig":
        """
        Build from a pytest Config.

        The --mock-console-verbose flag wins over the ini key when given.
        """
        verbose = config.getoption("mock_console_verbose", default=None)
        if verbose is None:
            verbose = parse_bool(config.getini(INI_VERBOSE), INI_VERBOSE)

        return cls(
            verbose=verbose,
            capture_stack=parse_bool(config.getini(INI_CAPTURE_STACK), INI_CAPTURE_STACK),
            stack_limit=int(config.getini(INI_STACK_LIMIT)),
        )
