"""
Channels — interception of the log / warn / error surfaces.

A ChannelInterceptor swaps the three channel callables of a target object
for hooks that forward (kind, args) to a sink, and puts the originals back
on uninstall. While installed the original output is suppressed.
"""
import logging
import sys
from abc import ABC, abstractmethod
from typing import Any, Callable, Mapping, Optional, TextIO

from mock_console.errors import InterceptionError
from mock_console.types import LogKind

logger = logging.getLogger(__name__)

ChannelSink = Callable[[LogKind, tuple], None]

_MISSING = object()


# ═══════════════════════════════════════════════════════════════════════════════
# CONSOLE
# ═══════════════════════════════════════════════════════════════════════════════

class Console:
    """
    Minimal console surface.

    log writes to stdout; warn and error write to stderr. Arguments are
    joined with spaces like print().
    """

    def __init__(self, stdout: Optional[TextIO] = None, stderr: Optional[TextIO] = None):
        self._stdout = stdout
        self._stderr = stderr

    @property
    def stdout(self) -> TextIO:
        return self._stdout if self._stdout is not None else sys.stdout

    @property
    def stderr(self) -> TextIO:
        return self._stderr if self._stderr is not None else sys.stderr

    def log(self, *args: Any) -> None:
        print(*args, file=self.stdout)

    def warn(self, *args: Any) -> None:
        print(*args, file=self.stderr)

    def error(self, *args: Any) -> None:
        print(*args, file=self.stderr)


# Shared console for application code that wants a console-style surface.
console = Console()


# ═══════════════════════════════════════════════════════════════════════════════
# INTERCEPTOR INTERFACE
# ═══════════════════════════════════════════════════════════════════════════════

class ChannelInterceptor(ABC):
    """Installs and removes hooks on the three channels."""

    @property
    @abstractmethod
    def installed(self) -> bool:
        """Are the hooks currently in place?"""
        pass

    @abstractmethod
    def install(self, sink: ChannelSink) -> None:
        """Route every channel call to sink. Raises InterceptionError if already installed."""
        pass

    @abstractmethod
    def uninstall(self) -> None:
        """Restore the original channels. No-op when not installed."""
        pass

    def describe(self) -> str:
        return self.__class__.__name__


# ═══════════════════════════════════════════════════════════════════════════════
# ATTRIBUTE-BASED INTERCEPTION
# ═══════════════════════════════════════════════════════════════════════════════

class AttributeChannels(ChannelInterceptor):
    """
    Intercepts channels exposed as attributes of a target object.

    attributes maps each LogKind to the attribute name to replace. The hook
    is set on the target itself; an attribute that was only inherited from
    the class is deleted again on uninstall so lookup falls back exactly as
    before.
    """

    def __init__(self, target: Any, attributes: Mapping[LogKind, str]):
        missing = set(LogKind) - set(attributes)
        if missing:
            raise ValueError(f"No attribute given for {sorted(k.value for k in missing)}")
        self.target = target
        self.attributes = dict(attributes)
        self._saved: dict[str, Any] = {}
        self._installed = False

    @property
    def installed(self) -> bool:
        return self._installed

    def describe(self) -> str:
        return f"{self.__class__.__name__}({self.target!r})"

    def install(self, sink: ChannelSink) -> None:
        if self._installed:
            raise InterceptionError(
                f"Channels already intercepted on {self.target!r}",
                target=self.describe(),
            )

        absent = [name for name in self.attributes.values() if not callable(getattr(self.target, name, None))]
        if absent:
            raise InterceptionError(
                f"{self.target!r} has no callable channel(s) {absent}",
                target=self.describe(),
            )

        for kind, name in self.attributes.items():
            # Only what lives on the target itself needs to be restored.
            self._saved[name] = vars(self.target).get(name, _MISSING)
            setattr(self.target, name, self._make_hook(kind, sink))

        self._installed = True
        logger.debug(f"CHANNELS: installed on {self.describe()}")

    def uninstall(self) -> None:
        if not self._installed:
            return

        for name, original in self._saved.items():
            if original is _MISSING:
                delattr(self.target, name)
            else:
                setattr(self.target, name, original)

        self._saved.clear()
        self._installed = False
        logger.debug(f"CHANNELS: restored on {self.describe()}")

    def _make_hook(self, kind: LogKind, sink: ChannelSink) -> Callable[..., None]:
        # Keyword arguments (end=, exc_info=, extra=) never take part in matching.
        def hook(*args: Any, **kwargs: Any) -> None:
            sink(kind, args)

        hook.__name__ = f"intercepted_{self.attributes[kind]}"
        return hook


class ConsoleChannels(AttributeChannels):
    """Intercepts log / warn / error on a console-like object."""

    DEFAULT_ATTRIBUTES = {
        LogKind.LOG: "log",
        LogKind.WARN: "warn",
        LogKind.ERROR: "error",
    }

    def __init__(self, target: Any = None, attributes: Optional[Mapping[LogKind, str]] = None):
        super().__init__(
            target if target is not None else console,
            attributes or self.DEFAULT_ATTRIBUTES,
        )


class LoggerChannels(AttributeChannels):
    """
    Intercepts a logging.Logger.

    info -> LOG, warning -> WARN, error -> ERROR. The message format string
    is the first argument; exc_info, extra and other keywords are ignored.
    """

    DEFAULT_ATTRIBUTES = {
        LogKind.LOG: "info",
        LogKind.WARN: "warning",
        LogKind.ERROR: "error",
    }

    def __init__(self, target, attributes: Optional[Mapping[LogKind, str]] = None):
        if isinstance(target, str):
            target = logging.getLogger(target)
        if not isinstance(target, logging.Logger):
            raise TypeError(f"LoggerChannels needs a logging.Logger, got {type(target).__name__}")
        super().__init__(target, attributes or self.DEFAULT_ATTRIBUTES)

    def describe(self) -> str:
        return f"{self.__class__.__name__}({self.target.name!r})"
