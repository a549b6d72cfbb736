"""Execution context handed to locally registered functions.

A function executable receives the call arguments together with an
``ExecutionContext``.  The context is a fire-and-forget messaging surface
(``debug``, ``info``, ``warning``, ``error``) so that a function can report
progress without knowing whether it runs under a CLI, a test harness or a
long-lived service.
"""

import logging
from abc import ABC, abstractmethod


class ExecutionContext(ABC):
    """Runtime context provided to function executables.

    Different implementations may route messages to a log, a UI, or a test
    harness.
    """

    @abstractmethod
    async def debug(self, content: str):
        """Emit a developer-focused debug message."""
        ...

    @abstractmethod
    async def info(self, content: str):
        """Emit an informational message."""
        ...

    @abstractmethod
    async def warning(self, content: str):
        """Emit a warning about a recoverable condition."""
        ...

    @abstractmethod
    async def error(self, content: str):
        """Emit an error message describing a failure."""
        ...


class LoggingExecutionContext(ExecutionContext):
    """``ExecutionContext`` backed by Python's :mod:`logging` module.

    Each message level maps directly to the corresponding ``logging`` level.
    An optional *prefix* (for example the worker name) is prepended to every
    message.
    """

    def __init__(self, logger: logging.Logger | None = None, prefix: str | None = None):
        self._logger = logger or logging.getLogger(__name__)
        self._prefix = f"[{prefix}] " if prefix else ""

    async def debug(self, content: str):
        self._logger.debug(self._prefix + content)

    async def info(self, content: str):
        self._logger.info(self._prefix + content)

    async def warning(self, content: str):
        self._logger.warning(self._prefix + content)

    async def error(self, content: str):
        self._logger.error(self._prefix + content)


class CollectingExecutionContext(ExecutionContext):
    """Keeps every message in memory as ``(level, content)`` pairs."""

    def __init__(self):
        self.messages: list[tuple[str, str]] = []

    async def debug(self, content: str):
        self.messages.append(("debug", content))

    async def info(self, content: str):
        self.messages.append(("info", content))

    async def warning(self, content: str):
        self.messages.append(("warning", content))

    async def error(self, content: str):
        self.messages.append(("error", content))
