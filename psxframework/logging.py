# Copyright 2025 Roger Cibrian
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Progress and diagnostic output for PSxFramework.

Build operations never print. They report through a process-wide Logger
that is silent until someone installs another one: the ``psx`` CLI installs
a console logger, embedding applications can install a RecordingLogger and
inspect what happened.

Output levels:
    - step: pipeline progress ("[3/7] Creating archive...")
    - verbose: one line per operation outcome, prefixed with the module
      area (INSTALL, WORKSPACE, BUNDLE, ARCHIVE, SFX, CHECKSUM, RELEASE,
      PIPELINE, PROCESS, CONFIG)
    - debug: command lines, process output, tracebacks of converted errors

Example:
    Console output for a CLI run:
        ```python
        from psxframework.logging import get_logger, set_global_logger

        set_global_logger(get_logger(verbose=True))
        ```

    Capturing output around a single build:
        ```python
        from psxframework.logging import RecordingLogger, use_logger

        with use_logger(RecordingLogger()) as log:
            build_release(source, "App", "v1.0.0", "GUI-Mode")
        print(log.messages("verbose"))
        ```
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
import sys
from typing import Protocol, TextIO


class Logger(Protocol):
    """Protocol for logger implementations."""

    def step(self, step: int, total: int, message: str) -> None:
        """Report pipeline progress.

        Args:
            step: Current step number (1-based).
            total: Total number of steps.
            message: Step description.
        """
        ...

    def verbose(self, prefix: str, message: str) -> None:
        """Report an operation outcome.

        Args:
            prefix: Module area (e.g., "WORKSPACE", "RELEASE").
            message: Log message.
        """
        ...

    def debug(self, prefix: str, message: str) -> None:
        """Report diagnostic detail.

        Args:
            prefix: Module area (e.g., "ARCHIVE", "PROCESS").
            message: Log message.
        """
        ...


class DefaultLogger:
    """Console logger.

    Steps are always written. Verbose lines need ``verbose`` or ``debug``,
    debug lines need ``debug``.

    Args:
        verbose: Write verbose lines.
        debug: Write debug lines (implies verbose).
        stream: Output stream. Default: sys.stdout at the time of writing.
    """

    def __init__(
        self, verbose: bool = False, debug: bool = False, stream: TextIO | None = None
    ) -> None:
        self.verbose_enabled = verbose or debug
        self.debug_enabled = debug
        self._stream = stream

    def _write(self, line: str) -> None:
        print(line, file=self._stream or sys.stdout, flush=True)

    def step(self, step: int, total: int, message: str) -> None:
        self._write(f"[{step}/{total}] {message}")

    def verbose(self, prefix: str, message: str) -> None:
        if self.verbose_enabled:
            self._write(f"[{prefix}] {message}")

    def debug(self, prefix: str, message: str) -> None:
        if self.debug_enabled:
            # Tracebacks arrive as one multi-line message
            for line in message.splitlines() or [""]:
                self._write(f"[{prefix}] {line}")


class SilentLogger:
    """Logger that drops everything."""

    def step(self, step: int, total: int, message: str) -> None:
        pass

    def verbose(self, prefix: str, message: str) -> None:
        pass

    def debug(self, prefix: str, message: str) -> None:
        pass


@dataclass(frozen=True)
class LogRecord:
    """One captured log call.

    Attributes:
        level: "step", "verbose" or "debug".
        prefix: Module area, or "{step}/{total}" for steps.
        message: The logged text.
    """

    level: str
    prefix: str
    message: str


class RecordingLogger:
    """Logger keeping every call in memory, regardless of level."""

    def __init__(self) -> None:
        self.records: list[LogRecord] = []

    def step(self, step: int, total: int, message: str) -> None:
        self.records.append(LogRecord("step", f"{step}/{total}", message))

    def verbose(self, prefix: str, message: str) -> None:
        self.records.append(LogRecord("verbose", prefix, message))

    def debug(self, prefix: str, message: str) -> None:
        self.records.append(LogRecord("debug", prefix, message))

    def messages(self, level: str | None = None, prefix: str | None = None) -> list[str]:
        """Return captured messages, optionally filtered by level and prefix."""
        return [
            r.message
            for r in self.records
            if (level is None or r.level == level)
            and (prefix is None or r.prefix == prefix)
        ]


_global_logger: Logger = SilentLogger()


def get_logger(verbose: bool = False, debug: bool = False) -> Logger:
    """Return a console logger with the requested verbosity."""
    return DefaultLogger(verbose=verbose, debug=debug)


def get_global_logger() -> Logger:
    """Return the process-wide logger (silent unless configured)."""
    return _global_logger


def set_global_logger(logger: Logger) -> None:
    """Install ``logger`` as the process-wide logger.

    Example:
        Configure from CLI flags:
            ```python
            set_global_logger(get_logger(verbose=args.verbose, debug=args.debug))
            ```
    """
    global _global_logger
    _global_logger = logger


@contextmanager
def use_logger(logger: Logger) -> Iterator[Logger]:
    """Install ``logger`` for the duration of a ``with`` block.

    The previous global logger is restored on exit, also when the block
    raises.
    """
    previous = _global_logger
    set_global_logger(logger)
    try:
        yield logger
    finally:
        set_global_logger(previous)
