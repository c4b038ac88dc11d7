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

"""External process invocation for PSxFramework.

The archiver and the OS copy utility are run through a ProcessRunner so
tests can substitute a fake without spawning real processes.

Calls are synchronous and blocking with no timeout: a hung child process
hangs the caller. Callers needing bounded latency must wrap the pipeline in
their own timeout or cancellation mechanism.

Example:
    ```python
    from psxframework.io.process import SubprocessRunner

    result = SubprocessRunner().run("7za.exe", ["a", "-t7z", "out.7z", "in/*"])
    print(result.exit_code, result.stderr)
    ```
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
import subprocess
from typing import Protocol


@dataclass(frozen=True)
class ProcessResult:
    """Captured outcome of a finished child process.

    Attributes:
        exit_code: Process exit code.
        stdout: Captured standard output text.
        stderr: Captured standard error text.
    """

    exit_code: int
    stdout: str
    stderr: str


class ProcessRunner(Protocol):
    """Protocol for running an external command to completion."""

    def run(
        self, command: str, args: Sequence[str], cwd: Path | None = None
    ) -> ProcessResult:
        """Run ``command`` with ``args`` and wait for it to exit.

        Args:
            command: Executable to run.
            args: Arguments passed to the executable.
            cwd: Working directory for the child process.

        Returns:
            The exit code and captured output.
        """
        ...


class SubprocessRunner:
    """ProcessRunner backed by subprocess.run."""

    def run(
        self, command: str, args: Sequence[str], cwd: Path | None = None
    ) -> ProcessResult:
        from psxframework.logging import get_global_logger

        logger = get_global_logger()
        cmd = [command, *args]
        logger.verbose("PROCESS", f"Running: {' '.join(cmd)}")

        result = subprocess.run(
            cmd,
            cwd=cwd,
            capture_output=True,
            text=True,
            errors="replace",
            check=False,
        )

        logger.debug("PROCESS", f"Exit code: {result.returncode}")
        for line in (result.stdout or "").strip().splitlines():
            logger.debug("PROCESS", f"  {line}")

        return ProcessResult(
            exit_code=result.returncode,
            stdout=result.stdout or "",
            stderr=result.stderr or "",
        )


def get_default_runner() -> ProcessRunner:
    """Return the runner used when callers do not inject one."""
    return SubprocessRunner()


def describe_failure(tool: str, result: ProcessResult) -> str:
    """Build an error message from a failed process result.

    Uses the captured standard error text, or a generic exit code message
    when the tool wrote nothing to stderr.
    """
    stderr = result.stderr.strip()
    if stderr:
        return f"{tool} failed (exit code {result.exit_code}): {stderr}"
    return f"{tool} exited with code {result.exit_code}"
