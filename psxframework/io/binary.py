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

"""Executable verification before external process invocation."""

from __future__ import annotations

import os
from pathlib import Path
import sys

from psxframework.exceptions import ToolError
from psxframework.results import StatusResult, status_guard

EXECUTABLE_SUFFIXES = (".exe", ".com")


def check_binary(path: Path | str) -> Path:
    """Canonicalize ``path`` and make sure it names a runnable file.

    Args:
        path: Path to the executable.

    Returns:
        The resolved path.

    Raises:
        ToolError: If the extension is not executable, the path does not
            exist, or it is not a regular file.
    """
    resolved = Path(path).expanduser().resolve()

    if not resolved.exists():
        raise ToolError(f"Binary not found: {resolved}")
    if not resolved.is_file():
        raise ToolError(f"Binary path is not a file: {resolved}")

    if resolved.suffix.lower() not in EXECUTABLE_SUFFIXES:
        # Extensionless executables are the POSIX equivalent of .exe
        posix_executable = (
            not sys.platform.startswith("win")
            and resolved.suffix == ""
            and os.access(resolved, os.X_OK)
        )
        if not posix_executable:
            raise ToolError(
                f"Binary must be an executable ({', '.join(EXECUTABLE_SUFFIXES)}): "
                f"{resolved}"
            )

    return resolved


@status_guard("TOOLS")
def verify_binary(path: Path | str) -> StatusResult:
    """Confirm an external executable exists and is a regular file.

    Args:
        path: Path to the executable.

    Returns:
        StatusResult with the canonicalized Path as data on success.
    """
    resolved = check_binary(path)
    return StatusResult.success(f"Binary verified: {resolved}", resolved)
