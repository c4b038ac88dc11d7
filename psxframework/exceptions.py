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

"""Exception hierarchy for PSxFramework.

Public operations never let these exceptions reach the caller: they are
raised by internal helpers and converted into failure results at the API
boundary (see psxframework.results.status_guard). Code that calls the helpers
directly can still distinguish between error categories:

- ConfigError: Settings, installation lookup and parameter errors
- WorkspaceError: Scratch workspace state errors
- ToolError: Missing external binaries and failing external processes
- PackagingError: Staging, archiving and release assembly errors

All exceptions inherit from PSXError, allowing users to catch all
PSxFramework errors with a single except clause if needed.

Example:
    Catching specific error types:
        ```python
        from psxframework.exceptions import ToolError
        from psxframework.io import check_binary

        try:
            tool = check_binary(install_root / "include" / "7z" / "7za.exe")
        except ToolError as e:
            print(f"Tool error: {e}")
        ```
"""

from __future__ import annotations

__all__ = [
    "PSXError",
    "ConfigError",
    "WorkspaceError",
    "ToolError",
    "PackagingError",
]


class PSXError(Exception):
    """Base exception for all PSxFramework errors.

    All PSxFramework-specific exceptions inherit from this class, allowing
    users to catch all of them with a single except clause if needed.
    """

    pass


class ConfigError(PSXError):
    """Raised for configuration-related errors.

    This exception is raised when there are problems with:

    - YAML settings parsing (syntax errors, invalid structure)
    - Installation root lookup (missing key, empty value, stale path)
    - Invalid parameters (unknown SFX variant, compression level out of
        range, unsupported checksum algorithm)
    """

    pass


class WorkspaceError(PSXError):
    """Raised for scratch workspace errors.

    This exception is raised when the hidden tmpdata workspace is missing
    where a step requires it, cannot be created, or cannot be emptied or
    removed completely.
    """

    pass


class ToolError(PSXError):
    """Raised for external tool errors.

    This exception is raised when there are problems with:

    - Missing or invalid binaries (7za.exe not found, path is a directory,
        wrong extension)
    - External processes exiting with a non-zero code (archiver, copy
        utility)
    """

    pass


class PackagingError(PSXError):
    """Raised for staging, archiving and release assembly errors.

    This exception is raised when there are problems with:

    - Missing staged artifacts (archive, config.txt, SFX stub)
    - Empty source directories
    - Postcondition checks (copy finished but destination is empty, archiver
        exited 0 but no archive exists, concatenation reported success but no
        executable was written)
    """

    pass
