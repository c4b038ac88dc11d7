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

"""Public API return type for PSxFramework.

Every public operation returns exactly one StatusResult. Expected failure
modes (missing file, missing directory, bad parameter) are reported through
the result instead of raised, so callers only ever check ``result.ok``.

The dataclass is frozen (immutable) to prevent accidental mutation of
return values.

Example:
    Using the result type:
        ```python
        from psxframework.build import create_release

        result = create_release("App", "v1.0.0")
        if result.ok:
            print(f"Release: {result.data}")
        else:
            print(f"Failed: {result.message}")
        ```

Note:
    ``data`` is only populated on success. The single exception to "every
    failure is a FAILURE" is the release assembler: a checksum step that
    fails after the executable was written still yields SUCCESS with the
    caveat recorded in ``message``.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
import functools
import traceback
from typing import Any, ParamSpec

__all__ = ["StatusCode", "StatusResult", "status_guard"]

P = ParamSpec("P")


class StatusCode(str, Enum):
    """Outcome of a public operation."""

    SUCCESS = "Success"
    FAILURE = "Failure"


@dataclass(frozen=True)
class StatusResult:
    """Uniform result envelope returned by every public operation.

    Attributes:
        code: SUCCESS if the operation's postcondition held, else FAILURE.
        message: Human-readable description of the outcome.
        data: Operation payload (usually a Path). None on failure.
    """

    code: StatusCode
    message: str
    data: Any = None

    @property
    def ok(self) -> bool:
        """True when the operation succeeded."""
        return self.code is StatusCode.SUCCESS

    @classmethod
    def success(cls, message: str, data: Any = None) -> StatusResult:
        """Build a SUCCESS result."""
        return cls(StatusCode.SUCCESS, message, data)

    @classmethod
    def failure(cls, message: str) -> StatusResult:
        """Build a FAILURE result (never carries data)."""
        return cls(StatusCode.FAILURE, message)


def status_guard(
    prefix: str,
) -> Callable[[Callable[P, StatusResult]], Callable[P, StatusResult]]:
    """Convert exceptions escaping a public operation into failure results.

    Args:
        prefix: Logger prefix used when reporting the converted fault.

    Returns:
        Decorator wrapping a function that returns a StatusResult.

    Example:
        ```python
        @status_guard("WORKSPACE")
        def create_hidden_temp_data(store=None) -> StatusResult:
            ...
        ```
    """

    def decorator(func: Callable[P, StatusResult]) -> Callable[P, StatusResult]:
        @functools.wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> StatusResult:
            from psxframework.logging import get_global_logger

            try:
                return func(*args, **kwargs)
            except Exception as err:
                logger = get_global_logger()
                logger.verbose(prefix, f"[X] {func.__name__} failed: {err}")
                logger.debug(prefix, traceback.format_exc().rstrip())
                return StatusResult.failure(str(err) or type(err).__name__)

        return wrapper

    return decorator
