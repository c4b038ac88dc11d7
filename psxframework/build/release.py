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

"""Release executable assembly for PSxFramework.

This module joins the staged workspace artifacts into the final
self-extracting executable:

    {release}.exe = stub module ++ config.txt ++ {release}.7z

Two interchangeable concatenation strategies produce byte-identical output:

- copy: the OS copy utility in binary mode (``copy /b`` on Windows,
  ``cat`` through ``sh`` elsewhere)
- stream: Python file streams writing each source in order

Private Helpers:
    - _find_stub: Pick the stub module by fixed scan order
    - _prepare_output_dir: Create release/{name}-{version} if needed
    - _strategies_for: Build the ordered strategy list for a method
    - _concatenate: Try strategies in order until one succeeds

Design Principles:
    - Every precondition is a hard gate checked before any process is
      spawned or any output directory is created
    - Only the first stub present in STUB_SCAN_ORDER is ever used
    - An existing executable is deleted before the rebuild
    - auto tries copy, then stream; an explicit method never falls back
    - Success of a strategy is re-checked by looking for the file
    - A failing checksum step does not fail the release

Example:
    ```python
    from psxframework.build import create_release

    result = create_release("App", "v1.0.0", make_checksum=True)
    print(result.data)  # {installRoot}/release/App-v1.0.0/App.exe
    ```
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum
from pathlib import Path
import shutil
import sys
from typing import Protocol

from psxframework.build.bundle import ARCHIVE_SUFFIX, format_size
from psxframework.build.checksum import ChecksumAlgorithm, create_checksum
from psxframework.build.sfx import CONFIG_FILENAME
from psxframework.exceptions import ConfigError, PackagingError, ToolError
from psxframework.install.locator import InstallationStore
from psxframework.io.process import ProcessRunner, describe_failure, get_default_runner
from psxframework.results import StatusResult, status_guard
from psxframework.workspace import require_workspace

RELEASE_DIRNAME = "release"
EXECUTABLE_SUFFIX = ".exe"

# First match wins when several stub modules are staged at once
STUB_SCAN_ORDER = ("7z.sfx", "7zCon.sfx", "7zS2.sfx", "7zSD.sfx")


class ConcatMethod(Enum):
    """How the three artifacts are joined."""

    AUTO = "auto"
    COPY = "copy"
    STREAM = "stream"

    @classmethod
    def parse(cls, value: ConcatMethod | str) -> ConcatMethod:
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ConfigError(
                f"Unknown concatenation method {value!r}. "
                f"Expected one of: auto, copy, stream"
            ) from None


class ConcatStrategy(Protocol):
    """Joins source files, in order, into a target file."""

    name: str

    def concatenate(self, sources: Sequence[Path], target: Path) -> None:
        """Write the bytes of ``sources`` in order into ``target``.

        Raises:
            PSXError or OSError: If the target could not be written.
        """
        ...


class CopyCommandStrategy:
    """Binary concatenation through the operating system's copy utility."""

    name = "copy"

    def __init__(self, runner: ProcessRunner | None = None) -> None:
        self.runner = runner if runner is not None else get_default_runner()

    def concatenate(self, sources: Sequence[Path], target: Path) -> None:
        if sys.platform.startswith("win"):
            # copy /b a+b+c target, run next to the sources so names stay short
            cwd = sources[0].parent
            joined = "+".join(
                s.name if s.parent == cwd else str(s) for s in sources
            )
            command = "cmd.exe"
            args = ["/d", "/c", "copy", "/b", "/y", joined, str(target)]
        else:
            cwd = None
            command = "sh"
            script = " ".join(f'"${i}"' for i in range(1, len(sources) + 1))
            args = [
                "-c",
                f'cat -- {script} > "${len(sources) + 1}"',
                "sh",
                *(str(s) for s in sources),
                str(target),
            ]

        result = self.runner.run(command, args, cwd=cwd)
        if result.exit_code != 0:
            raise ToolError(describe_failure("copy", result))


class StreamStrategy:
    """Concatenation with Python file streams."""

    name = "stream"

    def concatenate(self, sources: Sequence[Path], target: Path) -> None:
        with target.open("wb") as out:
            for source in sources:
                with source.open("rb") as f:
                    shutil.copyfileobj(f, out)


def _find_stub(workspace: Path) -> Path:
    """Return the first stub module present, in STUB_SCAN_ORDER.

    Raises:
        PackagingError: If no stub module is staged.
    """
    for name in STUB_SCAN_ORDER:
        candidate = workspace / name
        if candidate.is_file():
            return candidate
    raise PackagingError(
        f"No SFX module found in workspace (expected one of: "
        f"{', '.join(STUB_SCAN_ORDER)})"
    )


def _prepare_output_dir(
    install_root: Path,
    release_name: str,
    release_version: str,
    output_path: Path | None,
) -> Path:
    if output_path is not None:
        output_dir = Path(output_path).resolve()
        output_dir.mkdir(parents=True, exist_ok=True)
        return output_dir

    release_base = install_root / RELEASE_DIRNAME
    release_base.mkdir(exist_ok=True)
    output_dir = release_base / f"{release_name}-{release_version}"
    output_dir.mkdir(exist_ok=True)
    return output_dir


def _strategies_for(
    method: ConcatMethod, runner: ProcessRunner | None
) -> list[ConcatStrategy]:
    if method is ConcatMethod.COPY:
        return [CopyCommandStrategy(runner)]
    if method is ConcatMethod.STREAM:
        return [StreamStrategy()]
    return [CopyCommandStrategy(runner), StreamStrategy()]


def _concatenate(
    strategies: Sequence[ConcatStrategy], sources: Sequence[Path], target: Path
) -> str:
    """Run strategies in order until one writes ``target``.

    Returns:
        Name of the strategy that succeeded.

    Raises:
        PackagingError: If every strategy failed.
    """
    from psxframework.logging import get_global_logger

    logger = get_global_logger()
    errors: list[str] = []

    for strategy in strategies:
        logger.debug("RELEASE", f"Trying concatenation strategy: {strategy.name}")
        try:
            strategy.concatenate(sources, target)
            if not target.is_file():
                raise PackagingError(
                    f"Concatenation reported success but {target.name} is missing"
                )
            return strategy.name
        except (PackagingError, ToolError, OSError) as err:
            logger.verbose("RELEASE", f"Strategy '{strategy.name}' failed: {err}")
            errors.append(f"{strategy.name}: {err}")
            # A later strategy must start from a clean slate
            if target.exists():
                target.unlink()

    raise PackagingError("Failed to create release executable (" + "; ".join(errors) + ")")


@status_guard("RELEASE")
def create_release(
    release_name: str,
    release_version: str,
    method: ConcatMethod | str = ConcatMethod.AUTO,
    output_path: Path | None = None,
    make_checksum: bool = False,
    checksum_algorithm: ChecksumAlgorithm | str = ChecksumAlgorithm.SHA256,
    store: InstallationStore | None = None,
    runner: ProcessRunner | None = None,
) -> StatusResult:
    """Assemble the release executable from the staged workspace artifacts.

    The workspace must contain ``{release_name}.7z``, ``config.txt`` and one
    of the stub modules in STUB_SCAN_ORDER.

    Args:
        release_name: Release base name; also the archive name.
        release_version: Version used for the default output directory.
        method: "auto" (default), "copy" or "stream".
        output_path: Output directory. Default:
            {installRoot}/release/{release_name}-{release_version}.
        make_checksum: If True, write a checksum report next to the
            executable. Default is False.
        checksum_algorithm: "SHA-256" (default) or "SHA-512".
        store: Installation store used to resolve the root.
        runner: Process runner for the copy strategy.

    Returns:
        StatusResult with the executable Path as data on success. A failed
        checksum step still returns SUCCESS, noted in the message.

    Note:
        Failed builds leave the workspace untouched for inspection; cleaning
        up is the caller's responsibility.
    """
    from psxframework.logging import get_global_logger

    logger = get_global_logger()

    if not release_name or not release_name.strip():
        return StatusResult.failure("Release name must not be empty")
    if not release_version or not release_version.strip():
        return StatusResult.failure("Release version must not be empty")
    concat_method = ConcatMethod.parse(method)
    algo = ChecksumAlgorithm.parse(checksum_algorithm) if make_checksum else None

    # Installation root and workspace
    install_root, workspace = require_workspace(store)

    # Staged artifacts, all checked before any output exists
    archive = workspace / f"{release_name}{ARCHIVE_SUFFIX}"
    if not archive.is_file():
        return StatusResult.failure(f"Archive not found in workspace: {archive.name}")
    config = workspace / CONFIG_FILENAME
    if not config.is_file():
        return StatusResult.failure(f"Config not found in workspace: {CONFIG_FILENAME}")
    stub = _find_stub(workspace)
    logger.verbose("RELEASE", f"Using SFX module: {stub.name}")

    # Output location
    output_dir = _prepare_output_dir(
        install_root, release_name, release_version, output_path
    )
    target = output_dir / f"{release_name}{EXECUTABLE_SUFFIX}"
    if target.exists():
        logger.verbose("RELEASE", f"Removing existing release: {target}")
        target.unlink()

    # stub ++ config ++ archive
    used = _concatenate(
        _strategies_for(concat_method, runner), [stub, config, archive], target
    )
    size = target.stat().st_size
    logger.verbose(
        "RELEASE", f"[OK] Created {target} ({format_size(size)}) using '{used}'"
    )

    message = f"Created release {target.name} ({format_size(size)})"

    # Checksum failures degrade the message, not the result
    if algo is not None:
        checksum = create_checksum(target, algo)
        if checksum.ok:
            message += f", {algo.value} checksum: {checksum.data.name}"
        else:
            logger.verbose("RELEASE", f"Checksum step failed: {checksum.message}")
            message += f", {algo.value} checksum failed: {checksum.message}"

    return StatusResult.success(message, target)
