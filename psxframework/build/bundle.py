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

"""Data bundle staging and 7z archive creation for PSxFramework.

Two steps of the release pipeline live here:

- prepare_data_bundle: copy the application's files into a staging directory
- create_data_bundle: run the external 7-Zip archiver over that directory

Design Principles:
    - The archiver is an external binary (default: include/7z/7za.exe below
      the installation root); compression is never done in-process
    - The directory's contents become the archive members, not the
      directory node itself ({input_dir}/* on the command line)
    - A zero exit code is not proof of success: the archive must exist on
      disk afterwards
    - The archiver runs synchronously with no timeout

Example:
    ```python
    from pathlib import Path
    from psxframework.build import create_data_bundle, prepare_data_bundle

    prepare_data_bundle(Path("dist/App"), workspace / "data")
    result = create_data_bundle(workspace / "data", "App", compression_level=9)
    print(result.data)  # {workspace}/App.7z
    ```
"""

from __future__ import annotations

import os
from pathlib import Path
import shutil

from psxframework.exceptions import ConfigError, PackagingError, ToolError
from psxframework.install.locator import InstallationStore, resolve_installation_root
from psxframework.io.binary import check_binary
from psxframework.io.process import ProcessRunner, describe_failure, get_default_runner
from psxframework.results import StatusResult, status_guard
from psxframework.workspace import require_workspace

ARCHIVER_SUBPATH = Path("include") / "7z" / "7za.exe"
ARCHIVE_SUFFIX = ".7z"
MIN_COMPRESSION_LEVEL = 0
MAX_COMPRESSION_LEVEL = 9
DEFAULT_COMPRESSION_LEVEL = 5


def format_size(num_bytes: int) -> str:
    """Format a byte count for humans (e.g., "1.5 MB")."""
    size = float(num_bytes)
    for unit in ("bytes", "KB", "MB", "GB"):
        if size < 1024 or unit == "GB":
            if unit == "bytes":
                return f"{int(size)} bytes"
            return f"{size:.2f} {unit}"
        size /= 1024
    return f"{num_bytes} bytes"


def _count_items(directory: Path) -> int:
    return sum(1 for _ in directory.rglob("*"))


def _count_present(source_dir: Path, dest_dir: Path) -> int:
    """Count the entries of source_dir that now exist below dest_dir."""
    return sum(
        1
        for item in source_dir.rglob("*")
        if (dest_dir / item.relative_to(source_dir)).exists()
    )


def _validate_compression_level(level: int) -> None:
    if isinstance(level, bool) or not isinstance(level, int):
        raise ConfigError(f"Compression level must be an integer, got {level!r}")
    if not MIN_COMPRESSION_LEVEL <= level <= MAX_COMPRESSION_LEVEL:
        raise ConfigError(
            f"Compression level must be between {MIN_COMPRESSION_LEVEL} and "
            f"{MAX_COMPRESSION_LEVEL}, got {level}"
        )


def _resolve_archiver(archiver_path: Path | None, install_root: Path | None) -> Path:
    """Return the verified archiver binary.

    Raises:
        ToolError: If the binary is missing or not an executable file.
    """
    if archiver_path is None:
        if install_root is None:
            raise ToolError("No archiver path given and no installation root")
        archiver_path = install_root / ARCHIVER_SUBPATH
    return check_binary(archiver_path)


@status_guard("BUNDLE")
def prepare_data_bundle(source_dir: Path, dest_dir: Path) -> StatusResult:
    """Copy the contents of ``source_dir`` into ``dest_dir``.

    Only the contents are copied, not the source directory node itself.
    Existing files in ``dest_dir`` are overwritten.

    Args:
        source_dir: Existing, non-empty directory to stage.
        dest_dir: Staging directory, created if missing.

    Returns:
        StatusResult with ``dest_dir`` as data on success.
    """
    from psxframework.logging import get_global_logger

    logger = get_global_logger()
    source_dir = Path(source_dir).resolve()
    dest_dir = Path(dest_dir).resolve()

    if not source_dir.exists():
        return StatusResult.failure(f"Source directory not found: {source_dir}")
    if not source_dir.is_dir():
        return StatusResult.failure(f"Source path is not a directory: {source_dir}")
    if not any(source_dir.iterdir()):
        return StatusResult.failure(f"Source directory is empty: {source_dir}")
    if dest_dir == source_dir or dest_dir.is_relative_to(source_dir):
        raise ConfigError(
            f"Destination {dest_dir} must not be inside source {source_dir}"
        )
    if dest_dir.exists() and not dest_dir.is_dir():
        return StatusResult.failure(
            f"Destination path exists but is not a directory: {dest_dir}"
        )

    dest_dir.mkdir(parents=True, exist_ok=True)

    item_count = _count_items(source_dir)
    logger.verbose("BUNDLE", f"Copying {item_count} item(s): {source_dir} -> {dest_dir}")
    shutil.copytree(source_dir, dest_dir, dirs_exist_ok=True)

    if not any(dest_dir.iterdir()):
        raise PackagingError(f"Copy finished but destination is empty: {dest_dir}")

    copied = _count_present(source_dir, dest_dir)
    if copied != item_count:
        raise PackagingError(
            f"Only {copied} of {item_count} item(s) arrived in {dest_dir}"
        )

    logger.verbose("BUNDLE", f"[OK] Staged {copied} item(s) into {dest_dir}")
    return StatusResult.success(f"Copied {copied} item(s) to {dest_dir}", dest_dir)


@status_guard("ARCHIVE")
def create_data_bundle(
    input_dir: Path,
    output_name: str,
    archiver_path: Path | None = None,
    output_dir: Path | None = None,
    compression_level: int = DEFAULT_COMPRESSION_LEVEL,
    store: InstallationStore | None = None,
    runner: ProcessRunner | None = None,
) -> StatusResult:
    """Compress the contents of ``input_dir`` into ``{output_name}.7z``.

    Args:
        input_dir: Staged directory whose contents become archive members.
        output_name: Archive base name (without .7z).
        archiver_path: 7-Zip executable. Default:
            {installRoot}/include/7z/7za.exe.
        output_dir: Directory for the archive. Default: the scratch
            workspace (which must exist).
        compression_level: 7-Zip -mx level, 0 to 9. Default is 5.
        store: Installation store used to resolve the root.
        runner: Process runner. Default: SubprocessRunner.

    Returns:
        StatusResult with the archive Path as data on success.

    Note:
        Any existing archive with the same name is deleted first. The
        archiver's stderr (or its exit code) is surfaced on failure.
    """
    from psxframework.logging import get_global_logger

    logger = get_global_logger()

    # Reject bad levels before anything touches disk or spawns a process
    _validate_compression_level(compression_level)

    if not output_name or not output_name.strip():
        return StatusResult.failure("Output name must not be empty")

    input_dir = Path(input_dir).resolve()
    if not input_dir.is_dir():
        return StatusResult.failure(f"Input directory not found: {input_dir}")

    install_root: Path | None = None
    if archiver_path is None:
        install_root = resolve_installation_root(store)
    archiver = _resolve_archiver(archiver_path, install_root)
    logger.verbose("ARCHIVE", f"Using archiver: {archiver}")

    if output_dir is None:
        _, output_dir = require_workspace(store)
    else:
        output_dir = Path(output_dir).resolve()
        output_dir.mkdir(parents=True, exist_ok=True)

    archive_path = output_dir / f"{output_name}{ARCHIVE_SUFFIX}"
    if archive_path.exists():
        logger.verbose("ARCHIVE", f"Removing existing archive: {archive_path}")
        archive_path.unlink()

    # 7za a -t7z -mx<level> <archive> <input>/*
    args = [
        "a",
        "-t7z",
        f"-mx{compression_level}",
        str(archive_path),
        os.path.join(str(input_dir), "*"),
    ]

    if runner is None:
        runner = get_default_runner()
    result = runner.run(str(archiver), args)

    if result.exit_code != 0:
        raise ToolError(describe_failure(archiver.name, result))

    if not archive_path.is_file():
        raise PackagingError(
            f"{archiver.name} exited with code 0 but no archive was found: "
            f"{archive_path}"
        )

    size = archive_path.stat().st_size
    logger.verbose("ARCHIVE", f"[OK] Created archive: {archive_path} ({format_size(size)})")
    return StatusResult.success(
        f"Created archive {archive_path.name} ({format_size(size)})", archive_path
    )
