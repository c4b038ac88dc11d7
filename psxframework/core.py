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

"""Core orchestration for PSxFramework.

This module runs the complete release pipeline in its fixed order:

    1. create_hidden_temp_data     workspace ready and emptied
    2. prepare_data_bundle         source -> {workspace}/data
    3. create_data_bundle          {workspace}/data/* -> {workspace}/{name}.7z
    4. prepare_sfx                 stub module staged
    5. prepare_cfg                 config.txt staged
    6. create_release              {name}.exe (+ checksum report)
    7. clean_hidden_temp_data      workspace emptied (optional)

Design Principles:

- Every step is a public operation returning a StatusResult; the first
  failing step ends the run and its result is returned
- The workspace is only cleaned after a successful release; failed runs
  leave their artifacts behind for inspection or a retry
- Every run empties the workspace before staging anything
- Single build in flight per installation root

Example:
    Programmatic usage:
        ```python
        from pathlib import Path
        from psxframework.core import build_release

        result = build_release(
            Path("dist/App"), "App", "v1.0.0", "GUI-Mode", make_checksum=True
        )
        print(result.data)  # {installRoot}/release/App-v1.0.0/App.exe
        ```
"""

from __future__ import annotations

from pathlib import Path

from psxframework.build.bundle import (
    DEFAULT_COMPRESSION_LEVEL,
    create_data_bundle,
    prepare_data_bundle,
)
from psxframework.build.checksum import ChecksumAlgorithm
from psxframework.build.release import ConcatMethod, create_release
from psxframework.build.sfx import SfxVariant, prepare_cfg, prepare_sfx
from psxframework.install.locator import InstallationStore
from psxframework.io.process import ProcessRunner
from psxframework.logging import get_global_logger
from psxframework.results import StatusResult, status_guard
from psxframework.workspace import clean_hidden_temp_data, create_hidden_temp_data

DATA_DIRNAME = "data"
TOTAL_STEPS = 7


@status_guard("PIPELINE")
def build_release(
    source_dir: Path,
    release_name: str,
    release_version: str,
    variant: SfxVariant | str,
    *,
    method: ConcatMethod | str = ConcatMethod.AUTO,
    compression_level: int = DEFAULT_COMPRESSION_LEVEL,
    archiver_path: Path | None = None,
    output_path: Path | None = None,
    make_checksum: bool = False,
    checksum_algorithm: ChecksumAlgorithm | str = ChecksumAlgorithm.SHA256,
    keep_workspace: bool = False,
    store: InstallationStore | None = None,
    runner: ProcessRunner | None = None,
) -> StatusResult:
    """Build a self-extracting release from a source directory.

    Args:
        source_dir: Directory holding the application files.
        release_name: Release base name (archive and executable name).
        release_version: Release version for the output directory.
        variant: SFX variant name or SfxVariant.
        method: Concatenation method ("auto", "copy" or "stream").
        compression_level: 7-Zip level 0 to 9. Default is 5.
        archiver_path: 7-Zip executable. Default: bundled 7za.exe.
        output_path: Output directory. Default:
            {installRoot}/release/{name}-{version}.
        make_checksum: Write a checksum report next to the executable.
        checksum_algorithm: "SHA-256" (default) or "SHA-512".
        keep_workspace: Skip the final workspace cleanup.
        store: Installation store used to resolve the root.
        runner: Process runner for external tools.

    Returns:
        The create_release result on success, or the first failing step's
        result with the step name prepended to its message.
    """
    logger = get_global_logger()
    sfx = SfxVariant.parse(variant)

    def failed(step: str, result: StatusResult) -> StatusResult:
        logger.verbose("PIPELINE", f"[X] {step} failed: {result.message}")
        return StatusResult.failure(f"{step} failed: {result.message}")

    logger.step(1, TOTAL_STEPS, "Creating workspace...")
    result = create_hidden_temp_data(store)
    if not result.ok:
        return failed("Workspace creation", result)
    workspace: Path = result.data

    # A kept or failed earlier run leaves stubs and data that would be picked up
    result = clean_hidden_temp_data(store)
    if not result.ok:
        return failed("Workspace preparation", result)

    logger.step(2, TOTAL_STEPS, "Staging data bundle...")
    data_dir = workspace / DATA_DIRNAME
    result = prepare_data_bundle(source_dir, data_dir)
    if not result.ok:
        return failed("Data staging", result)

    logger.step(3, TOTAL_STEPS, "Creating archive...")
    result = create_data_bundle(
        data_dir,
        release_name,
        archiver_path=archiver_path,
        compression_level=compression_level,
        store=store,
        runner=runner,
    )
    if not result.ok:
        return failed("Archive creation", result)

    logger.step(4, TOTAL_STEPS, f"Staging {sfx.label} SFX module...")
    result = prepare_sfx(sfx, store)
    if not result.ok:
        return failed("SFX staging", result)

    logger.step(5, TOTAL_STEPS, f"Staging {sfx.label} config...")
    result = prepare_cfg(sfx, store)
    if not result.ok:
        return failed("Config staging", result)

    logger.step(6, TOTAL_STEPS, "Assembling release...")
    release = create_release(
        release_name,
        release_version,
        method=method,
        output_path=output_path,
        make_checksum=make_checksum,
        checksum_algorithm=checksum_algorithm,
        store=store,
        runner=runner,
    )
    if not release.ok:
        return failed("Release assembly", release)

    if keep_workspace:
        logger.step(7, TOTAL_STEPS, "Keeping workspace")
        return release

    logger.step(7, TOTAL_STEPS, "Cleaning workspace...")
    cleanup = clean_hidden_temp_data(store)
    if not cleanup.ok:
        # The executable exists; report the leftover workspace instead of failing
        return StatusResult.success(
            f"{release.message}, workspace cleanup failed: {cleanup.message}",
            release.data,
        )
    return release
