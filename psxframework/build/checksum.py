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

"""Checksum reports for release artifacts.

A report is a three-line text file written next to the artifact (or into an
explicit directory) named ``{stem}.checksum.txt``:

    C:\\PSxFramework\\release\\App-v1.0.0\\App.exe
    SHA256 CHECKSUM: 9F86D081884C7D659A2FEAA0C55AD015A3BF4F1B2B0B822CD15D6C15B0F00A08
    Monday 19.10.2026 14:03:27

Example:
    ```python
    from pathlib import Path
    from psxframework.build import create_checksum

    result = create_checksum(Path("release/App-v1.0.0/App.exe"), "SHA-512")
    print(result.data)  # release/App-v1.0.0/App.checksum.txt
    ```
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
import hashlib
from pathlib import Path

from psxframework.exceptions import ConfigError
from psxframework.results import StatusResult, status_guard

# Stream size per chunk (1 MiB)
DEFAULT_CHUNK = 1024 * 1024
REPORT_SUFFIX = ".checksum.txt"


class ChecksumAlgorithm(Enum):
    """Supported digest algorithms with their hashlib names."""

    SHA256 = "SHA-256"
    SHA512 = "SHA-512"

    @property
    def hashlib_name(self) -> str:
        return self.value.replace("-", "").lower()

    @property
    def label(self) -> str:
        """Report label, e.g. "SHA256"."""
        return self.value.replace("-", "")

    @classmethod
    def parse(cls, value: ChecksumAlgorithm | str) -> ChecksumAlgorithm:
        """Accept "SHA-256", "SHA256" or "sha256" (and the 512 forms).

        Raises:
            ConfigError: For unsupported algorithms.
        """
        if isinstance(value, cls):
            return value
        wanted = str(value).strip().upper().replace("-", "")
        for algorithm in cls:
            if algorithm.label == wanted:
                return algorithm
        raise ConfigError(
            f"Unsupported checksum algorithm {value!r}. Supported: SHA-256, SHA-512"
        )


def file_digest(path: Path, algorithm: ChecksumAlgorithm | str = "SHA-256") -> str:
    """Return the uppercase hex digest of a file, streamed in chunks."""
    h = hashlib.new(ChecksumAlgorithm.parse(algorithm).hashlib_name)
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(DEFAULT_CHUNK), b""):
            h.update(chunk)
    return h.hexdigest().upper()


def format_timestamp(moment: datetime) -> str:
    """Format as "{Weekday} {DD.MM.YYYY} {HH:MM:SS}"."""
    return moment.strftime("%A %d.%m.%Y %H:%M:%S")


def report_path_for(input_file: Path, output_dir: Path) -> Path:
    """Return ``{output_dir}/{stem}.checksum.txt``."""
    return output_dir / f"{input_file.stem}{REPORT_SUFFIX}"


@status_guard("CHECKSUM")
def create_checksum(
    input_file: Path,
    algorithm: ChecksumAlgorithm | str = "SHA-256",
    output_dir: Path | None = None,
) -> StatusResult:
    """Compute a file digest and write the checksum report.

    Args:
        input_file: Existing regular file to hash.
        algorithm: "SHA-256" (default) or "SHA-512".
        output_dir: Report directory. Default: the input file's directory.
            A directory that does not exist falls back to the default.

    Returns:
        StatusResult with the report Path as data on success.
    """
    from psxframework.logging import get_global_logger

    logger = get_global_logger()
    algo = ChecksumAlgorithm.parse(algorithm)
    input_file = Path(input_file).resolve()

    if not input_file.exists():
        return StatusResult.failure(f"Input file not found: {input_file}")
    if not input_file.is_file():
        return StatusResult.failure(f"Input path is not a file: {input_file}")

    if output_dir is None:
        output_dir = input_file.parent
    elif not Path(output_dir).is_dir():
        logger.verbose(
            "CHECKSUM",
            f"Output directory not found: {output_dir}, using {input_file.parent}",
        )
        output_dir = input_file.parent
    else:
        output_dir = Path(output_dir).resolve()

    digest = file_digest(input_file, algo)
    report = report_path_for(input_file, output_dir)
    lines = [
        str(input_file),
        f"{algo.label} CHECKSUM: {digest}",
        format_timestamp(datetime.now()),
    ]
    report.write_text("\n".join(lines) + "\n", encoding="utf-8")

    logger.verbose("CHECKSUM", f"[OK] {algo.value}: {digest}")
    return StatusResult.success(f"{algo.value} checksum written to {report}", report)
