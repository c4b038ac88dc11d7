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

"""SFX stub module and config template staging for PSxFramework.

A 7-Zip self-extracting release starts with a prebuilt stub module followed
by a text config block. Both come from ``{installRoot}/include/sfx`` and are
selected through one of four fixed variants:

    GUI-Mode   -> 7z.sfx     + config_gui.txt
    CMD-Mode   -> 7zCon.sfx  + config_cmd.txt
    Installer  -> 7zS2.sfx   + config_installer.txt
    Custom     -> 7zSD.sfx   + config_custom.txt

The stub keeps its own file name in the workspace; the template is always
staged as ``config.txt``. Templates are copied verbatim, placeholders are
not substituted.

Example:
    ```python
    from psxframework.build.sfx import SfxVariant, prepare_cfg, prepare_sfx

    prepare_sfx(SfxVariant.GUI_MODE)
    prepare_cfg("gui-mode")  # variant names match case-insensitively
    ```
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
import shutil

from psxframework.exceptions import ConfigError, PackagingError
from psxframework.install.locator import InstallationStore
from psxframework.results import StatusResult, status_guard
from psxframework.workspace import require_workspace

SFX_SOURCE_SUBDIR = Path("include") / "sfx"
CONFIG_FILENAME = "config.txt"


class SfxVariant(Enum):
    """SFX flavours with their (variant name, stub, config template)."""

    GUI_MODE = ("GUI-Mode", "7z.sfx", "config_gui.txt")
    CMD_MODE = ("CMD-Mode", "7zCon.sfx", "config_cmd.txt")
    INSTALLER = ("Installer", "7zS2.sfx", "config_installer.txt")
    CUSTOM = ("Custom", "7zSD.sfx", "config_custom.txt")

    def __init__(self, label: str, stub_name: str, template_name: str) -> None:
        self.label = label
        self.stub_name = stub_name
        self.template_name = template_name

    def __str__(self) -> str:
        return self.label

    @classmethod
    def parse(cls, value: SfxVariant | str) -> SfxVariant:
        """Return the variant for ``value`` (case-insensitive name match).

        Raises:
            ConfigError: If ``value`` names no known variant.
        """
        if isinstance(value, cls):
            return value
        wanted = str(value).strip().lower()
        for variant in cls:
            if variant.label.lower() == wanted:
                return variant
        names = ", ".join(v.label for v in cls)
        raise ConfigError(f"Unknown SFX variant {value!r}. Expected one of: {names}")


def _stage_file(source: Path, target: Path) -> Path:
    if not source.is_file():
        raise PackagingError(f"SFX source file not found: {source}")
    if target.exists():
        target.unlink()
    shutil.copyfile(source, target)
    if not target.is_file():
        raise PackagingError(f"Copy finished but file is missing: {target}")
    return target


@status_guard("SFX")
def prepare_sfx(
    variant: SfxVariant | str, store: InstallationStore | None = None
) -> StatusResult:
    """Copy the variant's stub module into the workspace.

    Args:
        variant: SfxVariant or its name (e.g. "GUI-Mode").
        store: Installation store used to resolve the root.

    Returns:
        StatusResult with the staged stub Path as data on success.

    Note:
        The workspace must already exist; it is not created here.
    """
    from psxframework.logging import get_global_logger

    logger = get_global_logger()
    sfx = SfxVariant.parse(variant)
    install_root, workspace = require_workspace(store)

    source = install_root / SFX_SOURCE_SUBDIR / sfx.stub_name
    target = _stage_file(source, workspace / sfx.stub_name)

    logger.verbose("SFX", f"[OK] Staged {sfx.label} module: {target.name}")
    return StatusResult.success(f"Staged SFX module {target.name} ({sfx.label})", target)


@status_guard("SFX")
def prepare_cfg(
    variant: SfxVariant | str, store: InstallationStore | None = None
) -> StatusResult:
    """Copy the variant's config template into the workspace as config.txt.

    Args:
        variant: SfxVariant or its name (e.g. "Installer").
        store: Installation store used to resolve the root.

    Returns:
        StatusResult with the staged config.txt Path as data on success.
    """
    from psxframework.logging import get_global_logger

    logger = get_global_logger()
    sfx = SfxVariant.parse(variant)
    install_root, workspace = require_workspace(store)

    source = install_root / SFX_SOURCE_SUBDIR / sfx.template_name
    # TODO: substitute release placeholders (title, version) once a template
    # syntax is agreed on; templates are staged verbatim for now
    target = _stage_file(source, workspace / CONFIG_FILENAME)

    logger.verbose("SFX", f"[OK] Staged {sfx.label} config: {source.name} -> {target.name}")
    return StatusResult.success(
        f"Staged config {source.name} as {CONFIG_FILENAME} ({sfx.label})", target
    )
