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

"""Hidden scratch workspace management for PSxFramework.

All build inputs are staged in a single directory, ``{installRoot}/tmpdata``,
marked hidden+system so it stays out of normal directory listings.

Lifecycle:
    - create_hidden_temp_data: create (or re-verify) the workspace
    - clean_hidden_temp_data: delete its contents, keep the directory
    - remove_hidden_temp_data: delete the directory itself

Design Principles:
    - Single build in flight per installation root: the workspace is shared
      by every caller and there is no locking, so overlapping builds against
      the same root race on its contents
    - The workspace belongs to the installation root, not to a caller;
      cleanup is always the caller's explicit decision, failed builds leave
      their artifacts behind for inspection
    - clean stops at the first entry it cannot delete

Example:
    ```python
    from psxframework.workspace import (
        clean_hidden_temp_data,
        create_hidden_temp_data,
    )

    result = create_hidden_temp_data()
    print(result.data)  # C:/PSxFramework/tmpdata
    ...
    clean_hidden_temp_data()
    ```
"""

from __future__ import annotations

import os
from pathlib import Path
import shutil

from psxframework.exceptions import WorkspaceError
from psxframework.install.locator import InstallationStore, resolve_installation_root
from psxframework.io.attributes import (
    clear_readonly_tree,
    force_remove_handler,
    make_writable,
    set_hidden_system,
)
from psxframework.results import StatusResult, status_guard

WORKSPACE_DIRNAME = "tmpdata"


def get_workspace_path(install_root: Path) -> Path:
    """Return the scratch workspace location for an installation root."""
    return install_root / WORKSPACE_DIRNAME


def require_workspace(store: InstallationStore | None = None) -> tuple[Path, Path]:
    """Resolve the installation root and require an existing workspace.

    Returns:
        Tuple of (installation root, workspace path).

    Raises:
        ConfigError: If the installation root cannot be resolved.
        WorkspaceError: If the workspace does not exist.
    """
    install_root = resolve_installation_root(store)
    workspace = get_workspace_path(install_root)
    if not workspace.is_dir():
        raise WorkspaceError(
            f"Workspace not found: {workspace}. Create it first with "
            f"create_hidden_temp_data()."
        )
    return install_root, workspace


def _mark_hidden(workspace: Path) -> None:
    from psxframework.logging import get_global_logger

    logger = get_global_logger()
    if set_hidden_system(workspace):
        logger.debug("WORKSPACE", f"Set hidden+system attributes: {workspace}")
    else:
        logger.debug(
            "WORKSPACE", "Hidden+system attributes not supported on this host"
        )


def _remove_entry(entry: os.DirEntry) -> None:
    path = Path(entry.path)
    if entry.is_dir(follow_symlinks=False):
        shutil.rmtree(path, onexc=force_remove_handler)
        return
    try:
        path.unlink()
    except PermissionError:
        make_writable(path)
        path.unlink()


@status_guard("WORKSPACE")
def create_hidden_temp_data(store: InstallationStore | None = None) -> StatusResult:
    """Create the hidden scratch workspace, or re-verify an existing one.

    Idempotent: an existing workspace keeps its contents and only has its
    hidden+system attributes re-asserted.

    Args:
        store: Installation store used to resolve the root.

    Returns:
        StatusResult with the workspace Path as data on success.
    """
    from psxframework.logging import get_global_logger

    logger = get_global_logger()
    install_root = resolve_installation_root(store)
    workspace = get_workspace_path(install_root)

    if workspace.exists():
        if not workspace.is_dir():
            return StatusResult.failure(
                f"Workspace path exists but is not a directory: {workspace}"
            )
        _mark_hidden(workspace)
        logger.verbose("WORKSPACE", f"Workspace already exists: {workspace}")
        return StatusResult.success(f"Workspace already exists: {workspace}", workspace)

    workspace.mkdir()
    try:
        _mark_hidden(workspace)
    except OSError as err:
        # Never leave a visible workspace behind
        workspace.rmdir()
        raise WorkspaceError(
            f"Failed to set workspace attributes on {workspace}: {err}"
        ) from err

    if not workspace.is_dir():
        return StatusResult.failure(f"Workspace was not created: {workspace}")

    logger.verbose("WORKSPACE", f"[OK] Created workspace: {workspace}")
    return StatusResult.success(f"Created workspace: {workspace}", workspace)


@status_guard("WORKSPACE")
def clean_hidden_temp_data(store: InstallationStore | None = None) -> StatusResult:
    """Delete everything inside the workspace, keeping the directory.

    Hidden and system entries are included. The first entry that cannot be
    deleted aborts the operation; remaining siblings are left untouched.

    Args:
        store: Installation store used to resolve the root.

    Returns:
        StatusResult with the workspace Path as data on success.
    """
    from psxframework.logging import get_global_logger

    logger = get_global_logger()
    install_root = resolve_installation_root(store)
    workspace = get_workspace_path(install_root)

    if not workspace.exists():
        logger.verbose("WORKSPACE", "Workspace does not exist, nothing to clean")
        return StatusResult.success(
            f"Workspace does not exist, nothing to clean: {workspace}", workspace
        )

    with os.scandir(workspace) as it:
        entries = list(it)

    for entry in entries:
        try:
            _remove_entry(entry)
        except OSError as err:
            raise WorkspaceError(f"Failed to remove {entry.path}: {err}") from err
        logger.debug("WORKSPACE", f"Removed: {entry.name}")

    remaining = list(workspace.iterdir())
    if remaining:
        return StatusResult.failure(
            f"Cleanup incomplete: {len(remaining)} item(s) remain in {workspace}"
        )

    logger.verbose("WORKSPACE", f"[OK] Cleaned {len(entries)} item(s) from workspace")
    return StatusResult.success(
        f"Cleaned {len(entries)} item(s) from workspace: {workspace}", workspace
    )


@status_guard("WORKSPACE")
def remove_hidden_temp_data(store: InstallationStore | None = None) -> StatusResult:
    """Delete the workspace directory and everything in it.

    Args:
        store: Installation store used to resolve the root.

    Returns:
        StatusResult without data.
    """
    from psxframework.logging import get_global_logger

    logger = get_global_logger()
    install_root = resolve_installation_root(store)
    workspace = get_workspace_path(install_root)

    if not workspace.exists():
        logger.verbose("WORKSPACE", "Workspace does not exist, nothing to remove")
        return StatusResult.success(
            f"Workspace does not exist, nothing to remove: {workspace}"
        )

    try:
        clear_readonly_tree(workspace)
    except OSError as err:
        logger.verbose("WORKSPACE", f"Could not clear read-only flags: {err}")

    try:
        shutil.rmtree(workspace, onexc=force_remove_handler)
    except OSError as err:
        raise WorkspaceError(f"Failed to remove workspace {workspace}: {err}") from err

    if workspace.exists():
        return StatusResult.failure(f"Workspace still exists after removal: {workspace}")

    logger.verbose("WORKSPACE", f"[OK] Removed workspace: {workspace}")
    return StatusResult.success(f"Removed workspace: {workspace}")
