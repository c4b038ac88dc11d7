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

"""Installation root lookup for PSxFramework.

The toolset installation directory (holding include/sfx, include/7z, the
tmpdata workspace and the release tree) is persisted as a single string value
named ``InstallPath`` in a key-value store:

- RegistryStore: HKEY_CURRENT_USER\\Software\\PSxFramework (Windows)
- SettingsFileStore: the ``installation`` mapping of the YAML settings file
- MappingStore: an in-memory mapping (tests, callers caching the root)

Design Principles:
    - The root is re-resolved on every call; nothing is cached process-wide,
      so relocating the installation mid-session is picked up immediately
    - A stored path that no longer exists on disk is a failure, not a hint
    - Callers that want caching pass a MappingStore holding the root

Example:
    Basic usage:
        ```python
        from psxframework.install import get_installation_root

        result = get_installation_root()
        if result.ok:
            print(result.data)  # Path("C:/PSxFramework")
        ```
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
import sys
from typing import Protocol

from psxframework.config import load_settings, save_settings
from psxframework.exceptions import ConfigError
from psxframework.results import StatusResult, status_guard

INSTALL_KEY_NAME = "InstallPath"
REGISTRY_SUBKEY = r"Software\PSxFramework"


class InstallationStore(Protocol):
    """Protocol for the persisted key-value lookup holding the root."""

    def get(self, name: str) -> str | None:
        """Return the stored value, or None when the key is absent."""
        ...

    def set(self, name: str, value: str) -> None:
        """Persist a value under ``name``."""
        ...


class RegistryStore:
    """Values under a HKEY_CURRENT_USER registry key (Windows only)."""

    def __init__(self, subkey: str = REGISTRY_SUBKEY) -> None:
        self.subkey = subkey

    def get(self, name: str) -> str | None:
        import winreg

        try:
            with winreg.OpenKey(winreg.HKEY_CURRENT_USER, self.subkey) as key:
                value, _value_type = winreg.QueryValueEx(key, name)
        except FileNotFoundError:
            return None
        return None if value is None else str(value)

    def set(self, name: str, value: str) -> None:
        import winreg

        with winreg.CreateKeyEx(
            winreg.HKEY_CURRENT_USER, self.subkey, 0, winreg.KEY_SET_VALUE
        ) as key:
            winreg.SetValueEx(key, name, 0, winreg.REG_SZ, value)


class SettingsFileStore:
    """Values under the ``installation`` mapping of the YAML settings file."""

    def __init__(self, path: Path | None = None) -> None:
        self.path = path

    def get(self, name: str) -> str | None:
        section = load_settings(self.path).get("installation") or {}
        if not isinstance(section, dict):
            raise ConfigError("Settings key 'installation' must be a mapping")
        value = section.get(name)
        return None if value is None else str(value)

    def set(self, name: str, value: str) -> None:
        settings = load_settings(self.path)
        section = settings.get("installation")
        if not isinstance(section, dict):
            section = {}
            settings["installation"] = section
        section[name] = value
        save_settings(settings, self.path)


class MappingStore:
    """In-memory store, mainly for tests and explicit caching."""

    def __init__(self, values: Mapping[str, str] | None = None) -> None:
        self.values: dict[str, str] = dict(values or {})

    def get(self, name: str) -> str | None:
        return self.values.get(name)

    def set(self, name: str, value: str) -> None:
        self.values[name] = value


def default_store() -> InstallationStore:
    """Return the platform's store: registry on Windows, settings elsewhere."""
    if sys.platform.startswith("win"):
        return RegistryStore()
    return SettingsFileStore()


def resolve_installation_root(store: InstallationStore | None = None) -> Path:
    """Resolve the installation root, raising on any lookup problem.

    Args:
        store: Key-value store to read from. Default: default_store().

    Returns:
        Absolute path of the installation root.

    Raises:
        ConfigError: If the key is absent, empty, or names a path that does
            not exist as a directory (stale registration).
    """
    from psxframework.logging import get_global_logger

    logger = get_global_logger()
    if store is None:
        store = default_store()

    raw = store.get(INSTALL_KEY_NAME)
    if raw is None:
        raise ConfigError(
            f"Installation path not registered ({INSTALL_KEY_NAME} is missing). "
            f"Run 'psx register <path>' first."
        )
    if not raw.strip():
        raise ConfigError(f"Installation path value {INSTALL_KEY_NAME} is empty")

    root = Path(raw.strip()).expanduser()
    if not root.is_dir():
        raise ConfigError(f"Installation path does not exist: {root}")

    root = root.resolve()
    logger.debug("INSTALL", f"Installation root: {root}")
    return root


@status_guard("INSTALL")
def get_installation_root(store: InstallationStore | None = None) -> StatusResult:
    """Look up the installation root directory.

    Args:
        store: Key-value store to read from. Default: default_store().

    Returns:
        StatusResult with the root Path as data on success.
    """
    root = resolve_installation_root(store)
    return StatusResult.success(f"Installation root: {root}", root)


@status_guard("INSTALL")
def register_installation(
    path: Path, store: InstallationStore | None = None
) -> StatusResult:
    """Persist ``path`` as the installation root.

    Args:
        path: Existing directory to register.
        store: Key-value store to write to. Default: default_store().

    Returns:
        StatusResult with the registered (resolved) Path as data on success.
    """
    from psxframework.logging import get_global_logger

    logger = get_global_logger()
    if store is None:
        store = default_store()

    root = Path(path).expanduser()
    if not root.is_dir():
        return StatusResult.failure(f"Installation path is not a directory: {root}")

    root = root.resolve()
    store.set(INSTALL_KEY_NAME, str(root))
    logger.verbose("INSTALL", f"[OK] Registered installation root: {root}")
    return StatusResult.success(f"Registered installation root: {root}", root)
