"""
Installation root lookup for PSxFramework.

Public API:

get_installation_root : function
    Resolve the registered installation root (StatusResult).
register_installation : function
    Persist a new installation root.
RegistryStore, SettingsFileStore, MappingStore : classes
    Key-value stores the root can be read from.
"""

from .locator import (
    INSTALL_KEY_NAME,
    InstallationStore,
    MappingStore,
    RegistryStore,
    SettingsFileStore,
    default_store,
    get_installation_root,
    register_installation,
    resolve_installation_root,
)

__all__ = [
    "INSTALL_KEY_NAME",
    "InstallationStore",
    "MappingStore",
    "RegistryStore",
    "SettingsFileStore",
    "default_store",
    "get_installation_root",
    "register_installation",
    "resolve_installation_root",
]
