"""
PSxFramework - 7-Zip self-extracting release builder

A Python library and CLI that assembles Windows self-extracting release
executables from an application directory, a 7-Zip SFX stub module and an
SFX config template.

PSxFramework provides:
  - Installation root lookup (registry or YAML settings file)
  - A hidden scratch workspace with create/clean/remove lifecycle
  - Data staging and 7z archive creation via the external 7-Zip archiver
  - SFX stub module and config staging for four fixed variants
  - Release assembly (stub ++ config ++ archive) with copy/stream strategies
  - SHA-256/SHA-512 checksum reports

Quick Start
-----------
Register the installation root:

    $ psx register C:/PSxFramework

Build a release in one go:

    $ psx build dist/App App v1.0.0 --variant GUI-Mode --checksum

For full CLI documentation:

    $ psx --help

Package Structure
-----------------
cli : module
    Command-line interface with argparse.
core : module
    Full pipeline orchestration.
workspace : module
    Hidden scratch workspace lifecycle.
build : package
    Individual release build steps.
install : package
    Installation root lookup.
io : package
    Process runner, binary verification and file attributes.
config : package
    YAML settings loading.

Public API
----------
Every operation returns a StatusResult; check ``result.ok``:

    from psxframework import build_release, create_release
    from psxframework.workspace import create_hidden_temp_data

Project Information
-------------------
License: Apache-2.0
"""

__version__ = "0.1.0"
__license__ = "Apache-2.0"
__description__ = "PSxFramework - 7-Zip self-extracting release builder"

# Re-export commonly used functions for convenience
from psxframework.build import (
    create_checksum,
    create_data_bundle,
    create_release,
    prepare_cfg,
    prepare_data_bundle,
    prepare_sfx,
)
from psxframework.core import build_release
from psxframework.exceptions import (
    ConfigError,
    PackagingError,
    PSXError,
    ToolError,
    WorkspaceError,
)
from psxframework.install import get_installation_root, register_installation
from psxframework.results import StatusCode, StatusResult
from psxframework.workspace import (
    clean_hidden_temp_data,
    create_hidden_temp_data,
    remove_hidden_temp_data,
)

__all__ = [
    "__version__",
    "__license__",
    "__description__",
    "StatusCode",
    "StatusResult",
    "build_release",
    "clean_hidden_temp_data",
    "create_checksum",
    "create_data_bundle",
    "create_hidden_temp_data",
    "create_release",
    "get_installation_root",
    "prepare_cfg",
    "prepare_data_bundle",
    "prepare_sfx",
    "register_installation",
    "remove_hidden_temp_data",
    "ConfigError",
    "PackagingError",
    "PSXError",
    "ToolError",
    "WorkspaceError",
]
