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

"""Settings loading and merging for PSxFramework.

Settings are read from a single YAML file and layered over built-in
defaults, so a settings file only needs to contain the values it changes.

Settings Location:
    1. Explicit ``path`` argument
    2. ``PSX_SETTINGS`` environment variable
    3. ``~/.psxframework/settings.yaml``

Merging:
    Sections present in both the defaults and the file are merged key by
    key. Any other value from the file, lists included, replaces the
    default outright.

Errors:
    A file that cannot be read or parsed, or whose top level is not a
    mapping, raises ConfigError with the underlying error chained. A
    missing file is not an error: the defaults are returned.

Example:
    Basic usage:
        ```python
        from psxframework.config import load_settings

        settings = load_settings()
        print(settings["build"]["compression_level"])  # Output: 5
        ```
"""

from __future__ import annotations

import copy
import os
from pathlib import Path
from typing import Any

import yaml

from psxframework.exceptions import ConfigError

SETTINGS_ENV_VAR = "PSX_SETTINGS"

DEFAULT_SETTINGS: dict[str, Any] = {
    # InstallPath is only present once an installation is registered
    "installation": {},
    "build": {
        "compression_level": 5,
        "method": "auto",
    },
    "checksum": {
        "enabled": False,
        "algorithm": "SHA-256",
    },
}


def default_settings_path() -> Path:
    """Return the settings file location honouring PSX_SETTINGS."""
    override = os.environ.get(SETTINGS_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".psxframework" / "settings.yaml"


# -------------------------------
# YAML helpers
# -------------------------------


def _load_yaml_file(p: Path) -> Any:
    """Load a YAML file and return the parsed Python object.

    Raises:
        ConfigError: If the file cannot be read or is not valid YAML.
    """
    try:
        with p.open("r", encoding="utf-8") as f:
            return yaml.safe_load(f)
    except yaml.YAMLError as err:
        raise ConfigError(f"Error parsing YAML: {p}: {err}") from err
    except OSError as err:
        raise ConfigError(f"Cannot read settings file {p}: {err}") from err


def _deep_merge_dicts(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    """Deep-merge two dicts with "overlay wins".

    Neither input is modified.
    """
    result: dict[str, Any] = dict(base)
    for k, v in overlay.items():
        if k in result and isinstance(result[k], dict) and isinstance(v, dict):
            result[k] = _deep_merge_dicts(result[k], v)
        else:
            result[k] = v
    return result


# -------------------------------
# Public API
# -------------------------------


def load_settings(path: Path | None = None) -> dict[str, Any]:
    """Load the effective settings.

    Args:
        path: Settings file to read. Default: PSX_SETTINGS or
            ~/.psxframework/settings.yaml.

    Returns:
        Built-in defaults deep-merged with the file contents. A missing or
        empty file yields a copy of the defaults.

    Raises:
        ConfigError: On YAML parse errors, unreadable files, or a top level
            that is not a mapping.
    """
    from psxframework.logging import get_global_logger

    logger = get_global_logger()
    settings_path = path if path is not None else default_settings_path()
    defaults = copy.deepcopy(DEFAULT_SETTINGS)

    if not settings_path.exists():
        logger.debug("CONFIG", f"No settings file at {settings_path}, using defaults")
        return defaults

    logger.verbose("CONFIG", f"Loading settings: {settings_path}")
    data = _load_yaml_file(settings_path)

    if data is None:
        return defaults
    if not isinstance(data, dict):
        raise ConfigError(
            f"Top-level YAML must be a mapping (dict): {settings_path}"
        )

    return _deep_merge_dicts(defaults, data)


def save_settings(settings: dict[str, Any], path: Path | None = None) -> Path:
    """Write settings to YAML, creating parent directories as needed.

    Args:
        settings: Settings mapping to persist.
        path: Destination file. Default: same resolution as load_settings().

    Returns:
        Path the settings were written to.

    Raises:
        ConfigError: If the file cannot be written.
    """
    settings_path = path if path is not None else default_settings_path()
    try:
        settings_path.parent.mkdir(parents=True, exist_ok=True)
        with settings_path.open("w", encoding="utf-8") as f:
            yaml.safe_dump(settings, f, default_flow_style=False, sort_keys=False)
    except OSError as err:
        raise ConfigError(f"Cannot write settings file {settings_path}: {err}") from err
    return settings_path
