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

"""Settings loading for PSxFramework.

Public API:

- load_settings: Load YAML settings merged over built-in defaults
- save_settings: Persist settings to YAML
- default_settings_path: Resolve the settings file location

Example:
    Basic usage:

        from psxframework.config import load_settings

        settings = load_settings()
        print(settings["checksum"]["algorithm"])  # "SHA-256"

"""

from .loader import (
    DEFAULT_SETTINGS,
    SETTINGS_ENV_VAR,
    default_settings_path,
    load_settings,
    save_settings,
)

__all__ = [
    "DEFAULT_SETTINGS",
    "SETTINGS_ENV_VAR",
    "default_settings_path",
    "load_settings",
    "save_settings",
]
