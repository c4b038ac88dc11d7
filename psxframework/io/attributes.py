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

"""File attribute helpers for the scratch workspace.

On Windows, hidden and system attributes are set through
SetFileAttributesW. Other hosts have no such attributes, so marking a
directory hidden is a no-op there and reported as such.
"""

from __future__ import annotations

import os
from pathlib import Path
import stat
import sys

FILE_ATTRIBUTE_READONLY = 0x01
FILE_ATTRIBUTE_HIDDEN = 0x02
FILE_ATTRIBUTE_SYSTEM = 0x04
INVALID_FILE_ATTRIBUTES = 0xFFFFFFFF


def set_hidden_system(path: Path) -> bool:
    """Mark ``path`` hidden+system, preserving its other attributes.

    Returns:
        True if the attributes were applied, False on hosts without them.

    Raises:
        OSError: If the Windows API call fails.
    """
    if not sys.platform.startswith("win"):
        return False

    import ctypes

    kernel32 = ctypes.windll.kernel32
    current = kernel32.GetFileAttributesW(str(path))
    if current == INVALID_FILE_ATTRIBUTES:
        raise ctypes.WinError()
    wanted = current | FILE_ATTRIBUTE_HIDDEN | FILE_ATTRIBUTE_SYSTEM
    if not kernel32.SetFileAttributesW(str(path), wanted):
        raise ctypes.WinError()
    return True


def has_hidden_system(path: Path) -> bool:
    """Return True if ``path`` carries both hidden and system attributes."""
    if not sys.platform.startswith("win"):
        return False
    attrs = os.stat(path).st_file_attributes
    wanted = FILE_ATTRIBUTE_HIDDEN | FILE_ATTRIBUTE_SYSTEM
    return attrs & wanted == wanted


def make_writable(path: Path) -> None:
    """Clear the read-only flag of a single entry."""
    mode = os.stat(path, follow_symlinks=False).st_mode
    if not stat.S_ISLNK(mode):
        os.chmod(path, mode | stat.S_IWRITE)


def clear_readonly_tree(root: Path) -> None:
    """Clear read-only flags on ``root`` and everything below it.

    Raises:
        OSError: If an entry cannot be updated.
    """
    make_writable(root)
    for dirpath, dirnames, filenames in os.walk(root):
        for name in dirnames + filenames:
            make_writable(Path(dirpath) / name)


def force_remove_handler(func, path, exc) -> None:
    """shutil.rmtree onexc handler retrying after clearing read-only flags."""
    entry = Path(path)
    # POSIX needs a writable parent directory, Windows a writable entry
    make_writable(entry.parent)
    make_writable(entry)
    func(path)
