"""
Tests for psxframework.workspace module.

Tests the hidden scratch workspace lifecycle including:
- Idempotent creation
- Cleaning contents (hidden, nested and read-only entries)
- Removing the workspace directory
- Failure propagation
"""

from __future__ import annotations

import os
import stat
import sys

import pytest

from psxframework.install import MappingStore
from psxframework.io.attributes import has_hidden_system
from psxframework.workspace import (
    WORKSPACE_DIRNAME,
    clean_hidden_temp_data,
    create_hidden_temp_data,
    get_workspace_path,
    remove_hidden_temp_data,
)

pytestmark = pytest.mark.unit


class TestCreateHiddenTempData:
    """Tests for creating the workspace."""

    def test_workspace_path(self, tmp_path):
        """Test the workspace location relative to a root."""
        assert get_workspace_path(tmp_path) == tmp_path / "tmpdata"
        assert not (tmp_path / "tmpdata").exists()

    def test_creates_workspace_under_root(self, install_root, store):
        """Test that tmpdata is created below the installation root."""
        result = create_hidden_temp_data(store)

        assert result.ok
        assert result.data == install_root.resolve() / WORKSPACE_DIRNAME
        assert result.data.is_dir()

    def test_create_is_idempotent(self, store):
        """Test that a second call succeeds and keeps existing contents."""
        first = create_hidden_temp_data(store)
        (first.data / "keep.txt").write_text("still here")

        second = create_hidden_temp_data(store)

        assert second.ok
        assert second.data == first.data
        assert (second.data / "keep.txt").read_text() == "still here"
        assert "already exists" in second.message

    def test_file_in_the_way_fails(self, install_root, store):
        """Test failure when tmpdata exists as a regular file."""
        (install_root / WORKSPACE_DIRNAME).write_text("not a dir")

        result = create_hidden_temp_data(store)

        assert not result.ok
        assert "not a directory" in result.message

    def test_unregistered_root_fails(self):
        """Test that creation fails without an installation root."""
        result = create_hidden_temp_data(MappingStore())

        assert not result.ok
        assert "not registered" in result.message

    def test_attributes_set_on_create_and_verify(self, store, monkeypatch):
        """Test that hidden+system is asserted by every call."""
        marked = []

        def fake_set_hidden_system(path):
            marked.append(path)
            return True

        monkeypatch.setattr(
            "psxframework.workspace.set_hidden_system", fake_set_hidden_system
        )

        first = create_hidden_temp_data(store)
        second = create_hidden_temp_data(store)

        assert first.ok and second.ok
        assert marked == [first.data, second.data]

    def test_attribute_failure_removes_fresh_workspace(
        self, install_root, store, monkeypatch
    ):
        """Test that a workspace whose attributes cannot be set is rolled back."""

        def failing_set_hidden_system(path):
            raise OSError("access denied")

        monkeypatch.setattr(
            "psxframework.workspace.set_hidden_system", failing_set_hidden_system
        )

        result = create_hidden_temp_data(store)

        assert not result.ok
        assert "access denied" in result.message
        assert not (install_root / WORKSPACE_DIRNAME).exists()

    @pytest.mark.skipif(not sys.platform.startswith("win"), reason="Windows attributes")
    def test_workspace_is_hidden_and_system(self, store):
        """Test that the workspace carries hidden+system attributes."""
        result = create_hidden_temp_data(store)

        assert has_hidden_system(result.data)


class TestCleanHiddenTempData:
    """Tests for clearing workspace contents."""

    def test_removes_files_and_directories(self, workspace, store):
        """Test that every entry is removed and the directory is kept."""
        (workspace / "App.7z").write_bytes(b"7z")
        (workspace / "data" / "bin").mkdir(parents=True)
        (workspace / "data" / "bin" / "tool.dll").write_bytes(b"\x00")

        result = clean_hidden_temp_data(store)

        assert result.ok
        assert workspace.is_dir()
        assert list(workspace.iterdir()) == []
        assert "Cleaned 2 item(s)" in result.message

    def test_removes_dotfiles(self, workspace, store):
        """Test that hidden entries are included."""
        (workspace / ".hidden").write_text("x")

        result = clean_hidden_temp_data(store)

        assert result.ok
        assert not (workspace / ".hidden").exists()

    def test_removes_read_only_entries(self, workspace, store):
        """Test that read-only files and directories are removed."""
        locked_dir = workspace / "locked"
        locked_dir.mkdir()
        locked_file = locked_dir / "config.txt"
        locked_file.write_text("x")
        os.chmod(locked_file, stat.S_IREAD)
        os.chmod(locked_dir, stat.S_IREAD | stat.S_IEXEC)

        result = clean_hidden_temp_data(store)

        assert result.ok
        assert not locked_dir.exists()

    def test_empty_workspace_succeeds(self, workspace, store):
        """Test that cleaning an empty workspace is a success."""
        result = clean_hidden_temp_data(store)

        assert result.ok
        assert "Cleaned 0 item(s)" in result.message

    def test_absent_workspace_is_not_created(self, install_root, store):
        """Test that cleaning a missing workspace succeeds without creating it."""
        result = clean_hidden_temp_data(store)

        assert result.ok
        assert "nothing to clean" in result.message
        assert not (install_root / WORKSPACE_DIRNAME).exists()

    def test_stops_at_first_failure(self, workspace, store, monkeypatch):
        """Test that the first undeletable entry aborts the clean."""
        for name in ("a.txt", "b.txt", "c.txt"):
            (workspace / name).write_text(name)
        calls = []

        def _locked(entry):
            calls.append(entry.name)
            raise PermissionError(13, "Access is denied", entry.path)

        monkeypatch.setattr("psxframework.workspace._remove_entry", _locked)

        result = clean_hidden_temp_data(store)

        assert not result.ok
        assert "Failed to remove" in result.message
        assert len(calls) == 1
        assert len(list(workspace.iterdir())) == 3


class TestRemoveHiddenTempData:
    """Tests for deleting the workspace directory."""

    def test_removes_workspace_with_contents(self, workspace, store):
        """Test that the directory and its contents are deleted."""
        (workspace / "data").mkdir()
        (workspace / "data" / "App.ps1").write_text("x")

        result = remove_hidden_temp_data(store)

        assert result.ok
        assert result.data is None
        assert not workspace.exists()

    def test_removes_read_only_contents(self, workspace, store):
        """Test removal of read-only files."""
        target = workspace / "7z.sfx"
        target.write_bytes(b"MZ")
        os.chmod(target, stat.S_IREAD)

        result = remove_hidden_temp_data(store)

        assert result.ok
        assert not workspace.exists()

    def test_absent_workspace_succeeds(self, store):
        """Test that removing a missing workspace is a success."""
        result = remove_hidden_temp_data(store)

        assert result.ok
        assert "nothing to remove" in result.message

    def test_recreate_after_remove(self, workspace, store):
        """Test the full create, remove, create cycle."""
        assert remove_hidden_temp_data(store).ok

        result = create_hidden_temp_data(store)

        assert result.ok
        assert result.data.is_dir()
