"""
Tests for psxframework.build.bundle module.

Tests data staging and archive creation including:
- Copying directory contents into the staging area
- Archiver command layout and compression level validation
- Archiver failures and missing output
- Explicit archiver and output paths
"""

from __future__ import annotations

import os

import pytest

from psxframework.build.bundle import (
    create_data_bundle,
    format_size,
    prepare_data_bundle,
)
from psxframework.install import MappingStore

pytestmark = pytest.mark.unit


class TestPrepareDataBundle:
    """Tests for staging application files."""

    def test_copies_contents_not_directory_node(self, app_source, tmp_path):
        """Test that the source's children land directly in dest."""
        dest = tmp_path / "staging"

        result = prepare_data_bundle(app_source, dest)

        assert result.ok
        assert (dest / "App.ps1").is_file()
        assert (dest / "bin" / "tool.dll").read_bytes() == b"\x00\x01\x02\x03"
        assert not (dest / "App").exists()
        assert "Copied 3 item(s)" in result.message

    def test_creates_nested_destination(self, app_source, tmp_path):
        """Test that missing destination parents are created."""
        dest = tmp_path / "a" / "b" / "c"

        result = prepare_data_bundle(app_source, dest)

        assert result.ok
        assert result.data == dest.resolve()

    def test_overwrites_existing_files(self, app_source, tmp_path):
        """Test that staged files replace older copies."""
        dest = tmp_path / "staging"
        dest.mkdir()
        (dest / "App.ps1").write_text("old")
        (dest / "extra.txt").write_text("untouched")

        result = prepare_data_bundle(app_source, dest)

        assert result.ok
        assert (dest / "App.ps1").read_text(encoding="utf-8") == "Write-Host 'hello'\n"
        assert (dest / "extra.txt").exists()
        assert "Copied 3 item(s)" in result.message

    def test_reports_items_missing_after_copy(self, app_source, tmp_path, monkeypatch):
        """Test that a copy that drops entries fails with the arrived count."""

        def partial_copytree(src, dst, dirs_exist_ok=False):
            (dst / "App.ps1").write_text("partial", encoding="utf-8")

        monkeypatch.setattr("psxframework.build.bundle.shutil.copytree", partial_copytree)

        result = prepare_data_bundle(app_source, tmp_path / "staging")

        assert not result.ok
        assert "Only 1 of 3 item(s)" in result.message

    def test_missing_source_fails(self, tmp_path):
        """Test failure when the source does not exist."""
        result = prepare_data_bundle(tmp_path / "missing", tmp_path / "dest")

        assert not result.ok
        assert "not found" in result.message
        assert not (tmp_path / "dest").exists()

    def test_empty_source_fails(self, tmp_path):
        """Test failure when there is nothing to stage."""
        empty = tmp_path / "empty"
        empty.mkdir()

        result = prepare_data_bundle(empty, tmp_path / "dest")

        assert not result.ok
        assert "empty" in result.message

    def test_source_file_fails(self, tmp_path):
        """Test failure when the source is a file."""
        source = tmp_path / "App.ps1"
        source.write_text("x")

        result = prepare_data_bundle(source, tmp_path / "dest")

        assert not result.ok
        assert "not a directory" in result.message

    def test_dest_inside_source_fails(self, app_source):
        """Test that copying a tree into itself is rejected."""
        result = prepare_data_bundle(app_source, app_source / "staging")

        assert not result.ok
        assert "must not be inside" in result.message

    def test_dest_is_file_fails(self, app_source, tmp_path):
        """Test failure when the destination is a regular file."""
        dest = tmp_path / "dest.txt"
        dest.write_text("x")

        result = prepare_data_bundle(app_source, dest)

        assert not result.ok


class TestCreateDataBundle:
    """Tests for running the archiver."""

    def test_argument_layout(
        self, app_source, store, workspace, install_root, fake_7z_runner
    ):
        """Test the exact 7za command line."""
        runner = fake_7z_runner

        result = create_data_bundle(
            app_source, "App", compression_level=9, store=store, runner=runner
        )

        assert result.ok
        assert result.data == workspace / "App.7z"
        command, args, _ = runner.calls[0]
        assert command == str((install_root / "include" / "7z" / "7za.exe").resolve())
        assert args == [
            "a",
            "-t7z",
            "-mx9",
            str(workspace / "App.7z"),
            os.path.join(str(app_source.resolve()), "*"),
        ]

    def test_default_level_is_five(self, app_source, store, workspace, fake_7z_runner):
        """Test the default compression level."""
        create_data_bundle(app_source, "App", store=store, runner=fake_7z_runner)

        assert fake_7z_runner.calls[0][1][2] == "-mx5"

    def test_success_message_has_size(
        self, app_source, store, workspace, fake_7z_runner
    ):
        """Test that the message reports the archive name and size."""
        result = create_data_bundle(
            app_source, "App", store=store, runner=fake_7z_runner
        )

        assert result.message.startswith("Created archive App.7z (")
        assert result.data.stat().st_size > 0

    @pytest.mark.parametrize("level", [-1, 10, 99])
    def test_out_of_range_level_never_runs(
        self, app_source, store, workspace, level, make_runner
    ):
        """Test that bad levels fail before the archiver is spawned."""
        runner = make_runner()

        result = create_data_bundle(
            app_source, "App", compression_level=level, store=store, runner=runner
        )

        assert not result.ok
        assert "between 0 and 9" in result.message
        assert runner.calls == []

    def test_boolean_level_rejected(self, app_source, store, workspace, make_runner):
        """Test that booleans are not accepted as levels."""
        runner = make_runner()

        result = create_data_bundle(
            app_source, "App", compression_level=True, store=store, runner=runner
        )

        assert not result.ok
        assert runner.calls == []

    def test_existing_archive_is_replaced(
        self, app_source, store, workspace, make_runner
    ):
        """Test that a stale archive does not satisfy the existence check."""
        (workspace / "App.7z").write_bytes(b"stale")
        runner = make_runner()

        result = create_data_bundle(app_source, "App", store=store, runner=runner)

        assert not result.ok
        assert "no archive was found" in result.message
        assert not (workspace / "App.7z").exists()

    def test_nonzero_exit_reports_stderr(
        self, app_source, store, workspace, make_runner
    ):
        """Test that archiver stderr is surfaced."""
        runner = make_runner(exit_code=2, stderr="ERROR: Can not open file\n")

        result = create_data_bundle(app_source, "App", store=store, runner=runner)

        assert not result.ok
        assert "exit code 2" in result.message
        assert "Can not open file" in result.message

    def test_nonzero_exit_without_stderr(
        self, app_source, store, workspace, make_runner
    ):
        """Test the generic message when the archiver is silent."""
        runner = make_runner(exit_code=7)

        result = create_data_bundle(app_source, "App", store=store, runner=runner)

        assert not result.ok
        assert result.message == "7za.exe exited with code 7"

    def test_missing_archiver_fails(
        self, app_source, store, workspace, install_root, make_runner
    ):
        """Test failure when include/7z/7za.exe is absent."""
        (install_root / "include" / "7z" / "7za.exe").unlink()
        runner = make_runner()

        result = create_data_bundle(app_source, "App", store=store, runner=runner)

        assert not result.ok
        assert "Binary not found" in result.message
        assert runner.calls == []

    def test_missing_workspace_fails(self, app_source, store, fake_7z_runner):
        """Test that the default output directory must already exist."""
        result = create_data_bundle(
            app_source, "App", store=store, runner=fake_7z_runner
        )

        assert not result.ok
        assert "Workspace not found" in result.message
        assert fake_7z_runner.calls == []

    def test_missing_input_fails(self, tmp_path, store, workspace, fake_7z_runner):
        """Test failure when the input directory does not exist."""
        result = create_data_bundle(
            tmp_path / "missing", "App", store=store, runner=fake_7z_runner
        )

        assert not result.ok
        assert fake_7z_runner.calls == []

    def test_empty_name_fails(self, app_source, store, workspace, fake_7z_runner):
        """Test that a blank archive name is rejected."""
        result = create_data_bundle(
            app_source, "  ", store=store, runner=fake_7z_runner
        )

        assert not result.ok
        assert fake_7z_runner.calls == []

    def test_explicit_paths_need_no_installation(
        self, app_source, tmp_path, fake_7z_runner
    ):
        """Test that explicit archiver and output paths skip root lookup."""
        archiver = tmp_path / "tools" / "7za.exe"
        archiver.parent.mkdir()
        archiver.write_bytes(b"MZ")
        out_dir = tmp_path / "out" / "nested"

        result = create_data_bundle(
            app_source,
            "App",
            archiver_path=archiver,
            output_dir=out_dir,
            store=MappingStore(),
            runner=fake_7z_runner,
        )

        assert result.ok
        assert result.data == out_dir.resolve() / "App.7z"
        assert fake_7z_runner.calls[0][0] == str(archiver.resolve())


class TestFormatSize:
    """Tests for human-readable sizes."""

    @pytest.mark.parametrize(
        "num_bytes,expected",
        [
            (0, "0 bytes"),
            (512, "512 bytes"),
            (2048, "2.00 KB"),
            (5 * 1024 * 1024, "5.00 MB"),
        ],
    )
    def test_units(self, num_bytes, expected):
        """Test unit selection."""
        assert format_size(num_bytes) == expected
