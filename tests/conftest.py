"""
Pytest configuration and shared fixtures for PSxFramework tests.

This module provides a fake installation root, an in-memory installation
store and a recording fake process runner used across the test suite.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Sequence
from pathlib import Path
from typing import Any

import pytest
import yaml

from psxframework.build.sfx import SfxVariant
from psxframework.install import INSTALL_KEY_NAME, MappingStore
from psxframework.io.process import ProcessResult
from psxframework.logging import RecordingLogger, SilentLogger, use_logger

STUB_BYTES = {
    "7z.sfx": b"MZ-gui-stub\x00\x01\x02",
    "7zCon.sfx": b"MZ-console-stub\x00\x03",
    "7zS2.sfx": b"MZ-installer-stub\x00\x04\x05",
    "7zSD.sfx": b"MZ-custom-stub\x00\x06",
}


class FakeRunner:
    """ProcessRunner that records calls instead of spawning processes.

    Args:
        exit_code: Exit code every call reports.
        stderr: Standard error text every call reports.
        action: Optional callable(command, args, cwd) run before returning,
            used to simulate the side effects of a real tool.
    """

    def __init__(
        self,
        exit_code: int = 0,
        stderr: str = "",
        action: Callable[[str, Sequence[str], Path | None], None] | None = None,
    ) -> None:
        self.exit_code = exit_code
        self.stderr = stderr
        self.action = action
        self.calls: list[tuple[str, list[str], Path | None]] = []

    def run(
        self, command: str, args: Sequence[str], cwd: Path | None = None
    ) -> ProcessResult:
        self.calls.append((command, list(args), cwd))
        if self.action is not None:
            self.action(command, args, cwd)
        return ProcessResult(exit_code=self.exit_code, stdout="", stderr=self.stderr)


def fake_7z_action(command: str, args: Sequence[str], cwd: Path | None) -> None:
    """Simulate '7za a -t7z -mxN <archive> <dir>/*' by writing a small file."""
    archive = Path(args[3])
    source = Path(args[4]).parent
    names = sorted(p.name for p in source.rglob("*"))
    archive.write_bytes(b"7z\xbc\xaf\x27\x1c" + "\n".join(names).encode("utf-8"))


@pytest.fixture(autouse=True)
def silent_global_logger():
    """Run every test with a silent global logger, restored afterwards."""
    with use_logger(SilentLogger()):
        yield


@pytest.fixture
def recorded_log() -> Iterator[RecordingLogger]:
    """Capture everything logged during the test."""
    with use_logger(RecordingLogger()) as log:
        yield log


@pytest.fixture
def create_yaml_file(tmp_path: Path):
    """
    Factory fixture for creating temporary YAML files.

    Usage:
        yaml_path = create_yaml_file("settings.yaml", {"key": "value"})
    """
    def _create(filename: str, data: dict[str, Any]) -> Path:
        path = tmp_path / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as f:
            yaml.dump(data, f)
        return path

    return _create


@pytest.fixture
def install_root(tmp_path: Path) -> Path:
    """
    Provide a fake installation root with SFX modules, templates and 7za.exe.

    Layout:
        {root}/include/sfx/{stub}.sfx
        {root}/include/sfx/config_*.txt
        {root}/include/7z/7za.exe
    """
    root = tmp_path / "PSxFramework"
    sfx_dir = root / "include" / "sfx"
    sfx_dir.mkdir(parents=True)

    for variant in SfxVariant:
        (sfx_dir / variant.stub_name).write_bytes(STUB_BYTES[variant.stub_name])
        (sfx_dir / variant.template_name).write_text(
            ';!@Install@!UTF-8!\nTitle="%APPNAME% ' + variant.label + '"\n;!@InstallEnd@!\n',
            encoding="utf-8",
        )

    tools_dir = root / "include" / "7z"
    tools_dir.mkdir(parents=True)
    (tools_dir / "7za.exe").write_bytes(b"MZ fake archiver")

    return root


@pytest.fixture
def stub_bytes() -> dict[str, bytes]:
    """Provide the byte content of each fake SFX stub module."""
    return dict(STUB_BYTES)


@pytest.fixture
def store(install_root: Path) -> MappingStore:
    """Provide an installation store pointing at the fake root."""
    return MappingStore({INSTALL_KEY_NAME: str(install_root)})


@pytest.fixture
def workspace(install_root: Path, store: MappingStore) -> Path:
    """Provide an existing scratch workspace."""
    from psxframework.workspace import create_hidden_temp_data

    result = create_hidden_temp_data(store)
    assert result.ok, result.message
    return result.data


@pytest.fixture
def fake_runner() -> FakeRunner:
    """Provide a recording runner that reports success."""
    return FakeRunner()


@pytest.fixture
def make_runner() -> Callable[..., FakeRunner]:
    """Factory fixture for FakeRunner instances with custom outcomes."""
    return FakeRunner


@pytest.fixture
def fake_7z_runner() -> FakeRunner:
    """Provide a runner that behaves like a successful 7-Zip run."""
    return FakeRunner(action=fake_7z_action)


@pytest.fixture
def app_source(tmp_path: Path) -> Path:
    """Provide a small application directory to package."""
    source = tmp_path / "dist" / "App"
    (source / "bin").mkdir(parents=True)
    (source / "App.ps1").write_text("Write-Host 'hello'\n", encoding="utf-8")
    (source / "bin" / "tool.dll").write_bytes(b"\x00\x01\x02\x03")
    return source


@pytest.fixture
def staged_release(workspace: Path) -> Path:
    """
    Provide a workspace staged for 'App': App.7z, config.txt and 7z.sfx.

    Returns the workspace path.
    """
    (workspace / "App.7z").write_bytes(b"7z\xbc\xaf\x27\x1c" + b"payload" * 50)
    (workspace / "config.txt").write_text(
        ';!@Install@!UTF-8!\nTitle="App"\n;!@InstallEnd@!\n', encoding="utf-8"
    )
    (workspace / "7z.sfx").write_bytes(STUB_BYTES["7z.sfx"])
    return workspace
