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

"""Command-line interface for PSxFramework.

This module provides the ``psx`` entry point. Every pipeline step is
exposed as its own command, plus ``build`` for the complete pipeline.

Commands:

    locate: Show the registered installation root
    register: Register the installation root
    workspace: Create, clean or remove the hidden workspace
    stage: Copy application files into the workspace
    archive: Create the 7z archive with the external archiver
    sfx: Stage an SFX stub module
    cfg: Stage an SFX config template as config.txt
    checksum: Write a checksum report for a file
    release: Assemble the release executable
    build: Run the complete pipeline

Example:
    Build a release step by step:
        ```bash
        $ psx workspace create
        $ psx stage dist/App
        $ psx archive "C:/PSxFramework/tmpdata/data" App --level 9
        $ psx sfx GUI-Mode
        $ psx cfg GUI-Mode
        $ psx release App v1.0.0 --checksum
        $ psx workspace clean
        ```

    Or in one go:
        ```bash
        $ psx build dist/App App v1.0.0 --variant GUI-Mode --checksum
        ```

Exit Codes:

- 0: Success
- 1: Failure (the result message is printed)

Note:
    Defaults for compression level, concatenation method and checksum
    settings come from the YAML settings file (see psxframework.config).
    Debug mode implies verbose mode and shows tracebacks of converted
    errors.

"""

from __future__ import annotations

import argparse
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
import sys
from typing import Any

from dotenv import find_dotenv, load_dotenv

from psxframework.build import (
    SfxVariant,
    create_checksum,
    create_data_bundle,
    create_release,
    prepare_cfg,
    prepare_data_bundle,
    prepare_sfx,
)
from psxframework.config import load_settings
from psxframework.core import DATA_DIRNAME, build_release
from psxframework.exceptions import ConfigError
from psxframework.install import (
    InstallationStore,
    SettingsFileStore,
    default_store,
    get_installation_root,
    register_installation,
)
from psxframework.logging import get_logger, set_global_logger
from psxframework.results import StatusResult
from psxframework.workspace import (
    clean_hidden_temp_data,
    create_hidden_temp_data,
    get_workspace_path,
    remove_hidden_temp_data,
)


def _configure(args: argparse.Namespace) -> tuple[InstallationStore, dict[str, Any]]:
    """Install the global logger and load settings for a command."""
    logger = get_logger(verbose=args.verbose, debug=args.debug)
    set_global_logger(logger)

    settings = load_settings(args.settings)
    store: InstallationStore = (
        SettingsFileStore(args.settings) if args.settings else default_store()
    )
    return store, settings


def _report(title: str, result: StatusResult) -> int:
    """Print a result block and return the exit code."""
    print("=" * 70)
    print(title)
    print("=" * 70)
    print(f"Status:   {result.code.value}")
    print(f"Message:  {result.message}")
    if result.data is not None:
        print(f"Path:     {result.data}")
    print("=" * 70)
    print()
    if result.ok:
        print("[SUCCESS] Done.")
        return 0
    print("[FAILED] See message above.")
    return 1


def cmd_locate(args: argparse.Namespace) -> int:
    """Handler for 'psx locate' command."""
    store, _ = _configure(args)
    return _report("INSTALLATION ROOT", get_installation_root(store))


def cmd_register(args: argparse.Namespace) -> int:
    """Handler for 'psx register' command."""
    store, _ = _configure(args)
    return _report("REGISTER INSTALLATION", register_installation(Path(args.path), store))


def cmd_workspace(args: argparse.Namespace) -> int:
    """Handler for 'psx workspace {create,clean,remove}' command."""
    store, _ = _configure(args)
    actions = {
        "create": create_hidden_temp_data,
        "clean": clean_hidden_temp_data,
        "remove": remove_hidden_temp_data,
    }
    result = actions[args.action](store)
    return _report(f"WORKSPACE {args.action.upper()}", result)


def cmd_stage(args: argparse.Namespace) -> int:
    """Handler for 'psx stage' command.

    Copies the source directory's contents into --dest, or into
    {workspace}/data when no destination is given.
    """
    store, _ = _configure(args)

    if args.dest:
        dest = Path(args.dest)
    else:
        root = get_installation_root(store)
        if not root.ok:
            return _report("STAGE DATA", root)
        dest = get_workspace_path(root.data) / DATA_DIRNAME

    return _report("STAGE DATA", prepare_data_bundle(Path(args.source), dest))


def cmd_archive(args: argparse.Namespace) -> int:
    """Handler for 'psx archive' command."""
    store, settings = _configure(args)
    level = args.level if args.level is not None else settings["build"]["compression_level"]

    result = create_data_bundle(
        Path(args.input_dir),
        args.name,
        archiver_path=Path(args.archiver) if args.archiver else None,
        output_dir=Path(args.output_dir) if args.output_dir else None,
        compression_level=level,
        store=store,
    )
    return _report("CREATE ARCHIVE", result)


def cmd_sfx(args: argparse.Namespace) -> int:
    """Handler for 'psx sfx' command."""
    store, _ = _configure(args)
    return _report("STAGE SFX MODULE", prepare_sfx(args.variant, store))


def cmd_cfg(args: argparse.Namespace) -> int:
    """Handler for 'psx cfg' command."""
    store, _ = _configure(args)
    return _report("STAGE SFX CONFIG", prepare_cfg(args.variant, store))


def cmd_checksum(args: argparse.Namespace) -> int:
    """Handler for 'psx checksum' command."""
    _, settings = _configure(args)
    algorithm = args.algorithm or settings["checksum"]["algorithm"]
    result = create_checksum(
        Path(args.file),
        algorithm,
        output_dir=Path(args.output_dir) if args.output_dir else None,
    )
    return _report("CHECKSUM", result)


def cmd_release(args: argparse.Namespace) -> int:
    """Handler for 'psx release' command."""
    store, settings = _configure(args)
    result = create_release(
        args.name,
        args.version,
        method=args.method or settings["build"]["method"],
        output_path=Path(args.output) if args.output else None,
        make_checksum=args.checksum or bool(settings["checksum"]["enabled"]),
        checksum_algorithm=args.algorithm or settings["checksum"]["algorithm"],
        store=store,
    )
    return _report("CREATE RELEASE", result)


def cmd_build(args: argparse.Namespace) -> int:
    """Handler for 'psx build' command.

    Runs the complete pipeline: workspace, staging, archive, SFX module,
    config, release and (unless --keep-workspace) cleanup.
    """
    store, settings = _configure(args)
    level = args.level if args.level is not None else settings["build"]["compression_level"]

    print(f"Building release {args.name} {args.version} from: {Path(args.source).resolve()}")
    print()

    result = build_release(
        Path(args.source),
        args.name,
        args.version,
        args.variant,
        method=args.method or settings["build"]["method"],
        compression_level=level,
        archiver_path=Path(args.archiver) if args.archiver else None,
        output_path=Path(args.output) if args.output else None,
        make_checksum=args.checksum or bool(settings["checksum"]["enabled"]),
        checksum_algorithm=args.algorithm or settings["checksum"]["algorithm"],
        keep_workspace=args.keep_workspace,
        store=store,
    )
    return _report("BUILD RESULTS", result)


def _add_common_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--settings",
        type=Path,
        default=None,
        help="YAML settings file (default: PSX_SETTINGS or ~/.psxframework/settings.yaml)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show progress and high-level status updates",
    )
    parser.add_argument(
        "-d",
        "--debug",
        action="store_true",
        help="Show detailed debugging output (implies --verbose)",
    )


def _add_release_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--method",
        choices=["auto", "copy", "stream"],
        default=None,
        help="Concatenation method (default: from settings, normally auto)",
    )
    parser.add_argument(
        "--output",
        default=None,
        help="Output directory (default: {installRoot}/release/{name}-{version})",
    )
    parser.add_argument(
        "--checksum",
        action="store_true",
        help="Write a checksum report next to the executable",
    )
    parser.add_argument(
        "--algorithm",
        choices=["SHA-256", "SHA-512"],
        default=None,
        help="Checksum algorithm (default: from settings, normally SHA-256)",
    )


def _level(value: str) -> int:
    level = int(value)
    if not 0 <= level <= 9:
        raise argparse.ArgumentTypeError("compression level must be between 0 and 9")
    return level


def _package_version() -> str:
    try:
        return version("psxframework")
    except PackageNotFoundError:
        from psxframework import __version__

        return __version__


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="psx",
        description="PSxFramework - 7-Zip self-extracting release builder",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"psx {_package_version()}",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        help="Available commands",
        required=True,
    )

    # 'locate' command
    p = subparsers.add_parser("locate", help="Show the registered installation root")
    _add_common_flags(p)
    p.set_defaults(func=cmd_locate)

    # 'register' command
    p = subparsers.add_parser("register", help="Register the installation root")
    p.add_argument("path", help="Existing installation directory")
    _add_common_flags(p)
    p.set_defaults(func=cmd_register)

    # 'workspace' command
    p = subparsers.add_parser("workspace", help="Manage the hidden scratch workspace")
    p.add_argument("action", choices=["create", "clean", "remove"])
    _add_common_flags(p)
    p.set_defaults(func=cmd_workspace)

    # 'stage' command
    p = subparsers.add_parser("stage", help="Copy application files for archiving")
    p.add_argument("source", help="Directory with the application files")
    p.add_argument(
        "--dest",
        default=None,
        help=f"Staging directory (default: {{workspace}}/{DATA_DIRNAME})",
    )
    _add_common_flags(p)
    p.set_defaults(func=cmd_stage)

    # 'archive' command
    p = subparsers.add_parser("archive", help="Create the 7z archive")
    p.add_argument("input_dir", help="Staged directory to compress")
    p.add_argument("name", help="Archive name without .7z")
    p.add_argument("--archiver", default=None, help="7-Zip executable (default: bundled 7za.exe)")
    p.add_argument("--output-dir", default=None, help="Archive directory (default: workspace)")
    p.add_argument("--level", type=_level, default=None, help="Compression level 0-9")
    _add_common_flags(p)
    p.set_defaults(func=cmd_archive)

    variant_names = [v.label for v in SfxVariant]

    # 'sfx' command
    p = subparsers.add_parser("sfx", help="Stage an SFX stub module")
    p.add_argument("variant", help=f"One of: {', '.join(variant_names)}")
    _add_common_flags(p)
    p.set_defaults(func=cmd_sfx)

    # 'cfg' command
    p = subparsers.add_parser("cfg", help="Stage an SFX config template")
    p.add_argument("variant", help=f"One of: {', '.join(variant_names)}")
    _add_common_flags(p)
    p.set_defaults(func=cmd_cfg)

    # 'checksum' command
    p = subparsers.add_parser("checksum", help="Write a checksum report")
    p.add_argument("file", help="File to hash")
    p.add_argument("--algorithm", choices=["SHA-256", "SHA-512"], default=None)
    p.add_argument("--output-dir", default=None, help="Report directory")
    _add_common_flags(p)
    p.set_defaults(func=cmd_checksum)

    # 'release' command
    p = subparsers.add_parser("release", help="Assemble the release executable")
    p.add_argument("name", help="Release name")
    p.add_argument("version", help="Release version")
    _add_release_flags(p)
    _add_common_flags(p)
    p.set_defaults(func=cmd_release)

    # 'build' command
    p = subparsers.add_parser("build", help="Run the complete release pipeline")
    p.add_argument("source", help="Directory with the application files")
    p.add_argument("name", help="Release name")
    p.add_argument("version", help="Release version")
    p.add_argument("--variant", required=True, help=f"One of: {', '.join(variant_names)}")
    p.add_argument("--archiver", default=None, help="7-Zip executable (default: bundled 7za.exe)")
    p.add_argument("--level", type=_level, default=None, help="Compression level 0-9")
    p.add_argument(
        "--keep-workspace",
        action="store_true",
        help="Leave the staged files in the workspace",
    )
    _add_release_flags(p)
    _add_common_flags(p)
    p.set_defaults(func=cmd_build)

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the psx CLI.

    This function is registered as the 'psx' console script in pyproject.toml.
    """
    # PSX_SETTINGS may come from a .env file in the working directory
    load_dotenv(find_dotenv(usecwd=True))

    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        exit_code = args.func(args)
    except ConfigError as err:
        # Settings file problems surface before any operation runs
        print(f"Error: {err}")
        if args.debug:
            import traceback

            traceback.print_exc()
        exit_code = 1
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
