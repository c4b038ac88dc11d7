"""
Release build steps for PSxFramework.

This package holds the individual steps of the self-extracting release
pipeline. Each returns a StatusResult and can be called on its own.

Public API:

prepare_data_bundle : function
    Copy application files into a staging directory.
create_data_bundle : function
    Compress a staged directory into {name}.7z with the external archiver.
prepare_sfx, prepare_cfg : functions
    Stage the SFX stub module and config template for a variant.
create_release : function
    Concatenate stub, config and archive into {name}.exe.
create_checksum : function
    Write a SHA-256/SHA-512 checksum report for a file.

Example:
    from psxframework.build import create_release

    result = create_release("App", "v1.0.0", method="stream")
    print(result.message)
"""

from .bundle import create_data_bundle, format_size, prepare_data_bundle
from .checksum import ChecksumAlgorithm, create_checksum, file_digest
from .release import (
    STUB_SCAN_ORDER,
    ConcatMethod,
    CopyCommandStrategy,
    StreamStrategy,
    create_release,
)
from .sfx import SfxVariant, prepare_cfg, prepare_sfx

__all__ = [
    "STUB_SCAN_ORDER",
    "ChecksumAlgorithm",
    "ConcatMethod",
    "CopyCommandStrategy",
    "SfxVariant",
    "StreamStrategy",
    "create_checksum",
    "create_data_bundle",
    "create_release",
    "file_digest",
    "format_size",
    "prepare_cfg",
    "prepare_data_bundle",
    "prepare_sfx",
]
