"""pixiquant IO — TIFF decoding, file discovery, well parsing, export."""

from __future__ import annotations

from pathlib import Path

from pixiquant.io.export import records_to_frame, write_csv
from pixiquant.io.scanner import FileScanner, ScanResult
from pixiquant.io.serialization import config_from_yaml, config_to_yaml
from pixiquant.io.tiff import read_image, read_image_metadata, write_image
from pixiquant.io.wells import normalize_well, parse_well

__all__ = [
    "FileScanner",
    "ScanResult",
    "config_from_yaml",
    "config_to_yaml",
    "normalize_well",
    "parse_well",
    "read_image",
    "read_image_metadata",
    "records_to_frame",
    "scan",
    "write_csv",
    "write_image",
]


def scan(
    path: Path,
    pattern: str = "*.tif*",
    files: list[Path] | None = None,
) -> ScanResult:
    """Scan a directory for TIFF files. Convenience wrapper."""
    return FileScanner().scan(path, pattern, files=files)
