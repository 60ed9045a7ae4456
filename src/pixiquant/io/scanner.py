"""FileScanner — find the TIFF images of a batch."""

from __future__ import annotations

import fnmatch
from dataclasses import dataclass, field
from pathlib import Path

from pixiquant.core.exceptions import DecodeError
from pixiquant.io.tiff import read_image_metadata


@dataclass(frozen=True)
class ScanResult:
    """What the scanner found, in processing order."""

    source_path: Path
    files: list[Path]
    warnings: list[str] = field(default_factory=list)


class FileScanner:
    """Lists TIFF files in a directory (non-recursive) or an explicit file list."""

    TIFF_EXTENSIONS = {".tif", ".tiff"}

    def scan(
        self,
        path: Path,
        pattern: str = "*.tif*",
        files: list[Path] | None = None,
    ) -> ScanResult:
        """Scan a directory (or explicit file list) for TIFF files.

        Args:
            path: Directory to scan (used as source_path in result).
            pattern: Case-insensitive glob matched against file names.
            files: Optional explicit list of file paths. When provided,
                directory listing is skipped, ``pattern`` is ignored and
                the given order is kept.

        Returns:
            ScanResult with file paths in processing order: sorted by
            name for a directory, as given for an explicit list.

        Raises:
            FileNotFoundError: If path does not exist (when files is None).
            ValueError: If path is not a directory (when files is None)
                or no TIFF files found.
        """
        path = Path(path)

        if files is not None:
            tiff_paths = [
                Path(f) for f in files
                if Path(f).suffix.lower() in self.TIFF_EXTENSIONS
            ]
        else:
            if not path.exists():
                raise FileNotFoundError(f"Source path does not exist: {path}")
            if not path.is_dir():
                raise ValueError(f"Source path is not a directory: {path}")
            tiff_paths = sorted(self._find_tiffs(path, pattern))

        if not tiff_paths:
            raise ValueError(f"No TIFF files found in: {path}")

        warnings: list[str] = []
        shapes: set[tuple[int, ...]] = set()
        for tiff_path in tiff_paths:
            try:
                meta = read_image_metadata(tiff_path)
            except DecodeError as exc:
                warnings.append(f"Could not read metadata from {tiff_path.name}: {exc}")
                continue
            shapes.add(meta["shape"])

        if len(shapes) > 1:
            warnings.append(f"Inconsistent shapes across files: {sorted(shapes)}")

        return ScanResult(source_path=path, files=tiff_paths, warnings=warnings)

    def _find_tiffs(self, path: Path, pattern: str) -> list[Path]:
        """List matching TIFF files directly inside ``path``.

        Symlinks are skipped.
        """
        results = []
        for child in path.iterdir():
            if child.is_symlink() or not child.is_file():
                continue
            if child.suffix.lower() not in self.TIFF_EXTENSIONS:
                continue
            if fnmatch.fnmatch(child.name.lower(), pattern.lower()):
                results.append(child)
        return results
