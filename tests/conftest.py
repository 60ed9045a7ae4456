"""Shared test fixtures for pixiquant."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest
import tifffile


def _make_scene(
    size: int = 100,
    background: float = 0.2,
    square_value: float | None = 0.9,
    square_size: int = 10,
) -> np.ndarray:
    """A uniform float image with an optional centred square."""
    image = np.full((size, size), background, dtype=np.float64)
    if square_value is not None:
        lo = (size - square_size) // 2
        image[lo:lo + square_size, lo:lo + square_size] = square_value
    return image


@pytest.fixture
def scene() -> np.ndarray:
    """100x100 background of 0.2 with a 10x10 square of 0.9 in the centre."""
    return _make_scene()


@pytest.fixture
def plate_dir(tmp_path: Path) -> Path:
    """A folder of Cytation-style brightfield exports.

    Layout: Bright Field_A1_1_001.tif, Bright Field_B7_1_001.tif,
    Bright Field_D12_1_001.tif (uint16, 64x64, dark stained blob).
    """
    d = tmp_path / "data"
    d.mkdir()
    rng = np.random.default_rng(0)
    for i, well in enumerate(("A1", "B7", "D12")):
        image = _make_scene(size=64, background=0.8, square_value=0.2 + 0.1 * i, square_size=12)
        image += rng.normal(0, 0.01, image.shape)
        data = (np.clip(image, 0, 1) * 65535).astype(np.uint16)
        tifffile.imwrite(str(d / f"Bright Field_{well}_1_001.tif"), data)
    return d


@pytest.fixture
def corrupt_tiff(plate_dir: Path) -> Path:
    """A file with a .tif suffix that is not a TIFF."""
    p = plate_dir / "Bright Field_C3_1_001.tif"
    p.write_bytes(b"this is not a tiff file")
    return p


@pytest.fixture
def make_scene():
    """Factory for synthetic scenes: make_scene(size, background, square_value, square_size)."""
    return _make_scene
