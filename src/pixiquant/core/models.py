"""Data models for the pixiquant core module."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

import numpy as np

from pixiquant.core.exceptions import InvalidImageFormatError

# Column names of the output table, in order.
OUTPUT_COLUMNS: tuple[str, ...] = (
    "filename",
    "total_intensity",
    "count_blackPixels",
    "non_blackPixels",
    "totalPixels_inImage",
    "crop",
    "sigma_gblur",
    "directory",
    "date",
    "Well",
)


@dataclass(frozen=True, eq=False)
class ImageBuffer:
    """A single- or multi-frame grayscale raster.

    ``pixels`` is float64 with shape ``(rows, cols)`` for a single frame or
    ``(frames, rows, cols)`` for a stack. Buffers are never modified; every
    transform returns a new buffer.

    Attributes:
        pixels: Intensity array, normalized to [0, max_value].
        source: File the buffer was decoded from, if any.
        max_value: Largest representable intensity.
    """

    pixels: np.ndarray
    source: Path | None = None
    max_value: float = 1.0

    def __post_init__(self) -> None:
        """Validate geometry and coerce pixels to a read-only float64 array."""
        pixels = np.asarray(self.pixels)
        if np.iscomplexobj(pixels):
            raise InvalidImageFormatError("complex-valued pixels")
        if pixels.ndim not in (2, 3):
            raise InvalidImageFormatError(
                f"expected 2 or 3 dimensions, got shape {pixels.shape}"
            )
        if pixels.ndim == 3 and pixels.shape[0] == 0:
            raise InvalidImageFormatError("stack has no frames")
        if pixels.shape[-1] == 0 or pixels.shape[-2] == 0:
            raise InvalidImageFormatError(f"empty image plane {pixels.shape}")
        try:
            pixels = pixels.astype(np.float64, copy=True)
        except (TypeError, ValueError) as exc:
            raise InvalidImageFormatError(str(exc)) from exc
        pixels.flags.writeable = False
        object.__setattr__(self, "pixels", pixels)

    @property
    def frames(self) -> int:
        """Number of frames: 0 for a single-frame image, N for a stack."""
        return self.pixels.shape[0] if self.pixels.ndim == 3 else 0

    @property
    def is_multiframe(self) -> bool:
        return self.pixels.ndim == 3

    @property
    def rows(self) -> int:
        return self.pixels.shape[-2]

    @property
    def cols(self) -> int:
        return self.pixels.shape[-1]

    @property
    def shape(self) -> tuple[int, ...]:
        return self.pixels.shape

    def first_frame(self) -> np.ndarray:
        """Return the 2D plane used for quantification.

        Stacks contribute only their first frame; a single-frame image is
        returned as-is.
        """
        if self.is_multiframe:
            return self.pixels[0]
        return self.pixels

    def map_frames(self, func: Callable[[np.ndarray], np.ndarray]) -> ImageBuffer:
        """Apply a 2D transform to every frame and return a new buffer."""
        if self.is_multiframe:
            data = np.stack([func(frame) for frame in self.pixels])
        else:
            data = func(self.pixels)
        return self.with_pixels(data)

    def with_pixels(self, pixels: np.ndarray) -> ImageBuffer:
        """Return a buffer with new pixel data and the same metadata."""
        return ImageBuffer(pixels=pixels, source=self.source, max_value=self.max_value)


@dataclass(frozen=True)
class IntensityRecord:
    """Quantification result for one image.

    Pixel counts refer to the cropped first frame.
    """

    filename: str
    total_intensity: float
    count_black_pixels: int
    non_black_pixels: int
    total_pixels_in_image: int
    crop: float
    sigma_gblur: float
    directory: str
    date: str
    well: str | None = None

    def __post_init__(self) -> None:
        if self.non_black_pixels + self.count_black_pixels != self.total_pixels_in_image:
            raise ValueError(
                f"Pixel counts do not add up for {self.filename}: "
                f"{self.non_black_pixels} + {self.count_black_pixels} "
                f"!= {self.total_pixels_in_image}"
            )

    def to_row(self) -> dict[str, object]:
        """Return the record keyed by output column name."""
        values = (
            self.filename,
            self.total_intensity,
            self.count_black_pixels,
            self.non_black_pixels,
            self.total_pixels_in_image,
            self.crop,
            self.sigma_gblur,
            self.directory,
            self.date,
            self.well,
        )
        return dict(zip(OUTPUT_COLUMNS, values))


@dataclass(frozen=True)
class SkippedImage:
    """An image left out of a batch under the skip policy."""

    filename: str
    stage: str
    reason: str


@dataclass(frozen=True)
class BatchResult:
    """Result of a batch run.

    Attributes:
        records: One record per processed image, in input order.
        skipped: Images that failed and were left out.
        warnings: Human-readable warning messages.
        elapsed_seconds: Wall-clock time in seconds.
    """

    records: list[IntensityRecord]
    skipped: list[SkippedImage] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    elapsed_seconds: float = 0.0

    @property
    def images_processed(self) -> int:
        return len(self.records)
