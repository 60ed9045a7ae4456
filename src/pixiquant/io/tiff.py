"""TIFF decoding into ImageBuffers via tifffile."""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
import tifffile

from pixiquant.core.exceptions import DecodeError, InvalidImageFormatError
from pixiquant.core.models import ImageBuffer

logger = logging.getLogger(__name__)


def read_image(path: Path) -> ImageBuffer:
    """Decode a TIFF file into a grayscale ImageBuffer.

    The Y and X axes of the first series become the image plane; every other
    axis (pages, samples, Z, time) is flattened into frames, so an RGB file
    is read as three grayscale frames. Integer data is scaled to [0, 1] by
    the dtype maximum.

    Args:
        path: Path to the TIFF file.

    Returns:
        ImageBuffer with ``source`` set to ``path``.

    Raises:
        DecodeError: If the file cannot be read.
        InvalidImageFormatError: If the data has no Y/X plane or is not real.
    """
    path = Path(path)
    try:
        with tifffile.TiffFile(str(path)) as tif:
            series = tif.series[0]
            data = series.asarray()
            axes = series.axes
    except (OSError, ValueError, IndexError, tifffile.TiffFileError) as exc:
        raise DecodeError(str(path), str(exc)) from exc

    planes = to_planes(data, axes)
    logger.debug("Decoded %s: axes=%s shape=%s dtype=%s", path.name, axes, planes.shape, data.dtype)
    return ImageBuffer(pixels=normalize_intensity(planes), source=path)


def to_planes(data: np.ndarray, axes: str) -> np.ndarray:
    """Reorder an array so Y and X come last and other axes form frames.

    Returns a 2D array for a single plane, otherwise ``(frames, Y, X)``.
    """
    if len(axes) != data.ndim:
        raise InvalidImageFormatError(
            f"axes {axes!r} do not match data shape {data.shape}"
        )
    if "Y" not in axes or "X" not in axes:
        raise InvalidImageFormatError(f"no Y/X image plane in axes {axes!r}")

    planes = np.moveaxis(data, [axes.index("Y"), axes.index("X")], [-2, -1])
    rows, cols = planes.shape[-2:]
    planes = planes.reshape(-1, rows, cols)
    if planes.shape[0] == 1:
        return planes[0]
    return planes


def normalize_intensity(data: np.ndarray) -> np.ndarray:
    """Scale raw pixel values to float64 intensities.

    Integer types are divided by their maximum value, bool maps to 0/1,
    floats are kept as they are.
    """
    if np.iscomplexobj(data):
        raise InvalidImageFormatError("complex-valued pixels")
    if data.dtype == np.bool_:
        return data.astype(np.float64)
    if np.issubdtype(data.dtype, np.integer):
        return data.astype(np.float64) / float(np.iinfo(data.dtype).max)
    if np.issubdtype(data.dtype, np.floating):
        return data.astype(np.float64)
    raise InvalidImageFormatError(f"unsupported pixel type {data.dtype}")


def read_image_metadata(path: Path) -> dict:
    """Extract shape, dtype and axes from a TIFF file without reading pixels.

    Args:
        path: Path to the TIFF file.

    Returns:
        Dict with keys: 'shape', 'dtype', 'axes'.

    Raises:
        DecodeError: If the file cannot be read.
    """
    try:
        with tifffile.TiffFile(str(path)) as tif:
            series = tif.series[0]
            return {
                "shape": tuple(series.shape),
                "dtype": str(series.dtype),
                "axes": series.axes,
            }
    except (OSError, ValueError, IndexError, tifffile.TiffFileError) as exc:
        raise DecodeError(str(path), str(exc)) from exc


def write_image(path: Path, image: ImageBuffer | np.ndarray) -> None:
    """Write an image (or raw array) as a float32 TIFF."""
    data = image.pixels if isinstance(image, ImageBuffer) else np.asarray(image)
    tifffile.imwrite(str(path), data.astype(np.float32))
