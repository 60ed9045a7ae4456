"""IntensityAggregator — per-image intensity totals."""

from __future__ import annotations

import numpy as np

from pixiquant.core.models import ImageBuffer


def total_intensity(frame: np.ndarray) -> float:
    """Sum of all pixel intensities."""
    return float(np.sum(frame))


def count_black_pixels(frame: np.ndarray) -> int:
    """Number of pixels whose intensity is exactly zero."""
    return int(np.count_nonzero(frame == 0))


class IntensityAggregator:
    """Reduce the first frame of an image to its intensity totals."""

    def aggregate(self, image: ImageBuffer) -> tuple[float, int]:
        """Return ``(total_intensity, black_pixel_count)`` of the first frame."""
        frame = image.first_frame()
        return total_intensity(frame), count_black_pixels(frame)
