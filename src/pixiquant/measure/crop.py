"""Cropper — remove a symmetric border from an image."""

from __future__ import annotations

import math

from pixiquant.core.exceptions import InvalidCropFractionError
from pixiquant.core.models import ImageBuffer


def crop_bounds(extent: int, fraction: float) -> tuple[int, int]:
    """Return ``(start, stop)`` that drop ``round(fraction * extent)`` from each end.

    Halves round to even, as R's ``round`` does.
    """
    margin = int(round(fraction * extent))
    return margin, extent - margin


class Cropper:
    """Crop a percentage of rows and columns from every border."""

    def crop(self, image: ImageBuffer, fraction: float) -> ImageBuffer:
        """Remove ``fraction`` of the rows and columns from each side.

        Args:
            image: Buffer to crop; all frames are cropped identically.
            fraction: Per-side fraction in [0, 0.5).

        Returns:
            New buffer of shape
            ``(rows - 2*round(f*rows), cols - 2*round(f*cols))`` per frame.

        Raises:
            InvalidCropFractionError: If fraction is outside [0, 0.5) or
                would leave no pixels.
        """
        if (
            not isinstance(fraction, (int, float))
            or not math.isfinite(fraction)
            or not 0 <= fraction < 0.5
        ):
            raise InvalidCropFractionError(fraction)

        r0, r1 = crop_bounds(image.rows, fraction)
        c0, c1 = crop_bounds(image.cols, fraction)
        if r1 <= r0 or c1 <= c0:
            raise InvalidCropFractionError(
                fraction,
                f"cropping a {image.rows}x{image.cols} image leaves no pixels",
            )
        return image.with_pixels(image.pixels[..., r0:r1, c0:c1])
