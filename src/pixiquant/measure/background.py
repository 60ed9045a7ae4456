"""BackgroundCorrector — remove uneven illumination and invert to signal."""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np
from skimage.filters import gaussian

from pixiquant.core.exceptions import InvalidImageFormatError
from pixiquant.core.models import ImageBuffer


@dataclass(frozen=True)
class CorrectionStages:
    """Intermediate images of one background correction.

    Attributes:
        background: Gaussian-blurred illumination estimate.
        corrected: Image plus absolute background deviation, clipped.
        inverted: Final output; background near zero, stain high.
    """

    background: ImageBuffer
    corrected: ImageBuffer
    inverted: ImageBuffer


def estimate_background(frame: np.ndarray, sigma: float, mode: str = "wrap") -> np.ndarray:
    """Low-pass a 2D frame with a Gaussian of standard deviation ``sigma``.

    The kernel extends ``ceil(3 * sigma)`` pixels from its centre. The
    default ``wrap`` boundary treats the image as periodic.
    """
    radius = math.ceil(3 * sigma)
    return gaussian(
        frame,
        sigma=sigma,
        mode=mode,
        truncate=radius / sigma,
        preserve_range=True,
    )


def add_background_deviation(
    frame: np.ndarray, background: np.ndarray, max_value: float = 1.0
) -> np.ndarray:
    """Return ``frame + |median(background) - background|`` clipped to max_value.

    Pixels on darker-than-typical background are lifted toward the common
    background level rather than having the background subtracted.
    """
    corrected = frame + np.abs(np.median(background) - background)
    corrected[corrected > max_value] = max_value
    return corrected


def invert(frame: np.ndarray) -> np.ndarray:
    """Invert a frame against its own maximum."""
    return frame.max() - frame


class BackgroundCorrector:
    """Estimate the background of each frame, flatten it and invert.

    Every frame is corrected on its own, so the first frame of a stack
    gives the same result as that plane stored as a single-frame image.

    Args:
        mode: Boundary mode of the Gaussian blur (see
            ``skimage.filters.gaussian``).
    """

    def __init__(self, mode: str = "wrap") -> None:
        self._mode = mode

    def correct(self, image: ImageBuffer, sigma: float) -> ImageBuffer:
        """Return the background-corrected, inverted image.

        Args:
            image: Single- or multi-frame grayscale buffer.
            sigma: Spatial scale of the background estimate, in pixels.

        Returns:
            New buffer with the same shape and values in [0, max_value].

        Raises:
            ValueError: If sigma is not positive.
            InvalidImageFormatError: If the image is not a finite grayscale raster.
        """
        return self.stages(image, sigma).inverted

    def stages(self, image: ImageBuffer, sigma: float) -> CorrectionStages:
        """Run the correction and keep every intermediate image."""
        if not isinstance(sigma, (int, float)) or not math.isfinite(sigma) or sigma <= 0:
            raise ValueError(f"sigma must be a positive number, got {sigma!r}")
        self._check_grayscale(image)

        background = image.map_frames(
            lambda frame: estimate_background(frame, sigma, self._mode)
        )
        if background.is_multiframe:
            corrected_data = np.stack([
                add_background_deviation(f, bg, image.max_value)
                for f, bg in zip(image.pixels, background.pixels)
            ])
        else:
            corrected_data = add_background_deviation(
                image.pixels, background.pixels, image.max_value,
            )
        corrected = image.with_pixels(corrected_data)
        inverted = corrected.map_frames(invert)

        return CorrectionStages(
            background=background,
            corrected=corrected,
            inverted=inverted,
        )

    @staticmethod
    def _check_grayscale(image: ImageBuffer) -> None:
        if not isinstance(image, ImageBuffer):
            raise InvalidImageFormatError(
                f"expected an ImageBuffer, got {type(image).__name__}"
            )
        if not np.all(np.isfinite(image.pixels)):
            raise InvalidImageFormatError("image contains NaN or infinite values")
