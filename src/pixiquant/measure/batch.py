"""BatchPipeline — quantify a list of images into intensity records."""

from __future__ import annotations

import functools
import logging
import time
from contextlib import contextmanager
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Callable, Iterator, Sequence

from pixiquant.core.config import PipelineConfig
from pixiquant.core.exceptions import (
    ImageProcessingError,
    InvalidCropFractionError,
)
from pixiquant.core.models import (
    BatchResult,
    ImageBuffer,
    IntensityRecord,
    SkippedImage,
)
from pixiquant.io.tiff import read_image
from pixiquant.io.wells import parse_well
from pixiquant.measure.aggregate import IntensityAggregator
from pixiquant.measure.background import BackgroundCorrector
from pixiquant.measure.crop import Cropper

logger = logging.getLogger(__name__)

ImageReader = Callable[[Path], ImageBuffer]


@dataclass(frozen=True)
class _Outcome:
    """Record or failure for one image, as returned by a worker."""

    path: Path
    record: IntensityRecord | None = None
    error: ImageProcessingError | None = None


class BatchPipeline:
    """Run decode, correction, crop and aggregation over a batch of images.

    Each image is handled by :meth:`process_image`, which depends only on
    the path, the parameters and the processing date. Records are returned
    in input order whether the batch runs serially or in worker processes.

    Args:
        config: Pipeline parameters. Defaults to ``PipelineConfig()``.
        processing_date: Date stamped on every record (default: today).
        corrector: BackgroundCorrector to use.
        cropper: Cropper to use.
        aggregator: IntensityAggregator to use.
        reader: Callable decoding a path into an ImageBuffer. Must be a
            module-level function when ``config.workers > 1``.
    """

    def __init__(
        self,
        config: PipelineConfig | None = None,
        processing_date: date | None = None,
        corrector: BackgroundCorrector | None = None,
        cropper: Cropper | None = None,
        aggregator: IntensityAggregator | None = None,
        reader: ImageReader = read_image,
    ) -> None:
        self._config = config or PipelineConfig()
        self._date = (processing_date or date.today()).isoformat()
        self._corrector = corrector or BackgroundCorrector(mode=self._config.blur_mode)
        self._cropper = cropper or Cropper()
        self._aggregator = aggregator or IntensityAggregator()
        self._reader = reader

    @property
    def config(self) -> PipelineConfig:
        return self._config

    def run(
        self,
        image_paths: Sequence[Path],
        sigma: float | None = None,
        crop_fraction: float | None = None,
    ) -> list[IntensityRecord]:
        """Quantify images and return one record per image, in input order.

        ``sigma`` and ``crop_fraction`` default to the config values.
        """
        return self.execute(image_paths, sigma=sigma, crop_fraction=crop_fraction).records

    def execute(
        self,
        image_paths: Sequence[Path],
        sigma: float | None = None,
        crop_fraction: float | None = None,
        progress_callback: Callable[[int, int, str], None] | None = None,
    ) -> BatchResult:
        """Quantify images and report records, skipped files and timing.

        Args:
            image_paths: Images to process, in output order.
            sigma: Background blur sigma (default: config.sigma).
            crop_fraction: Per-side crop fraction (default: config.crop_fraction).
            progress_callback: Optional callback(current, total, filename).

        Returns:
            BatchResult with records in input order.

        Raises:
            ValueError: If no images are given or sigma is not positive.
            InvalidCropFractionError: If crop_fraction is outside [0, 0.5).
            ImageProcessingError: On the first failing image when
                ``config.on_error == "abort"``.
        """
        start = time.monotonic()
        paths = [Path(p) for p in image_paths]
        if not paths:
            raise ValueError("No images to process")

        sigma = self._config.sigma if sigma is None else sigma
        crop_fraction = self._config.crop_fraction if crop_fraction is None else crop_fraction
        if sigma <= 0:
            raise ValueError(f"sigma must be a positive number, got {sigma!r}")
        if not 0 <= crop_fraction < 0.5:
            raise InvalidCropFractionError(crop_fraction)

        records: list[IntensityRecord] = []
        skipped: list[SkippedImage] = []
        warnings: list[str] = []
        total = len(paths)

        logger.info(
            "Processing %d images (sigma=%s, crop=%s, workers=%d)",
            total, sigma, crop_fraction, self._config.workers,
        )
        outcomes = self._outcomes(paths, sigma, crop_fraction)
        try:
            for i, outcome in enumerate(outcomes):
                if outcome.error is not None:
                    if self._config.on_error == "abort":
                        raise outcome.error
                    logger.warning(
                        "Skipping %s: %s failed: %s",
                        outcome.path.name, outcome.error.stage, outcome.error.reason,
                    )
                    skipped.append(
                        SkippedImage(
                            filename=outcome.path.name,
                            stage=outcome.error.stage,
                            reason=outcome.error.reason,
                        )
                    )
                    warnings.append(
                        f"{outcome.path.name}: skipped, {outcome.error.stage} failed: {outcome.error.reason}"
                    )
                else:
                    records.append(outcome.record)
                    if outcome.record.well is None:
                        logger.warning("No well name in %s", outcome.path.name)
                        warnings.append(f"{outcome.path.name}: no well name in filename")

                if progress_callback:
                    progress_callback(i + 1, total, outcome.path.name)
        finally:
            outcomes.close()

        elapsed = time.monotonic() - start
        logger.info(
            "Processed %d images, skipped %d in %.2fs",
            len(records), len(skipped), elapsed,
        )

        return BatchResult(
            records=records,
            skipped=skipped,
            warnings=warnings,
            elapsed_seconds=round(elapsed, 3),
        )

    def process_image(
        self,
        path: Path,
        sigma: float | None = None,
        crop_fraction: float | None = None,
    ) -> IntensityRecord:
        """Quantify a single image.

        Raises:
            ImageProcessingError: Naming the stage that failed, with the
                original exception chained.
        """
        path = Path(path)
        sigma = self._config.sigma if sigma is None else sigma
        crop_fraction = self._config.crop_fraction if crop_fraction is None else crop_fraction

        with _stage(path, "decode"):
            image = self._reader(path)
        with _stage(path, "correct"):
            corrected = self._corrector.correct(image, sigma)
        with _stage(path, "crop"):
            cropped = self._cropper.crop(corrected, crop_fraction)
        with _stage(path, "aggregate"):
            intensity, black = self._aggregator.aggregate(cropped)

        total_pixels = cropped.rows * cropped.cols
        logger.debug("%s: total_intensity=%.4f black=%d", path.name, intensity, black)

        return IntensityRecord(
            filename=path.name,
            total_intensity=intensity,
            count_black_pixels=black,
            non_black_pixels=total_pixels - black,
            total_pixels_in_image=total_pixels,
            crop=crop_fraction,
            sigma_gblur=sigma,
            directory=path.resolve().parent.name,
            date=self._date,
            well=parse_well(
                path.name, self._config.well_position, self._config.well_delimiter,
            ),
        )

    def _outcomes(
        self, paths: list[Path], sigma: float, crop_fraction: float,
    ) -> Iterator[_Outcome]:
        """Yield one outcome per path, in input order."""
        worker = functools.partial(_process_safely, self, sigma=sigma, crop_fraction=crop_fraction)
        if self._config.workers == 1 or len(paths) == 1:
            for path in paths:
                yield worker(path)
            return

        with ProcessPoolExecutor(max_workers=self._config.workers) as executor:
            try:
                yield from executor.map(worker, paths)
            finally:
                executor.shutdown(wait=True, cancel_futures=True)


def _process_safely(
    pipeline: BatchPipeline, path: Path, sigma: float, crop_fraction: float,
) -> _Outcome:
    """Run one image, capturing a stage failure instead of raising."""
    try:
        return _Outcome(path=path, record=pipeline.process_image(path, sigma, crop_fraction))
    except ImageProcessingError as exc:
        return _Outcome(path=path, error=exc)


@contextmanager
def _stage(path: Path, name: str) -> Iterator[None]:
    """Wrap errors raised inside one pipeline stage in ImageProcessingError."""
    try:
        yield
    except MemoryError:
        raise
    except Exception as exc:
        raise ImageProcessingError(str(path), name, str(exc)) from exc
