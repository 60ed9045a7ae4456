"""pixiquant Measure — background correction, cropping, aggregation, batches."""

from pixiquant.measure.aggregate import (
    IntensityAggregator,
    count_black_pixels,
    total_intensity,
)
from pixiquant.measure.background import BackgroundCorrector, CorrectionStages
from pixiquant.measure.batch import BatchPipeline
from pixiquant.measure.crop import Cropper, crop_bounds

__all__ = [
    "BackgroundCorrector",
    "BatchPipeline",
    "CorrectionStages",
    "Cropper",
    "IntensityAggregator",
    "count_black_pixels",
    "crop_bounds",
    "total_intensity",
]
