"""pixiquant Core — image and record models, configuration, exceptions."""

from pixiquant.core.config import PipelineConfig
from pixiquant.core.exceptions import (
    ConfigError,
    DecodeError,
    ImageProcessingError,
    InvalidCropFractionError,
    InvalidImageFormatError,
    PixiError,
)
from pixiquant.core.models import (
    OUTPUT_COLUMNS,
    BatchResult,
    ImageBuffer,
    IntensityRecord,
    SkippedImage,
)

__all__ = [
    "OUTPUT_COLUMNS",
    "BatchResult",
    "ImageBuffer",
    "IntensityRecord",
    "PipelineConfig",
    "SkippedImage",
    "PixiError",
    "ConfigError",
    "DecodeError",
    "ImageProcessingError",
    "InvalidCropFractionError",
    "InvalidImageFormatError",
]
