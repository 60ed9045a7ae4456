"""PipelineConfig — parameters of a quantification run."""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass

from pixiquant.core.exceptions import ConfigError

_VALID_ON_ERROR = frozenset({"abort", "skip"})
_VALID_BLUR_MODES = frozenset({"wrap", "nearest", "reflect", "mirror", "constant"})


@dataclass(frozen=True)
class PipelineConfig:
    """Parameters shared by every image of a batch.

    Defaults reproduce the published PIXI settings: a Gaussian background
    with sigma 10, a 5% border crop and the well name as the second
    underscore-separated token of the filename.

    Attributes:
        sigma: Standard deviation of the background blur, in pixels.
        crop_fraction: Fraction removed from each border, in [0, 0.5).
        well_position: 1-based index of the well token in the filename.
        well_delimiter: Separator between filename tokens.
        file_pattern: Glob used when scanning a directory.
        on_error: ``"abort"`` stops the batch at the first failure,
            ``"skip"`` logs the failure and leaves the image out.
        workers: Number of worker processes; 1 runs serially.
        blur_mode: Boundary handling of the Gaussian blur.
    """

    sigma: float = 10.0
    crop_fraction: float = 0.05
    well_position: int = 2
    well_delimiter: str = "_"
    file_pattern: str = "*.tif*"
    on_error: str = "abort"
    workers: int = 1
    blur_mode: str = "wrap"

    def __post_init__(self) -> None:
        """Validate values at construction time."""
        if not isinstance(self.sigma, (int, float)) or not math.isfinite(self.sigma) or self.sigma <= 0:
            raise ConfigError(f"sigma must be a positive number, got {self.sigma!r}")
        if (
            not isinstance(self.crop_fraction, (int, float))
            or not 0 <= self.crop_fraction < 0.5
        ):
            raise ConfigError(
                f"crop_fraction must satisfy 0 <= crop_fraction < 0.5, got {self.crop_fraction!r}"
            )
        if not isinstance(self.well_position, int) or self.well_position < 1:
            raise ConfigError(f"well_position must be >= 1, got {self.well_position!r}")
        if not self.well_delimiter:
            raise ConfigError("well_delimiter must not be empty")
        if not self.file_pattern:
            raise ConfigError("file_pattern must not be empty")
        if self.on_error not in _VALID_ON_ERROR:
            raise ConfigError(
                f"on_error must be one of {sorted(_VALID_ON_ERROR)}, got {self.on_error!r}"
            )
        if not isinstance(self.workers, int) or self.workers < 1:
            raise ConfigError(f"workers must be >= 1, got {self.workers!r}")
        if self.blur_mode not in _VALID_BLUR_MODES:
            raise ConfigError(
                f"blur_mode must be one of {sorted(_VALID_BLUR_MODES)}, got {self.blur_mode!r}"
            )

    def to_dict(self) -> dict[str, object]:
        return asdict(self)
