"""Exception classes for the pixiquant core module."""

from __future__ import annotations


class PixiError(Exception):
    """Base exception for all pixiquant errors."""


class InvalidImageFormatError(PixiError):
    """Raised when a raster cannot be treated as (multi-frame) grayscale."""

    def __init__(self, detail: str | None = None) -> None:
        msg = f"Invalid image format: {detail}" if detail else "Invalid image format"
        super().__init__(msg)
        self.detail = detail


class InvalidCropFractionError(PixiError):
    """Raised when a crop fraction lies outside [0, 0.5)."""

    def __init__(self, fraction: float | None = None, detail: str | None = None) -> None:
        if detail:
            msg = f"Invalid crop fraction {fraction!r}: {detail}"
        elif fraction is not None:
            msg = f"Invalid crop fraction {fraction!r}: must satisfy 0 <= fraction < 0.5"
        else:
            msg = "Invalid crop fraction"
        super().__init__(msg)
        self.fraction = fraction


class DecodeError(PixiError):
    """Raised when an image file is unreadable or corrupt."""

    def __init__(self, path: str | None = None, reason: str | None = None) -> None:
        msg = f"Could not decode {path}" if path else "Could not decode image"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)
        self.path = path
        self.reason = reason


class ConfigError(PixiError):
    """Raised for invalid pipeline configuration values or files."""

    def __init__(self, detail: str | None = None) -> None:
        msg = f"Invalid configuration: {detail}" if detail else "Invalid configuration"
        super().__init__(msg)
        self.detail = detail


class ImageProcessingError(PixiError):
    """Raised when one image fails at a pipeline stage.

    Attributes:
        path: The image that failed.
        stage: One of ``decode``, ``correct``, ``crop``, ``aggregate``.
        reason: Message of the underlying error.
    """

    def __init__(self, path: str, stage: str, reason: str) -> None:
        super().__init__(f"{path}: {stage} failed — {reason}")
        self.path = path
        self.stage = stage
        self.reason = reason

    def __reduce__(self):  # type: ignore[no-untyped-def]
        return (type(self), (self.path, self.stage, self.reason))
