"""Well identifiers parsed from plate-reader image filenames."""

from __future__ import annotations

from pathlib import Path


def normalize_well(token: str) -> str:
    """Zero-pad a two-character well name between letter and number.

    ``"B7"`` becomes ``"B07"``; longer tokens such as ``"D12"`` are
    returned unchanged.
    """
    if len(token) == 2:
        return f"{token[0]}0{token[1]}"
    return token


def parse_well(
    filename: str | Path,
    position: int = 2,
    delimiter: str = "_",
) -> str | None:
    """Extract the well name from an image filename.

    The default matches Cytation Gen5 exports such as
    ``"Bright Field_D7_1_001.tif"``, where the well is the second
    underscore-separated token.

    Args:
        filename: File name or path; only the stem is parsed.
        position: 1-based index of the well token.
        delimiter: Token separator.

    Returns:
        The normalized well name, or None if the filename has fewer tokens.

    Raises:
        ValueError: If position < 1 or delimiter is empty.
    """
    if position < 1:
        raise ValueError(f"position must be >= 1, got {position}")
    if not delimiter:
        raise ValueError("delimiter must not be empty")

    tokens = Path(filename).stem.split(delimiter)
    if position > len(tokens):
        return None
    return normalize_well(tokens[position - 1])
