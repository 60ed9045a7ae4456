"""pixiquant run — quantify a folder of TIFF images into a CSV table."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

import click
from rich.table import Table

from pixiquant.cli.utils import check_output_path, console, error_handler, make_progress

if TYPE_CHECKING:
    from pixiquant.core import BatchResult, PipelineConfig


@click.command()
@click.argument("source", type=click.Path(exists=True, file_okay=False))
@click.option(
    "-o", "--output", required=True, type=click.Path(),
    help="CSV file to write.",
)
@click.option("--sigma", type=float, default=None, help="Background blur sigma in pixels (default: 10).")
@click.option("--crop", type=float, default=None, help="Fraction cropped from each border (default: 0.05).")
@click.option("--well-position", type=int, default=None, help="1-based filename token holding the well (default: 2).")
@click.option("--delimiter", default=None, help="Filename token separator (default: '_').")
@click.option("--pattern", default=None, help="Glob for image files (default: '*.tif*').")
@click.option(
    "--files", multiple=True, type=click.Path(exists=True, dir_okay=False),
    help="Specific TIFF files to process (instead of scanning SOURCE).",
)
@click.option("--skip-errors", is_flag=True, help="Skip images that fail instead of aborting.")
@click.option("--workers", type=int, default=None, help="Number of worker processes (default: 1).")
@click.option(
    "--config", "config_path", type=click.Path(exists=True, dir_okay=False), default=None,
    help="YAML configuration file; command-line options take precedence.",
)
@click.option("--overwrite", is_flag=True, help="Overwrite output file if it exists.")
@error_handler
def run(
    source: str,
    output: str,
    sigma: float | None,
    crop: float | None,
    well_position: int | None,
    delimiter: str | None,
    pattern: str | None,
    files: tuple[str, ...],
    skip_errors: bool,
    workers: int | None,
    config_path: str | None,
    overwrite: bool,
) -> None:
    """Quantify total intensity and non-black pixels of every image."""
    from pixiquant.io import FileScanner, write_csv
    from pixiquant.measure import BatchPipeline

    out_path = Path(output).expanduser()
    check_output_path(out_path, overwrite)

    config = _build_config(
        config_path,
        sigma=sigma,
        crop_fraction=crop,
        well_position=well_position,
        well_delimiter=delimiter,
        file_pattern=pattern,
        on_error="skip" if skip_errors else None,
        workers=workers,
    )

    source_files = [Path(f) for f in files] if files else None
    scan_result = FileScanner().scan(Path(source), config.file_pattern, files=source_files)
    for warning in scan_result.warnings:
        console.print(f"[yellow]Warning:[/yellow] {warning}")

    pipeline = BatchPipeline(config)
    with make_progress() as progress:
        task = progress.add_task("Quantifying images...", total=len(scan_result.files))

        def on_progress(current: int, total: int, filename: str) -> None:
            progress.update(task, total=total, completed=current,
                            description=f"Quantifying {filename}")

        result = pipeline.execute(scan_result.files, progress_callback=on_progress)

    if not result.records:
        console.print("[red]Error:[/red] No images could be quantified.")
        _show_warnings(result)
        raise SystemExit(1)

    write_csv(result.records, out_path)
    _show_summary(result, config)
    _show_warnings(result)
    console.print(f"[green]Wrote {len(result.records)} records to {out_path}[/green]")


def _build_config(config_path: str | None, **overrides: Any) -> PipelineConfig:
    """Load the config file (if any) and apply non-None command-line values."""
    from pixiquant.core.config import PipelineConfig
    from pixiquant.io.serialization import config_from_yaml

    if config_path is not None:
        return config_from_yaml(Path(config_path), **overrides)
    return PipelineConfig(**{k: v for k, v in overrides.items() if v is not None})


def _show_summary(result: BatchResult, config: PipelineConfig) -> None:
    """Print a table of per-image results."""
    table = Table(title=f"Intensity (sigma={config.sigma}, crop={config.crop_fraction})")
    table.add_column("Well")
    table.add_column("File")
    table.add_column("Total intensity", justify="right")
    table.add_column("Non-black pixels", justify="right")
    table.add_column("Pixels", justify="right")

    for rec in result.records:
        table.add_row(
            rec.well or "-",
            rec.filename,
            f"{rec.total_intensity:.2f}",
            str(rec.non_black_pixels),
            str(rec.total_pixels_in_image),
        )
    console.print(table)
    console.print(f"[dim]Elapsed: {result.elapsed_seconds:.2f}s[/dim]")


def _show_warnings(result: BatchResult) -> None:
    """Print skipped images and per-image warnings such as a missing well."""
    for warning in result.warnings:
        console.print(f"[yellow]Warning:[/yellow] {warning}")
