"""pixiquant inspect — write the intermediate images of one correction."""

from __future__ import annotations

from pathlib import Path

import click

from pixiquant.cli.utils import console, error_handler
from pixiquant.core.config import PipelineConfig

_DEFAULTS = PipelineConfig()


@click.command("inspect")
@click.argument("image", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "-o", "--output-dir", required=True, type=click.Path(file_okay=False),
    help="Directory for the stage images (created if missing).",
)
@click.option("--sigma", type=float, default=_DEFAULTS.sigma, show_default=True, help="Background blur sigma in pixels.")
@click.option("--crop", type=float, default=_DEFAULTS.crop_fraction, show_default=True, help="Fraction cropped from each border.")
@click.option(
    "--blur-mode", default=_DEFAULTS.blur_mode, show_default=True,
    type=click.Choice(["wrap", "nearest", "reflect", "mirror", "constant"]),
    help="Boundary handling of the Gaussian blur.",
)
@error_handler
def inspect_cmd(image: str, output_dir: str, sigma: float, crop: float, blur_mode: str) -> None:
    """Save raw, background, corrected, inverted and cropped images as TIFF."""
    from pixiquant.io.tiff import read_image, write_image
    from pixiquant.measure import BackgroundCorrector, Cropper, IntensityAggregator

    src = Path(image)
    out_dir = Path(output_dir).expanduser()
    out_dir.mkdir(parents=True, exist_ok=True)

    raw = read_image(src)
    stages = BackgroundCorrector(mode=blur_mode).stages(raw, sigma)
    cropped = Cropper().crop(stages.inverted, crop)

    outputs = {
        "raw": raw,
        "background": stages.background,
        "corrected": stages.corrected,
        "inverted": stages.inverted,
        "cropped": cropped,
    }
    for name, buffer in outputs.items():
        path = out_dir / f"{src.stem}_{name}.tif"
        write_image(path, buffer.first_frame())
        console.print(f"  {name:<11} {path}")

    intensity, black = IntensityAggregator().aggregate(cropped)
    console.print(
        f"[green]{src.name}[/green]: total_intensity={intensity:.2f}, "
        f"black pixels={black} of {cropped.rows * cropped.cols}"
    )
