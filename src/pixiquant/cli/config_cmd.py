"""pixiquant write-config — write the default settings as YAML."""

from __future__ import annotations

from pathlib import Path

import click

from pixiquant.cli.utils import check_output_path, console, error_handler


@click.command("write-config")
@click.argument("output", type=click.Path())
@click.option("--overwrite", is_flag=True, help="Overwrite output file if it exists.")
@error_handler
def write_config(output: str, overwrite: bool) -> None:
    """Write the default pipeline configuration to a YAML file."""
    from pixiquant.core.config import PipelineConfig
    from pixiquant.io.serialization import config_to_yaml

    out_path = Path(output).expanduser()
    check_output_path(out_path, overwrite)
    config_to_yaml(PipelineConfig(), out_path)
    console.print(f"[green]Wrote default configuration to {out_path}[/green]")
