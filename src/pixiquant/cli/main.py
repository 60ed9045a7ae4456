"""pixiquant CLI — top-level Click group."""

from __future__ import annotations

import click


@click.group()
@click.version_option(package_name="pixiquant")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logs and full tracebacks.")
def cli(verbose: bool) -> None:
    """pixiquant — pixel intensity quantification of well images."""
    from pixiquant.cli import utils

    utils.verbose = verbose
    utils.configure_logging(verbose)


def _register_commands() -> None:
    """Register all subcommands — imports deferred to avoid loading heavy deps at startup."""
    from pixiquant.cli.config_cmd import write_config
    from pixiquant.cli.inspect_cmd import inspect_cmd
    from pixiquant.cli.run import run

    cli.add_command(inspect_cmd)
    cli.add_command(run)
    cli.add_command(write_config)


_register_commands()
