"""Config command for configuration management."""

import click
import json
import os
import sys

from ...exceptions import ConfigurationException
from ...models.monitor_configuration import MonitorConfiguration


@click.group()
@click.pass_context
def config(ctx):
    """Manage monitor configuration.

    Examples:
      winprocmon config show
      winprocmon config init winprocmon.json
    """
    pass


@config.command()
@click.option("--json", "output_json", is_flag=True, help="Output in JSON format")
@click.pass_context
def show(ctx, output_json: bool):
    """Display current configuration."""
    cli_ctx = ctx.find_root().obj
    current_config = cli_ctx.config_manager.get_current_config()
    if not current_config:
        click.echo("No configuration loaded", err=True)
        sys.exit(1)

    if output_json:
        click.echo(json.dumps(current_config.model_dump(mode="json"), indent=2))
    else:
        click.echo("=== Current Configuration ===")
        for line in current_config.describe():
            click.echo(line)


@config.command()
@click.argument("path", type=click.Path(dir_okay=False))
@click.option("--force", is_flag=True, help="Overwrite an existing file")
@click.pass_context
def init(ctx, path: str, force: bool):
    """Write a default configuration file to PATH."""
    cli_ctx = ctx.find_root().obj

    if os.path.exists(path) and not force:
        click.echo(f"File already exists: {path} (use --force to overwrite)", err=True)
        sys.exit(1)

    try:
        written = cli_ctx.config_manager.save_config(
            MonitorConfiguration.create_default(), path
        )
    except ConfigurationException as e:
        click.echo(f"Error writing configuration: {e}", err=True)
        sys.exit(1)

    if not cli_ctx.quiet:
        click.echo(f"Configuration written to {written}")
