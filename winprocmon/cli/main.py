"""Main CLI entry point for the Windows process monitor.

Provides a command-line interface using Click to run sampling cycles and
manage the monitor configuration.
"""
import click
import sys
from typing import Optional

from .. import __version__
from ..models.monitor_configuration import MonitorConfiguration
from ..services.config_manager import ConfigManager
from ..utils.logging import configure_default_logger


class CLIContext:
    """Context object for CLI commands."""

    def __init__(self):
        self.config: Optional[MonitorConfiguration] = None
        self.config_manager: Optional[ConfigManager] = None
        self.verbose = False
        self.quiet = False


pass_context = click.make_pass_decorator(CLIContext, ensure=True)


@click.group()
@click.option('--config', '-c',
              type=click.Path(),
              help='Path to configuration file')
@click.option('--verbose', '-v',
              is_flag=True,
              help='Enable verbose output')
@click.option('--quiet', '-q',
              is_flag=True,
              help='Suppress non-essential output')
@click.version_option(__version__, prog_name='winprocmon')
@pass_context
def cli(ctx: CLIContext, config: Optional[str], verbose: bool, quiet: bool):
    """Windows process monitor.

    Samples per-process CPU and memory utilization using tasklist and wmic.
    """
    ctx.verbose = verbose
    ctx.quiet = quiet

    if verbose and quiet:
        click.echo("Error: --verbose and --quiet cannot be used together", err=True)
        sys.exit(1)

    try:
        ctx.config_manager = ConfigManager(config)
        ctx.config = ctx.config_manager.load_config_with_env_override(config)

        level = "DEBUG" if verbose else ctx.config.log_level.value
        if quiet:
            level = "ERROR"
        configure_default_logger(
            level=level,
            log_file=ctx.config.get_log_file_path(),
            max_size_mb=ctx.config.max_log_size_mb,
            backup_count=ctx.config.backup_count,
        )

    except Exception as e:
        if not quiet:
            click.echo(f"Error initializing: {e}", err=True)
        if verbose:
            import traceback
            click.echo(traceback.format_exc(), err=True)
        sys.exit(1)


from .commands.collect import collect
from .commands.config import config as config_cmd

cli.add_command(collect)
cli.add_command(config_cmd, name='config')


def main():
    """Main entry point for the CLI application."""
    try:
        cli()
    except KeyboardInterrupt:
        click.echo("\nOperation cancelled by user")
        sys.exit(1)


if __name__ == '__main__':
    main()
