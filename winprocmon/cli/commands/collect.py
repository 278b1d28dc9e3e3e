"""Collect command for running sampling cycles."""

import json
import sys

import click

from ...exceptions import ProcessMonitorException
from ...services.metrics_collector import ProcessMetricsCollector


@click.command()
@click.option("--cycles", "-n", type=click.IntRange(min=1), default=2,
              show_default=True, help="Number of sampling cycles to run")
@click.option("--json", "output_json", is_flag=True, help="Output in JSON format")
@click.option("--metrics", "output_metrics", is_flag=True,
              help="Print flattened metric paths instead of a table")
@click.option("--top", type=click.IntRange(min=1), default=None,
              help="Only show the N largest CPU consumers")
@click.pass_context
def collect(ctx, cycles: int, output_json: bool, output_metrics: bool, top):
    """Sample process utilization and print the last cycle.

    CPU utilization needs a previous cycle as baseline, so the first cycle
    always reports 0 %.

    Examples:
      winprocmon collect
      winprocmon collect --cycles 5 --json
      winprocmon collect --metrics
    """
    cli_ctx = ctx.find_root().obj
    collector = ProcessMetricsCollector(cli_ctx.config)

    try:
        for index, _ in enumerate(collector.run(cycles), 1):
            if cli_ctx.verbose:
                click.echo(f"Cycle {index}/{cycles} completed", err=True)
    except ProcessMonitorException as e:
        click.echo(f"Error collecting process metrics: {e}", err=True)
        sys.exit(1)

    if output_metrics:
        for sample in collector.get_metrics():
            click.echo(f"{sample.path}={sample.value}")
        return

    if top:
        records = collector.top_processes(top)
    else:
        records = [collector.processes[name] for name in sorted(collector.processes)]

    if output_json:
        data = {
            "cycles": collector.cycle_count,
            "total_memory_mb": collector.parser.total_mem_size_mb,
            "processes": {record.name: record.to_dict() for record in records},
        }
        click.echo(json.dumps(data, indent=2))
        return

    click.echo(f"=== {collector.parser.process_group_name} ===")
    click.echo(f"Total Memory: {collector.parser.total_mem_size_mb} MB")
    click.echo(f"{'Image Name':<40} {'CPU %':>8} {'Mem %':>8}")
    for record in records:
        click.echo(
            f"{record.name:<40} {record.cpu_percent:>8.2f} {record.memory_percent:>8.2f}"
        )
