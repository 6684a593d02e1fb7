"""
pf-exporter entry point.

Usage:
    pf-exporter                                  Serve metrics on :9107/metrics
    pf-exporter --web.listen-address :9999       Serve on another port
    pf-exporter --mock                           Serve simulated pf statistics
    pf-exporter show                             One-shot table of current samples
"""

from __future__ import annotations

import logging

import click
from prometheus_client import CollectorRegistry

from pf_exporter import __version__
from pf_exporter.collector.base import SnapshotFetcher
from pf_exporter.collector.mock_fetcher import MockFetcher
from pf_exporter.collector.pfctl_fetcher import PfctlFetcher
from pf_exporter.config import (
    DEFAULT_DEVICE,
    DEFAULT_LISTEN_ADDRESS,
    DEFAULT_METRICS_PATH,
    ExporterConfig,
)
from pf_exporter.errors import ConfigError, OpenError
from pf_exporter.exporter import PfCollector
from pf_exporter.server import serve


log = logging.getLogger("pf_exporter")


def build_fetcher(config: ExporterConfig) -> SnapshotFetcher:
    if config.mock:
        return MockFetcher(with_queues=config.queues is not False)
    return PfctlFetcher(device=config.device, queues=config.queues)


def _open_collector(config: ExporterConfig) -> PfCollector:
    try:
        fetcher = build_fetcher(config)
    except OpenError as e:
        log.error("Failed to create pf exporter: %s", e)
        raise SystemExit(1)
    log.info("Reading statistics from %s", fetcher.name())
    return PfCollector(fetcher)


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="pf-exporter")
@click.option("--web.listen-address", "listen_address", default=DEFAULT_LISTEN_ADDRESS,
              envvar="PF_EXPORTER_LISTEN_ADDRESS", show_default=True,
              help="Address to listen on for web interface and telemetry")
@click.option("--web.telemetry-path", "metrics_path", default=DEFAULT_METRICS_PATH,
              envvar="PF_EXPORTER_TELEMETRY_PATH", show_default=True,
              help="Path under which to expose metrics")
@click.option("--pf.device", "device", default=DEFAULT_DEVICE,
              envvar="PF_EXPORTER_DEVICE", show_default=True,
              help="pf device to open")
@click.option("--pf.fd", "fd", default=-1, type=int, envvar="PF_EXPORTER_FD",
              help="Not supported: pfctl opens the pf device itself. Rejected if set")
@click.option("--pf.queues/--pf.no-queues", "queues", default=None, envvar="PF_EXPORTER_QUEUES",
              help="Collect queue statistics (default: only on OpenBSD)")
@click.option("--mock", is_flag=True, default=False, envvar="PF_EXPORTER_MOCK",
              help="Use simulated pf statistics")
@click.option("--verbose", is_flag=True, default=False, envvar="PF_EXPORTER_VERBOSE",
              help="Enable debug logging")
@click.pass_context
def cli(ctx, listen_address: str, metrics_path: str, device: str, fd: int,
        queues, mock: bool, verbose: bool):
    """Prometheus exporter for pf firewall statistics."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    config = ExporterConfig(
        listen_address=listen_address,
        metrics_path=metrics_path,
        device=device,
        fd=None if fd == -1 else fd,
        queues=queues,
        mock=mock,
    )
    try:
        config.validate()
    except ConfigError as e:
        raise click.UsageError(str(e))

    ctx.ensure_object(dict)
    ctx.obj["config"] = config

    # No subcommand: serve metrics
    if ctx.invoked_subcommand is None:
        collector = _open_collector(config)
        registry = CollectorRegistry()
        registry.register(collector)

        host, port = config.bind
        try:
            serve(registry, host, port, config.metrics_path)
        finally:
            collector.close()


@cli.command()
@click.pass_context
def show(ctx):
    """Collect once and print the samples that would be exported."""
    from rich.console import Console
    from rich.table import Table

    collector = _open_collector(ctx.obj["config"])
    try:
        samples = collector.collect_samples()
    finally:
        collector.close()

    console = Console()

    if not samples:
        console.print("\n[bold red]No samples collected -- pf could not be read.[/bold red]\n")
        raise SystemExit(1)

    table = Table(show_header=True, header_style="bold")
    table.add_column("Metric")
    table.add_column("Type", width=8)
    table.add_column("Labels")
    table.add_column("Value", justify="right")

    for sample in samples:
        desc = collector.catalog[sample.descriptor_id]
        labels = ", ".join(
            f'{name}="{value}"' for name, value in zip(desc.label_names, sample.label_values)
        )
        table.add_row(f"[cyan]{desc.name}[/cyan]", desc.kind, labels, str(sample.value))

    console.print(table)
    console.print()


if __name__ == "__main__":
    cli()
