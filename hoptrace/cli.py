import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler

from . import __version__
from .config import (
    DEFAULT_MAX_TTL, DEFAULT_PORT, DEFAULT_START_TTL, DEFAULT_TIMEOUT, MAX_TTL_LIMIT,
)
from .exceptions import TraceError
from .probe import Tracer
from .output import ConsoleOutput, JsonExporter


console = Console()


def setup_logging(verbose: bool):
    """Route library logging through rich, on stderr"""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=verbose)],
    )


@click.command()
@click.argument('target')
@click.option('-p', '--port', default=DEFAULT_PORT, type=click.IntRange(1, 65535),
              help=f'Destination UDP port (default: {DEFAULT_PORT})')
@click.option('-f', '--first-ttl', default=DEFAULT_START_TTL, type=click.IntRange(1, MAX_TTL_LIMIT),
              help=f'TTL of the first probe (default: {DEFAULT_START_TTL})')
@click.option('-m', '--max-ttl', default=DEFAULT_MAX_TTL, type=click.IntRange(1, MAX_TTL_LIMIT),
              help=f'Maximum TTL (default: {DEFAULT_MAX_TTL})')
@click.option('-w', '--timeout', default=DEFAULT_TIMEOUT, type=click.FloatRange(min=0, min_open=True),
              help=f'Seconds to wait for each reply (default: {DEFAULT_TIMEOUT:g})')
@click.option('--dns/--no-dns', default=True,
              help='Enable/disable reverse DNS lookups (default: enabled)')
@click.option('--json', 'json_path', type=click.Path(dir_okay=False),
              help='Export results to JSON file')
@click.option('-v', '--verbose', is_flag=True, help='Log every probe and reply')
@click.version_option(version=__version__)
def main(target: str, port: int, first_ttl: int, max_ttl: int, timeout: float,
         dns: bool, json_path: Optional[str], verbose: bool):
    """
    hoptrace - traceroute without root.
    
    Trace the route to TARGET (IPv4 address or hostname) with UDP probes,
    reading ICMP replies from an unprivileged ICMP socket.
    
    Examples:
    
        hoptrace 8.8.8.8
        
        hoptrace example.com --no-dns -m 15
        
        hoptrace 1.1.1.1 --json output.json
    """
    setup_logging(verbose)
    
    if first_ttl > max_ttl:
        raise click.BadParameter(
            f"must not exceed --max-ttl ({max_ttl})", param_hint="'--first-ttl'"
        )
    
    output = ConsoleOutput(console)
    tracer = Tracer(
        address=target,
        port=port,
        start_ttl=first_ttl,
        max_ttl=max_ttl,
        timeout=timeout,
        dns_lookup=dns
    )
    
    output.print_header(target, port, first_ttl, max_ttl, timeout)
    future = tracer.trace_async()
    
    try:
        for hop in tracer.hops():
            output.print_hop_realtime(hop)
        result = future.result()
    except TraceError as e:
        output.print_error(str(e))
        sys.exit(1)
    except KeyboardInterrupt:
        tracer.stop()
        console.print("\n[yellow]Interrupted[/]")
        sys.exit(130)
    
    output.print_separator()
    output.print_summary(result)
    
    if json_path:
        json_file = Path(json_path)
        JsonExporter().export(result, port=port, output_path=json_file)
        console.print(f"\n[dim]Results exported to:[/] {json_file.absolute()}")


if __name__ == '__main__':
    main()
