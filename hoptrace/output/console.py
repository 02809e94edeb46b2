"""
Rich console output for hoptrace - with real-time per-hop printing
"""

from typing import Optional
from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from ..models import Hop, TraceResult, StopReason, ICMPType


# Status styling
STATUS_STYLES = {
    'expired': ('⏩', 'green'),
    'destination': ('✅', 'cyan'),
    'timeout': ('⏳', 'yellow'),
}

STOP_MESSAGES = {
    StopReason.MAX_TTL: "Max TTL reached",
    StopReason.UNREACHABLE: "Destination unreachable",
    StopReason.TIMEOUT: "No reply before timeout",
    StopReason.LISTENER_ERROR: "Listener error",
    StopReason.UNEXPECTED_ICMP: "Unexpected ICMP message",
    StopReason.CANCELLED: "Cancelled",
    StopReason.PROBE_ERROR: "Probe error",
}

LINE_WIDTH = 80


class ConsoleOutput:
    """
    Rich console output for traceroute results.
    
    Features:
    - Real-time per-hop output
    - Summary panel with the stop reason
    """
    
    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()
        self._table_header_printed = False
    
    def print_header(self, target: str, port: int, start_ttl: int,
                     max_ttl: int, timeout: float):
        """Print trace header"""
        from .. import __version__
        
        content = Text()
        content.append("🔍 hoptrace", style="bold cyan")
        content.append(f" v{__version__}\n", style="dim")
        content.append("Target: ", style="dim")
        content.append(f"{target}:{port}", style="bold")
        content.append("\n")
        content.append(f"TTL {start_ttl}..{max_ttl}  |  Timeout {timeout:g}s per hop", style="dim")
        
        panel = Panel(content, border_style="cyan", padding=(0, 1))
        self.console.print(panel)
        self.console.print()
    
    def print_table_header(self):
        """Print the table header row"""
        if self._table_header_printed:
            return
        
        # Column order: TTL | Latency | Address | Status | Host
        header = Text()
        header.append(f"{'TTL':>3}  ", style="bold magenta")
        header.append(f"{'Latency (ms)':>12}  ", style="bold magenta")
        header.append(f"{'Address':<16}  ", style="bold magenta")
        header.append(f"{'Status':<6}  ", style="bold magenta")
        header.append("Host", style="bold magenta")
        
        self.console.print("─" * LINE_WIDTH)
        self.console.print(header)
        self.console.print("─" * LINE_WIDTH)
        self._table_header_printed = True
    
    def print_hop_realtime(self, hop: Hop):
        """Print a single hop result in real-time"""
        self.print_table_header()
        
        icon, style = STATUS_STYLES[self._status(hop)]
        
        line = Text()
        line.append(f"{hop.ttl:>3}  ", style="dim")
        line.append(f"{self._format_latency(hop):>12}  ")
        line.append(f"{hop.address:<16}  ", style="" if hop.responded else "yellow")
        line.append(f"{icon:<6}  ", style=style)
        line.append(hop.host or "-", style="" if hop.host else "dim")
        
        self.console.print(line)
    
    def print_separator(self):
        """Print table separator"""
        self.console.print("─" * LINE_WIDTH)
    
    def print_summary(self, result: TraceResult):
        """Print summary panel"""
        content = Text()
        
        if result.reached_destination:
            content.append("✅ ", style="green")
            content.append("Destination Reached: ", style="bold")
        else:
            content.append("❌ ", style="red")
            content.append("Destination Not Reached: ", style="bold red")
        content.append(f"{len(result)} hops", style="dim")
        
        last = result.last_hop
        if last is not None and last.responded:
            content.append(f", last reply {last.latency:.1f}ms from {last.address}", style="dim")
        
        content.append("\n")
        content.append("Stopped: ", style="bold")
        content.append(STOP_MESSAGES.get(result.stop_reason, str(result.stop_reason)), style="dim")
        
        panel = Panel(
            content,
            title=Text("📊 Summary", style="bold"),
            border_style="green" if result.reached_destination else "red",
            padding=(0, 1)
        )
        self.console.print()
        self.console.print(panel)
    
    def print_error(self, message: str):
        """Print error message"""
        self.console.print(f"[bold red]Error:[/] {message}")
        
    def _status(self, hop: Hop) -> str:
        if not hop.responded:
            return 'timeout'
        if hop.icmp_type == ICMPType.DESTINATION_UNREACHABLE:
            return 'destination'
        return 'expired'
    
    def _format_latency(self, hop: Hop) -> str:
        if not hop.responded:
            return "*"
        return f"{hop.latency:.2f}"
