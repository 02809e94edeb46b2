"""
hoptrace - Unprivileged UDP traceroute

Discovers the route to an IPv4 target by sending zero-length UDP probes
with increasing TTL and listening for ICMP replies on an unprivileged
ICMP datagram socket.
"""

__version__ = "1.0.0"
__author__ = "hoptrace"

from .config import TracerConfig
from .exceptions import (
    TraceError, ConfigurationError, TracerBusyError, ProbeError,
    ResolveError, SocketSetupError, TTLSetupError, SendError,
    ListenerSetupError, HopError, ListenTimeout, ReadError,
    PacketParseError, UnexpectedICMPType,
)
from .models import END_OF_TRACE, NO_RESPONSE, Hop, ICMPType, TraceResult
from .probe import Tracer

__all__ = [
    'Tracer', 'TracerConfig', 'Hop', 'TraceResult', 'ICMPType',
    'END_OF_TRACE', 'NO_RESPONSE',
    'TraceError', 'ConfigurationError', 'TracerBusyError', 'ProbeError',
    'ResolveError', 'SocketSetupError', 'TTLSetupError', 'SendError',
    'ListenerSetupError', 'HopError', 'ListenTimeout', 'ReadError',
    'PacketParseError', 'UnexpectedICMPType',
]
