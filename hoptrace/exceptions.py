"""
Exceptions raised by hoptrace

Two families exist. TraceError and its subclasses escape Tracer.trace()
and abort the trace. HopError and its subclasses end a single hop's
listening attempt; the orchestrator absorbs them and stops the trace
without an error.
"""

from typing import Optional


class TraceError(Exception):
    """Base class for errors that abort a trace"""

    def __init__(self, message: str, result=None):
        super().__init__(message)
        # Hops collected before the failure (a TraceResult), if any
        self.result = result


class ConfigurationError(TraceError):
    """Raised before any network I/O when the tracer settings are invalid"""
    pass


class TracerBusyError(TraceError):
    """Raised when a trace is started on a Tracer that is already tracing"""
    pass


class ProbeError(TraceError):
    """Hard I/O failure while setting up or sending a probe"""

    def __init__(self, message: str, ttl: Optional[int] = None, result=None):
        super().__init__(message, result)
        self.ttl = ttl


class ResolveError(ProbeError):
    """Target address could not be resolved to an IPv4 UDP endpoint"""
    pass


class SocketSetupError(ProbeError):
    """UDP socket could not be created or connected"""
    pass


class TTLSetupError(ProbeError):
    """TTL could not be applied to the outgoing socket"""
    pass


class SendError(ProbeError):
    """Probe datagram could not be written"""
    pass


class ListenerSetupError(ProbeError):
    """ICMP listening socket could not be opened or configured"""
    pass


class HopError(Exception):
    """Soft failure of one hop's listening attempt"""
    pass


class ListenTimeout(HopError):
    """No ICMP message arrived before the per-hop deadline"""
    pass


class ReadError(HopError):
    """Reading from the ICMP socket failed"""
    pass


class PacketParseError(HopError):
    """Received bytes are not a well-formed ICMP message"""
    pass


class UnexpectedICMPType(HopError):
    """An ICMP message of a type other than 3 or 11 was received"""

    def __init__(self, icmp_type: int, address: str):
        super().__init__(f"Unexpected ICMP message type {icmp_type} from {address}")
        self.icmp_type = icmp_type
        self.address = address
