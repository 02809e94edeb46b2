"""
Data models for hoptrace
"""

from dataclasses import dataclass, field, asdict
from datetime import datetime
from enum import IntEnum
from typing import Optional


# Address reported for a hop when no valid ICMP reply arrived
NO_RESPONSE = "*"


class ICMPType(IntEnum):
    """ICMPv4 message types hoptrace knows by name"""
    ECHO_REPLY = 0
    DESTINATION_UNREACHABLE = 3
    TIME_EXCEEDED = 11


class StopReason:
    """Why a trace loop ended"""
    MAX_TTL = 'max_ttl'
    UNREACHABLE = 'unreachable'
    TIMEOUT = 'timeout'
    LISTENER_ERROR = 'listener_error'
    UNEXPECTED_ICMP = 'unexpected_icmp'
    CANCELLED = 'cancelled'
    PROBE_ERROR = 'probe_error'


class _EndOfTrace:
    """Marker published on the live channel once a trace has finished"""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return 'END_OF_TRACE'


END_OF_TRACE = _EndOfTrace()


@dataclass(frozen=True)
class ICMPReply:
    """A classified ICMP message received by the listener"""
    address: str
    icmp_type: ICMPType
    code: int = 0
    # Destination of the datagram quoted inside the ICMP error, when present
    original_destination: Optional[str] = None
    original_port: Optional[int] = None

    @property
    def time_exceeded(self) -> bool:
        return self.icmp_type == ICMPType.TIME_EXCEEDED

    @property
    def unreachable(self) -> bool:
        return self.icmp_type == ICMPType.DESTINATION_UNREACHABLE


@dataclass(frozen=True)
class Hop:
    """One observation on the path, created once per TTL"""
    ttl: int
    address: str = NO_RESPONSE
    host: str = ""
    latency: float = 0.0  # milliseconds
    reachable: bool = False
    icmp_type: Optional[int] = None
    icmp_code: Optional[int] = None

    @property
    def responded(self) -> bool:
        return self.address != NO_RESPONSE

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class TraceResult:
    """Hops collected by one trace, in TTL order"""
    target: str = ""
    hops: list[Hop] = field(default_factory=list)
    started_at: datetime = field(default_factory=datetime.now)
    finished_at: Optional[datetime] = None
    stop_reason: Optional[str] = None

    def __len__(self) -> int:
        return len(self.hops)

    def __iter__(self):
        return iter(self.hops)

    @property
    def last_hop(self) -> Optional[Hop]:
        return self.hops[-1] if self.hops else None

    @property
    def reached_destination(self) -> bool:
        """True when the trace ended on a destination unreachable reply"""
        return self.stop_reason == StopReason.UNREACHABLE

    def to_dict(self) -> dict:
        return {
            "target": self.target,
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "stop_reason": self.stop_reason,
            "reached_destination": self.reached_destination,
            "hops": [hop.to_dict() for hop in self.hops],
        }
