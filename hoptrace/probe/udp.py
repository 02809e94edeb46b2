"""
UDP probe transmitter
"""

import logging
import socket
from typing import Callable, Optional

from ..config import MAX_TTL_LIMIT
from ..exceptions import ResolveError, SocketSetupError, TTLSetupError, SendError
from .base import BaseTransmitter

logger = logging.getLogger(__name__)


class UDPTransmitter(BaseTransmitter):
    """
    UDP probe sender (Unix-style traceroute, no raw sockets).
    
    Resolves the target, connects an ordinary UDP socket to it and, for
    each probe, sets the IP TTL and writes an empty datagram. Routers
    answer an expired probe with ICMP Time Exceeded; the destination
    answers with ICMP Destination Unreachable (port unreachable).
    
    A transmitter serves one hop: the orchestrator creates it, sends once
    and closes it.
    """
    
    def __init__(self, address: str, port: int,
                 socket_factory: Callable[..., socket.socket] = socket.socket):
        super().__init__(address, port)
        self._socket_factory = socket_factory
        self._sock: Optional[socket.socket] = None
        self.destination = self._resolve()
        self._connect()
    
    def _resolve(self) -> tuple[str, int]:
        """Resolve the target to an IPv4 UDP endpoint"""
        try:
            infos = socket.getaddrinfo(
                self.address, self.port, socket.AF_INET, socket.SOCK_DGRAM
            )
        except (socket.gaierror, UnicodeError) as e:
            raise ResolveError(
                f"Cannot resolve '{self.address}:{self.port}': {e}"
            ) from e
        
        if not infos:
            raise ResolveError(f"No IPv4 address for '{self.address}'")
        
        sockaddr = infos[0][4]
        return sockaddr[0], sockaddr[1]
    
    def _connect(self):
        """Create the UDP socket and connect it to the destination"""
        try:
            self._sock = self._socket_factory(socket.AF_INET, socket.SOCK_DGRAM)
        except OSError as e:
            raise SocketSetupError(f"Cannot create UDP socket: {e}") from e
        
        try:
            self._sock.connect(self.destination)
        except OSError as e:
            self.close()
            raise SocketSetupError(
                f"Cannot connect UDP socket to {self.destination[0]}:{self.destination[1]}: {e}"
            ) from e
    
    def send(self, ttl: int) -> None:
        """Send an empty UDP datagram with the given TTL"""
        if not 1 <= ttl <= MAX_TTL_LIMIT:
            raise TTLSetupError(f"TTL {ttl} outside 1..{MAX_TTL_LIMIT}", ttl=ttl)
        if self._sock is None:
            raise SendError("Transmitter is closed", ttl=ttl)
        
        try:
            self._sock.setsockopt(socket.IPPROTO_IP, socket.IP_TTL, ttl)
        except OSError as e:
            raise TTLSetupError(f"Cannot set TTL {ttl}: {e}", ttl=ttl) from e
        
        try:
            self._sock.send(b'')
        except OSError as e:
            raise SendError(f"Cannot send probe with TTL {ttl}: {e}", ttl=ttl) from e
        
        logger.debug(f"Sent UDP probe to {self.destination[0]}:{self.destination[1]} ttl={ttl}")
    
    def close(self):
        """Close socket"""
        if self._sock is not None:
            self._sock.close()
            self._sock = None
