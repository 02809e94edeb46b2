"""
ICMP response listener

Uses an unprivileged ICMP datagram socket (SOCK_DGRAM + IPPROTO_ICMP)
instead of a raw socket. On Linux the socket is only available to groups
listed in net.ipv4.ping_group_range; macOS allows it for every user.
"""

import logging
import socket
from typing import Callable, Optional

from ..exceptions import (
    ListenerSetupError, ListenTimeout, ReadError, UnexpectedICMPType,
)
from ..models import ICMPReply, ICMPType
from ..packets import parse_icmp
from .base import BaseListener

logger = logging.getLogger(__name__)


class ICMPListener(BaseListener):
    """
    Receives the first ICMP message arriving within the timeout.
    
    Only Time Exceeded and Destination Unreachable are meaningful; any
    other type raises UnexpectedICMPType. The message is not checked
    against the probe that was sent: with a single outstanding probe,
    whatever arrives inside the window is taken as its answer.
    """
    
    RECV_BUFSIZE = 1024
    
    def __init__(self, timeout: float = 3.0, bind_address: str = '0.0.0.0',
                 socket_factory: Optional[Callable[..., socket.socket]] = None):
        super().__init__(timeout)
        self.bind_address = bind_address
        self._socket_factory = socket_factory or socket.socket
        self._sock: Optional[socket.socket] = None
        self._open()
    
    def _open(self):
        """Open, bind and arm the listening socket"""
        try:
            self._sock = self._socket_factory(
                socket.AF_INET, socket.SOCK_DGRAM, socket.IPPROTO_ICMP
            )
        except OSError as e:
            raise ListenerSetupError(
                f"Cannot open ICMP datagram socket: {e}. On Linux, check "
                "that your group is within net.ipv4.ping_group_range."
            ) from e
        
        try:
            self._sock.bind((self.bind_address, 0))
            self._sock.settimeout(self.timeout)
        except OSError as e:
            self.close()
            raise ListenerSetupError(f"Cannot configure ICMP socket: {e}") from e
    
    def receive(self) -> ICMPReply:
        """Wait for one ICMP message and classify it"""
        if self._sock is None:
            raise ReadError("Listener is closed")
        
        try:
            data, peer = self._sock.recvfrom(self.RECV_BUFSIZE)
        except socket.timeout:
            raise ListenTimeout(f"No ICMP reply within {self.timeout}s") from None
        except OSError as e:
            raise ReadError(f"ICMP read failed: {e}") from e
        
        address = peer[0]
        message = parse_icmp(data)
        logger.debug(
            f"ICMP type={message.type} code={message.code} from {address} "
            f"quoting dst={message.original_destination} dport={message.original_dport}"
        )
        
        if message.type == ICMPType.TIME_EXCEEDED:
            # Packet expired along the way: this is the hop we asked for
            icmp_type = ICMPType.TIME_EXCEEDED
        elif message.type == ICMPType.DESTINATION_UNREACHABLE:
            # Can't trace further
            icmp_type = ICMPType.DESTINATION_UNREACHABLE
        else:
            raise UnexpectedICMPType(message.type, address)
        
        return ICMPReply(
            address=address,
            icmp_type=icmp_type,
            code=message.code,
            original_destination=message.original_destination,
            original_port=message.original_dport,
        )
    
    def close(self):
        """Close socket"""
        if self._sock is not None:
            self._sock.close()
            self._sock = None
