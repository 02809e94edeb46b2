"""
packets.py

Parsing of the ICMP messages received by the listener, including the
IPv4 and UDP headers quoted inside ICMP error messages.
"""

import socket
import struct
from typing import Optional

from .exceptions import PacketParseError
from .models import ICMPType


ICMP_HEADER_LEN = 8
IPV4_MIN_HEADER_LEN = 20

# Types whose body is "unused" word + original IP header + 8 bytes of data
ERROR_TYPES = (ICMPType.DESTINATION_UNREACHABLE, ICMPType.TIME_EXCEEDED)


class IPv4Header:
    """Represents the fixed part of an IPv4 header."""

    def __init__(self, raw: bytes):
        if len(raw) < IPV4_MIN_HEADER_LEN:
            raise PacketParseError(
                f"IPv4 header too short: {len(raw)} bytes (expected at least 20)"
            )

        try:
            header = struct.unpack("!BBHHHBBH4s4s", raw[:IPV4_MIN_HEADER_LEN])
        except struct.error as e:
            raise PacketParseError(f"Malformed IPv4 header: {e}") from e

        self.version = header[0] >> 4
        self.ihl = header[0] & 0xF
        if self.version != 4:
            raise PacketParseError(f"Not an IPv4 header: version {self.version}")
        if self.ihl < 5:
            raise PacketParseError(f"Invalid IHL: {self.ihl} (must be at least 5)")

        self.header_length = self.ihl * 4
        if len(raw) < self.header_length:
            raise PacketParseError(
                f"Packet too short for IHL: {len(raw)} bytes (expected {self.header_length})"
            )

        self.length = header[2]
        self.ttl = header[5]
        self.proto = header[6]
        self.src = socket.inet_ntoa(header[8])
        self.dst = socket.inet_ntoa(header[9])
        self.payload = raw[self.header_length:]

    def __repr__(self) -> str:
        return f"IPv4Header(src={self.src}, dst={self.dst}, ttl={self.ttl}, proto={self.proto})"


class ICMPMessage:
    """Represents a received ICMP message."""

    def __init__(self, raw: bytes):
        self.raw = raw
        self.original_ip: Optional[IPv4Header] = None
        self.original_sport: Optional[int] = None
        self.original_dport: Optional[int] = None
        self._parse(raw)

    def _parse(self, raw: bytes) -> None:
        if len(raw) < ICMP_HEADER_LEN:
            raise PacketParseError(
                f"ICMP message too short: {len(raw)} bytes (expected at least 8)"
            )

        self.type, self.code, self.checksum, self.rest = struct.unpack(
            "!BBHI", raw[:ICMP_HEADER_LEN]
        )
        self.body = raw[ICMP_HEADER_LEN:]

        if self.type in ERROR_TYPES:
            self._parse_quoted_datagram(self.body)

    def _parse_quoted_datagram(self, body: bytes) -> None:
        """Extract the original datagram headers; routers may truncate them."""
        try:
            self.original_ip = IPv4Header(body)
        except PacketParseError:
            return

        quoted = self.original_ip.payload
        if self.original_ip.proto == socket.IPPROTO_UDP and len(quoted) >= 4:
            self.original_sport, self.original_dport = struct.unpack("!HH", quoted[:4])

    @property
    def original_destination(self) -> Optional[str]:
        return self.original_ip.dst if self.original_ip else None

    def __repr__(self) -> str:
        return f"ICMPMessage(type={self.type}, code={self.code})"


def parse_icmp(data: bytes) -> ICMPMessage:
    """
    Parse bytes read from an ICMP datagram socket.

    Linux delivers the bare ICMP message while BSD-derived stacks prepend
    the IPv4 header. A leading byte with version nibble 4 cannot be an
    ICMP type we handle, so it is taken as an IPv4 header and stripped.

    Raises:
        PacketParseError: if the bytes are not a well-formed ICMP message
    """
    if not data:
        raise PacketParseError("Empty ICMP packet")

    if data[0] >> 4 == 4:
        data = IPv4Header(data).payload

    return ICMPMessage(data)
