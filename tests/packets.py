"""Builders for ICMP test packets"""

import socket
import struct


def ipv4_header(src: str, dst: str, proto: int, payload_len: int = 0, ttl: int = 1) -> bytes:
    return struct.pack(
        '!BBHHHBBH4s4s', 0x45, 0, 20 + payload_len, 0, 0, ttl, proto, 0,
        socket.inet_aton(src), socket.inet_aton(dst)
    )


def icmp_error(icmp_type: int, code: int = 0, dst: str = '192.0.2.1',
               dport: int = 33434, quote: bool = True) -> bytes:
    """ICMP error quoting the UDP probe sent from 10.0.0.99 to dst:dport"""
    message = struct.pack('!BBHI', icmp_type, code, 0, 0)
    if quote:
        udp = struct.pack('!HHHH', 50000, dport, 8, 0)
        message += ipv4_header('10.0.0.99', dst, socket.IPPROTO_UDP, len(udp)) + udp
    return message


def echo_reply(ident: int = 1, seq: int = 1) -> bytes:
    return struct.pack('!BBHHH', 0, 0, 0, ident, seq) + b'payload'


def with_ip_header(message: bytes, src: str = '10.0.0.1', dst: str = '10.0.0.99') -> bytes:
    return ipv4_header(src, dst, socket.IPPROTO_ICMP, len(message), ttl=64) + message
