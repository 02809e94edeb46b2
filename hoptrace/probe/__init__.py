"""
Probe engines for hoptrace
"""

from .base import BaseTransmitter, BaseListener
from .icmp import ICMPListener
from .udp import UDPTransmitter
from .tracer import Tracer

__all__ = ['BaseTransmitter', 'BaseListener', 'ICMPListener', 'UDPTransmitter', 'Tracer']
