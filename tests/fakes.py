"""
Scripted stand-ins for the transmitter and listener.

A FakeNetwork holds a script mapping each TTL to what the listener should
produce for it: an ICMPReply to return, or a HopError to raise. TTLs that
are not scripted wait out the timeout and raise ListenTimeout.
"""

import threading
import time
from typing import Callable, Optional

from hoptrace.exceptions import ListenTimeout, ProbeError
from hoptrace.models import ICMPReply, ICMPType
from hoptrace.probe import Tracer
from hoptrace.probe.base import BaseListener, BaseTransmitter

TARGET = '192.0.2.1'


def expired(ttl: int) -> ICMPReply:
    return ICMPReply(address=f'10.0.0.{ttl}', icmp_type=ICMPType.TIME_EXCEEDED)


def unreachable(address: str = TARGET) -> ICMPReply:
    return ICMPReply(address=address, icmp_type=ICMPType.DESTINATION_UNREACHABLE, code=3)


class FakeTransmitter(BaseTransmitter):

    def __init__(self, network: 'FakeNetwork', address: str, port: int):
        super().__init__(address, port)
        self.network = network
        if network.setup_error is not None:
            raise network.setup_error

    def send(self, ttl: int) -> None:
        self.network.sent.append(ttl)
        if self.network.on_send:
            self.network.on_send(ttl)
        error = self.network.send_errors.get(ttl)
        if error is not None:
            raise error
        self.network.deliver(ttl)

    def close(self):
        self.network.closed_transmitters += 1


class FakeListener(BaseListener):

    def __init__(self, network: 'FakeNetwork', timeout: float):
        super().__init__(timeout)
        self.network = network
        if network.listener_error is not None:
            raise network.listener_error
        network.listeners += 1

    def receive(self) -> ICMPReply:
        return self.network.receive(self.timeout)

    def close(self):
        self.network.closed_listeners += 1


class FakeNetwork:

    def __init__(self, script: Optional[dict] = None):
        self.script = dict(script or {})
        self.sent: list[int] = []
        self.send_errors: dict[int, ProbeError] = {}
        self.setup_error: Optional[ProbeError] = None
        self.listener_error: Optional[ProbeError] = None
        self.on_send: Optional[Callable[[int], None]] = None
        self.drop_all = False
        self.listeners = 0
        self.transmitters = 0
        self.closed_listeners = 0
        self.closed_transmitters = 0
        # When set, receive() blocks on `gate` after `listening` is signalled
        self.gate: Optional[threading.Event] = None
        self.listening = threading.Event()
        self._delivered = threading.Event()
        self._ttl: Optional[int] = None

    def transmitter(self, address: str, port: int) -> FakeTransmitter:
        self.transmitters += 1
        return FakeTransmitter(self, address, port)

    def listener(self, timeout: float) -> FakeListener:
        return FakeListener(self, timeout)

    def deliver(self, ttl: int):
        if self.drop_all:
            return
        self._ttl = ttl
        self._delivered.set()

    def receive(self, timeout: float) -> ICMPReply:
        self.listening.set()
        if self.gate is not None:
            self.gate.wait(5)
        if not self._delivered.wait(timeout):
            raise ListenTimeout(f"No ICMP reply within {timeout}s")
        self._delivered.clear()
        outcome = self.script.get(self._ttl)
        if outcome is None:
            time.sleep(timeout)
            raise ListenTimeout(f"No ICMP reply within {timeout}s")
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def tracer(self, **kwargs) -> Tracer:
        kwargs.setdefault('address', TARGET)
        kwargs.setdefault('timeout', 0.5)
        kwargs.setdefault('dns_lookup', False)
        return Tracer(
            transmitter_factory=self.transmitter,
            listener_factory=self.listener,
            **kwargs
        )


class FakeResolver:
    """Maps addresses to names and counts lookups"""

    def __init__(self, names: Optional[dict] = None):
        self.names = dict(names or {})
        self.lookups: list[str] = []

    def lookup(self, ip: str) -> str:
        self.lookups.append(ip)
        return self.names.get(ip, "")

    def close(self):
        pass
