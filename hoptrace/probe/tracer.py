"""
Traceroute orchestrator
"""

import logging
import queue
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import datetime
from typing import Callable, Iterator, Optional

from ..config import (
    DEFAULT_CHANNEL_SIZE, DEFAULT_DNS_LOOKUP, DEFAULT_MAX_TTL, DEFAULT_PORT,
    DEFAULT_START_TTL, DEFAULT_TIMEOUT, TracerConfig,
)
from ..exceptions import (
    ConfigurationError, HopError, ListenTimeout, ProbeError, TracerBusyError,
    UnexpectedICMPType,
)
from ..models import END_OF_TRACE, NO_RESPONSE, Hop, StopReason, TraceResult
from ..resolver import PTRResolver
from ..worker import BoundedTask
from .base import BaseListener, BaseTransmitter
from .icmp import ICMPListener
from .udp import UDPTransmitter

logger = logging.getLogger(__name__)

TransmitterFactory = Callable[[str, int], BaseTransmitter]
ListenerFactory = Callable[[float], BaseListener]


class Tracer:
    """
    Traceroute orchestrator.
    
    Probes one TTL at a time: the ICMP listener runs on a worker while the
    UDP probe is sent, then the orchestrator joins the worker, records the
    hop and decides whether to go on.
    
    Every hop is appended to the returned TraceResult and published on
    `results`, a queue owned by this Tracer and replaced at the start of
    every trace. After each trace, whatever its outcome, END_OF_TRACE is
    published so live consumers know to stop.
    One trace runs per Tracer at a time.
    """
    
    def __init__(
        self,
        address: str = '',
        port: int = DEFAULT_PORT,
        start_ttl: int = DEFAULT_START_TTL,
        max_ttl: int = DEFAULT_MAX_TTL,
        timeout: float = DEFAULT_TIMEOUT,
        dns_lookup: bool = DEFAULT_DNS_LOOKUP,
        channel_size: int = DEFAULT_CHANNEL_SIZE,
        transmitter_factory: TransmitterFactory = UDPTransmitter,
        listener_factory: ListenerFactory = ICMPListener,
        resolver: Optional[PTRResolver] = None
    ):
        self.address = address
        self.port = port
        self.start_ttl = start_ttl
        self.max_ttl = max_ttl
        self.timeout = timeout
        self.dns_lookup = dns_lookup
        self.transmitter_factory = transmitter_factory
        self.listener_factory = listener_factory
        self.resolver = resolver
        
        self.channel_size = channel_size
        self.results: queue.Queue = self._new_channel(max_ttl)
        
        self._lock = threading.Lock()
        self._stop_requested = threading.Event()
    
    @property
    def running(self) -> bool:
        return self._lock.locked()
    
    def snapshot(self) -> TracerConfig:
        """Freeze the current attributes into a TracerConfig"""
        return TracerConfig(
            address=self.address,
            port=self.port,
            start_ttl=self.start_ttl,
            max_ttl=self.max_ttl,
            timeout=self.timeout,
            dns_lookup=self.dns_lookup
        )
    
    def stop(self):
        """Ask the running trace to stop before its next hop"""
        self._stop_requested.set()
    
    def trace(self) -> TraceResult:
        """
        Execute traceroute.
        
        Returns:
            TraceResult with one Hop per answered (or timed out) TTL
            
        Raises:
            ConfigurationError: invalid settings, before any network I/O
            ProbeError: hard I/O failure; the partial result is on `.result`
            TracerBusyError: another trace is running on this Tracer
        """
        config, channel = self._begin()
        return self._run_and_finish(config, channel)
    
    def trace_async(self) -> 'Future[TraceResult]':
        """
        Run trace() on its own thread.
        
        The trace's channel is bound to `results` before this returns, so
        hops() called afterwards sees this trace only. The returned future
        carries the final TraceResult or the raised TraceError.
        
        Raises:
            TracerBusyError: another trace is running on this Tracer
        """
        config, channel = self._begin()
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix='hoptrace-trace')
        try:
            future = executor.submit(self._run_and_finish, config, channel)
        except BaseException:
            self._finish(channel)
            raise
        finally:
            executor.shutdown(wait=False)
        return future
    
    def hops(self, timeout: Optional[float] = None) -> Iterator[Hop]:
        """
        Yield hops from the live channel until END_OF_TRACE.
        
        Args:
            timeout: Max seconds to wait for each item; queue.Empty is
                raised when it elapses
        """
        while True:
            item = self.results.get(timeout=timeout)
            if item is END_OF_TRACE:
                return
            yield item
    
    def _new_channel(self, max_ttl: int) -> queue.Queue:
        # Room for every hop of one trace plus END_OF_TRACE, so publishing
        # never blocks the orchestrator
        return queue.Queue(maxsize=max(self.channel_size, max_ttl, 1) + 1)
    
    def _begin(self) -> tuple[TracerConfig, queue.Queue]:
        """Claim the Tracer and bind a fresh channel for the next trace"""
        if not self._lock.acquire(blocking=False):
            raise TracerBusyError(f"A trace to {self.address} is already running")
        
        self._stop_requested.clear()
        config = self.snapshot()
        self.results = self._new_channel(config.max_ttl)
        return config, self.results
    
    def _finish(self, channel: queue.Queue):
        channel.put_nowait(END_OF_TRACE)
        self._lock.release()
    
    def _run_and_finish(self, config: TracerConfig, channel: queue.Queue) -> TraceResult:
        try:
            return self._run(config, channel)
        finally:
            self._finish(channel)
    
    def _run(self, config: TracerConfig, channel: queue.Queue) -> TraceResult:
        result = TraceResult(target=config.address)
        
        try:
            config.validate()
        except ConfigurationError as e:
            e.result = result
            raise
        
        resolver = None
        if config.dns_lookup:
            resolver = self.resolver or PTRResolver(timeout=config.timeout)
        
        logger.info(
            f"Tracing {config.address}:{config.port} ttl {config.start_ttl}..{config.max_ttl}, "
            f"timeout {config.timeout}s"
        )
        
        try:
            with ThreadPoolExecutor(max_workers=1, thread_name_prefix='hoptrace-listener') as executor:
                ttl = config.start_ttl
                while True:
                    if self._stop_requested.is_set():
                        result.stop_reason = StopReason.CANCELLED
                        break
                    
                    try:
                        hop, stop_reason = self._probe_hop(executor, config, ttl, resolver)
                    except ProbeError as e:
                        result.stop_reason = StopReason.PROBE_ERROR
                        result.finished_at = datetime.now()
                        if e.ttl is None:
                            e.ttl = ttl
                        e.result = result
                        logger.error(f"Trace to {config.address} aborted at ttl {ttl}: {e}")
                        raise
                    
                    if hop is not None:
                        result.hops.append(hop)
                        channel.put_nowait(hop)
                    
                    if stop_reason is not None:
                        result.stop_reason = stop_reason
                        break
                    
                    ttl += 1
                    if ttl > config.max_ttl:
                        result.stop_reason = StopReason.MAX_TTL
                        break
        finally:
            if resolver is not None and resolver is not self.resolver:
                resolver.close()
        
        result.finished_at = datetime.now()
        logger.info(
            f"Trace to {config.address} finished: {len(result)} hops, "
            f"stopped on {result.stop_reason}"
        )
        return result
    
    def _probe_hop(self, executor: ThreadPoolExecutor, config: TracerConfig,
                   ttl: int, resolver: Optional[PTRResolver]) -> tuple[Optional[Hop], Optional[str]]:
        """
        Probe a single TTL.
        
        Returns:
            (hop, stop_reason): hop is None when nothing is to be recorded,
            stop_reason is None when the trace should go on
        """
        with self.listener_factory(config.timeout) as listener:
            with self.transmitter_factory(config.address, config.port) as transmitter:
                # The listener socket is already open, so a fast reply is
                # buffered even before the worker starts reading.
                task = BoundedTask(executor, listener.receive, config.timeout)
                start = time.perf_counter()
                try:
                    transmitter.send(ttl)
                except ProbeError:
                    task.cancel()
                    raise
                
                reply = None
                error: Optional[HopError] = None
                try:
                    reply = task.join()
                except HopError as e:
                    error = e
                latency = (time.perf_counter() - start) * 1000
        
        if isinstance(error, UnexpectedICMPType):
            logger.debug(f"ttl={ttl}: {error}, not recorded")
            return None, StopReason.UNEXPECTED_ICMP
        
        if error is not None:
            logger.debug(f"ttl={ttl}: {error}")
            hop = Hop(ttl=ttl, address=NO_RESPONSE, latency=latency, reachable=False)
            if isinstance(error, ListenTimeout):
                return hop, StopReason.TIMEOUT
            return hop, StopReason.LISTENER_ERROR
        
        host = resolver.lookup(reply.address) if resolver is not None else ""
        hop = Hop(
            ttl=ttl,
            address=reply.address,
            host=host,
            latency=latency,
            reachable=reply.time_exceeded,
            icmp_type=int(reply.icmp_type),
            icmp_code=reply.code
        )
        logger.debug(f"ttl={ttl}: {reply.icmp_type.name} from {reply.address} in {latency:.2f}ms")
        
        if reply.unreachable:
            return hop, StopReason.UNREACHABLE
        return hop, None
    
