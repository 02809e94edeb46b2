"""
PTR (reverse DNS) resolver
"""

import logging
import socket
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeout

from .models import NO_RESPONSE

logger = logging.getLogger(__name__)


class PTRResolver:
    """
    Best-effort reverse DNS lookups.

    Lookups run on a small thread pool so a slow resolver can be cut off
    after `timeout` seconds. Failures of any kind yield an empty string.
    """
    
    def __init__(self, timeout: float = 2.0, max_workers: int = 2):
        self.timeout = timeout
        self.max_workers = max_workers
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix='hoptrace-ptr'
        )
    
    def _resolve_sync(self, ip: str) -> str:
        """Synchronous PTR lookup"""
        try:
            hostname, aliases, _ = socket.gethostbyaddr(ip)
        except (socket.herror, socket.gaierror, socket.timeout, OSError) as e:
            logger.debug(f"PTR lookup for {ip} failed: {e}")
            return ""
        names = [hostname] + [a for a in aliases if a != hostname]
        return ", ".join(names)
    
    def lookup(self, ip: str) -> str:
        """
        Resolve an IP address to its host name(s).
        
        Args:
            ip: IP address to resolve
            
        Returns:
            Host names joined with ", ", or "" if none were found
        """
        if not ip or ip == NO_RESPONSE:
            return ""
        
        future = self._executor.submit(self._resolve_sync, ip)
        try:
            return future.result(timeout=self.timeout)
        except FutureTimeout:
            logger.debug(f"PTR lookup for {ip} timed out after {self.timeout}s")
            return ""
    
    def close(self):
        """Shutdown thread pool"""
        self._executor.shutdown(wait=False)
    
    def __enter__(self):
        return self
    
    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
