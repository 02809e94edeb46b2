"""
Abstract base classes for the probe transmitter and response listener
"""

from abc import ABC, abstractmethod
from ..models import ICMPReply


class BaseTransmitter(ABC):
    """Sends one probe per call toward a fixed destination"""
    
    def __init__(self, address: str, port: int):
        self.address = address
        self.port = port
    
    @abstractmethod
    def send(self, ttl: int) -> None:
        """
        Send a probe that expires after `ttl` router hops.
        
        Raises:
            ProbeError: on any failure; the trace is aborted
        """
        pass
    
    @abstractmethod
    def close(self):
        """Clean up resources"""
        pass
    
    def __enter__(self):
        return self
    
    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


class BaseListener(ABC):
    """Waits for the ICMP message answering the most recent probe"""
    
    def __init__(self, timeout: float = 3.0):
        self.timeout = timeout
    
    @abstractmethod
    def receive(self) -> ICMPReply:
        """
        Block until one ICMP message arrives or the timeout elapses.
        
        Returns:
            ICMPReply classified as time exceeded or destination unreachable
            
        Raises:
            HopError: timeout, read or parse failure, unexpected ICMP type
        """
        pass
    
    @abstractmethod
    def close(self):
        """Clean up resources"""
        pass
    
    def __enter__(self):
        return self
    
    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
