"""
Tracer defaults and the per-trace configuration snapshot
"""

from dataclasses import dataclass

from .exceptions import ConfigurationError


DEFAULT_PORT = 33434  # classic traceroute base port, unprivileged
DEFAULT_START_TTL = 1
DEFAULT_MAX_TTL = 30
DEFAULT_TIMEOUT = 3.0  # seconds per hop
DEFAULT_DNS_LOOKUP = True
DEFAULT_CHANNEL_SIZE = 1024

MAX_TTL_LIMIT = 255  # IPv4 TTL field is one byte
MAX_PORT = 65535

# Extra time the orchestrator waits for the listener worker beyond its own
# socket timeout before giving up on the join.
JOIN_GRACE = 0.5


@dataclass(frozen=True)
class TracerConfig:
    """
    Immutable settings for one trace.

    A Tracer takes a snapshot of its attributes into a TracerConfig when a
    trace starts, so changing the Tracer mid-trace has no effect on the
    running trace.
    """
    address: str
    port: int = DEFAULT_PORT
    start_ttl: int = DEFAULT_START_TTL
    max_ttl: int = DEFAULT_MAX_TTL
    timeout: float = DEFAULT_TIMEOUT
    dns_lookup: bool = DEFAULT_DNS_LOOKUP

    def validate(self) -> 'TracerConfig':
        """
        Check the configuration invariants.

        Returns:
            self, so the call can be chained

        Raises:
            ConfigurationError: on the first violated invariant
        """
        if not self.address:
            raise ConfigurationError("Address must be specified")
        if self.start_ttl < 1:
            raise ConfigurationError("StartTTL must be at least 1")
        if self.max_ttl > MAX_TTL_LIMIT:
            raise ConfigurationError(f"MaxTTL must be at most {MAX_TTL_LIMIT}")
        if self.max_ttl < self.start_ttl:
            raise ConfigurationError("MaxTTL must not be lower than StartTTL")
        if self.port < 1 or self.port > MAX_PORT:
            raise ConfigurationError(f"Port must be between 1 and {MAX_PORT}")
        if self.timeout <= 0:
            raise ConfigurationError("Timeout must be positive")
        return self
