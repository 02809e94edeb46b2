"""
Run one blocking task beside the caller and join it with a bound.

The orchestrator starts the ICMP listener on a BoundedTask, sends the
probe from its own thread, then joins. The join never waits longer than
the task's timeout plus a grace period.
"""

import logging
from concurrent.futures import Executor, TimeoutError as FutureTimeout
from typing import Callable, Generic, TypeVar

from .config import JOIN_GRACE
from .exceptions import ListenTimeout

logger = logging.getLogger(__name__)

T = TypeVar('T')


class BoundedTask(Generic[T]):
    """A submitted task whose join is bounded by a timeout."""

    def __init__(self, executor: Executor, fn: Callable[[], T],
                 timeout: float, grace: float = JOIN_GRACE):
        self.timeout = timeout
        self.grace = grace
        self._future = executor.submit(fn)

    def join(self) -> T:
        """
        Wait for the task and return its result.

        Exceptions raised by the task propagate unchanged.

        Raises:
            ListenTimeout: if the task has not finished within the bound
        """
        try:
            return self._future.result(timeout=self.timeout + self.grace)
        except FutureTimeout:
            self.cancel()
            raise ListenTimeout(
                f"Worker did not finish within {self.timeout + self.grace:.1f}s"
            ) from None

    def cancel(self) -> bool:
        """Cancel the task if it has not started yet."""
        cancelled = self._future.cancel()
        if not cancelled and not self._future.done():
            logger.debug("Task already running, it will end at its own deadline")
        return cancelled

    def done(self) -> bool:
        return self._future.done()
