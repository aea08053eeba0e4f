"""
Circuit breaker for FPL API calls.

Prevents hammering the FPL API while it is down: after ``failure_threshold``
consecutive failures the circuit opens and calls fail immediately with
``CircuitBreakerOpenError`` until ``recovery_timeout`` has elapsed.

Circuit Breaker States:
- CLOSED: Requests pass through normally
- OPEN: Requests fail immediately
- HALF_OPEN: One request allowed to test if the service has recovered
"""
import time
import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, TypeVar

from fpl_sync.core.metrics import circuit_breaker_state

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_FAILURE_THRESHOLD = 5  # Number of failures before opening circuit
DEFAULT_RECOVERY_TIMEOUT = 60.0  # Seconds before attempting to close circuit


class CircuitState(Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


_STATE_GAUGE_VALUES = {
    CircuitState.CLOSED: 0,
    CircuitState.HALF_OPEN: 1,
    CircuitState.OPEN: 2,
}


class CircuitBreakerOpenError(Exception):
    """Raised when a call is rejected because the circuit is open."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Circuit breaker '{name}' is OPEN")


@dataclass
class CircuitBreakerConfig:
    failure_threshold: int = DEFAULT_FAILURE_THRESHOLD
    recovery_timeout: float = DEFAULT_RECOVERY_TIMEOUT


class CircuitBreaker:
    """
    Async circuit breaker.

    Only exceptions of the types in ``failure_exceptions`` count as failures;
    anything else propagates without touching the failure count.
    """

    def __init__(
        self,
        name: str,
        config: Optional[CircuitBreakerConfig] = None,
        failure_exceptions: tuple = (Exception,),
    ):
        self.name = name
        self.config = config or CircuitBreakerConfig()
        self.failure_exceptions = failure_exceptions
        self.state = CircuitState.CLOSED
        self.failure_count = 0
        self.last_failure_time: Optional[float] = None
        self._lock = asyncio.Lock()
        circuit_breaker_state.labels(name=name).set(_STATE_GAUGE_VALUES[self.state])

    @property
    def current_state(self) -> str:
        return self.state.value

    async def call(self, func: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any) -> T:
        async with self._lock:
            if self.state == CircuitState.OPEN:
                if self._should_attempt_reset():
                    self._transition(CircuitState.HALF_OPEN)
                else:
                    raise CircuitBreakerOpenError(self.name)

        try:
            result = await func(*args, **kwargs)
        except self.failure_exceptions:
            await self._record_failure()
            raise

        await self._record_success()
        return result

    def close(self) -> None:
        self.failure_count = 0
        self._transition(CircuitState.CLOSED)

    def _should_attempt_reset(self) -> bool:
        if self.last_failure_time is None:
            return True
        return time.monotonic() - self.last_failure_time >= self.config.recovery_timeout

    async def _record_success(self) -> None:
        async with self._lock:
            self.failure_count = 0
            if self.state != CircuitState.CLOSED:
                self._transition(CircuitState.CLOSED)

    async def _record_failure(self) -> None:
        async with self._lock:
            self.failure_count += 1
            self.last_failure_time = time.monotonic()
            if self.state == CircuitState.HALF_OPEN or self.failure_count >= self.config.failure_threshold:
                self._transition(CircuitState.OPEN)

    def _transition(self, new_state: CircuitState) -> None:
        if new_state == self.state:
            return
        logger.warning(
            f"Circuit breaker '{self.name}' {self.state.value} -> {new_state.value}",
            extra={"failure_count": self.failure_count},
        )
        self.state = new_state
        circuit_breaker_state.labels(name=self.name).set(_STATE_GAUGE_VALUES[new_state])


# ============================================================================
# CIRCUIT BREAKER STATE MONITORING
# ============================================================================

def get_breaker_state(breaker: CircuitBreaker) -> str:
    """
    Get the current state of a circuit breaker.

    Returns:
        State string: 'closed', 'open', or 'half_open'
    """
    return breaker.current_state


def reset_breaker(breaker: CircuitBreaker) -> None:
    """
    Manually reset a circuit breaker to closed state.

    Use with caution - only reset if you know the service has recovered.
    """
    breaker.close()
    logger.warning(f"Circuit breaker '{breaker.name}' manually reset to CLOSED state")
