"""
Per-query deadline threaded through every port call.
"""

import time
from typing import Optional, Type

from .errors import PortError

# Smallest timeout handed to HTTP clients; several treat 0 as "no timeout".
MIN_TIMEOUT_SEC = 0.05


class Deadline:
    """Absolute point in time after which a query stops calling ports."""

    def __init__(self, seconds: float, clock=time.monotonic):
        self._clock = clock
        self.seconds = seconds
        self.expires_at = clock() + seconds

    def remaining(self) -> float:
        return max(0.0, self.expires_at - self._clock())

    def expired(self) -> bool:
        return self._clock() >= self.expires_at

    def timeout(self) -> float:
        """Remaining time as a client timeout value."""
        return max(MIN_TIMEOUT_SEC, self.remaining())

    def check(self, error_type: Type[PortError], stage: str) -> None:
        """Raise `error_type` if the deadline has passed before `stage` starts."""
        if self.expired():
            raise error_type(f"deadline of {self.seconds:.1f}s exceeded before {stage}")


def check_deadline(deadline: Optional[Deadline], error_type: Type[PortError], stage: str) -> None:
    if deadline is not None:
        deadline.check(error_type, stage)


def timeout_for(deadline: Optional[Deadline], default: Optional[float] = None) -> Optional[float]:
    if deadline is None:
        return default
    return deadline.timeout()
