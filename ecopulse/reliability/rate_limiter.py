"""
Rate Limiter - Minimum Interval Gate

One shared gate per client session: at most one accepted request every
min_interval seconds, whichever operation asks.
"""

import math
import time
import threading
from typing import Any, Callable, Dict, Optional

from .reliability_config import RATE_LIMIT_CONFIG


class RateLimiter:
    """
    Minimum-interval rate limiter

    Supports:
    - Non-blocking check-and-record (can_request)
    - Remaining wait in whole seconds (get_time_remaining)
    - Thread-safe operation

    Construct one per session and pass it to every call site that needs
    throttling.
    """

    def __init__(self, min_interval: Optional[float] = None,
                 clock: Callable[[], float] = time.time):
        """
        Initialize rate limiter

        Args:
            min_interval: Seconds required between accepted requests
                (defaults to RATE_LIMIT_CONFIG['min_interval'])
            clock: Time source in seconds (injectable for tests)
        """
        if min_interval is None:
            min_interval = RATE_LIMIT_CONFIG['min_interval']
        if min_interval <= 0:
            raise ValueError("min_interval must be positive")

        self.min_interval = min_interval
        self._clock = clock

        # None until the first accepted request, which always passes
        self.last_request_time: Optional[float] = None

        # Check-and-set must be atomic across threads
        self._lock = threading.Lock()

    def can_request(self) -> bool:
        """
        Record a request if the interval has elapsed

        Returns:
            True if accepted (and recorded), False if too soon (state unchanged)

        Thread-safe: Yes
        """
        with self._lock:
            now = self._clock()
            if self.last_request_time is not None and now - self.last_request_time < self.min_interval:
                return False
            self.last_request_time = now
            return True

    def get_time_remaining(self) -> int:
        """
        Seconds until the next request will be accepted

        Returns:
            Remaining wait rounded up to whole seconds, 0 if ready now
        """
        with self._lock:
            if self.last_request_time is None:
                return 0
            remaining = self.min_interval - (self._clock() - self.last_request_time)
        return max(0, math.ceil(remaining))

    def reset(self):
        """Forget the last request (next can_request() passes)"""
        with self._lock:
            self.last_request_time = None

    def get_stats(self) -> Dict[str, Any]:
        return {
            'min_interval': self.min_interval,
            'last_request_time': self.last_request_time,
            'time_remaining': self.get_time_remaining()
        }
