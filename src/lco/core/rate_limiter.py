"""Adaptive request pacing for the cga.ct.gov pages."""

import logging
import threading
import time
from collections import deque
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class AdaptiveRateLimiter:
    """Delay between requests that grows on 429 responses and decays on success.

    A pipeline run only touches two listings plus one detail page per new bill,
    so the floor is small. The delay only matters when the site pushes back.

    One limiter is shared by every worker thread of a run. Waits are taken one
    at a time, so consecutive requests are at least `current_delay` apart
    across all threads.
    """

    def __init__(
        self,
        min_delay: float = 0.1,
        max_delay: float = 120.0,
        success_reduction_factor: float = 0.9,
        failure_increase_factor: float = 2.0,
    ):
        self.rate_limit_events: deque[Dict[str, Any]] = deque(maxlen=100)
        self.current_delay = min_delay
        self.min_delay = min_delay
        self.max_delay = max_delay
        self.success_reduction_factor = success_reduction_factor
        self.failure_increase_factor = failure_increase_factor
        self._wait_lock = threading.Lock()

    def wait(self) -> None:
        """Sleep for the current delay, after any other thread's wait."""
        with self._wait_lock:
            if self.current_delay > 0:
                time.sleep(self.current_delay)

    def record_success(self) -> None:
        if self.current_delay > self.min_delay:
            self.current_delay = max(
                self.current_delay * self.success_reduction_factor, self.min_delay
            )

    def record_rate_limit(self, retry_after: Optional[int] = None) -> None:
        """Record a 429 and back off, honouring Retry-After when present."""
        self.rate_limit_events.append({"time": time.time(), "retry_after": retry_after})

        if retry_after:
            self.current_delay = min(float(retry_after), self.max_delay)
        else:
            self.current_delay = min(
                self.current_delay * self.failure_increase_factor + 0.5, self.max_delay
            )

        logger.info(
            f"Rate limit recorded. New delay: {self.current_delay}s",
            extra={
                "rate_limiter_delay": self.current_delay,
                "retry_after": retry_after,
                "recent_rate_limits": len(self.rate_limit_events),
            },
        )

    def get_current_delay(self) -> float:
        return self.current_delay
