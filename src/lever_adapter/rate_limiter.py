"""
RateLimiter module for spacing outbound API requests
"""

import time
from typing import Optional


class RateLimiter:
    """Grants one request permit per fixed interval on a single request path"""

    def __init__(self, interval_seconds: float = 0.1):
        if interval_seconds < 0:
            raise ValueError(f"Rate limit interval must not be negative: {interval_seconds}")
        self.interval_seconds = interval_seconds
        self.last_grant_time: Optional[float] = None

    def acquire(self) -> None:
        """
        Block until at least one interval has passed since the previous grant
        """
        if self.last_grant_time is not None:
            elapsed = time.monotonic() - self.last_grant_time
            if elapsed < self.interval_seconds:
                time.sleep(self.interval_seconds - elapsed)

        self.last_grant_time = time.monotonic()
