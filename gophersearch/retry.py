"""
Fixed-interval polling schedule with an interruptible wait.

The poller consumes one attempt per status request and sleeps a constant
interval between attempts. Waits go through ``threading.Event.wait`` so a
caller can stop a poll mid-sleep, and an optional monotonic deadline caps
the total time spent.
"""

import threading
import time
from typing import Iterator, Optional

# Status the result endpoint returns while the job is still running
NOT_READY_STATUS = 404


def should_keep_polling_status(status_code: int) -> bool:
    """
    Check if an HTTP status means "job not ready yet".

    Args:
        status_code: HTTP status code of a result request

    Returns:
        True if the poll should consume an attempt and try again
    """
    return status_code == NOT_READY_STATUS


def deadline_after(seconds: Optional[float]) -> Optional[float]:
    """Convert a relative timeout into a ``time.monotonic()`` deadline."""
    if seconds is None:
        return None
    return time.monotonic() + seconds


class PollSchedule:
    """
    Attempt budget plus constant delay between attempts.

    Example:
        schedule = PollSchedule(attempts=30, interval=2.0)
        for attempt in schedule:
            ...
            if not schedule.wait(cancel, deadline):
                break
    """

    def __init__(self, attempts: int = 30, interval: float = 2.0):
        """
        Args:
            attempts: Maximum number of status requests (>= 1)
            interval: Seconds to wait between attempts (>= 0)
        """
        if attempts < 1:
            raise ValueError("attempts must be at least 1")
        if interval < 0:
            raise ValueError("interval must not be negative")
        self.attempts = attempts
        self.interval = interval

    def __iter__(self) -> Iterator[int]:
        return iter(range(1, self.attempts + 1))

    @staticmethod
    def remaining(deadline: Optional[float]) -> Optional[float]:
        """Seconds left before ``deadline``, or None when there is none."""
        if deadline is None:
            return None
        return max(0.0, deadline - time.monotonic())

    @staticmethod
    def expired(deadline: Optional[float]) -> bool:
        return deadline is not None and time.monotonic() >= deadline

    def wait(
        self,
        cancel: Optional[threading.Event] = None,
        deadline: Optional[float] = None,
    ) -> bool:
        """
        Sleep for one interval, truncated to the deadline.

        Returns:
            False if the wait was cut short by cancellation or the deadline,
            True if the full interval elapsed
        """
        delay = self.interval
        left = self.remaining(deadline)
        truncated = left is not None and left <= delay
        if truncated:
            delay = left

        if cancel is None:
            if delay > 0:
                time.sleep(delay)
        elif cancel.wait(delay):
            return False

        # Sleeping up to the deadline means no time is left for another attempt
        return not truncated
