"""Per-instance request throttling."""
import time
import threading
from typing import Callable, Optional


class RateLimiter:
    """Enforce a minimum interval between successive operations.
    
    Turns are handed out on an absolute schedule: each granted turn books
    the next slot at ``slot + interval``. Time spent by the caller between
    turns therefore counts toward the interval instead of being added to it,
    and repeated calls do not drift. A caller that arrives after its slot
    re-anchors the schedule at the arrival time, so late callers never earn
    a burst of back-to-back turns.
    
    Example:
        limiter = RateLimiter()
        limiter.configure(1.0)
        for url in urls:
            limiter.wait_turn()
            fetch(url)
    """
    
    def __init__(
        self,
        interval: float = 0.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._clock = clock
        self._sleep = sleep
        self._lock = threading.Lock()
        self._interval = 0.0
        self._next_slot: Optional[float] = None
        self.configure(interval)
    
    @property
    def interval(self) -> float:
        return self._interval
    
    def configure(self, interval: float) -> None:
        """Set or replace the minimum interval, in seconds."""
        if interval < 0:
            raise ValueError(f"Rate limit interval must be >= 0, got {interval}")
        with self._lock:
            self._interval = float(interval)
            self._next_slot = None
    
    def wait_turn(self) -> None:
        """Block until the next turn is available.
        
        The first call returns immediately.
        """
        with self._lock:
            now = self._clock()
            if self._next_slot is None or now >= self._next_slot:
                slot = now
            else:
                slot = self._next_slot
                self._sleep(slot - now)
            self._next_slot = slot + self._interval
