"""
Progress reporting for the file read phase
"""

import logging
import time
from typing import Optional

from ..utils.formatting import format_bytes, format_duration, format_percent, format_rate

logger = logging.getLogger(__name__)


class ProgressTracker:
    """Track bytes read against the total registered workload"""

    def __init__(self, total: int = 0, interval: float = 2.0, quiet: bool = False):
        self.total = total
        self.done = 0
        self.interval = interval
        self.quiet = quiet
        self.start = time.time()
        self.last_update = self.start

    def advance(self, nbytes: int) -> None:
        self.done += nbytes
        self.update()

    def format(self, now: Optional[float] = None) -> str:
        now = time.time() if now is None else now
        passed = now - self.start
        done, total = self.done, self.total

        rate = done / passed if passed > 0 else float("inf")
        ratio = done / total if total > 0 else float("nan")
        # Seconds per byte so far times the bytes remaining
        eta = (total - done) * (passed / done) if done > 0 else float("inf")
        if done >= total:
            eta = 0.0

        return (
            f"{format_percent(ratio)} of {format_bytes(total)}, "
            f"{format_rate(rate)}, ETA {format_duration(eta)}"
        )

    def update(self, force: bool = False) -> None:
        """Log progress if the interval has passed"""
        now = time.time()
        if not force and now - self.last_update < self.interval:
            return

        if not self.quiet:
            logger.info(self.format(now))

        self.last_update = now
