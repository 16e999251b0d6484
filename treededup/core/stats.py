"""
Run statistics shared by the scanning and reading phases
"""

import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List


@dataclass
class RunStats:
    """Counters and phase timing for one run"""
    # Counts
    nodes_discovered: int = 0
    files_discovered: int = 0
    files_read: int = 0
    read_failures: int = 0

    # Sizes
    bytes_discovered: int = 0
    bytes_read: int = 0

    # Results
    duplicate_sets: int = 0
    wasted_space: int = 0

    # Performance
    start_time: float = field(default_factory=time.time)
    phase_times: Dict[str, float] = field(default_factory=dict)

    errors: List[str] = field(default_factory=list)

    def add_error(self, msg: str) -> None:
        """Add error message"""
        timestamp = datetime.now().strftime("%H:%M:%S")
        self.errors.append(f"[{timestamp}] {msg}")
        if len(self.errors) > 100:  # Keep last 100
            self.errors = self.errors[-100:]

    def get_duration(self) -> float:
        """Get elapsed time"""
        return time.time() - self.start_time

    def start_phase(self, phase: str) -> None:
        """Mark phase start"""
        self.phase_times[f"{phase}_start"] = time.time()

    def end_phase(self, phase: str) -> None:
        """Mark phase end"""
        start_key = f"{phase}_start"
        if start_key in self.phase_times:
            self.phase_times[f"{phase}_duration"] = time.time() - self.phase_times[start_key]

    def phase_duration(self, phase: str) -> float:
        return self.phase_times.get(f"{phase}_duration", 0.0)
