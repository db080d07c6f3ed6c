import threading
import time

from loguru import logger


class SegmentProgressTracker:
    """Lightweight segment progress tracker with heartbeat logging."""

    def __init__(self, total_segments: int, heartbeat_seconds: float = 15.0) -> None:
        self.total_segments = max(0, total_segments)
        self.heartbeat_seconds = heartbeat_seconds
        self.done = 0
        self.nodes_added = 0
        self.edges_added = 0
        self._start = time.time()
        self._last_log = 0.0
        self._lock = threading.Lock()

    def update(self, *, nodes_added: int = 0, edges_added: int = 0) -> None:
        with self._lock:
            self.done = min(self.done + 1, self.total_segments)
            self.nodes_added += nodes_added
            self.edges_added += edges_added
            now = time.time()
            elapsed = max(now - self._start, 1e-6)
            rate = self.done / elapsed
            remaining = max(self.total_segments - self.done, 0)
            eta_seconds = remaining / rate if rate > 0 else float("inf")

            should_log = (
                self.done == self.total_segments
                or self._last_log == 0
                or (now - self._last_log) >= self.heartbeat_seconds
            )
            if should_log:
                percent = (self.done / max(self.total_segments, 1)) * 100
                logger.info(
                    "Segments merged: {}/{} ({:.0f}%), +{} nodes, +{} edges, ETA {}",
                    self.done,
                    self.total_segments,
                    percent,
                    self.nodes_added,
                    self.edges_added,
                    self._format_eta(eta_seconds),
                )
                self._last_log = now

    def _format_eta(self, seconds: float) -> str:
        if seconds == float("inf"):
            return "unknown"
        minutes, secs = divmod(int(seconds), 60)
        hours, minutes = divmod(minutes, 60)
        if hours:
            return f"{hours}h{minutes:02d}m"
        if minutes:
            return f"{minutes}m{secs:02d}s"
        return f"{secs}s"
