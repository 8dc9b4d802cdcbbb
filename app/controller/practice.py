# app/controller/practice.py
from __future__ import annotations
from queue import Queue
from typing import Optional
import structlog

from app.analytics.rate_tracker import RateTracker
from core.events import KeystrokeEvent, PenaltyEvent, ProgressEvent
from core.utils.queueing import safe_put

log = structlog.get_logger()

class PracticeSession:
    """
    Walks a target text one character at a time.
    - Correct key: recorded by the tracker; advance when it says so
    - Wrong key: penalty queued on the tracker, nothing recorded
    Emits PenaltyEvent / ProgressEvent into out_q.
    """
    def __init__(
        self,
        target: str,
        out_q: Queue,
        tracker: Optional[RateTracker] = None,
        penalty_ms: Optional[float] = None,
    ):
        if not target:
            raise ValueError("target text must not be empty")
        self.target = target
        self.out_q = out_q
        self.tracker = tracker or RateTracker()
        self.penalty_ms = penalty_ms
        self._index = 0

    @property
    def index(self) -> int:
        return self._index

    @property
    def complete(self) -> bool:
        return self._index >= len(self.target)

    @property
    def current(self) -> Optional[str]:
        if self.complete:
            return None
        return self.target[self._index]

    def restart(self) -> None:
        self._index = 0
        self.tracker.reset()
        log.info("practice.restart", target_len=len(self.target))

    def process(self, ev: KeystrokeEvent) -> bool:
        """Feed one keystroke; returns True when the target advanced."""
        expected = self.current
        if expected is None:
            return False

        if ev.key != expected:
            before = self.tracker.pending_penalty
            pending = self.tracker.apply_penalty(self.penalty_ms)
            applied = pending - before  # 0 when the tracker rejected it
            safe_put(self.out_q, PenaltyEvent(expected=expected, typed=ev.key, penalty_ms=applied, pending_ms=pending))
            log.debug("practice.mistake", expected=expected, typed=ev.key, pending_ms=pending)
            return False

        if not self.tracker.record_keystroke(ev.t_ms):
            return False

        cpm = self.tracker.snapshot().cpm
        idx = self._index
        self._index += 1
        safe_put(self.out_q, ProgressEvent(index=idx, char=expected, cpm=cpm, complete=self.complete))
        log.info("practice.progress", index=idx, char=expected, cpm=cpm, complete=self.complete)
        return True
