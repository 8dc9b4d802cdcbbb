# app/analytics/rate_tracker.py
from __future__ import annotations
import math
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

import numpy as np
import structlog

from app.analytics.config import RateTrackerConfig
from core.timing.clock import monotonic_ms
from core.utils.queueing import FifoQueue

log = structlog.get_logger()

class InsufficientSamplesError(ValueError):
    """A rate was requested from fewer than two timestamps."""

@dataclass
class RateSnapshot:
    samples: int
    span_ms: float
    cpm: Optional[float]
    mean_gap_ms: Optional[float]
    pending_penalty_ms: float
    warming_up: bool

class RateTracker:
    """
    Characters-per-minute estimator gating progression in a practice session.

    Keeps the last `max_window` keystroke timestamps (ms). Each gap is capped
    at `max_gap_ms` so a pause cannot sink the rate, and pending penalty time
    pushes the next timestamp later. Progression needs at least `min_window`
    samples and a rate strictly above `cpm_threshold`.
    """
    def __init__(self, config: Optional[RateTrackerConfig] = None, clock: Callable[[], float] = monotonic_ms):
        self.cfg = config or RateTrackerConfig()
        self.clock = clock

        self._history: FifoQueue[float] = FifoQueue()
        self._max_window = self.cfg.max_window
        self._min_window = self.cfg.min_window
        self._cpm_threshold = self.cfg.cpm_threshold
        self._pending_penalty = 0.0

    # ---- Configuration ----

    @property
    def max_window(self) -> int:
        return self._max_window

    @max_window.setter
    def max_window(self, value: int) -> None:
        self._max_window = value

    @property
    def min_window(self) -> int:
        return self._min_window

    @min_window.setter
    def min_window(self, value: int) -> None:
        self._min_window = value

    @property
    def cpm_threshold(self) -> float:
        return self._cpm_threshold

    @cpm_threshold.setter
    def cpm_threshold(self, value: float) -> None:
        self._cpm_threshold = value

    @property
    def history(self) -> Tuple[float, ...]:
        return tuple(self._history)

    @property
    def pending_penalty(self) -> float:
        return self._pending_penalty

    def reset(self) -> None:
        """Start a new attempt: empty history, configured bounds and threshold."""
        self._history.clear()
        self._max_window = self.cfg.max_window
        self._min_window = self.cfg.min_window
        self._cpm_threshold = self.cfg.cpm_threshold
        if self.cfg.reset_clears_penalty:
            self._pending_penalty = 0.0
        log.debug("tracker.reset", pending_penalty_ms=self._pending_penalty)

    # ---- Penalties ----

    def apply_penalty(self, amount: Optional[float] = None) -> float:
        """
        Queue `amount` ms (default from config) onto the next keystroke.
        Negative amounts and amounts at or above `max_penalty_ms` are ignored.
        Returns the pending penalty.
        """
        if amount is None:
            amount = self.cfg.default_penalty_ms
        if amount < 0:
            log.warning("penalty.rejected", reason="negative", amount_ms=amount)
            return self._pending_penalty
        if amount >= self.cfg.max_penalty_ms:
            return self._pending_penalty

        pending = self._pending_penalty + amount
        cap = self.cfg.max_pending_penalty_ms
        if cap is not None:
            pending = min(pending, cap)
        self._pending_penalty = pending
        return pending

    # ---- Keystrokes ----

    def record_keystroke(self, now: Optional[float] = None) -> bool:
        """Record one keystroke at `now` (ms, read from the clock when omitted).

        Returns whether the session should progress.
        """
        t = self.clock() if now is None else now

        last = self._history.peek_last()
        if last is not None:
            if t - last >= self.cfg.max_gap_ms:
                t = last + self.cfg.max_gap_ms
            if self.cfg.monotonic_history and t < last:
                t = last

        t += self._pending_penalty
        self._pending_penalty = 0.0

        self._history.enqueue(t)
        while self._history.size() > max(self._max_window, 0):
            self._history.dequeue()
        return self.should_progress()

    def compute_rate(self) -> float:
        """Samples in the window over its span, per minute."""
        n = self._history.size()
        if n < 2:
            raise InsufficientSamplesError(f"need at least 2 samples, have {n}")
        span = self._history.peek_last() - self._history.peek()
        if span == 0:
            return math.inf
        return (n / span) * 60000.0

    def should_progress(self) -> bool:
        n = self._history.size()
        if n < self._min_window or n < 2:
            return False
        return self.compute_rate() > self._cpm_threshold

    def snapshot(self) -> RateSnapshot:
        n = self._history.size()
        cpm: Optional[float] = None
        mean_gap: Optional[float] = None
        span = 0.0
        if n >= 2:
            ts = np.fromiter(self._history, dtype=float, count=n)
            span = float(ts[-1] - ts[0])
            mean_gap = float(np.diff(ts).mean())
            cpm = self.compute_rate()
        return RateSnapshot(
            samples=n,
            span_ms=span,
            cpm=cpm,
            mean_gap_ms=mean_gap,
            pending_penalty_ms=self._pending_penalty,
            warming_up=n < self._min_window,
        )
