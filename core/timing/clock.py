from __future__ import annotations
import time

def monotonic_ms() -> float:
    # Monotonic high-res timestamp in milliseconds (immune to system clock changes)
    return time.perf_counter() * 1000.0

class ManualClock:
    """
    Clock driven by hand, for tests and replays.
    Call it like monotonic_ms; move it with advance() or set().
    """
    def __init__(self, start_ms: float = 0.0):
        self.now_ms = float(start_ms)

    def __call__(self) -> float:
        return self.now_ms

    def advance(self, delta_ms: float) -> float:
        self.now_ms += delta_ms
        return self.now_ms

    def set(self, t_ms: float) -> None:
        self.now_ms = float(t_ms)
