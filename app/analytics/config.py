from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Optional

@dataclass(frozen=True)
class RateTrackerConfig:
    # window sizes (keystrokes)
    max_window: int = 25
    min_window: int = 15

    # progression
    cpm_threshold: float = 60.0

    # penalties (ms)
    default_penalty_ms: float = 1000.0
    max_penalty_ms: float = 5000.0  # per call; amounts at or above are rejected
    max_pending_penalty_ms: Optional[float] = None  # aggregate cap, None = unbounded

    # longest inter-key gap recorded (not including penalty time)
    max_gap_ms: float = 5000.0

    reset_clears_penalty: bool = False
    monotonic_history: bool = True

PROFILES: Dict[str, RateTrackerConfig] = {
    "default": RateTrackerConfig(),
    "strict": RateTrackerConfig(cpm_threshold=75.0, default_penalty_ms=1500.0),
}

def get_profile(name: str) -> RateTrackerConfig:
    try:
        return PROFILES[name]
    except KeyError:
        raise KeyError(f"unknown profile {name!r} (known: {', '.join(sorted(PROFILES))})") from None
