from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Optional, Dict, Any
from datetime import datetime, timezone

from core.timing.clock import monotonic_ms

# --- timing helpers ---
def utc_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds")

# --- core enums ---
class EventType(Enum):
    """Top-level classifier for event routing."""
    KEYSTROKE = auto()
    PENALTY = auto()
    PROGRESS = auto()

# --- base event ---
@dataclass(frozen=True)
class BaseEvent:
    """Common shape for all events."""
    etype: EventType = field(init=False)         # auto-set by subclasses
    t_utc: Optional[str] = None                  # lazy; materialized on serialize
    t_ms: float = field(default_factory=monotonic_ms)

    def to_record(self) -> Dict[str, Any]:
        t_utc_val = self.t_utc or utc_iso()
        return {
            "etype": self.etype.name,
            "t_utc": t_utc_val,
            "t_ms": self.t_ms,
        }

# --- keystroke event ---
@dataclass(frozen=True)
class KeystrokeEvent(BaseEvent):
    """A typed character and the moment it was observed."""
    key: str = ""

    def __post_init__(self):
        object.__setattr__(self, "etype", EventType.KEYSTROKE)

    def to_record(self) -> Dict[str, Any]:
        base = super().to_record()
        base["key"] = self.key
        return base

# --- penalty event ---
@dataclass(frozen=True)
class PenaltyEvent(BaseEvent):
    """A mistyped key and the delay queued for it."""
    expected: str = ""
    typed: str = ""
    penalty_ms: float = 0.0
    pending_ms: float = 0.0     # tracker's pending penalty after applying

    def __post_init__(self):
        object.__setattr__(self, "etype", EventType.PENALTY)

    def to_record(self) -> Dict[str, Any]:
        base = super().to_record()
        base.update({
            "expected": self.expected,
            "typed": self.typed,
            "penalty_ms": self.penalty_ms,
            "pending_ms": self.pending_ms,
        })
        return base

# --- progress event ---
@dataclass(frozen=True)
class ProgressEvent(BaseEvent):
    """The session advanced past target character `index`."""
    index: int = 0
    char: str = ""
    cpm: Optional[float] = None
    complete: bool = False

    def __post_init__(self):
        object.__setattr__(self, "etype", EventType.PROGRESS)

    def to_record(self) -> Dict[str, Any]:
        base = super().to_record()
        base.update({
            "index": self.index,
            "char": self.char,
            "cpm": self.cpm,
            "complete": self.complete,
        })
        return base
