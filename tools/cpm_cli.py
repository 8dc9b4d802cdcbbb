from __future__ import annotations
import argparse, math, sys
from dataclasses import asdict
from typing import Iterable, List, Optional, Tuple

import structlog

from app.analytics.config import PROFILES, get_profile
from app.analytics.rate_tracker import RateTracker
from app.logging_config import configure_logging
from core.timing.clock import ManualClock

log = structlog.get_logger()

# ("key", t_ms) or ("penalty", ms or None for the profile default)
Step = Tuple[str, Optional[float]]

def parse_replay(lines: Iterable[str]) -> List[Step]:
    steps: List[Step] = []
    for lineno, raw in enumerate(lines, 1):
        line = raw.split("#", 1)[0].strip()
        if not line:
            continue
        parts = line.split()
        try:
            if parts[0].lower() == "penalty":
                if len(parts) > 2:
                    raise ValueError("too many fields")
                steps.append(("penalty", float(parts[1]) if len(parts) == 2 else None))
            elif len(parts) == 1:
                steps.append(("key", float(parts[0])))
            else:
                raise ValueError("too many fields")
            value = steps[-1][1]
            if value is not None and not math.isfinite(value):
                steps.pop()
                raise ValueError("not a finite number")
        except ValueError as e:
            raise ValueError(f"line {lineno}: {raw.strip()!r}: {e}") from None
    return steps

def format_line(n: int, t_ms: float, cpm: Optional[float], verdict: bool) -> str:
    cpm_s = f"{cpm:8.1f}" if cpm is not None else "       -"
    return f"{n:>4}  t={t_ms:>10.1f}ms  cpm={cpm_s}  {'PROGRESS' if verdict else '-'}"

def run_steps(tracker: RateTracker, steps: Iterable[Step]) -> List[str]:
    out: List[str] = []
    n = 0
    for kind, value in steps:
        if kind == "penalty":
            tracker.apply_penalty(value)
            continue
        n += 1
        verdict = tracker.record_keystroke(value)
        snap = tracker.snapshot()
        out.append(format_line(n, tracker.history[-1], snap.cpm, verdict))
    return out

def simulate_steps(step_ms: float, count: int, error_every: int = 0) -> List[Step]:
    clock = ManualClock()
    steps: List[Step] = []
    for i in range(count):
        if i:
            clock.advance(step_ms)
        if error_every and i and i % error_every == 0:
            steps.append(("penalty", None))
        steps.append(("key", clock()))
    return steps

def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(prog="cpm", description="Typing-speed progression gate")
    ap.add_argument("-v", "--verbose", action="store_true")
    sub = ap.add_subparsers(dest="cmd", required=True)

    p_sim = sub.add_parser("simulate", help="Fixed-pace keystrokes on a synthetic clock")
    p_sim.add_argument("--step", type=float, default=500.0, help="ms between keystrokes")
    p_sim.add_argument("--count", type=int, default=25)
    p_sim.add_argument("--profile", default="default")
    p_sim.add_argument("--error-every", type=int, default=0, help="penalise before every Nth keystroke")

    p_replay = sub.add_parser("replay", help="Replay timestamps (ms) and penalties from a file")
    p_replay.add_argument("file")
    p_replay.add_argument("--profile", default="default")

    sub.add_parser("profiles", help="List tracker profiles")

    args = ap.parse_args(argv)
    configure_logging(debug=args.verbose)

    if args.cmd == "profiles":
        for name, cfg in sorted(PROFILES.items()):
            params = ", ".join(f"{k}={v}" for k, v in asdict(cfg).items())
            print(f"{name}: {params}")
        return 0

    try:
        cfg = get_profile(args.profile)
    except KeyError as e:
        print(e.args[0], file=sys.stderr)
        return 2

    if args.cmd == "simulate":
        steps = simulate_steps(args.step, args.count, args.error_every)
    else:
        try:
            with open(args.file, encoding="utf-8") as fh:
                steps = parse_replay(fh)
        except (OSError, ValueError) as e:
            print(f"replay: {e}", file=sys.stderr)
            return 2

    tracker = RateTracker(cfg, clock=ManualClock())
    log.debug("cli.run", cmd=args.cmd, profile=args.profile, steps=len(steps))
    for line in run_steps(tracker, steps):
        print(line)
    return 0

if __name__ == "__main__":
    sys.exit(main())
