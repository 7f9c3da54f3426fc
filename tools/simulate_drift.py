"""
Run the closed-loop drift simulation and print a JSON summary.

Example:
    python tools/simulate_drift.py --strategy TIME_SCALE --skew 0.02 --frames 1200
"""

from __future__ import annotations

import argparse
import json

from controller.enums.strategy import Strategy
from controller.sync_config import SyncConfig
from simulation.harness import simulate


def main() -> None:
    parser = argparse.ArgumentParser(description="Simulate soundtrack drift correction")
    parser.add_argument("--strategy", choices=[s.value for s in Strategy], default=Strategy.TIME_SCALE.value)
    parser.add_argument("--frames", type=int, default=600)
    parser.add_argument("--fps", type=float, default=60.0)
    parser.add_argument("--skew", type=float, default=0.02, help="device speed error, 0.02 = 2%% fast")
    parser.add_argument("--offset", type=float, default=0.0)
    parser.add_argument("--stall-at", type=int, default=None)
    parser.add_argument("--stall-frames", type=int, default=0)
    parser.add_argument("--no-jump", action="store_true")
    args = parser.parse_args()

    config = SyncConfig(
        strategy=Strategy(args.strategy),
        offset_s=args.offset,
        jump_if_too_far=not args.no_jump,
    )
    result = simulate(
        config,
        frames=args.frames,
        frame_dt=1.0 / args.fps,
        skew=args.skew,
        stall_at=args.stall_at,
        stall_frames=args.stall_frames,
    )
    print(json.dumps(result.summary(), indent=2))


if __name__ == "__main__":
    main()
