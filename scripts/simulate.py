#!/usr/bin/env python3
"""Run randomised pool simulations and report any broken ledger invariant."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from reward_pool import config as cfg
from reward_pool.simulation import (
    SimulationConfig,
    invariant_violations,
    run_simulation,
    summarize_simulation,
)

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
    datefmt="%H:%M:%S",
)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--seeds",
        type=int,
        nargs="+",
        default=[1, 2, 3],
        help="Random seeds, one simulation each (default: 1 2 3).",
    )
    parser.add_argument(
        "--steps",
        type=int,
        default=SimulationConfig().steps,
        help="Actions per simulation (default: %(default)s).",
    )
    parser.add_argument(
        "--participants",
        type=int,
        default=SimulationConfig().participants,
        help="Number of stakers (default: %(default)s).",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=cfg.OUT_DIR,
        help="Directory for per-seed CSV traces (default: out).",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    failed = False
    for seed in args.seeds:
        frame = run_simulation(
            SimulationConfig(seed=seed, steps=args.steps, participants=args.participants)
        )
        output = args.output_dir / f"simulation_{seed}.csv"
        output.parent.mkdir(parents=True, exist_ok=True)
        frame.to_csv(output, index=False)

        problems = invariant_violations(frame)
        print(f"[simulate] seed={seed} steps={len(frame)} violations={len(problems)} -> {output}")
        print(summarize_simulation(frame).to_string(index=False))
        for problem in problems:
            print(f"  ! {problem}")
        failed = failed or bool(problems)
    if failed:
        sys.exit(1)


if __name__ == "__main__":
    main()
