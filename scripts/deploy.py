#!/usr/bin/env python3
"""Deploy the staking tokens and pool onto a local network and record it."""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from reward_pool import config as cfg
from reward_pool.clock import ManualClock
from reward_pool.deployments import deploy_staking_system, save_deployment
from reward_pool.errors import PoolError
from reward_pool.network import LocalNetwork
from reward_pool.reporting import format_units, parse_units

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
    datefmt="%H:%M:%S",
)


def parse_args() -> argparse.Namespace:
    defaults = cfg.default_pool_parameters()
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--network",
        default=cfg.DEFAULT_NETWORK,
        help=f"Local network name (default: {cfg.DEFAULT_NETWORK}).",
    )
    parser.add_argument(
        "--reward-rate",
        default=format_units(defaults.reward_rate),
        help="Initial reward rate in tokens per second (default: %(default)s).",
    )
    parser.add_argument(
        "--rewards-duration",
        type=int,
        default=defaults.rewards_duration,
        help="Reward period length in seconds (default: %(default)s).",
    )
    parser.add_argument(
        "--reward-budget",
        default=format_units(defaults.reward_budget),
        help="Reward tokens transferred into the pool (default: %(default)s).",
    )
    parser.add_argument(
        "--initial-reward",
        default=format_units(defaults.initial_reward),
        help="Reward tokens notified for the first period (default: %(default)s).",
    )
    parser.add_argument(
        "--fund",
        nargs="*",
        default=[],
        metavar="LABEL",
        help="Account labels that receive staking tokens after deployment.",
    )
    parser.add_argument(
        "--fund-amount",
        default="1000",
        help="Staking tokens sent to each --fund account (default: %(default)s).",
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="Overwrite an existing network state file.",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    state_path = cfg.resolve_state_path(args.network)
    if state_path.exists() and not args.force:
        print(f"Network state already exists at {state_path} (use --force to replace)")
        sys.exit(1)

    network = LocalNetwork(args.network, ManualClock(int(time.time())))
    deployer = network.account("deployer")
    params = cfg.PoolParameters(
        reward_rate=parse_units(args.reward_rate),
        rewards_duration=args.rewards_duration,
        reward_budget=parse_units(args.reward_budget),
        initial_reward=parse_units(args.initial_reward),
    )
    try:
        deployment = deploy_staking_system(network, deployer, parameters=params)
    except PoolError as exc:
        print(f"Deployment failed: {exc.reason}")
        sys.exit(1)

    stake_token = deployment.pool.staking_token()
    fund_amount = parse_units(args.fund_amount)
    for label in args.fund:
        account = network.account(label)
        stake_token.transfer(deployer, account, fund_amount)
        print(f"Funded {label} ({account}) with {format_units(fund_amount)} STK")

    network.save(state_path)
    record_path = save_deployment(deployment.record)
    print(f"\nNetwork state saved to: {state_path}")
    print(f"Deployment info saved to: {record_path}")

    print("\n=== Deployment Summary ===")
    for name, address in deployment.record.contracts.items():
        print(f"{name}: {address}")
    print("==========================\n")


if __name__ == "__main__":
    main()
