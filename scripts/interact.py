#!/usr/bin/env python3
"""Query and drive the latest staking deployment on a local network.

Every command loads the persisted network, applies at most one pool operation
and writes the network back, so consecutive invocations share one ledger.
Accounts are given by label (``alice``) or by ``0x`` address; the label
``deployer`` resolves to the pool owner recorded at deployment.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from reward_pool import config as cfg
from reward_pool.deployments import STAKING_POOL_KEY, latest_deployment
from reward_pool.errors import PoolError
from reward_pool.network import LocalNetwork
from reward_pool.reporting import (
    format_status,
    format_units,
    parse_units,
    pool_status,
    positions_frame,
)

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
    datefmt="%H:%M:%S",
)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--network",
        default=cfg.DEFAULT_NETWORK,
        help=f"Local network name (default: {cfg.DEFAULT_NETWORK}).",
    )
    parser.add_argument(
        "--account",
        default="deployer",
        help="Acting account label or address (default: deployer).",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("status", help="Print balances and pool state for --account.")
    sub.add_parser("positions", help="Print every ledger account.")
    for name in ("stake", "withdraw"):
        cmd = sub.add_parser(name, help=f"{name.capitalize()} staking tokens.")
        cmd.add_argument("amount", help="Amount in whole tokens, e.g. 100 or 0.5.")
    sub.add_parser("claim", help="Claim earned rewards.")
    sub.add_parser("exit", help="Withdraw the whole stake and claim rewards.")
    notify = sub.add_parser("notify", help="Owner: fund a reward period.")
    notify.add_argument("amount", help="Reward amount in whole tokens.")
    duration = sub.add_parser("set-duration", help="Owner: set the next period length.")
    duration.add_argument("seconds", type=int)
    sub.add_parser("pause", help="Owner: block new stakes.")
    sub.add_parser("unpause", help="Owner: allow new stakes again.")
    advance = sub.add_parser("advance", help="Move the network clock forward.")
    advance.add_argument("seconds", type=int)
    return parser.parse_args()


def _resolve_account(network: LocalNetwork, label: str, deployer: str) -> str:
    if label.startswith("0x"):
        return label.lower()
    if label == "deployer":
        return deployer
    return network.account(label)


def main() -> None:
    args = parse_args()
    record = latest_deployment(args.network)
    state_path = cfg.resolve_state_path(args.network)
    if record is None or not state_path.exists():
        print(f"No deployment found for network: {args.network}")
        return

    network = LocalNetwork.load(state_path)
    pool = network.pool(record.contracts[STAKING_POOL_KEY])
    account = _resolve_account(network, args.account, record.deployer)
    print(f"Interacting with contracts on {args.network}")
    print(f"User address: {account}")

    try:
        if args.command == "status":
            print(format_status(pool_status(pool, account)))
            return
        if args.command == "positions":
            frame = positions_frame(pool)
            for column in ("staked", "rewards", "earned"):
                frame[column] = frame[column].map(format_units)
            print(frame.to_string(index=False) if not frame.empty else "No positions")
            return
        if args.command == "stake":
            amount = parse_units(args.amount)
            pool.staking_token().approve(account, pool.address, amount)
            pool.stake(account, amount)
        elif args.command == "withdraw":
            pool.withdraw(account, parse_units(args.amount))
        elif args.command == "claim":
            paid = pool.claim_reward(account)
            print(f"Claimed {format_units(paid)} RWD")
        elif args.command == "exit":
            withdrawn, paid = pool.exit(account)
            print(f"Withdrew {format_units(withdrawn)} STK and claimed {format_units(paid)} RWD")
        elif args.command == "notify":
            pool.notify_reward_amount(account, parse_units(args.amount))
        elif args.command == "set-duration":
            pool.set_rewards_duration(account, args.seconds)
        elif args.command == "pause":
            pool.pause(account)
        elif args.command == "unpause":
            pool.unpause(account)
        elif args.command == "advance":
            now = network.advance_time(args.seconds)
            print(f"Clock advanced to {now}")
    except PoolError as exc:
        print(f"{args.command} failed: {exc.reason}")
        sys.exit(1)
    except ValueError as exc:
        print(f"{args.command} failed: {exc}")
        sys.exit(1)

    network.save(state_path)
    print(format_status(pool_status(pool, account)))


if __name__ == "__main__":
    main()
