"""Read-only status reports for a staking pool."""

from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal, InvalidOperation, localcontext

import pandas as pd

from . import pool_constants as const
from .pool import StakingPool

POSITION_COLUMNS = ["account", "staked", "rewards", "earned", "share_pct"]


def format_units(value: int, decimals: int = const.TOKEN_DECIMALS) -> str:
    """Render a base-unit integer as a decimal string (``1500000000000000000`` -> ``1.5``)."""
    sign = "-" if value < 0 else ""
    whole, frac = divmod(abs(int(value)), 10**decimals)
    if decimals == 0:
        return f"{sign}{whole}"
    frac_str = str(frac).rjust(decimals, "0").rstrip("0") or "0"
    return f"{sign}{whole}.{frac_str}"


def parse_units(text: str, decimals: int = const.TOKEN_DECIMALS) -> int:
    """Parse a decimal string into base units (``"1.5"`` -> ``1500000000000000000``)."""
    try:
        value = Decimal(text.strip())
    except InvalidOperation as exc:
        raise ValueError(f"Invalid amount: {text!r}") from exc
    if not value.is_finite():
        raise ValueError(f"Invalid amount: {text!r}")
    with localcontext() as ctx:
        ctx.prec = 100
        scaled = value * (Decimal(10) ** decimals)
    if scaled != scaled.to_integral_value():
        raise ValueError(f"Too many decimal places in {text!r} (max {decimals})")
    return int(scaled)


def _iso(ts: int) -> str | None:
    if ts <= 0:
        return None
    return datetime.fromtimestamp(ts, tz=UTC).isoformat()


def pool_status(pool: StakingPool, account: str) -> dict[str, str | None]:
    """Summarise the pool as seen by ``account``."""
    stake_token = pool.staking_token()
    reward_token = pool.reward_token()
    return {
        "account": account,
        "staking_token_balance": format_units(stake_token.balance_of(account)),
        "reward_token_balance": format_units(reward_token.balance_of(account)),
        "staked_amount": format_units(pool.staked_balance(account)),
        "earned_rewards": format_units(pool.earned(account)),
        "total_staked": format_units(pool.total_staked()),
        "reward_rate_per_second": format_units(pool.reward_rate()),
        "rewards_duration_seconds": str(pool.rewards_duration()),
        "period_finish": _iso(pool.period_finish()),
        "period_phase": pool.period_phase().value,
        "paused": str(pool.paused()),
    }


def format_status(status: dict[str, str | None]) -> str:
    lines = ["=== Current Status ==="]
    width = max(len(key) for key in status)
    for key, value in status.items():
        label = key.replace("_", " ").capitalize()
        lines.append(f"{label.ljust(width)} : {value if value is not None else '-'}")
    lines.append("=" * 22)
    return "\n".join(lines)


def positions_frame(pool: StakingPool) -> pd.DataFrame:
    """One row per ledger account, largest stake first.

    Amounts are exact base-unit integers (object dtype); ``share_pct`` is the
    account's share of total stake.
    """
    addresses = pool.accounts()
    if not addresses:
        return pd.DataFrame(columns=POSITION_COLUMNS)
    total = pool.total_staked()
    records = []
    for address in addresses:
        entry = pool.account(address)
        records.append(
            {
                "account": address,
                "staked": entry.staked_balance,
                "rewards": entry.rewards,
                "earned": pool.earned(address),
                "share_pct": (entry.staked_balance / total * 100.0) if total else 0.0,
            }
        )
    df = pd.DataFrame(records, columns=POSITION_COLUMNS)
    for column in ("staked", "rewards", "earned"):
        df[column] = df[column].astype(object)
    return df.sort_values("share_pct", ascending=False).reset_index(drop=True)
