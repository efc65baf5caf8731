"""Reward pool protocol and tooling constants.

This module centralizes the numeric constants used by the accrual engine and
the deploy tooling. Each constant includes a note on its source or rationale.
"""

from __future__ import annotations

# =============================================================================
# Fixed-point arithmetic
# =============================================================================

# Scale factor of the reward-per-token accumulator.
# Floor division against this scale under-pays by at most one base unit per
# account settlement, which keeps the pool solvent.
PRECISION = 10**18

# Largest value any stored amount, rate or timestamp may take (uint256 domain)
UINT256_MAX = 2**256 - 1


# =============================================================================
# Time
# =============================================================================

SECONDS_PER_DAY = 86_400

# Length of a reward period until the owner changes it
# Source: the pool ships with a 30 day period
DEFAULT_REWARDS_DURATION = 30 * SECONDS_PER_DAY


# =============================================================================
# Tokens
# =============================================================================

TOKEN_DECIMALS = 18
UNIT = 10**TOKEN_DECIMALS

# Fixed supplies minted to the deployer of the two demo tokens
DEFAULT_STAKE_TOKEN_SUPPLY = 1_000_000_000 * UNIT
DEFAULT_REWARD_TOKEN_SUPPLY = 1_000_000_000 * UNIT

ZERO_ADDRESS = "0x" + "0" * 40

# Published events kept in memory per pool; subscribers see every event
EVENT_LOG_SIZE = 1_000


# =============================================================================
# Deployment defaults
# =============================================================================

# Reward rate handed to the constructor (reward units per second).
# Note: replaced by the first notify_reward_amount call.
DEFAULT_INITIAL_REWARD_RATE = 100 * UNIT

# Reward units transferred into the pool right after deployment
DEFAULT_REWARD_BUDGET = 10_000_000 * UNIT

# Amount notified to open the first reward period
DEFAULT_INITIAL_REWARD = 100_000 * UNIT
