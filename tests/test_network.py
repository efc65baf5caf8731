from __future__ import annotations

import json

import pytest

from reward_pool import pool_constants as const
from reward_pool.clock import ManualClock, SystemClock
from reward_pool.network import STATE_VERSION, LocalNetwork, derive_address

UNIT = const.UNIT


def test_addresses_are_deterministic_per_network():
    first = LocalNetwork("alpha")
    again = LocalNetwork("alpha")
    other = LocalNetwork("beta")

    assert first.account("alice") == again.account("alice")
    assert first.account("alice") != other.account("alice")
    assert first.account("alice").startswith("0x")
    assert len(first.account("alice")) == 42
    assert derive_address("a", 1) != derive_address("a1")


def test_contract_addresses_advance_with_nonce(deployed):
    network = deployed.network
    before = network.nonce
    token = network.deploy_token("Extra", "EXT", deployer=deployed.owner, supply=UNIT)
    assert network.nonce == before + 1
    assert network.token(token.address) is token
    assert token.address not in (deployed.stake_token.address, deployed.reward_token.address)


def test_lookup_errors(deployed):
    network = deployed.network
    with pytest.raises(KeyError):
        network.contract("0xmissing")
    with pytest.raises(TypeError):
        network.pool(deployed.stake_token.address)
    with pytest.raises(TypeError):
        network.token(deployed.pool.address)


def test_advance_time_requires_manual_clock():
    network = LocalNetwork("wall", SystemClock())
    with pytest.raises(TypeError):
        network.advance_time(10)

    manual = LocalNetwork("manual", ManualClock(5))
    assert manual.advance_time(10) == 15


def test_save_and_load_preserve_pool_state(deployed, tmp_path):
    pool = deployed.pool
    pool.notify_reward_amount(deployed.owner, deployed.reward_amount)
    deployed.approve_and_stake(deployed.user1, 100 * UNIT)
    deployed.clock.advance(const.SECONDS_PER_DAY)
    deployed.approve_and_stake(deployed.user2, 50 * UNIT)
    deployed.clock.advance(const.SECONDS_PER_DAY)
    pool.pause(deployed.owner)

    path = deployed.network.save(tmp_path / "state" / "testnet.json")
    restored = LocalNetwork.load(path)
    loaded = restored.pool(pool.address)

    assert loaded.to_dict() == pool.to_dict()
    assert loaded.paused()
    assert restored.clock.now() == deployed.clock.now()
    assert loaded.earned(deployed.user1) == pool.earned(deployed.user1)
    assert loaded.earned(deployed.user2) == pool.earned(deployed.user2)
    assert loaded.staking_token() is restored.token(deployed.stake_token.address)
    assert restored.nonce == deployed.network.nonce


def test_loaded_network_keeps_operating(deployed, tmp_path):
    deployed.pool.notify_reward_amount(deployed.owner, deployed.reward_amount)
    deployed.approve_and_stake(deployed.user1, 100 * UNIT)
    path = deployed.network.save(tmp_path / "testnet.json")

    restored = LocalNetwork.load(path)
    restored.advance_time(const.SECONDS_PER_DAY)
    deployed.clock.advance(const.SECONDS_PER_DAY)
    loaded = restored.pool(deployed.pool.address)

    assert loaded.claim_reward(deployed.user1) == deployed.pool.claim_reward(deployed.user1)


def test_state_file_is_plain_json(deployed, tmp_path):
    path = deployed.network.save(tmp_path / "testnet.json")
    payload = json.loads(path.read_text(encoding="utf-8"))
    assert payload["version"] == STATE_VERSION
    assert payload["clock"] == {"kind": "manual", "now": deployed.clock.now()}
    assert len(payload["tokens"]) == 2
    assert len(payload["pools"]) == 1


def test_unknown_state_version_is_rejected():
    with pytest.raises(ValueError, match="Unsupported"):
        LocalNetwork.from_dict({"version": 99, "name": "x"})


def test_older_state_without_credited_rewards_is_rebuilt(deployed):
    deployed.pool.notify_reward_amount(deployed.owner, deployed.reward_amount)
    deployed.approve_and_stake(deployed.user1, 100 * UNIT)
    deployed.clock.advance(const.SECONDS_PER_DAY)
    deployed.pool.withdraw(deployed.user1, 50 * UNIT)

    payload = deployed.network.to_dict()
    del payload["pools"][0]["credited_rewards"]
    restored = LocalNetwork.from_dict(payload)

    assert restored.pool(deployed.pool.address).to_dict() == deployed.pool.to_dict()
