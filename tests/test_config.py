from __future__ import annotations

from reward_pool import config as cfg
from reward_pool import pool_constants as const


def test_defaults_without_environment(monkeypatch):
    for name in ("INITIAL_REWARD_RATE", "REWARDS_DURATION_SECONDS", "REWARD_BUDGET", "INITIAL_REWARD"):
        monkeypatch.delenv(name, raising=False)

    params = cfg.default_pool_parameters()

    assert params == cfg.PoolParameters()
    assert params.rewards_duration == 30 * const.SECONDS_PER_DAY
    assert params.reward_rate == 100 * const.UNIT


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("REWARDS_DURATION_SECONDS", "3600")
    monkeypatch.setenv("INITIAL_REWARD_RATE", "12")

    params = cfg.default_pool_parameters()

    assert params.rewards_duration == 3600
    assert params.reward_rate == 12


def test_malformed_override_falls_back(monkeypatch):
    monkeypatch.setenv("REWARD_BUDGET", "lots")
    assert cfg.default_pool_parameters().reward_budget == const.DEFAULT_REWARD_BUDGET


def test_resolve_state_path(monkeypatch, tmp_path):
    monkeypatch.setattr(cfg, "STATE_DIR", tmp_path)
    assert cfg.resolve_state_path("localnet") == tmp_path / "localnet.json"
    assert cfg.resolve_state_path("team/dev") == tmp_path / "team_dev.json"
