"""Tests for TOML-based game config loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from domain.config import DEFAULT_CONFIG_PATH, GameConfig, load_game_config
from services.game_api import GameAPI


def test_load_game_config_overrides_defaults(tmp_path: Path) -> None:
    config_path = tmp_path / "game.toml"
    config_path.write_text(
        """
[matchmaking]
base_range = 150
range_step = 25
step_seconds = 20.0

[player_elo]
k_factor = 24.0

[judge_elo]
agreement_bonus = 12
floor = 900

[match]
time_limit_seconds = 120
max_message_length = 280

[service]
leaderboard_limit = 25
""".strip()
    )

    config = load_game_config(config_path)

    assert config.file_path == config_path
    assert config.matchmaking.base_range == 150
    assert config.matchmaking.range_step == 25
    assert config.matchmaking.step_seconds == pytest.approx(20.0)
    assert config.matchmaking.join_grace_seconds == pytest.approx(1.0)
    assert config.player_elo.k_factor == pytest.approx(24.0)
    assert config.player_elo.initial_elo == 1200
    assert config.judge_elo.agreement_bonus == 12
    assert config.judge_elo.disagreement_penalty == 5
    assert config.judge_elo.floor == 900
    assert config.match.time_limit_seconds == 120
    assert config.match.max_message_length == 280
    assert config.service.leaderboard_limit == 25
    assert config.service.recent_matches_limit == 10


def test_shipped_config_matches_defaults() -> None:
    shipped = load_game_config(DEFAULT_CONFIG_PATH)

    assert shipped.as_config_json() == GameConfig().as_config_json()


def test_missing_config_path_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_game_config(tmp_path / "missing.toml")


def test_none_returns_defaults() -> None:
    config = load_game_config(None)

    assert config.file_path is None
    assert config.match.time_limit_seconds == 300


@pytest.mark.parametrize(
    ("body", "message"),
    [
        ("[matchmaking]\nstep_seconds = 0\n", r"\[matchmaking\]\.step_seconds must be >= 0.001"),
        ("[matchmaking]\nstep_seconds = 0.0004\n", r"\[matchmaking\]\.step_seconds must be >= 0.001"),
        ("[player_elo]\nk_factor = -1\n", r"\[player_elo\]\.k_factor must be > 0"),
        ("[judge_elo]\ninitial_elo = 700\n", r"\[judge_elo\]\.initial_elo must be >= \[judge_elo\]\.floor"),
        ("[match]\ndraw_score = 11\n", r"\[match\]\.draw_score must be between 0 and 10"),
        ("[service]\nrecent_matches_limit = 0\n", r"\[service\]\.recent_matches_limit must be > 0"),
    ],
)
def test_invalid_values_are_rejected(tmp_path: Path, body: str, message: str) -> None:
    config_path = tmp_path / "bad.toml"
    config_path.write_text(body)

    with pytest.raises(ValueError, match=message):
        load_game_config(config_path)


def test_config_drives_the_engine(tmp_path: Path, session_factory, clock) -> None:
    config_path = tmp_path / "short.toml"
    config_path.write_text("[match]\ntime_limit_seconds = 10\n")
    game = GameAPI(session_factory, load_game_config(config_path), clock=clock)

    assert game.lifecycle.params.time_limit_seconds == 10
    assert game.matcher.match_params.time_limit_seconds == 10
