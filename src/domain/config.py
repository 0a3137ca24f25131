"""Load game tuning from a TOML file."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
import tomllib

from domain.match_state import MatchParameters
from domain.matchmaking import MatchmakingParameters
from domain.ratings.judge_elo import JudgeEloParameters
from domain.ratings.player_elo import PlayerEloParameters

ROOT_DIR = Path(__file__).resolve().parents[2]
DEFAULT_CONFIG_PATH = ROOT_DIR / "configs" / "game.toml"


@dataclass(frozen=True)
class ServiceParameters:
    leaderboard_limit: int = 10
    recent_matches_limit: int = 10


@dataclass(frozen=True)
class GameConfig:
    """Every tunable of the engine, grouped per component."""

    matchmaking: MatchmakingParameters = field(default_factory=MatchmakingParameters)
    player_elo: PlayerEloParameters = field(default_factory=PlayerEloParameters)
    judge_elo: JudgeEloParameters = field(default_factory=JudgeEloParameters)
    match: MatchParameters = field(default_factory=MatchParameters)
    service: ServiceParameters = field(default_factory=ServiceParameters)
    file_path: Path | None = None

    def as_config_json(self) -> dict[str, Any]:
        return {
            "matchmaking": {
                "base_range": self.matchmaking.base_range,
                "range_step": self.matchmaking.range_step,
                "step_seconds": self.matchmaking.step_seconds,
                "join_grace_seconds": self.matchmaking.join_grace_seconds,
            },
            "player_elo": {
                "initial_elo": self.player_elo.initial_elo,
                "k_factor": self.player_elo.k_factor,
                "scale_factor": self.player_elo.scale_factor,
            },
            "judge_elo": {
                "initial_elo": self.judge_elo.initial_elo,
                "agreement_bonus": self.judge_elo.agreement_bonus,
                "disagreement_penalty": self.judge_elo.disagreement_penalty,
                "floor": self.judge_elo.floor,
            },
            "match": {
                "time_limit_seconds": self.match.time_limit_seconds,
                "max_message_length": self.match.max_message_length,
                "forfeit_winner_score": self.match.forfeit_winner_score,
                "forfeit_loser_score": self.match.forfeit_loser_score,
                "draw_score": self.match.draw_score,
            },
            "service": {
                "leaderboard_limit": self.service.leaderboard_limit,
                "recent_matches_limit": self.service.recent_matches_limit,
            },
        }


def load_game_config(config_path: Path | None = None) -> GameConfig:
    """Load and validate a game config file; `None` returns the built-in defaults."""
    if config_path is None:
        return GameConfig()
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")
    if not config_path.is_file():
        raise ValueError(f"Config path is not a file: {config_path}")

    with config_path.open("rb") as file:
        raw = tomllib.load(file)
    return _parse_game_config(raw, config_path)


def _parse_game_config(raw: dict[str, Any], file_path: Path) -> GameConfig:
    matchmaking_raw = raw.get("matchmaking", {})
    player_raw = raw.get("player_elo", {})
    judge_raw = raw.get("judge_elo", {})
    match_raw = raw.get("match", {})
    service_raw = raw.get("service", {})

    matchmaking = MatchmakingParameters(
        base_range=int(matchmaking_raw.get("base_range", 100)),
        range_step=int(matchmaking_raw.get("range_step", 50)),
        step_seconds=float(matchmaking_raw.get("step_seconds", 30.0)),
        join_grace_seconds=float(matchmaking_raw.get("join_grace_seconds", 1.0)),
    )
    player_elo = PlayerEloParameters(
        initial_elo=int(player_raw.get("initial_elo", 1200)),
        k_factor=float(player_raw.get("k_factor", 32.0)),
        scale_factor=float(player_raw.get("scale_factor", 400.0)),
    )
    judge_elo = JudgeEloParameters(
        initial_elo=int(judge_raw.get("initial_elo", 1200)),
        agreement_bonus=int(judge_raw.get("agreement_bonus", 10)),
        disagreement_penalty=int(judge_raw.get("disagreement_penalty", 5)),
        floor=int(judge_raw.get("floor", 800)),
    )
    match = MatchParameters(
        time_limit_seconds=int(match_raw.get("time_limit_seconds", 300)),
        max_message_length=int(match_raw.get("max_message_length", 500)),
        forfeit_winner_score=int(match_raw.get("forfeit_winner_score", 10)),
        forfeit_loser_score=int(match_raw.get("forfeit_loser_score", 0)),
        draw_score=int(match_raw.get("draw_score", 5)),
    )
    service = ServiceParameters(
        leaderboard_limit=int(service_raw.get("leaderboard_limit", 10)),
        recent_matches_limit=int(service_raw.get("recent_matches_limit", 10)),
    )

    config = GameConfig(
        matchmaking=matchmaking,
        player_elo=player_elo,
        judge_elo=judge_elo,
        match=match,
        service=service,
        file_path=file_path,
    )
    _validate_config(file_path=file_path, config=config)
    return config


def _validate_config(*, file_path: Path, config: GameConfig) -> None:
    if config.matchmaking.base_range < 0:
        raise ValueError(f"{file_path}: [matchmaking].base_range must be >= 0")
    if config.matchmaking.range_step < 0:
        raise ValueError(f"{file_path}: [matchmaking].range_step must be >= 0")
    if config.matchmaking.step_seconds * 1000 < 1:
        raise ValueError(f"{file_path}: [matchmaking].step_seconds must be >= 0.001")
    if config.matchmaking.join_grace_seconds < 0.0:
        raise ValueError(f"{file_path}: [matchmaking].join_grace_seconds must be >= 0")
    if config.player_elo.initial_elo <= 0:
        raise ValueError(f"{file_path}: [player_elo].initial_elo must be > 0")
    if config.player_elo.k_factor <= 0.0:
        raise ValueError(f"{file_path}: [player_elo].k_factor must be > 0")
    if config.player_elo.scale_factor <= 0.0:
        raise ValueError(f"{file_path}: [player_elo].scale_factor must be > 0")
    if config.judge_elo.agreement_bonus < 0:
        raise ValueError(f"{file_path}: [judge_elo].agreement_bonus must be >= 0")
    if config.judge_elo.disagreement_penalty < 0:
        raise ValueError(f"{file_path}: [judge_elo].disagreement_penalty must be >= 0")
    if config.judge_elo.initial_elo < config.judge_elo.floor:
        raise ValueError(f"{file_path}: [judge_elo].initial_elo must be >= [judge_elo].floor")
    if config.match.time_limit_seconds <= 0:
        raise ValueError(f"{file_path}: [match].time_limit_seconds must be > 0")
    if config.match.max_message_length <= 0:
        raise ValueError(f"{file_path}: [match].max_message_length must be > 0")
    for score_name in ("forfeit_winner_score", "forfeit_loser_score", "draw_score"):
        score = getattr(config.match, score_name)
        if score < 0 or score > 10:
            raise ValueError(f"{file_path}: [match].{score_name} must be between 0 and 10")
    if config.service.leaderboard_limit <= 0:
        raise ValueError(f"{file_path}: [service].leaderboard_limit must be > 0")
    if config.service.recent_matches_limit <= 0:
        raise ValueError(f"{file_path}: [service].recent_matches_limit must be > 0")


__all__ = [
    "DEFAULT_CONFIG_PATH",
    "GameConfig",
    "ServiceParameters",
    "load_game_config",
]
