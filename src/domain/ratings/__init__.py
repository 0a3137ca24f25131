"""Player and judge Elo calculators."""

from domain.ratings.judge_elo import JudgeEloParameters, JudgeEloUpdate, calculate_judge_updates
from domain.ratings.player_elo import PlayerEloParameters, PlayerEloUpdate, calculate_player_updates

__all__ = [
    "JudgeEloParameters",
    "JudgeEloUpdate",
    "PlayerEloParameters",
    "PlayerEloUpdate",
    "calculate_judge_updates",
    "calculate_player_updates",
]
