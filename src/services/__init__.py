"""Engine services built on the repositories."""

from services.consensus import JudgeConsensusTracker, RatingReceipt
from services.game_api import GameAPI, ServiceResult
from services.lifecycle import MatchEnd, MatchLifecycle
from services.matchmaking import MatchMatcher
from services.queue_manager import QueueManager, QueueStatus

__all__ = [
    "GameAPI",
    "JudgeConsensusTracker",
    "MatchEnd",
    "MatchLifecycle",
    "MatchMatcher",
    "QueueManager",
    "QueueStatus",
    "RatingReceipt",
    "ServiceResult",
]
