"""ORM models."""

from models.base import Base
from models.judge_rating import JudgeRating
from models.match import Match
from models.message import Message
from models.queue_entry import QueueEntry
from models.user import User

__all__ = [
    "Base",
    "JudgeRating",
    "Match",
    "Message",
    "QueueEntry",
    "User",
]
