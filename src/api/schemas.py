"""Request bodies for the HTTP routes."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class RegisterUserRequest(BaseModel):
    email: Optional[str] = Field(default=None, description="Email from the identity provider")
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None


class JoinQueueRequest(BaseModel):
    match_type: str = Field(default="player", description="'player' or 'judge'")


class SendMessageRequest(BaseModel):
    content: str = Field(description="Message text; trimmed before it is stored")


class RateMessageRequest(BaseModel):
    rating: str = Field(description="brilliant, great, excellent, good, miss, mistake or blunder")
    explanation: Optional[str] = None
