"""Game routes: a thin JSON layer over `GameAPI`.

The caller's identity comes from the `X-User-Id` header set by the authentication
proxy in front of this service.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Header, Query, Request
from fastapi.responses import JSONResponse

from api.schemas import JoinQueueRequest, RateMessageRequest, RegisterUserRequest, SendMessageRequest
from services.game_api import GameAPI, ServiceResult

router = APIRouter()

_STATUS_BY_ERROR_KIND = {
    "validation": 400,
    "forbidden": 403,
    "not_found": 404,
    "conflict": 409,
    "expired": 410,
}


def get_game_api(request: Request) -> GameAPI:
    return request.app.state.game_api


def current_user_id(x_user_id: str = Header(..., alias="X-User-Id")) -> str:
    return x_user_id


def respond(result: ServiceResult) -> JSONResponse:
    if result.success:
        return JSONResponse(status_code=200, content=result.as_dict())
    status_code = _STATUS_BY_ERROR_KIND.get(result.error_kind or "", 500)
    return JSONResponse(status_code=status_code, content=result.as_dict())


@router.post("/users/me")
def register_user(
    body: RegisterUserRequest,
    user_id: str = Depends(current_user_id),
    game: GameAPI = Depends(get_game_api),
):
    """Create or refresh the caller's profile"""
    return respond(
        game.register_user(
            user_id,
            email=body.email,
            first_name=body.first_name,
            last_name=body.last_name,
            profile_image_url=body.profile_image_url,
        )
    )


@router.get("/users/me")
def get_me(user_id: str = Depends(current_user_id), game: GameAPI = Depends(get_game_api)):
    return respond(game.get_user(user_id))


@router.get("/users/recent-matches")
def recent_matches(
    limit: Optional[int] = Query(default=None, ge=1, le=100),
    user_id: str = Depends(current_user_id),
    game: GameAPI = Depends(get_game_api),
):
    return respond(game.recent_matches(user_id, limit))


@router.post("/queue/join")
def join_queue(
    body: JoinQueueRequest,
    user_id: str = Depends(current_user_id),
    game: GameAPI = Depends(get_game_api),
):
    """Join the queue as a player or a judge"""
    return respond(game.join_queue(user_id, body.match_type))


@router.post("/queue/leave")
def leave_queue(user_id: str = Depends(current_user_id), game: GameAPI = Depends(get_game_api)):
    return respond(game.leave_queue(user_id))


@router.get("/queue/status")
def queue_status(user_id: str = Depends(current_user_id), game: GameAPI = Depends(get_game_api)):
    return respond(game.queue_status(user_id))


@router.get("/queue/poll")
def poll_queue(user_id: str = Depends(current_user_id), game: GameAPI = Depends(get_game_api)):
    """Heartbeat while queued; forms the match when an opponent and judges are available"""
    return respond(game.poll(user_id))


@router.get("/matches/active")
def active_match(user_id: str = Depends(current_user_id), game: GameAPI = Depends(get_game_api)):
    return respond(game.active_match(user_id))


@router.get("/matches/{match_id}")
def get_match(
    match_id: int,
    user_id: str = Depends(current_user_id),
    game: GameAPI = Depends(get_game_api),
):
    return respond(game.match_detail(match_id, user_id))


@router.get("/matches/{match_id}/messages")
def get_match_messages(
    match_id: int,
    user_id: str = Depends(current_user_id),
    game: GameAPI = Depends(get_game_api),
):
    return respond(game.match_messages(match_id, user_id))


@router.post("/matches/{match_id}/messages")
def send_message(
    match_id: int,
    body: SendMessageRequest,
    user_id: str = Depends(current_user_id),
    game: GameAPI = Depends(get_game_api),
):
    return respond(game.send_message(match_id, user_id, body.content))


@router.post("/matches/{match_id}/forfeit")
def forfeit_match(
    match_id: int,
    user_id: str = Depends(current_user_id),
    game: GameAPI = Depends(get_game_api),
):
    return respond(game.forfeit(match_id, user_id))


@router.post("/matches/{match_id}/end")
def end_match(
    match_id: int,
    user_id: str = Depends(current_user_id),
    game: GameAPI = Depends(get_game_api),
):
    return respond(game.end_match(match_id, user_id))


@router.post("/messages/{message_id}/rate")
def rate_message(
    message_id: int,
    body: RateMessageRequest,
    user_id: str = Depends(current_user_id),
    game: GameAPI = Depends(get_game_api),
):
    """Submit the caller's tier for one message; the second judge's rating settles judge Elo"""
    return respond(game.rate_message(message_id, user_id, body.rating, body.explanation))


@router.get("/leaderboard")
def leaderboard(
    limit: Optional[int] = Query(default=None, ge=1, le=100),
    game: GameAPI = Depends(get_game_api),
):
    return respond(game.leaderboard(limit))


@router.get("/leaderboard/judges")
def judge_leaderboard(
    limit: Optional[int] = Query(default=None, ge=1, le=100),
    game: GameAPI = Depends(get_game_api),
):
    return respond(game.judge_leaderboard(limit))
