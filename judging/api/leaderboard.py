"""
Leaderboard and comparison endpoints
"""
from typing import Optional

from fastapi import APIRouter, Header, Response

from judging import state
from judging.services.leaderboard import get_comparison, get_leaderboard


router = APIRouter(prefix="/events/{event_id}", tags=["leaderboard"])


@router.get("/leaderboard")
async def leaderboard(
    event_id: str,
    response: Response,
    if_none_match: Optional[str] = Header(default=None),
):
    """
    Ranked results for every team of the event

    The response carries an ETag. Pollers that send it back in If-None-Match
    get 304 when nothing changed since their last fetch.
    """
    board = get_leaderboard(state.require_store(), state.SETTINGS, event_id)
    etag = f'"{board.fingerprint}"'

    if if_none_match and if_none_match.strip() == etag:
        return Response(status_code=304, headers={"ETag": etag})

    response.headers["ETag"] = etag
    response.headers["Cache-Control"] = "no-cache"
    return board.model_dump()


@router.get("/compare")
async def compare(event_id: str, team1: str, team2: str):
    """Head-to-head: judge agreement, score gap, consistency and per-criterion breakdown"""
    comparison = get_comparison(state.require_store(), state.SETTINGS, event_id, team1, team2)
    return comparison.model_dump()
