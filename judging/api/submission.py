"""
Submission endpoints for judges' scores
"""
from typing import List, Optional

from fastapi import APIRouter
from pydantic import BaseModel

from judging import state
from judging.core import submission
from judging.models import CriterionScore


router = APIRouter(prefix="/scores", tags=["submission"])


class SubmitScoresRequest(BaseModel):
    event_id: str
    team_id: str
    judge_id: Optional[str] = None
    scores: List[CriterionScore] = []
    overall_comments: Optional[str] = None
    time_spent_seconds: Optional[int] = 0


@router.post("", status_code=201)
async def submit_scores(payload: SubmitScoresRequest):
    """
    Judge confirms scores for a team

    Request:
        {
            "event_id": "...",
            "team_id": "...",
            "judge_id": "...",
            "scores": [{"criteria_id": "communication", "score": 20, "reflection": "..."}],
            "overall_comments": "...",
            "time_spent_seconds": 420
        }

    Response:
        {"receipt": {"submission_id": "...", "total_score": 78, "max_total": 100, ...}}
    """
    receipt = submission.submit(
        state.require_store(),
        state.SETTINGS,
        payload.event_id,
        payload.team_id,
        payload.judge_id,
        payload.scores,
        comments=payload.overall_comments,
        time_spent=payload.time_spent_seconds,
    )
    return {
        "receipt": receipt.model_dump(),
        "message": f"Scores submitted. Total: {receipt.total_score}/{receipt.max_total}",
    }


@router.put("")
async def resubmit_scores(payload: SubmitScoresRequest):
    """Replace an earlier submission (only when re-submission is enabled)"""
    receipt = submission.resubmit(
        state.require_store(),
        state.SETTINGS,
        payload.event_id,
        payload.team_id,
        payload.judge_id,
        payload.scores,
        comments=payload.overall_comments,
        time_spent=payload.time_spent_seconds,
    )
    return {
        "receipt": receipt.model_dump(),
        "message": f"Scores updated. Total: {receipt.total_score}/{receipt.max_total}",
    }
