"""
Configuration endpoints
"""
from fastapi import APIRouter

from judging import state


router = APIRouter(tags=["config"])


@router.get("/config")
async def get_config():
    """Engine settings that clients need (polling cadence, buckets, edit policy)"""
    settings = state.SETTINGS

    return {
        "poll_interval_seconds": settings.poll_interval_seconds,
        "allow_resubmission": settings.allow_resubmission,
        "lock_completed_teams": settings.lock_completed_teams,
        "consistency_thresholds": settings.consistency_thresholds.model_dump(),
        "description_preview_chars": settings.description_preview_chars,
    }
