"""Team roster and status endpoints"""
from typing import List, Optional

from fastapi import APIRouter
from pydantic import BaseModel

from judging import state
from judging.core.progress import score_matrix, team_roster
from judging.core.status import all_teams_completed, set_status
from judging.models import TeamMember
from judging.services import registry


router = APIRouter(tags=["teams"])


class CreateTeamRequest(BaseModel):
    name: str
    description: Optional[str] = None
    project_url: Optional[str] = None
    photo_url: Optional[str] = None
    members: List[TeamMember] = []


class StatusRequest(BaseModel):
    status: str


@router.post("/events/{event_id}/teams", status_code=201)
async def create_team(event_id: str, payload: CreateTeamRequest):
    team = registry.register_team(
        state.require_store(),
        event_id,
        payload.name,
        description=payload.description,
        project_url=payload.project_url,
        photo_url=payload.photo_url,
        members=payload.members,
    )
    return {"team": team.model_dump()}


@router.get("/events/{event_id}/teams")
async def list_teams(event_id: str, judge_id: Optional[str] = None, active_only: bool = False):
    """
    Team roster

    judge_id flags the teams that judge has scored; active_only hides
    completed teams (judges' view).
    """
    store = state.require_store()
    registry.get_event(store, event_id)
    teams = team_roster(
        store.list_teams(event_id),
        store.list_submissions(event_id),
        judge_id=judge_id,
        active_only=active_only,
        preview_chars=state.SETTINGS.description_preview_chars,
    )
    return {"teams": teams}


@router.get("/events/{event_id}/teams/scores")
async def team_scores(event_id: str):
    """Moderator: team x judge matrix of judge totals"""
    store = state.require_store()
    registry.get_event(store, event_id)
    judges = store.list_judges(event_id)
    rows = score_matrix(store.list_teams(event_id), judges, store.list_submissions(event_id))
    return {
        "teams": [r.model_dump() for r in rows],
        "judges": [j.model_dump() for j in judges],
    }


@router.patch("/teams/{team_id}/status")
async def update_team_status(team_id: str, payload: StatusRequest):
    """
    Moderator: set a team's status

    Request:
        {"status": "waiting" | "active" | "completed"}
    """
    store = state.require_store()
    team = set_status(store, team_id, payload.status)
    return {
        "team": team.model_dump(),
        "all_teams_completed": all_teams_completed(store.list_teams(team.event_id)),
    }
