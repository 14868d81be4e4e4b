"""
Event endpoints: creation, detail, rubric and judging phase
"""
from typing import List, Optional

from fastapi import APIRouter
from pydantic import BaseModel

from judging import state
from judging.core import phase
from judging.core.progress import event_stats
from judging.models import RubricCriteria
from judging.rubric import max_total
from judging.services import registry


router = APIRouter(prefix="/events", tags=["events"])


class CreateEventRequest(BaseModel):
    name: str
    rubric: Optional[List[RubricCriteria]] = None


class PhaseRequest(BaseModel):
    judging_phase: str


@router.post("", status_code=201)
async def create_event(payload: CreateEventRequest):
    """Create an event; the rubric defaults to the configured or built-in one"""
    rubric = payload.rubric or state.SETTINGS.rubric
    event = registry.create_event(state.require_store(), payload.name, rubric)
    return {"event": event.model_dump()}


@router.get("/{event_id}")
async def get_event(event_id: str):
    """Event with its teams and submission statistics"""
    store = state.require_store()
    event = registry.get_event(store, event_id)
    teams = store.list_teams(event_id)
    submissions = store.list_submissions(event_id)

    return {
        "event": event.model_dump(),
        "teams": [t.model_dump() for t in teams],
        "stats": event_stats(teams, submissions).model_dump(),
    }


@router.get("/{event_id}/rubric")
async def get_rubric(event_id: str):
    store = state.require_store()
    registry.get_event(store, event_id)
    criteria = store.get_rubric(event_id)
    return {
        "criteria": [c.model_dump() for c in criteria],
        "max_total": max_total(criteria),
    }


@router.patch("/{event_id}/phase")
async def update_phase(event_id: str, payload: PhaseRequest):
    """
    Moderator: move the judging phase forward

    Request:
        {"judging_phase": "in-progress" | "ended"}
    """
    event = phase.set_phase(state.require_store(), event_id, payload.judging_phase)
    return {
        "event": event.model_dump(),
        "results_mode": "final" if phase.is_final(event) else "live",
    }
