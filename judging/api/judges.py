"""Judge profile and progress endpoints"""
from fastapi import APIRouter
from pydantic import BaseModel

from judging import state
from judging.core.progress import judge_progress
from judging.services import registry


router = APIRouter(prefix="/events/{event_id}", tags=["judges"])


class CreateJudgeRequest(BaseModel):
    name: str


@router.post("/judges", status_code=201)
async def create_judge(event_id: str, payload: CreateJudgeRequest):
    judge = registry.register_judge(state.require_store(), event_id, payload.name)
    return {"judge": judge.model_dump()}


@router.get("/judges")
async def list_judges(event_id: str):
    store = state.require_store()
    registry.get_event(store, event_id)
    return {"judges": [j.model_dump() for j in store.list_judges(event_id)]}


@router.get("/my-progress")
async def my_progress(event_id: str, judge_id: str):
    """Teams the given judge has scored, with per-criterion breakdown"""
    store = state.require_store()
    registry.get_judge(store, event_id, judge_id)
    entries = judge_progress(
        judge_id,
        store.list_teams(event_id),
        store.list_submissions(event_id),
        store.get_rubric(event_id),
    )
    return {"scored_teams": [e.model_dump() for e in entries]}
