"""Event, team and judge setup"""
import logging
import sqlite3
import time
import uuid
from typing import List, Optional, Sequence

from judging.core.store import JudgingStore
from judging.errors import NotFoundError, ValidationError
from judging.models import Event, Judge, RubricCriteria, Team, TeamMember
from judging.rubric import DEFAULT_RUBRIC, validate_rubric


logger = logging.getLogger(__name__)


def _generate_id(prefix: str, name: str) -> str:
    slug = name.strip().lower().replace(' ', '-')[:20]
    unique_suffix = uuid.uuid4().hex[:6]
    return f"{prefix}-{slug}-{unique_suffix}" if slug else f"{prefix}-{unique_suffix}"


def _clean_name(name: str, field: str) -> str:
    clean = (name or "").strip()
    if not clean:
        raise ValidationError(f"{field} required", field=field)
    return clean


def _require_event(store: JudgingStore, event_id: str) -> Event:
    event = store.get_event(event_id)
    if not event:
        raise NotFoundError(f"Event {event_id} not found")
    return event


def create_event(
    store: JudgingStore,
    name: str,
    rubric: Optional[Sequence[RubricCriteria]] = None,
) -> Event:
    """Create an event in 'not-started' with its rubric fixed for the event's lifetime"""
    clean_name = _clean_name(name, "name")
    try:
        criteria = validate_rubric(list(rubric or DEFAULT_RUBRIC))
    except ValueError as exc:
        raise ValidationError(str(exc), field="rubric") from exc

    event = Event(id=_generate_id("event", clean_name), name=clean_name, created_at=time.time())
    store.insert_event(event, criteria)
    logger.info(f"✅ Created event {event.name} ({event.id}) with {len(criteria)} criteria")
    return event


def register_team(
    store: JudgingStore,
    event_id: str,
    name: str,
    description: Optional[str] = None,
    project_url: Optional[str] = None,
    photo_url: Optional[str] = None,
    members: Optional[List[TeamMember]] = None,
) -> Team:
    _require_event(store, event_id)
    clean_name = _clean_name(name, "name")

    team = Team(
        id=_generate_id("team", clean_name),
        event_id=event_id,
        name=clean_name,
        description=description,
        project_url=project_url,
        photo_url=photo_url,
        members=members or [],
    )
    try:
        team = store.insert_team(team)
    except sqlite3.IntegrityError as exc:
        raise ValidationError(f"Team name already used in this event: {clean_name}", field="name") from exc

    logger.info(f"✅ Registered team {team.name} ({team.id}) in event {event_id}")
    return team


def register_judge(store: JudgingStore, event_id: str, name: str) -> Judge:
    _require_event(store, event_id)
    clean_name = _clean_name(name, "name")

    judge = Judge(id=_generate_id("judge", clean_name), event_id=event_id, name=clean_name)
    try:
        store.insert_judge(judge)
    except sqlite3.IntegrityError as exc:
        raise ValidationError(f"Judge name already used in this event: {clean_name}", field="name") from exc

    logger.info(f"✅ Registered judge {judge.name} ({judge.id}) in event {event_id}")
    return judge


def get_event(store: JudgingStore, event_id: str) -> Event:
    return _require_event(store, event_id)


def get_judge(store: JudgingStore, event_id: str, judge_id: str) -> Judge:
    judge = store.get_judge(judge_id)
    if not judge or judge.event_id != event_id:
        raise NotFoundError(f"Judge {judge_id} not found in event {event_id}")
    return judge
