"""
Event Phase Controller

Forward-only judging phase: not-started -> in-progress -> ended.
"ended" is terminal and requires every team to be completed.
"""
import logging

from judging.core.store import JudgingStore
from judging.errors import NotFoundError, PreconditionError, ValidationError
from judging.models import JUDGING_PHASES, Event


logger = logging.getLogger(__name__)


def _get_event(store: JudgingStore, event_id: str) -> Event:
    event = store.get_event(event_id)
    if not event:
        raise NotFoundError(f"Event {event_id} not found")
    return event


def start_judging(store: JudgingStore, event_id: str) -> Event:
    """
    Open judging: not-started -> in-progress

    Raises:
        NotFoundError: Unknown event
        PreconditionError: Event is not in "not-started"
    """
    event = _get_event(store, event_id)

    if not store.update_phase(event_id, "in-progress", from_phases=("not-started",)):
        current = _get_event(store, event_id).judging_phase
        raise PreconditionError(f"Cannot start judging from phase '{current}'")

    logger.info(f"▶️ Judging started for event {event.name} ({event_id})")
    return event.model_copy(update={"judging_phase": "in-progress"})


def advance_to_ended(store: JudgingStore, event_id: str) -> Event:
    """
    End judging for an event

    The phase check and the all-teams-completed check run in a single
    conditional UPDATE, so concurrent calls cannot both succeed.

    Raises:
        NotFoundError: Unknown event
        PreconditionError: Already ended, or some team is not completed
    """
    event = _get_event(store, event_id)

    ended = store.update_phase(
        event_id,
        "ended",
        from_phases=("not-started", "in-progress"),
        require_all_teams_completed=True,
    )
    if not ended:
        current = _get_event(store, event_id)
        if current.judging_phase == "ended":
            raise PreconditionError(f"Judging already ended for event {event_id}")
        teams = store.list_teams(event_id)
        if not teams:
            raise PreconditionError("Cannot end judging: event has no teams")
        pending = [t.name for t in teams if t.status != "completed"]
        logger.warning(f"❌ End judging rejected for event {event_id}: {len(pending)} teams not completed")
        raise PreconditionError(f"Cannot end judging: teams not completed: {', '.join(pending)}")

    logger.info(f"🛑 Judging ended for event {event.name} ({event_id}); results are final")
    return event.model_copy(update={"judging_phase": "ended"})


def set_phase(store: JudgingStore, event_id: str, judging_phase: str) -> Event:
    """
    Request a phase by name

    Only the two forward transitions are defined; anything else is rejected.
    """
    if judging_phase not in JUDGING_PHASES:
        raise ValidationError(f"Invalid judging phase value: {judging_phase}", field="judging_phase")

    if judging_phase == "in-progress":
        return start_judging(store, event_id)
    if judging_phase == "ended":
        return advance_to_ended(store, event_id)

    event = _get_event(store, event_id)
    raise PreconditionError(f"Cannot move event from '{event.judging_phase}' back to 'not-started'")


def is_final(event: Event) -> bool:
    """Results switch from live progress to final once judging has ended"""
    return event.judging_phase == "ended"
