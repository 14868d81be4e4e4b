"""
Tests for team status and event phase transitions
"""
import threading

import pytest

from judging.core import phase, status
from judging.errors import NotFoundError, PreconditionError, ValidationError
from judging.services import registry


def _complete_all(store, setup):
    for team in setup["teams"]:
        status.set_status(store, team.id, "completed")


def test_status_any_to_any(store, event_setup):
    """Moderator can move a team between any two statuses"""
    team_id = event_setup["teams"][0].id

    for new_status in ("active", "completed", "waiting", "completed", "active", "waiting"):
        team = status.set_status(store, team_id, new_status)
        assert team.status == new_status
        assert store.get_team(team_id).status == new_status


def test_invalid_status_rejected(store, event_setup):
    with pytest.raises(ValidationError) as exc_info:
        status.set_status(store, event_setup["teams"][0].id, "paused")
    assert exc_info.value.field == "status"


def test_unknown_team_status(store, event_setup):
    with pytest.raises(NotFoundError):
        status.set_status(store, "team-missing", "active")


def test_status_frozen_after_judging_ended(store, event_setup):
    _complete_all(store, event_setup)
    phase.advance_to_ended(store, event_setup["event"].id)

    with pytest.raises(PreconditionError, match="frozen"):
        status.set_status(store, event_setup["teams"][0].id, "active")
    assert store.get_team(event_setup["teams"][0].id).status == "completed"


def test_all_teams_completed_flag(store, event_setup):
    teams = event_setup["teams"]
    event_id = event_setup["event"].id

    status.set_status(store, teams[0].id, "completed")
    assert not status.all_teams_completed(store.list_teams(event_id))

    status.set_status(store, teams[1].id, "completed")
    assert status.all_teams_completed(store.list_teams(event_id))


def test_all_teams_completed_false_for_empty_event():
    assert status.all_teams_completed([]) is False


def test_start_judging(store, event_setup):
    event = phase.start_judging(store, event_setup["event"].id)

    assert event.judging_phase == "in-progress"
    assert store.get_event(event.id).judging_phase == "in-progress"

    with pytest.raises(PreconditionError):
        phase.start_judging(store, event.id)


def test_end_rejected_until_all_completed(store, event_setup):
    """End is refused while any team is waiting or active; the message names them"""
    event_id = event_setup["event"].id
    status.set_status(store, event_setup["teams"][0].id, "completed")
    status.set_status(store, event_setup["teams"][1].id, "active")

    with pytest.raises(PreconditionError) as exc_info:
        phase.advance_to_ended(store, event_id)

    assert "Team B" in exc_info.value.message
    assert store.get_event(event_id).judging_phase == "not-started"


def test_end_from_in_progress(store, event_setup):
    event_id = event_setup["event"].id
    phase.start_judging(store, event_id)
    _complete_all(store, event_setup)

    event = phase.advance_to_ended(store, event_id)

    assert event.judging_phase == "ended"
    assert phase.is_final(store.get_event(event_id))


def test_end_directly_from_not_started(store, event_setup):
    _complete_all(store, event_setup)
    event = phase.advance_to_ended(store, event_setup["event"].id)
    assert event.judging_phase == "ended"


def test_repeated_end_is_an_error(store, event_setup):
    _complete_all(store, event_setup)
    phase.advance_to_ended(store, event_setup["event"].id)

    with pytest.raises(PreconditionError, match="already ended"):
        phase.advance_to_ended(store, event_setup["event"].id)


def test_end_rejected_without_teams(store):
    event = registry.create_event(store, "Empty Event")

    with pytest.raises(PreconditionError, match="no teams"):
        phase.advance_to_ended(store, event.id)


def test_concurrent_end_succeeds_once(store, event_setup):
    _complete_all(store, event_setup)
    event_id = event_setup["event"].id
    outcomes = []
    lock = threading.Lock()
    barrier = threading.Barrier(4)

    def attempt():
        barrier.wait()
        try:
            phase.advance_to_ended(store, event_id)
            result = "ok"
        except PreconditionError:
            result = "rejected"
        with lock:
            outcomes.append(result)

    threads = [threading.Thread(target=attempt) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert outcomes.count("ok") == 1
    assert outcomes.count("rejected") == 3


def test_set_phase_dispatch(store, event_setup):
    event_id = event_setup["event"].id

    with pytest.raises(ValidationError):
        phase.set_phase(store, event_id, "paused")
    with pytest.raises(PreconditionError):
        phase.set_phase(store, event_id, "not-started")

    assert phase.set_phase(store, event_id, "in-progress").judging_phase == "in-progress"

    _complete_all(store, event_setup)
    assert phase.set_phase(store, event_id, "ended").judging_phase == "ended"

    with pytest.raises(PreconditionError):
        phase.set_phase(store, event_id, "in-progress")


def test_phase_unknown_event(store):
    with pytest.raises(NotFoundError):
        phase.start_judging(store, "event-missing")
