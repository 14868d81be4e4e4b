"""
Team Status Controller

Direct-set state machine over {waiting, active, completed}: any state can
be set from any other by the moderator. Status is the team's place in the
physical judging queue and is independent of how many judges scored it.
"""
import logging
from typing import Sequence

from judging.core.store import JudgingStore
from judging.errors import NotFoundError, PreconditionError, ValidationError
from judging.models import TEAM_STATUSES, Team


logger = logging.getLogger(__name__)


def all_teams_completed(teams: Sequence[Team]) -> bool:
    """True when the event has teams and every one of them is completed"""
    return len(teams) > 0 and all(t.status == "completed" for t in teams)


def set_status(store: JudgingStore, team_id: str, new_status: str) -> Team:
    """
    Set a team's judging status

    Raises:
        ValidationError: Unknown status value
        NotFoundError: Unknown team
        PreconditionError: The team's event has ended
    """
    if new_status not in TEAM_STATUSES:
        raise ValidationError(
            f"Invalid team status: {new_status}. Expected one of {', '.join(TEAM_STATUSES)}",
            field="status",
        )

    team = store.get_team(team_id)
    if not team:
        raise NotFoundError(f"Team {team_id} not found")

    # Phase guard is part of the UPDATE itself
    if not store.update_team_status(team_id, new_status):
        logger.warning(f"❌ Status change for team {team_id} rejected: judging has ended")
        raise PreconditionError("Judging has ended; team statuses are frozen")

    logger.info(f"🔄 Team {team.name} ({team_id}): {team.status} → {new_status}")

    teams = store.list_teams(team.event_id)
    if all_teams_completed(teams):
        logger.info(f"🏁 All {len(teams)} teams completed for event {team.event_id}")

    return team.model_copy(update={"status": new_status})
