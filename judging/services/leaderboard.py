"""
Leaderboard service - Assemble leaderboard data for live and final views
"""
import hashlib
from typing import Sequence

from judging.core.comparison import compare_teams
from judging.core.leaderboard import TOTAL_SCORE_CAVEAT, aggregate
from judging.core.phase import is_final
from judging.core.store import JudgingStore
from judging.errors import NotFoundError, ValidationError
from judging.models import (
    Event,
    Leaderboard,
    ScoreSubmission,
    Settings,
    Team,
    TeamComparison,
)
from judging.services.registry import get_event


def leaderboard_fingerprint(
    event: Event,
    teams: Sequence[Team],
    submissions: Sequence[ScoreSubmission],
) -> str:
    """
    Stable hash of everything the leaderboard is derived from

    Pollers compare it with their last value to tell "no change" apart from
    an error or an empty result.
    """
    digest = hashlib.sha256()
    digest.update(event.judging_phase.encode("utf-8"))
    for team in teams:
        digest.update(f"|t:{team.id}:{team.status}".encode("utf-8"))
    for s in sorted(submissions, key=lambda s: s.id):
        digest.update(f"|s:{s.id}:{s.submitted_at!r}".encode("utf-8"))
    return digest.hexdigest()[:32]


def get_leaderboard(store: JudgingStore, settings: Settings, event_id: str) -> Leaderboard:
    """
    Build the leaderboard for one event

    Returns:
        Leaderboard with results_mode "final" once judging ended, else "live"
    """
    event = get_event(store, event_id)
    teams = store.list_teams(event_id)
    submissions = store.list_submissions(event_id)

    entries = aggregate(
        teams,
        submissions,
        judges=store.list_judges(event_id),
        rubric=store.get_rubric(event_id),
        thresholds=settings.consistency_thresholds,
    )

    return Leaderboard(
        event_id=event_id,
        judging_phase=event.judging_phase,
        results_mode="final" if is_final(event) else "live",
        entries=entries,
        total_score_caveat=TOTAL_SCORE_CAVEAT,
        fingerprint=leaderboard_fingerprint(event, teams, submissions),
    )


def get_comparison(
    store: JudgingStore,
    settings: Settings,
    event_id: str,
    team1_id: str,
    team2_id: str,
) -> TeamComparison:
    """Head-to-head comparison of two teams in the same event"""
    if team1_id == team2_id:
        raise ValidationError("Choose two different teams to compare", field="team2")

    leaderboard = get_leaderboard(store, settings, event_id)
    by_team = {e.team_id: e for e in leaderboard.entries}
    for team_id in (team1_id, team2_id):
        if team_id not in by_team:
            raise NotFoundError(f"Team {team_id} not found in event {event_id}")

    return compare_teams(
        by_team[team1_id],
        by_team[team2_id],
        store.get_rubric(event_id),
        settings.consistency_thresholds,
    )
