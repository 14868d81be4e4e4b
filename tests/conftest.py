"""
Shared fixtures: a fresh SQLite store per test and small builders
"""
import pytest

from judging.core.store import JudgingStore
from judging.models import CriterionScore, ScoreSubmission, Settings, Team
from judging.rubric import DEFAULT_RUBRIC
from judging.services import registry


def split_total(total: int, rubric=DEFAULT_RUBRIC) -> list:
    """Spread a judge total over the rubric, filling criteria in order"""
    scores = []
    remaining = total
    for c in rubric:
        s = min(c.max_score, remaining)
        scores.append(CriterionScore(criteria_id=c.id, score=s))
        remaining -= s
    assert remaining == 0, "total exceeds rubric maximum"
    return scores


def make_submission(team_id: str, judge_id: str, total: int, submitted_at: float = 0.0) -> ScoreSubmission:
    """Pure record for aggregator tests (no store involved)"""
    return ScoreSubmission(
        id=f"{judge_id}-{team_id}",
        event_id="event-1",
        team_id=team_id,
        judge_id=judge_id,
        criteria_scores=split_total(total),
        submitted_at=submitted_at,
    )


def make_team(team_id: str, created_order: int = 0, status: str = "waiting") -> Team:
    return Team(id=team_id, event_id="event-1", name=team_id.title(), status=status,
                created_order=created_order)


@pytest.fixture
def store(tmp_path):
    s = JudgingStore(str(tmp_path / "judging.sqlite"))
    s.initialize()
    return s


@pytest.fixture
def settings(tmp_path):
    return Settings(db_path=str(tmp_path / "judging.sqlite"))


@pytest.fixture
def event_setup(store):
    """Event with two teams (A, B) and three judges"""
    event = registry.create_event(store, "Demo Day")
    team_a = registry.register_team(store, event.id, "Team A", description="First team")
    team_b = registry.register_team(store, event.id, "Team B")
    judges = [registry.register_judge(store, event.id, name) for name in ("Ada", "Ben", "Cy")]
    return {"event": event, "teams": [team_a, team_b], "judges": judges}
