"""
Judge progress, moderator score matrix and event statistics
"""
from typing import Dict, Iterable, List, Optional, Sequence

from judging.core.leaderboard import judge_total, mean_score
from judging.core.status import all_teams_completed
from judging.models import (
    EventStats,
    Judge,
    JudgeProgressEntry,
    MatrixCell,
    MatrixRow,
    RubricCriteria,
    ScoreSubmission,
    TEAM_STATUSES,
    Team,
)


def judge_progress(
    judge_id: str,
    teams: Sequence[Team],
    submissions: Iterable[ScoreSubmission],
    rubric: Sequence[RubricCriteria],
) -> List[JudgeProgressEntry]:
    """
    Teams one judge has already scored, newest submission first

    Breakdown and reflections are keyed by the criterion's lowercase short name.
    """
    teams_by_id = {t.id: t for t in teams}
    keys = {c.id: c.short_name.lower() for c in rubric}

    entries = []
    for submission in submissions:
        if submission.judge_id != judge_id or submission.team_id not in teams_by_id:
            continue
        team = teams_by_id[submission.team_id]

        breakdown: Dict[str, int] = {}
        reflections: Dict[str, str] = {}
        for cs in submission.criteria_scores:
            key = keys.get(cs.criteria_id, cs.criteria_id)
            breakdown[key] = cs.score
            if cs.reflection:
                reflections[key] = cs.reflection

        entries.append(JudgeProgressEntry(
            team_id=team.id,
            team_name=team.name,
            description=team.description,
            total_score=judge_total(submission.criteria_scores),
            judged_at=submission.submitted_at,
            breakdown=breakdown,
            reflections=reflections,
            comments=submission.overall_comments,
        ))

    entries.sort(key=lambda e: e.judged_at, reverse=True)
    return entries


def score_matrix(
    teams: Sequence[Team],
    judges: Sequence[Judge],
    submissions: Iterable[ScoreSubmission],
) -> List[MatrixRow]:
    """Team x judge grid of judge totals; None where a judge has not scored"""
    totals = {
        (s.team_id, s.judge_id): judge_total(s.criteria_scores)
        for s in submissions
    }

    return [
        MatrixRow(
            team_id=team.id,
            team_name=team.name,
            status=team.status,
            scores=[
                MatrixCell(
                    judge_id=judge.id,
                    judge_name=judge.name,
                    score=totals.get((team.id, judge.id)),
                )
                for judge in judges
            ],
        )
        for team in teams
    ]


def event_stats(teams: Sequence[Team], submissions: Iterable[ScoreSubmission]) -> EventStats:
    """Event insights: team and submission counts, judges who scored, mean criterion score"""
    submissions = list(submissions)
    criterion_scores = [cs.score for s in submissions for cs in s.criteria_scores]

    by_status = {status: 0 for status in TEAM_STATUSES}
    for team in teams:
        by_status[team.status] = by_status.get(team.status, 0) + 1

    return EventStats(
        total_teams=len(teams),
        total_submissions=len(submissions),
        total_judges=len({s.judge_id for s in submissions}),
        average_criterion_score=round(mean_score(criterion_scores), 2),
        teams_by_status=by_status,
        all_teams_completed=all_teams_completed(teams),
    )


def preview(text: Optional[str], limit: int = 120) -> Optional[str]:
    """Cut text to at most limit characters, marking the cut with an ellipsis"""
    if text is None or len(text) <= limit:
        return text
    return text[: max(limit - 1, 0)].rstrip() + "…"


def team_roster(
    teams: Sequence[Team],
    submissions: Iterable[ScoreSubmission],
    judge_id: Optional[str] = None,
    active_only: bool = False,
    preview_chars: int = 120,
) -> List[dict]:
    """
    Team list with per-team scoring progress

    Args:
        teams: Teams in creation order
        submissions: All submissions of the event
        judge_id: When given, flag the teams this judge has scored
        active_only: Hide completed teams (judges' view)
        preview_chars: Length limit for description_preview
    """
    totals_by_team: Dict[str, List[int]] = {t.id: [] for t in teams}
    scored_by_judge = set()
    for s in submissions:
        if s.team_id in totals_by_team:
            totals_by_team[s.team_id].append(judge_total(s.criteria_scores))
        if judge_id and s.judge_id == judge_id:
            scored_by_judge.add(s.team_id)

    roster = []
    for team in teams:
        if active_only and team.status == "completed":
            continue
        totals = totals_by_team[team.id]
        row = team.model_dump()
        row.update({
            "description_preview": preview(team.description, preview_chars),
            "judges_scored": len(totals),
            "average_score": round(mean_score(totals), 2),
            "has_current_judge_scored": team.id in scored_by_judge,
        })
        roster.append(row)

    return roster
