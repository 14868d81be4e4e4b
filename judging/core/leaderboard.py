"""
Leaderboard Aggregator

Derives every team's result from the raw score submissions:

  judge_total  = sum of one judge's criterion scores for the team
  avg_score    = mean(judge_total)             (0 when nobody scored)
  total_score  = sum(judge_total)              (unnormalized, favors more judges)
  score_stddev = population stddev(judge_total) (0 with fewer than 2 judges)

Rank order: avg_score desc, total_score desc, team creation order asc.
Ranks are 1-based, contiguous and distinct even for ties.
"""
import statistics
from typing import Dict, Iterable, List, Optional, Sequence

from judging.core.comparison import consistency_bucket
from judging.models import (
    ConsistencyThresholds,
    CriterionScore,
    Judge,
    JudgeCriterionScore,
    JudgeScore,
    LeaderboardEntry,
    RubricCriteria,
    ScoreSubmission,
    Team,
)


TOTAL_SCORE_CAVEAT = (
    "total_score sums every judge's total and grows with the number of judges "
    "who scored a team; teams scored by fewer judges show a lower total at equal "
    "quality. Rank by avg_score."
)


def judge_total(criteria_scores: Iterable[CriterionScore]) -> int:
    """Sum of one judge's criterion scores for one team"""
    return sum(cs.score for cs in criteria_scores)


def mean_score(totals: Sequence[int]) -> float:
    """Mean of judge totals, 0.0 for no judges"""
    if not totals:
        return 0.0
    return statistics.fmean(totals)


def population_stddev(totals: Sequence[int]) -> float:
    """Population standard deviation, 0.0 for fewer than 2 judges"""
    if len(totals) < 2:
        return 0.0
    return statistics.pstdev(totals)


def _judge_score(
    submission: ScoreSubmission,
    judge_names: Dict[str, str],
    criteria: Dict[str, RubricCriteria],
) -> JudgeScore:
    breakdown = []
    for cs in submission.criteria_scores:
        criterion = criteria.get(cs.criteria_id)
        breakdown.append(JudgeCriterionScore(
            criteria_id=cs.criteria_id,
            criteria_name=criterion.name if criterion else cs.criteria_id,
            score=cs.score,
            max_score=criterion.max_score if criterion else 0,
            reflection=cs.reflection,
        ))

    return JudgeScore(
        judge_id=submission.judge_id,
        judge_name=judge_names.get(submission.judge_id, submission.judge_id),
        total_score=judge_total(submission.criteria_scores),
        submitted_at=submission.submitted_at,
        time_spent_seconds=submission.time_spent_seconds,
        criteria_scores=breakdown,
        overall_comments=submission.overall_comments,
    )


def aggregate(
    teams: Sequence[Team],
    submissions: Iterable[ScoreSubmission],
    judges: Iterable[Judge] = (),
    rubric: Iterable[RubricCriteria] = (),
    thresholds: Optional[ConsistencyThresholds] = None,
) -> List[LeaderboardEntry]:
    """
    Build the ranked leaderboard for one event

    Args:
        teams: All teams of the event
        submissions: All submissions of the event
        judges: Judge profiles, used for display names
        rubric: Rubric criteria, used for criterion names and max scores
        thresholds: Consistency bucket cut-offs

    Returns:
        One entry per team, sorted by rank. Teams without submissions are
        included with zero values.
    """
    thresholds = thresholds or ConsistencyThresholds()
    judge_names = {j.id: j.name for j in judges}
    criteria = {c.id: c for c in rubric}

    # 1. Group submissions by team
    by_team: Dict[str, List[ScoreSubmission]] = {t.id: [] for t in teams}
    for submission in submissions:
        if submission.team_id in by_team:
            by_team[submission.team_id].append(submission)

    entries = []
    for team in teams:
        team_submissions = sorted(by_team[team.id], key=lambda s: (s.submitted_at, s.judge_id))
        judge_scores = [_judge_score(s, judge_names, criteria) for s in team_submissions]
        totals = [js.total_score for js in judge_scores]
        stddev = population_stddev(totals)

        entries.append(LeaderboardEntry(
            team_id=team.id,
            team_name=team.name,
            team_status=team.status,
            rank=0,
            total_score=sum(totals),
            avg_score=mean_score(totals),
            score_stddev=stddev,
            judges_scored=len(totals),
            consistency=consistency_bucket(stddev, thresholds),
            judge_scores=judge_scores,
        ))

    created_order = {t.id: (t.created_order, position) for position, t in enumerate(teams)}
    entries.sort(key=lambda e: (-e.avg_score, -e.total_score, created_order[e.team_id]))

    for idx, entry in enumerate(entries):
        entry.rank = idx + 1

    return entries
