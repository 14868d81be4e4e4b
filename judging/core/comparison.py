"""
Consensus & Comparison Engine

Read-only, head-to-head views over two leaderboard entries for moderator
deliberation.
"""
from typing import Dict, Iterable, Optional

from judging.models import (
    ConsistencyThresholds,
    CriteriaBreakdown,
    JudgeAgreement,
    JudgeCriterionRow,
    JudgeScore,
    LeaderboardEntry,
    RubricCriteria,
    TeamComparison,
)


def consistency_bucket(stddev: float, thresholds: Optional[ConsistencyThresholds] = None) -> str:
    """
    Classify judge agreement on one team from the stddev of judge totals

    Default thresholds:
        stddev < 5       → "high"
        5 <= stddev < 10 → "moderate"
        stddev >= 10     → "wide"
    """
    thresholds = thresholds or ConsistencyThresholds()
    if stddev < thresholds.high_below:
        return "high"
    if stddev < thresholds.moderate_below:
        return "moderate"
    return "wide"


def judge_agreement(team1: LeaderboardEntry, team2: LeaderboardEntry) -> JudgeAgreement:
    """
    Count, among judges who scored both teams, which team each preferred

    Judges who scored only one of the two teams are left out. A judge who
    gave both teams the same total is counted as a tie, on neither side.
    """
    team2_totals = {js.judge_id: js.total_score for js in team2.judge_scores}

    team1_preferred = 0
    team2_preferred = 0
    ties = 0
    for js in team1.judge_scores:
        if js.judge_id not in team2_totals:
            continue
        other = team2_totals[js.judge_id]
        if js.total_score > other:
            team1_preferred += 1
        elif other > js.total_score:
            team2_preferred += 1
        else:
            ties += 1

    return JudgeAgreement(
        team1_preferred=team1_preferred,
        team2_preferred=team2_preferred,
        ties=ties,
        split=f"{team1_preferred}–{team2_preferred}",
    )


def score_gap(team1: LeaderboardEntry, team2: LeaderboardEntry) -> int:
    """Absolute difference of the two teams' total scores"""
    return abs(team1.total_score - team2.total_score)


def _criterion_score(judge_score: JudgeScore, criteria_id: str) -> Optional[int]:
    for cs in judge_score.criteria_scores:
        if cs.criteria_id == criteria_id:
            return cs.score
    return None


def criteria_breakdown(
    team1: LeaderboardEntry,
    team2: LeaderboardEntry,
    criterion: RubricCriteria,
) -> CriteriaBreakdown:
    """
    Compare two teams on one criterion

    Each team's max_possible uses only the judges who scored that team, so a
    team with fewer judges is not measured against a shared denominator.
    """
    team1_by_judge: Dict[str, JudgeScore] = {js.judge_id: js for js in team1.judge_scores}
    team2_by_judge: Dict[str, JudgeScore] = {js.judge_id: js for js in team2.judge_scores}

    team1_total = sum(_criterion_score(js, criterion.id) or 0 for js in team1.judge_scores)
    team2_total = sum(_criterion_score(js, criterion.id) or 0 for js in team2.judge_scores)

    # One row per judge who scored either team, in first-seen order
    rows = []
    seen = set()
    for js in list(team1.judge_scores) + list(team2.judge_scores):
        if js.judge_id in seen:
            continue
        seen.add(js.judge_id)
        t1 = team1_by_judge.get(js.judge_id)
        t2 = team2_by_judge.get(js.judge_id)
        rows.append(JudgeCriterionRow(
            judge_id=js.judge_id,
            judge_name=js.judge_name,
            team1_score=_criterion_score(t1, criterion.id) if t1 else None,
            team2_score=_criterion_score(t2, criterion.id) if t2 else None,
        ))

    return CriteriaBreakdown(
        criteria_id=criterion.id,
        criteria_name=criterion.name,
        team1_total=team1_total,
        team2_total=team2_total,
        difference=team1_total - team2_total,
        team1_max_possible=criterion.max_score * len(team1.judge_scores),
        team2_max_possible=criterion.max_score * len(team2.judge_scores),
        judges=rows,
    )


def compare_teams(
    team1: LeaderboardEntry,
    team2: LeaderboardEntry,
    rubric: Iterable[RubricCriteria],
    thresholds: Optional[ConsistencyThresholds] = None,
) -> TeamComparison:
    """Full side-by-side comparison of two teams across all criteria"""
    return TeamComparison(
        team1_id=team1.team_id,
        team2_id=team2.team_id,
        agreement=judge_agreement(team1, team2),
        score_gap=score_gap(team1, team2),
        team1_consistency=consistency_bucket(team1.score_stddev, thresholds),
        team2_consistency=consistency_bucket(team2.score_stddev, thresholds),
        criteria=[criteria_breakdown(team1, team2, c) for c in rubric],
    )
