"""
Data models for the judging engine
"""
from pydantic import BaseModel, Field, StrictInt
from typing import List, Dict, Optional


TEAM_STATUSES = ("waiting", "active", "completed")
JUDGING_PHASES = ("not-started", "in-progress", "ended")


class RubricCriteria(BaseModel):
    """One scored dimension of a team's evaluation"""
    id: str
    name: str
    short_name: str
    description: Optional[str] = None
    guiding_question: Optional[str] = None
    max_score: int = 25
    display_order: int = 0


class CriterionScore(BaseModel):
    """One judge's score for one criterion"""
    criteria_id: str
    score: StrictInt                      # whole points; no bools or fractions
    reflection: Optional[str] = None


class ScoreSubmission(BaseModel):
    """One judge's finalized evaluation of one team"""
    id: str
    event_id: str
    team_id: str
    judge_id: str
    criteria_scores: List[CriterionScore] = []
    overall_comments: Optional[str] = None
    submitted_at: float                   # Unix timestamp
    time_spent_seconds: int = 0


class SubmissionReceipt(BaseModel):
    """Returned to the judge right after a submission is stored"""
    submission_id: str
    event_id: str
    team_id: str
    judge_id: str
    total_score: int
    max_total: int
    submitted_at: float
    time_spent_seconds: int


class TeamMember(BaseModel):
    name: str
    email: Optional[str] = None


class Team(BaseModel):
    """A team's physical judging-queue record"""
    id: str
    event_id: str
    name: str
    status: str = "waiting"              # "waiting" | "active" | "completed"
    photo_url: Optional[str] = None
    project_url: Optional[str] = None
    description: Optional[str] = None
    members: List[TeamMember] = []
    created_order: int = 0               # insertion sequence, final rank tiebreak


class Judge(BaseModel):
    """A judge profile within one event"""
    id: str
    event_id: str
    name: str


class Event(BaseModel):
    id: str
    name: str
    judging_phase: str = "not-started"   # "not-started" | "in-progress" | "ended"
    created_at: float


class ConsistencyThresholds(BaseModel):
    """Standard deviation cut-offs for the consistency buckets"""
    high_below: float = 5.0
    moderate_below: float = 10.0


class JudgeCriterionScore(BaseModel):
    criteria_id: str
    criteria_name: str
    score: int
    max_score: int
    reflection: Optional[str] = None


class JudgeScore(BaseModel):
    """One judge's contribution to a team's leaderboard entry"""
    judge_id: str
    judge_name: str
    total_score: int
    submitted_at: float
    time_spent_seconds: int = 0
    criteria_scores: List[JudgeCriterionScore] = []
    overall_comments: Optional[str] = None


class LeaderboardEntry(BaseModel):
    """
    Derived per-team result, recomputed on every read.

    total_score is the unnormalized sum over judges and avg_score the mean
    over judges; they are never interchangeable.
    """
    team_id: str
    team_name: str
    team_status: str = "waiting"
    rank: int
    total_score: int = 0
    avg_score: float = 0.0
    score_stddev: float = 0.0
    judges_scored: int = 0
    consistency: str = "high"
    judge_scores: List[JudgeScore] = []


class Leaderboard(BaseModel):
    event_id: str
    judging_phase: str
    results_mode: str                    # "live" | "final"
    entries: List[LeaderboardEntry] = []
    total_score_caveat: str
    fingerprint: str


class JudgeAgreement(BaseModel):
    team1_preferred: int = 0
    team2_preferred: int = 0
    ties: int = 0
    split: str = "0–0"


class JudgeCriterionRow(BaseModel):
    judge_id: str
    judge_name: str
    team1_score: Optional[int] = None
    team2_score: Optional[int] = None


class CriteriaBreakdown(BaseModel):
    criteria_id: str
    criteria_name: str
    team1_total: int = 0
    team2_total: int = 0
    difference: int = 0                  # team1_total - team2_total
    team1_max_possible: int = 0
    team2_max_possible: int = 0
    judges: List[JudgeCriterionRow] = []


class TeamComparison(BaseModel):
    team1_id: str
    team2_id: str
    agreement: JudgeAgreement
    score_gap: int
    team1_consistency: str
    team2_consistency: str
    criteria: List[CriteriaBreakdown] = []


class JudgeProgressEntry(BaseModel):
    """One team the judge has already scored"""
    team_id: str
    team_name: str
    description: Optional[str] = None
    total_score: int
    judged_at: float
    breakdown: Dict[str, int] = {}
    reflections: Dict[str, str] = {}
    comments: Optional[str] = None


class MatrixCell(BaseModel):
    judge_id: str
    judge_name: str
    score: Optional[int] = None


class MatrixRow(BaseModel):
    team_id: str
    team_name: str
    status: str
    scores: List[MatrixCell] = []


class EventStats(BaseModel):
    total_teams: int = 0
    total_submissions: int = 0
    total_judges: int = 0                # distinct judges with at least one submission
    average_criterion_score: float = 0.0
    teams_by_status: Dict[str, int] = Field(
        default_factory=lambda: {status: 0 for status in TEAM_STATUSES}
    )
    all_teams_completed: bool = False


class Settings(BaseModel):
    """Engine configuration"""
    db_path: str = "data/judging.sqlite"
    allow_resubmission: bool = False
    lock_completed_teams: bool = True
    consistency_thresholds: ConsistencyThresholds = ConsistencyThresholds()
    poll_interval_seconds: int = 5
    description_preview_chars: int = 120
    rubric: Optional[List[RubricCriteria]] = None
