"""
Score Submission Service

Validates and records one judge's evaluation of one team.
"""
import logging
import time
import uuid
from typing import List, Optional, Sequence

from judging.core.leaderboard import judge_total
from judging.core.store import JudgingStore
from judging.errors import JudgingError, NotFoundError, PreconditionError, ValidationError
from judging.models import (
    CriterionScore,
    RubricCriteria,
    ScoreSubmission,
    Settings,
    SubmissionReceipt,
)
from judging.rubric import max_total


logger = logging.getLogger(__name__)


def validate_criteria_scores(
    criteria_scores: Sequence[CriterionScore],
    rubric: Sequence[RubricCriteria],
) -> List[CriterionScore]:
    """
    Check one submission's scores against the event rubric

    Rules:
    - Every rubric criterion appears exactly once
    - No criterion outside the rubric
    - 0 <= score <= max_score

    Returns:
        Scores reordered to rubric display order

    Raises:
        ValidationError: On the first offending criterion
    """
    criteria = {c.id: c for c in rubric}
    by_id = {}

    for cs in criteria_scores:
        field = f"criteria_scores.{cs.criteria_id}"
        criterion = criteria.get(cs.criteria_id)
        if criterion is None:
            raise ValidationError(f"Unknown criterion: {cs.criteria_id}", field=field)
        if cs.criteria_id in by_id:
            raise ValidationError(f"Criterion scored more than once: {cs.criteria_id}", field=field)
        if cs.score < 0 or cs.score > criterion.max_score:
            raise ValidationError(
                f"Score for {criterion.short_name} must be between 0 and {criterion.max_score}, got {cs.score}",
                field=field,
            )
        by_id[cs.criteria_id] = cs

    missing = [c for c in rubric if c.id not in by_id]
    if missing:
        raise ValidationError(
            f"Missing scores for: {', '.join(c.short_name for c in missing)}",
            field=f"criteria_scores.{missing[0].id}",
        )

    return [by_id[c.id] for c in rubric]


def _prepare(
    store: JudgingStore,
    settings: Settings,
    event_id: str,
    team_id: str,
    judge_id: Optional[str],
    criteria_scores: Sequence[CriterionScore],
    comments: Optional[str],
    time_spent: Optional[int],
) -> tuple:
    """Run every check shared by submit and resubmit; return (submission, rubric)"""
    if not judge_id:
        raise ValidationError("judge_id is required - select a judge profile first", field="judge_id")

    if time_spent is None:
        time_spent = 0
    if time_spent < 0:
        raise ValidationError(f"time_spent must not be negative, got {time_spent}", field="time_spent_seconds")

    event = store.get_event(event_id)
    if not event:
        raise NotFoundError(f"Event {event_id} not found")

    team = store.get_team(team_id)
    if not team or team.event_id != event_id:
        raise NotFoundError(f"Team {team_id} not found in event {event_id}")

    judge = store.get_judge(judge_id)
    if not judge or judge.event_id != event_id:
        raise NotFoundError(f"Judge {judge_id} not found in event {event_id}")

    if event.judging_phase == "ended":
        raise PreconditionError(f"Judging has ended for event {event_id}")

    if settings.lock_completed_teams and team.status == "completed":
        raise PreconditionError(f"Cannot score completed team {team.name}")

    rubric = store.get_rubric(event_id)
    ordered = validate_criteria_scores(criteria_scores, rubric)

    submission = ScoreSubmission(
        id=uuid.uuid4().hex,
        event_id=event_id,
        team_id=team_id,
        judge_id=judge_id,
        criteria_scores=ordered,
        overall_comments=comments or None,
        submitted_at=time.time(),
        time_spent_seconds=time_spent,
    )
    return submission, rubric


def _receipt(submission: ScoreSubmission, rubric: Sequence[RubricCriteria]) -> SubmissionReceipt:
    return SubmissionReceipt(
        submission_id=submission.id,
        event_id=submission.event_id,
        team_id=submission.team_id,
        judge_id=submission.judge_id,
        total_score=judge_total(submission.criteria_scores),
        max_total=max_total(rubric),
        submitted_at=submission.submitted_at,
        time_spent_seconds=submission.time_spent_seconds,
    )


def submit(
    store: JudgingStore,
    settings: Settings,
    event_id: str,
    team_id: str,
    judge_id: Optional[str],
    criteria_scores: Sequence[CriterionScore],
    comments: Optional[str] = None,
    time_spent: Optional[int] = 0,
) -> SubmissionReceipt:
    """
    Record a judge's confirmed scores for a team

    Args:
        store: Persistence boundary
        settings: Engine settings
        event_id: Event ID
        team_id: Team ID (must belong to the event)
        judge_id: Judge profile ID (must belong to the event)
        criteria_scores: One score per rubric criterion
        comments: Optional overall comments
        time_spent: Seconds spent scoring; 0 when the caller could not measure it

    Returns:
        SubmissionReceipt with the judge total for immediate display

    Raises:
        ValidationError: Missing judge, out-of-range or missing criterion
        NotFoundError: Unknown event, team or judge
        PreconditionError: Event ended or team locked as completed
        DuplicateSubmissionError: The judge already scored this team
    """
    try:
        submission, rubric = _prepare(
            store, settings, event_id, team_id, judge_id, criteria_scores, comments, time_spent
        )
        store.insert_submission(submission, lock_completed_teams=settings.lock_completed_teams)
    except JudgingError as exc:
        logger.warning(f"❌ Rejected submission judge={judge_id} team={team_id}: {exc.message}")
        raise

    receipt = _receipt(submission, rubric)
    logger.info(
        f"✅ Judge {judge_id} | Team {team_id} | "
        f"Total: {receipt.total_score}/{receipt.max_total} | Time: {receipt.time_spent_seconds}s"
    )
    return receipt


def resubmit(
    store: JudgingStore,
    settings: Settings,
    event_id: str,
    team_id: str,
    judge_id: Optional[str],
    criteria_scores: Sequence[CriterionScore],
    comments: Optional[str] = None,
    time_spent: Optional[int] = 0,
) -> SubmissionReceipt:
    """
    Replace a judge's existing submission for a team in place

    Only available when settings.allow_resubmission is enabled; the pair
    keeps a single submission record either way.

    Raises:
        PreconditionError: Re-submission disabled, event ended or team locked
        NotFoundError: No earlier submission for (judge_id, team_id)
        ValidationError: Same rules as submit
    """
    if not settings.allow_resubmission:
        raise PreconditionError("Editing a submitted score is not allowed for this event")

    submission, rubric = _prepare(
        store, settings, event_id, team_id, judge_id, criteria_scores, comments, time_spent
    )
    existing_id = store.replace_submission(submission, lock_completed_teams=settings.lock_completed_teams)
    if existing_id is None:
        raise NotFoundError(f"No submission by judge {judge_id} for team {team_id} to replace")

    submission = submission.model_copy(update={"id": existing_id})
    receipt = _receipt(submission, rubric)
    logger.info(f"✏️ Judge {judge_id} | Team {team_id} | Re-submitted total: {receipt.total_score}")
    return receipt
