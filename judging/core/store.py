"""
SQLite persistence for events, teams, judges, rubrics and score submissions

Uniqueness of (judge_id, team_id) and the status/phase guards live in SQL so
that concurrent requests cannot slip past an application-level check.
"""
import json
import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional, Sequence

from judging.errors import DuplicateSubmissionError, PreconditionError
from judging.models import (
    CriterionScore,
    Event,
    Judge,
    RubricCriteria,
    ScoreSubmission,
    Team,
    TeamMember,
)


logger = logging.getLogger(__name__)


SCHEMA = """
CREATE TABLE IF NOT EXISTS events (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    judging_phase TEXT NOT NULL DEFAULT 'not-started'
        CHECK (judging_phase IN ('not-started', 'in-progress', 'ended')),
    created_at REAL NOT NULL
);

CREATE TABLE IF NOT EXISTS rubric_criteria (
    event_id TEXT NOT NULL REFERENCES events(id) ON DELETE CASCADE,
    id TEXT NOT NULL,
    name TEXT NOT NULL,
    short_name TEXT NOT NULL,
    description TEXT,
    guiding_question TEXT,
    max_score INTEGER NOT NULL CHECK (max_score > 0),
    display_order INTEGER NOT NULL,
    PRIMARY KEY (event_id, id)
);

CREATE TABLE IF NOT EXISTS teams (
    seq INTEGER PRIMARY KEY AUTOINCREMENT,
    id TEXT UNIQUE NOT NULL,
    event_id TEXT NOT NULL REFERENCES events(id) ON DELETE CASCADE,
    name TEXT NOT NULL,
    status TEXT NOT NULL DEFAULT 'waiting'
        CHECK (status IN ('waiting', 'active', 'completed')),
    photo_url TEXT,
    project_url TEXT,
    description TEXT,
    members TEXT NOT NULL DEFAULT '[]',
    UNIQUE (event_id, name)
);

CREATE TABLE IF NOT EXISTS judges (
    id TEXT PRIMARY KEY,
    event_id TEXT NOT NULL REFERENCES events(id) ON DELETE CASCADE,
    name TEXT NOT NULL,
    UNIQUE (event_id, name)
);

CREATE TABLE IF NOT EXISTS score_submissions (
    id TEXT PRIMARY KEY,
    event_id TEXT NOT NULL REFERENCES events(id) ON DELETE CASCADE,
    team_id TEXT NOT NULL REFERENCES teams(id) ON DELETE CASCADE,
    judge_id TEXT NOT NULL REFERENCES judges(id) ON DELETE CASCADE,
    overall_comments TEXT,
    submitted_at REAL NOT NULL,
    time_spent_seconds INTEGER NOT NULL DEFAULT 0,
    UNIQUE (judge_id, team_id)
);

CREATE TABLE IF NOT EXISTS scores (
    submission_id TEXT NOT NULL REFERENCES score_submissions(id) ON DELETE CASCADE,
    criteria_id TEXT NOT NULL,
    score INTEGER NOT NULL CHECK (score >= 0),
    reflection TEXT,
    position INTEGER NOT NULL,
    UNIQUE (submission_id, criteria_id)
);

CREATE INDEX IF NOT EXISTS idx_teams_event_id ON teams(event_id);
CREATE INDEX IF NOT EXISTS idx_judges_event_id ON judges(event_id);
CREATE INDEX IF NOT EXISTS idx_submissions_event_id ON score_submissions(event_id);
CREATE INDEX IF NOT EXISTS idx_scores_submission_id ON scores(submission_id);
"""


class JudgingStore:
    """Connection-per-operation SQLite store"""

    def __init__(self, db_path: str = "data/judging.sqlite"):
        self.db_path = db_path

    @contextmanager
    def connection(self) -> Iterator[sqlite3.Connection]:
        """Open a connection, commit on success, roll back on error, always close"""
        conn = sqlite3.connect(self.db_path, timeout=10)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def initialize(self) -> None:
        """Create all tables and indexes if missing"""
        parent = Path(self.db_path).parent
        if str(parent):
            parent.mkdir(parents=True, exist_ok=True)
        with self.connection() as conn:
            conn.executescript(SCHEMA)
        logger.info(f"✅ Judging store ready at {self.db_path}")

    # ==================== EVENTS ====================

    def insert_event(self, event: Event, rubric: Sequence[RubricCriteria]) -> None:
        with self.connection() as conn:
            conn.execute(
                "INSERT INTO events (id, name, judging_phase, created_at) VALUES (?, ?, ?, ?)",
                (event.id, event.name, event.judging_phase, event.created_at),
            )
            conn.executemany(
                """
                INSERT INTO rubric_criteria
                    (event_id, id, name, short_name, description, guiding_question, max_score, display_order)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                [
                    (event.id, c.id, c.name, c.short_name, c.description,
                     c.guiding_question, c.max_score, c.display_order)
                    for c in rubric
                ],
            )

    def get_event(self, event_id: str) -> Optional[Event]:
        with self.connection() as conn:
            row = conn.execute("SELECT * FROM events WHERE id = ?", (event_id,)).fetchone()
        return Event(**dict(row)) if row else None

    def get_rubric(self, event_id: str) -> List[RubricCriteria]:
        with self.connection() as conn:
            rows = conn.execute(
                "SELECT * FROM rubric_criteria WHERE event_id = ? ORDER BY display_order, id",
                (event_id,),
            ).fetchall()
        return [RubricCriteria(**{k: row[k] for k in row.keys() if k != "event_id"}) for row in rows]

    def update_phase(
        self,
        event_id: str,
        new_phase: str,
        from_phases: Sequence[str],
        require_all_teams_completed: bool = False,
    ) -> bool:
        """
        Move an event to new_phase only if it is currently in one of from_phases

        With require_all_teams_completed the same statement also checks that
        the event has teams and none of them is outside 'completed'.

        Returns:
            True if the row was updated
        """
        placeholders = ", ".join("?" for _ in from_phases)
        sql = f"UPDATE events SET judging_phase = ? WHERE id = ? AND judging_phase IN ({placeholders})"
        params: list = [new_phase, event_id, *from_phases]

        if require_all_teams_completed:
            sql += (
                " AND EXISTS (SELECT 1 FROM teams WHERE event_id = ?)"
                " AND NOT EXISTS (SELECT 1 FROM teams WHERE event_id = ? AND status != 'completed')"
            )
            params.extend([event_id, event_id])

        with self.connection() as conn:
            cursor = conn.execute(sql, params)
            return cursor.rowcount == 1

    # ==================== TEAMS ====================

    def insert_team(self, team: Team) -> Team:
        """Insert a team; created_order is assigned by the store"""
        with self.connection() as conn:
            cursor = conn.execute(
                """
                INSERT INTO teams (id, event_id, name, status, photo_url, project_url, description, members)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    team.id, team.event_id, team.name, team.status, team.photo_url,
                    team.project_url, team.description,
                    json.dumps([m.model_dump() for m in team.members]),
                ),
            )
            seq = cursor.lastrowid
        return team.model_copy(update={"created_order": seq})

    @staticmethod
    def _row_to_team(row: sqlite3.Row) -> Team:
        data = dict(row)
        seq = data.pop("seq")
        members = [TeamMember(**m) for m in json.loads(data.pop("members") or "[]")]
        return Team(**data, members=members, created_order=seq)

    def get_team(self, team_id: str) -> Optional[Team]:
        with self.connection() as conn:
            row = conn.execute("SELECT * FROM teams WHERE id = ?", (team_id,)).fetchone()
        return self._row_to_team(row) if row else None

    def list_teams(self, event_id: str) -> List[Team]:
        """All teams of an event in creation order"""
        with self.connection() as conn:
            rows = conn.execute(
                "SELECT * FROM teams WHERE event_id = ? ORDER BY seq", (event_id,)
            ).fetchall()
        return [self._row_to_team(row) for row in rows]

    def update_team_status(self, team_id: str, status: str) -> bool:
        """
        Set a team's status unless its event has ended

        Returns:
            True if the row was updated
        """
        with self.connection() as conn:
            cursor = conn.execute(
                """
                UPDATE teams SET status = ?
                WHERE id = ?
                  AND event_id IN (SELECT id FROM events WHERE judging_phase != 'ended')
                """,
                (status, team_id),
            )
            return cursor.rowcount == 1

    # ==================== JUDGES ====================

    def insert_judge(self, judge: Judge) -> None:
        with self.connection() as conn:
            conn.execute(
                "INSERT INTO judges (id, event_id, name) VALUES (?, ?, ?)",
                (judge.id, judge.event_id, judge.name),
            )

    def get_judge(self, judge_id: str) -> Optional[Judge]:
        with self.connection() as conn:
            row = conn.execute("SELECT * FROM judges WHERE id = ?", (judge_id,)).fetchone()
        return Judge(**dict(row)) if row else None

    def list_judges(self, event_id: str) -> List[Judge]:
        with self.connection() as conn:
            rows = conn.execute(
                "SELECT * FROM judges WHERE event_id = ? ORDER BY name, id", (event_id,)
            ).fetchall()
        return [Judge(**dict(row)) for row in rows]

    # ==================== SUBMISSIONS ====================

    @staticmethod
    def _insert_scores(conn: sqlite3.Connection, submission: ScoreSubmission) -> None:
        conn.executemany(
            """
            INSERT INTO scores (submission_id, criteria_id, score, reflection, position)
            VALUES (?, ?, ?, ?, ?)
            """,
            [
                (submission.id, cs.criteria_id, cs.score, cs.reflection, position)
                for position, cs in enumerate(submission.criteria_scores)
            ],
        )

    @staticmethod
    def _scoring_open_clause(lock_completed_teams: bool) -> str:
        """WHERE fragment: event not ended and, when locked, team not completed"""
        clause = "EXISTS (SELECT 1 FROM events WHERE id = ? AND judging_phase != 'ended')"
        if lock_completed_teams:
            clause += " AND EXISTS (SELECT 1 FROM teams WHERE id = ? AND status != 'completed')"
        return clause

    @staticmethod
    def _scoring_open_params(submission: ScoreSubmission, lock_completed_teams: bool) -> list:
        params = [submission.event_id]
        if lock_completed_teams:
            params.append(submission.team_id)
        return params

    @staticmethod
    def _closed_reason(conn: sqlite3.Connection, submission: ScoreSubmission) -> PreconditionError:
        row = conn.execute(
            "SELECT judging_phase FROM events WHERE id = ?", (submission.event_id,)
        ).fetchone()
        if row and row["judging_phase"] == "ended":
            return PreconditionError(f"Judging has ended for event {submission.event_id}")
        return PreconditionError(f"Cannot score completed team {submission.team_id}")

    def insert_submission(self, submission: ScoreSubmission, lock_completed_teams: bool = True) -> None:
        """
        Store a new submission and its criterion scores atomically

        The insert re-checks the event phase (and the team status when
        lock_completed_teams is set) in the same statement, so a submission
        validated just before judging ended is not stored.

        Raises:
            DuplicateSubmissionError: If the (judge_id, team_id) pair already exists
            PreconditionError: If judging ended or the team was locked meanwhile
        """
        with self.connection() as conn:
            try:
                cursor = conn.execute(
                    f"""
                    INSERT INTO score_submissions
                        (id, event_id, team_id, judge_id, overall_comments, submitted_at, time_spent_seconds)
                    SELECT ?, ?, ?, ?, ?, ?, ?
                    WHERE {self._scoring_open_clause(lock_completed_teams)}
                    """,
                    [
                        submission.id, submission.event_id, submission.team_id,
                        submission.judge_id, submission.overall_comments,
                        submission.submitted_at, submission.time_spent_seconds,
                        *self._scoring_open_params(submission, lock_completed_teams),
                    ],
                )
            except sqlite3.IntegrityError as exc:
                if "score_submissions.judge_id" not in str(exc):
                    raise
                raise DuplicateSubmissionError(
                    f"Judge {submission.judge_id} already submitted scores for team {submission.team_id}"
                ) from exc
            if cursor.rowcount != 1:
                raise self._closed_reason(conn, submission)
            self._insert_scores(conn, submission)

    def replace_submission(self, submission: ScoreSubmission, lock_completed_teams: bool = True) -> Optional[str]:
        """
        Overwrite the existing submission for (judge_id, team_id) in place

        Returns:
            The id of the updated submission, or None if none existed

        Raises:
            PreconditionError: If judging ended or the team was locked meanwhile
        """
        with self.connection() as conn:
            row = conn.execute(
                "SELECT id FROM score_submissions WHERE judge_id = ? AND team_id = ?",
                (submission.judge_id, submission.team_id),
            ).fetchone()
            if not row:
                return None

            existing_id = row["id"]
            cursor = conn.execute(
                f"""
                UPDATE score_submissions
                SET overall_comments = ?, submitted_at = ?, time_spent_seconds = ?
                WHERE id = ? AND {self._scoring_open_clause(lock_completed_teams)}
                """,
                [
                    submission.overall_comments, submission.submitted_at,
                    submission.time_spent_seconds, existing_id,
                    *self._scoring_open_params(submission, lock_completed_teams),
                ],
            )
            if cursor.rowcount != 1:
                raise self._closed_reason(conn, submission)
            conn.execute("DELETE FROM scores WHERE submission_id = ?", (existing_id,))
            self._insert_scores(conn, submission.model_copy(update={"id": existing_id}))
            return existing_id

    def list_submissions(self, event_id: str) -> List[ScoreSubmission]:
        """All submissions of an event, oldest first"""
        with self.connection() as conn:
            rows = conn.execute(
                "SELECT * FROM score_submissions WHERE event_id = ? ORDER BY submitted_at, id",
                (event_id,),
            ).fetchall()
            score_rows = conn.execute(
                """
                SELECT s.* FROM scores s
                JOIN score_submissions ss ON ss.id = s.submission_id
                WHERE ss.event_id = ?
                ORDER BY s.submission_id, s.position
                """,
                (event_id,),
            ).fetchall()

        scores_by_submission = {}
        for row in score_rows:
            scores_by_submission.setdefault(row["submission_id"], []).append(
                CriterionScore(
                    criteria_id=row["criteria_id"],
                    score=row["score"],
                    reflection=row["reflection"],
                )
            )

        return [
            ScoreSubmission(**dict(row), criteria_scores=scores_by_submission.get(row["id"], []))
            for row in rows
        ]
