"""
Error taxonomy for judging operations
"""
from typing import Optional


class JudgingError(Exception):
    """Base class for errors surfaced to callers verbatim"""
    kind = "judging_error"

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field

    def to_dict(self) -> dict:
        body = {"error": self.kind, "detail": self.message}
        if self.field:
            body["field"] = self.field
        return body


class ValidationError(JudgingError):
    """Malformed submission or request value"""
    kind = "validation_error"


class DuplicateSubmissionError(JudgingError):
    """A (judge, team) pair already has a submission"""
    kind = "duplicate_submission"


class PreconditionError(JudgingError):
    """Illegal state transition for the current event/team state"""
    kind = "precondition_failed"


class NotFoundError(JudgingError):
    kind = "not_found"
