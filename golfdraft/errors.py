"""Exceptions raised by the draft and scoring engine.

Every error carries a stable machine-readable ``code`` and a message that is
safe to show to the participant. Validation errors subclass ``ValueError`` so
callers that only care about "the request was rejected" can catch that.
"""

from __future__ import annotations

from typing import Any, Optional


# Error codes (stable API surface)
NOT_YOUR_TURN = "NOT_YOUR_TURN"
GOLFER_ALREADY_DRAFTED = "GOLFER_ALREADY_DRAFTED"
TOURNAMENT_STARTED = "TOURNAMENT_STARTED"
INSUFFICIENT_PARTICIPANTS = "INSUFFICIENT_PARTICIPANTS"
DRAFT_STATE = "DRAFT_STATE"
NOT_PARTICIPANT = "NOT_PARTICIPANT"
ALREADY_PARTICIPANT = "ALREADY_PARTICIPANT"
ADMIN_REQUIRED = "ADMIN_REQUIRED"


class GolfDraftError(Exception):
    """Base class for engine errors with a stable ``code``."""

    code: str = "GOLFDRAFT_ERROR"
    default_message: str = "The operation could not be completed."

    def __init__(self, message: Optional[str] = None, *, details: Optional[Any] = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def __str__(self) -> str:  # pragma: no cover
        return self.message


class DraftValidationError(GolfDraftError, ValueError):
    """A request was rejected against the current persisted state."""

    code = "DRAFT_VALIDATION"


class NotYourTurnError(DraftValidationError):
    code = NOT_YOUR_TURN
    default_message = "It's not your turn to pick."


class GolferAlreadyDraftedError(DraftValidationError):
    code = GOLFER_ALREADY_DRAFTED
    default_message = "This golfer has already been drafted in this competition."


class TournamentStartedError(DraftValidationError):
    code = TOURNAMENT_STARTED
    default_message = "The tournament has already started."


class InsufficientParticipantsError(DraftValidationError):
    code = INSUFFICIENT_PARTICIPANTS
    default_message = "At least 2 participants are needed to start the draft."


class DraftStateError(DraftValidationError):
    code = DRAFT_STATE
    default_message = "The draft is not in the expected state."


class NotParticipantError(DraftValidationError):
    code = NOT_PARTICIPANT
    default_message = "You must be a participant in this competition."


class AlreadyParticipantError(DraftValidationError):
    code = ALREADY_PARTICIPANT
    default_message = "You are already a participant in this competition."


class AdminRequiredError(GolfDraftError, PermissionError):
    code = ADMIN_REQUIRED
    default_message = "Admin access required."


__all__ = [
    "GolfDraftError",
    "DraftValidationError",
    "NotYourTurnError",
    "GolferAlreadyDraftedError",
    "TournamentStartedError",
    "InsufficientParticipantsError",
    "DraftStateError",
    "NotParticipantError",
    "AlreadyParticipantError",
    "AdminRequiredError",
]
