"""Administrative corrections.

Every operation takes the acting ``admin`` and refuses to touch anything
unless that user has ``is_admin`` set.
"""

import logging
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from .db.utils import utcnow
from .errors import (
    AdminRequiredError,
    DraftStateError,
    GolferAlreadyDraftedError,
    NotParticipantError,
)
from .feed.api import ResultsFeedClient
from .feed.sync import refresh_results
from .finalization.saga import RESET_DRAFT, RESET_FINALIZATION, SagaReport, run_reset
from .models import (
    Alternate,
    Competition,
    CompetitionParticipant,
    DraftPick,
    Golfer,
    Tournament,
    TournamentResult,
    User,
)

logger = logging.getLogger(__name__)

EDITABLE_RESULT_FIELDS = (
    "position",
    "total_strokes",
    "total_to_par",
    "rounds_to_par",
    "made_cut",
    "withdrew",
)


def require_admin(user: Optional[User]) -> None:
    if user is None or not user.is_admin:
        raise AdminRequiredError()


def reset_finalization(session: Session, admin: User, competition: Competition) -> SagaReport:
    """Undo :func:`golfdraft.workflows.finalize` for ``competition``.

    The exact deltas frozen on each score are subtracted from the annual
    aggregate, then bounty, payments and scores are deleted and
    ``finalized_at`` is cleared. Running it on a competition that was never
    finalized changes nothing.
    """
    require_admin(admin)
    return run_reset(session, RESET_FINALIZATION, competition)


def reset_draft(session: Session, admin: User, competition: Competition) -> SagaReport:
    """Return ``competition`` to ``not_started``, resetting finalization first."""
    require_admin(admin)
    return run_reset(session, RESET_DRAFT, competition)


def swap_pick(
    session: Session, admin: User, pick: DraftPick, new_golfer: Golfer
) -> tuple[int, int]:
    """Replace the golfer on ``pick``.

    Returns
    -------
    tuple[int, int]
        The old and new golfer ids.

    Raises
    ------
    GolferAlreadyDraftedError
        If ``new_golfer`` is already on a team in the competition.
    """
    require_admin(admin)
    if pick.id is None or new_golfer.id is None:
        raise ValueError("Pick and golfer must be persisted first")

    old_golfer_id = pick.golfer_id
    if old_golfer_id == new_golfer.id:
        return old_golfer_id, new_golfer.id
    if DraftPick.for_golfer(session, pick.competition_id, new_golfer.id) is not None:
        raise GolferAlreadyDraftedError()

    pick.golfer_id = new_golfer.id
    session.flush()
    logger.info(
        f"Admin {admin.id} swapped pick {pick.id} in competition {pick.competition_id}: "
        f"golfer {old_golfer_id} -> {new_golfer.id}"
    )
    return old_golfer_id, new_golfer.id


def update_alternate(
    session: Session,
    admin: User,
    competition: Competition,
    user: User,
    golfer: Golfer,
) -> Alternate:
    """Set ``user``'s alternate regardless of draft state or deadlines."""
    require_admin(admin)
    if competition.id is None or user.id is None or golfer.id is None:
        raise ValueError("Competition, user and golfer must be persisted first")
    if not competition.is_participant(session, user.id):
        raise NotParticipantError("That user is not a participant in this competition.")
    if DraftPick.for_golfer(session, competition.id, golfer.id) is not None:
        raise GolferAlreadyDraftedError()

    alternate = Alternate.for_user(session, competition.id, user.id)
    if alternate is None:
        alternate = Alternate(competition_id=competition.id, user_id=user.id, golfer_id=golfer.id)
        session.add(alternate)
    else:
        alternate.golfer_id = golfer.id
    alternate.selected_at = utcnow()
    session.flush()
    return alternate


def edit_result(
    session: Session,
    admin: User,
    tournament: Tournament,
    golfer: Golfer,
    **changes: Any,
) -> TournamentResult:
    """Correct a tournament result by hand.

    The row is created when the feed never reported the golfer. It is marked
    ``manual_override`` so later syncs leave it alone.

    Parameters
    ----------
    session : Session
        Active SQLAlchemy session.
    admin : User
        Acting admin.
    tournament : Tournament
        Tournament of the result.
    golfer : Golfer
        Golfer of the result.
    **changes
        Any of ``position``, ``total_strokes``, ``total_to_par``,
        ``rounds_to_par``, ``made_cut`` and ``withdrew``.

    Returns
    -------
    TournamentResult
        The updated row.
    """
    require_admin(admin)
    unknown = set(changes) - set(EDITABLE_RESULT_FIELDS)
    if unknown:
        raise ValueError(f"Cannot edit result fields: {', '.join(sorted(unknown))}")
    if tournament.id is None or golfer.id is None:
        raise ValueError("Tournament and golfer must be persisted first")

    row = TournamentResult.get(session, tournament.id, golfer.id)
    if row is None:
        row = TournamentResult(tournament_id=tournament.id, golfer_id=golfer.id, withdrew=False)
        session.add(row)
    for key, value in changes.items():
        if key == "rounds_to_par" and value is not None:
            value = list(value)
        if key == "withdrew":
            value = bool(value)
        setattr(row, key, value)
    row.manual_override = True
    row.last_updated = utcnow()
    session.flush()
    logger.info(
        f"Admin {admin.id} edited result of golfer {golfer.id} in tournament {tournament.id}: "
        f"{sorted(changes)}"
    )
    return row


def remove_participant(
    session: Session, admin: User, competition: Competition, user: User
) -> None:
    """Remove ``user`` from ``competition`` before its draft starts."""
    require_admin(admin)
    if competition.draft_status != "not_started":
        raise DraftStateError("Participants can only be removed before the draft starts.")

    participant = session.scalar(
        select(CompetitionParticipant).where(
            CompetitionParticipant.competition_id == competition.id,
            CompetitionParticipant.user_id == user.id,
        )
    )
    if participant is None:
        raise NotParticipantError("That user is not a participant in this competition.")
    session.delete(participant)
    session.flush()
    session.expire(competition, ["participants"])


def force_sync_results(
    session: Session,
    admin: User,
    tournament: Tournament,
    *,
    client: Optional[ResultsFeedClient] = None,
    clear_overrides: bool = False,
) -> bool:
    """Re-pull results from the feed now.

    With ``clear_overrides`` manual corrections are released first so the
    feed values replace them.
    """
    require_admin(admin)
    if clear_overrides:
        rows = session.scalars(
            select(TournamentResult).where(
                TournamentResult.tournament_id == tournament.id,
                TournamentResult.manual_override.is_(True),
            )
        ).all()
        for row in rows:
            row.manual_override = False
        session.flush()
        logger.info(f"Cleared {len(rows)} manual override(s) for tournament {tournament.id}")
    return refresh_results(session, tournament, client)
