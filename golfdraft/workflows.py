import logging
import random
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .db.utils import as_utc, utcnow
from .draft.order import MIN_PARTICIPANTS, generate_draft_order
from .draft.turns import next_position, round_for_pick, total_picks
from .errors import (
    AdminRequiredError,
    AlreadyParticipantError,
    DraftStateError,
    GolferAlreadyDraftedError,
    NotParticipantError,
    NotYourTurnError,
    TournamentStartedError,
)
from .finalization.engine import FinalizationEngine
from .models import (
    Alternate,
    Competition,
    CompetitionParticipant,
    CompetitionScore,
    DraftOrderEntry,
    DraftPick,
    Golfer,
    Tournament,
    User,
)
from .scoring.leaderboard import LeaderboardEntry, load_leaderboard

logger = logging.getLogger(__name__)

DRAFT_LEAD_TIME = timedelta(days=2)
AUTO_START_MIN_LEAD = timedelta(hours=24)
INVITE_TTL = timedelta(hours=72)
INVITE_CODE_LENGTH = 8
# no 0/o, 1/l
INVITE_ALPHABET = "abcdefghijkmnpqrstuvwxyz23456789"
PUBLIC_NAME_SUFFIX = " — Public"


@dataclass(frozen=True)
class CurrentTurn:
    """Who is on the clock. ``user_id`` is ``None`` before the draft or once it is over."""

    user_id: Optional[int]
    pick_number: int


def _require_persisted(**objs) -> None:
    for label, obj in objs.items():
        if obj.id is None:
            raise ValueError(f"{label.capitalize()} must be persisted first")


def _lock_competition(session: Session, competition: Competition) -> Competition:
    """Reload ``competition`` holding its row lock until the transaction ends."""
    return session.execute(
        select(Competition)
        .where(Competition.id == competition.id)
        .with_for_update()
        .execution_options(populate_existing=True)
    ).scalar_one()


def _draft_order_user_ids(session: Session, competition_id: int) -> list[int]:
    return list(
        session.scalars(
            select(DraftOrderEntry.user_id)
            .where(DraftOrderEntry.competition_id == competition_id)
            .order_by(DraftOrderEntry.position)
        ).all()
    )


def _pick_count(session: Session, competition_id: int) -> int:
    return int(
        session.scalar(
            select(func.count(DraftPick.id)).where(DraftPick.competition_id == competition_id)
        )
        or 0
    )


def _tournament_started(tournament: Tournament, now: datetime) -> bool:
    return as_utc(tournament.start_date) <= now


# ---------------------------------------------------------------------------
# Competition lifecycle
# ---------------------------------------------------------------------------


def draft_scheduled_at(tournament: Tournament) -> datetime:
    """Drafts open automatically two days before the first tee time."""
    return as_utc(tournament.start_date) - DRAFT_LEAD_TIME


def get_or_create_public_competition(
    session: Session, tournament: Tournament, user: User
) -> Competition:
    """Return the tournament's public competition, creating it on first visit.

    Parameters
    ----------
    session : Session
        Active SQLAlchemy session.
    tournament : Tournament
        Persisted tournament.
    user : User
        Visiting user, recorded as creator if the competition is created now.

    Returns
    -------
    Competition
        The single public competition of ``tournament``.
    """
    _require_persisted(tournament=tournament, user=user)
    existing = Competition.public_for_tournament(session, tournament.id)
    if existing is not None:
        return existing

    competition = Competition(
        tournament_id=tournament.id,
        name=f"{tournament.name}{PUBLIC_NAME_SUFFIX}",
        created_by_id=user.id,
        is_public=True,
        draft_scheduled_at=draft_scheduled_at(tournament),
    )
    try:
        with session.begin_nested():
            session.add(competition)
            session.flush()
    except IntegrityError:
        # another request created it first
        existing = Competition.public_for_tournament(session, tournament.id)
        if existing is None:
            raise
        return existing
    logger.info(f"Created public competition {competition.id} for tournament {tournament.id}")
    return competition


def generate_invite_code(rng: Optional[random.Random] = None) -> str:
    rng = rng or random.SystemRandom()
    return "".join(rng.choice(INVITE_ALPHABET) for _ in range(INVITE_CODE_LENGTH))


def create_private_competition(
    session: Session,
    tournament: Tournament,
    creator: User,
    name: str,
    *,
    now: Optional[datetime] = None,
    rng: Optional[random.Random] = None,
) -> Competition:
    """Create an invite-only competition and enrol its creator.

    The invite code expires :data:`INVITE_TTL` after creation.
    """
    _require_persisted(tournament=tournament, creator=creator)
    name = (name or "").strip()
    if not name:
        raise ValueError("Competition name must not be empty")
    now = as_utc(now) or utcnow()

    code = generate_invite_code(rng)
    while Competition.get_by_invite_code(session, code) is not None:
        code = generate_invite_code(rng)

    competition = Competition(
        tournament_id=tournament.id,
        name=name,
        created_by_id=creator.id,
        is_public=False,
        invite_code=code,
        invite_expires_at=now + INVITE_TTL,
        draft_scheduled_at=draft_scheduled_at(tournament),
        created_at=now,
    )
    session.add(competition)
    session.flush()
    session.add(CompetitionParticipant(competition_id=competition.id, user_id=creator.id))
    session.flush()
    logger.info(f"Created private competition {competition.id} for tournament {tournament.id}")
    return competition


def get_competition_by_invite_code(
    session: Session, invite_code: str, *, now: Optional[datetime] = None
) -> Optional[Competition]:
    """Resolve a share link. Unknown and expired codes both return ``None``."""
    competition = Competition.get_by_invite_code(session, (invite_code or "").strip().lower())
    if competition is None:
        return None
    expires_at = as_utc(competition.invite_expires_at)
    if expires_at is not None and expires_at < (as_utc(now) or utcnow()):
        return None
    return competition


def join_competition(
    session: Session, competition: Competition, user: User
) -> CompetitionParticipant:
    """Enrol ``user`` in ``competition`` while its draft has not started."""
    _require_persisted(competition=competition, user=user)
    if competition.draft_status != "not_started":
        raise DraftStateError("The draft has already started; new participants cannot join.")
    if competition.is_participant(session, user.id):
        raise AlreadyParticipantError()

    participant = CompetitionParticipant(competition_id=competition.id, user_id=user.id)
    try:
        with session.begin_nested():
            session.add(participant)
            session.flush()
    except IntegrityError as e:
        raise AlreadyParticipantError() from e
    return participant


# ---------------------------------------------------------------------------
# Draft
# ---------------------------------------------------------------------------


def _begin_draft(
    session: Session,
    competition: Competition,
    now: datetime,
    *,
    seeded: bool,
    rng: Optional[random.Random],
) -> list[DraftOrderEntry]:
    user_ids = generate_draft_order(session, competition, seeded=seeded, rng=rng)
    entries = [
        DraftOrderEntry(
            competition_id=competition.id, user_id=uid, position=position, created_at=now
        )
        for position, uid in enumerate(user_ids, start=1)
    ]
    session.add_all(entries)
    competition.draft_status = "in_progress"
    competition.draft_started_at = now
    session.flush()
    logger.info(f"Draft started for competition {competition.id} with {len(entries)} participants")
    return entries


def start_draft(
    session: Session,
    competition: Competition,
    actor: User,
    *,
    seeded: bool = False,
    rng: Optional[random.Random] = None,
    now: Optional[datetime] = None,
) -> list[DraftOrderEntry]:
    """Fix the pick order and open the draft.

    Parameters
    ----------
    session : Session
        Active SQLAlchemy session.
    competition : Competition
        Persisted competition whose draft has not started.
    actor : User
        Must be the competition creator or an admin.
    seeded : bool, default: False
        Order worst-finish-first from a previous competition instead of
        shuffling.
    rng : random.Random, optional
        Source of randomness for the shuffle.
    now : datetime, optional
        Timestamp for ``draft_started_at``.

    Returns
    -------
    list[DraftOrderEntry]
        Order entries by position.

    Raises
    ------
    AdminRequiredError
        If ``actor`` is neither the creator nor an admin.
    DraftStateError
        If the draft has already started.
    InsufficientParticipantsError
        If fewer than two participants are enrolled.
    """
    _require_persisted(competition=competition, actor=actor)
    if actor.id != competition.created_by_id and not actor.is_admin:
        raise AdminRequiredError("Only the competition creator or an admin can start the draft.")

    competition = _lock_competition(session, competition)
    if competition.draft_status != "not_started":
        raise DraftStateError("The draft has already been started.")
    return _begin_draft(session, competition, as_utc(now) or utcnow(), seeded=seeded, rng=rng)


def maybe_auto_start_draft(
    session: Session,
    competition: Competition,
    *,
    now: Optional[datetime] = None,
    rng: Optional[random.Random] = None,
) -> bool:
    """Start the draft if its scheduled time has come.

    Nothing happens unless the draft has not started, the scheduled time has
    passed, at least two participants are enrolled and the tournament is
    still at least :data:`AUTO_START_MIN_LEAD` away. Closer to the start only
    :func:`start_draft` can open it.
    """
    _require_persisted(competition=competition)
    now = as_utc(now) or utcnow()
    scheduled = as_utc(competition.draft_scheduled_at)
    if competition.draft_status != "not_started" or scheduled is None or scheduled > now:
        return False
    if competition.participant_count(session) < MIN_PARTICIPANTS:
        return False
    if as_utc(competition.tournament.start_date) - now < AUTO_START_MIN_LEAD:
        return False

    competition = _lock_competition(session, competition)
    if competition.draft_status != "not_started":
        return False
    _begin_draft(session, competition, now, seeded=False, rng=rng)
    return True


def get_draft_order(session: Session, competition: Competition) -> list[DraftOrderEntry]:
    return list(
        session.scalars(
            select(DraftOrderEntry)
            .where(DraftOrderEntry.competition_id == competition.id)
            .order_by(DraftOrderEntry.position)
        ).all()
    )


def get_current_turn(session: Session, competition: Competition) -> CurrentTurn:
    """Return whose turn it is and the number of the next pick."""
    _require_persisted(competition=competition)
    order = _draft_order_user_ids(session, competition.id)
    picks_made = _pick_count(session, competition.id)
    if not order:
        return CurrentTurn(user_id=None, pick_number=picks_made + 1)
    position = next_position(picks_made, len(order))
    return CurrentTurn(
        user_id=order[position - 1] if position is not None else None,
        pick_number=picks_made + 1,
    )


def make_pick(
    session: Session,
    competition: Competition,
    user: User,
    golfer: Golfer,
    *,
    now: Optional[datetime] = None,
) -> DraftPick:
    """Draft ``golfer`` for ``user``.

    The competition row is locked and all checks run against fresh state, so
    of two concurrent submissions for the same turn or golfer only one can
    succeed. The unique constraints on ``(competition, golfer)`` and
    ``(competition, pick_number)`` back this up on stores without row locks.

    Parameters
    ----------
    session : Session
        Active SQLAlchemy session.
    competition : Competition
        Competition whose draft is in progress.
    user : User
        Participant making the pick.
    golfer : Golfer
        Golfer to draft.
    now : datetime, optional
        Current time, compared against the tournament start.

    Returns
    -------
    DraftPick
        The persisted pick. The last pick of the draft also marks the
        competition as completed.

    Raises
    ------
    DraftStateError
        If the draft is not in progress.
    TournamentStartedError
        If the tournament has already started.
    NotYourTurnError
        If another participant is on the clock.
    GolferAlreadyDraftedError
        If the golfer is already on a team in this competition.
    """
    _require_persisted(competition=competition, user=user, golfer=golfer)
    now = as_utc(now) or utcnow()

    competition = _lock_competition(session, competition)
    if competition.draft_status != "in_progress":
        raise DraftStateError("The draft is not in progress.")
    if _tournament_started(competition.tournament, now):
        raise TournamentStartedError("Picks are closed because the tournament has started.")

    order = _draft_order_user_ids(session, competition.id)
    picks_made = _pick_count(session, competition.id)
    position = next_position(picks_made, len(order)) if order else None
    if position is None:
        raise DraftStateError("The draft is already complete.")
    if order[position - 1] != user.id:
        raise NotYourTurnError()
    if DraftPick.for_golfer(session, competition.id, golfer.id) is not None:
        raise GolferAlreadyDraftedError()

    pick_number = picks_made + 1
    pick = DraftPick(
        competition_id=competition.id,
        user_id=user.id,
        golfer_id=golfer.id,
        pick_number=pick_number,
        draft_round=round_for_pick(pick_number, len(order)),
        picked_at=now,
    )
    try:
        with session.begin_nested():
            session.add(pick)
            session.flush()
    except IntegrityError as e:
        if DraftPick.for_golfer(session, competition.id, golfer.id) is not None:
            raise GolferAlreadyDraftedError() from e
        raise NotYourTurnError() from e

    if pick_number == total_picks(len(order)):
        competition.draft_status = "completed"
        competition.draft_completed_at = now
        session.flush()
        logger.info(f"Draft completed for competition {competition.id}")
    return pick


def select_alternate(
    session: Session,
    competition: Competition,
    user: User,
    golfer: Golfer,
    *,
    now: Optional[datetime] = None,
) -> Alternate:
    """Nominate or replace ``user``'s alternate golfer.

    Allowed once the draft is completed and until the tournament starts. The
    alternate must not be on any team in the competition.
    """
    _require_persisted(competition=competition, user=user, golfer=golfer)
    now = as_utc(now) or utcnow()
    if competition.draft_status != "completed":
        raise DraftStateError("Alternates can only be selected after the draft is complete.")
    if _tournament_started(competition.tournament, now):
        raise TournamentStartedError("Alternates are locked because the tournament has started.")
    if not competition.is_participant(session, user.id):
        raise NotParticipantError()
    if DraftPick.for_golfer(session, competition.id, golfer.id) is not None:
        raise GolferAlreadyDraftedError("This golfer was drafted and cannot be an alternate.")

    alternate = Alternate.for_user(session, competition.id, user.id)
    if alternate is None:
        alternate = Alternate(competition_id=competition.id, user_id=user.id, golfer_id=golfer.id)
        session.add(alternate)
    else:
        alternate.golfer_id = golfer.id
    alternate.selected_at = now
    session.flush()
    return alternate


# ---------------------------------------------------------------------------
# Scoring
# ---------------------------------------------------------------------------


def get_leaderboard(session: Session, competition: Competition) -> list[LeaderboardEntry]:
    """Standings for ``competition``.

    Frozen scores are returned once the competition is finalized; before
    that the leaderboard is recomputed from the latest results. An empty
    list means scores are not available yet.
    """
    _require_persisted(competition=competition)
    frozen = CompetitionScore.for_competition(session, competition.id)
    if frozen:
        return [LeaderboardEntry.from_score(score) for score in frozen]
    return load_leaderboard(session, competition)


def finalize(
    session: Session, competition: Competition, *, now: Optional[datetime] = None
) -> bool:
    """Finalize ``competition`` if its tournament is completed.

    Safe to call on every read: repeated and concurrent calls persist the
    results at most once. Returns ``True`` only for the call that did.
    """
    return FinalizationEngine(session).finalize(competition, now=now)
