"""Initial pick order for a competition's snake draft."""

from __future__ import annotations

import logging
import random
from typing import Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ..errors import InsufficientParticipantsError
from ..models import Competition, CompetitionParticipant, CompetitionScore, Tournament

logger = logging.getLogger(__name__)

MIN_PARTICIPANTS = 2


def shuffled_order(user_ids: Sequence[int], rng: Optional[random.Random] = None) -> list[int]:
    """Return a uniformly random permutation of ``user_ids`` (Fisher-Yates)."""
    rng = rng or random.Random()
    order = list(user_ids)
    for i in range(len(order) - 1, 0, -1):
        j = rng.randint(0, i)
        order[i], order[j] = order[j], order[i]
    return order


def find_reference_competition(
    session: Session, competition: Competition, user_ids: Sequence[int]
) -> Optional[Competition]:
    """Find the finalized competition whose field overlaps most with ``user_ids``.

    Only competitions with frozen scores count. Ties on overlap go to the
    competition whose tournament ended most recently.
    """
    if not user_ids:
        return None

    overlap = func.count(CompetitionScore.user_id).label("overlap")
    stmt = (
        select(Competition, overlap)
        .join(CompetitionScore, CompetitionScore.competition_id == Competition.id)
        .join(Tournament, Tournament.id == Competition.tournament_id)
        .where(
            Competition.id != competition.id,
            CompetitionScore.user_id.in_(list(user_ids)),
        )
        .group_by(Competition.id, Tournament.end_date)
        .order_by(overlap.desc(), Tournament.end_date.desc(), Competition.id.desc())
        .limit(1)
    )
    row = session.execute(stmt).first()
    return row[0] if row is not None else None


def seeded_draft_order(
    session: Session,
    competition: Competition,
    user_ids: Sequence[int],
    rng: Optional[random.Random] = None,
) -> list[int]:
    """Order ``user_ids`` worst-finish-first using the most relevant prior competition.

    Participants who have no frozen score in that competition are dropped
    into uniformly random slots among the ordered ones. When nobody has any
    history the whole field is shuffled.

    Parameters
    ----------
    session : Session
        Active SQLAlchemy session.
    competition : Competition
        The competition whose draft is being ordered. It is excluded from the
        history search.
    user_ids : Sequence[int]
        Participants to order.
    rng : random.Random, optional
        Source of randomness, injectable for deterministic tests.

    Returns
    -------
    list[int]
        ``user_ids`` rearranged; index 0 picks first.
    """
    rng = rng or random.Random()
    reference = find_reference_competition(session, competition, user_ids)
    if reference is None:
        logger.debug(f"No draft history for competition {competition.id}; shuffling")
        return shuffled_order(user_ids, rng)

    finishes = {
        score.user_id: score.final_position
        for score in CompetitionScore.for_competition(session, reference.id)
    }
    ranked = sorted(
        (uid for uid in user_ids if uid in finishes),
        key=lambda uid: finishes[uid],
        reverse=True,
    )
    newcomers = shuffled_order([uid for uid in user_ids if uid not in finishes], rng)
    for uid in newcomers:
        ranked.insert(rng.randint(0, len(ranked)), uid)

    logger.debug(
        f"Seeded draft order for competition {competition.id} from competition {reference.id}"
    )
    return ranked


def generate_draft_order(
    session: Session,
    competition: Competition,
    *,
    seeded: bool = False,
    rng: Optional[random.Random] = None,
) -> list[int]:
    """Return the participants of ``competition`` in pick order.

    Raises
    ------
    InsufficientParticipantsError
        If fewer than two participants are enrolled.
    """
    user_ids = list(
        session.scalars(
            select(CompetitionParticipant.user_id)
            .where(CompetitionParticipant.competition_id == competition.id)
            .order_by(CompetitionParticipant.id)
        ).all()
    )
    if len(user_ids) < MIN_PARTICIPANTS:
        raise InsufficientParticipantsError()

    if seeded:
        return seeded_draft_order(session, competition, user_ids, rng)
    return shuffled_order(user_ids, rng)
