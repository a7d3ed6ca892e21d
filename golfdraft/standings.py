"""Read-only season views over finalized competitions."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from .models import AnnualLeaderboard, Competition, CompetitionScore, Tournament, User


@dataclass(frozen=True)
class AnnualStanding:
    user_id: int
    display_name: str
    team_color: Optional[str]
    year: int
    total_competitions: int
    competitions_won: int
    total_winnings: Decimal
    total_bounties: Decimal

    @property
    def net_total(self) -> Decimal:
        return self.total_winnings + self.total_bounties


@dataclass(frozen=True)
class CompetitionHistoryEntry:
    """One finalized competition from a participant's point of view.

    ``net_winnings`` and ``net_bounties`` are positive when money was
    received and negative when it was paid.
    """

    competition_id: int
    competition_name: str
    tournament_name: str
    tournament_end_date: datetime
    is_public: bool
    final_position: int
    team_score_to_par: int
    net_winnings: Decimal
    net_bounties: Decimal


def annual_leaderboard(session: Session, year: int) -> list[AnnualStanding]:
    """Season ranking for ``year``, richest first (winnings plus bounties)."""
    rows = session.execute(
        select(AnnualLeaderboard, User)
        .join(User, User.id == AnnualLeaderboard.user_id)
        .where(AnnualLeaderboard.year == year)
        .order_by(AnnualLeaderboard.id)
    ).all()
    standings = [
        AnnualStanding(
            user_id=row.user_id,
            display_name=user.label,
            team_color=user.team_color,
            year=row.year,
            total_competitions=row.total_competitions,
            competitions_won=row.competitions_won,
            total_winnings=Decimal(row.total_winnings or 0),
            total_bounties=Decimal(row.total_bounties or 0),
        )
        for row, user in rows
    ]
    standings.sort(key=lambda s: s.net_total, reverse=True)
    return standings


def annual_stats(session: Session, user: User, year: int) -> Optional[AnnualLeaderboard]:
    """The user's aggregate row for ``year``, or ``None`` if they have not played."""
    return AnnualLeaderboard.get(session, user.id, year)


def competition_history(
    session: Session,
    user: User,
    *,
    is_public: Optional[bool] = None,
    limit: int = 20,
) -> list[CompetitionHistoryEntry]:
    """Finalized competitions of ``user``, most recent tournament first.

    Parameters
    ----------
    session : Session
        Active SQLAlchemy session.
    user : User
        Participant whose history to list.
    is_public : bool, optional
        Restrict to public (``True``) or private (``False``) competitions.
    limit : int, default: 20
        Maximum number of entries.
    """
    stmt = (
        select(CompetitionScore, Competition, Tournament)
        .join(Competition, Competition.id == CompetitionScore.competition_id)
        .join(Tournament, Tournament.id == Competition.tournament_id)
        .where(CompetitionScore.user_id == user.id, Tournament.status == "completed")
        .order_by(Tournament.end_date.desc(), Competition.id.desc())
        .limit(limit)
    )
    if is_public is not None:
        stmt = stmt.where(Competition.is_public.is_(is_public))

    return [
        CompetitionHistoryEntry(
            competition_id=competition.id,
            competition_name=competition.name,
            tournament_name=tournament.name,
            tournament_end_date=tournament.end_date,
            is_public=competition.is_public,
            final_position=score.final_position,
            team_score_to_par=score.team_score_to_par,
            net_winnings=Decimal(score.net_winnings),
            net_bounties=Decimal(score.net_bounties),
        )
        for score, competition, tournament in session.execute(stmt).all()
    ]
