"""Freeze a completed competition and fold it into the season aggregate."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.attributes import set_committed_value

from ..db.utils import to_money, utcnow
from ..models import (
    AnnualLeaderboard,
    Competition,
    CompetitionBounty,
    CompetitionPayment,
    CompetitionScore,
    TournamentResult,
)
from ..payouts.bounty import BountyResult, load_bounty
from ..payouts.payments import Payment, calculate_main_payments, net_bounty, net_main
from ..scoring.leaderboard import LeaderboardEntry, load_leaderboard
from ..scoring.resolver import GolferResult

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")


@dataclass
class FinalizationPlan:
    """Everything the finalizer is about to persist for one competition.

    Attributes
    ----------
    entries : list[LeaderboardEntry]
        Ranked standings.
    payments : list[Payment]
        Main and bounty payments together.
    bounty : Optional[BountyResult]
        Bounty outcome, if a drafted golfer won outright.
    season_year : int
        Year of the annual aggregate the deltas belong to.
    """

    entries: list[LeaderboardEntry]
    payments: list[Payment] = field(default_factory=list)
    bounty: Optional[BountyResult] = None
    season_year: int = 0


def apply_annual_delta(
    session: Session,
    *,
    user_id: int,
    year: int,
    won: bool,
    winnings: Decimal,
    bounties: Decimal,
) -> AnnualLeaderboard:
    """Add one finalized competition to a participant's season totals."""
    row = AnnualLeaderboard.get(session, user_id, year)
    if row is None:
        row = AnnualLeaderboard(
            user_id=user_id,
            year=year,
            total_competitions=0,
            competitions_won=0,
            total_winnings=ZERO,
            total_bounties=ZERO,
        )
        session.add(row)
    row.total_competitions += 1
    if won:
        row.competitions_won += 1
    row.total_winnings = to_money(Decimal(row.total_winnings) + winnings)
    row.total_bounties = to_money(Decimal(row.total_bounties) + bounties)
    session.flush()
    return row


class FinalizationEngine:
    """Persist frozen standings, payments and bounty exactly once per competition."""

    def __init__(self, session: Session) -> None:
        """Create a finalization engine bound to a SQLAlchemy session.

        Parameters
        ----------
        session : Session
            Active SQLAlchemy session used for lookups and persistence. The
            engine flushes but never commits.
        """

        self._session = session

    def plan(self, competition: Competition) -> Optional[FinalizationPlan]:
        """Compute what finalization would persist, without writing anything.

        Returns ``None`` while the tournament is not completed or while no
        standings can be built.
        """
        if competition.id is None:
            raise ValueError("Competition must be persisted before finalization")
        tournament = competition.tournament
        if not tournament.is_completed:
            return None

        entries = load_leaderboard(self._session, competition)
        if not entries:
            return None

        results = [
            GolferResult.from_row(row)
            for row in TournamentResult.for_tournament(self._session, tournament.id)
        ]
        bounty = load_bounty(self._session, competition, entries, results)
        payments = calculate_main_payments(entries)
        if bounty is not None:
            payments.extend(bounty.payments)
        return FinalizationPlan(
            entries=entries,
            payments=payments,
            bounty=bounty,
            season_year=tournament.season_year,
        )

    def finalize(self, competition: Competition, *, now: Optional[datetime] = None) -> bool:
        """Finalize ``competition`` if it is due.

        Parameters
        ----------
        competition : Competition
            Persisted competition to finalize.
        now : datetime, optional
            Timestamp recorded in ``finalized_at``. Defaults to the current time.

        Returns
        -------
        bool
            ``True`` when this call persisted the results; ``False`` when the
            competition was not ready, was already finalized, lost the claim
            to a concurrent caller, or the write failed.

        Notes
        -----
        The competition is claimed with a conditional update on
        ``finalized_at`` and everything is written inside one savepoint, so a
        failure leaves nothing behind and the next call simply tries again.
        Database errors are logged, never raised.
        """
        if competition.id is None:
            raise ValueError("Competition must be persisted before finalization")

        now = now or utcnow()
        try:
            if CompetitionScore.exists_for(self._session, competition.id):
                return False
            plan = self.plan(competition)
            if plan is None:
                return False

            with self._session.begin_nested():
                if not self._claim(competition, now):
                    logger.debug(f"Competition {competition.id} already claimed for finalization")
                    return False
                self._persist(competition, plan, now)
        except SQLAlchemyError:
            logger.exception(f"Failed to finalize competition {competition.id}")
            self._session.expire(competition, ["finalized_at"])
            return False

        logger.info(
            f"Finalized competition {competition.id}: {len(plan.entries)} scores, "
            f"{len(plan.payments)} payments, bounty={'yes' if plan.bounty else 'no'}"
        )
        return True

    def _claim(self, competition: Competition, now: datetime) -> bool:
        result = self._session.execute(
            update(Competition)
            .where(Competition.id == competition.id, Competition.finalized_at.is_(None))
            .values(finalized_at=now)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            return False
        set_committed_value(competition, "finalized_at", now)
        return True

    def _persist(self, competition: Competition, plan: FinalizationPlan, now: datetime) -> None:
        session = self._session

        for payment in plan.payments:
            session.add(
                CompetitionPayment(
                    competition_id=competition.id,
                    from_user_id=payment.from_user_id,
                    to_user_id=payment.to_user_id,
                    amount=payment.amount,
                    payment_type=payment.payment_type,
                    created_at=now,
                )
            )

        if plan.bounty is not None:
            session.add(
                CompetitionBounty(
                    competition_id=competition.id,
                    user_id=plan.bounty.user_id,
                    golfer_id=plan.bounty.golfer_id,
                    pick_round=plan.bounty.pick_round,
                    bounty_amount=plan.bounty.collected,
                    created_at=now,
                )
            )

        mains = net_main(plan.payments)
        bounties = net_bounty(plan.payments)
        for entry in plan.entries:
            won = entry.final_position == 1
            winnings = to_money(mains.get(entry.user_id, ZERO))
            bounty_net = to_money(bounties.get(entry.user_id, ZERO))
            session.add(
                CompetitionScore(
                    competition_id=competition.id,
                    user_id=entry.user_id,
                    team_score_to_par=entry.team_score_to_par,
                    team_score_strokes=entry.team_score_strokes,
                    final_position=entry.final_position,
                    score_breakdown=entry.breakdown_dicts(),
                    season_year=plan.season_year,
                    won=won,
                    net_winnings=winnings,
                    net_bounties=bounty_net,
                    aggregate_applied=True,
                    calculated_at=now,
                )
            )
            apply_annual_delta(
                session,
                user_id=entry.user_id,
                year=plan.season_year,
                won=won,
                winnings=winnings,
                bounties=bounty_net,
            )
        session.flush()
