"""Tiered bounty paid when a drafted golfer wins the tournament outright.

A golfer drafted in round ``n`` who wins earns their drafter ``n`` bounty
tiers. The bottom ``n`` teams of the final standings each pay one tier,
worst team first. A tier whose payer is the drafter is skipped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..models import Competition, DraftPick
from ..models.standings import PAYMENT_BOUNTY
from ..scoring.leaderboard import LeaderboardEntry
from ..scoring.resolver import GolferResult
from .payments import Payment

logger = logging.getLogger(__name__)

BOUNTY_TIER_AMOUNT = Decimal("10.00")


@dataclass(frozen=True)
class DraftedGolfer:
    user_id: int
    golfer_id: int
    draft_round: int


@dataclass
class BountyResult:
    """Outcome of the bounty rule for one competition.

    Attributes
    ----------
    user_id : int
        Participant who drafted the tournament winner.
    golfer_id : int
        The tournament winner.
    pick_round : int
        Round in which the winner was drafted; also the number of tiers.
    total_bounty : Decimal
        ``pick_round`` times the tier amount.
    payments : list[Payment]
        Tier payments actually owed. Can be fewer than ``pick_round`` when a
        tier falls on the drafter or the field is small.
    """

    user_id: int
    golfer_id: int
    pick_round: int
    total_bounty: Decimal
    payments: list[Payment] = field(default_factory=list)

    @property
    def collected(self) -> Decimal:
        return sum((p.amount for p in self.payments), Decimal("0.00"))


def calculate_bounty(
    entries: Sequence[LeaderboardEntry],
    drafted: Iterable[DraftedGolfer],
    results: Iterable[GolferResult],
) -> Optional[BountyResult]:
    """Apply the bounty rule.

    Returns ``None`` when the standings are empty, when nobody holds
    position 1 on its own, or when the outright winner was not drafted.
    """
    if not entries:
        return None

    leaders = [r.golfer_id for r in results if r.position == 1]
    if len(leaders) != 1:
        if len(leaders) > 1:
            logger.debug(f"Tournament winner is tied ({len(leaders)} golfers); no bounty")
        return None
    winner_golfer_id = leaders[0]

    pick = next((d for d in drafted if d.golfer_id == winner_golfer_id), None)
    if pick is None:
        return None

    tiers = pick.draft_round
    worst_first = sorted(entries, key=lambda e: e.final_position, reverse=True)
    payments: list[Payment] = []
    for payer in worst_first[:tiers]:
        if payer.user_id == pick.user_id:
            continue
        payments.append(
            Payment(
                from_user_id=payer.user_id,
                to_user_id=pick.user_id,
                amount=BOUNTY_TIER_AMOUNT,
                payment_type=PAYMENT_BOUNTY,
            )
        )

    return BountyResult(
        user_id=pick.user_id,
        golfer_id=winner_golfer_id,
        pick_round=tiers,
        total_bounty=BOUNTY_TIER_AMOUNT * tiers,
        payments=payments,
    )


def load_bounty(
    session: Session,
    competition: Competition,
    entries: Sequence[LeaderboardEntry],
    results: Iterable[GolferResult],
) -> Optional[BountyResult]:
    """Evaluate the bounty rule for ``competition`` once its tournament is completed."""
    if not competition.tournament.is_completed:
        return None
    drafted = [
        DraftedGolfer(user_id=p.user_id, golfer_id=p.golfer_id, draft_round=p.draft_round)
        for p in session.scalars(
            select(DraftPick).where(DraftPick.competition_id == competition.id)
        ).all()
    ]
    return calculate_bounty(entries, drafted, results)
