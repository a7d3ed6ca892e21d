"""Stroke-differential payments between winners and losers."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Sequence

from ..db.utils import to_money
from ..models.standings import PAYMENT_BOUNTY, PAYMENT_MAIN
from ..scoring.leaderboard import LeaderboardEntry

ZERO = Decimal("0.00")


@dataclass(frozen=True)
class Payment:
    """Money owed by ``from_user_id`` to ``to_user_id``."""

    from_user_id: int
    to_user_id: int
    amount: Decimal
    payment_type: str = PAYMENT_MAIN


def calculate_main_payments(entries: Sequence[LeaderboardEntry]) -> list[Payment]:
    """Compute who owes whom for the main competition.

    Every participant at position 1 is a winner and shares the winning
    score. Each loser pays one dollar per stroke of differential, split
    evenly across winners and rounded to cents.

    Parameters
    ----------
    entries : Sequence[LeaderboardEntry]
        Ranked leaderboard.

    Returns
    -------
    list[Payment]
        ``"main"`` payments in leaderboard order. Losers level with the
        winning score owe nothing and get no row.
    """
    winners = [e for e in entries if e.final_position == 1]
    if not winners:
        return []
    winning_score = winners[0].team_score_to_par
    winner_ids = {w.user_id for w in winners}

    payments: list[Payment] = []
    for loser in entries:
        if loser.user_id in winner_ids:
            continue
        diff = loser.team_score_to_par - winning_score
        if diff <= 0:
            continue
        share = to_money(Decimal(diff) / Decimal(len(winners)))
        for winner in winners:
            payments.append(
                Payment(
                    from_user_id=loser.user_id,
                    to_user_id=winner.user_id,
                    amount=share,
                    payment_type=PAYMENT_MAIN,
                )
            )
    return payments


def net_by_user(payments: Iterable[Payment], payment_type: str) -> dict[int, Decimal]:
    """Received minus paid per user for one payment type."""
    nets: dict[int, Decimal] = defaultdict(lambda: ZERO)
    for payment in payments:
        if payment.payment_type != payment_type:
            continue
        nets[payment.to_user_id] += payment.amount
        nets[payment.from_user_id] -= payment.amount
    return dict(nets)


def net_main(payments: Iterable[Payment]) -> dict[int, Decimal]:
    return net_by_user(payments, PAYMENT_MAIN)


def net_bounty(payments: Iterable[Payment]) -> dict[int, Decimal]:
    return net_by_user(payments, PAYMENT_BOUNTY)
