"""Administrative resets expressed as ordered, individually idempotent steps.

Every step inspects current state and only changes what is still there, so
a reset interrupted halfway can simply be run again.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Callable, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..db.utils import to_money
from ..models import (
    Alternate,
    AnnualLeaderboard,
    Competition,
    CompetitionBounty,
    CompetitionPayment,
    CompetitionScore,
    DraftOrderEntry,
    DraftPick,
)

logger = logging.getLogger(__name__)

StepAction = Callable[[Session, Competition], int]


@dataclass(frozen=True)
class SagaStep:
    """A named unit of a reset. ``action`` returns how many rows it changed."""

    name: str
    action: StepAction


@dataclass
class SagaReport:
    saga: str
    competition_id: int
    changes: dict[str, int] = field(default_factory=dict)

    @property
    def changed(self) -> bool:
        return any(self.changes.values())


class ResetSaga:
    """Run a fixed sequence of :class:`SagaStep` objects against one competition."""

    def __init__(self, name: str, steps: Sequence[SagaStep]) -> None:
        self.name = name
        self.steps = tuple(steps)

    def run(self, session: Session, competition: Competition) -> SagaReport:
        if competition.id is None:
            raise ValueError("Competition must be persisted before it can be reset")
        report = SagaReport(saga=self.name, competition_id=competition.id)
        for step in self.steps:
            changed = step.action(session, competition)
            session.flush()
            report.changes[step.name] = changed
            logger.debug(f"{self.name}[{competition.id}] {step.name}: {changed} change(s)")
        return report


def _delete_all(session: Session, rows) -> int:
    count = 0
    for row in rows:
        session.delete(row)
        count += 1
    return count


def reverse_annual_deltas(session: Session, competition: Competition) -> int:
    """Subtract the amounts each frozen score added to its annual row.

    Scores already reversed are skipped. A row left with no competitions is
    deleted; ``competitions_won`` never goes below zero.
    """
    scores = session.scalars(
        select(CompetitionScore).where(
            CompetitionScore.competition_id == competition.id,
            CompetitionScore.aggregate_applied.is_(True),
        )
    ).all()
    for score in scores:
        row = AnnualLeaderboard.get(session, score.user_id, score.season_year)
        if row is not None:
            remaining = row.total_competitions - 1
            if remaining <= 0:
                session.delete(row)
            else:
                row.total_competitions = remaining
                if score.won:
                    row.competitions_won = max(0, row.competitions_won - 1)
                row.total_winnings = to_money(
                    Decimal(row.total_winnings) - Decimal(score.net_winnings)
                )
                row.total_bounties = to_money(
                    Decimal(row.total_bounties) - Decimal(score.net_bounties)
                )
        else:
            logger.warning(
                f"No annual row for user {score.user_id} in {score.season_year}; "
                f"nothing to reverse for competition {competition.id}"
            )
        score.aggregate_applied = False
        # flush per score so a deleted row is not looked up again
        session.flush()
    return len(scores)


def delete_bounty(session: Session, competition: Competition) -> int:
    return _delete_all(
        session,
        session.scalars(
            select(CompetitionBounty).where(CompetitionBounty.competition_id == competition.id)
        ).all(),
    )


def delete_payments(session: Session, competition: Competition) -> int:
    return _delete_all(
        session,
        session.scalars(
            select(CompetitionPayment).where(CompetitionPayment.competition_id == competition.id)
        ).all(),
    )


def delete_scores(session: Session, competition: Competition) -> int:
    return _delete_all(
        session,
        session.scalars(
            select(CompetitionScore).where(CompetitionScore.competition_id == competition.id)
        ).all(),
    )


def clear_finalized_at(session: Session, competition: Competition) -> int:
    if competition.finalized_at is None:
        return 0
    competition.finalized_at = None
    return 1


def delete_alternates(session: Session, competition: Competition) -> int:
    return _delete_all(
        session,
        session.scalars(
            select(Alternate).where(Alternate.competition_id == competition.id)
        ).all(),
    )


def delete_picks(session: Session, competition: Competition) -> int:
    return _delete_all(
        session,
        session.scalars(
            select(DraftPick).where(DraftPick.competition_id == competition.id)
        ).all(),
    )


def delete_draft_order(session: Session, competition: Competition) -> int:
    return _delete_all(
        session,
        session.scalars(
            select(DraftOrderEntry).where(DraftOrderEntry.competition_id == competition.id)
        ).all(),
    )


def revert_draft_status(session: Session, competition: Competition) -> int:
    if (
        competition.draft_status == "not_started"
        and competition.draft_started_at is None
        and competition.draft_completed_at is None
    ):
        return 0
    competition.draft_status = "not_started"
    competition.draft_started_at = None
    competition.draft_completed_at = None
    return 1


RESET_FINALIZATION = ResetSaga(
    "reset_finalization",
    [
        SagaStep("reverse_annual_deltas", reverse_annual_deltas),
        SagaStep("delete_bounty", delete_bounty),
        SagaStep("delete_payments", delete_payments),
        SagaStep("delete_scores", delete_scores),
        SagaStep("clear_finalized_at", clear_finalized_at),
    ],
)


def _reset_finalization_step(session: Session, competition: Competition) -> int:
    report = RESET_FINALIZATION.run(session, competition)
    return sum(report.changes.values())


RESET_DRAFT = ResetSaga(
    "reset_draft",
    [
        SagaStep("reset_finalization", _reset_finalization_step),
        SagaStep("delete_alternates", delete_alternates),
        SagaStep("delete_picks", delete_picks),
        SagaStep("delete_draft_order", delete_draft_order),
        SagaStep("revert_draft_status", revert_draft_status),
    ],
)

_COLLECTIONS = ["scores", "payments", "bounty", "alternates", "picks", "draft_order"]


def run_reset(session: Session, saga: ResetSaga, competition: Competition) -> SagaReport:
    """Run ``saga`` and drop stale relationship collections from ``competition``."""
    report = saga.run(session, competition)
    session.expire(competition, _COLLECTIONS)
    if report.changed:
        logger.info(f"{saga.name} changed competition {competition.id}: {report.changes}")
    return report
