"""Frozen results of finalized competitions and the season aggregate."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    select,
)
from sqlalchemy.orm import Mapped, Session, mapped_column, relationship

from .base import ID_TYPE, MONEY, Base

if TYPE_CHECKING:
    from .competition import Competition
    from .golf import Golfer
    from .user import User


PAYMENT_MAIN = "main"
PAYMENT_BOUNTY = "bounty"
PAYMENT_TYPES = (PAYMENT_MAIN, PAYMENT_BOUNTY)


class CompetitionScore(Base):
    """A participant's frozen leaderboard entry.

    Besides the standings, the row remembers the exact amounts that were
    folded into :class:`AnnualLeaderboard` so that a reset can subtract them
    again even if the underlying results changed in the meantime.
    """

    __tablename__ = "competition_scores"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    competition_id: Mapped[int] = mapped_column(
        ID_TYPE, ForeignKey("competitions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[int] = mapped_column(
        ID_TYPE, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    team_score_to_par: Mapped[int] = mapped_column(Integer, nullable=False)
    team_score_strokes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    final_position: Mapped[int] = mapped_column(Integer, nullable=False)
    score_breakdown: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    """Per-golfer contributions, as shown on the leaderboard."""

    season_year: Mapped[int] = mapped_column(Integer, nullable=False)
    """Year of the :class:`AnnualLeaderboard` row the deltas were applied to."""

    won: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    net_winnings: Mapped[Decimal] = mapped_column(MONEY, nullable=False, default=Decimal("0"))
    net_bounties: Mapped[Decimal] = mapped_column(MONEY, nullable=False, default=Decimal("0"))

    aggregate_applied: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    """``True`` while the deltas above are counted in the annual aggregate."""

    calculated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    competition: Mapped["Competition"] = relationship(back_populates="scores")
    user: Mapped["User"] = relationship()

    __table_args__ = (
        UniqueConstraint("competition_id", "user_id"),
        Index("ix_competition_scores_position", "competition_id", "final_position"),
    )

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return (
            f"<CompetitionScore(competition_id={self.competition_id}, user_id={self.user_id}, "
            f"to_par={self.team_score_to_par}, position={self.final_position})>"
        )

    @classmethod
    def exists_for(cls, session: Session, competition_id: int) -> bool:
        return (
            session.scalar(
                select(cls.id).where(cls.competition_id == competition_id).limit(1)
            )
            is not None
        )

    @classmethod
    def for_competition(cls, session: Session, competition_id: int) -> list["CompetitionScore"]:
        return list(
            session.scalars(
                select(cls)
                .where(cls.competition_id == competition_id)
                .order_by(cls.final_position, cls.id)
            ).all()
        )


class CompetitionPayment(Base):
    """Amount one participant owes another for a competition."""

    __tablename__ = "competition_payments"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    competition_id: Mapped[int] = mapped_column(
        ID_TYPE, ForeignKey("competitions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    from_user_id: Mapped[int] = mapped_column(
        ID_TYPE, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    to_user_id: Mapped[int] = mapped_column(
        ID_TYPE, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    amount: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    payment_type: Mapped[str] = mapped_column(String(20), nullable=False)
    """``"main"`` for the stroke differential, ``"bounty"`` for tournament-winner bounties."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    competition: Mapped["Competition"] = relationship(back_populates="payments")

    __table_args__ = (
        UniqueConstraint("competition_id", "from_user_id", "to_user_id", "payment_type"),
        CheckConstraint("payment_type IN ('main','bounty')", name="payment_type_enum"),
        CheckConstraint("amount > 0", name="amount_positive"),
    )

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return (
            f"<CompetitionPayment(competition_id={self.competition_id}, "
            f"{self.from_user_id}->{self.to_user_id}, amount={self.amount}, type={self.payment_type})>"
        )


class CompetitionBounty(Base):
    """Record of a drafted golfer winning the real tournament outright."""

    __tablename__ = "competition_bounties"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    competition_id: Mapped[int] = mapped_column(
        ID_TYPE,
        ForeignKey("competitions.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    user_id: Mapped[int] = mapped_column(
        ID_TYPE, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    golfer_id: Mapped[int] = mapped_column(
        ID_TYPE, ForeignKey("golfers.id", ondelete="CASCADE"), nullable=False
    )
    pick_round: Mapped[int] = mapped_column(Integer, nullable=False)
    bounty_amount: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    """Total actually collected by the drafting participant."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    competition: Mapped["Competition"] = relationship(back_populates="bounty")
    user: Mapped["User"] = relationship()
    golfer: Mapped["Golfer"] = relationship()

    __table_args__ = (
        CheckConstraint("pick_round IN (1, 2, 3)", name="pick_round_range"),
    )


class AnnualLeaderboard(Base):
    """Running season totals for one participant."""

    __tablename__ = "annual_leaderboard"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        ID_TYPE, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    total_competitions: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    competitions_won: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_winnings: Mapped[Decimal] = mapped_column(MONEY, nullable=False, default=Decimal("0"))
    """Net main-competition payments (received minus paid)."""

    total_bounties: Mapped[Decimal] = mapped_column(MONEY, nullable=False, default=Decimal("0"))
    """Net bounty payments (received minus paid)."""

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    user: Mapped["User"] = relationship(back_populates="annual_rows")

    __table_args__ = (
        UniqueConstraint("user_id", "year"),
        Index("ix_annual_leaderboard_year", "year"),
    )

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return (
            f"<AnnualLeaderboard(user_id={self.user_id}, year={self.year}, "
            f"competitions={self.total_competitions}, won={self.competitions_won}, "
            f"winnings={self.total_winnings}, bounties={self.total_bounties})>"
        )

    @classmethod
    def get(cls, session: Session, user_id: int, year: int) -> Optional["AnnualLeaderboard"]:
        return session.scalar(select(cls).where(cls.user_id == user_id, cls.year == year))

    @property
    def net_total(self) -> Decimal:
        return (self.total_winnings or Decimal("0")) + (self.total_bounties or Decimal("0"))


__all__ = [
    "CompetitionScore",
    "CompetitionPayment",
    "CompetitionBounty",
    "AnnualLeaderboard",
    "PAYMENT_MAIN",
    "PAYMENT_BOUNTY",
    "PAYMENT_TYPES",
]
