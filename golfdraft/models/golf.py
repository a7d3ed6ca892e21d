"""Golfers, tournaments and the per-golfer results supplied by the feed."""

from __future__ import annotations

from datetime import datetime, timezone
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

from .base import ID_TYPE, Base

if TYPE_CHECKING:
    from .competition import Competition


TOURNAMENT_STATUSES = ("upcoming", "active", "completed")


class Golfer(Base):
    """A real-world professional golfer that can be drafted."""

    __tablename__ = "golfers"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    """Primary key."""

    external_id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    """Identifier used by the results feed (``PlayerID``)."""

    display_name: Mapped[str] = mapped_column(String(100), nullable=False)
    country: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    world_ranking: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    results: Mapped[list["TournamentResult"]] = relationship(back_populates="golfer")

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return f"<Golfer(id={self.id}, external_id={self.external_id}, name={self.display_name})>"

    @classmethod
    def get_by_external_id(cls, session: Session, external_id: str) -> Optional["Golfer"]:
        """Return the golfer matching the feed identifier if it exists."""

        return session.scalar(select(cls).where(cls.external_id == str(external_id)))


class Tournament(Base):
    """A real-world tournament that competitions are drafted against."""

    __tablename__ = "tournaments"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    """Primary key."""

    external_id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    """Identifier used by the results feed (``TournamentID``)."""

    name: Mapped[str] = mapped_column(String(200), nullable=False)

    start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    """First tee time. Picks and alternates close at this instant."""

    end_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    """Final day. Its calendar year decides which season a competition counts towards."""

    status: Mapped[str] = mapped_column(String(20), nullable=False, default="upcoming")
    """``"upcoming"``, ``"active"`` or ``"completed"``."""

    results: Mapped[list["TournamentResult"]] = relationship(
        back_populates="tournament", cascade="all, delete-orphan"
    )
    competitions: Mapped[list["Competition"]] = relationship(back_populates="tournament")

    __table_args__ = (
        CheckConstraint(
            "status IN ('upcoming','active','completed')", name="status_enum"
        ),
        Index("ix_tournaments_dates", "start_date", "end_date"),
    )

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return f"<Tournament(id={self.id}, name={self.name}, status={self.status})>"

    @property
    def is_completed(self) -> bool:
        return self.status == "completed"

    @property
    def season_year(self) -> int:
        return self.end_date.year


class TournamentResult(Base):
    """Latest known outcome of one golfer in one tournament.

    Rows are written by the feed sync or by an admin correction. The scoring
    code never reads this row directly; it is converted into a
    :class:`~golfdraft.scoring.resolver.GolferResult` first.
    """

    __tablename__ = "tournament_results"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)

    tournament_id: Mapped[int] = mapped_column(
        ID_TYPE, ForeignKey("tournaments.id", ondelete="CASCADE"), nullable=False, index=True
    )
    golfer_id: Mapped[int] = mapped_column(
        ID_TYPE, ForeignKey("golfers.id", ondelete="CASCADE"), nullable=False, index=True
    )

    position: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    """Leaderboard position in the real tournament. ``1`` is the winner."""

    total_strokes: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    total_to_par: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    """``None`` when the golfer never started or withdrew."""

    rounds_to_par: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    """Per-round to-par values in round order."""

    made_cut: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True)
    """``None`` until the cut has been made."""

    withdrew: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    manual_override: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    """Set by admin edits so that the feed sync leaves the row alone."""

    last_updated: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    tournament: Mapped["Tournament"] = relationship(back_populates="results")
    golfer: Mapped["Golfer"] = relationship(back_populates="results")

    __table_args__ = (
        UniqueConstraint("tournament_id", "golfer_id"),
        Index("ix_tournament_results_position", "tournament_id", "position"),
    )

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return (
            "<TournamentResult(tournament_id={t}, golfer_id={g}, position={p}, "
            "to_par={tp}, made_cut={mc}, withdrew={wd})>".format(
                t=self.tournament_id,
                g=self.golfer_id,
                p=self.position,
                tp=self.total_to_par,
                mc=self.made_cut,
                wd=self.withdrew,
            )
        )

    @classmethod
    def get(
        cls, session: Session, tournament_id: int, golfer_id: int
    ) -> Optional["TournamentResult"]:
        return session.scalar(
            select(cls).where(
                cls.tournament_id == tournament_id, cls.golfer_id == golfer_id
            )
        )

    @classmethod
    def for_tournament(cls, session: Session, tournament_id: int) -> list["TournamentResult"]:
        return list(
            session.scalars(
                select(cls).where(cls.tournament_id == tournament_id).order_by(cls.id)
            ).all()
        )


__all__ = ["Golfer", "Tournament", "TournamentResult", "TOURNAMENT_STATUSES"]
