"""Competitions, their participants and the draft artefacts."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    func,
    select,
    text,
)
from sqlalchemy.orm import Mapped, Session, mapped_column, relationship

from .base import ID_TYPE, Base

if TYPE_CHECKING:
    from .golf import Golfer, Tournament
    from .standings import CompetitionBounty, CompetitionPayment, CompetitionScore
    from .user import User


DRAFT_STATUSES = ("not_started", "in_progress", "completed")


class Competition(Base):
    """One drafting and scoring unit tied to exactly one tournament."""

    __tablename__ = "competitions"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    """Primary key."""

    tournament_id: Mapped[int] = mapped_column(
        ID_TYPE, ForeignKey("tournaments.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    created_by_id: Mapped[int] = mapped_column(
        ID_TYPE, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    is_public: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    """Public competitions are created lazily, one per tournament."""

    invite_code: Mapped[Optional[str]] = mapped_column(String(16), unique=True, nullable=True)
    """Share-link token for private competitions."""

    invite_expires_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    draft_scheduled_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    """When the draft may start automatically."""

    draft_status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="not_started", index=True
    )
    """``"not_started"`` → ``"in_progress"`` → ``"completed"``; only an admin reset goes back."""

    draft_started_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    draft_completed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    finalized_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    """Claimed atomically by the finalizer; cleared by a finalization reset."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    tournament: Mapped["Tournament"] = relationship(back_populates="competitions")
    created_by: Mapped["User"] = relationship()
    participants: Mapped[list["CompetitionParticipant"]] = relationship(
        back_populates="competition",
        cascade="all, delete-orphan",
        order_by="CompetitionParticipant.id",
    )
    draft_order: Mapped[list["DraftOrderEntry"]] = relationship(
        back_populates="competition",
        cascade="all, delete-orphan",
        order_by="DraftOrderEntry.position",
    )
    picks: Mapped[list["DraftPick"]] = relationship(
        back_populates="competition",
        cascade="all, delete-orphan",
        order_by="DraftPick.pick_number",
    )
    alternates: Mapped[list["Alternate"]] = relationship(
        back_populates="competition", cascade="all, delete-orphan"
    )
    scores: Mapped[list["CompetitionScore"]] = relationship(
        back_populates="competition",
        cascade="all, delete-orphan",
        order_by="CompetitionScore.final_position",
    )
    payments: Mapped[list["CompetitionPayment"]] = relationship(
        back_populates="competition", cascade="all, delete-orphan"
    )
    bounty: Mapped[Optional["CompetitionBounty"]] = relationship(
        back_populates="competition", cascade="all, delete-orphan", uselist=False
    )

    __table_args__ = (
        CheckConstraint(
            "draft_status IN ('not_started','in_progress','completed')",
            name="draft_status_enum",
        ),
        Index(
            "uq_competitions_one_public_per_tournament",
            "tournament_id",
            unique=True,
            sqlite_where=text("is_public = 1"),
            postgresql_where=text("is_public = true"),
        ),
    )

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return (
            f"<Competition(id={self.id}, name='{self.name}', tournament_id={self.tournament_id}, "
            f"draft_status='{self.draft_status}', is_public={self.is_public})>"
        )

    @classmethod
    def get_by_invite_code(cls, session: Session, invite_code: str) -> Optional["Competition"]:
        return session.scalar(select(cls).where(cls.invite_code == invite_code))

    @classmethod
    def public_for_tournament(
        cls, session: Session, tournament_id: int
    ) -> Optional["Competition"]:
        return session.scalar(
            select(cls).where(cls.tournament_id == tournament_id, cls.is_public.is_(True))
        )

    def participant_count(self, session: Session) -> int:
        return int(
            session.scalar(
                select(func.count(CompetitionParticipant.id)).where(
                    CompetitionParticipant.competition_id == self.id
                )
            )
            or 0
        )

    def is_participant(self, session: Session, user_id: int) -> bool:
        return (
            session.scalar(
                select(CompetitionParticipant.id).where(
                    CompetitionParticipant.competition_id == self.id,
                    CompetitionParticipant.user_id == user_id,
                )
            )
            is not None
        )


class CompetitionParticipant(Base):
    """A user enrolled in a competition."""

    __tablename__ = "competition_participants"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    competition_id: Mapped[int] = mapped_column(
        ID_TYPE, ForeignKey("competitions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[int] = mapped_column(
        ID_TYPE, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    competition: Mapped["Competition"] = relationship(back_populates="participants")
    user: Mapped["User"] = relationship(back_populates="memberships")

    __table_args__ = (UniqueConstraint("competition_id", "user_id"),)


class DraftOrderEntry(Base):
    """Position 1..N of a participant in the competition's snake draft."""

    __tablename__ = "draft_order"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    competition_id: Mapped[int] = mapped_column(
        ID_TYPE, ForeignKey("competitions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[int] = mapped_column(
        ID_TYPE, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    competition: Mapped["Competition"] = relationship(back_populates="draft_order")
    user: Mapped["User"] = relationship()

    __table_args__ = (
        UniqueConstraint("competition_id", "user_id"),
        UniqueConstraint("competition_id", "position"),
        CheckConstraint("position >= 1", name="position_positive"),
    )

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return f"<DraftOrderEntry(competition_id={self.competition_id}, user_id={self.user_id}, position={self.position})>"


class DraftPick(Base):
    """A golfer drafted by a participant.

    ``pick_number`` is contiguous from 1 within a competition and
    ``draft_round`` equals ``ceil(pick_number / participant_count)``.
    """

    __tablename__ = "draft_picks"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    competition_id: Mapped[int] = mapped_column(
        ID_TYPE, ForeignKey("competitions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[int] = mapped_column(
        ID_TYPE, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    golfer_id: Mapped[int] = mapped_column(
        ID_TYPE, ForeignKey("golfers.id", ondelete="CASCADE"), nullable=False
    )
    draft_round: Mapped[int] = mapped_column(Integer, nullable=False)
    pick_number: Mapped[int] = mapped_column(Integer, nullable=False)
    picked_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    competition: Mapped["Competition"] = relationship(back_populates="picks")
    user: Mapped["User"] = relationship()
    golfer: Mapped["Golfer"] = relationship()

    __table_args__ = (
        UniqueConstraint("competition_id", "golfer_id"),
        UniqueConstraint("competition_id", "pick_number"),
        CheckConstraint("draft_round IN (1, 2, 3)", name="draft_round_range"),
    )

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return (
            f"<DraftPick(competition_id={self.competition_id}, pick_number={self.pick_number}, "
            f"round={self.draft_round}, user_id={self.user_id}, golfer_id={self.golfer_id})>"
        )

    @classmethod
    def for_golfer(
        cls, session: Session, competition_id: int, golfer_id: int
    ) -> Optional["DraftPick"]:
        return session.scalar(
            select(cls).where(cls.competition_id == competition_id, cls.golfer_id == golfer_id)
        )


class Alternate(Base):
    """Backup golfer nominated by a participant after the draft."""

    __tablename__ = "alternates"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    competition_id: Mapped[int] = mapped_column(
        ID_TYPE, ForeignKey("competitions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[int] = mapped_column(
        ID_TYPE, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    golfer_id: Mapped[int] = mapped_column(
        ID_TYPE, ForeignKey("golfers.id", ondelete="CASCADE"), nullable=False
    )
    selected_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    competition: Mapped["Competition"] = relationship(back_populates="alternates")
    user: Mapped["User"] = relationship()
    golfer: Mapped["Golfer"] = relationship()

    __table_args__ = (UniqueConstraint("competition_id", "user_id"),)

    @classmethod
    def for_user(
        cls, session: Session, competition_id: int, user_id: int
    ) -> Optional["Alternate"]:
        return session.scalar(
            select(cls).where(cls.competition_id == competition_id, cls.user_id == user_id)
        )


__all__ = [
    "Competition",
    "CompetitionParticipant",
    "DraftOrderEntry",
    "DraftPick",
    "Alternate",
    "DRAFT_STATUSES",
]
