from datetime import datetime, timezone
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, DateTime, String, select
from sqlalchemy.orm import Mapped, Session, mapped_column, relationship, validates

from .base import ID_TYPE, Base

if TYPE_CHECKING:
    from .competition import CompetitionParticipant
    from .standings import AnnualLeaderboard


class User(Base):
    """A person who joins competitions and drafts golfers."""

    def __init__(
        self,
        username: str,
        display_name: Optional[str] = None,
        team_color: Optional[str] = None,
        phone_number: Optional[str] = None,
        is_admin: bool = False,
        created_at: Optional[datetime] = None,
    ):
        """Create a new :class:`User` record.

        Parameters
        ----------
        username : str
            Unique handle supplied by the identity layer.
        display_name : str, optional
            Name shown on leaderboards. Falls back to ``username``.
        team_color : str, optional
            Colour used to mark the user's golfers in the field view.
        phone_number : str, optional
            Number used by the turn notification collaborator.
        is_admin : bool
            Grants access to the administrative corrections.
        created_at : datetime, optional
            Explicit creation timestamp.
        """

        self.username = username
        self.display_name = display_name
        self.team_color = team_color
        self.phone_number = phone_number
        self.is_admin = is_admin
        if created_at is not None:
            self.created_at = created_at

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    display_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    team_color: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    phone_number: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    is_admin: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    # relationships
    memberships: Mapped[list["CompetitionParticipant"]] = relationship(
        back_populates="user", cascade="all, delete-orphan"
    )
    annual_rows: Mapped[list["AnnualLeaderboard"]] = relationship(
        back_populates="user", cascade="all, delete-orphan"
    )

    @validates("username")
    def _normalize_username(self, _key: str, value: str) -> str:
        normalized = (value or "").strip()
        if not normalized:
            raise ValueError("username must not be empty")
        return normalized

    def __repr__(self) -> str:
        return (
            f"<User(id={self.id}, username='{self.username}', "
            f"display_name='{self.display_name}', is_admin={self.is_admin})>"
        )

    @property
    def label(self) -> str:
        """Name to show on leaderboards."""
        return self.display_name or self.username

    @classmethod
    def get_by_username(cls, session: Session, username: str) -> Optional["User"]:
        """Retrieve a user by their username."""

        return session.scalar(select(cls).where(cls.username == username))
