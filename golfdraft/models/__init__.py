from .base import Base

# import models so Alembic/autoloaders can discover mappers
from .user import User  # noqa: F401
from .golf import Golfer, Tournament, TournamentResult  # noqa: F401
from .competition import (  # noqa: F401
    Competition,
    CompetitionParticipant,
    DraftOrderEntry,
    DraftPick,
    Alternate,
)
from .standings import (  # noqa: F401
    CompetitionScore,
    CompetitionPayment,
    CompetitionBounty,
    AnnualLeaderboard,
)

__all__ = [
    "Base",
    "User",
    "Golfer",
    "Tournament",
    "TournamentResult",
    "Competition",
    "CompetitionParticipant",
    "DraftOrderEntry",
    "DraftPick",
    "Alternate",
    "CompetitionScore",
    "CompetitionPayment",
    "CompetitionBounty",
    "AnnualLeaderboard",
]
