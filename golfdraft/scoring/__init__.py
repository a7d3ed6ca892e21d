"""Score resolution and leaderboard construction."""

from .leaderboard import LeaderboardEntry, PickRecord, build_leaderboard, load_leaderboard
from .resolver import (
    GolferResult,
    ResolvedPick,
    is_effectively_withdrawn,
    missed_cut_score,
    resolve_pick,
    resolve_team,
    withdrawal_penalty,
)

__all__ = [
    "GolferResult",
    "LeaderboardEntry",
    "PickRecord",
    "ResolvedPick",
    "build_leaderboard",
    "is_effectively_withdrawn",
    "load_leaderboard",
    "missed_cut_score",
    "resolve_pick",
    "resolve_team",
    "withdrawal_penalty",
]
