"""Convert loosely typed feed records into strict result values."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class FeedEntry:
    """One player's line on the feed leaderboard, with explicit nullability."""

    player_id: str
    position: Optional[int]
    total_strokes: Optional[int]
    total_to_par: Optional[int]
    rounds_to_par: tuple[int, ...]
    made_cut: Optional[bool]
    withdrew: bool


def _optional_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    return int(round(float(value)))


def _parse_position(value: Any) -> Optional[int]:
    # positions come through as 1, "1" or "T4"
    if value is None:
        return None
    if isinstance(value, (int, float)):
        return int(value)
    text = str(value).strip().upper().lstrip("T")
    return int(text) if text.isdigit() else None


def _optional_bool(value: Any) -> Optional[bool]:
    if value is None:
        return None
    return bool(value)


def normalize_feed_entry(entry: Mapping[str, Any]) -> FeedEntry:
    """Map a raw feed record onto :class:`FeedEntry`.

    ``TotalScore`` is the feed's to-par total and ``TotalStrokes`` the raw
    stroke count. Rounds without a ``ToPar`` count as even par.

    Raises
    ------
    ValueError
        If the record is not a mapping, has no ``PlayerID`` or carries a
        round that is not a mapping.
    """
    if not isinstance(entry, Mapping):
        raise ValueError(f"Feed entry is not an object: {entry!r}")
    player_id = entry.get("PlayerID")
    if player_id is None:
        raise ValueError("Feed entry has no PlayerID")

    rounds = entry.get("Rounds")
    if isinstance(rounds, list):
        if not all(isinstance(r, Mapping) for r in rounds):
            raise ValueError(f"Feed entry {player_id} has a malformed round")
        rounds_to_par = tuple(_optional_int(r.get("ToPar")) or 0 for r in rounds)
    else:
        rounds_to_par = ()

    return FeedEntry(
        player_id=str(player_id),
        position=_parse_position(entry.get("Position")),
        total_strokes=_optional_int(entry.get("TotalStrokes")),
        total_to_par=_optional_int(entry.get("TotalScore")),
        rounds_to_par=rounds_to_par,
        made_cut=_optional_bool(entry.get("MadeCut")),
        withdrew=bool(entry.get("Withdrew") or False),
    )
