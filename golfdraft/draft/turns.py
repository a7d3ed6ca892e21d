"""Pure helpers mapping pick numbers onto snake-draft positions."""

from __future__ import annotations

from typing import Optional

DRAFT_ROUNDS = 3


def _check_count(participant_count: int) -> None:
    if participant_count < 1:
        raise ValueError("participant_count must be at least 1")


def total_picks(participant_count: int) -> int:
    """Number of picks in a complete draft for ``participant_count`` teams."""
    _check_count(participant_count)
    return DRAFT_ROUNDS * participant_count


def round_for_pick(pick_number: int, participant_count: int) -> int:
    _check_count(participant_count)
    if pick_number < 1:
        raise ValueError("pick_number must be at least 1")
    return (pick_number - 1) // participant_count + 1


def position_for_pick(pick_number: int, participant_count: int) -> int:
    """Return the draft-order position that owns ``pick_number``.

    Odd rounds run 1..N and even rounds run N..1.

    Parameters
    ----------
    pick_number : int
        One-based overall pick number.
    participant_count : int
        Number of participants in the draft order.

    Returns
    -------
    int
        Position in ``1..participant_count``.

    Raises
    ------
    ValueError
        If either argument is below 1.
    """
    draft_round = round_for_pick(pick_number, participant_count)
    index = (pick_number - 1) % participant_count
    if draft_round % 2 == 1:
        return index + 1
    return participant_count - index


def next_position(picks_made: int, participant_count: int) -> Optional[int]:
    """Position on the clock after ``picks_made`` picks, or ``None`` when the draft is over."""
    if picks_made < 0:
        raise ValueError("picks_made must not be negative")
    next_pick = picks_made + 1
    if next_pick > total_picks(participant_count):
        return None
    return position_for_pick(next_pick, participant_count)
