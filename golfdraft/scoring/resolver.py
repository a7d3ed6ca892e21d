"""Resolve each drafted golfer's raw tournament result into a to-par contribution."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping, Optional, Sequence

from ..models import TournamentResult


@dataclass(frozen=True)
class GolferResult:
    """Normalized outcome of one golfer in one tournament.

    Attributes
    ----------
    golfer_id : int
        Primary key of the :class:`~golfdraft.models.Golfer`.
    to_par : Optional[int]
        Total score relative to par; ``None`` when the golfer never posted one.
    strokes : Optional[int]
        Total strokes, used for display only.
    made_cut : Optional[bool]
        ``False`` once eliminated at the cut, ``None`` while undetermined.
    withdrew : bool
        Explicit withdrawal flag from the feed.
    rounds_to_par : tuple[Optional[int], ...]
        Per-round to-par values in round order.
    position : Optional[int]
        Position on the real tournament leaderboard.
    """

    golfer_id: int
    to_par: Optional[int] = None
    strokes: Optional[int] = None
    made_cut: Optional[bool] = None
    withdrew: bool = False
    rounds_to_par: tuple[Optional[int], ...] = ()
    position: Optional[int] = None

    @classmethod
    def from_row(cls, row: TournamentResult) -> "GolferResult":
        rounds = tuple(
            None if value is None else int(value) for value in (row.rounds_to_par or [])
        )
        return cls(
            golfer_id=row.golfer_id,
            to_par=row.total_to_par,
            strokes=row.total_strokes,
            made_cut=row.made_cut,
            withdrew=bool(row.withdrew),
            rounds_to_par=rounds,
            position=row.position,
        )

    @property
    def missed_cut(self) -> bool:
        return self.made_cut is False


@dataclass(frozen=True)
class ResolvedPick:
    """Contribution of one drafted golfer to a team total."""

    golfer_id: int
    score: int
    strokes: Optional[int] = None
    withdrew: bool = False
    missed_cut: bool = False
    used_alternate: bool = False
    alternate_golfer_id: Optional[int] = None

    def as_dict(self) -> dict:
        return {
            "golfer_id": self.golfer_id,
            "score_to_par": self.score,
            "strokes": self.strokes,
            "withdrew": self.withdrew,
            "missed_cut": self.missed_cut,
            "used_alternate": self.used_alternate,
            "alternate_golfer_id": self.alternate_golfer_id,
        }


def index_results(results: Iterable[GolferResult]) -> dict[int, GolferResult]:
    return {result.golfer_id: result for result in results}


def is_effectively_withdrawn(result: Optional[GolferResult]) -> bool:
    """A missing result, an explicit withdrawal, or a blank to-par with no missed cut."""
    if result is None:
        return True
    if result.withdrew:
        return True
    return result.to_par is None and not result.missed_cut


def missed_cut_score(result: GolferResult) -> int:
    """Twice the first two rounds' to-par, or twice the total when rounds are missing."""
    rounds = result.rounds_to_par
    if len(rounds) >= 2:
        return 2 * ((rounds[0] or 0) + (rounds[1] or 0))
    return 2 * (result.to_par or 0)


def playing_score(result: GolferResult) -> int:
    """Score of a golfer who did not withdraw."""
    if result.missed_cut:
        return missed_cut_score(result)
    return result.to_par or 0


def is_eligible_alternate(result: Optional[GolferResult]) -> bool:
    return result is not None and not result.withdrew and result.to_par is not None


def withdrawal_penalty(
    results: Mapping[int, GolferResult], drafted_golfer_ids: Iterable[int]
) -> int:
    """Score charged for a withdrawn pick that no alternate covers.

    One worse than the worst resolved score among all drafted golfers that
    are still in the tournament. The floor is zero, so the penalty is never
    better than ``+1``.
    """
    worst = 0
    for golfer_id in drafted_golfer_ids:
        result = results.get(golfer_id)
        if is_effectively_withdrawn(result):
            continue
        worst = max(worst, playing_score(result))
    return worst + 1


def resolve_pick(
    golfer_id: int,
    result: Optional[GolferResult],
    *,
    penalty: int,
    alternate: Optional[GolferResult] = None,
    alternate_available: bool = False,
) -> tuple[ResolvedPick, bool]:
    """Resolve one drafted golfer.

    Parameters
    ----------
    golfer_id : int
        The drafted golfer.
    result : Optional[GolferResult]
        Their result, or ``None`` when the feed has nothing for them.
    penalty : int
        Value from :func:`withdrawal_penalty` for the competition.
    alternate : Optional[GolferResult], default: None
        Result of the participant's alternate golfer, if one was nominated.
    alternate_available : bool, default: False
        Whether the alternate has not yet been used on this team.

    Returns
    -------
    tuple[ResolvedPick, bool]
        The contribution and whether the alternate is still available for
        the participant's remaining picks.
    """
    if is_effectively_withdrawn(result):
        if alternate_available and is_eligible_alternate(alternate):
            return (
                ResolvedPick(
                    golfer_id=golfer_id,
                    score=playing_score(alternate),
                    strokes=alternate.strokes,
                    withdrew=True,
                    missed_cut=alternate.missed_cut,
                    used_alternate=True,
                    alternate_golfer_id=alternate.golfer_id,
                ),
                False,
            )
        return (
            ResolvedPick(
                golfer_id=golfer_id,
                score=penalty,
                strokes=result.strokes if result is not None else None,
                withdrew=True,
            ),
            alternate_available,
        )

    return (
        ResolvedPick(
            golfer_id=golfer_id,
            score=playing_score(result),
            strokes=result.strokes,
            missed_cut=result.missed_cut,
        ),
        alternate_available,
    )


def resolve_team(
    golfer_ids: Sequence[int],
    results: Mapping[int, GolferResult],
    *,
    penalty: int,
    alternate_golfer_id: Optional[int] = None,
) -> list[ResolvedPick]:
    """Resolve a participant's picks in draft order.

    The alternate covers at most one withdrawn pick, the earliest one.
    """
    alternate = results.get(alternate_golfer_id) if alternate_golfer_id is not None else None
    available = alternate_golfer_id is not None
    resolved: list[ResolvedPick] = []
    for golfer_id in golfer_ids:
        pick, available = resolve_pick(
            golfer_id,
            results.get(golfer_id),
            penalty=penalty,
            alternate=alternate,
            alternate_available=available,
        )
        resolved.append(pick)
    return resolved
