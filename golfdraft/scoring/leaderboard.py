"""Competition standings built from drafted teams and tournament results."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Mapping, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..draft.turns import DRAFT_ROUNDS
from ..models import Alternate, Competition, CompetitionScore, DraftPick, TournamentResult
from .resolver import GolferResult, ResolvedPick, index_results, resolve_team, withdrawal_penalty


@dataclass(frozen=True)
class PickRecord:
    user_id: int
    golfer_id: int
    pick_number: int

    @classmethod
    def from_row(cls, row: DraftPick) -> "PickRecord":
        return cls(user_id=row.user_id, golfer_id=row.golfer_id, pick_number=row.pick_number)


@dataclass
class LeaderboardEntry:
    """One participant's team total and rank.

    Attributes
    ----------
    user_id : int
        The participant.
    team_score_to_par : int
        Sum of the three resolved contributions; lower is better.
    team_score_strokes : int
        Sum of the stroke totals that are known.
    final_position : int
        One-based rank. Positions are strictly increasing even on ties.
    breakdown : list[ResolvedPick]
        Resolved contributions in draft order.
    """

    user_id: int
    team_score_to_par: int
    team_score_strokes: int
    final_position: int = 0
    breakdown: list[ResolvedPick] = field(default_factory=list)

    def breakdown_dicts(self) -> list[dict]:
        return [pick.as_dict() for pick in self.breakdown]

    @classmethod
    def from_score(cls, score: CompetitionScore) -> "LeaderboardEntry":
        """Rebuild an entry from its frozen :class:`CompetitionScore` row."""
        breakdown = [
            ResolvedPick(
                golfer_id=item["golfer_id"],
                score=item["score_to_par"],
                strokes=item.get("strokes"),
                withdrew=bool(item.get("withdrew")),
                missed_cut=bool(item.get("missed_cut")),
                used_alternate=bool(item.get("used_alternate")),
                alternate_golfer_id=item.get("alternate_golfer_id"),
            )
            for item in (score.score_breakdown or [])
        ]
        return cls(
            user_id=score.user_id,
            team_score_to_par=score.team_score_to_par,
            team_score_strokes=score.team_score_strokes,
            final_position=score.final_position,
            breakdown=breakdown,
        )


def build_leaderboard(
    picks: Iterable[PickRecord],
    results: Iterable[GolferResult],
    alternates: Optional[Mapping[int, int]] = None,
) -> list[LeaderboardEntry]:
    """Rank every participant that has a full team.

    Parameters
    ----------
    picks : Iterable[PickRecord]
        All picks of the competition.
    results : Iterable[GolferResult]
        Known tournament results. When empty no standings exist yet and an
        empty list is returned.
    alternates : Mapping[int, int], optional
        ``user_id`` to alternate ``golfer_id``.

    Returns
    -------
    list[LeaderboardEntry]
        Entries in rank order. Ties keep the order in which the teams made
        their first pick.
    """
    by_golfer = index_results(results)
    if not by_golfer:
        return []
    alternates = alternates or {}

    picks = sorted(picks, key=lambda p: p.pick_number)
    penalty = withdrawal_penalty(by_golfer, (p.golfer_id for p in picks))

    teams: dict[int, list[PickRecord]] = {}
    for pick in picks:
        teams.setdefault(pick.user_id, []).append(pick)

    entries: list[LeaderboardEntry] = []
    # dicts keep insertion order, i.e. each team's earliest pick number
    for user_id, team in teams.items():
        if len(team) != DRAFT_ROUNDS:
            continue
        resolved = resolve_team(
            [p.golfer_id for p in team],
            by_golfer,
            penalty=penalty,
            alternate_golfer_id=alternates.get(user_id),
        )
        entries.append(
            LeaderboardEntry(
                user_id=user_id,
                team_score_to_par=sum(r.score for r in resolved),
                team_score_strokes=sum(r.strokes for r in resolved if r.strokes is not None),
                breakdown=resolved,
            )
        )

    entries.sort(key=lambda e: e.team_score_to_par)
    for position, entry in enumerate(entries, start=1):
        entry.final_position = position
    return entries


def load_leaderboard(session: Session, competition: Competition) -> list[LeaderboardEntry]:
    """Compute live standings for ``competition`` from persisted rows."""
    if competition.id is None:
        raise ValueError("Competition must be persisted before building a leaderboard")

    rows = session.scalars(
        select(TournamentResult).where(
            TournamentResult.tournament_id == competition.tournament_id
        )
    ).all()
    results = [GolferResult.from_row(row) for row in rows]
    if not results:
        return []

    picks = [
        PickRecord.from_row(row)
        for row in session.scalars(
            select(DraftPick)
            .where(DraftPick.competition_id == competition.id)
            .order_by(DraftPick.pick_number)
        ).all()
    ]
    alternates = {
        alt.user_id: alt.golfer_id
        for alt in session.scalars(
            select(Alternate).where(Alternate.competition_id == competition.id)
        ).all()
    }
    return build_leaderboard(picks, results, alternates)
