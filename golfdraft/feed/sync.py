"""Upsert feed leaderboards into ``tournament_results``."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional

import requests
from sqlalchemy import select
from sqlalchemy.orm import Session

from ..db.utils import utcnow
from ..models import Golfer, Tournament, TournamentResult
from .api import ResultsFeedClient
from .normalize import FeedEntry, normalize_feed_entry

logger = logging.getLogger(__name__)


@dataclass
class SyncSummary:
    created: int = 0
    updated: int = 0
    skipped_override: int = 0
    unknown_players: int = 0
    invalid: int = 0

    @property
    def written(self) -> int:
        return self.created + self.updated


def _apply(row: TournamentResult, entry: FeedEntry) -> None:
    row.position = entry.position
    row.total_strokes = entry.total_strokes
    row.total_to_par = entry.total_to_par
    row.rounds_to_par = list(entry.rounds_to_par)
    row.made_cut = entry.made_cut
    row.withdrew = entry.withdrew
    row.last_updated = utcnow()


def sync_tournament_results(
    session: Session,
    tournament: Tournament,
    raw_entries: Iterable[Mapping[str, Any]],
) -> SyncSummary:
    """Write the feed's view of ``tournament`` into ``tournament_results``.

    Parameters
    ----------
    session : Session
        Active SQLAlchemy session.
    tournament : Tournament
        Persisted tournament the entries belong to.
    raw_entries : Iterable[Mapping[str, Any]]
        Player records as returned by :meth:`ResultsFeedClient.get_leaderboard`.

    Returns
    -------
    SyncSummary
        Counts of what was written and what was skipped.

    Notes
    -----
    Players that are not known golfers are ignored. Rows marked
    ``manual_override`` by an admin are never touched.
    """
    if tournament.id is None:
        raise ValueError("Tournament must be persisted before syncing results")

    summary = SyncSummary()
    entries: list[FeedEntry] = []
    for raw in raw_entries:
        try:
            entries.append(normalize_feed_entry(raw))
        except (TypeError, ValueError) as e:
            summary.invalid += 1
            logger.warning(f"Skipping malformed feed entry for tournament {tournament.id}: {e}")
    if not entries:
        return summary

    golfers = {
        g.external_id: g.id
        for g in session.scalars(
            select(Golfer).where(Golfer.external_id.in_([e.player_id for e in entries]))
        ).all()
    }
    existing = {row.golfer_id: row for row in TournamentResult.for_tournament(session, tournament.id)}

    for entry in entries:
        golfer_id = golfers.get(entry.player_id)
        if golfer_id is None:
            summary.unknown_players += 1
            continue
        row = existing.get(golfer_id)
        if row is None:
            row = TournamentResult(tournament_id=tournament.id, golfer_id=golfer_id)
            _apply(row, entry)
            session.add(row)
            existing[golfer_id] = row
            summary.created += 1
        elif row.manual_override:
            summary.skipped_override += 1
        else:
            _apply(row, entry)
            summary.updated += 1

    session.flush()
    logger.debug(
        f"Synced tournament {tournament.id}: {summary.created} created, "
        f"{summary.updated} updated, {summary.skipped_override} overridden, "
        f"{summary.unknown_players} unknown"
    )
    return summary


def refresh_results(
    session: Session,
    tournament: Tournament,
    client: Optional[ResultsFeedClient] = None,
) -> bool:
    """Fetch and sync the latest leaderboard for ``tournament``.

    Feed outages are not errors: they are logged and ``False`` is returned so
    callers keep serving whatever results are already stored.
    """
    client = client or ResultsFeedClient()
    try:
        raw_entries = client.get_leaderboard(tournament.external_id)
    except (requests.RequestException, ValueError) as e:
        logger.warning(f"Results feed unavailable for tournament {tournament.id}: {e}")
        return False
    sync_tournament_results(session, tournament, raw_entries)
    return True
