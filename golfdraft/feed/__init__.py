"""Adapter that turns the external results feed into ``TournamentResult`` rows."""

from .api import ResultsFeedClient
from .normalize import FeedEntry, normalize_feed_entry
from .sync import SyncSummary, refresh_results, sync_tournament_results

__all__ = [
    "FeedEntry",
    "ResultsFeedClient",
    "SyncSummary",
    "normalize_feed_entry",
    "refresh_results",
    "sync_tournament_results",
]
