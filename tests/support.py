"""Shared builders for the database-backed test cases."""

import random
import unittest
from datetime import datetime, timedelta, timezone

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from golfdraft.feed.api import ResultsFeedClient
from golfdraft.models import Base, Golfer, Tournament, TournamentResult, User
from golfdraft.workflows import (
    create_private_competition,
    get_current_turn,
    join_competition,
    make_pick,
    start_draft,
)

NOW = datetime(2026, 4, 6, 12, 0, tzinfo=timezone.utc)
TOURNAMENT_START = NOW + timedelta(days=3)


class DatabaseTestCase(unittest.TestCase):
    def setUp(self):
        self.engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
        Base.metadata.create_all(self.engine)
        self.Session = sessionmaker(bind=self.engine, future=True, expire_on_commit=False)

    def tearDown(self):
        self.engine.dispose()


def make_users(session, count, prefix="player"):
    users = [User(f"{prefix}{i}", display_name=f"Player {i}") for i in range(1, count + 1)]
    session.add_all(users)
    session.flush()
    return users


def make_golfers(session, count=12):
    golfers = [
        Golfer(external_id=str(1000 + i), display_name=f"Golfer {i}", world_ranking=i)
        for i in range(count)
    ]
    session.add_all(golfers)
    session.flush()
    return golfers


def make_tournament(session, external_id="t-1", start=TOURNAMENT_START, days=3):
    tournament = Tournament(
        external_id=external_id,
        name=f"Tournament {external_id}",
        start_date=start,
        end_date=start + timedelta(days=days),
        status="upcoming",
    )
    session.add(tournament)
    session.flush()
    return tournament


def make_competition(session, tournament, users, name="League"):
    """Private competition created by ``users[0]`` with everyone else joined."""
    competition = create_private_competition(
        session, tournament, users[0], name, now=NOW, rng=random.Random(3)
    )
    for user in users[1:]:
        join_competition(session, competition, user)
    return competition


def run_draft(session, competition, users, golfers, seed=11):
    """Start the draft and give pick ``n`` the golfer ``golfers[n - 1]``.

    Returns the user ids in draft order.
    """
    entries = start_draft(session, competition, users[0], rng=random.Random(seed), now=NOW)
    by_id = {u.id: u for u in users}
    for golfer in golfers[: 3 * len(users)]:
        turn = get_current_turn(session, competition)
        make_pick(session, competition, by_id[turn.user_id], golfer, now=NOW)
    return [entry.user_id for entry in entries]


def add_result(session, tournament, golfer, to_par, **kwargs):
    row = TournamentResult(
        tournament_id=tournament.id,
        golfer_id=golfer.id,
        total_to_par=to_par,
        total_strokes=kwargs.pop("strokes", None if to_par is None else 280 + to_par),
        made_cut=kwargs.pop("made_cut", True),
        withdrew=kwargs.pop("withdrew", False),
        **kwargs,
    )
    session.add(row)
    session.flush()
    return row


class DummyFeedClient(ResultsFeedClient):
    def __init__(self, players=None, error=None):
        self.players = players or []
        self.error = error
        self.calls = []

    def get_leaderboard(self, tournament_external_id):
        self.calls.append(tournament_external_id)
        if self.error is not None:
            raise self.error
        return self.players


def player(player_id, **fields):
    """A feed leaderboard record with every field the feed normally sends."""
    entry = {
        "PlayerID": player_id,
        "Position": None,
        "TotalScore": None,
        "TotalStrokes": None,
        "MadeCut": True,
        "Withdrew": False,
        "Rounds": [],
    }
    entry.update(fields)
    return entry
