import random
from datetime import datetime, timedelta, timezone

from golfdraft.db.engine import get_sessionmaker, make_engine
from golfdraft.models import Base, Golfer, Tournament, TournamentResult, User
from golfdraft.workflows import (
    create_private_competition,
    finalize,
    get_current_turn,
    join_competition,
    make_pick,
    start_draft,
)


GOLFERS = [
    # external id, name, to-par, strokes, made cut, rounds
    ("40000001", "Rory Example", -14, 274, True, [-4, -3, -4, -3]),
    ("40000002", "Scottie Sample", -12, 276, True, [-3, -3, -3, -3]),
    ("40000003", "Xander Demo", -9, 279, True, [-2, -2, -3, -2]),
    ("40000004", "Jon Placeholder", -6, 282, True, [-1, -2, -1, -2]),
    ("40000005", "Viktor Mock", -3, 285, True, [0, -1, -1, -1]),
    ("40000006", "Collin Stub", 1, 289, True, [1, 0, 0, 0]),
    ("40000007", "Ludvig Fixture", 4, 148, False, [2, 2]),
    ("40000008", "Tommy Dummy", None, None, None, []),
    ("40000009", "Patrick Proxy", -1, 287, True, [0, 0, -1, 0]),
]


def main() -> None:
    """Seed the development database with a finalized demo competition."""
    engine = make_engine()

    with engine.connect() as conn:
        conn.exec_driver_sql("PRAGMA foreign_keys=OFF")
        Base.metadata.drop_all(bind=conn)
        conn.exec_driver_sql("PRAGMA foreign_keys=ON")

    Base.metadata.create_all(engine)
    Session = get_sessionmaker(engine)

    now = datetime.now(timezone.utc)
    rng = random.Random(7)

    with Session.begin() as session:
        admin = User("admin", display_name="Commissioner", is_admin=True, created_at=now)
        alice = User("alice", display_name="Alice", team_color="#1f77b4", created_at=now)
        bob = User("bob", display_name="Bob", team_color="#ff7f0e", created_at=now)
        carol = User("carol", display_name="Carol", team_color="#2ca02c", created_at=now)
        session.add_all([admin, alice, bob, carol])

        golfers = [
            Golfer(external_id=ext, display_name=name, world_ranking=rank)
            for rank, (ext, name, *_rest) in enumerate(GOLFERS, start=1)
        ]
        session.add_all(golfers)

        tournament = Tournament(
            external_id="600",
            name="Demo Invitational",
            start_date=now + timedelta(days=3),
            end_date=now + timedelta(days=6),
            status="upcoming",
        )
        session.add(tournament)
        session.flush()

        competition = create_private_competition(
            session, tournament, alice, "Friday Skins", now=now, rng=rng
        )
        join_competition(session, competition, bob)
        join_competition(session, competition, carol)
        start_draft(session, competition, alice, rng=rng, now=now)

        members = {u.id: u for u in (alice, bob, carol)}
        for golfer in golfers[:9]:
            turn = get_current_turn(session, competition)
            if turn.user_id is None:
                break
            make_pick(session, competition, members[turn.user_id], golfer, now=now)

        # the list is ordered by finish, so the first golfer wins outright
        for index, (golfer, row) in enumerate(zip(golfers, GOLFERS)):
            _ext, _name, to_par, strokes, made_cut, rounds = row
            session.add(
                TournamentResult(
                    tournament_id=tournament.id,
                    golfer_id=golfer.id,
                    position=1 if index == 0 else None,
                    total_to_par=to_par,
                    total_strokes=strokes,
                    made_cut=made_cut,
                    withdrew=to_par is None,
                    rounds_to_par=rounds,
                )
            )

        tournament.status = "completed"
        session.flush()
        finalize(session, competition)

    print("Development database seeded.")


if __name__ == "__main__":
    main()
