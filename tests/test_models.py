import unittest
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from golfdraft.models import (
    AnnualLeaderboard,
    Base,
    Competition,
    CompetitionPayment,
    DraftPick,
    Golfer,
    Tournament,
    User,
)


class DBTestCase(unittest.TestCase):
    def setUp(self):
        # In-memory SQLite for isolation
        self.engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
        Base.metadata.create_all(self.engine)
        self.Session = sessionmaker(bind=self.engine, future=True, expire_on_commit=False)

    def tearDown(self):
        self.engine.dispose()

    def _seed(self, session):
        user = User("alice", display_name="Alice")
        golfer = Golfer(external_id="40000001", display_name="Test Golfer")
        tournament = Tournament(
            external_id="600",
            name="Open",
            start_date=datetime(2026, 7, 16, tzinfo=timezone.utc),
            end_date=datetime(2026, 7, 19, tzinfo=timezone.utc),
        )
        session.add_all([user, golfer, tournament])
        session.flush()
        competition = Competition(
            tournament_id=tournament.id, name="League", created_by_id=user.id
        )
        session.add(competition)
        session.flush()
        return user, golfer, tournament, competition

    def test_user_lookup_and_label(self):
        with self.Session() as session:
            session.add(User("  bob  "))
            session.commit()

            bob = User.get_by_username(session, "bob")
            self.assertIsNotNone(bob)
            self.assertEqual(bob.label, "bob")
            self.assertFalse(bob.is_admin)
            self.assertIsNone(User.get_by_username(session, "nobody"))

    def test_empty_username_rejected(self):
        with self.assertRaises(ValueError):
            User("   ")

    def test_defaults(self):
        with self.Session() as session:
            _user, golfer, tournament, competition = self._seed(session)
            session.commit()

            self.assertEqual(competition.draft_status, "not_started")
            self.assertFalse(competition.is_public)
            self.assertIsNotNone(competition.created_at)
            self.assertEqual(tournament.status, "upcoming")
            self.assertEqual(tournament.season_year, 2026)
            self.assertFalse(tournament.is_completed)
            self.assertEqual(Golfer.get_by_external_id(session, "40000001").id, golfer.id)

    def test_one_public_competition_per_tournament(self):
        with self.Session() as session:
            user, _golfer, tournament, _competition = self._seed(session)
            for name in ("Public A", "Private B"):
                session.add(
                    Competition(
                        tournament_id=tournament.id,
                        name=name,
                        created_by_id=user.id,
                        is_public=name.startswith("Public"),
                    )
                )
            session.commit()

            session.add(
                Competition(
                    tournament_id=tournament.id,
                    name="Public C",
                    created_by_id=user.id,
                    is_public=True,
                )
            )
            with self.assertRaises(IntegrityError):
                session.commit()

    def test_golfer_drafted_once_per_competition(self):
        with self.Session() as session:
            user, golfer, _tournament, competition = self._seed(session)
            session.add(
                DraftPick(
                    competition_id=competition.id,
                    user_id=user.id,
                    golfer_id=golfer.id,
                    draft_round=1,
                    pick_number=1,
                )
            )
            session.commit()

            session.add(
                DraftPick(
                    competition_id=competition.id,
                    user_id=user.id,
                    golfer_id=golfer.id,
                    draft_round=1,
                    pick_number=2,
                )
            )
            with self.assertRaises(IntegrityError):
                session.commit()

    def test_draft_round_is_checked(self):
        with self.Session() as session:
            user, golfer, _tournament, competition = self._seed(session)
            session.add(
                DraftPick(
                    competition_id=competition.id,
                    user_id=user.id,
                    golfer_id=golfer.id,
                    draft_round=4,
                    pick_number=1,
                )
            )
            with self.assertRaises(IntegrityError):
                session.commit()

    def test_payment_amount_must_be_positive(self):
        with self.Session() as session:
            user, _golfer, _tournament, competition = self._seed(session)
            other = User("carol")
            session.add(other)
            session.flush()
            session.add(
                CompetitionPayment(
                    competition_id=competition.id,
                    from_user_id=other.id,
                    to_user_id=user.id,
                    amount=Decimal("0.00"),
                    payment_type="main",
                )
            )
            with self.assertRaises(IntegrityError):
                session.commit()

    def test_annual_row_unique_per_year(self):
        with self.Session() as session:
            user, *_rest = self._seed(session)
            session.add(AnnualLeaderboard(user_id=user.id, year=2026))
            session.commit()
            row = AnnualLeaderboard.get(session, user.id, 2026)
            self.assertEqual(row.total_competitions, 0)
            self.assertEqual(row.net_total, Decimal("0"))

            session.add(AnnualLeaderboard(user_id=user.id, year=2026))
            with self.assertRaises(IntegrityError):
                session.commit()


if __name__ == "__main__":
    unittest.main()
