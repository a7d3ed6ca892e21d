from datetime import timedelta
from decimal import Decimal
from unittest.mock import patch

from sqlalchemy import func, select, text

from golfdraft.admin import reset_draft, reset_finalization
from golfdraft.db.utils import as_utc
from golfdraft.errors import AdminRequiredError
from golfdraft.finalization import FinalizationEngine
from golfdraft.models import (
    AnnualLeaderboard,
    CompetitionBounty,
    CompetitionPayment,
    CompetitionScore,
    DraftOrderEntry,
    DraftPick,
    User,
)
from golfdraft.models.standings import PAYMENT_BOUNTY, PAYMENT_MAIN
from golfdraft.standings import annual_leaderboard, annual_stats, competition_history
from golfdraft.workflows import finalize, get_leaderboard

from support import (
    NOW,
    DatabaseTestCase,
    add_result,
    make_competition,
    make_golfers,
    make_tournament,
    make_users,
    run_draft,
)

# golfer index -> to-par; pick n drafts golfer n - 1
# first in order: golfers 0, 5, 6 -> -9
# second:         golfers 1, 4, 7 -> -4
# third:          golfers 2, 3, 8 -> +3
TO_PAR = [-6, -3, 0, 1, -1, -2, -1, 0, 2]
WINNING_GOLFER = 7  # drafted in round 3 by the second team


def _count(session, model):
    return session.scalar(select(func.count(model.id)))


class CompletedTournamentTestCase(DatabaseTestCase):
    def _scenario(self, session, completed=True):
        users = make_users(session, 3)
        admin = User("commissioner", is_admin=True)
        session.add(admin)
        golfers = make_golfers(session)
        tournament = make_tournament(session)
        competition = make_competition(session, tournament, users)
        order = run_draft(session, competition, users, golfers)
        for index, to_par in enumerate(TO_PAR):
            add_result(
                session,
                tournament,
                golfers[index],
                to_par,
                position=1 if index == WINNING_GOLFER else None,
            )
        if completed:
            tournament.status = "completed"
        session.flush()
        return competition, order, admin


class FinalizationTestCase(CompletedTournamentTestCase):
    def test_not_finalized_before_tournament_completes(self):
        with self.Session.begin() as session:
            competition, _order, _admin = self._scenario(session, completed=False)
            self.assertFalse(finalize(session, competition))
            self.assertIsNone(competition.finalized_at)
            self.assertEqual(_count(session, CompetitionScore), 0)
            # live standings are available all the same
            self.assertEqual(len(get_leaderboard(session, competition)), 3)

    def test_finalize_persists_scores_payments_and_bounty(self):
        with self.Session.begin() as session:
            competition, order, _admin = self._scenario(session)
            first, second, third = order

            self.assertTrue(finalize(session, competition, now=NOW + timedelta(days=7)))
            self.assertIsNotNone(competition.finalized_at)

            scores = {
                s.user_id: s for s in CompetitionScore.for_competition(session, competition.id)
            }
            self.assertEqual(scores[first].team_score_to_par, -9)
            self.assertEqual(scores[second].team_score_to_par, -4)
            self.assertEqual(scores[third].team_score_to_par, 3)
            self.assertEqual(
                [scores[uid].final_position for uid in order], [1, 2, 3]
            )
            self.assertTrue(scores[first].won)
            self.assertFalse(scores[second].won)
            self.assertTrue(all(s.aggregate_applied for s in scores.values()))
            self.assertEqual(len(scores[first].score_breakdown), 3)

            payments = session.scalars(select(CompetitionPayment)).all()
            main = {
                (p.from_user_id, p.to_user_id): p.amount
                for p in payments
                if p.payment_type == PAYMENT_MAIN
            }
            bounty = {
                (p.from_user_id, p.to_user_id): p.amount
                for p in payments
                if p.payment_type == PAYMENT_BOUNTY
            }
            self.assertEqual(
                main, {(second, first): Decimal("5.00"), (third, first): Decimal("12.00")}
            )
            self.assertEqual(
                bounty, {(third, second): Decimal("10.00"), (first, second): Decimal("10.00")}
            )

            row = session.scalar(select(CompetitionBounty))
            self.assertEqual(row.user_id, second)
            self.assertEqual(row.pick_round, 3)
            self.assertEqual(row.bounty_amount, Decimal("20.00"))

            self.assertEqual(scores[first].net_winnings, Decimal("17.00"))
            self.assertEqual(scores[first].net_bounties, Decimal("-10.00"))
            self.assertEqual(scores[second].net_winnings, Decimal("-5.00"))
            self.assertEqual(scores[second].net_bounties, Decimal("20.00"))

            annual = AnnualLeaderboard.get(session, first, 2026)
            self.assertEqual(annual.total_competitions, 1)
            self.assertEqual(annual.competitions_won, 1)
            self.assertEqual(annual.total_winnings, Decimal("17.00"))
            self.assertEqual(annual.total_bounties, Decimal("-10.00"))

    def test_finalize_is_idempotent(self):
        with self.Session.begin() as session:
            competition, order, _admin = self._scenario(session)
            self.assertTrue(finalize(session, competition))
            self.assertFalse(finalize(session, competition))
            self.assertFalse(FinalizationEngine(session).finalize(competition))

            self.assertEqual(_count(session, CompetitionScore), 3)
            self.assertEqual(_count(session, CompetitionPayment), 4)
            self.assertEqual(AnnualLeaderboard.get(session, order[0], 2026).total_competitions, 1)

    def test_frozen_leaderboard_survives_result_changes(self):
        with self.Session.begin() as session:
            competition, order, _admin = self._scenario(session)
            finalize(session, competition)
            for row in competition.tournament.results:
                row.total_to_par = 10
            session.flush()

            entries = get_leaderboard(session, competition)
            self.assertEqual([e.user_id for e in entries], order)
            self.assertEqual([e.team_score_to_par for e in entries], [-9, -4, 3])
            self.assertEqual(entries[0].breakdown[0].golfer_id, competition.picks[0].golfer_id)

    def test_plan_does_not_write(self):
        with self.Session.begin() as session:
            competition, _order, _admin = self._scenario(session)
            plan = FinalizationEngine(session).plan(competition)
            self.assertEqual(len(plan.entries), 3)
            self.assertEqual(len(plan.payments), 4)
            self.assertEqual(plan.bounty.total_bounty, Decimal("30.00"))
            self.assertEqual(plan.season_year, 2026)
            self.assertEqual(_count(session, CompetitionScore), 0)
            self.assertIsNone(competition.finalized_at)

    def test_claimed_competition_is_not_finalized_again(self):
        with self.Session.begin() as session:
            competition, order, _admin = self._scenario(session)
            # another caller already claimed it but has not written scores yet
            competition.finalized_at = NOW
            session.flush()

            self.assertFalse(finalize(session, competition))
            self.assertEqual(as_utc(competition.finalized_at), NOW)
            self.assertEqual(_count(session, CompetitionScore), 0)
            self.assertEqual(_count(session, CompetitionPayment), 0)
            self.assertEqual(_count(session, CompetitionBounty), 0)
            self.assertIsNone(AnnualLeaderboard.get(session, order[0], 2026))

    def test_failed_write_leaves_nothing_behind(self):
        with self.Session.begin() as session:
            competition, order, _admin = self._scenario(session)
            engine = FinalizationEngine(session)
            plan = engine.plan(competition)
            # duplicate payment violates the unique constraint on flush
            plan.payments.append(plan.payments[0])

            with patch.object(FinalizationEngine, "plan", return_value=plan):
                with self.assertLogs("golfdraft.finalization.engine", level="ERROR") as logs:
                    self.assertFalse(engine.finalize(competition))
            self.assertIn(f"Failed to finalize competition {competition.id}", logs.output[0])

            self.assertIsNone(competition.finalized_at)
            self.assertEqual(_count(session, CompetitionScore), 0)
            self.assertEqual(_count(session, CompetitionPayment), 0)
            self.assertEqual(_count(session, CompetitionBounty), 0)
            self.assertIsNone(AnnualLeaderboard.get(session, order[0], 2026))

            # the next read retries and succeeds
            self.assertTrue(finalize(session, competition))
            self.assertEqual(_count(session, CompetitionScore), 3)

    def test_failed_read_returns_false(self):
        with self.Session.begin() as session:
            competition, _order, _admin = self._scenario(session)
            session.execute(text("DROP TABLE alternates"))

            with self.assertLogs("golfdraft.finalization.engine", level="ERROR"):
                self.assertFalse(finalize(session, competition))
            self.assertIsNone(competition.finalized_at)
            self.assertEqual(_count(session, CompetitionScore), 0)


class ResetTestCase(CompletedTournamentTestCase):
    def test_reset_finalization_requires_admin(self):
        with self.Session.begin() as session:
            competition, order, _admin = self._scenario(session)
            finalize(session, competition)
            player = session.get(User, order[0])
            with self.assertRaises(AdminRequiredError):
                reset_finalization(session, player, competition)

    def test_reset_finalization_round_trip(self):
        with self.Session.begin() as session:
            competition, order, admin = self._scenario(session)
            first = order[0]
            # an earlier competition already counted this season
            session.add(
                AnnualLeaderboard(
                    user_id=first,
                    year=2026,
                    total_competitions=2,
                    competitions_won=1,
                    total_winnings=Decimal("5.00"),
                    total_bounties=Decimal("0.00"),
                )
            )
            session.flush()

            finalize(session, competition)
            annual = AnnualLeaderboard.get(session, first, 2026)
            self.assertEqual(annual.total_competitions, 3)
            self.assertEqual(annual.competitions_won, 2)
            self.assertEqual(annual.total_winnings, Decimal("22.00"))
            self.assertEqual(annual.total_bounties, Decimal("-10.00"))

            report = reset_finalization(session, admin, competition)
            self.assertTrue(report.changed)
            self.assertEqual(report.changes["delete_scores"], 3)
            self.assertIsNone(competition.finalized_at)
            self.assertEqual(_count(session, CompetitionScore), 0)
            self.assertEqual(_count(session, CompetitionPayment), 0)
            self.assertEqual(_count(session, CompetitionBounty), 0)

            annual = AnnualLeaderboard.get(session, first, 2026)
            self.assertEqual(annual.total_competitions, 2)
            self.assertEqual(annual.competitions_won, 1)
            self.assertEqual(annual.total_winnings, Decimal("5.00"))
            self.assertEqual(annual.total_bounties, Decimal("0.00"))
            # rows that only held this competition are gone
            self.assertIsNone(AnnualLeaderboard.get(session, order[1], 2026))

            self.assertFalse(reset_finalization(session, admin, competition).changed)

            self.assertTrue(finalize(session, competition))
            annual = AnnualLeaderboard.get(session, first, 2026)
            self.assertEqual(annual.total_competitions, 3)
            self.assertEqual(annual.total_winnings, Decimal("22.00"))

    def test_reset_draft_clears_everything(self):
        with self.Session.begin() as session:
            competition, _order, admin = self._scenario(session)
            finalize(session, competition)

            report = reset_draft(session, admin, competition)
            self.assertTrue(report.changed)
            self.assertEqual(competition.draft_status, "not_started")
            self.assertIsNone(competition.draft_started_at)
            self.assertIsNone(competition.draft_completed_at)
            self.assertIsNone(competition.finalized_at)
            self.assertEqual(_count(session, DraftPick), 0)
            self.assertEqual(_count(session, DraftOrderEntry), 0)
            self.assertEqual(_count(session, CompetitionScore), 0)
            self.assertEqual(_count(session, AnnualLeaderboard), 0)
            self.assertEqual(competition.picks, [])

            self.assertFalse(reset_draft(session, admin, competition).changed)


class StandingsTestCase(CompletedTournamentTestCase):
    def test_annual_leaderboard_and_history(self):
        with self.Session.begin() as session:
            competition, order, _admin = self._scenario(session)
            finalize(session, competition)

            stats = annual_stats(session, session.get(User, order[0]), 2026)
            self.assertEqual(stats.competitions_won, 1)
            self.assertIsNone(annual_stats(session, session.get(User, order[0]), 2025))

            standings = annual_leaderboard(session, 2026)
            # nets: first +7, second +15, third -22
            self.assertEqual([s.user_id for s in standings], [order[1], order[0], order[2]])
            self.assertEqual(standings[0].net_total, Decimal("15.00"))

            history = competition_history(session, session.get(User, order[2]))
            self.assertEqual(len(history), 1)
            self.assertEqual(history[0].competition_id, competition.id)
            self.assertEqual(history[0].final_position, 3)
            self.assertEqual(history[0].net_winnings, Decimal("-12.00"))
            self.assertEqual(history[0].net_bounties, Decimal("-10.00"))
            self.assertEqual(
                competition_history(session, session.get(User, order[2]), is_public=True), []
            )
