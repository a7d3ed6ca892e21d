import random

from sqlalchemy import select

from golfdraft.admin import (
    edit_result,
    force_sync_results,
    remove_participant,
    swap_pick,
    update_alternate,
)
from golfdraft.errors import (
    AdminRequiredError,
    DraftStateError,
    GolferAlreadyDraftedError,
    NotParticipantError,
)
from golfdraft.feed import sync_tournament_results
from golfdraft.models import DraftPick, TournamentResult, User
from golfdraft.workflows import start_draft

from support import (
    NOW,
    DatabaseTestCase,
    DummyFeedClient,
    make_competition,
    make_golfers,
    make_tournament,
    make_users,
    player,
    run_draft,
)


class AdminTestCase(DatabaseTestCase):
    def _setup(self, session, draft=True):
        users = make_users(session, 2)
        admin = User("commissioner", is_admin=True)
        session.add(admin)
        session.flush()
        golfers = make_golfers(session)
        tournament = make_tournament(session)
        competition = make_competition(session, tournament, users)
        if draft:
            run_draft(session, competition, users, golfers)
        return users, admin, golfers, tournament, competition

    def test_non_admin_is_refused(self):
        with self.Session.begin() as session:
            users, _admin, golfers, tournament, _competition = self._setup(session, draft=False)
            with self.assertRaises(AdminRequiredError):
                edit_result(session, users[0], tournament, golfers[0], total_to_par=-1)

    def test_swap_pick(self):
        with self.Session.begin() as session:
            _users, admin, golfers, _tournament, competition = self._setup(session)
            pick = session.scalar(select(DraftPick).where(DraftPick.pick_number == 1))

            old, new = swap_pick(session, admin, pick, golfers[10])
            self.assertEqual((old, new), (golfers[0].id, golfers[10].id))
            self.assertEqual(pick.golfer_id, golfers[10].id)

            with self.assertRaises(GolferAlreadyDraftedError):
                swap_pick(session, admin, pick, golfers[1])

    def test_update_alternate_ignores_draft_state(self):
        with self.Session.begin() as session:
            users, admin, golfers, _tournament, competition = self._setup(session, draft=False)
            start_draft(session, competition, users[0], rng=random.Random(1), now=NOW)

            alternate = update_alternate(session, admin, competition, users[1], golfers[5])
            self.assertEqual(alternate.golfer_id, golfers[5].id)
            replaced = update_alternate(session, admin, competition, users[1], golfers[6])
            self.assertEqual(replaced.id, alternate.id)
            self.assertEqual(replaced.golfer_id, golfers[6].id)

    def test_update_alternate_rejects_drafted_golfer(self):
        with self.Session.begin() as session:
            users, admin, golfers, _tournament, competition = self._setup(session)
            with self.assertRaises(GolferAlreadyDraftedError):
                update_alternate(session, admin, competition, users[0], golfers[0])

    def test_edit_result_marks_override(self):
        with self.Session.begin() as session:
            _users, admin, golfers, tournament, _competition = self._setup(session, draft=False)
            row = edit_result(
                session, admin, tournament, golfers[0], total_to_par=-6, rounds_to_par=(-3, -3)
            )
            self.assertTrue(row.manual_override)
            self.assertEqual(row.rounds_to_par, [-3, -3])

            summary = sync_tournament_results(
                session, tournament, [player(golfers[0].external_id, TotalScore=4)]
            )
            self.assertEqual(summary.skipped_override, 1)
            self.assertEqual(row.total_to_par, -6)

            with self.assertRaises(ValueError):
                edit_result(session, admin, tournament, golfers[0], nickname="x")

    def test_force_sync_can_release_overrides(self):
        with self.Session.begin() as session:
            _users, admin, golfers, tournament, _competition = self._setup(session, draft=False)
            edit_result(session, admin, tournament, golfers[0], total_to_par=-6)
            client = DummyFeedClient([player(golfers[0].external_id, TotalScore=-2)])

            self.assertTrue(force_sync_results(session, admin, tournament, client=client))
            row = TournamentResult.get(session, tournament.id, golfers[0].id)
            self.assertEqual(row.total_to_par, -6)

            self.assertTrue(
                force_sync_results(session, admin, tournament, client=client, clear_overrides=True)
            )
            self.assertEqual(row.total_to_par, -2)
            self.assertFalse(row.manual_override)

    def test_remove_participant(self):
        with self.Session.begin() as session:
            users, admin, _golfers, _tournament, competition = self._setup(session, draft=False)
            outsider = make_users(session, 1, prefix="outsider")[0]
            with self.assertRaises(NotParticipantError):
                remove_participant(session, admin, competition, outsider)

            remove_participant(session, admin, competition, users[1])
            self.assertFalse(competition.is_participant(session, users[1].id))

    def test_remove_participant_after_draft_start(self):
        with self.Session.begin() as session:
            users, admin, _golfers, _tournament, competition = self._setup(session)
            with self.assertRaises(DraftStateError):
                remove_participant(session, admin, competition, users[1])
