import unittest

from golfdraft.scoring.resolver import (
    GolferResult,
    index_results,
    is_effectively_withdrawn,
    missed_cut_score,
    resolve_team,
    withdrawal_penalty,
)


class TestGolferOutcomes(unittest.TestCase):
    def test_missed_cut_doubles_first_two_rounds(self):
        result = GolferResult(golfer_id=1, to_par=7, made_cut=False, rounds_to_par=(3, 4))
        self.assertEqual(missed_cut_score(result), 14)

    def test_missed_cut_without_rounds_doubles_total(self):
        result = GolferResult(golfer_id=1, to_par=5, made_cut=False)
        self.assertEqual(missed_cut_score(result), 10)

    def test_withdrawal_detection(self):
        self.assertTrue(is_effectively_withdrawn(None))
        self.assertTrue(is_effectively_withdrawn(GolferResult(golfer_id=1, to_par=-2, withdrew=True)))
        self.assertTrue(is_effectively_withdrawn(GolferResult(golfer_id=1, to_par=None)))
        # blank total after a missed cut is still a cut, not a withdrawal
        self.assertFalse(
            is_effectively_withdrawn(
                GolferResult(golfer_id=1, to_par=None, made_cut=False, rounds_to_par=(1, 2))
            )
        )
        self.assertFalse(is_effectively_withdrawn(GolferResult(golfer_id=1, to_par=0)))


class TestWithdrawalPenalty(unittest.TestCase):
    def test_one_worse_than_worst_remaining(self):
        results = index_results(
            [
                GolferResult(golfer_id=1, to_par=-5, made_cut=True),
                GolferResult(golfer_id=2, to_par=5, made_cut=False, rounds_to_par=(2, 3)),
                GolferResult(golfer_id=3, withdrew=True),
            ]
        )
        self.assertEqual(withdrawal_penalty(results, [1, 2, 3]), 11)

    def test_floor_is_plus_one(self):
        results = index_results(
            [
                GolferResult(golfer_id=1, to_par=-5, made_cut=True),
                GolferResult(golfer_id=2, to_par=-3, made_cut=True),
            ]
        )
        self.assertEqual(withdrawal_penalty(results, [1, 2]), 1)


class TestResolveTeam(unittest.TestCase):
    def setUp(self):
        self.results = index_results(
            [
                GolferResult(golfer_id=1, withdrew=True),
                GolferResult(golfer_id=2, withdrew=True),
                GolferResult(golfer_id=3, to_par=-2, strokes=278, made_cut=True),
                GolferResult(golfer_id=9, to_par=-4, strokes=276, made_cut=True),
                GolferResult(golfer_id=10, withdrew=True, to_par=-1),
            ]
        )

    def test_alternate_covers_only_first_withdrawal(self):
        resolved = resolve_team([1, 2, 3], self.results, penalty=6, alternate_golfer_id=9)
        self.assertEqual([r.score for r in resolved], [-4, 6, -2])
        self.assertTrue(resolved[0].used_alternate)
        self.assertEqual(resolved[0].alternate_golfer_id, 9)
        self.assertEqual(resolved[0].strokes, 276)
        self.assertFalse(resolved[1].used_alternate)
        self.assertTrue(resolved[1].withdrew)

    def test_withdrawn_alternate_is_ignored(self):
        resolved = resolve_team([1, 2, 3], self.results, penalty=6, alternate_golfer_id=10)
        self.assertEqual([r.score for r in resolved], [6, 6, -2])
        self.assertFalse(any(r.used_alternate for r in resolved))

    def test_missing_result_counts_as_withdrawn(self):
        resolved = resolve_team([42, 3], self.results, penalty=3)
        self.assertEqual(resolved[0].score, 3)
        self.assertTrue(resolved[0].withdrew)

    def test_missed_cut_golfer_with_blank_total(self):
        results = index_results(
            [GolferResult(golfer_id=5, to_par=None, made_cut=False, rounds_to_par=(1, 2))]
        )
        resolved = resolve_team([5], results, penalty=99)
        self.assertEqual(resolved[0].score, 6)
        self.assertTrue(resolved[0].missed_cut)
        self.assertFalse(resolved[0].withdrew)

    def test_breakdown_dict_keys(self):
        resolved = resolve_team([3], self.results, penalty=1)
        self.assertEqual(
            resolved[0].as_dict(),
            {
                "golfer_id": 3,
                "score_to_par": -2,
                "strokes": 278,
                "withdrew": False,
                "missed_cut": False,
                "used_alternate": False,
                "alternate_golfer_id": None,
            },
        )


if __name__ == "__main__":
    unittest.main()
