import unittest

from golfdraft.draft.turns import (
    DRAFT_ROUNDS,
    next_position,
    position_for_pick,
    round_for_pick,
    total_picks,
)


class TestSnakeTurns(unittest.TestCase):
    def test_two_participants_snake(self):
        self.assertEqual(
            [position_for_pick(n, 2) for n in range(1, 7)],
            [1, 2, 2, 1, 1, 2],
        )

    def test_three_participants_snake(self):
        self.assertEqual(
            [position_for_pick(n, 3) for n in range(1, 10)],
            [1, 2, 3, 3, 2, 1, 1, 2, 3],
        )

    def test_rounds_and_totals(self):
        self.assertEqual(DRAFT_ROUNDS, 3)
        self.assertEqual(total_picks(4), 12)
        self.assertEqual(round_for_pick(1, 3), 1)
        self.assertEqual(round_for_pick(3, 3), 1)
        self.assertEqual(round_for_pick(4, 3), 2)
        self.assertEqual(round_for_pick(9, 3), 3)

    def test_next_position(self):
        self.assertEqual(next_position(0, 3), 1)
        self.assertEqual(next_position(3, 3), 3)
        self.assertEqual(next_position(5, 3), 1)
        self.assertIsNone(next_position(9, 3))

    def test_invalid_arguments(self):
        with self.assertRaises(ValueError):
            position_for_pick(0, 3)
        with self.assertRaises(ValueError):
            total_picks(0)
        with self.assertRaises(ValueError):
            next_position(-1, 3)


if __name__ == "__main__":
    unittest.main()
