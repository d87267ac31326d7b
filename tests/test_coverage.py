#!/usr/bin/env python3

import unittest

from wordbomb.config.engine_params import parse_goal_spec
from wordbomb.core.coverage import CoverageTracker, coverage_score, letter_index, letter_occurrences


def idx(letter):
    return letter_index(letter)


def targets_with(**overrides):
    targets = [1] * 26
    for letter, value in overrides.items():
        targets[idx(letter)] = value
    return targets


class TestCoverageScore(unittest.TestCase):
    def test_letter_occurrences_ignores_non_letters(self):
        counts = letter_occurrences("Ab-c'a")
        self.assertEqual({idx('a'): 2, idx('b'): 1, idx('c'): 1}, dict(counts))

    def test_each_needed_letter_gets_completion_bonus(self):
        # b, u and z each finish their goal of one: 1 + 1 bonus apiece
        self.assertEqual(6, coverage_score("buzz", [0] * 26, [1] * 26, [1.0] * 26))

    def test_zero_target_letters_never_contribute(self):
        targets = targets_with(x=0, z=0)
        self.assertEqual(4, coverage_score("buzz", [0] * 26, targets, [1.0] * 26))
        self.assertEqual(0, coverage_score("zzz", [0] * 26, targets, [1.0] * 26))

    def test_completed_letters_do_not_contribute(self):
        counts = [0] * 26
        counts[idx('b')] = 1
        self.assertEqual(4, coverage_score("buzz", counts, [1] * 26, [1.0] * 26))

    def test_partial_progress_without_bonus(self):
        targets = targets_with(a=3)
        # a: 3 of 3 needed plus bonus; b: 1 plus bonus; n: 1 of 2 occurrences plus bonus
        self.assertEqual(8, coverage_score("banana", [0] * 26, targets, [1.0] * 26))
        targets = targets_with(a=5)
        # a only reaches 3 of 5, no bonus
        self.assertEqual(7, coverage_score("banana", [0] * 26, targets, [1.0] * 26))

    def test_weights_scale_contribution_and_bonus(self):
        weights = [1.0] * 26
        weights[idx('q')] = 5.0
        self.assertEqual(16, coverage_score("quiz", [0] * 26, [1] * 26, weights))


class TestCoverageTracker(unittest.TestCase):
    def setUp(self):
        self.changes = []
        self.tracker = CoverageTracker(on_change=self.changes.append)

    def test_defaults(self):
        self.assertEqual([0] * 26, self.tracker.counts)
        self.assertEqual([1] * 26, self.tracker.targets)
        self.assertFalse(self.tracker.is_complete())

    def test_apply_clamps_to_target(self):
        self.tracker.set_targets(targets_with(x=0, z=0))
        self.assertFalse(self.tracker.apply("buzz"))
        self.assertEqual(1, self.tracker.counts[idx('u')])
        self.assertEqual(1, self.tracker.counts[idx('b')])
        self.assertEqual(0, self.tracker.counts[idx('z')])

    def test_apply_never_exceeds_target(self):
        self.tracker.apply("aaaa")
        self.assertEqual(1, self.tracker.counts[idx('a')])

    def test_completion_resets_counts_but_keeps_targets(self):
        targets = [0] * 26
        targets[idx('a')] = 1
        targets[idx('b')] = 2
        self.tracker.set_targets(targets)

        self.assertFalse(self.tracker.apply("ab"))
        self.assertEqual(1, self.tracker.counts[idx('b')])
        self.assertTrue(self.tracker.apply("bob"))
        self.assertEqual([0] * 26, self.tracker.counts)
        self.assertEqual(targets, self.tracker.targets)

    def test_all_zero_targets_never_complete(self):
        self.tracker.set_targets([0] * 26)
        self.assertFalse(self.tracker.apply("abcdefghijklmnopqrstuvwxyz"))
        self.assertEqual([0] * 26, self.tracker.counts)

    def test_manual_edit_does_not_reset_cycle(self):
        targets = [0] * 26
        targets[idx('a')] = 1
        self.tracker.set_targets(targets)
        self.tracker.set_count(idx('a'), 1)
        self.assertTrue(self.tracker.is_complete())
        self.assertEqual(1, self.tracker.counts[idx('a')])

    def test_set_count_clamps(self):
        self.tracker.set_count(idx('a'), 500)
        self.assertEqual(1, self.tracker.counts[idx('a')])
        self.tracker.set_count(idx('a'), -4)
        self.assertEqual(0, self.tracker.counts[idx('a')])
        self.tracker.set_count(idx('a'), "junk")
        self.assertEqual(0, self.tracker.counts[idx('a')])

    def test_set_target_clamps_and_pulls_count_down(self):
        self.tracker.set_target(idx('e'), 500)
        self.assertEqual(99, self.tracker.targets[idx('e')])
        self.tracker.set_count(idx('e'), 3)
        self.tracker.adjust_target(idx('e'), -97)
        self.assertEqual(2, self.tracker.targets[idx('e')])
        self.assertEqual(2, self.tracker.counts[idx('e')])
        self.tracker.set_target(idx('e'), -1)
        self.assertEqual(0, self.tracker.targets[idx('e')])
        self.assertEqual(0, self.tracker.counts[idx('e')])

    def test_adjust_count(self):
        self.tracker.set_target(idx('s'), 3)
        self.tracker.adjust_count(idx('s'), 2)
        self.tracker.adjust_count(idx('s'), 2)
        self.assertEqual(3, self.tracker.counts[idx('s')])

    def test_missing_letters(self):
        self.tracker.set_targets(parse_goal_spec("majority0 a2 b1"))
        self.tracker.apply("a")
        self.assertEqual({'a': 1, 'b': 1}, self.tracker.missing_letters())

    def test_on_change_fires_for_mutations(self):
        self.tracker.apply("cat")
        self.tracker.reset()
        self.tracker.set_target(0, 2)
        self.assertEqual(3, len(self.changes))
        self.assertIs(self.tracker, self.changes[-1])

    def test_short_target_list_is_padded(self):
        self.tracker.set_targets([3, 3])
        self.assertEqual([3, 3] + [1] * 24, self.tracker.targets)

    def test_str_lists_positive_goals(self):
        self.tracker.set_targets(parse_goal_spec("majority0 q2"))
        self.tracker.apply("q")
        self.assertEqual("q1/2", str(self.tracker))


if __name__ == '__main__':
    unittest.main()
