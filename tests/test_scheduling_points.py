"""Tests for the scheduling-point test."""

import unittest

from rtfeas.errors import PreconditionViolation
from rtfeas.models import Policy, Task, TaskSet
from rtfeas.scheduling_points import (
    SchedulingPoint,
    demand,
    find_scheduling_point,
    scheduling_point_test,
    scheduling_points,
)


class TestSchedulingPoints(unittest.TestCase):

    def test_candidate_points_in_scan_order(self):
        tasks = TaskSet.from_parameters([2, 5, 7], [1, 1, 2]).tasks
        times = [p.time for p in scheduling_points(tasks, 2)]
        # multiples of 2, 5, 7 up to D=7, then D itself
        self.assertEqual(times, [2, 4, 6, 5, 7, 7])

    def test_demand(self):
        tasks = TaskSet.from_parameters([2, 10, 15], [1, 1, 2]).tasks
        # 2 + 1*ceil(6/2) + 1*ceil(6/10)
        self.assertEqual(demand(tasks, 2, 6), 6)

    def test_first_witness(self):
        tasks = TaskSet.from_parameters([2, 10, 15], [1, 1, 2]).tasks
        self.assertEqual(find_scheduling_point(tasks, 2), SchedulingPoint(6, 0, 3))

    def test_no_witness(self):
        tasks = TaskSet.from_parameters([2, 5, 7], [1, 1, 2]).tasks
        self.assertIsNone(find_scheduling_point(tasks, 2))

    def test_deadline_point(self):
        """A deadline shorter than every period is its own scheduling point."""
        tasks = (Task(C=3, T=10, D=5),)
        self.assertEqual(find_scheduling_point(tasks, 0), SchedulingPoint(5, None, None))


class TestSchedulingPointTest(unittest.TestCase):

    def test_feasible_with_witnesses(self):
        result = scheduling_point_test(TaskSet.from_parameters([2, 10, 15], [1, 1, 2]))
        self.assertTrue(result.feasible)
        self.assertEqual(result.witnesses, (
            SchedulingPoint(2, 0, 1),
            SchedulingPoint(2, 0, 1),
            SchedulingPoint(6, 0, 3),
        ))
        self.assertIs(result.policy, Policy.RM)

    def test_harmonic_full_utilization(self):
        result = scheduling_point_test(TaskSet.from_parameters([2, 4, 16], [1, 1, 4]))
        self.assertTrue(result.feasible)
        self.assertEqual(result.witnesses[2], SchedulingPoint(16, 0, 8))

    def test_infeasible(self):
        result = scheduling_point_test(TaskSet.from_parameters([2, 5, 7], [1, 1, 2]))
        self.assertFalse(result.feasible)
        self.assertEqual(result.task_feasible, (True, True, False))

    def test_wcet_exceeding_period(self):
        result = scheduling_point_test(TaskSet(tasks=(Task(C=11, T=10),)))
        self.assertFalse(result.feasible)

    def test_deadline_monotonic(self):
        taskset = TaskSet.from_parameters(
            [2, 5, 7, 13], [1, 1, 1, 2], [2, 3, 7, 15], policy=Policy.DM)
        result = scheduling_point_test(taskset)
        self.assertTrue(result.feasible)
        self.assertEqual(result.witnesses[2], SchedulingPoint(4, 0, 2))
        self.assertEqual(result.witnesses[3], SchedulingPoint(14, 0, 7))
        self.assertIs(result.policy, Policy.DM)

    def test_empty_taskset_feasible(self):
        self.assertTrue(scheduling_point_test(TaskSet()).feasible)

    def test_dynamic_policy_rejected(self):
        with self.assertRaises(PreconditionViolation):
            scheduling_point_test(TaskSet(), policy=Policy.LLF)


if __name__ == "__main__":
    unittest.main()
