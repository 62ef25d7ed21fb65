"""UUniFast-based random tests for the feasibility tests."""

import unittest
from fractions import Fraction

from rtfeas.analysis import analyze_taskset, response_time_test
from rtfeas.bounds import dm_quick_test, edf_utilization_test, rm_lub_test
from rtfeas.generators import generate_taskset, uunifast
from rtfeas.models import Policy, Task, TaskSet
from rtfeas.scheduling_points import scheduling_point_test


def exact(taskset):
    """Copy a generated task set with Fraction parameters.

    Fraction(float) is exact, so the analyses compare the same real numbers
    without rounding in ceil(t / T).
    """
    tasks = tuple(
        Task(C=Fraction(t.C), T=Fraction(t.T), D=Fraction(t.D), name=t.name)
        for t in taskset
    )
    return TaskSet(tasks=tasks, policy=taskset.policy)


class TestUUniFast(unittest.TestCase):
    """Test UUniFast utilization generation."""

    def test_uunifast_sum(self):
        utilizations = uunifast(5, 0.7, seed=42)
        self.assertEqual(len(utilizations), 5)
        self.assertAlmostEqual(sum(utilizations), 0.7, places=6)

    def test_uunifast_all_positive(self):
        for u in uunifast(10, 0.8, seed=123):
            self.assertGreaterEqual(u, 0.0)

    def test_uunifast_reproducibility(self):
        self.assertEqual(uunifast(5, 0.6, seed=999), uunifast(5, 0.6, seed=999))

    def test_uunifast_invalid_n(self):
        with self.assertRaises(ValueError):
            uunifast(0, 0.5)

    def test_uunifast_invalid_utilization(self):
        with self.assertRaises(ValueError):
            uunifast(5, -0.1)


class TestTaskSetGenerator(unittest.TestCase):
    """Test random task set generation."""

    def test_generate_taskset_count(self):
        self.assertEqual(len(generate_taskset(7, 0.6, seed=42)), 7)

    def test_generate_taskset_utilization(self):
        taskset = generate_taskset(10, 0.75, seed=123)
        self.assertAlmostEqual(taskset.total_utilization, 0.75, places=2)

    def test_generate_taskset_periods_in_range(self):
        taskset = generate_taskset(5, 0.5, period_min=50.0, period_max=500.0, seed=456)
        for task in taskset:
            self.assertGreaterEqual(task.T, 50.0)
            self.assertLessEqual(task.T, 500.0)

    def test_generate_taskset_priority_order(self):
        self.assertTrue(generate_taskset(8, 0.8, seed=789).is_ordered(Policy.RM))
        dm = generate_taskset(8, 0.8, deadline_factor_min=0.5, policy=Policy.DM, seed=789)
        self.assertTrue(dm.is_ordered(Policy.DM))
        for task in dm:
            self.assertLessEqual(task.D, task.T)
            self.assertGreaterEqual(task.D, 0.5 * task.T)

    def test_generate_taskset_reproducibility(self):
        self.assertEqual(generate_taskset(5, 0.6, seed=111), generate_taskset(5, 0.6, seed=111))

    def test_invalid_deadline_factor(self):
        with self.assertRaises(ValueError):
            generate_taskset(3, 0.5, deadline_factor_max=1.5)


class TestRandomRelations(unittest.TestCase):
    """Relations between the tests on randomly generated task sets."""

    MAX_ITERATIONS = 10**6

    def test_exact_tests_agree_rm(self):
        for i in range(30):
            u = 0.6 + 0.4 * (i % 10) / 10
            taskset = exact(generate_taskset(5, u, period_min=10, period_max=100, seed=6000 + i))
            rt = response_time_test(taskset, max_iterations=self.MAX_ITERATIONS)
            sp = scheduling_point_test(taskset)
            self.assertEqual(rt.task_feasible, sp.task_feasible, f"seed {6000 + i}")

    def test_exact_tests_agree_dm(self):
        for i in range(30):
            u = 0.5 + 0.5 * (i % 10) / 10
            generated = generate_taskset(5, u, period_min=10, period_max=100,
                                         deadline_factor_min=0.4, policy=Policy.DM,
                                         seed=7000 + i)
            taskset = exact(generated)
            rt = response_time_test(taskset, max_iterations=self.MAX_ITERATIONS)
            sp = scheduling_point_test(taskset)
            self.assertEqual(rt.task_feasible, sp.task_feasible, f"seed {7000 + i}")

    def test_exact_tests_agree_on_generated_floats(self):
        # generated parameters are passed through as floats
        for i in range(30):
            u = 0.6 + 0.4 * (i % 10) / 10
            for policy, factor in ((Policy.RM, 1.0), (Policy.DM, 0.4)):
                taskset = generate_taskset(5, u, period_min=10, period_max=100,
                                           deadline_factor_min=factor, policy=policy,
                                           seed=9000 + i)
                rt = response_time_test(taskset, max_iterations=self.MAX_ITERATIONS)
                sp = scheduling_point_test(taskset)
                self.assertEqual(rt.task_feasible, sp.task_feasible,
                                 f"{policy.name} seed {9000 + i}")

    def test_sufficient_tests_are_sound(self):
        for i in range(30):
            u = 0.5 + 0.5 * (i % 10) / 10
            rm = exact(generate_taskset(4, u, period_min=10, period_max=100, seed=8000 + i))
            if rm_lub_test(rm).feasible:
                self.assertTrue(response_time_test(rm).feasible, f"seed {8000 + i}")

            dm = exact(generate_taskset(4, u, period_min=10, period_max=100,
                                        deadline_factor_min=0.5, policy=Policy.DM,
                                        seed=8000 + i))
            if dm_quick_test(dm).feasible:
                self.assertTrue(response_time_test(dm).feasible, f"seed {8000 + i}")

    def test_exact_accepts_whatever_rm_lub_accepts(self):
        # U = 0.6 is below LUB(n) for every n
        for i in range(10):
            taskset = generate_taskset(6, 0.6, seed=5000 + i)
            self.assertTrue(rm_lub_test(taskset).feasible)
            schedulable, response_times = analyze_taskset(taskset)
            self.assertTrue(schedulable)
            for task in taskset:
                self.assertGreaterEqual(response_times[task.name], task.C)
                self.assertLessEqual(response_times[task.name], task.D)

    def test_over_utilization_infeasible(self):
        for i in range(10):
            taskset = generate_taskset(5, 1.2, seed=3000 + i)
            self.assertFalse(edf_utilization_test(taskset).feasible)
            self.assertFalse(response_time_test(taskset).feasible)

    def test_single_task_response_time_is_wcet(self):
        for i in range(10):
            taskset = generate_taskset(1, 0.9, seed=4000 + i)
            result = response_time_test(taskset)
            self.assertTrue(result.feasible)
            self.assertEqual(result.response_times[0], taskset[0].C)


class TestSchedulabilityExperiment(unittest.TestCase):
    """Test the acceptance vs utilisation experiment."""

    def test_experiment_smoke(self):
        """Smoke test with a reduced configuration."""
        try:
            from experiments.sched_util_plot import run_schedulability_experiment
        except ImportError:
            self.skipTest("experiments.sched_util_plot not available")

        utilisation_points = [0.3, 0.5, 0.7]
        results = run_schedulability_experiment(
            utilisation_points=utilisation_points,
            num_task_sets_per_point=10,
            num_tasks=3,
            min_period=10.0,
            max_period=100.0,
            seed=12345,
        )

        self.assertEqual(sorted(results), utilisation_points)
        for u, ratios in results.items():
            self.assertEqual(set(ratios), {"response_time", "scheduling_point", "rm_lub"})
            for name, ratio in ratios.items():
                self.assertGreaterEqual(ratio, 0.0, f"Invalid ratio {ratio} for {name} at U={u}")
                self.assertLessEqual(ratio, 1.0, f"Invalid ratio {ratio} for {name} at U={u}")
            # the sufficient bound never accepts more than the exact test
            self.assertLessEqual(ratios["rm_lub"], ratios["response_time"])


if __name__ == "__main__":
    unittest.main()
