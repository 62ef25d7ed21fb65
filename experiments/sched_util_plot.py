"""Acceptance Ratio vs Utilisation Experiment.

Generates random task sets at various utilisation levels using UUniFast,
runs each feasibility test on them, and plots the fraction of task sets each
test accepts as a function of utilisation. The gap between the exact tests
and the RM LUB / DM quick test shows how pessimistic the sufficient tests are.
"""

from pathlib import Path
from typing import Dict, Sequence

import matplotlib
matplotlib.use('Agg')  # Non-interactive backend
import matplotlib.pyplot as plt

from rtfeas.feasibility import DEFAULT_TESTS, check_feasibility
from rtfeas.generators import generate_taskset
from rtfeas.models import Policy


def run_schedulability_experiment(
    utilisation_points: Sequence[float],
    num_task_sets_per_point: int = 100,
    num_tasks: int = 5,
    min_period: float = 10.0,
    max_period: float = 1000.0,
    policy: Policy = Policy.RM,
    deadline_factor_min: float = 1.0,
    seed: int = 42,
) -> Dict[float, Dict[str, float]]:
    """Run the acceptance experiment across utilisation levels.

    Args:
        utilisation_points: Utilisation values to test (e.g. [0.1, ..., 0.9]).
        num_task_sets_per_point: Number of random task sets per utilisation.
        num_tasks: Number of tasks per task set.
        min_period: Minimum task period.
        max_period: Maximum task period.
        policy: Policy to order the task sets for; selects the tests run.
        deadline_factor_min: Lower bound of D/T (1.0 means implicit deadlines).
        seed: Base random seed (varied per task set).

    Returns:
        Mapping utilisation -> {test name: acceptance ratio}.
    """
    tests = DEFAULT_TESTS[policy]
    results = {}

    for u_total in utilisation_points:
        accepted = {name: 0 for name in tests}

        for i in range(num_task_sets_per_point):
            task_set_seed = seed + int(u_total * 1000) + i

            taskset = generate_taskset(
                n=num_tasks,
                target_utilization=u_total,
                period_min=min_period,
                period_max=max_period,
                deadline_factor_min=deadline_factor_min,
                policy=policy,
                seed=task_set_seed,
            )

            report = check_feasibility(taskset, tests)
            for name, verdict in report.verdicts.items():
                if verdict:
                    accepted[name] += 1

        results[u_total] = {
            name: count / num_task_sets_per_point for name, count in accepted.items()
        }

    return results


def plot_schedulability_vs_utilisation(
    results: Dict[float, Dict[str, float]],
    output_path: str = "results/acceptance_vs_utilisation.png",
) -> None:
    """Plot one acceptance-ratio curve per test and save it to output_path."""
    output_dir = Path(output_path).parent
    output_dir.mkdir(parents=True, exist_ok=True)

    utilisations = sorted(results.keys())
    test_names = sorted({name for ratios in results.values() for name in ratios})

    plt.figure(figsize=(10, 6))
    for name in test_names:
        ratios = [results[u].get(name, 0.0) for u in utilisations]
        plt.plot(utilisations, ratios, 'o-', linewidth=2, markersize=6, label=name)
    plt.xlabel('Total Utilisation', fontsize=12)
    plt.ylabel('Acceptance Ratio', fontsize=12)
    plt.title('Acceptance Ratio vs Utilisation', fontsize=14)
    plt.grid(True, alpha=0.3)
    plt.legend()
    plt.xlim(0, 1.0)
    plt.ylim(0, 1.05)

    plt.savefig(output_path, dpi=150, bbox_inches='tight')
    plt.close()

    print(f"Plot saved to {output_path}")


def main():
    """Run the full acceptance vs utilisation experiment."""
    print("Running acceptance vs utilisation experiment...")

    utilisation_points = [u / 20.0 for u in range(1, 20)]  # 0.05, 0.10, ..., 0.95

    results = run_schedulability_experiment(
        utilisation_points=utilisation_points,
        num_task_sets_per_point=150,
        num_tasks=5,
        min_period=10.0,
        max_period=1000.0,
        seed=42,
    )

    print("\nResults:")
    for u, ratios in sorted(results.items()):
        cells = ", ".join(f"{name}={ratio:.3f}" for name, ratio in sorted(ratios.items()))
        print(f"  U = {u:.2f}: {cells}")

    plot_schedulability_vs_utilisation(results)

    print("\nExperiment complete!")


if __name__ == "__main__":
    main()
