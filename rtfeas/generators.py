"""Task set generators for testing and experiments."""

import random
from typing import List, Optional
import math

from rtfeas.models import Policy, Task, TaskSet


def uunifast(n: int, u_total: float, seed: Optional[int] = None) -> List[float]:
    """Generate task utilizations using the UUniFast algorithm.

    UUniFast generates uniformly distributed task utilizations that sum to
    the target total utilization.

    Reference:
    Bini, E., & Buttazzo, G. C. (2005). Measuring the performance of schedulability tests.
    Real-Time Systems, 30(1-2), 129-154.

    Raises:
        ValueError: If n <= 0 or u_total < 0.
    """
    if n <= 0:
        raise ValueError("Number of tasks must be positive")
    if u_total < 0:
        raise ValueError("Target utilization must be non-negative")

    rng = random.Random(seed)

    utilizations = []
    sum_u = u_total

    for i in range(1, n):
        next_sum_u = sum_u * (rng.random() ** (1.0 / (n - i)))
        utilizations.append(sum_u - next_sum_u)
        sum_u = next_sum_u

    # Last utilization is whatever remains
    utilizations.append(sum_u)

    return utilizations


def generate_taskset(
    n: int,
    target_utilization: float,
    period_min: float = 10.0,
    period_max: float = 1000.0,
    deadline_factor_min: float = 1.0,
    deadline_factor_max: float = 1.0,
    policy: Policy = Policy.RM,
    seed: Optional[int] = None
) -> TaskSet:
    """Generate a random task set using UUniFast for utilization distribution.

    Periods are log-uniform in [period_min, period_max], deadlines are
    T * U(deadline_factor_min, deadline_factor_max), and the result is sorted
    into the priority order of `policy`.

    Args:
        n: Number of tasks to generate.
        target_utilization: Target total utilization.
        period_min: Minimum task period.
        period_max: Maximum task period.
        deadline_factor_min: Minimum ratio D/T (1.0 means D=T).
        deadline_factor_max: Maximum ratio D/T (1.0 means D=T).
        policy: Policy whose priority order the tasks are sorted into.
        seed: Random seed for reproducibility.

    Raises:
        ValueError: If parameters are invalid.
    """
    if period_min <= 0 or period_max <= 0 or period_min > period_max:
        raise ValueError("Invalid period range")
    if deadline_factor_min <= 0 or deadline_factor_max < deadline_factor_min:
        raise ValueError("Invalid deadline factor range")
    if deadline_factor_max > 1.0:
        raise ValueError("Deadline factor cannot exceed 1.0 (D must be <= T)")

    rng = random.Random(seed)

    # UUniFast draws from its own generator seeded the same way
    utilizations = uunifast(n, target_utilization, seed=seed)

    log_min = math.log(period_min)
    log_max = math.log(period_max)

    tasks = []
    for i, u in enumerate(utilizations):
        T = math.exp(rng.uniform(log_min, log_max))
        # UUniFast can hand out a zero share; keep C strictly positive
        C = max(u * T, 1e-6)

        if deadline_factor_min == deadline_factor_max:
            deadline_factor = deadline_factor_min
        else:
            deadline_factor = rng.uniform(deadline_factor_min, deadline_factor_max)
        D = T * deadline_factor

        tasks.append(Task(C=C, T=T, D=D, name=f"τ{i+1}"))

    return TaskSet.ordered(tasks, policy)
