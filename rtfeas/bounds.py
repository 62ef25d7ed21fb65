"""Utilization- and demand-based feasibility tests.

These tests compare closed-form quantities against a bound instead of
simulating the schedule:

    RM LUB (Liu & Layland 1973), sufficient for rate-monotonic:
        U = sum_i C_i / T_i  <=  n * (2^(1/n) - 1)

    Utilization threshold, necessary and sufficient for EDF and LLF:
        U <= 1

    Deadline-monotonic quick test, sufficient for deadline-monotonic:
        (C_i + sum_{j < i} ceil(D_i / T_j) * C_j) / D_i <= 1   for every i

A FALSE verdict from a sufficient test does not prove infeasibility; the
exact tests in rtfeas.analysis and rtfeas.scheduling_points are authoritative
for fixed-priority scheduling.
"""

from dataclasses import dataclass
from typing import Iterable, Tuple
import logging
import math

from rtfeas.errors import InvalidInputError
from rtfeas.models import Policy, Task, TaskSet

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UtilizationResult:
    """Outcome of a utilization-bound test.

    Attributes:
        feasible: True if utilization <= bound.
        utilization: Total utilization of the task set.
        bound: The bound it was compared against.
        policy: The policy the bound is valid for.
    """
    feasible: bool
    utilization: float
    bound: float
    policy: Policy


@dataclass(frozen=True)
class DemandRatioResult:
    """Outcome of the deadline-monotonic quick test.

    Attributes:
        feasible: True if every ratio is <= 1.
        ratios: Per-task (C_i + I_i) / D_i in priority order, as floats.
        policy: Always Policy.DM.
    """
    feasible: bool
    ratios: Tuple[float, ...]
    policy: Policy = Policy.DM


def utilization(tasks: Iterable[Task]) -> float:
    """Return sum(C_i / T_i) over `tasks`."""
    return sum(t.utilization for t in tasks)


def liu_layland_bound(n: int) -> float:
    """Return the rate-monotonic least upper bound n * (2^(1/n) - 1).

    Raises:
        InvalidInputError: If n < 1; the bound is undefined for no tasks.
    """
    if n < 1:
        raise InvalidInputError(f"Liu-Layland bound is undefined for n={n}")
    return n * (2 ** (1.0 / n) - 1)


def rm_lub_test(taskset: TaskSet) -> UtilizationResult:
    """Sufficient rate-monotonic test against the Liu-Layland bound.

    Raises:
        InvalidInputError: If the task set is empty.
    """
    if len(taskset) == 0:
        raise InvalidInputError("RM LUB test needs at least one task")

    u = utilization(taskset)
    bound = liu_layland_bound(len(taskset))
    feasible = u <= bound
    logger.info("RM LUB: U=%.4f, LUB(%d)=%.4f -> %s",
                u, len(taskset), bound, "feasible" if feasible else "not proven")
    return UtilizationResult(feasible, u, bound, Policy.RM)


def _dynamic_priority_utilization_test(taskset: TaskSet, policy: Policy) -> UtilizationResult:
    u = utilization(taskset)
    feasible = u <= 1
    logger.info("%s utilization: U=%.4f -> %s",
                policy.name, u, "feasible" if feasible else "infeasible")
    return UtilizationResult(feasible, u, 1.0, policy)


def edf_utilization_test(taskset: TaskSet) -> UtilizationResult:
    """Exact EDF test for implicit-deadline tasks: U <= 1.

    Not valid for fixed-priority scheduling.
    """
    return _dynamic_priority_utilization_test(taskset, Policy.EDF)


def llf_utilization_test(taskset: TaskSet) -> UtilizationResult:
    """Exact LLF test for implicit-deadline tasks: U <= 1.

    Not valid for fixed-priority scheduling.
    """
    return _dynamic_priority_utilization_test(taskset, Policy.LLF)


def dm_quick_test(taskset: TaskSet) -> DemandRatioResult:
    """Sufficient deadline-monotonic test on the normalized demand at D_i.

    Tasks must be in ascending-deadline order; with order checking enabled on
    the task set a different order raises PreconditionViolation.
    """
    tasks = [t.exact() for t in taskset.fixed_priority_order(Policy.DM)]

    ratios = []
    for i, task in enumerate(tasks):
        interference = sum(math.ceil(task.D / hp.T) * hp.C for hp in tasks[:i])
        ratios.append((task.C + interference) / task.D)

    # decided on exact ratios, reported as floats
    feasible = all(r <= 1 for r in ratios)
    ratios = [float(r) for r in ratios]
    logger.info("DM quick test: max ratio %s -> %s",
                max(ratios) if ratios else None,
                "feasible" if feasible else "not proven")
    return DemandRatioResult(feasible, tuple(ratios))
