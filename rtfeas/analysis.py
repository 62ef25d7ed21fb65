"""Response-time (completion-time) analysis for fixed-priority scheduling.

This module implements the exact worst-case response-time test of Joseph and
Pandya for fixed-priority preemptive scheduling on a single processor.

RTA Formula (no jitter, no blocking):
    a^(0)   = sum_{j <= i} C_j
    a^(k+1) = C_i + sum_{j in hp(i)} ceil(a^(k) / T_j) * C_j

where:
    - C_i is the worst-case execution time of task i
    - hp(i) is the set of tasks with higher priority than task i
    - T_j is the period of task j

The iteration stops at the first of:
    1. Convergence: a^(k+1) = a^(k), which is R_i
    2. Deadline miss: a^(k) > D_i (the sequence never decreases)
    3. max_iterations reached (reported as infeasible)

The same analysis serves rate-monotonic and deadline-monotonic priorities;
only the order of the task set differs (ascending T or ascending D). With
deadlines beyond the period only the first job is analyzed.

Parameters are converted to Fraction before iterating, and results come back
in the type the tasks were given in.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Sequence, Tuple
import logging
import math

from rtfeas.models import Policy, Task, TaskSet, as_input_type

logger = logging.getLogger(__name__)

DEFAULT_MAX_ITERATIONS = 1000


def compute_response_time(
    task: Task,
    higher_priority_tasks: Sequence[Task],
    max_iterations: int = DEFAULT_MAX_ITERATIONS
) -> Optional[float]:
    """Compute the worst-case response time for a task using iterative RTA.

    Args:
        task: The task to analyze.
        higher_priority_tasks: Tasks with higher priority than task.
        max_iterations: Maximum number of iterations before giving up.

    Returns:
        The worst-case response time if it converges and is <= D,
        None if the task is unschedulable (R > D or doesn't converge).
    """
    given = (task, *higher_priority_tasks)
    # Iterate on exact values; floats would let ceil() round up a whole job
    task = task.exact()
    higher_priority_tasks = [hp_task.exact() for hp_task in higher_priority_tasks]

    # Everyone at or above this priority releases at the critical instant
    R_prev = task.C + sum(hp_task.C for hp_task in higher_priority_tasks)

    for iteration in range(max_iterations):
        if R_prev > task.D:
            logger.debug("%s: a=%s exceeds D=%s after %d iterations",
                         task.name, R_prev, task.D, iteration)
            return None

        interference = 0
        for hp_task in higher_priority_tasks:
            # Number of times hp_task can preempt during R_prev
            interference += math.ceil(R_prev / hp_task.T) * hp_task.C

        R_new = task.C + interference

        # ceil() makes the recurrence piecewise constant, so exact equality is
        # reached once the preemption counts stop changing.
        if R_new == R_prev:
            logger.debug("%s: converged to R=%s after %d iterations",
                         task.name, R_new, iteration + 1)
            return as_input_type(R_new, given)

        R_prev = R_new

    logger.warning("%s: response time did not converge within %d iterations; "
                   "treating as infeasible", task.name, max_iterations)
    return None


def is_schedulable(
    task: Task,
    higher_priority_tasks: Sequence[Task],
    max_iterations: int = DEFAULT_MAX_ITERATIONS
) -> bool:
    """Check if a task is schedulable given higher-priority tasks.

    A task is schedulable if its worst-case response time is less than
    or equal to its deadline.
    """
    response_time = compute_response_time(task, higher_priority_tasks, max_iterations)
    return response_time is not None


@dataclass(frozen=True)
class ResponseTimeResult:
    """Outcome of the response-time test.

    Attributes:
        feasible: True if every task meets its deadline.
        response_times: Per-task worst-case response time in priority order,
            None where the task misses its deadline or did not converge.
        policy: Fixed-priority policy the task order was analyzed under.
    """
    feasible: bool
    response_times: Tuple[Optional[float], ...]
    policy: Policy

    @property
    def task_feasible(self) -> Tuple[bool, ...]:
        return tuple(r is not None for r in self.response_times)


def response_time_test(
    taskset: TaskSet,
    policy: Optional[Policy] = None,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
) -> ResponseTimeResult:
    """Exact fixed-priority feasibility test by response-time analysis.

    Args:
        taskset: Tasks in priority order.
        policy: RM or DM; defaults to the task set's policy. A policy other
            than the task set's re-validates the order.
        max_iterations: Per-task cap on the fixed-point iteration.

    Raises:
        PreconditionViolation: If the policy is dynamic-priority or the
            task order does not match it.
    """
    if policy is None:
        policy = taskset.policy
    tasks = taskset.fixed_priority_order(policy)

    response_times = tuple(
        compute_response_time(task, tasks[:i], max_iterations)
        for i, task in enumerate(tasks)
    )
    feasible = all(r is not None for r in response_times)
    logger.info("Response-time test (%s): %s", policy.name,
                "feasible" if feasible else "infeasible")
    return ResponseTimeResult(feasible, response_times, policy)


def analyze_taskset(taskset: TaskSet) -> Tuple[bool, Dict[str, Optional[float]]]:
    """Analyze the schedulability of an entire task set.

    Returns:
        A tuple of (schedulable, response_times) where response_times maps
        task names to their response times (None if unschedulable).
        Names are unique within a TaskSet, so no entry is lost.
    """
    result = response_time_test(taskset)
    response_times = {
        task.name: rt for task, rt in zip(taskset, result.response_times)
    }
    return result.feasible, response_times
