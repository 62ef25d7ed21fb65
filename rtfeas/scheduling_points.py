"""Scheduling-point test (Lehoczky, Sha & Ding) for fixed-priority scheduling.

Task i meets its deadline iff the demand of the tasks at or above its
priority can be served by some time t <= D_i:

    W_i(t) = C_i + sum_{j < i} C_j * ceil(t / T_j)  <=  t

W_i only steps up just after a release, so it suffices to check the release
times of higher-or-equal priority tasks, t = l * T_k with k <= i and
1 <= l <= floor(D_i / T_k), and finally D_i itself. For D_i <= T_i the own
term C_i equals C_i * ceil(t / T_i) and this is the textbook sum over j <= i.

The scan runs on Fraction copies of the parameters; witness times come back
in the type the tasks were given in.
"""

from dataclasses import dataclass
from fractions import Fraction
from typing import Iterator, NamedTuple, Optional, Sequence, Tuple
import logging
import math

from rtfeas.models import Policy, Task, TaskSet, as_input_type

logger = logging.getLogger(__name__)


class SchedulingPoint(NamedTuple):
    """A time t at which demand <= supply for one task.

    `task_index` and `multiplier` give t = multiplier * T[task_index]; both
    are None when t is the task's own deadline.
    """
    time: float
    task_index: Optional[int]
    multiplier: Optional[int]


def _points(tasks: Sequence[Task], i: int) -> Iterator[SchedulingPoint]:
    deadline = tasks[i].D
    for k in range(i + 1):
        period = tasks[k].T
        for l in range(1, math.floor(deadline / period) + 1):
            yield SchedulingPoint(l * period, k, l)
    yield SchedulingPoint(deadline, None, None)


def _demand(tasks: Sequence[Task], i: int, t: Fraction) -> Fraction:
    return tasks[i].C + sum(hp.C * math.ceil(t / hp.T) for hp in tasks[:i])


def scheduling_points(tasks: Sequence[Task], i: int) -> Iterator[SchedulingPoint]:
    """Yield the candidate scheduling points of task i in scan order."""
    given = tasks[:i + 1]
    for point in _points([t.exact() for t in given], i):
        yield point._replace(time=as_input_type(point.time, given))


def demand(tasks: Sequence[Task], i: int, t: float) -> float:
    """Return W_i(t), the work released in [0, t) by task i and above."""
    given = tasks[:i + 1]
    exact = [task.exact() for task in given]
    return as_input_type(_demand(exact, i, Fraction(t)), given)


def find_scheduling_point(tasks: Sequence[Task], i: int) -> Optional[SchedulingPoint]:
    """Return the first scheduling point where task i's demand is met.

    Returns None if no point up to D_i satisfies demand <= supply, i.e. the
    task misses its deadline.
    """
    given = tasks[:i + 1]
    # t = l * T_k must divide back to exactly l, which floats do not guarantee
    exact = [t.exact() for t in given]
    for point in _points(exact, i):
        if _demand(exact, i, point.time) <= point.time:
            logger.debug("%s: demand met at t=%s (k=%s, l=%s)",
                         tasks[i].name, point.time, point.task_index, point.multiplier)
            return point._replace(time=as_input_type(point.time, given))
    logger.debug("%s: no scheduling point up to D=%s", tasks[i].name, tasks[i].D)
    return None


@dataclass(frozen=True)
class SchedulingPointResult:
    """Outcome of the scheduling-point test.

    Attributes:
        feasible: True if every task has a witnessing scheduling point.
        witnesses: Per-task first point with demand <= supply, None if none.
        policy: Fixed-priority policy the task order was analyzed under.
    """
    feasible: bool
    witnesses: Tuple[Optional[SchedulingPoint], ...]
    policy: Policy

    @property
    def task_feasible(self) -> Tuple[bool, ...]:
        return tuple(w is not None for w in self.witnesses)


def scheduling_point_test(taskset: TaskSet, policy: Optional[Policy] = None) -> SchedulingPointResult:
    """Exact fixed-priority feasibility test by scheduling-point enumeration.

    Raises:
        PreconditionViolation: If the policy is dynamic-priority or the
            task order does not match it.
    """
    if policy is None:
        policy = taskset.policy
    tasks = taskset.fixed_priority_order(policy)

    witnesses = tuple(find_scheduling_point(tasks, i) for i in range(len(tasks)))
    feasible = all(w is not None for w in witnesses)
    logger.info("Scheduling-point test (%s): %s", policy.name,
                "feasible" if feasible else "infeasible")
    return SchedulingPointResult(feasible, witnesses, policy)
