"""Data models for tasks, scheduling policies and task sets."""

from dataclasses import dataclass, field, replace
from enum import Enum
from fractions import Fraction
from typing import Iterable, Iterator, Optional, Sequence, Tuple

from rtfeas.errors import InvalidInputError, PreconditionViolation


@dataclass(frozen=True)
class Task:
    """Represents a periodic task.

    Attributes:
        C: Worst-case execution time (WCET).
        T: Period.
        D: Relative deadline (defaults to T if not specified).
        name: Optional task identifier.

    C > T is accepted on purpose: such a task is reported infeasible by the
    exact tests rather than rejected here.
    """
    C: float
    T: float
    D: Optional[float] = None
    name: str = ""

    def __post_init__(self) -> None:
        """Validate task parameters."""
        # `not x > 0` also rejects NaN
        if not self.C > 0:
            raise InvalidInputError(f"Task {self.name}: C must be positive, got {self.C}")
        if not self.T > 0:
            raise InvalidInputError(f"Task {self.name}: T must be positive, got {self.T}")

        if self.D is None:
            object.__setattr__(self, 'D', self.T)
        elif not self.D > 0:
            raise InvalidInputError(f"Task {self.name}: D must be positive, got {self.D}")

    @property
    def utilization(self) -> float:
        """Return the utilization of this task (C/T)."""
        return self.C / self.T

    def exact(self) -> "Task":
        """Return a copy with Fraction parameters.

        Fraction(float) is exact, so t = l * T divided by T gives back l and
        ceil() never counts a spurious extra job.
        """
        return replace(self, C=Fraction(self.C), T=Fraction(self.T), D=Fraction(self.D))

    def __str__(self) -> str:
        name_str = f"{self.name}: " if self.name else ""
        return f"Task({name_str}C={self.C}, T={self.T}, D={self.D})"


class Policy(Enum):
    """Scheduling policy a task set is analyzed under."""
    RM = "rate-monotonic"
    DM = "deadline-monotonic"
    EDF = "earliest-deadline-first"
    LLF = "least-laxity-first"

    @property
    def is_fixed_priority(self) -> bool:
        return self in (Policy.RM, Policy.DM)

    def ordering_key(self, task: Task) -> float:
        """Return the quantity that orders tasks by priority under this policy.

        Raises:
            PreconditionViolation: For dynamic-priority policies, which have
                no static priority order.
        """
        if self is Policy.RM:
            return task.T
        if self is Policy.DM:
            return task.D
        raise PreconditionViolation(f"{self.value} has no fixed priority order")

    @classmethod
    def parse(cls, value: str) -> "Policy":
        """Look up a policy by name ("RM") or value ("rate-monotonic")."""
        key = str(value).strip()
        for policy in cls:
            if key.upper() == policy.name or key.lower() == policy.value:
                return policy
        raise InvalidInputError(f"Unknown scheduling policy: {value!r}")


@dataclass(frozen=True)
class TaskSet:
    """An immutable sequence of tasks in priority order (index 0 = highest).

    For fixed-priority policies the order must follow the policy's ordering
    key: ascending period for RM, ascending deadline for DM. The analyses
    never re-sort; use TaskSet.ordered() to build a correctly ordered set.

    Attributes:
        tasks: Tasks, highest priority first.
        policy: Scheduling policy the order was chosen for.
        check_order: Validate the order on construction and raise
            PreconditionViolation if it does not match the policy.
    """
    tasks: Tuple[Task, ...] = ()
    policy: Policy = Policy.RM
    check_order: bool = field(default=True, repr=False)

    def __post_init__(self) -> None:
        named = tuple(
            task if task.name else replace(task, name=f"τ{i+1}")
            for i, task in enumerate(self.tasks)
        )
        object.__setattr__(self, 'tasks', named)

        seen = set()
        for task in named:
            if task.name in seen:
                raise InvalidInputError(f"Duplicate task name: {task.name}")
            seen.add(task.name)

        if self.check_order and self.policy.is_fixed_priority:
            self.require_order(self.policy)

    @classmethod
    def ordered(cls, tasks: Iterable[Task], policy: Policy = Policy.RM) -> "TaskSet":
        """Build a task set sorted into the priority order of `policy`.

        The sort is stable, so tasks with equal keys keep their input order.
        Dynamic-priority policies keep the input order unchanged.
        """
        tasks = list(tasks)
        if policy.is_fixed_priority:
            tasks.sort(key=policy.ordering_key)
        return cls(tasks=tuple(tasks), policy=policy)

    @classmethod
    def from_parameters(
        cls,
        periods: Sequence[float],
        wcets: Sequence[float],
        deadlines: Optional[Sequence[float]] = None,
        policy: Policy = Policy.RM,
        check_order: bool = True,
    ) -> "TaskSet":
        """Build a task set from parallel period / WCET / deadline sequences.

        Deadlines default to the periods. Index order is the priority order.
        """
        if deadlines is None:
            deadlines = periods
        if not len(periods) == len(wcets) == len(deadlines):
            raise InvalidInputError(
                f"Parameter lengths differ: {len(periods)} periods, "
                f"{len(wcets)} WCETs, {len(deadlines)} deadlines"
            )
        tasks = tuple(Task(C=c, T=t, D=d) for t, c, d in zip(periods, wcets, deadlines))
        return cls(tasks=tasks, policy=policy, check_order=check_order)

    def is_ordered(self, policy: Policy) -> bool:
        """Return True if the tasks follow the priority order of `policy`."""
        return self._first_misordered(policy) is None

    def require_order(self, policy: Policy) -> None:
        """Raise PreconditionViolation unless tasks follow `policy`'s order."""
        index = self._first_misordered(policy)
        if index is not None:
            hi, lo = self.tasks[index - 1], self.tasks[index]
            raise PreconditionViolation(
                f"Tasks are not in {policy.value} order: {hi.name} "
                f"(key {policy.ordering_key(hi)}) precedes {lo.name} "
                f"(key {policy.ordering_key(lo)})"
            )

    def _first_misordered(self, policy: Policy) -> Optional[int]:
        keys = [policy.ordering_key(t) for t in self.tasks]
        for i in range(1, len(keys)):
            if keys[i] < keys[i - 1]:
                return i
        return None

    def fixed_priority_order(self, policy: Optional[Policy] = None) -> Tuple[Task, ...]:
        """Return the tasks for a fixed-priority analysis under `policy`.

        Defaults to the task set's own policy. Analyzing under a policy other
        than the one the set was built for re-validates the order.
        """
        if policy is None:
            policy = self.policy
        if not policy.is_fixed_priority:
            raise PreconditionViolation(
                f"{policy.value} is not a fixed-priority policy"
            )
        if self.check_order and policy is not self.policy:
            self.require_order(policy)
        return self.tasks

    def higher_priority_tasks(self, index: int) -> Tuple[Task, ...]:
        """Return all tasks with higher priority than the task at `index`."""
        return self.tasks[:index]

    @property
    def total_utilization(self) -> float:
        """Return the total utilization of all tasks."""
        return sum(t.utilization for t in self.tasks)

    def __len__(self) -> int:
        return len(self.tasks)

    def __iter__(self) -> Iterator[Task]:
        return iter(self.tasks)

    def __getitem__(self, index: int) -> Task:
        return self.tasks[index]


def as_input_type(value: Fraction, tasks: Iterable[Task]):
    """Convert an exact result back to the number type the tasks were given in.

    Any float parameter gives a float; all-int parameters give an int when the
    value is integral; anything else stays a Fraction.
    """
    params = [x for t in tasks for x in (t.C, t.T, t.D)]
    if any(isinstance(x, float) for x in params):
        return float(value)
    if value.denominator == 1 and all(isinstance(x, int) for x in params):
        return int(value)
    return value
