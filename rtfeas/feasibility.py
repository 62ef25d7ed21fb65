"""Run several feasibility tests on one task set and collect the verdicts.

Each test runs on its own: an AnalysisError raised by one (for example the
RM LUB test on an empty set) is logged and recorded, and the remaining tests
still run.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, Optional
import logging

from rtfeas.analysis import response_time_test
from rtfeas.bounds import dm_quick_test, edf_utilization_test, llf_utilization_test, rm_lub_test
from rtfeas.config import AnalysisConfig
from rtfeas.errors import AnalysisError, InvalidInputError
from rtfeas.models import Policy, TaskSet
from rtfeas.scheduling_points import scheduling_point_test

logger = logging.getLogger(__name__)

RESPONSE_TIME = "response_time"
SCHEDULING_POINT = "scheduling_point"
RM_LUB = "rm_lub"
EDF_UTILIZATION = "edf_utilization"
LLF_UTILIZATION = "llf_utilization"
DM_QUICK = "dm_quick"

EXACT_TESTS = (RESPONSE_TIME, SCHEDULING_POINT)

# Tests that apply to each policy when the caller does not choose
DEFAULT_TESTS = {
    Policy.RM: (RESPONSE_TIME, SCHEDULING_POINT, RM_LUB),
    Policy.DM: (RESPONSE_TIME, SCHEDULING_POINT, DM_QUICK),
    Policy.EDF: (EDF_UTILIZATION,),
    Policy.LLF: (LLF_UTILIZATION,),
}


def _tests(config: AnalysisConfig) -> Dict[str, Callable[[TaskSet], Any]]:
    return {
        RESPONSE_TIME: lambda ts: response_time_test(ts, max_iterations=config.max_iterations),
        SCHEDULING_POINT: scheduling_point_test,
        RM_LUB: rm_lub_test,
        EDF_UTILIZATION: edf_utilization_test,
        LLF_UTILIZATION: llf_utilization_test,
        DM_QUICK: dm_quick_test,
    }


@dataclass
class FeasibilityReport:
    """Results of several tests on one task set.

    Attributes:
        results: Result object per test that completed.
        errors: Error per test that raised.
    """
    results: Dict[str, Any] = field(default_factory=dict)
    errors: Dict[str, AnalysisError] = field(default_factory=dict)

    @property
    def verdicts(self) -> Dict[str, Optional[bool]]:
        """Feasibility per test; None for tests that raised."""
        verdicts: Dict[str, Optional[bool]] = {name: None for name in self.errors}
        verdicts.update((name, r.feasible) for name, r in self.results.items())
        return verdicts

    @property
    def exact_tests_agree(self) -> Optional[bool]:
        """Whether both exact tests reached the same per-task verdicts.

        None unless both exact tests completed.
        """
        if not all(name in self.results for name in EXACT_TESTS):
            return None
        rt = self.results[RESPONSE_TIME]
        sp = self.results[SCHEDULING_POINT]
        return rt.task_feasible == sp.task_feasible


def check_feasibility(
    taskset: TaskSet,
    tests: Optional[Iterable[str]] = None,
    config: Optional[AnalysisConfig] = None,
) -> FeasibilityReport:
    """Run `tests` (default: those that apply to the set's policy) on `taskset`.

    Raises:
        InvalidInputError: If a test name is unknown.
    """
    config = config or AnalysisConfig()
    available = _tests(config)
    names = tuple(tests) if tests is not None else DEFAULT_TESTS[taskset.policy]
    unknown = [name for name in names if name not in available]
    if unknown:
        raise InvalidInputError(f"Unknown feasibility tests: {unknown}")

    report = FeasibilityReport()
    for name in names:
        try:
            report.results[name] = available[name](taskset)
        except AnalysisError as e:
            logger.info("%s not evaluated: %s", name, e)
            report.errors[name] = e
    return report
