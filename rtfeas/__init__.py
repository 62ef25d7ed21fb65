"""rtfeas: feasibility tests for periodic tasks on a single processor.

This package decides offline whether independent periodic tasks sharing one
core meet all deadlines under rate-monotonic, deadline-monotonic, EDF or LLF
scheduling, using exact (response-time, scheduling-point) and sufficient
(utilization bound, deadline-monotonic quick) tests.
"""

from rtfeas.errors import AnalysisError, InvalidInputError, PreconditionViolation
from rtfeas.models import Policy, Task, TaskSet
from rtfeas.analysis import compute_response_time, is_schedulable, analyze_taskset, response_time_test
from rtfeas.scheduling_points import SchedulingPoint, scheduling_point_test
from rtfeas.bounds import (
    dm_quick_test,
    edf_utilization_test,
    liu_layland_bound,
    llf_utilization_test,
    rm_lub_test,
)
from rtfeas.feasibility import FeasibilityReport, check_feasibility

__version__ = "0.2.0"
__all__ = [
    "AnalysisError",
    "InvalidInputError",
    "PreconditionViolation",
    "Policy",
    "Task",
    "TaskSet",
    "compute_response_time",
    "is_schedulable",
    "analyze_taskset",
    "response_time_test",
    "SchedulingPoint",
    "scheduling_point_test",
    "liu_layland_bound",
    "rm_lub_test",
    "edf_utilization_test",
    "llf_utilization_test",
    "dm_quick_test",
    "FeasibilityReport",
    "check_feasibility",
]
