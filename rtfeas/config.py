"""YAML configuration and task-set files.

A single YAML document may carry both sections:

    analysis:
      max_iterations: 500
      check_order: true
      log_level: INFO

    tasksets:
      ex0:
        policy: RM
        tasks:
          - {C: 1, T: 2}
          - {C: 1, T: 10}
          - {C: 2, T: 15}
      dm_example:
        policy: DM
        sort: true
        tasks:
          - {C: 2, T: 13, D: 15, name: logger}
          - {C: 1, T: 2}
"""

from dataclasses import dataclass, fields
from typing import Any, Dict, Optional
import logging

import yaml  # pip install pyyaml

from rtfeas.analysis import DEFAULT_MAX_ITERATIONS
from rtfeas.errors import InvalidInputError
from rtfeas.models import Policy, Task, TaskSet

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalysisConfig:
    """Settings shared by the analyses.

    Attributes:
        max_iterations: Per-task cap on the response-time iteration.
        check_order: Validate priority order when building task sets.
        log_level: Level for the "rtfeas" logger.
    """
    max_iterations: int = DEFAULT_MAX_ITERATIONS
    check_order: bool = True
    log_level: str = "WARNING"

    def __post_init__(self) -> None:
        if not isinstance(self.max_iterations, int) or self.max_iterations < 1:
            raise InvalidInputError(
                f"max_iterations must be a positive integer, got {self.max_iterations!r}"
            )
        if not isinstance(logging.getLevelName(str(self.log_level).upper()), int):
            raise InvalidInputError(f"Unknown log level: {self.log_level!r}")


def _load_yaml(path: str) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise InvalidInputError(f"{path}: not valid YAML: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InvalidInputError(f"{path}: expected a mapping at top level")
    return data


def config_from_dict(data: Optional[Dict[str, Any]]) -> AnalysisConfig:
    """Build an AnalysisConfig from the `analysis` mapping of a config file."""
    if not data:
        return AnalysisConfig()
    if not isinstance(data, dict):
        raise InvalidInputError("'analysis' must be a mapping")
    known = {f.name for f in fields(AnalysisConfig)}
    unknown = set(data) - known
    if unknown:
        raise InvalidInputError(f"Unknown analysis options: {sorted(unknown)}")
    return AnalysisConfig(**data)


def load_config(path: str) -> AnalysisConfig:
    """Load the `analysis` section of a YAML file."""
    return config_from_dict(_load_yaml(path).get("analysis"))


def task_from_dict(data: Dict[str, Any]) -> Task:
    if not isinstance(data, dict):
        raise InvalidInputError(f"Task entry must be a mapping, got {data!r}")
    try:
        return Task(C=data["C"], T=data["T"], D=data.get("D"), name=str(data.get("name", "")))
    except KeyError as e:
        raise InvalidInputError(f"Task entry {data!r} is missing {e.args[0]}") from e
    except TypeError as e:
        raise InvalidInputError(f"Task entry {data!r}: {e}") from e


def taskset_from_dict(data: Dict[str, Any], config: Optional[AnalysisConfig] = None) -> TaskSet:
    """Build a TaskSet from one entry of the `tasksets` mapping."""
    config = config or AnalysisConfig()
    if not isinstance(data, dict):
        raise InvalidInputError("Task set entry must be a mapping")
    policy = Policy.parse(data.get("policy", "RM"))
    tasks = [task_from_dict(t) for t in data.get("tasks") or []]
    if data.get("sort", False):
        return TaskSet.ordered(tasks, policy)
    return TaskSet(tasks=tuple(tasks), policy=policy, check_order=config.check_order)


def load_tasksets(path: str, config: Optional[AnalysisConfig] = None) -> Dict[str, TaskSet]:
    """Load the `tasksets` section of a YAML file, keyed by name in file order."""
    data = _load_yaml(path)
    if config is None:
        config = config_from_dict(data.get("analysis"))
    entries = data.get("tasksets") or {}
    if not isinstance(entries, dict):
        raise InvalidInputError(f"{path}: 'tasksets' must be a mapping")

    tasksets = {}
    for name, entry in entries.items():
        tasksets[str(name)] = taskset_from_dict(entry, config)
        logger.debug("Loaded task set %s with %d tasks", name, len(tasksets[str(name)]))
    return tasksets


def configure_logging(config: AnalysisConfig) -> None:
    """Set the level of the package logger; handlers are left to the caller."""
    logging.getLogger("rtfeas").setLevel(str(config.log_level).upper())
