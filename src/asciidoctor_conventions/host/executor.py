"""Sequential, dependency-ordered executor for project tasks."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from asciidoctor_conventions.errors import TaskGraphError

from .tasks import Task, TaskContainer

__all__ = [
    "BuildSummary",
    "TaskOutcome",
    "TaskStatus",
    "execution_plan",
    "run_tasks",
]


class TaskStatus(Enum):
    """Outcome status for a single task."""

    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class TaskOutcome:
    """Result of running (or declining to run) a single task."""

    task: str
    status: TaskStatus
    reason: Optional[str] = None
    error: Optional[Exception] = None


@dataclass(frozen=True)
class BuildSummary:
    """Aggregated results for one build invocation."""

    requested: tuple[str, ...]
    outcomes: tuple[TaskOutcome, ...]

    @property
    def success_count(self) -> int:
        return self._count(TaskStatus.SUCCESS)

    @property
    def failure_count(self) -> int:
        return self._count(TaskStatus.FAILED)

    @property
    def skipped_count(self) -> int:
        return self._count(TaskStatus.SKIPPED)

    @property
    def failures(self) -> tuple[TaskOutcome, ...]:
        return tuple(o for o in self.outcomes if o.status is TaskStatus.FAILED)

    @property
    def exit_code(self) -> int:
        return 1 if self.failure_count else 0

    def outcome(self, task: str) -> Optional[TaskOutcome]:
        for candidate in self.outcomes:
            if candidate.task == task:
                return candidate
        return None

    def _count(self, status: TaskStatus) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status is status)


def execution_plan(
    tasks: TaskContainer, requested: Sequence[str]
) -> tuple[Task, ...]:
    """Return ``requested`` and their dependencies, predecessors first.

    Raises :class:`TaskGraphError` for unknown names and dependency cycles.
    """

    ordered: list[Task] = []
    done: set[str] = set()
    active: list[str] = []

    def visit(name: str) -> None:
        if name in done:
            return
        if name in active:
            cycle = " -> ".join([*active[active.index(name):], name])
            raise TaskGraphError(f"Circular dependency between tasks: {cycle}")
        task = tasks.get(name)
        active.append(name)
        for dependency in task.dependency_names():
            visit(dependency)
        active.pop()
        done.add(name)
        ordered.append(task)

    for name in requested:
        visit(name)
    return tuple(ordered)


def run_tasks(
    tasks: TaskContainer,
    requested: Sequence[str],
    *,
    logger: logging.Logger,
) -> BuildSummary:
    """Run ``requested`` tasks, each at most once, in dependency order.

    A failing task marks every task depending on it as skipped; tasks in
    independent subtrees still run.
    """

    plan = execution_plan(tasks, requested)
    logger.info(
        "Starting build",
        extra={"requested": list(requested), "planned": [t.name for t in plan]},
    )

    outcomes: dict[str, TaskOutcome] = {}
    for task in plan:
        blocked = [
            dep
            for dep in task.dependency_names()
            if outcomes[dep].status is not TaskStatus.SUCCESS
        ]
        if blocked:
            outcomes[task.name] = TaskOutcome(
                task=task.name,
                status=TaskStatus.SKIPPED,
                reason="Dependency failed: {0}".format(", ".join(blocked)),
            )
            logger.info(
                "Skipped task",
                extra={"task": task.name, "blocked_by": blocked},
            )
            continue

        logger.debug("Running task", extra={"task": task.name})
        try:
            task.execute()
        except Exception as exc:
            outcomes[task.name] = TaskOutcome(
                task=task.name,
                status=TaskStatus.FAILED,
                reason=str(exc),
                error=exc,
            )
            logger.error(
                "Task failed",
                extra={"task": task.name, "reason": str(exc)},
            )
            continue
        outcomes[task.name] = TaskOutcome(task=task.name, status=TaskStatus.SUCCESS)

    summary = BuildSummary(
        requested=tuple(requested),
        outcomes=tuple(outcomes[task.name] for task in plan),
    )
    logger.info(
        "Completed build",
        extra={
            "success_count": summary.success_count,
            "failure_count": summary.failure_count,
            "skipped_count": summary.skipped_count,
        },
    )
    return summary
