"""Staging of documentation sources together with the shared resources.

Docs are authored in one place but rendered from a build-scoped copy that
also holds the CSS/JS bundle, so relative includes and asset links resolve
the same way for every render task.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from asciidoctor_conventions.asciidoctor.plugin import AbstractAsciidoctorTask
from asciidoctor_conventions.core.files import DuplicatesStrategy
from asciidoctor_conventions.errors import StagingError
from asciidoctor_conventions.host.project import Project
from asciidoctor_conventions.host.tasks import SyncTask, Task

__all__ = [
    "MergeDirective",
    "SYNC_TASK_PREFIX",
    "StagingPlan",
    "capitalize",
    "create_sync_documentation_source_task",
    "plan_staging",
    "staged_source_dir",
    "sync_task_name",
]

SYNC_TASK_PREFIX = "syncDocumentationSourceFor"


@dataclass(frozen=True)
class MergeDirective:
    """Copy ``source`` below ``into`` inside the staging tree."""

    source: Union[Task, Path]
    into: str
    duplicates: DuplicatesStrategy = DuplicatesStrategy.EXCLUDE


@dataclass(frozen=True)
class StagingPlan:
    """What one sync task copies, and where the render task should read."""

    source_root: Path
    destination: Path
    staged_source_dir: Path
    merges: tuple[MergeDirective, ...]


def capitalize(value: Optional[str]) -> Optional[str]:
    """Upper-case only the first character of ``value``."""

    if value is None:
        return None
    return value[:1].upper() + value[1:]


def sync_task_name(job_name: str) -> str:
    return f"{SYNC_TASK_PREFIX}{capitalize(job_name)}"


def staged_source_dir(project: Project, job: AbstractAsciidoctorTask) -> Path:
    return project.build_dir / "docs" / "src" / job.name


def plan_staging(
    project: Project,
    job: AbstractAsciidoctorTask,
    resources: Union[Task, Path],
) -> StagingPlan:
    """Plan the copy of ``job``'s source parent plus ``resources``.

    Resources land in the directory named after the original source dir, so
    they sit next to the documents; documentation files win on collision.
    """

    destination = staged_source_dir(project, job)
    source_name = job.source_dir.name
    return StagingPlan(
        source_root=job.source_dir.parent,
        destination=destination,
        staged_source_dir=destination / source_name,
        merges=(MergeDirective(source=resources, into=source_name),),
    )


def create_sync_documentation_source_task(
    project: Project,
    job: AbstractAsciidoctorTask,
    resources: Union[Task, Path],
) -> SyncTask:
    """Register the staging task and repoint ``job`` at the staged copy."""

    plan = plan_staging(project, job, resources)
    original = job.source_dir

    def require_source(_: Task) -> None:
        if not original.is_dir():
            raise StagingError(
                f"Documentation source directory not found: {original}"
            )

    def configure(task: SyncTask) -> None:
        task.into(plan.destination)
        task.from_(plan.source_root)
        for merge in plan.merges:
            task.from_(
                merge.source, into=merge.into, duplicates=merge.duplicates
            )
        task.do_first(require_source)

    sync = project.tasks.create(sync_task_name(job.name), SyncTask, configure)
    job.depends_on(sync)
    job.set_source_dir(project.relative_path(plan.staged_source_dir))
    return sync
