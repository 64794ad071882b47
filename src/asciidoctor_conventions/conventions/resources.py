"""Resolution and extraction of the shared documentation resource bundle."""

from __future__ import annotations

from pathlib import Path

from asciidoctor_conventions.host.project import Project
from asciidoctor_conventions.host.tasks import SyncTask, ZipTree

__all__ = [
    "DEFAULT_RESOURCES_COORDINATE",
    "RESOURCES_CONFIGURATION",
    "UNZIP_TASK_NAME",
    "create_unzip_documentation_resources_task",
    "resources_dir",
]

UNZIP_TASK_NAME = "unzipDocumentationResources"
RESOURCES_CONFIGURATION = "documentationResources"
DEFAULT_RESOURCES_COORDINATE = (
    "io.spring.docresources:spring-doc-resources:0.1.3.RELEASE@zip"
)


def resources_dir(project: Project) -> Path:
    return project.build_dir / "docs" / "resources"


def create_unzip_documentation_resources_task(
    project: Project, coordinate: str = DEFAULT_RESOURCES_COORDINATE
) -> SyncTask:
    """Register the singleton task extracting the resource bundle.

    The bundle is resolved when the task runs, and the destination is
    cleared first so repeated builds never accumulate stale assets.
    """

    configuration = project.configurations.maybe_create(
        RESOURCES_CONFIGURATION
    )
    configuration.default_dependencies(lambda deps: deps.append(coordinate))

    def archives():
        return [ZipTree(archive) for archive in configuration.resolve()]

    def configure(task: SyncTask) -> None:
        task.into(resources_dir(project))
        task.from_(archives)

    return project.tasks.create(UNZIP_TASK_NAME, SyncTask, configure)
