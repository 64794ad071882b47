"""Conventions applied to a project once the Asciidoctor plugin is present.

When the plugin is applied:

* a default artifact repository is registered if the project has none;
* all renderer warnings are made fatal;
* a single task resolves and unzips the documentation resources (CSS and
  JavaScript);
* every render task, HTML and PDF alike, depends on that task, receives the
  common attributes and the ``book`` doctype, loads the documentation
  extensions, resolves includes relative to each source file, renders from a
  staged copy of its sources merged with the resources, and copies the
  ``css`` and ``js`` assets into each backend output directory before it
  renders;
* HTML render tasks additionally receive the highlighting and stylesheet
  attributes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Callable, Mapping, Optional

from asciidoctor_conventions.asciidoctor.plugin import (
    ASCIIDOCTOR_PLUGIN_ID,
    AbstractAsciidoctorTask,
    AsciidoctorExtension,
)
from asciidoctor_conventions.host.project import Configuration, Project
from asciidoctor_conventions.host.tasks import SyncTask

from .attributes import DOCUMENT_OPTIONS, AttributeSet, compose_attributes
from .config import ConventionSettings
from .resources import create_unzip_documentation_resources_task
from .staging import create_sync_documentation_source_task

__all__ = [
    "ASSET_PATTERNS",
    "AsciidoctorConventionPlugin",
    "CONVENTIONS_PLUGIN_ID",
    "EXTENSIONS_CONFIGURATION",
    "JobConventions",
    "job_conventions",
]

CONVENTIONS_PLUGIN_ID = "asciidoctor-conventions"
EXTENSIONS_CONFIGURATION = "asciidoctorExtensions"
ASSET_PATTERNS = ("css/**", "js/**")


@dataclass(frozen=True)
class JobConventions:
    """The complete convention payload for one render task."""

    attributes: AttributeSet
    options: Mapping[str, object] = field(
        default_factory=lambda: dict(DOCUMENT_OPTIONS)
    )

    def apply_to(self, job: AbstractAsciidoctorTask) -> None:
        job.attributes(self.attributes)
        job.options(self.options)


def job_conventions(
    job: AbstractAsciidoctorTask, *, today: Optional[date] = None
) -> JobConventions:
    attributes = compose_attributes(html=job.is_html, today=today)
    return JobConventions(attributes=attributes)


class AsciidoctorConventionPlugin:
    """Apply the documentation conventions to a :class:`Project`."""

    plugin_id = CONVENTIONS_PLUGIN_ID

    def __init__(
        self,
        settings: Optional[ConventionSettings] = None,
        *,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.settings = settings or ConventionSettings()
        self._today = today

    def apply(self, project: Project) -> None:
        project.plugins.with_id(
            ASCIIDOCTOR_PLUGIN_ID, lambda _plugin: self._configure(project)
        )

    def _configure(self, project: Project) -> None:
        self._create_default_repository(project)
        self._make_all_warnings_fatal(project)
        unzip_resources = create_unzip_documentation_resources_task(
            project, self.settings.resources_coordinate
        )
        extensions = self._extensions_configuration(project)
        project.tasks.with_type(
            AbstractAsciidoctorTask,
            lambda job: self._configure_job(
                project, job, unzip_resources, extensions
            ),
        )

    def _create_default_repository(self, project: Project) -> None:
        if project.repositories.is_empty():
            project.repositories.maven(self.settings.default_repository)

    def _make_all_warnings_fatal(self, project: Project) -> None:
        project.extensions.get_by_type(AsciidoctorExtension).fatal_warnings(
            *self.settings.fatal_warnings
        )

    def _extensions_configuration(self, project: Project) -> Configuration:
        configuration = project.configurations.maybe_create(
            EXTENSIONS_CONFIGURATION
        )
        coordinates = self.settings.extension_coordinates
        configuration.default_dependencies(
            lambda deps: deps.extend(coordinates)
        )
        return configuration

    def _configure_job(
        self,
        project: Project,
        job: AbstractAsciidoctorTask,
        unzip_resources: SyncTask,
        extensions: Configuration,
    ) -> None:
        job.depends_on(unzip_resources)
        job.configurations(extensions)
        job_conventions(job, today=self._today()).apply_to(job)
        job.base_dir_follows_source_file()
        create_sync_documentation_source_task(project, job, unzip_resources)
        job.do_first(lambda task: _copy_assets(project, job))
        project.logger.debug(
            "Applied documentation conventions",
            extra={"task": job.name, "source_dir": job.source_dir},
        )


def _copy_assets(project: Project, job: AbstractAsciidoctorTask) -> None:
    for output_dir in job.backend_output_directories():
        copied = project.copy(
            job.source_dir, output_dir, includes=ASSET_PATTERNS
        )
        project.logger.info(
            "Copied documentation assets",
            extra={
                "task": job.name,
                "source_dir": job.source_dir,
                "output_dir": output_dir,
                "file_count": len(copied),
            },
        )
